"""Tests for BattleSimulation and CombatResolver."""

from __future__ import annotations

import asyncio

import pytest

from transformer_battle.battle.cancellation import CancelToken
from transformer_battle.battle.models import DRAW_MESSAGE, RoundSnapshot, VerdictKind
from transformer_battle.battle.resolver import (
    MISSING_COMBATANT_MESSAGE,
    BattleSimulation,
    CombatResolver,
)
from transformer_battle.core.entities import Ability, Combatant, Faction
from transformer_battle.core.rng import BattleRNG
from transformer_battle.errors import BattleCancelled, StalemateError
from transformer_battle.store.results import ResultRecorder
from transformer_battle.store.roster import RosterStore


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_ability(damage: int, name: str) -> Ability:
    return Ability(id=f"{name.lower().replace(' ', '_')}", name=name, damage=damage)


def _make_autobot(health: int = 100, damages: list[int] | None = None, **kwargs) -> Combatant:
    abilities = [_make_ability(d, f"Blast {d}") for d in (damages or [])]
    return Combatant(
        id=kwargs.pop("id", "ab"),
        name=kwargs.pop("name", "Ironhide"),
        faction=Faction.AUTOBOT,
        health=health,
        abilities=abilities,
        **kwargs,
    )


def _make_decepticon(health: int = 100, damages: list[int] | None = None, **kwargs) -> Combatant:
    abilities = [_make_ability(d, f"Slash {d}") for d in (damages or [])]
    return Combatant(
        id=kwargs.pop("id", "dc"),
        name=kwargs.pop("name", "Soundwave"),
        faction=Faction.DECEPTICON,
        health=health,
        abilities=abilities,
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Single-round knockouts
# ---------------------------------------------------------------------------

class TestOpeningKnockout:
    def test_autobot_first_wins_without_retaliation(self, optimus, megatron, scripted_rng):
        resolver = CombatResolver(rng=scripted_rng(initiative=[True]), round_delay=0)
        outcome = resolver.resolve_sync(optimus, megatron)

        assert outcome.logs == [
            "Combat initiated between Optimus Prime and Megatron",
            "Optimus Prime health: 5",
            "Megatron health: 5",
            "Optimus Prime uses Plasma Cannon for 150 damage to Megatron",
            "Megatron health: -145",
            "Optimus Prime defeats Megatron!",
        ]
        assert outcome.verdict.kind is VerdictKind.AUTOBOT_WIN
        assert outcome.rounds == 1
        assert outcome.decepticon.health == -145
        assert outcome.autobot.health == 5

    def test_decepticon_first_wins(self, optimus, megatron, scripted_rng):
        resolver = CombatResolver(rng=scripted_rng(initiative=[False]), round_delay=0)
        outcome = resolver.resolve_sync(optimus, megatron)

        assert outcome.logs[3] == "Megatron uses Fusion Cannon for 160 damage to Optimus Prime"
        assert outcome.logs[4] == "Optimus Prime health: -155"
        assert outcome.verdict.message == "Megatron defeats Optimus Prime!"
        assert outcome.verdict.kind is VerdictKind.DECEPTICON_WIN

    def test_counters_increment_on_copies_only(self, optimus, megatron, scripted_rng):
        resolver = CombatResolver(rng=scripted_rng(initiative=[True]), round_delay=0)
        outcome = resolver.resolve_sync(optimus, megatron)

        assert outcome.winner.wins == 1 and outcome.winner.losses == 0
        assert outcome.loser.losses == 1 and outcome.loser.wins == 0
        # Originals untouched
        assert optimus.health == 5 and optimus.wins == 0
        assert megatron.health == 5 and megatron.losses == 0


# ---------------------------------------------------------------------------
# Multi-round accounting
# ---------------------------------------------------------------------------

class TestRoundAccounting:
    def test_health_tracks_cumulative_damage(self, scripted_rng):
        autobot = _make_autobot(health=100, damages=[30])
        decepticon = _make_decepticon(health=100, damages=[20])
        snapshots: list[RoundSnapshot] = []

        resolver = CombatResolver(rng=scripted_rng(initiative=[True]), round_delay=0)
        outcome = resolver.resolve_sync(autobot, decepticon, on_round=snapshots.append)

        round_states = [(s.autobot_health, s.decepticon_health) for s in snapshots if not s.is_final]
        assert round_states == [(100, 100), (80, 70), (60, 40), (40, 10), (40, -20)]
        assert outcome.rounds == 4
        assert outcome.verdict.message == "Ironhide defeats Soundwave!"

    def test_initiative_drawn_every_round(self, scripted_rng):
        autobot = _make_autobot(health=50, damages=[10])
        decepticon = _make_decepticon(health=50, damages=[10])
        rng = scripted_rng(initiative=[True, False, True, False, True, False, True, False, True])

        outcome = CombatResolver(rng=rng, round_delay=0).resolve_sync(autobot, decepticon)

        assert rng.bool_calls == outcome.rounds
        attack_lines = [line for line in outcome.logs if " uses " in line]
        assert attack_lines[0].startswith("Ironhide uses")
        assert attack_lines[2].startswith("Soundwave uses")

    def test_retaliation_uses_ability_drawn_for_the_round(self, scripted_rng):
        autobot = _make_autobot(health=100, damages=[10, 50])
        decepticon = _make_decepticon(health=100, damages=[5, 7])
        # Round 1: autobot picks index 1 (50), decepticon picks index 1 (7)
        rng = scripted_rng(initiative=[False], choices=[1, 1])
        snapshots: list[RoundSnapshot] = []
        sim = BattleSimulation(autobot, decepticon, rng)
        snapshots.append(sim.play_round())

        assert snapshots[0].autobot_health == 93
        assert snapshots[0].decepticon_health == 50
        assert snapshots[0].logs[-2] == "Ironhide uses Blast 50 for 50 damage to Soundwave"
        assert rng.choice_calls == 2

    def test_defeated_first_target_does_not_retaliate(self, scripted_rng):
        autobot = _make_autobot(health=10, damages=[100])
        decepticon = _make_decepticon(health=10, damages=[100])

        outcome = CombatResolver(rng=scripted_rng(initiative=[True]), round_delay=0).resolve_sync(
            autobot, decepticon,
        )

        assert not any(line.startswith("Soundwave uses") for line in outcome.logs)
        assert outcome.autobot.health == 10


# ---------------------------------------------------------------------------
# Fallback ability
# ---------------------------------------------------------------------------

class TestFallbackAbility:
    def test_empty_lists_use_basic_attack_every_round(self, scripted_rng):
        autobot = _make_autobot(health=3)
        decepticon = _make_decepticon(health=3)
        rng = scripted_rng(initiative=[True])

        outcome = CombatResolver(rng=rng, round_delay=0).resolve_sync(autobot, decepticon)

        attack_lines = [line for line in outcome.logs if " uses " in line]
        assert attack_lines
        assert all("uses Basic Attack for 1 damage" in line for line in attack_lines)
        assert rng.choice_calls == 0
        assert outcome.rounds == 3
        assert outcome.verdict.kind is VerdictKind.AUTOBOT_WIN

    def test_one_empty_side_draws_only_for_the_other(self, scripted_rng):
        autobot = _make_autobot(health=2, damages=[1])
        decepticon = _make_decepticon(health=2)
        rng = scripted_rng(initiative=[True])

        outcome = CombatResolver(rng=rng, round_delay=0).resolve_sync(autobot, decepticon)

        assert rng.choice_calls == outcome.rounds
        assert "Soundwave uses Basic Attack for 1 damage to Ironhide" in outcome.logs


# ---------------------------------------------------------------------------
# Verdicts
# ---------------------------------------------------------------------------

class TestVerdicts:
    def test_both_down_at_start_is_a_draw(self, scripted_rng):
        recorder = ResultRecorder()
        autobot = _make_autobot(health=0, damages=[10])
        decepticon = _make_decepticon(health=-5, damages=[10])
        roster = RosterStore([autobot], [decepticon])

        resolver = CombatResolver(
            rng=scripted_rng(), recorder=recorder, roster=roster, round_delay=0,
        )
        outcome = resolver.resolve_sync(autobot, decepticon)

        assert outcome.verdict.is_draw
        assert outcome.logs[-1] == DRAW_MESSAGE
        assert outcome.rounds == 0
        assert outcome.winner is None and outcome.loser is None
        assert (outcome.autobot.wins, outcome.autobot.losses) == (0, 0)
        assert (outcome.decepticon.wins, outcome.decepticon.losses) == (0, 0)
        assert roster.get("ab").wins == 0 and roster.get("dc").losses == 0
        assert [e.result for e in recorder.results] == [DRAW_MESSAGE]

    def test_autobot_down_at_start_loses(self, scripted_rng):
        outcome = CombatResolver(rng=scripted_rng(), round_delay=0).resolve_sync(
            _make_autobot(health=0), _make_decepticon(health=5),
        )

        assert outcome.verdict.kind is VerdictKind.DECEPTICON_WIN
        assert outcome.rounds == 0

    @pytest.mark.parametrize("seed", range(25))
    def test_seeded_battles_terminate_with_one_increment_pair(self, seed):
        autobot = _make_autobot(health=400, damages=[40, 60, 90])
        decepticon = _make_decepticon(health=400, damages=[50, 70, 80])

        outcome = CombatResolver(rng=BattleRNG(seed), round_delay=0).resolve_sync(
            autobot, decepticon,
        )

        assert outcome.verdict.kind in (VerdictKind.AUTOBOT_WIN, VerdictKind.DECEPTICON_WIN)
        total_wins = outcome.autobot.wins + outcome.decepticon.wins
        total_losses = outcome.autobot.losses + outcome.decepticon.losses
        assert (total_wins, total_losses) == (1, 1)
        assert outcome.winner.health > 0
        assert outcome.loser.health <= 0


# ---------------------------------------------------------------------------
# Missing combatants
# ---------------------------------------------------------------------------

class TestMissingCombatant:
    def test_missing_side_is_rejected_without_mutation(self, megatron, scripted_rng):
        recorder = ResultRecorder()
        roster = RosterStore([], [megatron])
        snapshots: list[RoundSnapshot] = []
        completed: list[str] = []

        resolver = CombatResolver(rng=scripted_rng(), recorder=recorder, roster=roster)
        outcome = resolver.resolve_sync(
            None, megatron, on_round=snapshots.append, on_complete=completed.append,
        )

        assert outcome.logs == [MISSING_COMBATANT_MESSAGE]
        assert outcome.verdict is None
        assert len(recorder) == 0
        assert completed == []
        assert roster.get("decepticon_001").losses == 0
        assert snapshots[0].logs == (MISSING_COMBATANT_MESSAGE,)

    def test_async_rejection(self, optimus):
        outcome = asyncio.run(CombatResolver(round_delay=0).resolve(optimus, None))

        assert outcome.logs == [MISSING_COMBATANT_MESSAGE]


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------

class TestReporting:
    def test_results_roster_and_callback(self, optimus, megatron, scripted_rng):
        recorder = ResultRecorder()
        roster = RosterStore([optimus], [megatron])
        completed: list[str] = []

        resolver = CombatResolver(
            rng=scripted_rng(initiative=[True]), recorder=recorder, roster=roster, round_delay=0,
        )
        asyncio.run(resolver.resolve(optimus, megatron, on_complete=completed.append))

        assert completed == ["Optimus Prime defeats Megatron!"]
        assert [e.result for e in recorder.results] == ["Optimus Prime defeats Megatron!"]
        assert roster.get("autobot_001").wins == 1
        assert roster.get("autobot_001").losses == 0
        assert roster.get("decepticon_001").losses == 1
        # Stored health is never changed by a battle
        assert roster.get("decepticon_001").health == 5

    def test_snapshots_published_in_order(self, optimus, megatron, scripted_rng):
        snapshots: list[RoundSnapshot] = []
        resolver = CombatResolver(rng=scripted_rng(initiative=[True]), round_delay=0)

        asyncio.run(resolver.resolve(optimus, megatron, on_round=snapshots.append))

        assert [s.round for s in snapshots] == [0, 1, 1]
        assert len(snapshots[0].logs) == 3
        assert snapshots[1].decepticon_health == -145
        assert not snapshots[1].is_final
        assert snapshots[-1].is_final
        assert snapshots[-1].logs[-1] == "Optimus Prime defeats Megatron!"

    def test_sync_and_async_agree(self):
        autobot = _make_autobot(health=300, damages=[40, 60])
        decepticon = _make_decepticon(health=300, damages=[50, 55])

        sync_outcome = CombatResolver(rng=BattleRNG(9), round_delay=0).resolve_sync(autobot, decepticon)
        async_outcome = asyncio.run(
            CombatResolver(rng=BattleRNG(9), round_delay=0).resolve(autobot, decepticon)
        )

        assert sync_outcome.logs == async_outcome.logs


# ---------------------------------------------------------------------------
# Cancellation and round limits
# ---------------------------------------------------------------------------

class TestCancellation:
    def test_cancel_mid_battle_records_nothing(self, scripted_rng):
        autobot = _make_autobot(health=10, damages=[0])
        decepticon = _make_decepticon(health=10, damages=[0])
        recorder = ResultRecorder()
        roster = RosterStore([autobot], [decepticon])
        token = CancelToken()
        seen: list[int] = []

        def on_round(snapshot: RoundSnapshot) -> None:
            seen.append(snapshot.round)
            if snapshot.round == 3:
                token.cancel("test")

        resolver = CombatResolver(
            rng=scripted_rng(), recorder=recorder, roster=roster, round_delay=0,
        )
        with pytest.raises(BattleCancelled):
            asyncio.run(resolver.resolve(autobot, decepticon, on_round=on_round, cancel_token=token))

        assert seen == [0, 1, 2, 3]
        assert len(recorder) == 0
        assert roster.get("ab").wins == 0 and roster.get("dc").wins == 0

    def test_max_rounds_stops_zero_damage_battle(self, scripted_rng):
        autobot = _make_autobot(health=10, damages=[0])
        decepticon = _make_decepticon(health=10, damages=[0])
        recorder = ResultRecorder()

        resolver = CombatResolver(
            rng=scripted_rng(), recorder=recorder, round_delay=0, max_rounds=5,
        )
        with pytest.raises(StalemateError, match="after 5 rounds"):
            resolver.resolve_sync(autobot, decepticon)

        assert len(recorder) == 0


class TestBattleSimulationGuards:
    def test_play_round_after_end_raises(self, optimus, megatron, scripted_rng):
        sim = BattleSimulation(optimus, megatron, scripted_rng())
        sim.play_round()

        with pytest.raises(RuntimeError):
            sim.play_round()

    def test_conclude_before_end_raises(self, scripted_rng):
        sim = BattleSimulation(_make_autobot(), _make_decepticon(), scripted_rng())

        with pytest.raises(RuntimeError):
            sim.conclude()

    def test_conclude_is_idempotent(self, optimus, megatron, scripted_rng):
        sim = BattleSimulation(optimus, megatron, scripted_rng())
        sim.play_round()
        first = sim.conclude()
        second = sim.conclude()

        assert first == second
        assert sim.autobot.wins == 1
        assert sim.logs.count("Optimus Prime defeats Megatron!") == 1
