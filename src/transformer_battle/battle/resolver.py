"""Combat resolution -- runs a one-on-one battle to a verdict.

Provides two classes:

- **BattleSimulation**: the round-by-round state machine over copies of
  the two combatants.  Pure and synchronous; it only needs a random
  source.
- **CombatResolver**: drives a simulation, publishes each round to an
  observer, pauses between rounds, and on completion records the verdict
  and pushes the win/loss counters back into the roster.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from transformer_battle.battle.cancellation import CancelToken, cancellable_sleep
from transformer_battle.battle.models import (
    BattleOutcome,
    RoundSnapshot,
    Verdict,
    VerdictKind,
)
from transformer_battle.core.entities import FALLBACK_ABILITY, Ability, Combatant
from transformer_battle.core.rng import BattleRNG, RandomSource
from transformer_battle.errors import StalemateError

if TYPE_CHECKING:
    from transformer_battle.store.results import ResultRecorder
    from transformer_battle.store.roster import RosterStore

logger = logging.getLogger(__name__)

MISSING_COMBATANT_MESSAGE = "Error: Both Autobot and Decepticon must be selected."

RoundObserver = Callable[[RoundSnapshot], None]
CompletionCallback = Callable[[str], None]


# =====================================================================
# BattleSimulation
# =====================================================================

class BattleSimulation:
    """One battle between deep copies of *autobot* and *decepticon*.

    The stored originals are never touched.  Call :meth:`play_round`
    while :attr:`is_over` is false, then :meth:`conclude` once.
    """

    def __init__(
        self,
        autobot: Combatant,
        decepticon: Combatant,
        rng: RandomSource,
    ) -> None:
        self.autobot = autobot.snapshot()
        self.decepticon = decepticon.snapshot()
        self.rng = rng
        self.round = 0
        self.verdict: Verdict | None = None
        self.logs: list[str] = [
            f"Combat initiated between {self.autobot.name} and {self.decepticon.name}",
            f"{self.autobot.name} health: {self.autobot.health}",
            f"{self.decepticon.name} health: {self.decepticon.health}",
        ]

    # -- queries -------------------------------------------------------------

    @property
    def is_over(self) -> bool:
        return self.autobot.is_defeated or self.decepticon.is_defeated

    def snapshot(self) -> RoundSnapshot:
        return RoundSnapshot(
            round=self.round,
            autobot_health=self.autobot.health,
            decepticon_health=self.decepticon.health,
            logs=tuple(self.logs),
            verdict=self.verdict,
        )

    # -- rounds --------------------------------------------------------------

    def play_round(self) -> RoundSnapshot:
        """Resolve one exchange and return the resulting state.

        Draw order: initiative, then the Autobot's ability, then the
        Decepticon's.  The retaliator uses the ability drawn for it at
        the start of the round.
        """
        if self.is_over:
            raise RuntimeError("play_round() called on a finished battle")

        self.round += 1
        autobot_first = self.rng.random_bool()
        autobot_ability = self._pick_ability(self.autobot)
        decepticon_ability = self._pick_ability(self.decepticon)

        if autobot_first:
            first, first_ability = self.autobot, autobot_ability
            second, second_ability = self.decepticon, decepticon_ability
        else:
            first, first_ability = self.decepticon, decepticon_ability
            second, second_ability = self.autobot, autobot_ability

        self._attack(first, second, first_ability)
        if not second.is_defeated:
            self._attack(second, first, second_ability)

        logger.debug(
            "Round %d: %s %d, %s %d",
            self.round,
            self.autobot.name, self.autobot.health,
            self.decepticon.name, self.decepticon.health,
        )
        return self.snapshot()

    def conclude(self) -> Verdict:
        """Classify the finished battle and bump the copies' counters.

        Both sides down is a draw and touches no counters.
        """
        if not self.is_over:
            raise RuntimeError("conclude() called before the battle ended")
        if self.verdict is not None:
            return self.verdict

        autobot, decepticon = self.autobot, self.decepticon
        if autobot.is_defeated and decepticon.is_defeated:
            verdict = Verdict.draw()
        elif autobot.is_defeated:
            decepticon.wins += 1
            autobot.losses += 1
            verdict = Verdict.victory(VerdictKind.DECEPTICON_WIN, decepticon, autobot)
        else:
            autobot.wins += 1
            decepticon.losses += 1
            verdict = Verdict.victory(VerdictKind.AUTOBOT_WIN, autobot, decepticon)

        self.verdict = verdict
        self.logs.append(verdict.message)
        return verdict

    def outcome(self) -> BattleOutcome:
        return BattleOutcome(
            logs=list(self.logs),
            verdict=self.verdict,
            autobot=self.autobot.snapshot(),
            decepticon=self.decepticon.snapshot(),
            rounds=self.round,
        )

    # -- helpers -------------------------------------------------------------

    def _pick_ability(self, combatant: Combatant) -> Ability:
        if not combatant.abilities:
            return FALLBACK_ABILITY
        return self.rng.random_choice(combatant.abilities)

    def _attack(self, attacker: Combatant, defender: Combatant, ability: Ability) -> None:
        self.logs.append(
            f"{attacker.name} uses {ability.name} for {ability.damage} damage to {defender.name}"
        )
        defender.take_damage(ability.damage)
        self.logs.append(f"{defender.name} health: {defender.health}")


# =====================================================================
# CombatResolver
# =====================================================================

class CombatResolver:
    """Runs battles and reports their results to the session stores.

    Parameters
    ----------
    rng:
        Source of initiative and ability draws.  Defaults to a freshly
        seeded :class:`BattleRNG`.
    recorder:
        Receives the verdict string of every completed battle.
    roster:
        Receives the win/loss counters of every decisive battle.
    round_delay:
        Seconds to pause after each round.  Pacing only; ``0`` disables.
    max_rounds:
        Optional round limit.  Exceeding it raises
        :class:`~transformer_battle.errors.StalemateError`.  ``None`` lets
        two zero-damage combatants fight forever.
    """

    def __init__(
        self,
        rng: RandomSource | None = None,
        recorder: ResultRecorder | None = None,
        roster: RosterStore | None = None,
        round_delay: float = 1.0,
        max_rounds: int | None = None,
    ) -> None:
        self.rng = rng if rng is not None else BattleRNG()
        self.recorder = recorder
        self.roster = roster
        self.round_delay = round_delay
        self.max_rounds = max_rounds

    async def resolve(
        self,
        autobot: Combatant | None,
        decepticon: Combatant | None,
        *,
        on_round: RoundObserver | None = None,
        on_complete: CompletionCallback | None = None,
        cancel_token: CancelToken | None = None,
    ) -> BattleOutcome:
        """Fight *autobot* against *decepticon* with pacing.

        *on_round* sees the opening lines, every round, and the final
        state with the verdict.  If *cancel_token* fires during a pause
        the battle stops with
        :class:`~transformer_battle.errors.BattleCancelled` and nothing is
        recorded.
        """
        if autobot is None or decepticon is None:
            return self._reject(on_round)

        sim = BattleSimulation(autobot, decepticon, self.rng)
        logger.info("Battle started: %s vs %s", sim.autobot.name, sim.decepticon.name)
        self._publish(on_round, sim.snapshot())

        while not sim.is_over:
            self._check_round_limit(sim)
            self._publish(on_round, sim.play_round())
            await cancellable_sleep(self.round_delay, cancel_token)

        return self._finish(sim, on_round, on_complete)

    def resolve_sync(
        self,
        autobot: Combatant | None,
        decepticon: Combatant | None,
        *,
        on_round: RoundObserver | None = None,
        on_complete: CompletionCallback | None = None,
    ) -> BattleOutcome:
        """Headless variant of :meth:`resolve`: same rounds, no pauses."""
        if autobot is None or decepticon is None:
            return self._reject(on_round)

        sim = BattleSimulation(autobot, decepticon, self.rng)
        logger.info("Battle started: %s vs %s", sim.autobot.name, sim.decepticon.name)
        self._publish(on_round, sim.snapshot())

        while not sim.is_over:
            self._check_round_limit(sim)
            self._publish(on_round, sim.play_round())

        return self._finish(sim, on_round, on_complete)

    # -- internals -----------------------------------------------------------

    def _reject(self, on_round: RoundObserver | None) -> BattleOutcome:
        logger.error("Both Autobot and Decepticon must be selected for combat.")
        outcome = BattleOutcome(logs=[MISSING_COMBATANT_MESSAGE])
        self._publish(
            on_round,
            RoundSnapshot(
                round=0,
                autobot_health=0,
                decepticon_health=0,
                logs=(MISSING_COMBATANT_MESSAGE,),
            ),
        )
        return outcome

    def _check_round_limit(self, sim: BattleSimulation) -> None:
        if self.max_rounds is not None and sim.round >= self.max_rounds:
            raise StalemateError(
                f"No verdict after {sim.round} rounds between "
                f"{sim.autobot.name} and {sim.decepticon.name}"
            )

    def _finish(
        self,
        sim: BattleSimulation,
        on_round: RoundObserver | None,
        on_complete: CompletionCallback | None,
    ) -> BattleOutcome:
        verdict = sim.conclude()
        logger.info("Battle over after %d rounds: %s", sim.round, verdict.message)
        self._publish(on_round, sim.snapshot())

        outcome = sim.outcome()
        if self.recorder is not None:
            self.recorder.record(verdict.message)
        if self.roster is not None:
            self.roster.apply_verdict(outcome)
        if on_complete is not None:
            on_complete(verdict.message)
        return outcome

    @staticmethod
    def _publish(on_round: RoundObserver | None, snapshot: RoundSnapshot) -> None:
        if on_round is not None:
            on_round(snapshot)
