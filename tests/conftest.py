"""Shared fixtures for battle tests."""

from __future__ import annotations

from typing import Callable, Sequence, TypeVar

import pytest

from transformer_battle.core.entities import Ability, Combatant, Faction

T = TypeVar("T")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("BASE_URL", "ROUND_DELAY", "REQUEST_TIMEOUT", "SEED", "MAX_ROUNDS"):
        monkeypatch.delenv(f"TRANSFORMER_BATTLE_{name}", raising=False)


class ScriptedRNG:
    """Random source that replays fixed draws.

    ``initiative`` is consumed one value per round (``True`` = Autobot
    first); when it runs out the last value repeats.  ``choices`` gives
    the index picked by each ``random_choice`` call, defaulting to 0.
    """

    def __init__(
        self,
        initiative: Sequence[bool] = (True,),
        choices: Sequence[int] = (),
    ) -> None:
        self._initiative = list(initiative)
        self._choices = list(choices)
        self.bool_calls = 0
        self.choice_calls = 0

    def random_bool(self) -> bool:
        self.bool_calls += 1
        if len(self._initiative) > 1:
            return self._initiative.pop(0)
        return self._initiative[0]

    def random_choice(self, seq: Sequence[T]) -> T:
        self.choice_calls += 1
        index = self._choices.pop(0) if self._choices else 0
        return seq[index]


@pytest.fixture()
def scripted_rng() -> Callable[..., ScriptedRNG]:
    return ScriptedRNG


def make_ability(damage: int, name: str = "Strike", ability_id: str | None = None) -> Ability:
    return Ability(
        id=ability_id or f"{name.lower().replace(' ', '_')}_{damage}",
        name=name,
        description=f"{name} for {damage}",
        damage=damage,
        cooldown=1,
    )


@pytest.fixture()
def optimus() -> Combatant:
    """Matches the classic fixture: 5 health, a single 150-damage cannon."""
    return Combatant(
        id="autobot_001",
        name="Optimus Prime",
        faction=Faction.AUTOBOT,
        health=5,
        abilities=[make_ability(150, "Plasma Cannon", "ability_001")],
    )


@pytest.fixture()
def megatron() -> Combatant:
    return Combatant(
        id="decepticon_001",
        name="Megatron",
        faction=Faction.DECEPTICON,
        icon="/custom-decepticon.png",
        health=5,
        abilities=[make_ability(160, "Fusion Cannon", "ability_101")],
    )
