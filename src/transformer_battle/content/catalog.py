"""Ability catalog -- the fixed list of abilities a new combatant can pick.

The catalog ships with the package in ``data/abilities.json``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator

from transformer_battle.core.entities import Ability

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
_DEFAULT_ABILITIES_PATH = DATA_DIR / "abilities.json"


class AbilityCatalog:
    """Ordered, id-indexed collection of :class:`Ability` definitions.

    Usage::

        catalog = AbilityCatalog.load()
        cannon = catalog.get("ability_001")
        picks = catalog.resolve(["ability_001", "ability_002", "ability_003"])
    """

    def __init__(self, abilities: list[Ability] | None = None) -> None:
        self._abilities: dict[str, Ability] = {}
        for ability in abilities or []:
            self.add(ability)

    @classmethod
    def load(cls, path: Path | None = None) -> AbilityCatalog:
        """Load the catalog from *path* (defaults to the bundled file)."""
        source = path or _DEFAULT_ABILITIES_PATH
        with open(source) as f:
            raw: list[dict[str, Any]] = json.load(f)
        return cls([Ability.model_validate(entry) for entry in raw])

    def add(self, ability: Ability) -> None:
        if ability.id in self._abilities:
            raise ValueError(f"Duplicate ability id {ability.id!r}")
        self._abilities[ability.id] = ability

    def get(self, ability_id: str) -> Ability | None:
        return self._abilities.get(ability_id)

    def resolve(self, ability_ids: list[str]) -> list[Ability]:
        """Map ids to abilities, preserving order.

        Raises ``KeyError`` naming the first unknown id.
        """
        resolved: list[Ability] = []
        for ability_id in ability_ids:
            ability = self._abilities.get(ability_id)
            if ability is None:
                raise KeyError(ability_id)
            resolved.append(ability)
        return resolved

    def __contains__(self, ability_id: object) -> bool:
        return ability_id in self._abilities

    def __iter__(self) -> Iterator[Ability]:
        return iter(self._abilities.values())

    def __len__(self) -> int:
        return len(self._abilities)
