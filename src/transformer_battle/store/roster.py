"""In-memory roster of both factions.

The store is the only place stored combatants change.  Battles work on
copies and report back through :meth:`RosterStore.update`, which is
also what :meth:`RosterStore.apply_verdict` funnels through.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable

from transformer_battle.core.entities import Combatant, Faction

if TYPE_CHECKING:
    from transformer_battle.battle.models import BattleOutcome

logger = logging.getLogger(__name__)


class RosterStore:
    """Two ordered collections of combatants, one per faction."""

    def __init__(
        self,
        autobots: Iterable[Combatant] = (),
        decepticons: Iterable[Combatant] = (),
    ) -> None:
        self._autobots: list[Combatant] = list(autobots)
        self._decepticons: list[Combatant] = list(decepticons)

    # -- queries -------------------------------------------------------------

    @property
    def autobots(self) -> tuple[Combatant, ...]:
        return tuple(self._autobots)

    @property
    def decepticons(self) -> tuple[Combatant, ...]:
        return tuple(self._decepticons)

    def by_faction(self, faction: Faction) -> tuple[Combatant, ...]:
        if faction is Faction.AUTOBOT:
            return self.autobots
        return self.decepticons

    def get(self, combatant_id: str) -> Combatant | None:
        """Return the stored combatant with *combatant_id*, or ``None``."""
        for combatant in (*self._autobots, *self._decepticons):
            if combatant.id == combatant_id:
                return combatant
        return None

    def find(self, key: str) -> Combatant | None:
        """Look up by id first, then by case-insensitive name."""
        found = self.get(key)
        if found is not None:
            return found
        lowered = key.strip().lower()
        for combatant in (*self._autobots, *self._decepticons):
            if combatant.name.lower() == lowered:
                return combatant
        return None

    # -- mutation ------------------------------------------------------------

    def add(self, combatant: Combatant) -> None:
        """Append *combatant* to its faction's collection."""
        if combatant.faction is Faction.AUTOBOT:
            self._autobots.append(combatant)
        else:
            self._decepticons.append(combatant)
        logger.info("Added %s %s (%s)", combatant.faction.value, combatant.name, combatant.id)

    def update(self, combatant_id: str, **fields: Any) -> int:
        """Merge *fields* into every entry with *combatant_id*.

        Both collections are searched.  Returns the number of entries
        replaced; ``0`` means nothing matched and nothing changed.
        """
        matched = 0
        for collection in (self._autobots, self._decepticons):
            for i, combatant in enumerate(collection):
                if combatant.id == combatant_id:
                    collection[i] = combatant.model_copy(update=fields)
                    matched += 1
        if matched == 0:
            logger.debug("update(%s): no matching combatant", combatant_id)
        return matched

    def apply_verdict(self, outcome: BattleOutcome) -> None:
        """Copy the win/loss counters of a decisive battle into the store."""
        winner, loser = outcome.winner, outcome.loser
        if winner is None or loser is None:
            return
        self.update(winner.id, wins=winner.wins)
        self.update(loser.id, losses=loser.losses)
