"""Combatant creation -- validates a creation request and builds the entry.

Validation failures raise :class:`CombatantValidationError` whose message
is the text shown next to the form.  Checks run in the order the form
reports them: ability count first, then the name, then health.
"""

from __future__ import annotations

import uuid

from pydantic import BaseModel, Field

from transformer_battle.content.catalog import AbilityCatalog
from transformer_battle.core.entities import Ability, Combatant, Faction
from transformer_battle.errors import CombatantValidationError

MIN_ABILITIES = 3
MAX_ABILITIES = 5
MIN_HEALTH = 100
HEALTH_STEP = 10


def default_icon(faction: Faction) -> str:
    return f"/app/assets/default-{faction.slug}.png"


class CombatantForm(BaseModel):
    """Raw values collected by the creation form."""

    name: str = ""
    faction: Faction
    icon: str = ""
    health: int = MIN_HEALTH
    abilities: list[Ability] = Field(default_factory=list)

    def toggle_ability(self, ability: Ability) -> None:
        """Add *ability* if absent, remove it if present.

        Refuses to go above the maximum, and refuses to drop below the
        minimum once it has been reached, mirroring the checkbox list.
        """
        selected = [a for a in self.abilities if a.id != ability.id]
        if len(selected) == len(self.abilities):
            selected.append(ability)

        if len(selected) > MAX_ABILITIES:
            raise CombatantValidationError(f"Maximum {MAX_ABILITIES} abilities allowed")
        if len(selected) < MIN_ABILITIES and len(selected) < len(self.abilities):
            raise CombatantValidationError(f"Minimum {MIN_ABILITIES} abilities required")
        self.abilities = selected

    def validate_form(self, catalog: AbilityCatalog | None = None) -> None:
        if not MIN_ABILITIES <= len(self.abilities) <= MAX_ABILITIES:
            raise CombatantValidationError(
                f"Please select {MIN_ABILITIES} to {MAX_ABILITIES} abilities"
            )
        if not self.name.strip():
            raise CombatantValidationError("Name is required")
        if self.health < MIN_HEALTH or self.health % HEALTH_STEP:
            raise CombatantValidationError(
                f"Health must be at least {MIN_HEALTH} in steps of {HEALTH_STEP}"
            )
        if catalog is not None:
            for ability in self.abilities:
                if ability.id not in catalog:
                    raise CombatantValidationError(f"Unknown ability {ability.id!r}")

    def build(self, catalog: AbilityCatalog | None = None) -> Combatant:
        """Validate and return a brand-new combatant with zeroed counters."""
        self.validate_form(catalog)
        return Combatant(
            id=str(uuid.uuid4()),
            name=self.name,
            faction=self.faction,
            icon=self.icon or default_icon(self.faction),
            health=self.health,
            wins=0,
            losses=0,
            abilities=list(self.abilities),
        )


def create_combatant(
    name: str,
    faction: Faction | str,
    abilities: list[Ability] | list[str],
    health: int = MIN_HEALTH,
    icon: str = "",
    catalog: AbilityCatalog | None = None,
) -> Combatant:
    """One-shot creation from plain values.

    *abilities* may be ability objects or catalog ids (ids need a
    *catalog*).
    """
    picked: list[Ability] = []
    for entry in abilities:
        if isinstance(entry, Ability):
            picked.append(entry)
            continue
        if catalog is None:
            raise CombatantValidationError("Ability ids need a catalog to resolve")
        ability = catalog.get(entry)
        if ability is None:
            raise CombatantValidationError(f"Unknown ability {entry!r}")
        picked.append(ability)

    form = CombatantForm(
        name=name,
        faction=Faction(faction),
        icon=icon,
        health=health,
        abilities=picked,
    )
    return form.build(catalog)
