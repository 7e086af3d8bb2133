"""Entity models for the battle simulator.

All data classes use Pydantic v2 BaseModel for validation and
serialization, so roster JSON documents validate straight into
:class:`Combatant` instances.
"""

from __future__ import annotations

import uuid
from enum import Enum

from pydantic import BaseModel, Field


class Faction(str, Enum):
    """The two opposing sides."""

    AUTOBOT = "Autobot"
    DECEPTICON = "Decepticon"

    @property
    def slug(self) -> str:
        """Lower-case name used in asset paths and data file names."""
        return self.value.lower()


# ---------------------------------------------------------------------------
# Ability
# ---------------------------------------------------------------------------

class Ability(BaseModel):
    """A named attack with a fixed damage value."""

    id: str
    name: str
    description: str = ""
    damage: int = 0
    cooldown: int = 0
    """Seconds between uses.  Carried for display only; battles never
    enforce it."""


FALLBACK_ABILITY = Ability(
    id="basic",
    name="Basic Attack",
    description="A basic attack",
    damage=1,
    cooldown=0,
)
"""Used for every attack of a combatant whose ability list is empty."""


# ---------------------------------------------------------------------------
# Combatant
# ---------------------------------------------------------------------------

class Combatant(BaseModel):
    """A single roster entry."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str
    faction: Faction
    icon: str = ""
    health: int
    """Current health.  Never clamped: a finishing blow can leave it
    negative, and only ``health <= 0`` counts as defeat."""

    wins: int = 0
    losses: int = 0
    abilities: list[Ability] = Field(default_factory=list)

    # -- queries -------------------------------------------------------------

    @property
    def is_defeated(self) -> bool:
        return self.health <= 0

    # -- mutation ------------------------------------------------------------

    def take_damage(self, amount: int) -> int:
        """Subtract *amount* from health and return the new health."""
        self.health -= amount
        return self.health

    def snapshot(self) -> Combatant:
        """Return an independent deep copy of this combatant."""
        return self.model_copy(deep=True)
