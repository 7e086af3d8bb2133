"""Core primitives for the battle simulator."""

from transformer_battle.core.entities import (
    FALLBACK_ABILITY,
    Ability,
    Combatant,
    Faction,
)
from transformer_battle.core.rng import BattleRNG, RandomSource

__all__ = [
    # rng
    "BattleRNG",
    "RandomSource",
    # entities
    "Ability",
    "Combatant",
    "Faction",
    "FALLBACK_ABILITY",
]
