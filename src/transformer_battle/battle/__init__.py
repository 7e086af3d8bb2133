"""Battle resolution: the round loop, its results, and cancellation."""

from transformer_battle.battle.cancellation import CancelToken, cancellable_sleep
from transformer_battle.battle.models import (
    DRAW_MESSAGE,
    BattleOutcome,
    RoundSnapshot,
    Verdict,
    VerdictKind,
)
from transformer_battle.battle.resolver import (
    MISSING_COMBATANT_MESSAGE,
    BattleSimulation,
    CombatResolver,
)

__all__ = [
    "BattleOutcome",
    "BattleSimulation",
    "CancelToken",
    "CombatResolver",
    "DRAW_MESSAGE",
    "MISSING_COMBATANT_MESSAGE",
    "RoundSnapshot",
    "Verdict",
    "VerdictKind",
    "cancellable_sleep",
]
