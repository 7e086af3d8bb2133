"""Value objects produced by a battle: verdicts, round snapshots, outcomes."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from transformer_battle.core.entities import Combatant

DRAW_MESSAGE = "Battle ended in a draw!"


class VerdictKind(str, Enum):
    AUTOBOT_WIN = "autobot_win"
    DECEPTICON_WIN = "decepticon_win"
    DRAW = "draw"


class Verdict(BaseModel):
    """Terminal classification of a completed battle."""

    model_config = ConfigDict(frozen=True)

    kind: VerdictKind
    message: str
    """``"{winner} defeats {loser}!"`` or :data:`DRAW_MESSAGE`."""

    winner_id: str | None = None
    loser_id: str | None = None

    @property
    def is_draw(self) -> bool:
        return self.kind is VerdictKind.DRAW

    @classmethod
    def draw(cls) -> Verdict:
        return cls(kind=VerdictKind.DRAW, message=DRAW_MESSAGE)

    @classmethod
    def victory(cls, kind: VerdictKind, winner: Combatant, loser: Combatant) -> Verdict:
        return cls(
            kind=kind,
            message=f"{winner.name} defeats {loser.name}!",
            winner_id=winner.id,
            loser_id=loser.id,
        )

    def __str__(self) -> str:
        return self.message


class RoundSnapshot(BaseModel):
    """State published to observers after the opening lines, after every
    round, and once more with the verdict attached."""

    model_config = ConfigDict(frozen=True)

    round: int
    """``0`` for the opening publication."""

    autobot_health: int
    decepticon_health: int
    logs: tuple[str, ...]
    verdict: Verdict | None = None

    @property
    def is_final(self) -> bool:
        return self.verdict is not None


class BattleOutcome(BaseModel):
    """Everything a finished (or rejected) battle reports back.

    A rejected battle (one side missing) has ``verdict is None``, no
    combatants and a single error line in ``logs``.
    """

    logs: list[str]
    verdict: Verdict | None = None
    autobot: Combatant | None = None
    decepticon: Combatant | None = None
    rounds: int = 0

    @property
    def winner(self) -> Combatant | None:
        if self.verdict is None:
            return None
        if self.verdict.kind is VerdictKind.AUTOBOT_WIN:
            return self.autobot
        if self.verdict.kind is VerdictKind.DECEPTICON_WIN:
            return self.decepticon
        return None

    @property
    def loser(self) -> Combatant | None:
        if self.verdict is None:
            return None
        if self.verdict.kind is VerdictKind.AUTOBOT_WIN:
            return self.decepticon
        if self.verdict.kind is VerdictKind.DECEPTICON_WIN:
            return self.autobot
        return None
