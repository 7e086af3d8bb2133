"""Plain-text rendering of combatants, rosters and results."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from transformer_battle.core.entities import Combatant
from transformer_battle.store.results import ResultEntry


def format_combatant(combatant: Combatant | None, placeholder: str = "(none)") -> str:
    """``Name  Health: N  Abilities: A, B, C``"""
    if combatant is None:
        return placeholder
    abilities = ", ".join(a.name for a in combatant.abilities) or "Basic Attack"
    return f"{combatant.name}  Health: {combatant.health}  Abilities: {abilities}"


def format_roster(combatants: Iterable[Combatant]) -> str:
    lines = []
    for c in combatants:
        lines.append(f"  {c.id:<16} {c.name:<20} HP {c.health:>5}  W {c.wins}  L {c.losses}")
    return "\n".join(lines) if lines else "  (empty)"


def format_result(entry: ResultEntry) -> str:
    """``(HH:MM:SS) verdict`` in local time."""
    local = datetime.fromisoformat(entry.timestamp).astimezone()
    return f"({local.strftime('%H:%M:%S')}) {entry.result}"


def format_results(entries: Iterable[ResultEntry]) -> str:
    lines = [format_result(e) for e in entries]
    return "\n".join(lines) if lines else "No battles completed yet."
