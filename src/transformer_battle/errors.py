"""Exceptions raised by the battle simulator."""

from __future__ import annotations


class TransformerBattleError(Exception):
    """Base class for every error this package raises on purpose."""


class CombatantValidationError(TransformerBattleError, ValueError):
    """A combatant creation request was rejected.

    ``str(exc)`` is the message meant to be shown next to the form.
    """


class UnknownCombatantError(TransformerBattleError, KeyError):
    """No roster entry has the requested id or name."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class RosterLoadError(TransformerBattleError):
    """A roster document could not be fetched or did not validate."""


class BattleCancelled(TransformerBattleError):
    """An in-flight battle was aborted through its cancel token."""


class StalemateError(TransformerBattleError, RuntimeError):
    """A battle exceeded the configured round limit without a verdict."""
