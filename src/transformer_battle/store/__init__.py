"""Session state: the roster and the results list."""

from transformer_battle.store.results import ResultEntry, ResultRecorder
from transformer_battle.store.roster import RosterStore

__all__ = [
    "ResultEntry",
    "ResultRecorder",
    "RosterStore",
]
