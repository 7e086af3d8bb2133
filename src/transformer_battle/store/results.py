"""Append-only record of finished battles for the current session."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ResultEntry(BaseModel):
    """One completed battle."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    result: str
    """The verdict string, e.g. ``"Optimus Prime defeats Megatron!"``."""

    timestamp: str = Field(default_factory=_utc_now)
    """ISO 8601 creation time (UTC)."""

    @property
    def created_at(self) -> datetime:
        return datetime.fromisoformat(self.timestamp)


ResultObserver = Callable[[ResultEntry], None]


class ResultRecorder:
    """Keeps result entries in call order.

    There is no deduplication, no size cap and no way to remove an entry.
    Observers registered with :meth:`subscribe` are called synchronously
    with every new entry.
    """

    def __init__(self) -> None:
        self._entries: list[ResultEntry] = []
        self._observers: list[ResultObserver] = []

    @property
    def results(self) -> tuple[ResultEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def subscribe(self, observer: ResultObserver) -> Callable[[], None]:
        """Register *observer* and return a function that unregisters it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def record(self, result: str) -> ResultEntry:
        """Append a new entry for *result* and notify observers."""
        entry = ResultEntry(result=result)
        self._entries.append(entry)
        logger.info("Recorded result %s: %s", entry.id, result)
        for observer in list(self._observers):
            observer(entry)
        return entry
