"""Cancellation token and the cancellable pause used between rounds."""

from __future__ import annotations

import asyncio
import logging

from transformer_battle.errors import BattleCancelled

logger = logging.getLogger(__name__)


class CancelToken:
    """Signals an in-flight battle to stop at its next suspension point.

    A token can be cancelled from any coroutine on the same event loop.
    Once cancelled it stays cancelled; use a fresh token per battle.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()
            logger.debug("Cancel token set: %s", reason)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise BattleCancelled(self.reason or "cancelled")

    async def wait(self) -> None:
        await self._event.wait()


async def cancellable_sleep(delay: float, token: CancelToken | None = None) -> None:
    """Sleep for *delay* seconds, raising :class:`BattleCancelled` early if
    *token* is cancelled before or during the pause.

    A zero delay still yields to the event loop once so other tasks
    (a redraw, a cancel request) get a chance to run.
    """
    if token is None:
        await asyncio.sleep(delay)
        return

    token.raise_if_cancelled()
    if delay <= 0:
        await asyncio.sleep(0)
    else:
        try:
            await asyncio.wait_for(token.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass
    token.raise_if_cancelled()
