"""Cooperative cancellation token threaded through prompt invocations."""

import asyncio
import logging
from typing import Callable

logger = logging.getLogger(__name__)


class CancellationToken:
    """Signal that a prompt invocation should stop early.

    A handler receives the token when its last parameter is annotated with
    CancellationToken. Cancellation is cooperative: a handler that never
    checks the token runs to completion.

    Usage:
        @Prompt("slow", "Takes a while")
        async def slow(topic: str, token: CancellationToken) -> list[PromptMessage]:
            for chunk in chunks(topic):
                token.raise_if_cancelled()
                ...
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Mark the token cancelled and run registered callbacks once."""
        if self._cancelled:
            return
        self._cancelled = True
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Cancellation callback failed")

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Run callback on cancellation (immediately if already cancelled)."""
        if self._cancelled:
            callback()
        else:
            self._callbacks.append(callback)

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise asyncio.CancelledError("Prompt invocation cancelled")

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self._cancelled})"
