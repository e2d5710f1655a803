"""Shared cancellation for a single run."""
import asyncio
from .errors import Cancelled


class CancelToken:
    """One-shot cancellation signal shared by the producer and all workers."""

    def __init__(self):
        self._event = asyncio.Event()
        self._reason: Cancelled | None = None

    def cancel(self, reason: Cancelled | None = None) -> None:
        """Signal cancellation. The first reason wins."""
        if self._reason is None:
            self._reason = reason or Cancelled()
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Cancelled | None:
        return self._reason

    def raise_if_cancelled(self) -> None:
        if self._reason is not None:
            raise self._reason

    async def wait(self) -> Cancelled:
        await self._event.wait()
        return self._reason
