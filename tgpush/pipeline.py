"""Pipeline - drains the unit iterator into a bounded pool of transfers."""
import asyncio
import logging
from contextlib import suppress
from dataclasses import dataclass
from typing import Callable
from .cancel import CancelToken
from .errors import Cancelled, PreparationError, TransferError
from .iterator import UnitIterator
from .models import Stats, TransferUnit
from .worker import Transfer

log = logging.getLogger(__name__)


@dataclass
class PipelineCallbacks:
    """Progress callbacks. Called from concurrent transfers."""
    on_start: Callable[[TransferUnit], None] | None = None
    on_finish: Callable[[TransferUnit, Exception | None], None] | None = None
    on_progress: Callable[[TransferUnit, int, int], None] | None = None
    on_delay: Callable[[float], None] | None = None


class Pipeline:
    """Send every unit the iterator yields, at most `limit` at a time."""

    def __init__(
        self,
        iterator: UnitIterator,
        transfer: Transfer,
        limit: int = 1,
        delay: float = 0.0,
        callbacks: PipelineCallbacks | None = None,
    ):
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        self._iter = iterator
        self._transfer = transfer
        self._limit = limit
        self._delay = delay
        self._cb = callbacks or PipelineCallbacks()
        self.stats = Stats()

    async def run(self, token: CancelToken | None = None) -> Stats:
        """Run until the iterator is drained and every transfer has finished.

        Raises Cancelled when the run was cancelled, PreparationError when a
        file could not be prepared. Transfer failures only reach callbacks.
        """
        token = token or CancelToken()
        slots = asyncio.Semaphore(self._limit)
        tasks: set[asyncio.Task] = set()

        try:
            while True:
                await slots.acquire()
                if not await self._iter.advance(token):
                    slots.release()
                    break

                unit = self._iter.current()
                self.stats.total += 1
                task = asyncio.create_task(self._dispatch(unit, token, slots))
                tasks.add(task)
                task.add_done_callback(tasks.discard)

                if self._delay and self._iter.has_next():
                    await self._pause(token)

            await asyncio.gather(*tasks)
        except asyncio.CancelledError:
            token.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        if token.cancelled:
            raise token.reason
        if (err := self._iter.last_error()) is not None:
            raise PreparationError(f"iter: {err}") from err
        return self.stats

    async def _pause(self, token: CancelToken):
        """Throttle dispatching. In-flight transfers keep running."""
        log.debug(f"Delay {self._delay}s")
        self._notify("on_delay", self._delay)
        with suppress(asyncio.TimeoutError):
            await asyncio.wait_for(token.wait(), timeout=self._delay)

    async def _dispatch(self, unit: TransferUnit, token: CancelToken, slots: asyncio.Semaphore):
        error: Exception | None = None
        try:
            self._notify("on_start", unit)
            await self._transfer.transfer(
                unit, token,
                progress=lambda done, total: self._notify("on_progress", unit, done, total),
            )
        except Cancelled as e:
            # canceled by user, stop everything
            error = e
            token.cancel(e)
        except asyncio.CancelledError:
            error = Cancelled()
            token.cancel(error)
            raise
        except TransferError as e:
            error = e
            log.error(f"Transfer {unit.name} failed: {e}")
        except Exception as e:
            error = e
            log.exception(f"Transfer {unit.name} failed unexpectedly: {e}")
        finally:
            self._finish(unit, error)
            slots.release()

    def _finish(self, unit: TransferUnit, error: Exception | None):
        unit.close()
        if error is None:
            self.stats.uploaded += 1
            if unit.remove:
                self._remove(unit)
        else:
            self.stats.failed += 1
        self._notify("on_finish", unit, error)

    @staticmethod
    def _remove(unit: TransferUnit):
        try:
            unit.path.unlink()
            log.info(f"Removed {unit.path}")
        except OSError as e:
            log.warning(f"Remove {unit.path} failed: {e}")

    def _notify(self, event: str, *args):
        """Call callback if set."""
        cb = getattr(self._cb, event, None)
        if cb:
            try:
                cb(*args)
            except Exception as e:
                log.warning(f"Callback {event} failed: {e}")
