import asyncio
from typing import Awaitable, Callable, Optional

from app.utils.logging_config import get_logger

class Debouncer:
    """Coalesces bursts of calls into one, run ``delay`` seconds after the last.

    Each trigger cancels the pending run and schedules a new one on the
    running event loop, so only the most recent arguments are used. A run
    that fails is logged when it finishes; callers validate arguments before
    triggering so the failure can be reported to whoever sent them.
    """

    def __init__(self, delay: float, callback: Callable[..., Awaitable[None]]):
        self.delay = delay
        self.callback = callback
        self.logger = get_logger(__name__)
        self._pending: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def trigger(self, *args, **kwargs) -> None:
        if self.pending:
            self._pending.cancel()
            self.logger.debug("Superseded pending debounced call")
        self._pending = asyncio.get_running_loop().create_task(self._run_later(*args, **kwargs))
        self._pending.add_done_callback(self._log_failure)

    async def _run_later(self, *args, **kwargs) -> None:
        await asyncio.sleep(self.delay)
        await self.callback(*args, **kwargs)

    def _log_failure(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.logger.error(
                f"Debounced call to {getattr(self.callback, '__name__', self.callback)} failed: {error}",
                exc_info=error
            )

    async def flush(self) -> None:
        """Wait for the pending call, if any, to finish; failures are only logged."""
        if self._pending is not None:
            await asyncio.wait({self._pending})

    def cancel(self) -> None:
        if self.pending:
            self._pending.cancel()
        self._pending = None
