"""Delayed and background work on the event loop.

Side effects that must happen later (clearing an editing indicator) or off
the caller's path (staff fan-out after a prescription upload) are scheduled
as ``ScheduledTask`` handles. The clock is injectable so tests can advance
virtual time deterministically.
"""

import asyncio
import inspect
import time
from typing import Any, Callable, Optional, Protocol, Set

from infrastructure.logging import get_module_logger

logger = get_module_logger()


class Clock(Protocol):
    def now(self) -> float:
        """Monotonic time in seconds."""
        ...

    async def sleep(self, seconds: float) -> None:
        ...


class AsyncioClock:
    """Real time."""

    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class ScheduledTask:
    """Handle to a scheduled callback.

    Attributes:
        name: Label used in logs
        due_at: Clock time the callback becomes due
    """

    def __init__(self, name: str, due_at: float, task: "asyncio.Task[Any]"):
        self.name = name
        self.due_at = due_at
        self._task = task

    @property
    def done(self) -> bool:
        return self._task.done()

    @property
    def cancelled(self) -> bool:
        return self._task.cancelled()

    def cancel(self) -> bool:
        """Cancel the callback if it has not run yet."""
        return self._task.cancel()

    async def wait(self) -> None:
        """Wait until the callback has run or been cancelled."""
        try:
            await asyncio.shield(self._task)
        except asyncio.CancelledError:
            if not self._task.cancelled():
                raise

    def __repr__(self) -> str:
        return f"ScheduledTask(name={self.name!r}, due_at={self.due_at}, done={self.done})"


class TaskScheduler:
    """Runs callbacks after a delay as tracked asyncio tasks.

    Callbacks may be plain functions or coroutine functions. Their
    exceptions are logged and never propagate to the event loop.

    Example:
        scheduler = TaskScheduler()
        handle = scheduler.schedule(2.0, announce, False, name="editing_clear")
        handle.cancel()
    """

    def __init__(self, clock: Optional[Clock] = None):
        self.clock: Clock = clock or AsyncioClock()
        self._tasks: Set[ScheduledTask] = set()
        self._closed = False

    @property
    def pending(self) -> int:
        return sum(1 for t in self._tasks if not t.done)

    def schedule(
        self,
        delay: float,
        callback: Callable[..., Any],
        *args: Any,
        name: Optional[str] = None,
    ) -> ScheduledTask:
        """Run ``callback(*args)`` after ``delay`` seconds.

        Must be called from within the running event loop.
        """
        if self._closed:
            raise RuntimeError("TaskScheduler has been shut down")

        label = name or getattr(callback, "__name__", "task")
        task = asyncio.get_running_loop().create_task(
            self._run(max(delay, 0.0), label, callback, args)
        )
        handle = ScheduledTask(label, self.clock.now() + max(delay, 0.0), task)
        self._tasks.add(handle)
        task.add_done_callback(lambda _t: self._tasks.discard(handle))
        return handle

    def run_soon(
        self, callback: Callable[..., Any], *args: Any, name: Optional[str] = None
    ) -> ScheduledTask:
        """Run ``callback`` in the background without delay."""
        return self.schedule(0.0, callback, *args, name=name)

    async def _run(
        self,
        delay: float,
        name: str,
        callback: Callable[..., Any],
        args: tuple,
    ) -> None:
        if delay > 0:
            await self.clock.sleep(delay)
        try:
            result = callback(*args)
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "scheduled_task_failed",
                task=name,
                error=str(e),
                error_type=type(e).__name__,
            )

    async def shutdown(self) -> None:
        """Cancel every pending task and wait for them to finish."""
        self._closed = True
        handles = list(self._tasks)
        for handle in handles:
            handle.cancel()
        if handles:
            await asyncio.gather(
                *(handle._task for handle in handles), return_exceptions=True
            )
        logger.info("scheduler_shutdown", cancelled=len(handles))
