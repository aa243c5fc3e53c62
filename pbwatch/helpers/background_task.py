"""Background task management utilities.

This module provides a small task manager for work that continues after the
code that started it has returned, such as delivering announcements after a
scheduled run has finished.
"""

import asyncio
from collections.abc import Coroutine, Sequence
from typing import Any, TypeVar

from pbwatch.log import logger

T = TypeVar("T")


class BackgroundTasks:
    """A background task manager for fire-and-forget coroutines.

    Tasks are tracked until they finish, so the host can wait for pending work
    with `join()` before shutting down instead of cancelling it.
    """

    def __init__(self, tasks: Sequence[asyncio.Task] | None = None):
        """Initialize the task manager.

        Args:
            tasks: Optional sequence of existing tasks to manage.
        """
        self.tasks: set[asyncio.Task] = set(tasks) if tasks else set()

    def add_task(self, coro: Coroutine[Any, Any, T], *, name: str | None = None) -> asyncio.Task[T]:
        """Schedule a coroutine as a background task.

        Args:
            coro: The coroutine to run.
            name: Optional task name, used in logs.

        Returns:
            The created task handle.
        """
        task = asyncio.create_task(coro, name=name)
        self.tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self.tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.opt(exception=exc).error(f"Background task {task.get_name()} failed: {exc}")

    async def join(self, timeout: float | None = None) -> None:
        """Wait for all pending tasks to finish.

        Args:
            timeout: Maximum seconds to wait. Tasks still running after the
                timeout are cancelled.
        """
        if not self.tasks:
            return
        pending = set(self.tasks)
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        for task in still_running:
            logger.warning(f"Background task {task.get_name()} did not finish in time, cancelling")
            task.cancel()

    def stop(self) -> None:
        """Cancel all running tasks and clear the task set."""
        for task in self.tasks:
            task.cancel()
        self.tasks.clear()


bg_tasks = BackgroundTasks()
