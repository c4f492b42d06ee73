import asyncio
from typing import Awaitable, Callable, Dict, Hashable

from loguru import logger

SearchCallback = Callable[[Hashable, str], Awaitable[None]]


class SearchDebouncer:
    """
    Cancel-and-replace scheduling for search as you type.

    Every ``submit`` for a key restarts that key's delay. Only a task that
    sleeps through the whole delay runs the callback, and a newer submit also
    cancels a callback that is still running, so a key never has two queries
    in flight.
    """

    def __init__(self, delay: float, callback: SearchCallback) -> None:
        if delay < 0:
            raise ValueError("delay must not be negative")
        self.delay = delay
        self.callback = callback
        self._tasks: Dict[Hashable, asyncio.Task] = {}

    def submit(self, key: Hashable, term: str) -> asyncio.Task:
        self.cancel(key)
        task = asyncio.create_task(self._run(key, term))
        self._tasks[key] = task
        return task

    def cancel(self, key: Hashable) -> bool:
        task = self._tasks.pop(key, None)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    def pending(self, key: Hashable) -> bool:
        task = self._tasks.get(key)
        return task is not None and not task.done()

    async def close(self) -> None:
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _run(self, key: Hashable, term: str) -> None:
        try:
            await asyncio.sleep(self.delay)
            await self.callback(key, term)
        except asyncio.CancelledError:
            logger.debug("Search for {!r} superseded", key)
            raise
        except Exception:
            # nobody awaits these tasks, so report instead of losing the error
            logger.exception("Debounced search for {!r} failed", key)
        finally:
            # a replacement task may already own the slot
            if self._tasks.get(key) is asyncio.current_task():
                del self._tasks[key]
