"""Tracked fire-and-forget execution of effect runs.

``dispatch`` never awaits effects.  Each effect run becomes an asyncio task
held in ``_active`` until it finishes, so it cannot be garbage collected
mid-flight and so :meth:`EffectExecutor.settled` can wait for it.  Called
outside a running loop (plain sync code, CLI scripts) runs are parked and
started by the next ``await settled()``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from typing import Callable
from typing import Coroutine
from typing import List
from typing import Optional
from typing import Set

logger = logging.getLogger(__name__)

EffectRun = Callable[[], Coroutine[Any, Any, None]]


class EffectExecutor:
    def __init__(self) -> None:
        self._active: Set[asyncio.Task] = set()
        self._deferred: List[EffectRun] = []
        self._failures: List[BaseException] = []

    def submit(self, run: EffectRun, label: str = "effect") -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No running loop; deferring {label} until settled()")
            self._deferred.append(run)
            return
        self._start(loop, run, label)

    def _start(self, loop: asyncio.AbstractEventLoop, run: EffectRun, label: str) -> None:
        task = loop.create_task(run(), name=label)
        self._active.add(task)
        task.add_done_callback(self._cleanup_task)

    def _cleanup_task(self, task: asyncio.Task) -> None:
        self._active.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Effect task {task.get_name()} failed: {error}")
            self._failures.append(error)

    @property
    def pending(self) -> int:
        return len(self._active) + len(self._deferred)

    async def settled(self) -> None:
        """Wait until no effect run is outstanding.

        Effects that dispatch actions may schedule further runs; those are
        awaited too.  The first failure seen since the last call is
        re-raised once everything has finished.
        """
        loop = asyncio.get_running_loop()
        while self._active or self._deferred:
            deferred, self._deferred = self._deferred, []
            for run in deferred:
                self._start(loop, run, "effect")
            if self._active:
                await asyncio.gather(*list(self._active), return_exceptions=True)
            # Let done callbacks run before checking again.
            await asyncio.sleep(0)

        failure: Optional[BaseException] = self._failures[0] if self._failures else None
        self._failures.clear()
        if failure is not None:
            raise failure

    def cancel_all(self) -> None:
        for task in list(self._active):
            task.cancel()
        self._deferred.clear()
