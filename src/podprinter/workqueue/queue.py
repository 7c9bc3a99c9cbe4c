import logging

import anyio
from anyio import TASK_STATUS_IGNORED
from anyio.abc import TaskStatus

from ..tasks import Task
from .limiters import default_rate_limiter


log = logging.getLogger(__name__)


class Queue:
    """Insertion ordered set of items waiting to be processed."""

    def __init__(self):
        self._items = {}

    def push(self, item):
        self._items[item] = None

    def pop(self):
        item = next(iter(self._items))
        del self._items[item]
        return item

    def __len__(self):
        return len(self._items)


class Workqueue(Task):
    """A work queue in the manner of client-go's workqueue.

    - an item that is added several times before it is processed is
      processed once
    - an item is never handed out to two workers at the same time;
      adding it while it is processed marks it dirty and it is queued
      again once `done` is called for it
    - delayed and rate limited adds are scheduled in the queue's own
      task group
    """

    def __init__(self, rate_limiter=None):
        super().__init__()
        self._rate_limiter = rate_limiter or default_rate_limiter()
        self._buffer = []
        self._queue = Queue()
        self._delayed = {}
        self._processing = set()
        self._dirty = set()
        self._condition = anyio.Condition()

    def __len__(self):
        return len(self._queue)

    def __repr__(self):
        return (
            f'<Workqueue queued: {len(self)}, delayed: {len(self._delayed)}, '
            f'dirty: {len(self._dirty)}, processing: {len(self._processing)}, '
            f'buffered: {len(self._buffer)}>'
        )

    async def _add(self, item):
        async with self._condition:
            if item in self._dirty:
                return
            self._dirty.add(item)
            if item not in self._processing:
                self._queue.push(item)
                self._condition.notify()

    async def add(self, item):
        """Mark the item as needing processing."""
        if self.is_running:
            await self._add(item)
        else:
            # Items added before the queue is started are added on startup.
            self._buffer.append(item)

    async def get(self):
        """Block until an item can be handed out for processing."""
        async with self._condition:
            while len(self._queue) == 0:
                await self._condition.wait()
            item = self._queue.pop()
            self._processing.add(item)
            self._dirty.discard(item)
            return item

    async def done(self, item):
        """Mark the item as processed. If it was added again while it was
        processed, it is queued again."""
        async with self._condition:
            self._processing.discard(item)
            if item in self._dirty:
                self._queue.push(item)
                self._condition.notify()

    async def _add_after(self, item, delay):
        try:
            await anyio.sleep(delay)
            await self.add(item)
        finally:
            self._delayed.pop(item, None)

    async def add_after(self, item, delay):
        """Add the item once the given number of seconds passed."""
        if not delay or delay <= 0:
            await self.add(item)
        else:
            self._delayed[item] = delay
            self._task_group.start_soon(self._add_after, item, delay)

    async def add_rate_limited(self, item):
        """Add the item after the delay the rate limiter asks for."""
        await self.add_after(item, self._rate_limiter.delay(item))

    async def forget(self, item):
        """Reset the rate limiter history of the item."""
        self._rate_limiter.forget(item)

    async def num_requeues(self, item):
        return self._rate_limiter.count(item)

    async def __call__(self, task_status: TaskStatus[None] = TASK_STATUS_IGNORED):
        async with anyio.create_task_group() as tg:
            self._task_group = tg

            while self._buffer:
                await self._add(self._buffer.pop(0))

            self._running.set()
            task_status.started()
            await anyio.sleep_forever()
