import anyio
from anyio import TASK_STATUS_IGNORED
from anyio.abc import TaskStatus


class Task:
    """Something that runs in a task group and can be awaited until it is up.

    Subclasses implement `__call__`, they are stopped by cancelling the task
    group they run in. Awaiting a task blocks until it signalled that it is
    running.
    """

    def __init__(self):
        self._running = anyio.Event()
        self._task_group = None

    @property
    def is_running(self):
        return self._running.is_set()

    def __await__(self):
        return self._running.wait().__await__()

    async def __call__(self, task_status: TaskStatus[None] = TASK_STATUS_IGNORED):
        raise NotImplementedError()
