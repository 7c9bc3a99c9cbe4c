import dataclasses
import logging
import typing

import anyio
import httpx
from anyio import TASK_STATUS_IGNORED
from anyio.abc import TaskStatus

from lightkube.core import resource as lkr
from lightkube.core.exceptions import ApiError

from .events import event_from_watch
from .exceptions import HttpError
from .tasks import Task


__all__ = [
    'EventSource',
]

log = logging.getLogger(__name__)


@dataclasses.dataclass(eq=False)
class EventSource(Task):
    """Watches one resource type in one namespace and feeds the requests
    its handler derives from the events into a workqueue.

    The watch is restarted after `restart_delay` seconds whenever the api
    server ends it with an error.
    """

    client: object
    queue: object
    resource: lkr.Resource
    handler: typing.Callable
    kwargs: dict = None
    namespace: str = None
    restart_delay: float = 5

    def __post_init__(self):
        Task.__init__(self)
        if self.kwargs is None:
            self.kwargs = {}

    def __repr__(self):
        info = lkr.api_info(self.resource)
        out = [f'{info.resource.api_version}/{info.resource.kind}']
        if self.namespace is not None:
            out.append(self.namespace)
        return f'<{self.__class__.__name__} {" ".join(out)}>'

    async def handle(self, operation, obj):
        """Turn one watch event into requests and queue them."""
        event = event_from_watch(operation, obj)
        if event is None:
            return
        log.debug('received event: %r', event)
        try:
            requests = self.handler(event, **self.kwargs)
        except Exception:
            log.error('failed to process %r', event)
            raise
        for request in requests or []:
            await self.queue.add(request)

    async def _watch(self):
        log.debug('start watching %s', self)
        try:
            async for operation, obj in self.client.watch(
                self.resource,
                namespace=self.namespace,
            ):
                await self.handle(operation, obj)
        except ApiError as e:
            log.error('watching %s failed: %s', self, e)
        except httpx.HTTPStatusError as e:
            raise HttpError(
                e.request.method,
                e.request.url,
                e.response.status_code,
                message=f'HTTP error while watching {self}',
            ) from e
        except (httpx.TransportError, TimeoutError) as e:
            log.error('watching %s failed: %r', self, e)

    async def _run(self):
        while True:
            await self._watch()
            log.debug('restarting watch %s in %ss', self, self.restart_delay)
            await anyio.sleep(self.restart_delay)

    async def __call__(self, task_status: TaskStatus[None] = TASK_STATUS_IGNORED):
        log.debug('starting %s', self)
        try:
            async with anyio.create_task_group() as tg:
                self._task_group = tg
                try:
                    tg.start_soon(self._run)
                    self._running.set()
                    task_status.started()
                    await anyio.sleep_forever()

                except anyio.get_cancelled_exc_class():
                    log.debug('canceled %s', self)
                    raise
        finally:
            log.debug('stopped %s', self)
