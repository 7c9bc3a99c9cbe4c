import logging
import typing

import anyio
from anyio import TASK_STATUS_IGNORED
from anyio.abc import TaskStatus

from lightkube.core import resource as lkr

from ..exceptions import (
    ObjectNotFound,
    PermanentError,
    Requeue,
    TemporaryError,
)
from ..resources import get_resource
from ..source import EventSource
from ..tasks import Task
from ..workqueue import Workqueue
from .request import requests_from_event_for_object


log = logging.getLogger(__name__)


class ReconcilerLoggerAdapter(logging.LoggerAdapter):
    """Prefixes the log message with the reconcilers number"""

    def process(self, msg, kwargs):
        return 'reconciler[%i]: %s' % (self.extra['num'], msg), kwargs


class Controller(Task):
    """Runs a reconcile function for all requests its event sources produce.

    `watches` maps a resource to a dict with the keys `handler` and `kwargs`.
    The handler turns an event for that resource into requests for the
    controller's own resource.
    """

    client: object
    resource: lkr.Resource
    name: str = None
    reconcile: typing.Callable = None
    concurrent_reconciles: int = 1

    def __init__(self, client, resource, name=None, watches=None,
        reconcile=None, concurrent_reconciles=1, namespaces=None, queue=None):
        super().__init__()
        self.client = client
        self.resource = get_resource(resource)
        self.name = name
        self.watches = watches or {}
        if reconcile is not None:
            self.reconcile = reconcile
        self.concurrent_reconciles = concurrent_reconciles
        # None watches the client's default namespace, '*' watches all.
        self.namespaces = namespaces or [None]
        self.queue = queue if queue is not None else Workqueue()
        self._event_sources = []

        # The controller's own resource is always watched.
        if self.resource not in self.watches:
            self._add_event_sources(
                self.resource,
                requests_from_event_for_object,
                {'resource': self.resource},
            )
        for resource, watch in self.watches.items():
            self._add_event_sources(resource, watch['handler'], watch['kwargs'])

    def __repr__(self):
        if self.name is not None:
            return f'<{self.__class__.__name__} {self.name} {self.resource.apiVersion}/{self.resource.kind}>'
        return f'<{self.__class__.__name__} {self.resource.apiVersion}/{self.resource.kind}>'

    @property
    def event_sources(self):
        return self._event_sources

    def _add_event_sources(self, resource, handler, kwargs):
        for namespace in self.namespaces:
            self._event_sources.append(
                EventSource(
                    self.client,
                    self.queue,
                    get_resource(resource),
                    handler,
                    kwargs=kwargs,
                    namespace=namespace,
                )
            )

    async def process(self, request, logger=log):
        """Run one reconcile pass for the request and decide how to follow up."""
        try:
            await self.reconcile(self.client, request)
        except ObjectNotFound as e:
            # There is nothing to reconcile anymore.
            logger.debug(e)
            await self.queue.forget(request)
        except PermanentError as e:
            logger.error(e)
            await self.queue.forget(request)
        except TemporaryError as e:
            logger.debug('requeuing with delay %s %r', e.delay, request)
            request.retries += 1
            await self.queue.add_after(request, e.delay)
        except Requeue as e:
            await self.queue.forget(request)
            if e.after:
                logger.debug('requeuing with delay %s %r', e.after, request)
                await self.queue.add_after(request, e.after)
            else:
                logger.debug('requeuing %r', request)
                await self.queue.add(request)
        except Exception as e:
            # Unexpected error, log it and retry with backoff.
            logger.exception(e)
            request.retries = await self.queue.num_requeues(request) + 1
            logger.debug('requeuing with rate limiting %r', request)
            await self.queue.add_rate_limited(request)
        else:
            await self.queue.forget(request)

    async def _reconciler(self, num):
        logger = ReconcilerLoggerAdapter(log, {'num': num})
        logger.debug('started')
        while True:
            request = await self.queue.get()
            logger.debug('processing %r', request)
            try:
                await self.process(request, logger=logger)
            finally:
                logger.debug('done processing %r', request)
                await self.queue.done(request)

    async def __call__(self, task_status: TaskStatus[None] = TASK_STATUS_IGNORED):
        log.debug('starting %s', self)
        try:
            async with anyio.create_task_group() as tg:
                self._task_group = tg
                try:
                    await tg.start(self.queue)
                    for source in self._event_sources:
                        await tg.start(source)
                    for num in range(self.concurrent_reconciles):
                        tg.start_soon(self._reconciler, num)

                    log.info('started %s', self)
                    self._running.set()
                    task_status.started()

                    await anyio.sleep_forever()

                except anyio.get_cancelled_exc_class():
                    log.debug('canceled %s', self)
                    raise

                finally:
                    log.debug('stopping %s', self)
        finally:
            log.info('stopped %s', self)
