import functools
import logging
import signal

import anyio
import uvloop
from anyio import CancelScope, open_signal_receiver

from lightkube import ALL_NS
from lightkube import AsyncClient as LightkubeAsyncClient

from .. import exceptions
from ..client import AsyncClient
from ..controller import Controller
from ..resources import get_resource

from .builders import ControllerBuilder


log = logging.getLogger(__name__)


async def signal_handler(scope: CancelScope):
    with open_signal_receiver(signal.SIGINT, signal.SIGTERM) as signals:
        async for signum in signals:
            if signum == signal.SIGINT:
                log.info('interrupted, shutting down')
            else:
                log.info('terminated, shutting down')
            scope.cancel()
            return


class Manager:
    """Owns the api client and runs all declared controllers."""

    def __init__(self):
        self.all_namespaces = False
        self.namespaces = None
        self.field_manager = 'podprinter'
        self.resources = set()
        self.debug = False
        self.api_client = None
        self.client = None
        self._builders = {}
        self._controllers = []

    def __repr__(self):
        resources = sorted(f'{r.apiVersion}/{r.kind}' for r in self.resources)
        namespaces = ALL_NS if self.all_namespaces else self.namespaces
        return f'<Manager namespaces: {namespaces} resources: {resources}>'

    def register_resource(self, resource):
        self.resources.add(get_resource(resource))

    def controller(self, resource, name=None):
        """Create, or return the existing, controller builder for the resource."""
        self.register_resource(resource)
        key = name if name is not None else get_resource(resource)
        builder = self._builders.get(key)
        if builder is None:
            builder = self._builders[key] = ControllerBuilder(self, resource, name=name)
        return builder

    @property
    def builders(self):
        return list(self._builders.values())

    def _watched_namespaces(self):
        if self.all_namespaces:
            return [ALL_NS]
        if self.namespaces:
            return sorted(self.namespaces)
        return [self.api_client.namespace]

    def create_controllers(self, client):
        """Instantiate a Controller for every builder."""
        namespaces = self._watched_namespaces()
        controllers = []
        for builder in self._builders.values():
            log.debug('creating controller from builder: %r', builder)
            controller = Controller(client, builder.resource, namespaces=namespaces,
                **builder.kwargs)
            # The builder proxies to its instance at runtime.
            builder._instance = controller
            controllers.append(controller)
        return controllers

    def run(self, all_namespaces=False, namespaces=None, field_manager=None,
        debug=False):
        self.debug = debug
        anyio.run(
            functools.partial(
                self,
                all_namespaces=all_namespaces,
                namespaces=namespaces,
                field_manager=field_manager,
                setup_signal_handler=True,
            ),
            backend_options={'loop_factory': uvloop.new_event_loop},
        )

    async def __call__(self, all_namespaces=False, namespaces=None,
        field_manager=None, setup_signal_handler=False):
        self.all_namespaces = all_namespaces
        self.namespaces = set(namespaces) if namespaces else None
        if field_manager:
            self.field_manager = field_manager

        if self.api_client is None:
            self.api_client = LightkubeAsyncClient(field_manager=self.field_manager)
        self.client = AsyncClient(self.api_client, field_manager=self.field_manager)
        self._controllers = self.create_controllers(self.client)

        log.info('starting %r', self)
        try:
            async with anyio.create_task_group() as tg:
                if setup_signal_handler:
                    tg.start_soon(signal_handler, tg.cancel_scope)
                for controller in self._controllers:
                    await tg.start(controller)
                log.info('started %r', self)
        except* exceptions.Error as eg:
            if self.debug:
                raise
            error_messages = [str(error) for error in exceptions.iterate_errors(eg)]
            raise exceptions.FatalError(' '.join(error_messages)) from eg
        finally:
            await self.api_client.close()
            log.info('stopped %r', self)
