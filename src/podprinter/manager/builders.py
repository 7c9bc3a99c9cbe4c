import logging

from ..controller import requests_from_event_for_owner
from ..rbac import READ_VERBS, WRITE_VERBS, resource_rbac
from ..resources import get_resource


log = logging.getLogger(__name__)


class ControllerBuilder:
    """Collects at import time what is needed to create a Controller at runtime.

    ```
    hello_ctl = podprinter.controller(Hello)
    hello_ctl.watch_owner(Deployment)

    @hello_ctl.reconcile
    async def reconcile(client, request):
        ...
    ```
    """

    def __init__(self, manager, resource, name=None) -> None:
        self.manager = manager
        self.resource = get_resource(resource)
        self.name = name
        self._kwargs = {
            'name': name,
            'watches': {},
            'reconcile': None,
            'concurrent_reconciles': 1,
        }
        self._instance = None
        # The controller reads its primary resource.
        resource_rbac(self.resource, verbs=READ_VERBS)

    def __repr__(self):
        return f'<ControllerBuilder {self.resource.apiVersion}/{self.resource.kind}>'

    def __getattr__(self, key):
        # Proxy to the Controller instance once the manager created it.
        instance = self.__dict__.get('_instance')
        if instance is None:
            raise AttributeError(key)
        return getattr(instance, key)

    @property
    def kwargs(self):
        return dict(self._kwargs)

    def _add_watch(self, resource, handler, **kwargs):
        resource = get_resource(resource)
        self.manager.register_resource(resource)
        self._kwargs['watches'][resource] = {
            'handler': handler,
            'kwargs': kwargs,
        }

    def watch_owner(self, resource, verbs=READ_VERBS + WRITE_VERBS):
        """Watch the given resource and reconcile its controlling owner,
        if that owner is of this controller's resource type.

        Owned objects are usually created and updated by the controller,
        so it is granted write access to them as well.
        """
        resource_rbac(resource, verbs=verbs)
        self._add_watch(resource, requests_from_event_for_owner, owner=self.resource)

    def reconcile(self, func=None, /, *, concurrency=1):
        """Decorator that registers the reconcile function of this controller."""
        existing = self._kwargs['reconcile']
        if callable(existing):
            raise Exception(
                f'Controller already has a reconcile function registered: {existing}'
            )
        self._kwargs['concurrent_reconciles'] = concurrency

        def decorator(f):
            self._kwargs['reconcile'] = f
            return f

        if func is None:
            # Called as @decorator() with parens.
            return decorator
        # Called as @decorator without parens.
        return decorator(func)
