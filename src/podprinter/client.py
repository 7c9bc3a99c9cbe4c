import logging

from lightkube.core.exceptions import ApiError

from .controller import Request
from .exceptions import ApiObjectNotFound
from .resources import get_resource

__all__ = [
    'AsyncClient',
    'Client',
]

log = logging.getLogger(__name__)


def _is_not_found(error):
    return error.status is not None and error.status.code == 404


class Client:
    """Interface: what a reconcile function may do with the api server."""

    def get(self, request=None, *, resource=None, name=None, namespace=None):
        raise NotImplementedError()

    def list(self, request=None, *, resource=None, namespace=None):
        raise NotImplementedError()

    def create(self, obj):
        raise NotImplementedError()

    def update(self, obj):
        raise NotImplementedError()

    def patch(self, request=None, *, resource=None, name=None, namespace=None, obj=None):
        raise NotImplementedError()

    def delete(self, request=None, *, resource=None, name=None, namespace=None):
        raise NotImplementedError()

    def watch(self, resource, *, namespace=None):
        raise NotImplementedError()

    @staticmethod
    def _identity(request, resource, name, namespace):
        """Accept either a Request or an explicit resource/name/namespace."""
        if isinstance(request, Request):
            return request.resource, request.name, request.namespace
        if request is not None:
            resource = request
        return get_resource(resource), name, namespace


class AsyncClient(Client):
    """Async client that reads from and writes to the api server directly.

    A 404 on get is raised as `ApiObjectNotFound`, every other api error is
    raised unchanged as `lightkube.ApiError`.
    """

    def __init__(self, api_client, field_manager=None):
        self.api_client = api_client
        self.field_manager = field_manager

    async def get(self, request=None, *, resource=None, name=None, namespace=None):
        resource, name, namespace = self._identity(request, resource, name, namespace)
        try:
            return await self.api_client.get(resource, name, namespace=namespace)
        except ApiError as e:
            if _is_not_found(e):
                raise ApiObjectNotFound(resource, name, namespace=namespace) from e
            raise

    async def list(self, request=None, *, resource=None, namespace=None):
        resource, _, namespace = self._identity(request, resource, None, namespace)
        return [
            obj async for obj in self.api_client.list(resource, namespace=namespace)
        ]

    async def create(self, obj):
        return await self.api_client.create(obj, field_manager=self.field_manager)

    async def update(self, obj):
        return await self.api_client.replace(obj, field_manager=self.field_manager)

    async def patch(self, request=None, *, resource=None, name=None, namespace=None, obj=None):
        resource, name, namespace = self._identity(request, resource, name, namespace)
        return await self.api_client.patch(
            resource, name, obj,
            namespace=namespace,
            field_manager=self.field_manager,
        )

    async def delete(self, request=None, *, resource=None, name=None, namespace=None):
        resource, name, namespace = self._identity(request, resource, name, namespace)
        try:
            return await self.api_client.delete(resource, name, namespace=namespace)
        except ApiError as e:
            if _is_not_found(e):
                raise ApiObjectNotFound(resource, name, namespace=namespace) from e
            raise

    def watch(self, resource, *, namespace=None):
        """Async iterator of (operation, object) tuples."""
        return self.api_client.watch(get_resource(resource), namespace=namespace)
