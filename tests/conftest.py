import copy

import anyio
import httpx
import pytest

from lightkube.core import resource as lkr
from lightkube.core.exceptions import ApiError

import podprinter
from podprinter.hello import Hello, HelloSpec
from podprinter.resources import ObjectMeta


@pytest.fixture
def anyio_backend():
    return 'asyncio'


def api_error(code, reason='', message='api error'):
    request = httpx.Request('GET', 'https://kubernetes.default.svc/api')
    response = httpx.Response(
        code,
        json={
            'apiVersion': 'v1',
            'kind': 'Status',
            'status': 'Failure',
            'code': code,
            'reason': reason,
            'message': message,
        },
        request=request,
    )
    return ApiError(request=request, response=response)


def make_hello(name='demo', namespace='default', msg='hi', size=3):
    return Hello(
        metadata=ObjectMeta(name=name, namespace=namespace, uid=f'uid-{name}'),
        spec=HelloSpec(msg=msg, size=size),
    )


def _kind(resource):
    return lkr.api_info(resource).resource.kind


class FakeClient(podprinter.Client):
    """In memory stand-in for the api server, records every call."""

    def __init__(self, *objects):
        self.objects = {}
        self.calls = []
        self.errors = {}
        for obj in objects:
            self.put(obj)

    def put(self, obj):
        key = (_kind(obj), obj.metadata.namespace, obj.metadata.name)
        self.objects[key] = copy.deepcopy(obj)

    def find(self, resource, name, namespace='default'):
        return self.objects.get((_kind(resource), namespace, name))

    def remove(self, resource, name, namespace='default'):
        del self.objects[(_kind(resource), namespace, name)]

    def fail(self, verb, resource, error):
        self.errors[(verb, _kind(resource))] = error

    @property
    def mutations(self):
        return [call for call in self.calls if call[0] in ('create', 'update')]

    def _check(self, verb, kind):
        error = self.errors.get((verb, kind))
        if error is not None:
            raise error

    async def get(self, request=None, *, resource=None, name=None, namespace=None):
        resource, name, namespace = self._identity(request, resource, name, namespace)
        kind = _kind(resource)
        self.calls.append(('get', kind, namespace, name))
        self._check('get', kind)
        try:
            return copy.deepcopy(self.objects[(kind, namespace, name)])
        except KeyError:
            raise podprinter.ApiObjectNotFound(resource, name, namespace=namespace)

    async def create(self, obj):
        kind = _kind(obj)
        self.calls.append(('create', kind, obj.metadata.namespace, obj.metadata.name))
        self._check('create', kind)
        self.put(obj)
        return obj

    async def update(self, obj):
        kind = _kind(obj)
        self.calls.append(('update', kind, obj.metadata.namespace, obj.metadata.name))
        self._check('update', kind)
        self.put(obj)
        return obj

    def watch(self, resource, *, namespace=None):
        return self._watch(resource, namespace)

    async def _watch(self, resource, namespace):
        for (kind, obj_namespace, _), obj in list(self.objects.items()):
            if kind == _kind(resource) and namespace in (None, '*', obj_namespace):
                yield 'ADDED', copy.deepcopy(obj)
        await anyio.sleep_forever()


@pytest.fixture
def hello():
    return make_hello()
