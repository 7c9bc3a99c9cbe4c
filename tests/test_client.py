import pytest

from lightkube.core.exceptions import ApiError
from lightkube.resources.apps_v1 import Deployment

import podprinter
from podprinter.hello import Hello, build_deployment

from conftest import api_error, make_hello


pytestmark = pytest.mark.anyio


class FakeApiClient:
    """Records the calls a lightkube AsyncClient would receive."""

    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def _call(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        if self.error is not None:
            raise self.error

    async def get(self, resource, name, *, namespace=None):
        self._call('get', resource, name, namespace=namespace)
        return make_hello(name=name, namespace=namespace)

    async def create(self, obj, *, field_manager=None):
        self._call('create', obj, field_manager=field_manager)
        return obj

    async def replace(self, obj, *, field_manager=None):
        self._call('replace', obj, field_manager=field_manager)
        return obj

    async def delete(self, resource, name, *, namespace=None):
        self._call('delete', resource, name, namespace=namespace)

    async def patch(self, resource, name, obj, *, namespace=None, field_manager=None):
        self._call('patch', resource, name, obj, namespace=namespace, field_manager=field_manager)
        return obj

    async def list(self, resource, *, namespace=None):
        self._call('list', resource, namespace=namespace)
        for name in ('a', 'b'):
            yield make_hello(name=name, namespace=namespace)


async def test_get_with_request():
    api_client = FakeApiClient()
    client = podprinter.AsyncClient(api_client)

    hello = await client.get(podprinter.Request(Hello, 'demo', namespace='default'))

    assert hello.metadata.name == 'demo'
    assert api_client.calls == [(('get', Hello, 'demo'), {'namespace': 'default'})]


async def test_get_with_resource_name_and_namespace():
    api_client = FakeApiClient()
    client = podprinter.AsyncClient(api_client)

    await client.get(Hello, name='demo', namespace='ns')

    assert api_client.calls == [(('get', Hello, 'demo'), {'namespace': 'ns'})]


async def test_get_not_found():
    client = podprinter.AsyncClient(FakeApiClient(error=api_error(404, reason='NotFound')))

    with pytest.raises(podprinter.ApiObjectNotFound) as excinfo:
        await client.get(podprinter.Request(Hello, 'demo', namespace='default'))

    assert isinstance(excinfo.value, podprinter.ObjectNotFound)
    assert excinfo.value.name == 'demo'
    assert str(excinfo.value) == (
        'ApiObjectNotFound: mygroup.podprinter.io/v1/Hello default/demo'
    )


@pytest.mark.parametrize('code', [403, 409, 500])
async def test_get_other_errors_are_raised_unchanged(code):
    error = api_error(code)
    client = podprinter.AsyncClient(FakeApiClient(error=error))

    with pytest.raises(ApiError) as excinfo:
        await client.get(podprinter.Request(Hello, 'demo', namespace='default'))

    assert excinfo.value is error


async def test_writes_use_the_field_manager():
    api_client = FakeApiClient()
    client = podprinter.AsyncClient(api_client, field_manager='podprinter')
    deployment = build_deployment(make_hello())

    await client.create(deployment)
    await client.update(deployment)

    assert api_client.calls == [
        (('create', deployment), {'field_manager': 'podprinter'}),
        (('replace', deployment), {'field_manager': 'podprinter'}),
    ]


async def test_write_errors_are_raised_unchanged():
    error = api_error(409, reason='AlreadyExists')
    client = podprinter.AsyncClient(FakeApiClient(error=error))

    with pytest.raises(ApiError):
        await client.create(build_deployment(make_hello()))


async def test_delete_not_found():
    client = podprinter.AsyncClient(FakeApiClient(error=api_error(404)))

    with pytest.raises(podprinter.ApiObjectNotFound):
        await client.delete(Deployment, name='demo', namespace='default')


async def test_list():
    api_client = FakeApiClient()
    client = podprinter.AsyncClient(api_client)

    hellos = await client.list(Hello, namespace='default')

    assert [h.metadata.name for h in hellos] == ['a', 'b']
    assert api_client.calls == [(('list', Hello), {'namespace': 'default'})]


async def test_patch_uses_the_field_manager():
    api_client = FakeApiClient()
    client = podprinter.AsyncClient(api_client, field_manager='podprinter')
    patch = {'spec': {'replicas': 5}}

    await client.patch(
        podprinter.Request(Deployment, 'demo', namespace='default'),
        obj=patch,
    )

    assert api_client.calls == [(
        ('patch', Deployment, 'demo', patch),
        {'namespace': 'default', 'field_manager': 'podprinter'},
    )]
