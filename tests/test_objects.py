import pytest

import podprinter
from podprinter.hello import Hello, HelloSpec, build_deployment, build_service, labels_for
from podprinter.hello.objects import IMAGE, NODE_PORT, PORT, TARGET_PORT
from podprinter.resources import ObjectMeta

from conftest import make_hello


@pytest.mark.parametrize('name', ['demo', 'a', 'hello-world-1234'])
def test_labels_are_the_same_for_service_and_deployment(name):
    hello = make_hello(name=name)
    service = build_service(hello)
    deployment = build_deployment(hello)

    assert labels_for(name) == {'app': name}
    assert service.spec.selector == labels_for(name)
    assert deployment.spec.selector.matchLabels == labels_for(name)
    assert deployment.spec.template.metadata.labels == labels_for(name)


def test_build_service(hello):
    service = build_service(hello)

    assert service.metadata.name == 'demo'
    assert service.metadata.namespace == 'default'
    assert service.spec.type == 'NodePort'
    [port] = service.spec.ports
    assert port.protocol == 'TCP'
    assert (port.nodePort, port.port, port.targetPort) == (NODE_PORT, PORT, TARGET_PORT)
    assert (NODE_PORT, PORT, TARGET_PORT) == (31321, 8375, 8395)


def test_build_deployment(hello):
    deployment = build_deployment(hello)

    assert deployment.metadata.name == 'demo'
    assert deployment.metadata.namespace == 'default'
    assert deployment.spec.replicas == 3
    [container] = deployment.spec.template.spec.containers
    assert container.name == 'demo'
    assert container.image == IMAGE == 'busybox'
    assert container.command == ['/bin/echo', 'hi']


def test_builders_do_not_touch_the_hello(hello):
    build_service(hello)
    build_deployment(hello)

    assert hello.metadata.ownerReferences == []
    assert hello.spec.size == 3


@pytest.mark.parametrize('build', [build_service, build_deployment])
def test_builders_set_a_controller_reference(hello, build):
    obj = build(hello)

    [ref] = obj.metadata.ownerReferences
    assert (ref.apiVersion, ref.kind, ref.name, ref.uid) == (
        'mygroup.podprinter.io/v1', 'Hello', 'demo', 'uid-demo',
    )
    assert ref.controller
    assert ref.blockOwnerDeletion


def test_controller_reference_is_not_duplicated(hello):
    service = build_service(hello)
    podprinter.set_controller_reference(hello, service)

    assert len(service.metadata.ownerReferences) == 1


def test_second_controller_is_rejected(hello):
    service = build_service(hello)
    other = make_hello(name='other')

    with pytest.raises(podprinter.AlreadyOwnedError):
        podprinter.set_controller_reference(other, service)


def test_plain_owner_reference_next_to_controller(hello):
    service = build_service(hello)
    other = make_hello(name='other')

    ref = podprinter.set_owner_reference(other, service)

    assert ref.controller is False
    assert [r.name for r in service.metadata.ownerReferences] == ['demo', 'other']


def test_owner_reference_on_object_without_references(hello):
    from lightkube.resources.core_v1 import ConfigMap

    config_map = ConfigMap(metadata=ObjectMeta(name='cm', namespace='default'))
    config_map.metadata.ownerReferences = None

    podprinter.set_controller_reference(hello, config_map)

    assert config_map.metadata.ownerReferences[0].name == 'demo'


def test_hello_from_api_payload():
    hello = Hello.from_dict({
        'apiVersion': 'mygroup.podprinter.io/v1',
        'kind': 'Hello',
        'metadata': {'name': 'demo', 'namespace': 'default', 'uid': 'uid-demo'},
        'spec': {'msg': 'hi', 'size': 3},
    })

    assert isinstance(hello, Hello)
    assert isinstance(hello.spec, HelloSpec)
    assert (hello.spec.msg, hello.spec.size) == ('hi', 3)
    assert hello.metadata.name == 'demo'
    assert hello.metadata.uid == 'uid-demo'

    deployment = build_deployment(hello)
    assert deployment.spec.replicas == 3
    assert deployment.metadata.ownerReferences[0].uid == 'uid-demo'


def test_hello_to_api_payload(hello):
    d = hello.to_dict()

    assert d['spec'] == {'msg': 'hi', 'size': 3}
    assert d['metadata']['name'] == 'demo'
