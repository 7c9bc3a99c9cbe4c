"""Builders for the objects a Hello owns.

Both builders are pure: they only construct objects, the reconciler decides
whether to create them.
"""

from lightkube.models.apps_v1 import DeploymentSpec
from lightkube.models.core_v1 import (
    Container,
    PodSpec,
    PodTemplateSpec,
    ServicePort,
    ServiceSpec,
)
from lightkube.models.meta_v1 import LabelSelector, ObjectMeta
from lightkube.resources.apps_v1 import Deployment
from lightkube.resources.core_v1 import Service

from podprinter.controller import set_controller_reference


# Service port mapping.
NODE_PORT = 31321
PORT = 8375
TARGET_PORT = 8395

IMAGE = 'busybox'


def labels_for(name: str) -> dict[str, str]:
    """Labels tying the pods of a Hello to its Service."""
    return {'app': name}


def build_service(hello) -> Service:
    name = hello.metadata.name
    service = Service(
        metadata=ObjectMeta(
            name=name,
            namespace=hello.metadata.namespace,
        ),
        spec=ServiceSpec(
            type='NodePort',
            selector=labels_for(name),
            ports=[
                ServicePort(
                    protocol='TCP',
                    nodePort=NODE_PORT,
                    port=PORT,
                    targetPort=TARGET_PORT,
                ),
            ],
        ),
    )
    set_controller_reference(hello, service)
    return service


def build_deployment(hello) -> Deployment:
    name = hello.metadata.name
    deployment = Deployment(
        metadata=ObjectMeta(
            name=name,
            namespace=hello.metadata.namespace,
        ),
        spec=DeploymentSpec(
            replicas=hello.spec.size,
            selector=LabelSelector(matchLabels=labels_for(name)),
            template=PodTemplateSpec(
                metadata=ObjectMeta(labels=labels_for(name)),
                spec=PodSpec(
                    containers=[
                        Container(
                            name=name,
                            image=IMAGE,
                            # The message is passed on as is.
                            command=['/bin/echo', hello.spec.msg],
                        ),
                    ],
                ),
            ),
        ),
    )
    set_controller_reference(hello, deployment)
    return deployment
