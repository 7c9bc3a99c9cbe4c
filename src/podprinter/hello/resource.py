from typing import Annotated

from podprinter.resources import ObjectMeta, crd
from podprinter.resources.crd import SchemaAnnotation


GROUP = 'mygroup.podprinter.io'
VERSION = 'v1'


@crd.model
class HelloSpec:
    """HelloSpec defines the desired state of Hello."""

    msg: Annotated[str, 'Message the workload prints.']
    size: Annotated[
        int,
        SchemaAnnotation(description='Number of workload replicas.', minimum=0),
    ]


@crd.resource(
    group=GROUP,
    version=VERSION,
    scope='Namespaced',
)
@crd.printcolumn('Msg', '.spec.msg')
@crd.printcolumn('Size', '.spec.size', type='integer')
class Hello:
    """Hello is the Schema for the hellos API."""

    metadata: ObjectMeta
    spec: HelloSpec
