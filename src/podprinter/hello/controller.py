import logging

from lightkube.resources.apps_v1 import Deployment
from lightkube.resources.core_v1 import Service

import podprinter

from .objects import build_deployment, build_service
from .resource import Hello


log = logging.getLogger(__name__)

# Delay before a pass that created or changed something is repeated.
REQUEUE_AFTER = 2

hello_ctl = podprinter.controller(Hello)

# Deleting or changing the owned objects reconciles the owning Hello,
# so they are recreated or set back.
hello_ctl.watch_owner(Service)
hello_ctl.watch_owner(Deployment)


@hello_ctl.reconcile
async def reconcile(client: podprinter.Client, request: podprinter.Request):
    """Bring the Service and Deployment of a Hello in line with its spec.

    At most one object is created or updated per pass. After a change the
    pass ends with a `Requeue`, so the next step runs against fresh state.
    """
    try:
        hello = await client.get(request)
    except podprinter.ObjectNotFound:
        # The Hello was deleted, its objects are garbage collected.
        log.debug('%r no longer exists', request)
        return

    name = hello.metadata.name
    namespace = hello.metadata.namespace
    log.info('%s/%s says: %s', namespace, name, hello.spec.msg)

    try:
        await client.get(Service, name=name, namespace=namespace)
    except podprinter.ObjectNotFound:
        log.info('creating service %s/%s', namespace, name)
        await client.create(build_service(hello))
        raise podprinter.Requeue(after=REQUEUE_AFTER)

    try:
        deployment = await client.get(Deployment, name=name, namespace=namespace)
    except podprinter.ObjectNotFound:
        log.info('creating deployment %s/%s', namespace, name)
        await client.create(build_deployment(hello))
        raise podprinter.Requeue(after=REQUEUE_AFTER)

    size = hello.spec.size
    if deployment.spec.replicas != size:
        log.info(
            'scaling deployment %s/%s from %s to %s replicas',
            namespace, name, deployment.spec.replicas, size,
        )
        deployment.spec.replicas = size
        await client.update(deployment)
        raise podprinter.Requeue(after=REQUEUE_AFTER)
