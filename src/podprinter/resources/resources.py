from dataclasses import dataclass

from lightkube.core import resource as lkr
from lightkube.models import meta_v1


def get_resource(resource: lkr.Resource) -> lkr.Resource:
    """Ensure lightkube resources know their own apiVersion and kind.
    See: https://github.com/gtsystem/lightkube/issues/76
    """
    info = lkr.api_info(resource)
    if getattr(resource, 'apiVersion', None) in ('', None):
        resource.apiVersion = info.resource.api_version
    if getattr(resource, 'kind', None) in ('', None):
        resource.kind = info.resource.kind
    return resource


@dataclass
class ObjectMeta(meta_v1.ObjectMeta):
    def __post_init__(self):
        # Defaults for the nested structures we write to.
        if self.annotations is None:
            self.annotations = {}
        if self.labels is None:
            self.labels = {}
        if self.ownerReferences is None:
            self.ownerReferences = []


class Resource:
    apiVersion: str = None
    kind: str = None
    metadata: ObjectMeta = None
