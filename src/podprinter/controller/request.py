import itertools
import logging

from ..resources import get_resource


log = logging.getLogger(__name__)


class Request:
    """Identity of an object to reconcile: resource type, namespace and name."""

    resource: object
    name: str
    namespace: str = None
    retries: int = 0

    def __init__(self, resource, name, namespace=None):
        self.resource = get_resource(resource)
        self.name = name
        self.namespace = namespace
        self.retries = 0

    @property
    def api_version(self) -> str:
        return self.resource.apiVersion

    @property
    def kind(self) -> str:
        return self.resource.kind

    def _key(self):
        return (self.resource.apiVersion, self.resource.kind, self.namespace, self.name)

    def __hash__(self):
        return hash(self._key())

    def __eq__(self, other):
        if not isinstance(other, Request):
            return NotImplemented
        return self._key() == other._key()

    def __repr__(self):
        if self.namespace is not None:
            name = f'{self.namespace}/{self.name}'
        else:
            name = self.name
        return f'<Request {self.resource.apiVersion}/{self.resource.kind} {name} retries: {self.retries}>'


def _objects_of(event):
    match type(event):
        case event.CreateEvent | event.DeleteEvent:
            return [event.obj]
        case event.UpdateEvent:
            return [event.old, event.new]
    return []


def requests_from_event_for_object(event, resource=None):
    """Enqueue the object the event is about."""
    return itertools.chain.from_iterable(
        request_for_object(obj, resource) for obj in _objects_of(event)
    )


def requests_from_event_for_owner(event, owner=None):
    """Enqueue the controller owner of the object the event is about."""
    return itertools.chain.from_iterable(
        request_for_owner(obj, owner) for obj in _objects_of(event)
    )


def request_for_object(obj, resource):
    if obj is None:
        return
    yield Request(resource, obj.metadata.name, namespace=obj.metadata.namespace)


def request_for_owner(obj, owner):
    """Yield a request for the owner of the given object, if the object has
    a controller reference to an owner of the given resource type."""
    if obj is None:
        return
    owner = get_resource(owner)
    for ref in obj.metadata.ownerReferences or []:
        if (
            ref.apiVersion == owner.apiVersion
            and ref.kind == owner.kind
            and ref.controller
        ):
            # Owner references are namespace local.
            yield Request(owner, ref.name, namespace=obj.metadata.namespace)
