from .request import (
    Request,
    request_for_object,
    request_for_owner,
    requests_from_event_for_object,
    requests_from_event_for_owner,
)

from .references import (
    set_controller_reference,
    set_owner_reference,
)

from .controller import (
    Controller,
)

__all__ = [
    'Controller',
    'Request',
    'request_for_object',
    'request_for_owner',
    'requests_from_event_for_object',
    'requests_from_event_for_owner',
    'set_controller_reference',
    'set_owner_reference',
]
