import dataclasses

__all__ = [
    'CreateEvent',
    'DeleteEvent',
    'Event',
    'UpdateEvent',
    'event_from_watch',
]


class Event:
    def __init_subclass__(cls, **kwargs):
        """Make subclasses available in the class namespace.
        Allows patterns like the following without importing the event classes:

        ```
        match type(event):
            case event.CreateEvent:
                pass
            case event.UpdateEvent:
                pass
        ```
        """
        super().__init_subclass__(**kwargs)
        setattr(Event, cls.__name__, cls)

    def __repr__(self):
        return f'<{self.__class__.__name__} {self.obj!r}>'


@dataclasses.dataclass(repr=False)
class CreateEvent(Event):
    obj: object


@dataclasses.dataclass(repr=False)
class UpdateEvent(Event):
    # Events come straight from a watch, without a cache there is no old object.
    old: object
    new: object

    def __repr__(self):
        return f'<{self.__class__.__name__} {self.old!r} {self.new!r}>'


@dataclasses.dataclass(repr=False)
class DeleteEvent(Event):
    obj: object


def event_from_watch(operation, obj):
    """Map a watch operation to an event, None for operations we ignore."""
    match operation:
        case 'ADDED':
            return CreateEvent(obj)
        case 'MODIFIED':
            return UpdateEvent(None, obj)
        case 'DELETED':
            return DeleteEvent(obj)
    return None
