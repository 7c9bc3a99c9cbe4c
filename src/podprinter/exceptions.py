from lightkube.core import resource as lkr
from lightkube.core.exceptions import ApiError

__all__ = [
    'AlreadyOwnedError',
    'ApiError',
    'ApiObjectNotFound',
    'Error',
    'FatalError',
    'HttpError',
    'ObjectError',
    'ObjectNotFound',
    'PermanentError',
    'Requeue',
    'TemporaryError',
    'iterate_errors',
]


def iterate_errors(exc):
    """
    iterate over all non-exceptiongroup parts of an exception(group)
    """
    if isinstance(exc, BaseExceptionGroup):
        for e in exc.exceptions:
            yield from iterate_errors(e)
    else:
        yield exc


def _describe(api_version, kind, name, namespace=None):
    out = []
    if api_version is not None and kind is not None:
        out.append(f'{api_version}/{kind}')
    if namespace is not None:
        out.append(f'{namespace}/{name}')
    else:
        out.append(name)
    return ' '.join(out)


class FatalError(Exception):
    """An error the operator can not recover from."""


class Error(Exception):
    """Base class for all podprinter exceptions."""

    def __init__(self, message=None):
        self.message = message

    def __str__(self):
        return self.__repr__()

    def __repr__(self):
        return f'{self.__class__.__name__}: {self.message}'


class HttpError(Error):
    """A transport level error while talking to the api server."""

    def __init__(self, http_method, url, status_code, message=None):
        self.http_method = http_method
        self.url = url
        self.status_code = status_code
        self.message = message

    def __str__(self):
        if self.message:
            return self.message
        return f'{self.http_method} to {self.url} failed with status: {self.status_code}'


class ObjectError(Error):
    def __init__(self, obj):
        self.obj = obj

    def __repr__(self):
        obj = self.obj
        msg = _describe(
            getattr(obj, 'apiVersion', None),
            getattr(obj, 'kind', None),
            obj.metadata.name,
            namespace=getattr(obj.metadata, 'namespace', None),
        )
        return f'{self.__class__.__name__}: {msg}'


class ObjectNotFound(ObjectError):
    pass


class ApiObjectNotFound(ObjectNotFound):
    """The api server answered a get with 404."""

    def __init__(self, resource, name, namespace=None):
        self.resource = resource
        self.name = name
        self.namespace = namespace

    def __repr__(self):
        info = lkr.api_info(self.resource)
        msg = _describe(
            info.resource.api_version,
            info.resource.kind,
            self.name,
            namespace=self.namespace,
        )
        return f'{self.__class__.__name__}: {msg}'


class AlreadyOwnedError(ObjectError):
    """The object already has a controller owner reference to someone else."""

    def __init__(self, obj, ref):
        super().__init__(obj)
        self.ref = ref

    def __repr__(self):
        return f'{super().__repr__()} controlled by: {self.ref.kind}/{self.ref.name}'


class TemporaryError(Error):
    """Raised by a reconcile function when a recoverable error occurs.
    The request will be requeued after the given delay."""

    def __init__(self, message=None, delay=10):
        super().__init__(message)
        self.delay = delay

    def __repr__(self):
        return f'{self.__class__.__name__}: {self.message} delay: {self.delay}'


class PermanentError(Error):
    """Raised by a reconcile function when a non-recoverable error occurs."""


class Requeue(Error):
    """Raised by a reconcile function to requeue a request.
    The request will be requeued after the given delay, or right away
    if no delay is given."""

    def __init__(self, after=None):
        super().__init__()
        self.after = after

    def __repr__(self):
        return f'{self.__class__.__name__}: after: {self.after}'
