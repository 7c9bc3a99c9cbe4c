"""The Hello operator.

Importing this package registers its controller with the podprinter manager.
"""

from .resource import Hello, HelloSpec
from .objects import build_deployment, build_service, labels_for
from .controller import hello_ctl, reconcile

__all__ = [
    'Hello',
    'HelloSpec',
    'build_deployment',
    'build_service',
    'hello_ctl',
    'labels_for',
    'reconcile',
]
