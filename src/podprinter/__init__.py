# All types a user would care about are made available in the top level package.
# A user should never have to import anything from sub modules.

from .exceptions import *  # noqa: F403 public API
from .resources import *  # noqa: F403 public API
from .events import *  # noqa: F403 public API
from .source import *  # noqa: F403 public API
from .controller import *  # noqa: F403 public API
from .client import *  # noqa: F403 public API
from .manager import Manager

# Singleton manager instance.
manager = Manager()

# Easy access to start the manager.
run = manager.run

# Easy access to the controller builder.
controller = manager.controller
