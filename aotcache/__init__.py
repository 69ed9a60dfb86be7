"""aotcache: transparent ahead-of-time cache acquisition by self-relaunch.

The first run relaunches itself in record mode, the recording run builds
the cache when it exits, and every later run finds the cache and proceeds:
  - ``enable()``: call once, early in process startup
  - ``RelaunchController``: the same state machine with injectable
    invocation descriptor, spawner and exit hooks
  - ``aotcache`` console script: plan, status and enable commands
"""

__version__ = "0.1.0"
__description__ = "Self-relaunching ahead-of-time cache controller"

from aotcache.core.controller import RelaunchController, enable
from aotcache.models.invocation import InvocationDescriptor
from aotcache.models.phases import Phase

__all__ = ["InvocationDescriptor", "Phase", "RelaunchController", "enable", "__version__"]
