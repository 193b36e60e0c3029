"""Simple Workflow Service activity and decision workers."""

import importlib.metadata

try:
    __version__ = importlib.metadata.version(__name__)
except importlib.metadata.PackageNotFoundError:
    __version__ = None

__all__ = [
    "AWSSession",
    "ActivityContext",
    "CLI",
    "Configuration",
    "ExecutableLookup",
    "Middleware",
    "ThreadPool",
    "Worker",
    "WorkflowContext"]

from ._util import AWSSession
from .activity import ActivityContext
from ._cli import CLI
from .config import Configuration
from .lookup import ExecutableLookup
from .middleware import Middleware
from .thread_pool import ThreadPool
from .worker import Worker
from .workflow import WorkflowContext

from . import activity
from . import config
from . import connection
from . import errors
from . import lookup
from . import metrics
from . import middleware
from . import thread_pool
from . import worker
from . import workflow

import logging as lg
lg.getLogger(__name__).addHandler(lg.NullHandler())
