"""Activity task polling and execution.

Activities are plain callables, taking an activity context and the
JSON-decoded task input, and returning JSON-serialisable output.
"""

__all__ = ["ActivityContext", "Poller", "TaskProcessor"]

from ._task_processor import ActivityContext
from ._task_processor import TaskProcessor
from ._poller import Poller
