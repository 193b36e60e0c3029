"""Decision task polling and execution.

Workflows are plain callables, taking a workflow context and adding
decisions to it.
"""

__all__ = ["DecisionTaskProcessor", "Poller", "WorkflowContext"]

from ._decision_task_processor import DecisionTaskProcessor
from ._decision_task_processor import WorkflowContext
from ._poller import Poller
