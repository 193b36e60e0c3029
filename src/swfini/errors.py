"""Worker error types."""

import logging as lg

_logger = lg.getLogger(__name__)


class SwfiniError(Exception):
    """Base ``swfini`` exception."""


class ActivityNotRegistered(SwfiniError):
    """Polled activity task's type has no registered implementation."""
    def __init__(self, name: str, *args):
        msg = "Activity '%s' is not registered with this worker" % name
        super().__init__(msg, *args)
        self.name = name


class WorkflowNotRegistered(SwfiniError):
    """Polled decision task's workflow type has no registered implementation.
    """

    def __init__(self, name: str, *args):
        msg = "Workflow '%s' is not registered with this worker" % name
        super().__init__(msg, *args)
        self.name = name
