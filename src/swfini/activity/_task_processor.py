"""Activity task execution."""

import json
import time
import traceback
import typing as T
import logging as lg

from .. import _util
from .. import errors as swfini_errors
from .. import connection as swfini_connection

_logger = lg.getLogger(__name__)


class ActivityContext:
    """Activity task execution context, passed to activities.

    Args:
        task: activity task
        connection (swfini.connection.SWFConnection): connection to report
            heartbeats with

    Attributes:
        cancel_requested: cancellation of the task has been requested, as
            of the last heartbeat
    """

    def __init__(self, task: T.Dict[str, T.Any], connection):
        self.task = task
        self.connection = connection
        self.cancel_requested = False

    def __str__(self):
        return "%s - %s" % (self.activity_type["name"], self.activity_id)

    __repr__ = _util.easy_repr

    @property
    def task_token(self) -> str:
        """Task identifier."""
        return self.task["taskToken"]

    @property
    def activity_id(self) -> str:
        """Activity identifier, unique in the workflow execution."""
        return self.task["activityId"]

    @property
    def activity_type(self) -> T.Dict[str, str]:
        """Activity type name and version."""
        return self.task["activityType"]

    @property
    def workflow_execution(self) -> T.Dict[str, str]:
        """Workflow ID and run ID of task's workflow execution."""
        return self.task["workflowExecution"]

    def heartbeat(self, details: _util.JSONable = None) -> bool:
        """Notify SWF that the activity is still running.

        Args:
            details: progress details, must be JSON-serialisable

        Returns:
            whether cancellation of the task has been requested
        """

        _logger.debug("Sending heartbeat for '%s'" % self)
        details_str = None if details is None else json.dumps(details)
        self.cancel_requested = self.connection.record_activity_task_heartbeat(
            self.task_token,
            details=details_str)
        return self.cancel_requested


class TaskProcessor:
    """Execute an activity task, reporting the outcome to SWF.

    Activity failures are reported, not raised.

    Args:
        task: activity task
        domain: SWF domain of task
        activity_lookup (swfini.lookup.ExecutableLookup): activities
        middleware_chain (swfini.middleware.Chain): activity task
            middleware
        config (swfini.config.Configuration): worker configuration
    """

    _connection_class = swfini_connection.SWFConnection
    _context_class = ActivityContext

    def __init__(
            self,
            task: T.Dict[str, T.Any],
            domain: str,
            activity_lookup,
            middleware_chain,
            config):
        self.task = task
        self.domain = domain
        self.activity_lookup = activity_lookup
        self.middleware_chain = middleware_chain
        self.config = config

    def __str__(self):
        return "%s - %s" % (self.activity_name, self.task["activityId"])

    __repr__ = _util.easy_repr

    @property
    def activity_name(self) -> str:
        """Task activity type name."""
        return self.task["activityType"]["name"]

    @_util.cached_property
    def connection(self) -> swfini_connection.SWFConnection:
        """Connection to report task outcome with."""
        return self._connection_class.from_options(
            self.config.for_connection())

    def _execute(self, task: T.Dict[str, T.Any]) -> _util.JSONable:
        """Run the activity."""
        activity = self.activity_lookup.find(self.activity_name)
        if activity is None:
            raise swfini_errors.ActivityNotRegistered(self.activity_name)
        task_input = json.loads(task["input"]) if task.get("input") else None
        _logger.debug("Got task input: %s" % task_input)
        context = self._context_class(task, self.connection)
        return activity(context, task_input)

    def _report_exception(self, exc: Exception):
        """Report failure."""
        _logger.info("Reporting task failure for '%s'" % self, exc_info=exc)
        tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
        self.connection.respond_activity_task_failed(
            self.task["taskToken"],
            reason=type(exc).__name__,
            details="".join(tb))

    def _report_success(self, res: _util.JSONable):
        """Report success."""
        fmt = "Reporting task success for '%s' with output: %s"
        _logger.debug(fmt % (self, res))
        self.connection.respond_activity_task_completed(
            self.task["taskToken"],
            result=res)

    def process(self):
        """Execute the task, through middleware, and report the outcome."""
        t = time.monotonic()

        try:
            res = self.middleware_chain.invoke(self.task, self._execute)
        except Exception as e:
            self._report_exception(e)
        else:
            self._report_success(res)

        duration_ms = int(round((time.monotonic() - t) * 1000))
        _logger.debug("Task '%s' completed in %d ms" % (self, duration_ms))
        tags = {"domain": self.domain, "activity": self.activity_name}
        self.config.metrics.timing("activity_task.latency", duration_ms, tags)
