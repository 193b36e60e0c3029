"""Decision task execution.

A workflow is a callable taking a ``WorkflowContext``: it inspects the
execution history and adds decisions to the context. Decisions are sent
to SWF once the workflow returns.
"""

import json
import time
import typing as T
import logging as lg

from .. import _util
from .. import errors as swfini_errors
from .. import connection as swfini_connection

_logger = lg.getLogger(__name__)


class WorkflowContext:
    """Decision task context, passed to workflows.

    Args:
        task: decision task, with complete event history

    Attributes:
        decisions: decisions made so far
    """

    def __init__(self, task: T.Dict[str, T.Any]):
        self.task = task
        self.decisions: T.List[T.Dict[str, T.Any]] = []

    def __str__(self):
        _id = self.workflow_execution["workflowId"]
        return "%s - %s" % (self.workflow_type["name"], _id)

    __repr__ = _util.easy_repr

    @property
    def events(self) -> T.List[T.Dict[str, T.Any]]:
        """Workflow execution history events, oldest first."""
        return self.task.get("events", [])

    @property
    def workflow_execution(self) -> T.Dict[str, str]:
        """Workflow ID and run ID."""
        return self.task["workflowExecution"]

    @property
    def workflow_type(self) -> T.Dict[str, str]:
        """Workflow type name and version."""
        return self.task["workflowType"]

    def _events_of(self, event_type: str):
        for event in self.events:
            if event["eventType"] == event_type:
                yield event

    @_util.cached_property
    def input(self) -> _util.JSONable:
        """Workflow execution input."""
        key = "workflowExecutionStartedEventAttributes"
        for event in self._events_of("WorkflowExecutionStarted"):
            input_str = event[key].get("input")
            return json.loads(input_str) if input_str else None
        return None

    @_util.cached_property
    def _activity_ids(self) -> T.Dict[int, str]:
        """Activity IDs by scheduling event ID."""
        key = "activityTaskScheduledEventAttributes"
        return {
            e["eventId"]: e[key]["activityId"]
            for e in self._events_of("ActivityTaskScheduled")}

    @property
    def scheduled_activities(self) -> T.Set[str]:
        """IDs of activities scheduled in previous decisions."""
        return set(self._activity_ids.values())

    @_util.cached_property
    def activity_results(self) -> T.Dict[str, _util.JSONable]:
        """Completed activities' outputs, by activity ID."""
        key = "activityTaskCompletedEventAttributes"
        results = {}
        for event in self._events_of("ActivityTaskCompleted"):
            attrs = event[key]
            activity_id = self._activity_ids[attrs["scheduledEventId"]]
            result = attrs.get("result")
            results[activity_id] = json.loads(result) if result else None
        return results

    @_util.cached_property
    def activity_failures(self) -> T.Dict[str, T.Dict[str, str]]:
        """Failed activities' reasons and details, by activity ID."""
        key = "activityTaskFailedEventAttributes"
        failures = {}
        for event in self._events_of("ActivityTaskFailed"):
            attrs = event[key]
            activity_id = self._activity_ids[attrs["scheduledEventId"]]
            failures[activity_id] = {
                "reason": attrs.get("reason", ""),
                "details": attrs.get("details", "")}
        return failures

    def schedule_activity(
            self,
            name: str,
            activity_id: str,
            task_input: _util.JSONable = None,
            *,
            version: str = "1",
            task_list: str = None):
        """Decide to schedule an activity task.

        Args:
            name: activity type name
            activity_id: activity identifier, unique in this execution
            task_input: activity input, must be JSON-serialisable
            version: activity type version
            task_list: task-list to schedule in, default: activity type's
                default task-list
        """

        attrs = {
            "activityType": {"name": name, "version": version},
            "activityId": activity_id,
            "input": json.dumps(task_input)}
        if task_list is not None:
            attrs["taskList"] = {"name": task_list}
        self.decisions.append({
            "decisionType": "ScheduleActivityTask",
            "scheduleActivityTaskDecisionAttributes": attrs})

    def start_timer(self, timer_id: str, seconds: int):
        """Decide to start a timer.

        Args:
            timer_id: timer identifier, unique in this execution
            seconds: time until timer fires
        """

        self.decisions.append({
            "decisionType": "StartTimer",
            "startTimerDecisionAttributes": {
                "timerId": timer_id,
                "startToFireTimeout": str(int(seconds))}})

    def complete(self, result: _util.JSONable = None):
        """Decide to complete the workflow execution.

        Args:
            result: execution output, must be JSON-serialisable
        """

        self.decisions.append({
            "decisionType": "CompleteWorkflowExecution",
            "completeWorkflowExecutionDecisionAttributes": {
                "result": json.dumps(result)}})

    def fail(self, reason: str, details: str = ""):
        """Decide to fail the workflow execution.

        Args:
            reason: failure reason
            details: failure details
        """

        self.decisions.append({
            "decisionType": "FailWorkflowExecution",
            "failWorkflowExecutionDecisionAttributes": {
                "reason": _util.truncate(reason, 256),
                "details": _util.truncate(details, 32768)}})


class DecisionTaskProcessor:
    """Execute a decision task, sending decisions to SWF.

    Failed decision tasks are logged and not responded to, so SWF times
    them out and schedules a new decision task.

    Args:
        task: decision task
        domain: SWF domain of task
        workflow_lookup (swfini.lookup.ExecutableLookup): workflows
        middleware_chain (swfini.middleware.Chain): decision task
            middleware, wrapping all task processing
        workflow_middleware_chain (swfini.middleware.Chain): workflow
            middleware, wrapping the call of the workflow
        config (swfini.config.Configuration): worker configuration
    """

    _connection_class = swfini_connection.SWFConnection
    _context_class = WorkflowContext

    def __init__(
            self,
            task: T.Dict[str, T.Any],
            domain: str,
            workflow_lookup,
            middleware_chain,
            workflow_middleware_chain,
            config):
        self.task = task
        self.domain = domain
        self.workflow_lookup = workflow_lookup
        self.middleware_chain = middleware_chain
        self.workflow_middleware_chain = workflow_middleware_chain
        self.config = config

    def __str__(self):
        _id = self.task["workflowExecution"]["workflowId"]
        return "%s - %s" % (self.workflow_name, _id)

    __repr__ = _util.easy_repr

    @property
    def workflow_name(self) -> str:
        """Task workflow type name."""
        return self.task["workflowType"]["name"]

    @_util.cached_property
    def connection(self) -> swfini_connection.SWFConnection:
        """Connection to send decisions with."""
        return self._connection_class.from_options(
            self.config.for_connection())

    def _run_workflow(self, task: T.Dict[str, T.Any]) -> T.List[dict]:
        workflow = self.workflow_lookup.find(self.workflow_name)
        if workflow is None:
            raise swfini_errors.WorkflowNotRegistered(self.workflow_name)
        context = self._context_class(task)
        workflow(context)
        return context.decisions

    def _decide(self, task: T.Dict[str, T.Any]) -> T.List[dict]:
        return self.workflow_middleware_chain.invoke(task, self._run_workflow)

    def _respond(self, decisions: T.Optional[T.List[dict]]):
        if decisions is None:  # middleware stopped processing
            _logger.debug("No decisions made for '%s'" % self)
            return
        _logger.debug("Sending %d decisions for '%s'" % (len(decisions), self))
        self.connection.respond_decision_task_completed(
            self.task["taskToken"],
            decisions)

    def process(self):
        """Make decisions, through middleware, and send them."""
        t = time.monotonic()

        try:
            decisions = self.middleware_chain.invoke(self.task, self._decide)
        except Exception as e:
            _logger.error("Decision task '%s' failed" % self, exc_info=e)
        else:
            self._respond(decisions)

        duration_ms = int(round((time.monotonic() - t) * 1000))
        tags = {"domain": self.domain, "workflow": self.workflow_name}
        self.config.metrics.timing("decision_task.latency", duration_ms, tags)
