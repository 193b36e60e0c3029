"""SWF service communication.

Task polls are long-polls: SWF holds the request for up to a minute
waiting for a task, then returns a response with an empty task token.
"""

import json
import typing as T
import logging as lg

from botocore import config as botocore_config
from botocore import exceptions as bc_exc

from . import _util
from . import config as swfini_config

_logger = lg.getLogger(__name__)
MAX_REASON_LENGTH = 256
MAX_DETAILS_LENGTH = 32768
_already_exists_codes = ("DomainAlreadyExistsFault", "TypeAlreadyExistsFault")


class SWFConnection:
    """SWF API connection.

    Args:
        session: session to use for AWS communication
        identity: name of worker polling for tasks
        polling_ttl: poll request read time-out (seconds)
    """

    def __init__(
            self,
            session: _util.AWSSession = None,
            identity: str = None,
            polling_ttl: float = swfini_config.DEFAULT_POLLING_TTL):
        self.session = session or _util.AWSSession()
        self.identity = identity
        self.polling_ttl = polling_ttl

    __repr__ = _util.easy_repr

    @classmethod
    def from_options(
            cls,
            connection_options: T.Dict[str, T.Any],
            poller_options: T.Dict[str, T.Any] = None
    ) -> "SWFConnection":
        """Construct connection from configuration.

        Args:
            connection_options: connection arguments, see
                ``swfini.config.Configuration.for_connection``
            poller_options: poller options, using ``polling_ttl``

        Returns:
            new connection
        """

        poller_options = poller_options or {}
        polling_ttl = poller_options.get(
            "polling_ttl",
            swfini_config.DEFAULT_POLLING_TTL)
        return cls(polling_ttl=polling_ttl, **connection_options)

    @_util.cached_property
    def client(self):
        """SWF client."""
        return self.session.client("swf")

    @_util.cached_property
    def poll_client(self):
        """SWF client, with time-out to allow for long-polling."""
        client_config = botocore_config.Config(
            read_timeout=self.polling_ttl,
            retries={"max_attempts": 0})
        return self.session.client("swf", config=client_config)

    def _poll(self, poll_fn: T.Callable, **kwargs) -> T.Optional[dict]:
        if self.identity is not None:
            kwargs["identity"] = self.identity
        try:
            resp = _util.collect_paginated(poll_fn, **kwargs)
        except bc_exc.ReadTimeoutError:
            _logger.debug("Poll timed out")
            return None
        if not resp.get("taskToken"):
            return None
        resp.pop("ResponseMetadata", None)
        return resp

    def poll_for_activity_task(
            self,
            domain: str,
            task_list: str
    ) -> T.Optional[dict]:
        """Long-poll for an activity task.

        Args:
            domain: SWF domain
            task_list: task-list to poll

        Returns:
            activity task, or ``None`` if none became available
        """

        return self._poll(
            self.poll_client.poll_for_activity_task,
            domain=domain,
            taskList={"name": task_list})

    def poll_for_decision_task(
            self,
            domain: str,
            task_list: str
    ) -> T.Optional[dict]:
        """Long-poll for a decision task, with its full history.

        Args:
            domain: SWF domain
            task_list: task-list to poll

        Returns:
            decision task, or ``None`` if none became available
        """

        return self._poll(
            self.poll_client.poll_for_decision_task,
            domain=domain,
            taskList={"name": task_list})

    def record_activity_task_heartbeat(
            self,
            task_token: str,
            details: str = None
    ) -> bool:
        """Notify SWF that an activity task is progressing.

        Args:
            task_token: activity task identifier
            details: progress details

        Returns:
            whether cancellation of the task has been requested
        """

        kwargs = {"taskToken": task_token}
        if details is not None:
            kwargs["details"] = _util.truncate(details, 2048)
        resp = self.client.record_activity_task_heartbeat(**kwargs)
        return resp["cancelRequested"]

    def respond_activity_task_completed(
            self,
            task_token: str,
            result: _util.JSONable = None):
        """Report activity task success.

        Args:
            task_token: activity task identifier
            result: activity output
        """

        self.client.respond_activity_task_completed(
            taskToken=task_token,
            result=json.dumps(result))

    def respond_activity_task_failed(
            self,
            task_token: str,
            reason: str,
            details: str = ""):
        """Report activity task failure.

        Args:
            task_token: activity task identifier
            reason: failure reason
            details: failure details
        """

        self.client.respond_activity_task_failed(
            taskToken=task_token,
            reason=_util.truncate(reason, MAX_REASON_LENGTH),
            details=_util.truncate(details, MAX_DETAILS_LENGTH))

    def respond_decision_task_completed(
            self,
            task_token: str,
            decisions: T.List[T.Dict[str, T.Any]],
            execution_context: str = None):
        """Send decision task decisions.

        Args:
            task_token: decision task identifier
            decisions: decisions made
            execution_context: workflow execution context to store
        """

        kwargs = {"taskToken": task_token, "decisions": decisions}
        if execution_context is not None:
            kwargs["executionContext"] = execution_context
        self.client.respond_decision_task_completed(**kwargs)

    def _register(self, register_fn: T.Callable, description: str, **kwargs):
        try:
            register_fn(**kwargs)
        except bc_exc.ClientError as e:
            if e.response["Error"]["Code"] not in _already_exists_codes:
                raise
            _logger.info("%s is already registered" % description)
            return
        _logger.info("Registered %s" % description)

    def register_domain(self, domain: str, retention_days: int = 30):
        """Register a domain with SWF.

        Args:
            domain: domain name
            retention_days: workflow execution history retention period
        """

        self._register(
            self.client.register_domain,
            "domain '%s'" % domain,
            name=domain,
            workflowExecutionRetentionPeriodInDays=str(retention_days))

    def register_activity_type(
            self,
            domain: str,
            name: str,
            version: str,
            task_list: str):
        """Register an activity type with SWF.

        Args:
            domain: domain to register in
            name: activity type name
            version: activity type version
            task_list: default task-list of activity tasks
        """

        self._register(
            self.client.register_activity_type,
            "activity '%s' (%s) in '%s'" % (name, version, domain),
            domain=domain,
            name=name,
            version=version,
            defaultTaskList={"name": task_list},
            defaultTaskScheduleToStartTimeout="NONE",
            defaultTaskStartToCloseTimeout="NONE",
            defaultTaskScheduleToCloseTimeout="NONE",
            defaultTaskHeartbeatTimeout="NONE")

    def register_workflow_type(
            self,
            domain: str,
            name: str,
            version: str,
            task_list: str,
            execution_timeout: int = 86400):
        """Register a workflow type with SWF.

        Args:
            domain: domain to register in
            name: workflow type name
            version: workflow type version
            task_list: default task-list of decision tasks
            execution_timeout: default execution time-out (seconds)
        """

        self._register(
            self.client.register_workflow_type,
            "workflow '%s' (%s) in '%s'" % (name, version, domain),
            domain=domain,
            name=name,
            version=version,
            defaultTaskList={"name": task_list},
            defaultExecutionStartToCloseTimeout=str(execution_timeout),
            defaultTaskStartToCloseTimeout="60",
            defaultChildPolicy="TERMINATE")
