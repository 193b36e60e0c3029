"""Decision task polling."""

import typing as T
import logging as lg

from .. import _poller
from . import _decision_task_processor

_logger = lg.getLogger(__name__)


class Poller(_poller.Poller):
    """Decision task-list poller.

    Args:
        domain: SWF domain of task-list
        task_list: task-list to poll
        lookup (swfini.lookup.ExecutableLookup): workflows
        config (swfini.config.Configuration): worker configuration
        middleware (list[swfini.middleware.Entry]): decision task
            middleware configuration
        workflow_middleware (list[swfini.middleware.Entry]): workflow
            middleware configuration
        options: poller options, ``polling_ttl`` and ``thread_pool_size``
        metrics: measurement sink, default: ``config.metrics``
        logger: logger, default: this module's logger
    """

    kind = "workflow"
    metric_name = "workflow_poller.time_since_last_poll"
    _poll_failure_message = "Unable to poll for a decision task: %r"
    _task_processor_class = _decision_task_processor.DecisionTaskProcessor

    def __init__(
            self,
            domain,
            task_list,
            lookup,
            config=None,
            middleware=(),
            workflow_middleware=(),
            options=None,
            *,
            metrics=None,
            logger=None):
        super().__init__(
            domain,
            task_list,
            lookup,
            config=config,
            middleware=middleware,
            options=options,
            metrics=metrics,
            logger=logger or _logger)
        self.workflow_middleware = list(workflow_middleware)
        self._middleware_chain = None
        self._workflow_middleware_chain = None

    def _build_chains(self):
        self._middleware_chain = self._chain_class(self.middleware)
        self._workflow_middleware_chain = self._chain_class(
            self.workflow_middleware)

    def _poll(self) -> T.Optional[dict]:
        return self._connection.poll_for_decision_task(
            domain=self.domain,
            task_list=self.task_list)

    def _is_valid_task(self, task) -> bool:
        return bool(task and task.get("workflowExecution"))

    def _process(self, task: dict):
        processor = self._task_processor_class(
            task,
            self.domain,
            self.lookup,
            self._middleware_chain,
            self._workflow_middleware_chain,
            self.config)
        processor.process()
