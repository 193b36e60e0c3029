"""Activity task polling."""

import typing as T
import logging as lg

from .. import _poller
from . import _task_processor

_logger = lg.getLogger(__name__)


class Poller(_poller.Poller):
    """Activity task-list poller.

    Args:
        domain: SWF domain of task-list
        task_list: task-list to poll
        lookup (swfini.lookup.ExecutableLookup): activities
        config (swfini.config.Configuration): worker configuration
        middleware (list[swfini.middleware.Entry]): activity task
            middleware configuration
        options: poller options, ``polling_ttl`` and ``thread_pool_size``
        metrics: measurement sink, default: ``config.metrics``
        logger: logger, default: this module's logger
    """

    kind = "activity"
    metric_name = "activity_poller.time_since_last_poll"
    _poll_failure_message = "Unable to poll for an activity task: %r"
    _task_processor_class = _task_processor.TaskProcessor

    def __init__(
            self,
            domain,
            task_list,
            lookup,
            config=None,
            middleware=(),
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
        self._middleware_chain = None

    def _build_chains(self):
        self._middleware_chain = self._chain_class(self.middleware)

    def _poll(self) -> T.Optional[dict]:
        return self._connection.poll_for_activity_task(
            domain=self.domain,
            task_list=self.task_list)

    def _is_valid_task(self, task) -> bool:
        return bool(task and task.get("activityId"))

    def _process(self, task: dict):
        processor = self._task_processor_class(
            task,
            self.domain,
            self.lookup,
            self._middleware_chain,
            self.config)
        processor.process()
