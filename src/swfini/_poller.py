"""Task polling control loop.

A poller polls one task-list for one kind of task. Each poll waits for
a free pool thread first, so tasks are only received when they can be
started immediately.
"""

import time
import threading
import typing as T
import logging as lg
import functools as ft

from . import middleware as swfini_middleware
from . import thread_pool as swfini_thread_pool
from . import connection as swfini_connection
from . import config as swfini_config

_logger = lg.getLogger(__name__)


class Poller:
    """Task-list poller, executing tasks in a thread pool.

    Args:
        domain: SWF domain of task-list
        task_list: task-list to poll
        lookup (swfini.lookup.ExecutableLookup): executables to process
            tasks with
        config: worker configuration
        middleware: task-processing middleware configuration
        options: poller options: ``polling_ttl`` is the poll time-out
            (seconds), ``thread_pool_size`` is the maximum number of tasks
            processed at once
        metrics: measurement sink, default: ``config.metrics``
        logger: logger, default: this module's logger

    Attributes:
        kind: polled task kind
        metric_name: time between polls measurement name
    """

    kind: str = None
    metric_name: str = None
    _poll_failure_message: str = None
    _pool_class = swfini_thread_pool.ThreadPool
    _chain_class = swfini_middleware.Chain
    _connection_class = swfini_connection.SWFConnection

    def __init__(
            self,
            domain: str,
            task_list: str,
            lookup,
            config: swfini_config.Configuration = None,
            middleware: T.Sequence[swfini_middleware.Entry] = (),
            options: T.Dict[str, T.Any] = None,
            *,
            metrics=None,
            logger: lg.Logger = None):
        self.domain = domain
        self.task_list = task_list
        self.lookup = lookup
        self.config = config or swfini_config.Configuration()
        self.middleware = list(middleware)
        self.options = options or {}
        self.metrics = metrics or self.config.metrics
        self.logger = logger or _logger

        self._shutting_down = threading.Event()
        self._started = False
        self._thread = None
        self._thread_pool = None
        self._connection = None

    def __str__(self):
        return "%s poller (%s / %s)" % (self.kind, self.domain, self.task_list)

    def __repr__(self):
        fmt = "%s(%r, %r, %r)"
        args = (type(self).__name__, self.domain, self.task_list, self.lookup)
        return fmt % args

    @property
    def thread_pool_size(self) -> int:
        """Maximum number of tasks processed at once."""
        return self.options.get(
            "thread_pool_size",
            swfini_config.DEFAULT_THREAD_POOL_SIZE)

    def _is_shutting_down(self) -> bool:
        return self._shutting_down.is_set()

    def _build_chains(self):
        """Construct middleware chains, once per ``start``."""
        raise NotImplementedError

    def _poll(self) -> T.Optional[dict]:
        """Poll for a task."""
        raise NotImplementedError

    def _is_valid_task(self, task: T.Optional[dict]) -> bool:
        """Check task is processable."""
        raise NotImplementedError

    def _process(self, task: dict):
        """Process a task, run in a pool thread."""
        raise NotImplementedError

    def _poll_for_task(self) -> T.Optional[dict]:
        try:
            return self._poll()
        except Exception as e:
            self.logger.error(self._poll_failure_message % e)
            return None

    def _poll_loop(self):
        last_poll_time = time.monotonic()
        tags = {"domain": self.domain, "task_list": self.task_list}

        while True:
            self._thread_pool.wait_for_available_threads()

            if self._is_shutting_down():
                return

            poll_time = time.monotonic()
            time_diff_ms = int(round((poll_time - last_poll_time) * 1000))
            self.metrics.timing(self.metric_name, time_diff_ms, tags)
            last_poll_time = poll_time

            _fmt = "Polling for %s tasks (%s / %s)"
            self.logger.debug(_fmt % (self.kind, self.domain, self.task_list))

            task = self._poll_for_task()
            if not self._is_valid_task(task):
                continue

            self._thread_pool.schedule(ft.partial(self._process, task))

    def start(self):
        """Start polling, in a background thread.

        Raises:
            RuntimeError: poller was already started
        """

        if self._started:
            raise RuntimeError("%s has already been started" % self)
        self._started = True

        self._connection = self._connection_class.from_options(
            self.config.for_connection(),
            self.options)
        self._thread_pool = self._pool_class(self.thread_pool_size)
        self._build_chains()

        self.logger.info("Starting %s" % self)
        self._thread = threading.Thread(
            target=self._poll_loop,
            name="swfini-%s-poller" % self.kind)
        self._thread.start()

    def stop(self):
        """Stop polling, after any current poll.

        Doesn't wait for polling to finish: use ``wait``.
        """

        if self._shutting_down.is_set():
            return
        self._shutting_down.set()

        # This may be called in a signal handler, where logging can deadlock
        _msg = "Shutting down %s poller" % self.kind
        log_thread = threading.Thread(
            target=self.logger.info,
            args=(_msg,),
            daemon=True)
        log_thread.start()

    def wait(self):
        """Block until polling has stopped and started tasks are finished.

        Call ``stop`` first, or this blocks forever.
        """

        if self._thread is not None:
            self._thread.join()
        thread_pool, self._thread_pool = self._thread_pool, None
        if thread_pool is not None:
            thread_pool.shutdown()
