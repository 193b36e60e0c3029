"""Activity and workflow worker.

A worker runs one poller per task kind and task-list its activities and
workflows are registered in. Pollers use threading, and the worker is
designed to be resource-managed outside of Python: it stops on
``SIGTERM`` or ``KeyboardInterrupt``, finishing started tasks first.
"""

import signal
import threading
import typing as T
import logging as lg
import collections

from . import _util
from . import lookup as swfini_lookup
from . import config as swfini_config
from . import activity as swfini_activity
from . import workflow as swfini_workflow
from . import middleware as swfini_middleware
from . import connection as swfini_connection

_logger = lg.getLogger(__name__)
_Type = collections.namedtuple("_Type", ("name", "version"))


class Worker:
    """Poll for and execute activity and decision tasks.

    Args:
        config: worker configuration
        options: poller options, ``polling_ttl`` and ``thread_pool_size``

    Attributes:
        activities: activity lookups, by domain and task-list
        workflows: workflow lookups, by domain and task-list
        activity_middleware: activity task middleware configuration
        decision_middleware: decision task middleware configuration
        workflow_middleware: workflow middleware configuration
        pollers: started pollers
    """

    _activity_poller_class = swfini_activity.Poller
    _workflow_poller_class = swfini_workflow.Poller
    _connection_class = swfini_connection.SWFConnection

    def __init__(
            self,
            config: swfini_config.Configuration = None,
            options: T.Dict[str, T.Any] = None):
        self.config = config or swfini_config.Configuration()
        self.options = options or {}

        _dd = collections.defaultdict
        self.activities = _dd(swfini_lookup.ExecutableLookup)
        self.workflows = _dd(swfini_lookup.ExecutableLookup)
        self.activity_middleware: T.List[swfini_middleware.Entry] = []
        self.decision_middleware: T.List[swfini_middleware.Entry] = []
        self.workflow_middleware: T.List[swfini_middleware.Entry] = []
        self.pollers = []
        self._types = _dd(list)
        self._stopped = threading.Event()

    def __str__(self):
        return "%s '%s'" % (type(self).__name__, self.config.identity)

    __repr__ = _util.easy_repr

    def _register(
            self,
            kind: str,
            lookups: T.Dict[T.Tuple[str, str], swfini_lookup.ExecutableLookup],
            fn: T.Callable,
            name: str = None,
            version: str = "1",
            domain: str = None,
            task_list: str = None):
        name = name or fn.__name__
        domain = domain or self.config.domain
        task_list = task_list or self.config.task_list
        _util.assert_valid_name(name)
        lookups[domain, task_list].add(name, fn)
        self._types[kind, domain, task_list].append(_Type(name, version))

    def register_activity(
            self,
            fn: T.Callable,
            name: str = None,
            version: str = "1",
            *,
            domain: str = None,
            task_list: str = None):
        """Register an activity implementation.

        Args:
            fn: activity, called with the activity context and task input
            name: activity type name, default: ``fn``'s name
            version: activity type version
            domain: SWF domain, default: configured domain
            task_list: task-list, default: configured task-list
        """

        self._register(
            "activity",
            self.activities,
            fn,
            name=name,
            version=version,
            domain=domain,
            task_list=task_list)

    def register_workflow(
            self,
            fn: T.Callable,
            name: str = None,
            version: str = "1",
            *,
            domain: str = None,
            task_list: str = None):
        """Register a workflow implementation.

        Args:
            fn: workflow, called with the workflow context
            name: workflow type name, default: ``fn``'s name
            version: workflow type version
            domain: SWF domain, default: configured domain
            task_list: task-list, default: configured task-list
        """

        self._register(
            "workflow",
            self.workflows,
            fn,
            name=name,
            version=version,
            domain=domain,
            task_list=task_list)

    def add_activity_middleware(self, middleware_class: T.Type, *args):
        """Add middleware wrapping activity task processing.

        Args:
            middleware_class: middleware type
            *args: middleware construction arguments
        """

        entry = swfini_middleware.Entry(middleware_class, *args)
        self.activity_middleware.append(entry)

    def add_decision_middleware(self, middleware_class: T.Type, *args):
        """Add middleware wrapping decision task processing.

        Args:
            middleware_class: middleware type
            *args: middleware construction arguments
        """

        entry = swfini_middleware.Entry(middleware_class, *args)
        self.decision_middleware.append(entry)

    def add_workflow_middleware(self, middleware_class: T.Type, *args):
        """Add middleware wrapping workflow calls in decision tasks.

        Args:
            middleware_class: middleware type
            *args: middleware construction arguments
        """

        entry = swfini_middleware.Entry(middleware_class, *args)
        self.workflow_middleware.append(entry)

    def register_types(self):
        """Register domains, activity types and workflow types with SWF."""
        connection = self._connection_class.from_options(
            self.config.for_connection())
        domains = {domain for _, domain, _ in self._types}
        [connection.register_domain(domain) for domain in sorted(domains)]
        for (kind, domain, task_list), types in self._types.items():
            register = {
                "activity": connection.register_activity_type,
                "workflow": connection.register_workflow_type}[kind]
            for type_ in types:
                register(domain, type_.name, type_.version, task_list)

    def _build_pollers(self) -> list:
        pollers = []
        for (domain, task_list), lookup in self.workflows.items():
            poller = self._workflow_poller_class(
                domain,
                task_list,
                lookup,
                self.config,
                self.decision_middleware,
                self.workflow_middleware,
                self.options)
            pollers.append(poller)
        for (domain, task_list), lookup in self.activities.items():
            poller = self._activity_poller_class(
                domain,
                task_list,
                lookup,
                self.config,
                self.activity_middleware,
                self.options)
            pollers.append(poller)
        return pollers

    def start(self):
        """Start polling.

        Raises:
            RuntimeError: nothing registered, or already started
        """

        if not self.activities and not self.workflows:
            raise RuntimeError("No activities or workflows registered")
        if self.pollers:
            raise RuntimeError("%s has already been started" % self)
        _logger.info("%s: starting polling" % self)
        self.pollers = self._build_pollers()
        [p.start() for p in self.pollers]

    def stop(self):
        """Stop polling. Doesn't wait for started tasks: use ``join``."""
        self._stopped.set()
        [p.stop() for p in self.pollers]

    def _wait(self):
        while not self._stopped.wait(timeout=1.0):
            pass
        [p.wait() for p in self.pollers]

    def join(self):
        """Block until stopped, and started tasks are finished."""
        _logger.debug("%s: waiting on polling to finish" % self)
        try:
            self._wait()
        except KeyboardInterrupt:
            _logger.info("Quitting polling due to KeyboardInterrupt")
            self.stop()
            [p.wait() for p in self.pollers]

    def _handle_sigterm(self, signum, frame):
        self.stop()

    def run(self):
        """Run worker to poll for and execute tasks, until stopped."""
        if threading.current_thread() is threading.main_thread():
            signal.signal(signal.SIGTERM, self._handle_sigterm)
        self.start()
        self.join()
