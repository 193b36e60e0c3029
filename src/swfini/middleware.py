"""Task-processing middleware.

Middleware wraps task processing with common behaviour, eg error
reporting or tracing. Configure middleware with entries, each a
middleware class and its construction arguments:

    worker.add_activity_middleware(LogTaskMiddleware, "my-app")

Each middleware instance wraps the next stage of processing. The first
configured middleware runs first, and the task processor runs last.
"""

import typing as T
import logging as lg

from . import _util

_logger = lg.getLogger(__name__)
Stage = T.Callable[[T.Any], T.Any]


class Middleware:
    """Task-processing middleware base.

    Override ``call``; call ``next_stage(task)`` to continue processing,
    or return without calling it to stop processing the task.
    """

    def wrap(self, next_stage: Stage) -> Stage:
        """Wrap a processing stage.

        Args:
            next_stage: processing to wrap

        Returns:
            wrapped processing
        """

        def stage(task):
            return self.call(task, next_stage)
        return stage

    def call(self, task, next_stage: Stage):
        """Process a task.

        Args:
            task: task being processed
            next_stage: remaining processing

        Returns:
            processing result
        """

        return next_stage(task)


class Entry:
    """Middleware configuration.

    Args:
        middleware_class: middleware type, with a ``wrap`` method
        args: middleware construction arguments
    """

    def __init__(self, middleware_class: T.Type, *args):
        self.middleware_class = middleware_class
        self.args = args

    def __repr__(self):
        args_str = "".join(", %r" % a for a in self.args)
        _name = self.middleware_class.__name__
        return "%s(%s%s)" % (type(self).__name__, _name, args_str)

    def __eq__(self, other):
        if not isinstance(other, Entry):
            return NotImplemented
        return (
            self.middleware_class is other.middleware_class and
            self.args == other.args)

    def init_middleware(self):
        """Construct the configured middleware."""
        return self.middleware_class(*self.args)


class Chain:
    """Middleware composed around a terminal processing stage.

    Middleware instances are constructed once, on chain construction.

    Args:
        entries: middleware configuration, outermost first
    """

    def __init__(self, entries: T.Sequence[Entry] = ()):
        self.entries = tuple(entries)
        self.middleware = [e.init_middleware() for e in self.entries]

    def __len__(self):
        return len(self.middleware)

    __repr__ = _util.easy_repr

    def wrap(self, terminal: Stage) -> Stage:
        """Compose middleware around processing.

        Args:
            terminal: innermost processing

        Returns:
            composed processing
        """

        stage = terminal
        for middleware in reversed(self.middleware):
            stage = middleware.wrap(stage)
        return stage

    def invoke(self, task, terminal: Stage):
        """Process a task through the middleware.

        Args:
            task: task to process
            terminal: innermost processing

        Returns:
            processing result, or whatever short-circuiting middleware
                returned
        """

        return self.wrap(terminal)(task)
