"""Bounded worker-thread pool.

Not a job queue: producers wait for a free thread before handing over
work, so a poller never receives more tasks than it can start.
"""

import queue
import threading
import typing as T
import logging as lg

_logger = lg.getLogger(__name__)
_stop = object()


class ThreadPool:
    """Fixed number of threads running scheduled functions.

    Args:
        size: number of threads, and so maximum concurrent functions
    """

    def __init__(self, size: int):
        if size < 1:
            raise ValueError("Thread pool size must be positive: %s" % size)
        self.size = size

        self._active = 0
        self._shutdown = False
        self._available = threading.Condition()
        self._queue = queue.Queue()
        self._threads = [
            threading.Thread(
                target=self._worker,
                name="swfini-pool-%d" % j,
                daemon=True)
            for j in range(size)]
        [t.start() for t in self._threads]

    def __str__(self):
        return "%d / %d threads active" % (self._active, self.size)

    def __repr__(self):
        return "%s(%d)" % (type(self).__name__, self.size)

    @property
    def active(self) -> int:
        """Number of threads running a function."""
        return self._active

    def wait_for_available_threads(self, timeout: float = None) -> bool:
        """Block until a thread is free to run a function.

        Also unblocks once shutdown is requested.

        Args:
            timeout: maximum time to wait (seconds), default: no limit

        Returns:
            whether a thread is available
        """

        with self._available:
            self._available.wait_for(
                lambda: self._active < self.size or self._shutdown,
                timeout=timeout)
            return self._active < self.size

    def schedule(self, fn: T.Callable[[], T.Any]):
        """Run a function on a pool thread.

        Args:
            fn: function to run, with no arguments

        Raises:
            RuntimeError: pool is shut down
        """

        with self._available:
            if self._shutdown:
                raise RuntimeError("Can't schedule on a shut-down thread pool")
            self._active += 1
        self._queue.put(fn)

    def _run(self, fn: T.Callable[[], T.Any]):
        """Run a scheduled function, then free its thread."""
        try:
            fn()
        except Exception as e:
            _logger.error("Scheduled function %r failed" % fn, exc_info=e)
        finally:
            with self._available:
                self._active -= 1
                self._available.notify_all()

    def _worker(self):
        while True:
            fn = self._queue.get()
            if fn is _stop:
                break
            self._run(fn)

    def shutdown(self):
        """Stop accepting functions, and wait for scheduled functions."""
        with self._available:
            if self._shutdown:
                return
            self._shutdown = True
            self._available.notify_all()
        _logger.debug("Shutting down thread pool (%s)" % self)
        [self._queue.put(_stop) for _ in self._threads]
        [t.join() for t in self._threads]
