"""Executable registry.

Pollers share a lookup between threads, and only read it: register
everything before starting pollers.
"""

import typing as T
import logging as lg

_logger = lg.getLogger(__name__)


class ExecutableLookup:
    """Executables by type name."""
    def __init__(self):
        self._executables: T.Dict[str, T.Callable] = {}

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, sorted(self._executables))

    def __contains__(self, name):
        return name in self._executables

    def __len__(self):
        return len(self._executables)

    @property
    def names(self) -> T.List[str]:
        """Registered type names."""
        return sorted(self._executables)

    def add(self, name: str, executable: T.Callable):
        """Register an executable.

        Args:
            name: type name to register under
            executable: implementation

        Raises:
            ValueError: name already registered
        """

        if name in self._executables:
            raise ValueError("Executable '%s' is already registered" % name)
        _logger.debug("Registering '%s': %s" % (name, executable))
        self._executables[name] = executable

    def find(self, name: str) -> T.Optional[T.Callable]:
        """Get an executable.

        Args:
            name: type name of executable

        Returns:
            registered executable, or ``None`` if not found
        """

        return self._executables.get(name)
