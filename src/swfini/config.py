"""Worker configuration.

AWS credentials and region are not handled here: they are resolved by
``boto3`` from the environment, shared configuration files or instance
roles.
"""

import uuid
import socket
import typing as T
import logging as lg

from . import _util
from . import metrics as swfini_metrics

_logger = lg.getLogger(__name__)
_host_name = socket.getfqdn(socket.gethostname())
DEFAULT_THREAD_POOL_SIZE = 20
DEFAULT_POLLING_TTL = 70.0


class Configuration:
    """Worker configuration.

    Args:
        domain: default SWF domain to register executables in
        task_list: default task-list to register executables in
        identity: name of worker, used for identification, default: a
            combination of host's FQDN and a short UUID
        session: session to use for AWS communication
        metrics: metrics sink, default: discard measurements
    """

    def __init__(
            self,
            domain: str = "default",
            task_list: str = "default",
            identity: str = None,
            *,
            session: _util.AWSSession = None,
            metrics=None):
        self.domain = domain
        self.task_list = task_list
        _default_identity = "%s-%s" % (_host_name, str(uuid.uuid4())[:8])
        self.identity = identity or _default_identity
        self.session = session or _util.AWSSession()
        self.metrics = metrics or swfini_metrics.NullMetrics()

    def __str__(self):
        return "%s (%s / %s)" % (self.identity, self.domain, self.task_list)

    __repr__ = _util.easy_repr

    def for_connection(self) -> T.Dict[str, T.Any]:
        """Connection construction keyword arguments.

        Returns:
            arguments for ``swfini.connection.SWFConnection``
        """

        return {"session": self.session, "identity": self.identity}
