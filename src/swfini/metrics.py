"""Measurement sinks.

A sink has one method, ``timing(name, duration_ms, tags)``, called from
poller and task-processing threads.
"""

import datetime
import typing as T
import logging as lg

from . import _util

_logger = lg.getLogger(__name__)


class NullMetrics:
    """Discard all measurements."""
    def __repr__(self):
        return type(self).__name__ + "()"

    def timing(self, name: str, duration_ms: int, tags: T.Dict[str, str]):
        pass


class LoggingMetrics:
    """Log measurements.

    Args:
        level: logging level to log measurements at
    """

    def __init__(self, level: int = lg.DEBUG):
        self.level = level

    __repr__ = _util.easy_repr

    def timing(self, name: str, duration_ms: int, tags: T.Dict[str, str]):
        tags_str = ", ".join("%s=%s" % (k, v) for k, v in sorted(tags.items()))
        msg = "%s: %d ms [%s]" % (name, duration_ms, tags_str)
        _logger.log(self.level, msg)


class CloudWatchMetrics:
    """Send measurements to AWS CloudWatch.

    Tags are sent as metric dimensions.

    Args:
        namespace: CloudWatch metric namespace
        session: session to use for AWS communication
    """

    def __init__(self, namespace: str = "swfini", *, session=None):
        self.namespace = namespace
        self.session = session or _util.AWSSession()

    __repr__ = _util.easy_repr

    def timing(self, name: str, duration_ms: int, tags: T.Dict[str, str]):
        dimensions = [
            {"Name": k, "Value": str(v)} for k, v in sorted(tags.items())]
        datum = {
            "MetricName": name,
            "Dimensions": dimensions,
            "Timestamp": datetime.datetime.now(tz=datetime.timezone.utc),
            "Value": float(duration_ms),
            "Unit": "Milliseconds"}
        self.session.cloudwatch.put_metric_data(
            Namespace=self.namespace,
            MetricData=[datum])
