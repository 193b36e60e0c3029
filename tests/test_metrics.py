"""Test ``swfini.metrics``."""

from swfini import metrics as tscr
import pytest
from unittest import mock
import swfini
import datetime
import logging as lg


def test_null():
    """Measurements are discarded."""
    assert tscr.NullMetrics().timing("spam", 42, {"a": "b"}) is None
    assert repr(tscr.NullMetrics()) == "NullMetrics()"


class TestLoggingMetrics:
    """Test ``swfini.metrics.LoggingMetrics``."""
    def test_init(self):
        """LoggingMetrics initialisation."""
        assert tscr.LoggingMetrics().level == lg.DEBUG
        assert tscr.LoggingMetrics(lg.INFO).level == lg.INFO

    def test_timing(self, caplog):
        """Measurement is logged."""
        metrics = tscr.LoggingMetrics(lg.INFO)
        with caplog.at_level(lg.INFO, logger=tscr.__name__):
            metrics.timing("spam", 42, {"domain": "d", "activity": "a"})
        assert caplog.messages == ["spam: 42 ms [activity=a, domain=d]"]


class TestCloudWatchMetrics:
    """Test ``swfini.metrics.CloudWatchMetrics``."""
    @pytest.fixture
    def session(self):
        """AWS session mock."""
        return mock.Mock(spec=swfini.AWSSession)

    @pytest.fixture
    def metrics(self, session):
        """An example CloudWatchMetrics instance."""
        return tscr.CloudWatchMetrics("spam-ns", session=session)

    def test_init(self, metrics, session):
        """CloudWatchMetrics initialisation."""
        assert metrics.namespace == "spam-ns"
        assert metrics.session is session

    def test_timing(self, metrics, session):
        """Measurement is sent."""
        # Setup environment
        now = datetime.datetime.now(tz=datetime.timezone.utc)
        datetime_mock = mock.Mock(wraps=datetime.datetime)
        datetime_mock.now.return_value = now

        # Build expectation
        exp_data = [{
            "MetricName": "spam",
            "Dimensions": [
                {"Name": "activity", "Value": "a"},
                {"Name": "domain", "Value": "d"}],
            "Timestamp": now,
            "Value": 42.0,
            "Unit": "Milliseconds"}]

        # Run function
        with mock.patch.object(datetime, "datetime", datetime_mock):
            metrics.timing("spam", 42, {"domain": "d", "activity": "a"})

        # Check result
        session.cloudwatch.put_metric_data.assert_called_once_with(
            Namespace="spam-ns",
            MetricData=exp_data)
        datetime_mock.now.assert_called_once_with(tz=datetime.timezone.utc)
