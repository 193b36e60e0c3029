"""Test ``swfini.worker``."""

from swfini import worker as tscr
import pytest
from unittest import mock
import swfini
import signal
import threading


@pytest.fixture
def config():
    """Worker configuration."""
    return swfini.Configuration(
        "spam-domain",
        "spam-list",
        "spam-identity",
        session=mock.Mock(spec=swfini.AWSSession))


def spam(context, task_input):
    """Example activity."""
    return task_input


def bla(context):
    """Example workflow."""
    context.complete()


class TestWorker:
    """Test ``swfini.worker.Worker``."""
    @pytest.fixture
    def worker(self, config):
        """An example Worker instance, with mocked pollers."""
        worker = tscr.Worker(config, {"thread_pool_size": 4})
        activity_poller = swfini.activity.Poller
        workflow_poller = swfini.workflow.Poller
        worker._activity_poller_class = mock.Mock(
            side_effect=lambda *_: mock.Mock(spec=activity_poller))
        worker._workflow_poller_class = mock.Mock(
            side_effect=lambda *_: mock.Mock(spec=workflow_poller))
        worker._connection_class = mock.Mock()
        return worker

    def test_init(self, worker, config):
        """Worker initialisation."""
        assert worker.config is config
        assert worker.options == {"thread_pool_size": 4}
        assert not worker.activities
        assert not worker.workflows
        assert worker.activity_middleware == []
        assert worker.decision_middleware == []
        assert worker.workflow_middleware == []
        assert worker.pollers == []

    def test_str(self, worker):
        """Worker stringification."""
        assert str(worker) == "Worker 'spam-identity'"

    class TestRegister:
        """Executable registration."""
        def test_activity(self, worker):
            """Activity registration in default task-list."""
            worker.register_activity(spam)
            lookup = worker.activities["spam-domain", "spam-list"]
            assert lookup.find("spam") is spam
            assert not worker.workflows

        def test_activity_named(self, worker):
            """Activity registration with name and task-list."""
            worker.register_activity(
                spam,
                "eggs",
                domain="bla-domain",
                task_list="bla-list")
            assert worker.activities["bla-domain", "bla-list"].names == [
                "eggs"]

        def test_workflow(self, worker):
            """Workflow registration."""
            worker.register_workflow(bla, version="2")
            lookup = worker.workflows["spam-domain", "spam-list"]
            assert lookup.find("bla") is bla
            assert not worker.activities

        def test_duplicate(self, worker):
            """Name already registered in task-list."""
            worker.register_activity(spam)
            with pytest.raises(ValueError):
                worker.register_activity(bla, "spam")

        @pytest.mark.parametrize("name", ["spam:eggs", "x" * 257, "yarn"])
        def test_invalid_name(self, worker, name):
            """Bad type name."""
            with pytest.raises(ValueError):
                worker.register_activity(spam, name)

    def test_add_middleware(self, worker):
        """Middleware configuration."""
        worker.add_activity_middleware(swfini.Middleware, 1)
        worker.add_decision_middleware(swfini.Middleware, 2)
        worker.add_workflow_middleware(swfini.Middleware, 3)
        entry = swfini.middleware.Entry
        assert worker.activity_middleware == [entry(swfini.Middleware, 1)]
        assert worker.decision_middleware == [entry(swfini.Middleware, 2)]
        assert worker.workflow_middleware == [entry(swfini.Middleware, 3)]

    def test_register_types(self, worker, config):
        """Domain and type registration with SWF."""
        # Setup environment
        worker.register_activity(spam)
        worker.register_activity(spam, "eggs", "2", task_list="bla-list")
        worker.register_workflow(bla, domain="bla-domain")
        connection = worker._connection_class.from_options.return_value

        # Run function
        worker.register_types()

        # Check result
        worker._connection_class.from_options.assert_called_once_with(
            config.for_connection())
        assert connection.register_domain.call_args_list == [
            mock.call("bla-domain"), mock.call("spam-domain")]
        assert connection.register_activity_type.call_args_list == [
            mock.call("spam-domain", "spam", "1", "spam-list"),
            mock.call("spam-domain", "eggs", "2", "bla-list")]
        connection.register_workflow_type.assert_called_once_with(
            "bla-domain",
            "bla",
            "1",
            "spam-list")

    class TestStart:
        """Poller starting."""
        def test_nothing_registered(self, worker):
            """No executables to poll for."""
            with pytest.raises(RuntimeError):
                worker.start()

        def test_start(self, worker, config):
            """Pollers started per task-list."""
            # Setup environment
            worker.register_activity(spam)
            worker.register_activity(spam, task_list="bla-list")
            worker.register_workflow(bla)
            worker.add_activity_middleware(swfini.Middleware)

            # Run function
            worker.start()

            # Check result
            assert len(worker.pollers) == 3
            [p.start.assert_called_once_with() for p in worker.pollers]
            worker._workflow_poller_class.assert_called_once_with(
                "spam-domain",
                "spam-list",
                worker.workflows["spam-domain", "spam-list"],
                config,
                [],
                [],
                {"thread_pool_size": 4})
            assert worker._activity_poller_class.call_args_list == [
                mock.call(
                    "spam-domain",
                    "spam-list",
                    worker.activities["spam-domain", "spam-list"],
                    config,
                    worker.activity_middleware,
                    {"thread_pool_size": 4}),
                mock.call(
                    "spam-domain",
                    "bla-list",
                    worker.activities["spam-domain", "bla-list"],
                    config,
                    worker.activity_middleware,
                    {"thread_pool_size": 4})]

        def test_already_started(self, worker):
            """Starting twice."""
            worker.register_activity(spam)
            worker.start()
            with pytest.raises(RuntimeError):
                worker.start()
            assert worker._activity_poller_class.call_count == 1

    def test_stop(self, worker):
        """Pollers stopped."""
        worker.register_activity(spam)
        worker.register_workflow(bla)
        worker.start()
        worker.stop()
        assert worker._stopped.is_set()
        [p.stop.assert_called_once_with() for p in worker.pollers]

    class TestJoin:
        """Waiting for worker to finish."""
        @pytest.mark.timeout(3.0)
        def test_join(self, worker):
            """Pollers waited on after stopping."""
            worker.register_activity(spam)
            worker.start()
            threading.Timer(0.05, worker.stop).start()
            worker.join()
            poller = worker.pollers[0]
            poller.stop.assert_called_once_with()
            poller.wait.assert_called_once_with()

        def test_keyboard_interrupt(self, worker):
            """Interrupted waiting stops polling."""
            worker.register_activity(spam)
            worker.start()
            worker._wait = mock.Mock(side_effect=KeyboardInterrupt)
            worker.join()
            assert worker._stopped.is_set()
            poller = worker.pollers[0]
            poller.stop.assert_called_once_with()
            poller.wait.assert_called_once_with()

    def test_handle_sigterm(self, worker):
        """Worker stopped on SIGTERM."""
        worker.stop = mock.Mock()
        worker._handle_sigterm(signal.SIGTERM, None)
        worker.stop.assert_called_once_with()

    def test_run(self, worker):
        """Worker runs until stopped."""
        # Setup environment
        worker.start = mock.Mock()
        worker.join = mock.Mock()
        manager = mock.Mock()
        manager.attach_mock(worker.start, "start")
        manager.attach_mock(worker.join, "join")

        # Run function
        with mock.patch.object(signal, "signal") as signal_mock:
            worker.run()

        # Check result
        assert manager.method_calls == [mock.call.start(), mock.call.join()]
        signal_mock.assert_called_once_with(
            signal.SIGTERM,
            worker._handle_sigterm)
