"""Test ``swfini._cli``."""

from swfini import _cli as tscr
import pytest
from unittest import mock
import swfini
import argparse
from swfini import _util as swfini_util
import logging as lg


@pytest.fixture
def worker():
    """Worker mock."""
    worker = mock.Mock(spec=swfini.Worker)
    worker.options = {}
    return worker


class TestCLI:
    """Test ``swfini._cli.CLI``."""
    @pytest.fixture
    def cli(self, worker):
        """An example CLI instance."""
        return tscr.CLI(worker, version="0.42", prog="spam-prog")

    def test_init(self, cli, worker):
        """CLI initialisation."""
        assert cli.worker is worker
        assert cli.version == "0.42"
        assert cli.prog == "spam-prog"

    def test__build_parser(self, cli):
        """Argument parser construction."""
        res = cli._build_parser()
        assert isinstance(res, argparse.ArgumentParser)
        args = res.parse_args(["-vv", "worker", "-n", "4"])
        assert args.command == "worker"
        assert args.verbose == 2
        assert args.quiet == 0
        assert args.thread_pool_size == 4

    def test__build_parser_requires_command(self, cli):
        """Command is required."""
        parser = cli._build_parser()
        with pytest.raises(SystemExit):
            parser.parse_args([])

    def test_register(self, cli, worker):
        """Type registration."""
        args = argparse.Namespace(command="register")
        cli._register(args)
        worker.register_types.assert_called_once_with()

    class TestWorker:
        """Worker running."""
        def test_default(self, cli, worker):
            """Default thread pool size."""
            args = argparse.Namespace(command="worker", thread_pool_size=None)
            cli._worker(args)
            assert worker.options == {}
            worker.run.assert_called_once_with()

        def test_thread_pool_size(self, cli, worker):
            """Provided thread pool size."""
            args = argparse.Namespace(command="worker", thread_pool_size=4)
            cli._worker(args)
            assert worker.options == {"thread_pool_size": 4}
            worker.run.assert_called_once_with()

    class TestParseAndRun:
        @pytest.mark.parametrize(
            ("command", "mock_call_method"),
            [
                ("register", mock.call._register),
                ("worker", mock.call._worker)])
        def test_command(self, cli, command, mock_call_method):
            """Which command is executed."""
            # Setup environment
            cli._register = mock.Mock()
            cli._worker = mock.Mock()

            manager = mock.Mock()
            manager.attach_mock(cli._register, "_register")
            manager.attach_mock(cli._worker, "_worker")

            # Build input
            args = argparse.Namespace(verbose=3, quiet=2, command=command)

            # Build expectation
            exp_calls = [mock_call_method(args)]

            # Run function
            with mock.patch.object(swfini_util, "setup_logging", mock.Mock()):
                cli._parse_and_run(args)

            # Check result
            assert manager.method_calls == exp_calls

        @pytest.mark.parametrize(
            ("verbose", "quiet", "level"),
            [
                (0, 0, lg.WARNING),
                (3, 2, lg.INFO),
                (2, 0, lg.DEBUG),
                (6, 1, lg.DEBUG),
                (0, 1, lg.ERROR),
                (2, 4, lg.CRITICAL)])
        def test_logging_setup(self, cli, verbose, quiet, level):
            """Logging setup with provided verbosity."""
            # Setup environment
            cli._register = mock.Mock()
            sl_mock = mock.Mock()

            # Build input
            args = argparse.Namespace(
                verbose=verbose,
                quiet=quiet,
                command="register")

            # Run function
            with mock.patch.object(swfini_util, "setup_logging", sl_mock):
                cli._parse_and_run(args)

            # Check result
            sl_mock.assert_called_once_with(level=level)

    def test_parse_args(self, cli):
        """Command-line argument parsing and command execution."""
        # Setup environment
        parser_mock = mock.Mock(spec=argparse.ArgumentParser)
        cli._build_parser = mock.Mock(return_value=parser_mock)
        args = mock.Mock(spec=argparse.Namespace)
        parser_mock.parse_args.return_value = args
        cli._parse_and_run = mock.Mock()

        # Run function
        with mock.patch.object(swfini_util, "setup_logging", mock.Mock()):
            cli.parse_args(["worker"])

        # Check result
        cli._build_parser.assert_called_once_with()
        parser_mock.parse_args.assert_called_once_with(["worker"])
        cli._parse_and_run.assert_called_once_with(args)
