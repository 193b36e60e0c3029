"""Worker command-line interface.

Use in your ``__main__`` module to provide a CLI to your worker.
"""

import argparse
import logging as lg

from . import _util


class CLI:
    """``swfini`` command-line interface.

    Args:
        worker (swfini.Worker): worker with registered activities and
            workflows
        version: version to display, default: no version display
        prog : program name displayed in program help,
            default: ``sys.argv[0]``
    """

    _parser_class = argparse.ArgumentParser

    def __init__(self, worker, version: str = None, prog: str = None):
        self.worker = worker
        self.version = version
        self.prog = prog

    __repr__ = _util.easy_repr

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser.

        Returns:
            configured command-line argument parser
        """

        d = "Control %s" % self.worker
        parser = self._parser_class(description=d, prog=self.prog)
        if self.version:
            parser.add_argument(
                "-V",
                "--version",
                action="version",
                version=self.version)
        parser.add_argument(
            "-v",
            "--verbose",
            default=0,
            action="count",
            help="increase verbosity")
        parser.add_argument(
            "-q",
            "--quiet",
            default=0,
            action="count",
            help="decrease verbosity")
        subparsers = parser.add_subparsers(metavar="COMMAND", dest="command")
        subparsers.required = True

        subparsers.add_parser(
            "register",
            help="register domains, activities and workflows with SWF",
            description="register domains, activities and workflows with SWF")

        worker_parser = subparsers.add_parser(
            "worker",
            help="run the worker",
            description="poll for and execute tasks, until interrupted")
        worker_parser.add_argument(
            "-n",
            "--thread-pool-size",
            type=int,
            default=None,
            metavar="N",
            help="maximum tasks to execute at once, per task-list")

        return parser

    def _register(self, args: argparse.Namespace):
        """Register domains, activities and workflows.

        Args:
            args: parsed command-line arguments
        """

        self.worker.register_types()

    def _worker(self, args: argparse.Namespace):
        """Run the worker.

        Args:
            args: parsed command-line arguments
        """

        if args.thread_pool_size is not None:
            self.worker.options["thread_pool_size"] = args.thread_pool_size
        self.worker.run()

    def _parse_and_run(self, args: argparse.Namespace):
        """Parse and execute command-line arguments.

        Args:
            args: parsed command-line arguments
        """

        _lvl = max(lg.WARNING - 10 * (args.verbose - args.quiet), lg.DEBUG)
        _util.setup_logging(level=_lvl)

        command = {"register": self._register, "worker": self._worker}
        command[args.command](args)

    def parse_args(self, argv=None):
        """Parse command-line arguments and run CLI.

        Args:
            argv: command-line arguments, default: ``sys.argv[1:]``
        """

        _util.setup_logging()
        parser = self._build_parser()
        args = parser.parse_args(argv)
        self._parse_and_run(args)
