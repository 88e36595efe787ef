# SPDX-License-Identifier: GPL-3.0-or-later
import inspect
import logging
import sys
import traceback
from argparse import ArgumentParser, Namespace, RawDescriptionHelpFormatter
from collections import namedtuple
from typing import Any

from .step import StepDecorator

LOG_FORMAT = "%(asctime)s [%(levelname)-8s] %(message)s"

# Loggers switched to DEBUG for each extra ``--debug``:
# this project, the whole capvcd family (HTTP wire dumps included) and then everything.
DEBUG_LOGGERS = ("capvcd.cleanup", "capvcd", "")

RUN_RESULT = namedtuple("RUN_RESULT", ["success", "skipped", "result"])


class CleanupTask(object):
    """Base class for capvcd-cleanup CLI tasks.

    Instances of CleanupTask subclasses may be obtained to run a task or to
    obtain an argument parser for the task.
    """

    step = StepDecorator
    """A decorator used to mark methods as named steps of the task.

    A step logs when it is started, finished or failed and can be skipped by
    listing its machine name (lowercase, dashes instead of spaces) in ``--skip``.
    """

    def __init__(self, *args, **kwargs):
        """Initialize the task, its parser and all the arguments."""
        super(CleanupTask, self).__init__(*args, **kwargs)

        self._args = None

        self.parser = ArgumentParser(
            description=self.description, formatter_class=RawDescriptionHelpFormatter
        )
        self._basic_args()
        self.add_args()

    def __enter__(self) -> "CleanupTask":
        """Enter the task context."""
        return self

    def __exit__(self, *_args: Any) -> None:
        """Leave the task context."""

    @property
    def description(self) -> str:
        """Description for argument parser; taken from the class docstring."""
        return inspect.cleandoc(self.__doc__ or "")

    @property
    def args(self) -> Namespace:
        """Parsed args from the CLI.

        Arguments are parsed on first access.
        """
        if not self._args:
            self._args = self.parser.parse_args()
        return self._args

    def _basic_args(self) -> None:
        # Arguments common to every task.
        self.parser.add_argument(
            "--debug",
            "-d",
            action="count",
            default=0,
            help=(
                "Show debug logs; can be provided up to three times to enable more logs "
                "(-d: this tool, -dd: HTTP requests and responses, -ddd: everything)"
            ),
        )

    def _setup_logging(self) -> None:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        for name in DEBUG_LOGGERS[: self.args.debug]:
            logging.getLogger(name).setLevel(logging.DEBUG)

    def add_args(self) -> None:
        """
        Add parser options/arguments for this task.

        Subclasses may override this to add more arguments, calling super() first.
        """
        super_add_args = getattr(super(CleanupTask, self), "add_args", lambda: None)
        super_add_args()

    def run(self) -> RUN_RESULT:
        """Implement the logic of the task.

        Subclasses must override this.

        Returns:
            RUN_RESULT: whether the task succeeded, whether something was skipped
            and the processed items.
        """
        raise NotImplementedError()

    def main(self) -> int:
        """Parse the arguments, run the task and return the exit code.

        Failures reported by ``run`` result in exit code 1. Unexpected exceptions
        are printed with their traceback and propagated.
        """
        try:
            self._setup_logging()
            result = self.run()
        except Exception:
            traceback.print_exc(file=sys.stderr)
            raise

        if isinstance(result, RUN_RESULT) and not result.success:
            return 1
        return 0
