# SPDX-License-Identifier: GPL-3.0-or-later
import sys

from .command import CapvcdCleanup


def entry_point(cls=CapvcdCleanup):
    """Define the CLI entrypoint for the ``cleanup`` command."""
    sys.exit(cls().main())


def doc_parser():
    """Define the doc_parser for the ``cleanup`` command."""
    return CapvcdCleanup().parser
