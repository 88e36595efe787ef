# SPDX-License-Identifier: GPL-3.0-or-later
import sys

if sys.version_info >= (3, 11):
    from enum import StrEnum  # pragma: no cover
else:
    from strenum import StrEnum  # pragma: no cover


class State(StrEnum):
    """The possible outcomes for a resource handled by the cleanup."""

    DELETED = "DELETED"
    """The resource was found and deleted."""

    MISSING = "MISSING"
    """The resource was not found, there was nothing to delete."""

    SKIPPED = "SKIPPED"
    """The resource was left untouched (dry run or skipped step)."""
