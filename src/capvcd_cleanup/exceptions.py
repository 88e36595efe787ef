# SPDX-License-Identifier: GPL-3.0-or-later
from typing import Optional


class CleanupError(Exception):
    """Base class for the failures of the cleanup workflow.

    Every error carries the ``stage`` in which it happened so the operator can
    tell which lookup or operation went wrong.
    """

    def __init__(self, message: str, stage: Optional[str] = None) -> None:
        """
        Instantiate the error.

        Args:
            message (str)
                The error message, including the underlying cause.
            stage (str, optional)
                The workflow stage where the error happened.
        """
        super(CleanupError, self).__init__(message)
        self.stage = stage


class ConfigurationError(CleanupError):
    """The provided configuration is invalid, e.g. a malformed base URL."""


class AuthenticationError(CleanupError):
    """The API token was rejected or the session could not be established."""


class LookupFailure(CleanupError):
    """A required entity type, organization or VDC could not be resolved."""


class DuplicateEntityError(CleanupError):
    """More than one entity matched a name which is expected to be unique."""


class UnexpectedStateError(CleanupError):
    """The resource is not in the state required for it to be deleted."""

    def __init__(self, message: str, status: str, stage: Optional[str] = None) -> None:
        """
        Instantiate the error.

        Args:
            message (str)
                The error message.
            status (str)
                The observed resource status.
            stage (str, optional)
                The workflow stage where the error happened.
        """
        super(UnexpectedStateError, self).__init__(message, stage=stage)
        self.status = status


class DeleteStartError(CleanupError):
    """The delete request was rejected, so the deletion was never started."""


class DeleteTaskError(CleanupError):
    """The deletion was started but its server-side task failed."""
