# SPDX-License-Identifier: GPL-3.0-or-later
from typing import Optional


class VCDError(Exception):
    """An error reported by the VMware Cloud Director API."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        minor_error_code: Optional[str] = None,
    ) -> None:
        """
        Instantiate the error.

        Args:
            message (str)
                The error message.
            status_code (int, optional)
                The HTTP status code of the failed response, if any.
            minor_error_code (str, optional)
                The ``minorErrorCode`` reported by VCD, if any.
        """
        super(VCDError, self).__init__(message)
        self.status_code = status_code
        self.minor_error_code = minor_error_code


class EntityNotFound(VCDError):
    """The requested entity does not exist."""


class TaskError(VCDError):
    """An asynchronous VCD task finished without success."""
