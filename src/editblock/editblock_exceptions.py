"""Custom exceptions for edit block operations."""

from typing import Any


class EditBlockError(Exception):
    """Base exception for edit block operations."""

    def __init__(self, message: str, error_details: dict[str, Any] | None = None):
        """
        Initialize the exception.

        Args:
            message: Error message
            error_details: Optional dictionary with detailed error information
        """
        super().__init__(message)
        self.error_details = error_details


class EditBlockParseError(EditBlockError):
    """Raised when SEARCH/REPLACE blocks are malformed."""


class EditBlockMatchError(EditBlockError):
    """Raised when one or more edit blocks could not be matched against their files."""


class EditBlockApplicationError(EditBlockError):
    """Raised when edits cannot be applied at all (bad paths, I/O failures, sample edits)."""
