"""Exception hierarchy for the Great Library client.

Validation errors are raised before any remote call is made. Remote and
operation errors carry enough context to be shown to the user verbatim.
"""

from typing import Any


class LibraryError(Exception):
    """Base class for all errors raised by the library services and clients."""


class InvalidInputError(LibraryError):
    """Raised when user input is rejected before any remote call (empty question, no files, empty note)."""


class FileTooLargeError(InvalidInputError):
    """Raised when a file exceeds the upload size limit of the file search store."""

    def __init__(self, file_name: str, max_size_bytes: int):
        self.file_name = file_name
        self.max_size_bytes = max_size_bytes
        limit_mb = max_size_bytes / (1024 * 1024)
        limit_label = f"{limit_mb:g}"
        super().__init__(f"{file_name} exceeds the {limit_label} MB limit enforced by Google File Search.")


class RemoteCallError(LibraryError):
    """Raised when a remote API answers with a non-success status code."""

    def __init__(self, url: str, status_code: int, body: str = ""):
        self.url = url
        self.status_code = status_code
        self.body = body
        super().__init__(f"Request to {url} failed with status {status_code}: {body[:200]}")


class MalformedResponseError(LibraryError):
    """Raised when a remote payload does not match the expected response schema."""

    def __init__(self, model_name: str, detail: str):
        self.model_name = model_name
        self.detail = detail
        super().__init__(f"Malformed {model_name} response: {detail}")


class UploadError(LibraryError):
    """Raised when an upload operation finishes with an error payload or cannot be tracked."""

    def __init__(self, message: str, payload: Any = None):
        self.payload = payload
        super().__init__(message)


class OperationTimeoutError(UploadError):
    """Raised when an upload operation is not done within the configured maximum wait."""


class OperationCancelledError(UploadError):
    """Raised when the caller cancels waiting for an upload operation."""
