from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    HTTP_NOT_FOUND = "HTTP_NOT_FOUND"
    HTTP_ERROR = "HTTP_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    TOO_MANY_REDIRECTS = "TOO_MANY_REDIRECTS"
    DECODE_FAILED = "DECODE_FAILED"
    PERSISTENCE_FAILED = "PERSISTENCE_FAILED"


class HttpImportError(Exception):
    """Base class for every failure surfaced by the loader and crawler.

    Raised where the failure happens and left to propagate to the caller of
    ``load`` / ``crawl``. Only the CLI catches it, to print ``to_dict()``.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.recoverable = recoverable

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "suggestion": self.suggestion,
                "recoverable": self.recoverable,
            }
        }


class FetchError(HttpImportError):
    """A remote module could not be fetched (bad status, network, redirects)."""

    def __init__(
        self,
        url: str,
        status: int | None,
        status_text: str,
        *,
        code: ErrorCode | None = None,
        suggestion: str = "The remote host may be unavailable or the URL may be wrong.",
        recoverable: bool | None = None,
    ) -> None:
        if code is None:
            code = ErrorCode.HTTP_NOT_FOUND if status == 404 else ErrorCode.HTTP_ERROR
        if recoverable is None:
            recoverable = status is None or status >= 500 or status in {408, 429}
        if status is None:
            message = f"Failed to load module '{url}': {status_text}"
        else:
            message = f"Failed to load module '{url}': {status} {status_text}"
        super().__init__(code, message, suggestion, recoverable)
        self.url = url
        self.status = status
        self.status_text = status_text


class DecodeError(HttpImportError):
    """A response declared as JSON did not contain valid JSON."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(
            ErrorCode.DECODE_FAILED,
            f"Invalid JSON body from '{url}': {reason}",
            suggestion="The server advertised application/json but sent something else.",
            recoverable=False,
        )
        self.url = url


class PersistenceError(HttpImportError):
    """An artifact, stub or metadata record could not be written."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            ErrorCode.PERSISTENCE_FAILED,
            f"Failed to write '{path}': {reason}",
            suggestion="Check that the cache directory is writable and has free space.",
            recoverable=False,
        )
        self.path = path
