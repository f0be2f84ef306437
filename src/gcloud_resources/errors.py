"""Exception hierarchy shared by the BigQuery and Storage resources."""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from gcloud_resources.connection import ApiResponse


class Error(Exception):
    """Base class for all gcloud_resources errors."""


class ApiError(Error):
    """Non-success response returned by a Google API."""

    def __init__(
        self,
        status_code: int,
        message: str = "",
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.errors = errors or []
        super().__init__(f"HTTP {status_code}: {message}")

    @property
    def reasons(self) -> list[str]:
        """Machine-readable reasons reported by the API (e.g. 'notFound')."""
        return [e["reason"] for e in self.errors if "reason" in e]

    @classmethod
    def from_response(cls, response: "ApiResponse") -> "ApiError":
        """Build the matching error for a failed API response.

        Args:
            response: The non-success response.

        Returns:
            NotFound for 404 responses, ApiError otherwise.
        """
        error_cls = NotFound if response.status == 404 else cls
        body = response.body if isinstance(response.body, dict) else {}
        error = body.get("error")
        if isinstance(error, dict):
            message = str(error.get("message", ""))
            errors = error.get("errors") or []
        else:
            # Some endpoints answer errors with a plain text body
            message = response.text[:500]
            errors = []
        return error_cls(response.status, message, errors)


class NotFound(ApiError):
    """The requested resource does not exist."""


class InvalidArgument(Error, ValueError):
    """A local precondition failed before any request was sent."""


class UnsupportedSource(Error):
    """A load or upload source is neither a storage reference nor a local file."""

    def __init__(self, source: object) -> None:
        self.source = source
        super().__init__(f"Don't know how to load {source!r}")


class FileVerificationError(Error):
    """Downloaded content did not match the checksum reported by the server."""

    def __init__(self, path: str, expected: str, actual: str) -> None:
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Checksum mismatch for '{path}': expected {expected}, got {actual}"
        )
