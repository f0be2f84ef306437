"""HTTP connection shared by the BigQuery and Storage services, with retry logic."""

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx
from google.auth.credentials import Credentials
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from gcloud_resources.config import DEFAULT_RESUMABLE_THRESHOLD
from gcloud_resources.credentials import CredentialsAuth
from gcloud_resources.errors import ApiError, InvalidArgument
from gcloud_resources.logging import get_logger
from gcloud_resources.metrics import record_request, record_retry
from gcloud_resources.models import RetryConfig
from gcloud_resources.upload import build_multipart_body

logger = get_logger(__name__)

# HTTP status codes worth retrying: rate limiting and server-side failures
TRANSIENT_STATUS_CODES = {
    429,  # Too many requests
    500,  # Internal error
    502,  # Bad gateway
    503,  # Service unavailable
    504,  # Gateway timeout
}

# Exception types that warrant a retry (connection errors and timeouts)
RETRYABLE_EXCEPTIONS = (httpx.TransportError,)

# Resumable upload chunk acknowledged, more data expected
RESUME_INCOMPLETE = 308


@dataclass
class ApiResponse:
    """Status and decoded body of a single API exchange."""

    status: int
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    content: bytes = b""

    @property
    def is_success(self) -> bool:
        """True for any 2xx status."""
        return 200 <= self.status < 300

    @property
    def is_not_found(self) -> bool:
        """True when the server reports the resource does not exist."""
        return self.status == 404

    @property
    def text(self) -> str:
        """Raw body decoded as UTF-8 (replacement on invalid bytes)."""
        return self.content.decode("utf-8", errors="replace")

    def raise_for_error(self) -> "ApiResponse":
        """Raise ApiError (NotFound for 404) unless the response succeeded.

        Returns:
            The response itself, for chaining.
        """
        if not self.is_success:
            raise ApiError.from_response(self)
        return self


def _is_transient(response: ApiResponse) -> bool:
    return response.status in TRANSIENT_STATUS_CODES


def _last_outcome(retry_state: RetryCallState) -> ApiResponse:
    """Return the final response once retries are exhausted (re-raises exceptions)."""
    assert retry_state.outcome is not None
    result: ApiResponse = retry_state.outcome.result()
    return result


def create_http_client(
    credentials: Credentials | None = None,
    timeout_seconds: float = 60.0,
) -> httpx.Client:
    """Create a synchronous HTTP client, authenticated when credentials are given.

    Args:
        credentials: google-auth credentials (anonymous when None).
        timeout_seconds: Per-request timeout.

    Returns:
        Configured httpx.Client instance.
    """
    return httpx.Client(
        auth=CredentialsAuth(credentials) if credentials is not None else None,
        timeout=timeout_seconds,
        follow_redirects=True,
    )


class Connection:
    """Maps named API operations onto HTTP requests for one service."""

    service = ""
    api_base = ""
    upload_base = ""

    def __init__(
        self,
        project: str,
        credentials: Credentials | None = None,
        http_client: httpx.Client | None = None,
        retry: RetryConfig | None = None,
        timeout_seconds: float = 60.0,
        resumable_threshold: int = DEFAULT_RESUMABLE_THRESHOLD,
    ) -> None:
        """Initialize the connection.

        Args:
            project: Project ID every request is scoped to.
            credentials: Credentials for a connection-owned HTTP client.
            http_client: Pre-configured client to use instead (not closed by us).
            retry: Retry configuration for transient failures.
            timeout_seconds: Per-request timeout for a connection-owned client.
            resumable_threshold: Local files above this size upload resumably.

        Raises:
            InvalidArgument: If the project is empty.
        """
        project = str(project or "")
        if not project:
            raise InvalidArgument("project is missing")
        self.project = project
        self.retry = retry or RetryConfig()
        self.resumable_threshold = resumable_threshold
        self._owns_client = http_client is None
        self.http = http_client or create_http_client(credentials, timeout_seconds)

    def create_retrying(self, method: str, retries: int | None = None) -> Retrying:
        """Create a tenacity Retrying instance for one request.

        Args:
            method: HTTP method (used for logging and metrics).
            retries: Per-call retry count overriding the configured default.

        Returns:
            A Retrying instance; callable with the function to retry.
        """
        retries = self.retry.retries if retries is None else retries

        def before_sleep(retry_state: RetryCallState) -> None:
            record_retry(self.service, method)
            logger.warning(
                "api_retry",
                service=self.service,
                method=method,
                attempt=retry_state.attempt_number,
            )

        return Retrying(
            stop=stop_after_attempt(retries + 1),
            wait=wait_exponential(
                multiplier=self.retry.backoff_base,
                max=self.retry.backoff_max,
            ),
            retry=(
                retry_if_exception_type(RETRYABLE_EXCEPTIONS)
                | retry_if_result(_is_transient)
            ),
            before_sleep=before_sleep,
            retry_error_callback=_last_outcome,
            reraise=True,
        )

    def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: Any = None,
        *,
        url: str | None = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
        retries: int | None = None,
    ) -> ApiResponse:
        """Issue a request, retrying transient failures.

        Args:
            method: HTTP method.
            path: Path below the service's API base URL.
            params: Query parameters.
            body: JSON body.
            url: Absolute URL overriding api_base + path.
            content: Raw body (used instead of a JSON body).
            headers: Extra request headers.
            retries: Per-call retry count.

        Returns:
            The final ApiResponse (success or not).

        Raises:
            httpx.TransportError: If the network fails on every attempt.
        """
        target = url or f"{self.api_base}{path}"
        retrying = self.create_retrying(method, retries)
        response: ApiResponse = retrying(
            self._send, method, target, params, body, content, headers
        )
        return response

    def _send(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None,
        body: Any,
        content: bytes | None,
        headers: dict[str, str] | None,
    ) -> ApiResponse:
        """Perform a single attempt."""
        start = time.monotonic()
        if body is not None:
            content = json.dumps(body).encode("utf-8")
            headers = {"Content-Type": "application/json", **(headers or {})}
        response = self.http.request(
            method,
            url,
            params=params or None,
            content=content,
            headers=headers,
        )
        duration = time.monotonic() - start

        record_request(self.service, method, response.status_code, duration)
        logger.debug(
            "api_request",
            service=self.service,
            method=method,
            url=str(response.request.url),
            status=response.status_code,
            duration_ms=round(duration * 1000, 1),
        )
        return wrap_response(response)

    # ------------------------------------------------------------------
    # Uploads
    # ------------------------------------------------------------------

    def upload_multipart(
        self,
        url: str,
        metadata: dict[str, Any],
        data: bytes,
        content_type: str,
        params: dict[str, Any] | None = None,
    ) -> ApiResponse:
        """Upload metadata and content in a single multipart/related request."""
        body, boundary = build_multipart_body(metadata, data, content_type)
        return self.request(
            "POST",
            "",
            params={**(params or {}), "uploadType": "multipart"},
            url=url,
            content=body,
            headers={"Content-Type": f"multipart/related; boundary={boundary}"},
        )

    def upload_resumable(
        self,
        url: str,
        metadata: dict[str, Any],
        path: Path,
        content_type: str,
        chunk_size: int | None = None,
        params: dict[str, Any] | None = None,
    ) -> ApiResponse:
        """Upload a local file through a resumable upload session.

        Args:
            url: Upload endpoint.
            metadata: Resource metadata sent when the session is opened.
            path: Local file to upload.
            content_type: Content type of the file data.
            chunk_size: Aligned chunk size, or None to send the file in one PUT.
            params: Extra query parameters for the session request.

        Returns:
            The final response carrying the created resource, or the
            first non-success response.
        """
        total = path.stat().st_size
        session = self.request(
            "POST",
            "",
            params={**(params or {}), "uploadType": "resumable"},
            body=metadata,
            url=url,
            headers={
                "X-Upload-Content-Type": content_type,
                "X-Upload-Content-Length": str(total),
            },
        )
        session_url = session.headers.get("location")
        if not session.is_success or not session_url:
            return session

        logger.debug("resumable_session_started", size=total, chunk_size=chunk_size)

        if chunk_size is None:
            return self.request(
                "PUT",
                "",
                url=session_url,
                content=path.read_bytes(),
                headers={"Content-Type": content_type},
            )

        offset = 0
        with path.open("rb") as f:
            while True:
                f.seek(offset)
                chunk = f.read(chunk_size)
                end = offset + len(chunk) - 1
                response = self.request(
                    "PUT",
                    "",
                    url=session_url,
                    content=chunk,
                    headers={
                        "Content-Type": content_type,
                        "Content-Range": f"bytes {offset}-{end}/{total}",
                    },
                )
                if response.status != RESUME_INCOMPLETE:
                    return response
                offset = _next_offset(response, end + 1)

    def close(self) -> None:
        """Close the HTTP client if this connection created it."""
        if self._owns_client:
            self.http.close()

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _next_offset(response: ApiResponse, default: int) -> int:
    """Read the next byte offset from a 308 response's Range header (bytes=0-N)."""
    range_header = response.headers.get("range")
    if not range_header or "-" not in range_header:
        return default
    return int(range_header.rsplit("-", 1)[1]) + 1


def wrap_response(response: httpx.Response) -> ApiResponse:
    """Convert an httpx response into an ApiResponse, decoding JSON bodies."""
    body: Any = None
    content_type = response.headers.get("content-type", "")
    if response.content and "json" in content_type:
        try:
            body = response.json()
        except ValueError:
            body = None
    return ApiResponse(
        status=response.status_code,
        body=body,
        headers={k.lower(): v for k, v in response.headers.items()},
        content=response.content,
    )
