"""Google credential loading and an httpx auth flow that applies them."""

from collections.abc import Generator
from pathlib import Path

import google.auth
import httpx
from google.auth.credentials import Credentials
from google.auth.transport.requests import Request
from google.oauth2 import service_account

BIGQUERY_SCOPES = ["https://www.googleapis.com/auth/bigquery"]
STORAGE_SCOPES = ["https://www.googleapis.com/auth/devstorage.full_control"]


def load_credentials(
    scopes: list[str],
    keyfile: Path | str | None = None,
) -> tuple[Credentials, str | None]:
    """Load credentials from a keyfile or application default credentials.

    Args:
        scopes: OAuth scopes to request.
        keyfile: Optional service account JSON keyfile.

    Returns:
        Tuple of (credentials, project ID discovered alongside them or None).
    """
    if keyfile is not None:
        sa_credentials = service_account.Credentials.from_service_account_file(
            str(keyfile), scopes=scopes
        )
        return sa_credentials, sa_credentials.project_id

    credentials, project_id = google.auth.default(scopes=scopes)
    return credentials, project_id


class CredentialsAuth(httpx.Auth):
    """Attach a bearer token from google-auth credentials to every request."""

    def __init__(self, credentials: Credentials) -> None:
        self.credentials = credentials
        self._request = Request()

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        if not self.credentials.valid:
            self.credentials.refresh(self._request)
        self.credentials.apply(request.headers)
        yield request
