"""gcloud-resources: object-oriented resources over the BigQuery and Cloud Storage REST APIs."""

__version__ = "0.1.0"

from pathlib import Path
from typing import Any

import httpx

from gcloud_resources.bigquery import BigqueryConnection
from gcloud_resources.bigquery import Project as BigqueryProject
from gcloud_resources.config import Settings
from gcloud_resources.credentials import BIGQUERY_SCOPES, STORAGE_SCOPES, load_credentials
from gcloud_resources.errors import (
    ApiError,
    Error,
    FileVerificationError,
    InvalidArgument,
    NotFound,
    UnsupportedSource,
)
from gcloud_resources.logging import get_logger
from gcloud_resources.storage import Project as StorageProject
from gcloud_resources.storage import StorageConnection

logger = get_logger(__name__)


def _resolve(
    scopes: list[str],
    project: str | None,
    keyfile: Path | str | None,
    settings: Settings,
    http_client: httpx.Client | None,
) -> tuple[str | None, dict[str, Any]]:
    """Resolve the project and connection keyword arguments for a service."""
    connection_kwargs: dict[str, Any] = {
        "retry": settings.retry,
        "timeout_seconds": settings.timeout_seconds,
        "resumable_threshold": settings.resumable_threshold,
    }
    if http_client is not None:
        connection_kwargs["http_client"] = http_client
        return project, connection_kwargs

    credentials, discovered = load_credentials(scopes, keyfile or settings.keyfile)
    connection_kwargs["credentials"] = credentials
    return project or discovered, connection_kwargs


def connect_bigquery(
    project: str | None = None,
    keyfile: Path | str | None = None,
    settings: Settings | None = None,
    http_client: httpx.Client | None = None,
) -> BigqueryProject:
    """Create a BigQuery project handle.

    Args:
        project: Project ID (BIGQUERY_PROJECT / GCLOUD_PROJECT when None,
            then the project of the credentials).
        keyfile: Service account keyfile (GCLOUD_KEYFILE, then application
            default credentials when None).
        settings: Settings to use instead of reading the environment.
        http_client: Pre-configured HTTP client (skips credential loading).

    Returns:
        The BigQuery project.

    Raises:
        InvalidArgument: If no project ID can be determined.
    """
    settings = settings or Settings()
    project, connection_kwargs = _resolve(
        BIGQUERY_SCOPES, project or settings.bigquery_project(), keyfile, settings, http_client
    )
    connection = BigqueryConnection(project or "", **connection_kwargs)
    logger.debug("bigquery_connected", project=connection.project)
    return BigqueryProject(connection.project, connection)


def connect_storage(
    project: str | None = None,
    keyfile: Path | str | None = None,
    settings: Settings | None = None,
    http_client: httpx.Client | None = None,
) -> StorageProject:
    """Create a Cloud Storage project handle.

    Args:
        project: Project ID (STORAGE_PROJECT / GCLOUD_PROJECT when None,
            then the project of the credentials).
        keyfile: Service account keyfile (GCLOUD_KEYFILE, then application
            default credentials when None).
        settings: Settings to use instead of reading the environment.
        http_client: Pre-configured HTTP client (skips credential loading).

    Returns:
        The Storage project.

    Raises:
        InvalidArgument: If no project ID can be determined.
    """
    settings = settings or Settings()
    project, connection_kwargs = _resolve(
        STORAGE_SCOPES, project or settings.storage_project(), keyfile, settings, http_client
    )
    connection = StorageConnection(project or "", **connection_kwargs)
    logger.debug("storage_connected", project=connection.project)
    return StorageProject(connection.project, connection)


__all__ = [
    "ApiError",
    "Error",
    "FileVerificationError",
    "InvalidArgument",
    "NotFound",
    "Settings",
    "UnsupportedSource",
    "__version__",
    "connect_bigquery",
    "connect_storage",
]
