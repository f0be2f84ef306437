"""Shared pytest fixtures for gcloud_resources tests."""

import time
from collections.abc import Callable, Iterator
from typing import Any

import httpx
import pytest

from gcloud_resources.bigquery import BigqueryConnection
from gcloud_resources.bigquery import Project as BigqueryProject
from gcloud_resources.models import RetryConfig
from gcloud_resources.storage import Project as StorageProject
from gcloud_resources.storage import StorageConnection

PROJECT = "test-project"
BIGQUERY_BASE = f"https://www.googleapis.com/bigquery/v2/projects/{PROJECT}"
BIGQUERY_UPLOAD = f"https://www.googleapis.com/upload/bigquery/v2/projects/{PROJECT}/jobs"
STORAGE_BASE = "https://www.googleapis.com/storage/v1"
STORAGE_UPLOAD = "https://www.googleapis.com/upload/storage/v1"


def _now_millis() -> str:
    return str(int(time.time() * 1000))


@pytest.fixture
def retry_config() -> RetryConfig:
    """Retry configuration that retries twice without waiting."""
    return RetryConfig(retries=2, backoff_base=0.0, backoff_max=0.0)


@pytest.fixture
def http_client() -> Iterator[httpx.Client]:
    """Unauthenticated HTTP client; requests are intercepted by respx."""
    with httpx.Client() as client:
        yield client


@pytest.fixture
def bigquery_connection(
    http_client: httpx.Client, retry_config: RetryConfig
) -> BigqueryConnection:
    """BigQuery connection for the test project."""
    return BigqueryConnection(PROJECT, http_client=http_client, retry=retry_config)


@pytest.fixture
def bigquery(bigquery_connection: BigqueryConnection) -> BigqueryProject:
    """BigQuery project handle for the test project."""
    return BigqueryProject(PROJECT, bigquery_connection)


@pytest.fixture
def storage_connection(
    http_client: httpx.Client, retry_config: RetryConfig
) -> StorageConnection:
    """Storage connection for the test project."""
    return StorageConnection(PROJECT, http_client=http_client, retry=retry_config)


@pytest.fixture
def storage(storage_connection: StorageConnection) -> StorageProject:
    """Storage project handle for the test project."""
    return StorageProject(PROJECT, storage_connection)


@pytest.fixture
def make_dataset_gapi() -> Callable[..., dict[str, Any]]:
    """Return a factory for dataset representations.

    ``full=False`` produces the summary returned by datasets.list.
    """

    def make(
        dataset_id: str = "my_dataset",
        name: str | None = "My Dataset",
        description: str | None = "This is my dataset",
        default_expiration: int | None = 999,
        full: bool = True,
    ) -> dict[str, Any]:
        gapi: dict[str, Any] = {
            "kind": "bigquery#dataset",
            "id": f"{PROJECT}:{dataset_id}",
            "datasetReference": {"projectId": PROJECT, "datasetId": dataset_id},
            "friendlyName": name,
        }
        if full:
            gapi.update(
                {
                    "etag": "etag123456789",
                    "selfLink": f"{BIGQUERY_BASE}/datasets/{dataset_id}",
                    "description": description,
                    "defaultTableExpirationMs": str(default_expiration),
                    "creationTime": _now_millis(),
                    "lastModifiedTime": _now_millis(),
                    "location": "US",
                }
            )
        return gapi

    return make


@pytest.fixture
def make_table_gapi() -> Callable[..., dict[str, Any]]:
    """Return a factory for table and view representations.

    ``full=False`` produces the summary returned by tables.list.
    """

    def make(
        table_id: str = "my_table",
        name: str | None = "My Table",
        description: str | None = "This is my table",
        dataset_id: str = "my_dataset",
        table_type: str = "TABLE",
        full: bool = True,
    ) -> dict[str, Any]:
        gapi: dict[str, Any] = {
            "kind": "bigquery#table",
            "id": f"{PROJECT}:{dataset_id}.{table_id}",
            "tableReference": {
                "projectId": PROJECT,
                "datasetId": dataset_id,
                "tableId": table_id,
            },
            "friendlyName": name,
            "type": table_type,
        }
        if not full:
            return gapi
        gapi.update(
            {
                "etag": "etag123456789",
                "selfLink": f"{BIGQUERY_BASE}/datasets/{dataset_id}/tables/{table_id}",
                "description": description,
                "creationTime": _now_millis(),
                "lastModifiedTime": _now_millis(),
                "location": "US",
            }
        )
        if table_type == "VIEW":
            gapi["view"] = {"query": "SELECT name, age FROM [users]"}
        else:
            gapi.update(
                {
                    "numBytes": "1000",
                    "numRows": "100",
                    "schema": {
                        "fields": [
                            {"name": "name", "type": "STRING", "mode": "REQUIRED"},
                            {"name": "age", "type": "INTEGER", "mode": "NULLABLE"},
                            {"name": "score", "type": "FLOAT", "mode": "NULLABLE"},
                            {"name": "active", "type": "BOOLEAN", "mode": "NULLABLE"},
                        ]
                    },
                }
            )
        return gapi

    return make


@pytest.fixture
def make_job_gapi() -> Callable[..., dict[str, Any]]:
    """Return a factory for job representations."""

    def make(
        job_id: str = "job_9876543210",
        state: str = "RUNNING",
        configuration: dict[str, Any] | None = None,
        error_result: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        status: dict[str, Any] = {"state": state}
        if error_result is not None:
            status["errorResult"] = error_result
            status["errors"] = [error_result]
        return {
            "kind": "bigquery#job",
            "id": f"{PROJECT}:{job_id}",
            "jobReference": {"projectId": PROJECT, "jobId": job_id},
            "configuration": configuration or {},
            "status": status,
            "statistics": {"creationTime": _now_millis(), "startTime": _now_millis()},
        }

    return make


@pytest.fixture
def make_bucket_gapi() -> Callable[..., dict[str, Any]]:
    """Return a factory for bucket representations."""

    def make(
        name: str = "my-bucket",
        versioning: bool | None = None,
        logging_bucket: str | None = None,
        logging_prefix: str | None = None,
        website_main: str | None = None,
        website_404: str | None = None,
        cors: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        gapi: dict[str, Any] = {
            "kind": "storage#bucket",
            "id": name,
            "name": name,
            "selfLink": f"{STORAGE_BASE}/b/{name}",
            "projectNumber": "1234567890",
            "metageneration": "1",
            "timeCreated": "2015-06-01T12:00:00.000Z",
            "location": "US",
            "storageClass": "STANDARD",
            "etag": "CAE=",
        }
        if versioning is not None:
            gapi["versioning"] = {"enabled": versioning}
        logging_config = {"logBucket": logging_bucket, "logObjectPrefix": logging_prefix}
        if any(logging_config.values()):
            gapi["logging"] = {k: v for k, v in logging_config.items() if v}
        website = {"mainPageSuffix": website_main, "notFoundPage": website_404}
        if any(website.values()):
            gapi["website"] = {k: v for k, v in website.items() if v}
        if cors is not None:
            gapi["cors"] = cors
        return gapi

    return make


@pytest.fixture
def make_file_gapi() -> Callable[..., dict[str, Any]]:
    """Return a factory for file (object) representations."""

    def make(
        bucket: str = "my-bucket",
        name: str = "file.ext",
        md5: str = "HXB937GQDFxDFqUGi//weQ==",
        size: int = 1234,
    ) -> dict[str, Any]:
        return {
            "kind": "storage#object",
            "id": f"{bucket}/{name}/1234567890",
            "selfLink": f"{STORAGE_BASE}/b/{bucket}/o/{name}",
            "name": name,
            "bucket": bucket,
            "generation": "1234567890",
            "metageneration": "1",
            "contentType": "text/plain",
            "updated": "2015-06-01T12:00:00.000Z",
            "timeCreated": "2015-06-01T12:00:00.000Z",
            "storageClass": "STANDARD",
            "size": str(size),
            "md5Hash": md5,
            "crc32c": "Lm1F3g==",
            "etag": "CKih16GjycICEAE=",
        }

    return make
