"""BigQuery tables and views."""

import copy
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from gcloud_resources.bigquery.connection import BigqueryConnection, table_ref_from_string
from gcloud_resources.bigquery.data import InsertResponse, TableData
from gcloud_resources.bigquery.job import Job
from gcloud_resources.bigquery.models import (
    CopyOptions,
    ExtractOptions,
    InsertOptions,
    LoadOptions,
    TableDataOptions,
)
from gcloud_resources.bigquery.schema import SchemaBuilder
from gcloud_resources.connection import ApiResponse
from gcloud_resources.errors import InvalidArgument
from gcloud_resources.logging import get_logger
from gcloud_resources.models import build_options
from gcloud_resources.resource import Resource, from_millis
from gcloud_resources.upload import (
    SourceKind,
    classify_source,
    local_file,
    storage_url,
    verify_chunk_size,
)

logger = get_logger(__name__)


class BaseTable(Resource):
    """Attributes and mutations shared by tables and views."""

    connection: BigqueryConnection

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.query_id!r})"

    # Identity

    @property
    def table_ref(self) -> dict[str, str]:
        """The tableReference ({projectId, datasetId, tableId})."""
        return dict(self._gapi.get("tableReference") or {})

    @property
    def table_id(self) -> str:
        return self.table_ref.get("tableId", "")

    @property
    def dataset_id(self) -> str:
        return self.table_ref.get("datasetId", "")

    @property
    def project_id(self) -> str:
        return self.table_ref.get("projectId", "")

    @property
    def id(self) -> str | None:
        """Fully qualified id in "project:dataset.table" form."""
        return self.get_attribute("id")

    @property
    def query_id(self) -> str:
        """The id as it appears in queries, bracketed when the project id has a dash."""
        qualified = f"{self.project_id}:{self.dataset_id}.{self.table_id}"
        if "-" in self.project_id:
            return f"[{qualified}]"
        return qualified

    # Attributes

    @property
    def name(self) -> str | None:
        return self.get_attribute("friendlyName")

    @name.setter
    def name(self, value: str | None) -> None:
        self._patch_gapi({"friendlyName": value})

    @property
    def description(self) -> str | None:
        return self._full("description")

    @description.setter
    def description(self, value: str | None) -> None:
        self._patch_gapi({"description": value})

    @property
    def etag(self) -> str | None:
        return self._full("etag")

    @property
    def api_url(self) -> str | None:
        return self._full("selfLink")

    @property
    def created_at(self) -> datetime | None:
        return from_millis(self._full("creationTime"))

    @property
    def expires_at(self) -> datetime | None:
        """When the table expires, or None if it never does."""
        return from_millis(self._full("expirationTime"))

    @property
    def modified_at(self) -> datetime | None:
        return from_millis(self._full("lastModifiedTime"))

    @property
    def location(self) -> str | None:
        return self._full("location")

    @property
    def is_table(self) -> bool:
        return self.get_attribute("type") == "TABLE"

    @property
    def is_view(self) -> bool:
        return self.get_attribute("type") == "VIEW"

    @property
    def schema(self) -> dict[str, Any]:
        """A copy of the schema document; assign to change it."""
        return copy.deepcopy(self._full("schema") or {})

    @schema.setter
    def schema(self, value: dict[str, Any] | SchemaBuilder) -> None:
        if isinstance(value, SchemaBuilder):
            value = value.build()
        self._patch_gapi({"schema": value})

    @property
    def fields(self) -> list[dict[str, Any]]:
        return self.schema.get("fields") or []

    @property
    def headers(self) -> list[str]:
        """Names of the top-level fields."""
        return [field["name"] for field in self.fields]

    # Operations

    def _fetch(self) -> ApiResponse:
        return self.connection.get_table(self.dataset_id, self.table_id)

    def _send_patch(self, patch: dict[str, Any]) -> ApiResponse:
        return self.connection.patch_table(self.dataset_id, self.table_id, patch)

    def delete(self) -> bool:
        """Permanently delete the table.

        Raises:
            NotFound: If the table does not exist.
        """
        self.connection.delete_table(self.dataset_id, self.table_id).raise_for_error()
        logger.info("table_deleted", table=self.query_id)
        return True


class Table(BaseTable):
    """A BigQuery table holding data."""

    @contextmanager
    def schema_builder(self, replace: bool = False) -> Iterator[SchemaBuilder]:
        """Edit the schema with a builder; it is patched on exit when changed.

        Args:
            replace: Start from an empty schema instead of the current one.

        Example:
            with table.schema_builder() as schema:
                schema.string("first_name", mode="required")
                schema.integer("age")
        """
        builder = SchemaBuilder(None if replace else self.schema)
        yield builder
        if builder.changed:
            self.schema = builder.build()

    def data(
        self,
        page_token: str | None = None,
        max_results: int | None = None,
        start_index: int | None = None,
    ) -> TableData:
        """Read one page of rows, converted according to the schema.

        Raises:
            InvalidArgument: If an option is invalid.
            ApiError: If the request fails.
        """
        options = build_options(
            TableDataOptions,
            page_token=page_token,
            max_results=max_results,
            start_index=start_index,
        )
        fields = self.fields
        response = self.connection.list_tabledata(
            self.dataset_id, self.table_id, options
        ).raise_for_error()
        return TableData.from_response(response.body or {}, fields)

    def insert(
        self,
        rows: dict[str, Any] | list[dict[str, Any]],
        skip_invalid: bool = False,
        ignore_unknown: bool = False,
    ) -> InsertResponse:
        """Stream rows into the table.

        Args:
            rows: One row or a list of rows, each a dict keyed by field name.
            skip_invalid: Insert valid rows even if some are invalid.
            ignore_unknown: Accept rows with values not in the schema.

        Returns:
            InsertResponse describing per-row errors.

        Raises:
            InvalidArgument: If no rows are given.
        """
        rows = [rows] if isinstance(rows, dict) else list(rows)
        if not rows:
            raise InvalidArgument("No rows provided")
        options = build_options(
            InsertOptions, skip_invalid=skip_invalid, ignore_unknown=ignore_unknown
        )
        response = self.connection.insert_tabledata(
            self.dataset_id, self.table_id, rows, options
        ).raise_for_error()
        result = InsertResponse(rows, response.body or {})
        logger.debug(
            "rows_inserted",
            table=self.query_id,
            inserted=result.insert_count,
            failed=result.error_count,
        )
        return result

    def copy(
        self,
        destination: "BaseTable | str",
        create: str | None = None,
        write: str | None = None,
        dryrun: bool = False,
    ) -> Job:
        """Start a job copying this table to another table.

        Args:
            destination: A table or "project:dataset.table" / "dataset.table" string.
            create: Create disposition ("needed" or "never").
            write: Write disposition ("truncate", "append" or "empty").
            dryrun: Validate the job without running it.
        """
        options = build_options(CopyOptions, create=create, write=write, dryrun=dryrun)
        target = self._resolve_table_ref(destination)
        response = self.connection.copy_table(self.table_ref, target, options)
        return self._job_from(response)

    def extract(
        self,
        extract_url: Any,
        format: str | None = None,
        compression: str | None = None,
        delimiter: str | None = None,
        header: bool | None = None,
        dryrun: bool = False,
    ) -> Job:
        """Start a job exporting the table to Cloud Storage.

        Args:
            extract_url: gs:// URL or a storage File to write to.
            format: "csv", "json" or "avro" (derived from the URL when None).
            compression: "gzip" or "none".
            delimiter: CSV field delimiter.
            header: Whether CSV output includes a header row.
            dryrun: Validate the job without running it.
        """
        url = storage_url(extract_url)
        if url is None:
            raise InvalidArgument(f"Unable to extract to {extract_url!r}")
        options = build_options(
            ExtractOptions,
            format=format,
            compression=compression,
            delimiter=delimiter,
            header=header,
            dryrun=dryrun,
        )
        response = self.connection.extract_table(self.table_ref, url, options)
        return self._job_from(response)

    def load(self, source: Any, **options: Any) -> Job:
        """Start a job loading data into the table.

        Args:
            source: gs:// URL, storage File, or local file path. Local files
                above the resumable threshold are uploaded resumably.
            **options: LoadOptions fields (format, create, write, schema,
                skip_leading, chunk_size, ...).

        Raises:
            UnsupportedSource: If the source is not a storage reference or
                an existing local file.
            InvalidArgument: If an option is unknown or invalid.
        """
        load_options = build_options(LoadOptions, **options)
        kind = classify_source(source, self.connection.resumable_threshold)
        logger.debug("load_started", table=self.query_id, path=kind.value)

        if kind is SourceKind.STORAGE:
            url = storage_url(source)
            assert url is not None
            response = self.connection.load_table(self.table_ref, url, load_options)
        else:
            path = local_file(source)
            assert path is not None
            if kind is SourceKind.RESUMABLE:
                chunk_size = verify_chunk_size(load_options.chunk_size)
                response = self.connection.load_resumable(
                    self.table_ref, path, chunk_size, load_options
                )
            else:
                response = self.connection.load_multipart(self.table_ref, path, load_options)
        return self._job_from(response)

    def _resolve_table_ref(self, table: "BaseTable | str") -> dict[str, str]:
        if isinstance(table, BaseTable):
            return table.table_ref
        return table_ref_from_string(str(table), self.table_ref)

    def _job_from(self, response: ApiResponse) -> Job:
        response.raise_for_error()
        job = Job.from_gapi(response.body or {}, self.connection, complete=True)
        logger.info("job_started", table=self.query_id, job_id=job.job_id)
        return job


class View(BaseTable):
    """A BigQuery view defined by a query."""

    @property
    def query(self) -> str | None:
        return (self._full("view") or {}).get("query")

    @query.setter
    def query(self, value: str) -> None:
        self._patch_gapi({"view": {"query": value}})


def table_from_gapi(
    gapi: dict[str, Any],
    connection: BigqueryConnection,
    complete: bool = False,
) -> BaseTable:
    """Create a Table or View handle depending on the representation's type."""
    if gapi.get("type") == "VIEW":
        return View.from_gapi(gapi, connection, complete=complete)
    return Table.from_gapi(gapi, connection, complete=complete)
