"""BigQuery v2 REST operations."""

from pathlib import Path
from typing import Any

from gcloud_resources.bigquery.models import (
    CopyOptions,
    CreateDatasetOptions,
    CreateTableOptions,
    DatasetListOptions,
    ExtractOptions,
    InsertOptions,
    JobListOptions,
    LoadOptions,
    TableDataOptions,
    TableListOptions,
    derive_source_format,
)
from gcloud_resources.connection import ApiResponse, Connection
from gcloud_resources.errors import InvalidArgument
from gcloud_resources.upload import DEFAULT_CONTENT_TYPE


def table_ref_from_string(value: str, default_ref: dict[str, str]) -> dict[str, str]:
    """Parse "project:dataset.table", "dataset.table" or "table" into a table reference.

    Missing parts are taken from default_ref.

    Raises:
        InvalidArgument: If the string cannot be parsed.
    """
    project_id = default_ref["projectId"]
    rest = value
    if ":" in value:
        project_id, rest = value.split(":", 1)
    if "." in rest:
        dataset_id, table_id = rest.split(".", 1)
    else:
        dataset_id, table_id = default_ref["datasetId"], rest
    if not project_id or not dataset_id or not table_id or "." in table_id:
        raise InvalidArgument(f"Unable to identify table from '{value}'")
    return {"projectId": project_id, "datasetId": dataset_id, "tableId": table_id}


class BigqueryConnection(Connection):
    """Named BigQuery operations mapped to REST endpoints."""

    service = "bigquery"
    api_base = "https://www.googleapis.com/bigquery/v2"
    upload_base = "https://www.googleapis.com/upload/bigquery/v2"

    def _project_path(self) -> str:
        return f"/projects/{self.project}"

    def _dataset_path(self, dataset_id: str) -> str:
        return f"{self._project_path()}/datasets/{dataset_id}"

    def _table_path(self, dataset_id: str, table_id: str) -> str:
        return f"{self._dataset_path(dataset_id)}/tables/{table_id}"

    # ------------------------------------------------------------------
    # Datasets
    # ------------------------------------------------------------------

    def list_datasets(self, options: DatasetListOptions) -> ApiResponse:
        return self.request("GET", f"{self._project_path()}/datasets", options.to_params())

    def get_dataset(self, dataset_id: str) -> ApiResponse:
        return self.request("GET", self._dataset_path(dataset_id))

    def insert_dataset(self, dataset_id: str, options: CreateDatasetOptions) -> ApiResponse:
        body: dict[str, Any] = {
            "kind": "bigquery#dataset",
            "datasetReference": {"projectId": self.project, "datasetId": dataset_id},
        }
        if options.name is not None:
            body["friendlyName"] = options.name
        if options.description is not None:
            body["description"] = options.description
        if options.expiration is not None:
            body["defaultTableExpirationMs"] = options.expiration
        if options.location is not None:
            body["location"] = options.location
        return self.request("POST", f"{self._project_path()}/datasets", body=body)

    def patch_dataset(self, dataset_id: str, patch: dict[str, Any]) -> ApiResponse:
        return self.request("PATCH", self._dataset_path(dataset_id), body=patch)

    def delete_dataset(self, dataset_id: str, force: bool = False) -> ApiResponse:
        params = {"deleteContents": True} if force else None
        return self.request("DELETE", self._dataset_path(dataset_id), params)

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def list_tables(self, dataset_id: str, options: TableListOptions) -> ApiResponse:
        return self.request(
            "GET", f"{self._dataset_path(dataset_id)}/tables", options.to_params()
        )

    def get_table(self, dataset_id: str, table_id: str) -> ApiResponse:
        return self.request("GET", self._table_path(dataset_id, table_id))

    def insert_table(
        self,
        dataset_id: str,
        table_id: str,
        options: CreateTableOptions,
        query: str | None = None,
    ) -> ApiResponse:
        body: dict[str, Any] = {
            "tableReference": {
                "projectId": self.project,
                "datasetId": dataset_id,
                "tableId": table_id,
            },
        }
        if options.name is not None:
            body["friendlyName"] = options.name
        if options.description is not None:
            body["description"] = options.description
        if options.schema_ is not None:
            body["schema"] = options.schema_
        if query is not None:
            body["view"] = {"query": query}
        return self.request("POST", f"{self._dataset_path(dataset_id)}/tables", body=body)

    def patch_table(self, dataset_id: str, table_id: str, patch: dict[str, Any]) -> ApiResponse:
        return self.request("PATCH", self._table_path(dataset_id, table_id), body=patch)

    def delete_table(self, dataset_id: str, table_id: str) -> ApiResponse:
        return self.request("DELETE", self._table_path(dataset_id, table_id))

    def list_tabledata(
        self, dataset_id: str, table_id: str, options: TableDataOptions
    ) -> ApiResponse:
        return self.request(
            "GET", f"{self._table_path(dataset_id, table_id)}/data", options.to_params()
        )

    def insert_tabledata(
        self,
        dataset_id: str,
        table_id: str,
        rows: list[dict[str, Any]],
        options: InsertOptions,
    ) -> ApiResponse:
        body = {
            "kind": "bigquery#tableDataInsertAllRequest",
            "skipInvalidRows": options.skip_invalid,
            "ignoreUnknownValues": options.ignore_unknown,
            "rows": [{"json": row} for row in rows],
        }
        return self.request(
            "POST", f"{self._table_path(dataset_id, table_id)}/insertAll", body=body
        )

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    def list_jobs(self, options: JobListOptions) -> ApiResponse:
        return self.request("GET", f"{self._project_path()}/jobs", options.to_params())

    def get_job(self, job_id: str) -> ApiResponse:
        return self.request("GET", f"{self._project_path()}/jobs/{job_id}")

    def insert_job(self, configuration: dict[str, Any]) -> ApiResponse:
        return self.request(
            "POST", f"{self._project_path()}/jobs", body={"configuration": configuration}
        )

    def copy_table(
        self,
        source: dict[str, str],
        target: dict[str, str],
        options: CopyOptions,
    ) -> ApiResponse:
        copy: dict[str, Any] = {"sourceTable": source, "destinationTable": target}
        _set_dispositions(copy, options)
        return self.insert_job(_job_config("copy", copy, options.dryrun))

    def extract_table(
        self,
        table_ref: dict[str, str],
        extract_url: str,
        options: ExtractOptions,
    ) -> ApiResponse:
        extract: dict[str, Any] = {
            "sourceTable": table_ref,
            "destinationUris": [extract_url],
        }
        source_format = options.format or derive_source_format(extract_url)
        if source_format is not None:
            extract["destinationFormat"] = source_format
        if options.compression is not None:
            extract["compression"] = options.compression
        if options.delimiter is not None:
            extract["fieldDelimiter"] = options.delimiter
        if options.header is not None:
            extract["printHeader"] = options.header
        return self.insert_job(_job_config("extract", extract, options.dryrun))

    def load_table(
        self,
        table_ref: dict[str, str],
        storage_url: str,
        options: LoadOptions,
    ) -> ApiResponse:
        load = _load_config(table_ref, storage_url, options)
        load["sourceUris"] = [storage_url]
        return self.insert_job(_job_config("load", load, options.dryrun))

    def load_multipart(
        self,
        table_ref: dict[str, str],
        path: Path,
        options: LoadOptions,
    ) -> ApiResponse:
        load = _load_config(table_ref, str(path), options)
        metadata = {"configuration": _job_config("load", load, options.dryrun)}
        return self.upload_multipart(
            f"{self.upload_base}{self._project_path()}/jobs",
            metadata,
            path.read_bytes(),
            DEFAULT_CONTENT_TYPE,
        )

    def load_resumable(
        self,
        table_ref: dict[str, str],
        path: Path,
        chunk_size: int | None,
        options: LoadOptions,
    ) -> ApiResponse:
        load = _load_config(table_ref, str(path), options)
        metadata = {"configuration": _job_config("load", load, options.dryrun)}
        return self.upload_resumable(
            f"{self.upload_base}{self._project_path()}/jobs",
            metadata,
            path,
            DEFAULT_CONTENT_TYPE,
            chunk_size=chunk_size,
        )


def _job_config(kind: str, body: dict[str, Any], dryrun: bool) -> dict[str, Any]:
    configuration: dict[str, Any] = {kind: body}
    if dryrun:
        configuration["dryRun"] = True
    return configuration


def _set_dispositions(body: dict[str, Any], options: CopyOptions) -> None:
    if options.create is not None:
        body["createDisposition"] = options.create
    if options.write is not None:
        body["writeDisposition"] = options.write


def _load_config(
    table_ref: dict[str, str],
    source: str,
    options: LoadOptions,
) -> dict[str, Any]:
    """Build the load job configuration shared by all load paths."""
    load: dict[str, Any] = {"destinationTable": table_ref}
    _set_dispositions(load, options)
    source_format = options.format or derive_source_format(source)
    optional = {
        "sourceFormat": source_format,
        "projectionFields": options.projection_fields,
        "allowJaggedRows": options.jagged_rows,
        "allowQuotedNewlines": options.quoted_newlines,
        "encoding": options.encoding,
        "fieldDelimiter": options.delimiter,
        "ignoreUnknownValues": options.ignore_unknown,
        "maxBadRecords": options.max_bad_records,
        "quote": options.quote,
        "skipLeadingRows": options.skip_leading,
        "schema": options.schema_,
    }
    load.update({k: v for k, v in optional.items() if v is not None})
    return load
