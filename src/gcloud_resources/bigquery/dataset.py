"""BigQuery datasets."""

from datetime import datetime
from typing import Any

from gcloud_resources.bigquery.connection import BigqueryConnection
from gcloud_resources.bigquery.models import CreateTableOptions, TableListOptions
from gcloud_resources.bigquery.schema import SchemaBuilder
from gcloud_resources.bigquery.table import BaseTable, Table, View, table_from_gapi
from gcloud_resources.connection import ApiResponse
from gcloud_resources.errors import InvalidArgument
from gcloud_resources.logging import get_logger
from gcloud_resources.models import build_options
from gcloud_resources.page import Page, parse_total
from gcloud_resources.resource import Resource, from_millis

logger = get_logger(__name__)


class Dataset(Resource):
    """A BigQuery dataset: a container of tables and views."""

    connection: BigqueryConnection

    def __repr__(self) -> str:
        return f"Dataset({self.project_id}:{self.dataset_id})"

    @property
    def dataset_ref(self) -> dict[str, str]:
        return dict(self._gapi.get("datasetReference") or {})

    @property
    def dataset_id(self) -> str:
        return self.dataset_ref.get("datasetId", "")

    @property
    def project_id(self) -> str:
        return self.dataset_ref.get("projectId", "")

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
    def default_expiration(self) -> int | None:
        """Default lifetime of new tables in milliseconds."""
        value = self._full("defaultTableExpirationMs")
        return int(value) if value is not None else None

    @default_expiration.setter
    def default_expiration(self, value: int | None) -> None:
        self._patch_gapi({"defaultTableExpirationMs": value})

    @property
    def etag(self) -> str | None:
        return self._full("etag")

    @property
    def api_url(self) -> str | None:
        return self._full("selfLink")

    @property
    def location(self) -> str | None:
        return self._full("location")

    @property
    def created_at(self) -> datetime | None:
        return from_millis(self._full("creationTime"))

    @property
    def modified_at(self) -> datetime | None:
        return from_millis(self._full("lastModifiedTime"))

    def _fetch(self) -> ApiResponse:
        return self.connection.get_dataset(self.dataset_id)

    def _send_patch(self, patch: dict[str, Any]) -> ApiResponse:
        return self.connection.patch_dataset(self.dataset_id, patch)

    def delete(self, force: bool = False) -> bool:
        """Permanently delete the dataset.

        Args:
            force: Also delete every table in the dataset. Without it the
                server refuses to delete a dataset that still has tables.
        """
        self.connection.delete_dataset(self.dataset_id, force=force).raise_for_error()
        logger.info("dataset_deleted", dataset=self.dataset_id, force=force)
        return True

    def create_table(
        self,
        table_id: str,
        name: str | None = None,
        description: str | None = None,
        schema: dict[str, Any] | SchemaBuilder | None = None,
    ) -> Table:
        """Create a table in this dataset.

        Args:
            table_id: ID of the new table.
            name: Friendly name.
            description: Table description.
            schema: A schema document or SchemaBuilder. An unmodified
                builder is not sent.

        Returns:
            The new table (partial representation).

        Raises:
            InvalidArgument: If the table ID is empty.
            ApiError: If the server rejects the request.
        """
        if isinstance(schema, SchemaBuilder):
            schema = schema.build() if schema.changed else None
        table = self._insert_table(
            table_id, None, name=name, description=description, schema=schema
        )
        assert isinstance(table, Table)
        return table

    def create_view(
        self,
        table_id: str,
        query: str,
        name: str | None = None,
        description: str | None = None,
    ) -> View:
        """Create a view defined by a query in this dataset."""
        if not query:
            raise InvalidArgument("query is missing")
        view = self._insert_table(table_id, query, name=name, description=description)
        assert isinstance(view, View)
        return view

    def _insert_table(self, table_id: str, query: str | None, **values: Any) -> BaseTable:
        if not table_id:
            raise InvalidArgument("table_id is missing")
        options = build_options(CreateTableOptions, **values)
        response = self.connection.insert_table(
            self.dataset_id, table_id, options, query=query
        ).raise_for_error()
        body = dict(response.body or {})
        # Insert responses omit the type for plain tables
        body.setdefault("type", "VIEW" if query is not None else "TABLE")
        logger.info("table_created", dataset=self.dataset_id, table=table_id)
        return table_from_gapi(body, self.connection)

    def tables(
        self,
        page_token: str | None = None,
        max_results: int | None = None,
    ) -> Page[BaseTable]:
        """List one page of tables and views in this dataset."""
        options = build_options(
            TableListOptions, page_token=page_token, max_results=max_results
        )
        body = self.connection.list_tables(self.dataset_id, options).raise_for_error().body or {}
        return Page(
            items=[table_from_gapi(gapi, self.connection) for gapi in body.get("tables") or []],
            next_token=body.get("nextPageToken"),
            total=parse_total(body.get("totalItems")),
        )

    def table(self, table_id: str) -> BaseTable | None:
        """Look up a table or view by ID, or None if it does not exist."""
        response = self.connection.get_table(self.dataset_id, table_id)
        if response.is_not_found:
            return None
        response.raise_for_error()
        return table_from_gapi(response.body or {}, self.connection, complete=True)
