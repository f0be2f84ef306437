"""Table rows and streaming insert results."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from gcloud_resources.page import Page, parse_total


def format_value(field_schema: dict[str, Any], value: Any) -> Any:
    """Convert a tabledata cell ({"v": ...} payload) to a Python value.

    Args:
        field_schema: The schema field describing the cell.
        value: The raw "v" value (strings for scalars, nested rows for records).

    Returns:
        The converted value.
    """
    if value is None:
        return None
    if field_schema.get("mode") == "REPEATED":
        single = {**field_schema, "mode": "NULLABLE"}
        return [format_value(single, item.get("v")) for item in value]

    field_type = field_schema.get("type")
    if field_type == "RECORD":
        return format_row(field_schema.get("fields") or [], value)
    if field_type == "INTEGER":
        return int(value)
    if field_type == "FLOAT":
        return float(value)
    if field_type == "BOOLEAN":
        return str(value).lower() == "true"
    if field_type == "TIMESTAMP":
        return datetime.fromtimestamp(float(value), tz=UTC)
    return value


def format_row(fields: list[dict[str, Any]], row: dict[str, Any]) -> dict[str, Any]:
    """Convert one tabledata row ({"f": [{"v": ...}, ...]}) into a name -> value dict."""
    cells = row.get("f") or []
    return {
        field_schema["name"]: format_value(field_schema, cell.get("v"))
        for field_schema, cell in zip(fields, cells, strict=False)
    }


@dataclass
class TableData(Page[dict[str, Any]]):
    """A page of table rows converted according to the table schema."""

    etag: str | None = None
    raw: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_response(cls, body: dict[str, Any], fields: list[dict[str, Any]]) -> "TableData":
        """Build a page from a tabledata.list response.

        Args:
            body: Response body.
            fields: Table schema fields used to name and convert the cells.

        Returns:
            TableData with rows in server order.
        """
        raw_rows = body.get("rows") or []
        return cls(
            items=[format_row(fields, row) for row in raw_rows],
            next_token=body.get("pageToken"),
            total=parse_total(body.get("totalRows")),
            etag=body.get("etag"),
            raw=raw_rows,
        )


@dataclass
class InsertError:
    """Errors reported for one row of a streaming insert."""

    index: int
    row: dict[str, Any]
    errors: list[dict[str, Any]]


class InsertResponse:
    """Result of a streaming insert."""

    def __init__(self, rows: list[dict[str, Any]], gapi: dict[str, Any]) -> None:
        self.rows = rows
        self.gapi = gapi
        self.insert_errors = [
            InsertError(
                index=int(entry.get("index", 0)),
                row=rows[int(entry.get("index", 0))],
                errors=entry.get("errors") or [],
            )
            for entry in gapi.get("insertErrors") or []
        ]

    @property
    def is_success(self) -> bool:
        return not self.insert_errors

    @property
    def error_count(self) -> int:
        return len(self.insert_errors)

    @property
    def insert_count(self) -> int:
        return len(self.rows) - self.error_count

    def errors_for(self, row: dict[str, Any]) -> list[dict[str, Any]]:
        """Errors reported for a given row (empty when the row was inserted)."""
        for insert_error in self.insert_errors:
            if insert_error.row is row or insert_error.row == row:
                return insert_error.errors
        return []
