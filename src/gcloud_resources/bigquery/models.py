"""Option models for BigQuery operations."""

from typing import Any

from pydantic import Field, field_validator

from gcloud_resources.models import Options, PageOptions

CREATE_DISPOSITIONS = {
    "needed": "CREATE_IF_NEEDED",
    "create_if_needed": "CREATE_IF_NEEDED",
    "never": "CREATE_NEVER",
    "create_never": "CREATE_NEVER",
}

WRITE_DISPOSITIONS = {
    "truncate": "WRITE_TRUNCATE",
    "write_truncate": "WRITE_TRUNCATE",
    "append": "WRITE_APPEND",
    "write_append": "WRITE_APPEND",
    "empty": "WRITE_EMPTY",
    "write_empty": "WRITE_EMPTY",
}

SOURCE_FORMATS = {
    "csv": "CSV",
    "json": "NEWLINE_DELIMITED_JSON",
    "newline_delimited_json": "NEWLINE_DELIMITED_JSON",
    "avro": "AVRO",
    "datastore": "DATASTORE_BACKUP",
    "backup": "DATASTORE_BACKUP",
    "datastore_backup": "DATASTORE_BACKUP",
}

# Source format derived from a file extension when none is given
FORMAT_EXTENSIONS = {
    ".csv": "CSV",
    ".json": "NEWLINE_DELIMITED_JSON",
    ".avro": "AVRO",
    ".backup_info": "DATASTORE_BACKUP",
}

EXTRACT_FORMATS = {
    "csv": "CSV",
    "json": "NEWLINE_DELIMITED_JSON",
    "newline_delimited_json": "NEWLINE_DELIMITED_JSON",
    "avro": "AVRO",
}

JOB_STATES = {"done", "pending", "running"}


def _lookup(table: dict[str, str], value: Any, what: str) -> str | None:
    if value is None:
        return None
    key = str(value).lower()
    if key in table:
        return table[key]
    if str(value) in table.values():
        return str(value)
    raise ValueError(f"unknown {what} '{value}'")


def derive_source_format(source: str) -> str | None:
    """Guess the load format from a file name or gs:// URL."""
    lowered = source.lower()
    for extension, source_format in FORMAT_EXTENSIONS.items():
        if lowered.endswith(extension):
            return source_format
    return None


class DatasetListOptions(PageOptions):
    """Options for listing datasets."""

    include_hidden: bool = Field(default=False, serialization_alias="all")


class TableListOptions(PageOptions):
    """Options for listing tables in a dataset."""


class JobListOptions(PageOptions):
    """Options for listing jobs."""

    all_users: bool = Field(default=False, serialization_alias="allUsers")
    state: str | None = Field(default=None, serialization_alias="stateFilter")

    @field_validator("state", mode="before")
    @classmethod
    def normalize_state(cls, value: Any) -> str | None:
        """Accept job states in any case."""
        if value is None:
            return None
        state = str(value).lower()
        if state not in JOB_STATES:
            raise ValueError(f"unknown job state '{value}'")
        return state


class TableDataOptions(PageOptions):
    """Options for reading table rows."""

    start_index: int | None = Field(default=None, ge=0, serialization_alias="startIndex")


class CreateDatasetOptions(Options):
    """Optional attributes for a new dataset."""

    name: str | None = None
    description: str | None = None
    expiration: int | None = Field(default=None, ge=0)
    location: str | None = None


class CreateTableOptions(Options):
    """Optional attributes for a new table or view."""

    name: str | None = None
    description: str | None = None
    schema_: dict[str, Any] | None = Field(default=None, alias="schema")


class InsertOptions(Options):
    """Options for streaming inserts."""

    skip_invalid: bool = False
    ignore_unknown: bool = False


class CopyOptions(Options):
    """Options for table copy jobs."""

    create: str | None = None
    write: str | None = None
    dryrun: bool = False

    @field_validator("create", mode="before")
    @classmethod
    def normalize_create(cls, value: Any) -> str | None:
        return _lookup(CREATE_DISPOSITIONS, value, "create disposition")

    @field_validator("write", mode="before")
    @classmethod
    def normalize_write(cls, value: Any) -> str | None:
        return _lookup(WRITE_DISPOSITIONS, value, "write disposition")


class ExtractOptions(Options):
    """Options for table extract jobs."""

    format: str | None = None
    compression: str | None = None
    delimiter: str | None = None
    header: bool | None = None
    dryrun: bool = False

    @field_validator("format", mode="before")
    @classmethod
    def normalize_format(cls, value: Any) -> str | None:
        return _lookup(EXTRACT_FORMATS, value, "extract format")

    @field_validator("compression", mode="before")
    @classmethod
    def normalize_compression(cls, value: Any) -> str | None:
        return None if value is None else str(value).upper()


class LoadOptions(CopyOptions):
    """Options for table load jobs."""

    format: str | None = None
    projection_fields: list[str] | None = None
    jagged_rows: bool | None = None
    quoted_newlines: bool | None = None
    encoding: str | None = None
    delimiter: str | None = None
    ignore_unknown: bool | None = None
    max_bad_records: int | None = Field(default=None, ge=0)
    quote: str | None = None
    skip_leading: int | None = Field(default=None, ge=0)
    schema_: dict[str, Any] | None = Field(default=None, alias="schema")
    chunk_size: int | None = Field(default=None, ge=0)

    @field_validator("format", mode="before")
    @classmethod
    def normalize_format(cls, value: Any) -> str | None:
        return _lookup(SOURCE_FORMATS, value, "source format")
