"""Builder for BigQuery table schemas."""

import copy
from collections.abc import Iterator
from typing import Any

from gcloud_resources.errors import InvalidArgument

FIELD_TYPES = {"STRING", "INTEGER", "FLOAT", "BOOLEAN", "TIMESTAMP", "RECORD"}
FIELD_MODES = {"NULLABLE", "REQUIRED", "REPEATED"}


class SchemaBuilder:
    """Accumulates schema fields before they are sent with a create or patch.

    Example:
        schema = SchemaBuilder()
        schema.string("first_name", mode="required")
        cities = schema.record("cities_lived", mode="repeated")
        cities.string("place", mode="required")
        cities.integer("number_of_years", mode="required")
        dataset.create_table("people", schema=schema)

    A builder that was never modified reports ``changed == False`` and
    contributes nothing to the enclosing request.
    """

    def __init__(self, schema: dict[str, Any] | None = None) -> None:
        """Initialize the builder, optionally seeded with an existing schema.

        Args:
            schema: A schema document ({"fields": [...]}) to start from.
        """
        self._fields: list[dict[str, Any]] = copy.deepcopy((schema or {}).get("fields") or [])
        self._original = copy.deepcopy(self._fields)
        self._dirty = False

    @property
    def fields(self) -> list[dict[str, Any]]:
        """The live field list; in-place edits count as changes."""
        return self._fields

    @property
    def changed(self) -> bool:
        """True once a field was added, removed or edited."""
        return self._dirty or self._fields != self._original

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def add_field(
        self,
        name: str,
        field_type: str,
        description: str | None = None,
        mode: str | None = None,
    ) -> dict[str, Any]:
        """Append a field.

        Args:
            name: Field name.
            field_type: One of STRING, INTEGER, FLOAT, BOOLEAN, TIMESTAMP, RECORD.
            description: Optional field description.
            mode: Optional NULLABLE, REQUIRED or REPEATED (any case).

        Returns:
            The field document that was appended.

        Raises:
            InvalidArgument: If the name is empty or the type or mode is unknown.
        """
        if not name:
            raise InvalidArgument("field name is missing")
        upper_type = field_type.upper()
        if upper_type not in FIELD_TYPES:
            raise InvalidArgument(f"unknown field type '{field_type}'")

        field: dict[str, Any] = {"name": name, "type": upper_type}
        if description is not None:
            field["description"] = description
        if mode is not None:
            upper_mode = mode.upper()
            if upper_mode not in FIELD_MODES:
                raise InvalidArgument(f"unknown field mode '{mode}'")
            field["mode"] = upper_mode

        self._fields.append(field)
        self._dirty = True
        return field

    def string(self, name: str, description: str | None = None, mode: str | None = None) -> None:
        self.add_field(name, "STRING", description, mode)

    def integer(self, name: str, description: str | None = None, mode: str | None = None) -> None:
        self.add_field(name, "INTEGER", description, mode)

    def float(self, name: str, description: str | None = None, mode: str | None = None) -> None:
        self.add_field(name, "FLOAT", description, mode)

    def boolean(self, name: str, description: str | None = None, mode: str | None = None) -> None:
        self.add_field(name, "BOOLEAN", description, mode)

    def timestamp(
        self, name: str, description: str | None = None, mode: str | None = None
    ) -> None:
        self.add_field(name, "TIMESTAMP", description, mode)

    def record(
        self, name: str, description: str | None = None, mode: str | None = None
    ) -> "SchemaBuilder":
        """Append a RECORD field and return a builder for its nested fields."""
        nested = SchemaBuilder()
        field = self.add_field(name, "RECORD", description, mode)
        field["fields"] = nested._fields
        return nested

    def remove_field(self, name: str) -> dict[str, Any] | None:
        """Remove the first field with the given name, returning it if found."""
        for index, field in enumerate(self._fields):
            if field.get("name") == name:
                self._dirty = True
                return self._fields.pop(index)
        return None

    def build(self) -> dict[str, Any]:
        """Return the schema document; later builder changes do not affect it."""
        return {"fields": copy.deepcopy(self._fields)}
