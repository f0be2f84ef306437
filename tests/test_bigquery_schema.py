"""Tests for the schema builder."""

import pytest

from gcloud_resources.bigquery import SchemaBuilder
from gcloud_resources.errors import InvalidArgument


class TestSchemaBuilder:
    """Tests for building schema documents."""

    def test_new_builder_is_unchanged(self) -> None:
        """Test a fresh builder reports no change and builds an empty schema."""
        schema = SchemaBuilder()
        assert not schema.changed
        assert len(schema) == 0
        assert schema.build() == {"fields": []}

    def test_typed_adders(self) -> None:
        """Test each adder appends a field of its type."""
        schema = SchemaBuilder()
        schema.string("s")
        schema.integer("i", mode="nullable")
        schema.float("f", description="ratio")
        schema.boolean("b")
        schema.timestamp("t", mode="REQUIRED")

        assert schema.changed
        types = [f["type"] for f in schema]
        assert types == ["STRING", "INTEGER", "FLOAT", "BOOLEAN", "TIMESTAMP"]
        assert schema.fields[1]["mode"] == "NULLABLE"
        assert schema.fields[2]["description"] == "ratio"
        assert "mode" not in schema.fields[0]

    def test_nested_records(self) -> None:
        """Test record builders write into the parent field."""
        schema = SchemaBuilder()
        cities = schema.record("cities_lived", mode="repeated")
        cities.string("place")

        field = schema.build()["fields"][0]
        assert field["type"] == "RECORD"
        assert field["mode"] == "REPEATED"
        assert field["fields"] == [{"name": "place", "type": "STRING"}]

    def test_seeded_builder(self) -> None:
        """Test a builder seeded with a schema starts unchanged."""
        original = {"fields": [{"name": "a", "type": "STRING"}]}
        schema = SchemaBuilder(original)

        assert not schema.changed
        schema.fields[0]["type"] = "INTEGER"
        assert schema.changed
        assert original["fields"][0]["type"] == "STRING"

    def test_remove_field(self) -> None:
        """Test removing fields by name."""
        schema = SchemaBuilder({"fields": [{"name": "a", "type": "STRING"}]})

        assert schema.remove_field("missing") is None
        assert not schema.changed
        assert schema.remove_field("a") == {"name": "a", "type": "STRING"}
        assert schema.changed
        assert schema.build() == {"fields": []}

    def test_build_is_detached(self) -> None:
        """Test later edits do not affect a built document."""
        schema = SchemaBuilder()
        schema.string("a")
        built = schema.build()
        schema.string("b")
        assert len(built["fields"]) == 1

    @pytest.mark.parametrize(
        ("name", "field_type", "mode"),
        [("", "STRING", None), ("a", "GEOGRAPHY", None), ("a", "STRING", "OPTIONAL")],
    )
    def test_invalid_fields(self, name: str, field_type: str, mode: str | None) -> None:
        """Test empty names and unknown types or modes are rejected."""
        with pytest.raises(InvalidArgument):
            SchemaBuilder().add_field(name, field_type, mode=mode)
