"""Tests for lazy loading, patching and batched updates on resources."""

import json
from collections.abc import Callable
from typing import Any

import pytest
import respx
from httpx import Response

from gcloud_resources.bigquery import BigqueryConnection, Dataset
from gcloud_resources.errors import ApiError, NotFound
from gcloud_resources.resource import from_millis, from_rfc3339, merge_patch

DATASET_URL = "https://www.googleapis.com/bigquery/v2/projects/test-project/datasets/my_dataset"


@pytest.fixture
def partial_dataset(
    bigquery_connection: BigqueryConnection,
    make_dataset_gapi: Callable[..., dict[str, Any]],
) -> Dataset:
    """Dataset built from a list summary."""
    return Dataset.from_gapi(make_dataset_gapi(full=False), bigquery_connection)


@pytest.fixture
def full_dataset(
    bigquery_connection: BigqueryConnection,
    make_dataset_gapi: Callable[..., dict[str, Any]],
) -> Dataset:
    """Dataset built from a get response."""
    return Dataset.from_gapi(make_dataset_gapi(), bigquery_connection, complete=True)


class TestHelpers:
    """Tests for timestamp conversion and patch merging."""

    def test_from_millis(self) -> None:
        """Test millisecond strings and integers convert to aware datetimes."""
        assert from_millis("1433160000000").isoformat() == "2015-06-01T12:00:00+00:00"
        assert from_millis(1433160000000) == from_millis("1433160000000")
        assert from_millis(None) is None

    def test_from_rfc3339(self) -> None:
        """Test RFC 3339 strings convert to aware datetimes."""
        value = from_rfc3339("2015-06-01T12:00:00.000Z")
        assert value is not None
        assert value.isoformat() == "2015-06-01T12:00:00+00:00"
        assert from_rfc3339(None) is None

    def test_merge_patch_merges_nested_objects(self) -> None:
        """Test nested objects merge while other values are replaced."""
        target = {"website": {"mainPageSuffix": "index.html"}, "cors": [1]}
        merge_patch(target, {"website": {"notFoundPage": "404.html"}, "cors": [2]})
        assert target == {
            "website": {"mainPageSuffix": "index.html", "notFoundPage": "404.html"},
            "cors": [2],
        }


class TestLazyLoading:
    """Tests for fetching the full representation on demand."""

    def test_completeness_flag(self, partial_dataset: Dataset, full_dataset: Dataset) -> None:
        """Test completeness comes from construction, not field presence."""
        assert partial_dataset.is_complete is False
        assert full_dataset.is_complete is True

    @respx.mock
    def test_full_only_attribute_fetches_once(
        self,
        partial_dataset: Dataset,
        make_dataset_gapi: Callable[..., dict[str, Any]],
    ) -> None:
        """Test a full-only accessor fetches once and then reads the cache."""
        route = respx.get(DATASET_URL).mock(
            return_value=Response(200, json=make_dataset_gapi())
        )

        assert partial_dataset.description == "This is my dataset"
        assert partial_dataset.etag == "etag123456789"
        assert partial_dataset.default_expiration == 999
        assert partial_dataset.created_at is not None

        assert route.call_count == 1
        assert partial_dataset.is_complete is True

    @respx.mock
    def test_present_field_does_not_fetch(self, partial_dataset: Dataset) -> None:
        """Test fields carried by the summary are read without a request."""
        assert partial_dataset.name == "My Dataset"
        assert partial_dataset.dataset_id == "my_dataset"
        assert partial_dataset.project_id == "test-project"

    @respx.mock
    def test_missing_field_on_full_representation(self, full_dataset: Dataset) -> None:
        """Test a field absent from a full representation is None without a request."""
        assert full_dataset.get_attribute("labels") is None

    @respx.mock
    def test_reload_replaces_cache(
        self,
        full_dataset: Dataset,
        make_dataset_gapi: Callable[..., dict[str, Any]],
    ) -> None:
        """Test reload fetches again even when the cache is complete."""
        respx.get(DATASET_URL).mock(
            return_value=Response(
                200, json=make_dataset_gapi(description="New description")
            )
        )

        assert full_dataset.description == "This is my dataset"
        assert full_dataset.reload() is full_dataset
        assert full_dataset.description == "New description"

    @respx.mock
    def test_reload_not_found(self, partial_dataset: Dataset) -> None:
        """Test reload raises NotFound and leaves the cache untouched."""
        before = json.dumps(partial_dataset.gapi, sort_keys=True)
        respx.get(DATASET_URL).mock(
            return_value=Response(
                404, json={"error": {"code": 404, "message": "Not found: Dataset"}}
            )
        )

        with pytest.raises(NotFound):
            partial_dataset.reload()

        assert json.dumps(partial_dataset.gapi, sort_keys=True) == before
        assert partial_dataset.is_complete is False


class TestPatch:
    """Tests for attribute setters."""

    @respx.mock
    def test_setter_sends_minimal_patch(
        self,
        full_dataset: Dataset,
        make_dataset_gapi: Callable[..., dict[str, Any]],
    ) -> None:
        """Test a setter sends only the changed field and adopts the response."""
        route = respx.patch(DATASET_URL).mock(
            return_value=Response(200, json=make_dataset_gapi(name="Renamed"))
        )

        full_dataset.name = "Renamed"

        assert json.loads(route.calls.last.request.content) == {"friendlyName": "Renamed"}
        assert full_dataset.name == "Renamed"

    @respx.mock
    def test_response_replaces_whole_cache(
        self,
        full_dataset: Dataset,
        make_dataset_gapi: Callable[..., dict[str, Any]],
    ) -> None:
        """Test the server response replaces the cache rather than merging into it."""
        response = make_dataset_gapi(description="Server side description")
        respx.patch(DATASET_URL).mock(return_value=Response(200, json=response))

        full_dataset.name = "My Dataset"

        assert full_dataset.gapi == response

    @respx.mock
    def test_failed_patch_leaves_cache_unchanged(self, full_dataset: Dataset) -> None:
        """Test a rejected patch raises and leaves the cache bit-for-bit identical."""
        before = json.dumps(full_dataset.gapi, sort_keys=True)
        respx.patch(DATASET_URL).mock(
            return_value=Response(
                400,
                json={
                    "error": {
                        "code": 400,
                        "message": "Invalid value",
                        "errors": [{"reason": "invalid", "message": "Invalid value"}],
                    }
                },
            )
        )

        with pytest.raises(ApiError) as exc_info:
            full_dataset.description = "Broken"

        assert exc_info.value.status_code == 400
        assert exc_info.value.reasons == ["invalid"]
        assert json.dumps(full_dataset.gapi, sort_keys=True) == before


class TestUpdate:
    """Tests for batching several changes into one patch."""

    @respx.mock
    def test_multiple_changes_send_one_patch(
        self,
        full_dataset: Dataset,
        make_dataset_gapi: Callable[..., dict[str, Any]],
    ) -> None:
        """Test changes inside update() are sent together on exit."""
        route = respx.patch(DATASET_URL).mock(
            return_value=Response(
                200,
                json=make_dataset_gapi(
                    name="New name", description="New description", default_expiration=1000
                ),
            )
        )

        with full_dataset.update() as d:
            d.name = "New name"
            d.description = "New description"
            d.default_expiration = 1000
            assert route.call_count == 0

        assert route.call_count == 1
        assert json.loads(route.calls.last.request.content) == {
            "friendlyName": "New name",
            "description": "New description",
            "defaultTableExpirationMs": 1000,
        }
        assert full_dataset.name == "New name"
        assert full_dataset.default_expiration == 1000

    @respx.mock(assert_all_called=False)
    def test_no_changes_send_nothing(self, full_dataset: Dataset) -> None:
        """Test an update block without changes makes no request."""
        route = respx.patch(DATASET_URL)

        with full_dataset.update() as d:
            assert d.name == "My Dataset"

        assert route.call_count == 0

    @respx.mock(assert_all_called=False)
    def test_same_value_is_not_a_change(self, full_dataset: Dataset) -> None:
        """Test assigning the current value does not produce a patch."""
        route = respx.patch(DATASET_URL)

        with full_dataset.update() as d:
            d.name = "My Dataset"

        assert route.call_count == 0

    @respx.mock(assert_all_called=False)
    def test_exception_discards_changes(self, full_dataset: Dataset) -> None:
        """Test nothing is sent when the block raises."""
        route = respx.patch(DATASET_URL)

        with pytest.raises(RuntimeError), full_dataset.update() as d:
            d.name = "Discarded"
            raise RuntimeError("abort")

        assert route.call_count == 0
        assert full_dataset.name == "My Dataset"

    @respx.mock
    def test_proxy_fetches_full_data_and_keeps_changes(
        self,
        partial_dataset: Dataset,
        make_dataset_gapi: Callable[..., dict[str, Any]],
    ) -> None:
        """Test a lazy load inside update() keeps earlier changes and sends only them."""
        respx.get(DATASET_URL).mock(return_value=Response(200, json=make_dataset_gapi()))
        route = respx.patch(DATASET_URL).mock(
            return_value=Response(200, json=make_dataset_gapi(name="Renamed"))
        )

        with partial_dataset.update() as d:
            d.name = "Renamed"
            assert d.description == "This is my dataset"
            assert d.name == "Renamed"

        assert json.loads(route.calls.last.request.content) == {"friendlyName": "Renamed"}
        assert partial_dataset.is_complete is True

    @respx.mock
    def test_failed_update_leaves_cache_unchanged(self, full_dataset: Dataset) -> None:
        """Test a rejected batched patch leaves the original untouched."""
        before = json.dumps(full_dataset.gapi, sort_keys=True)
        respx.patch(DATASET_URL).mock(
            return_value=Response(403, json={"error": {"code": 403, "message": "Forbidden"}})
        )

        with pytest.raises(ApiError), full_dataset.update() as d:
            d.name = "Nope"

        assert json.dumps(full_dataset.gapi, sort_keys=True) == before
