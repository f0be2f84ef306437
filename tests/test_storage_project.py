"""Tests for the Cloud Storage project: listing, finding and creating buckets."""

import json
from collections.abc import Callable
from typing import Any

import pytest
import respx
from httpx import Response

from gcloud_resources.errors import ApiError, InvalidArgument
from gcloud_resources.storage import Bucket, CorsBuilder, Project

BUCKETS_URL = "https://www.googleapis.com/storage/v1/b"


class TestBuckets:
    """Tests for listing and finding buckets."""

    @respx.mock
    def test_list_buckets(
        self, storage: Project, make_bucket_gapi: Callable[..., dict[str, Any]]
    ) -> None:
        """Test buckets are listed for the connection's project."""
        route = respx.get(BUCKETS_URL).mock(
            return_value=Response(
                200,
                json={
                    "kind": "storage#buckets",
                    "items": [make_bucket_gapi(f"bucket-{i}") for i in range(3)],
                },
            )
        )

        buckets = storage.buckets()

        assert [b.name for b in buckets] == ["bucket-0", "bucket-1", "bucket-2"]
        assert all(isinstance(b, Bucket) for b in buckets)
        assert not buckets.has_next
        assert route.calls.last.request.url.params["project"] == "test-project"

    @respx.mock
    def test_paginate_buckets_with_prefix(
        self, storage: Project, make_bucket_gapi: Callable[..., dict[str, Any]]
    ) -> None:
        """Test prefix, page size and token are sent."""
        route = respx.get(BUCKETS_URL).mock(
            side_effect=[
                Response(
                    200,
                    json={
                        "items": [make_bucket_gapi(f"logs-{i}") for i in range(3)],
                        "nextPageToken": "next_page_token",
                    },
                ),
                Response(200, json={"items": [make_bucket_gapi("logs-3")]}),
            ]
        )

        first = storage.buckets(prefix="logs-", max_results=3)
        second = storage.buckets(prefix="logs-", page_token=first.next_token)

        assert len(first) == 3
        assert first.next_token == "next_page_token"
        assert [b.name for b in second] == ["logs-3"]
        first_params = route.calls[0].request.url.params
        assert first_params["prefix"] == "logs-"
        assert first_params["maxResults"] == "3"
        assert route.calls[1].request.url.params["pageToken"] == "next_page_token"

    @respx.mock
    def test_find_bucket(
        self, storage: Project, make_bucket_gapi: Callable[..., dict[str, Any]]
    ) -> None:
        """Test a found bucket is complete."""
        respx.get(f"{BUCKETS_URL}/my-bucket").mock(
            return_value=Response(200, json=make_bucket_gapi())
        )

        bucket = storage.bucket("my-bucket")

        assert bucket is not None
        assert bucket.is_complete
        assert bucket.url == "gs://my-bucket"

    @respx.mock
    def test_find_missing_bucket(self, storage: Project) -> None:
        """Test a missing bucket is None."""
        respx.get(f"{BUCKETS_URL}/nope").mock(
            return_value=Response(404, json={"error": {"code": 404, "message": "Not Found"}})
        )

        assert storage.bucket("nope") is None


class TestCreateBucket:
    """Tests for creating buckets."""

    @respx.mock
    def test_create_bucket(
        self, storage: Project, make_bucket_gapi: Callable[..., dict[str, Any]]
    ) -> None:
        """Test a bucket created with just a name."""
        route = respx.post(BUCKETS_URL).mock(
            return_value=Response(200, json=make_bucket_gapi("new-bucket"))
        )

        bucket = storage.create_bucket("new-bucket")

        assert bucket.name == "new-bucket"
        assert not bucket.is_complete
        request = route.calls.last.request
        assert json.loads(request.content) == {"name": "new-bucket"}
        assert dict(request.url.params) == {"project": "test-project"}

    @respx.mock
    def test_create_bucket_with_options(
        self, storage: Project, make_bucket_gapi: Callable[..., dict[str, Any]]
    ) -> None:
        """Test options are translated into the body and parameters."""
        route = respx.post(BUCKETS_URL).mock(
            return_value=Response(200, json=make_bucket_gapi("new-bucket"))
        )

        storage.create_bucket(
            "new-bucket",
            acl="public",
            default_acl="auth",
            location="EU",
            storage_class="nearline",
            versioning=True,
            logging_bucket="log-bucket",
            logging_prefix="logs/",
            website_main="index.html",
            website_404="404.html",
        )

        request = route.calls.last.request
        assert json.loads(request.content) == {
            "name": "new-bucket",
            "location": "EU",
            "storageClass": "NEARLINE",
            "versioning": {"enabled": True},
            "logging": {"logBucket": "log-bucket", "logObjectPrefix": "logs/"},
            "website": {"mainPageSuffix": "index.html", "notFoundPage": "404.html"},
        }
        params = request.url.params
        assert params["predefinedAcl"] == "publicRead"
        assert params["predefinedDefaultObjectAcl"] == "authenticatedRead"

    @respx.mock
    def test_create_bucket_with_cors_builder(
        self, storage: Project, make_bucket_gapi: Callable[..., dict[str, Any]]
    ) -> None:
        """Test builder rules are sent with defaults applied."""
        route = respx.post(BUCKETS_URL).mock(
            return_value=Response(200, json=make_bucket_gapi("new-bucket"))
        )
        cors = CorsBuilder()
        cors.add_rule(["http://example.org", "https://example.org"], "*", max_age=300)
        cors.add_rule("http://example.org", "GET", headers="X-My-Custom-Header")

        storage.create_bucket("new-bucket", cors=cors)

        assert json.loads(route.calls.last.request.content)["cors"] == [
            {
                "origin": ["http://example.org", "https://example.org"],
                "method": ["*"],
                "responseHeader": [],
                "maxAgeSeconds": 300,
            },
            {
                "origin": ["http://example.org"],
                "method": ["GET"],
                "responseHeader": ["X-My-Custom-Header"],
                "maxAgeSeconds": 1800,
            },
        ]

    @respx.mock
    def test_unmodified_cors_builder_is_omitted(
        self, storage: Project, make_bucket_gapi: Callable[..., dict[str, Any]]
    ) -> None:
        """Test an empty builder sends no CORS configuration."""
        route = respx.post(BUCKETS_URL).mock(
            return_value=Response(200, json=make_bucket_gapi("new-bucket"))
        )

        storage.create_bucket("new-bucket", cors=CorsBuilder())

        assert "cors" not in json.loads(route.calls.last.request.content)

    @respx.mock
    def test_create_bucket_with_cors_list(
        self, storage: Project, make_bucket_gapi: Callable[..., dict[str, Any]]
    ) -> None:
        """Test rule documents are sent as given."""
        rules = [{"origin": ["*"], "method": ["GET"], "maxAgeSeconds": 60}]
        route = respx.post(BUCKETS_URL).mock(
            return_value=Response(200, json=make_bucket_gapi("new-bucket", cors=rules))
        )

        bucket = storage.create_bucket("new-bucket", cors=rules)

        assert json.loads(route.calls.last.request.content)["cors"] == rules
        assert bucket.cors[0]["origin"] == ("*",)

    @respx.mock
    def test_create_bucket_retries(self, storage: Project) -> None:
        """Test the configured retries apply to bucket creation."""
        route = respx.post(BUCKETS_URL).mock(
            return_value=Response(503, json={"error": {"code": 503, "message": "Backend Error"}})
        )

        with pytest.raises(ApiError, match="Backend Error"):
            storage.create_bucket("new-bucket")

        assert route.call_count == 3

    @respx.mock
    def test_create_bucket_without_retries(self, storage: Project) -> None:
        """Test a per-call retry count of zero sends one request."""
        route = respx.post(BUCKETS_URL).mock(
            return_value=Response(503, json={"error": {"code": 503, "message": "Backend Error"}})
        )

        with pytest.raises(ApiError):
            storage.create_bucket("new-bucket", retries=0)

        assert route.call_count == 1

    def test_invalid_arguments(self, storage: Project) -> None:
        """Test local validation happens before any request."""
        with pytest.raises(InvalidArgument):
            storage.create_bucket("")
        with pytest.raises(InvalidArgument):
            storage.create_bucket("new-bucket", acl="everyone")
        with pytest.raises(InvalidArgument):
            storage.create_bucket("new-bucket", colour="blue")
