"""Entry point for Cloud Storage resources in one project."""

from typing import Any

from gcloud_resources.errors import InvalidArgument
from gcloud_resources.logging import get_logger
from gcloud_resources.models import build_options
from gcloud_resources.page import Page
from gcloud_resources.storage.bucket import Bucket
from gcloud_resources.storage.connection import StorageConnection
from gcloud_resources.storage.cors import CorsBuilder, thaw_rules
from gcloud_resources.storage.models import BucketListOptions, CreateBucketOptions

logger = get_logger(__name__)


class Project:
    """Cloud Storage buckets of a project.

    Example:
        storage = gcloud_resources.connect_storage()
        bucket = storage.bucket("my-bucket")
        file = bucket.file("path/to/my-file.ext")
    """

    def __init__(self, project_id: str, connection: StorageConnection) -> None:
        """Initialize the project.

        Raises:
            InvalidArgument: If the project ID is empty.
        """
        project_id = str(project_id or "")
        if not project_id:
            raise InvalidArgument("project is missing")
        self.project_id = project_id
        self.connection = connection

    def __repr__(self) -> str:
        return f"Project({self.project_id!r})"

    def buckets(
        self,
        prefix: str | None = None,
        page_token: str | None = None,
        max_results: int | None = None,
    ) -> Page[Bucket]:
        """List one page of buckets.

        Args:
            prefix: Only buckets whose names start with this prefix.
            page_token: Continuation token from a previous page.
            max_results: Maximum buckets per page.
        """
        options = build_options(
            BucketListOptions, prefix=prefix, page_token=page_token, max_results=max_results
        )
        body = self.connection.list_buckets(options).raise_for_error().body or {}
        return Page(
            items=[Bucket.from_gapi(gapi, self.connection) for gapi in body.get("items") or []],
            next_token=body.get("nextPageToken"),
        )

    def bucket(self, name: str) -> Bucket | None:
        """Look up a bucket by name, or None if it does not exist."""
        response = self.connection.get_bucket(name)
        if response.is_not_found:
            return None
        response.raise_for_error()
        return Bucket.from_gapi(response.body or {}, self.connection, complete=True)

    def create_bucket(
        self,
        name: str,
        cors: CorsBuilder | list[dict[str, Any]] | None = None,
        retries: int | None = None,
        **options: Any,
    ) -> Bucket:
        """Create a bucket.

        Args:
            name: Name of the new bucket.
            cors: CORS rules, as a list of rule documents or a CorsBuilder.
                An unmodified builder is not sent.
            retries: Times to retry transient failures (overrides the default).
            **options: CreateBucketOptions fields: acl, default_acl (predefined
                rule names such as "private" or "public_read"), location,
                logging_bucket, logging_prefix, storage_class ("standard",
                "nearline", "dra"), versioning, website_main, website_404.

        Returns:
            The new bucket (partial representation).

        Raises:
            InvalidArgument: If the name is empty or an option is invalid.
            ApiError: If the server rejects the request.
        """
        if not name:
            raise InvalidArgument("bucket name is missing")
        if isinstance(cors, CorsBuilder):
            cors = cors.to_list() if cors.changed else None
        elif cors is not None:
            cors = thaw_rules(cors)
        create_options = build_options(CreateBucketOptions, cors=cors, **options)
        response = self.connection.insert_bucket(
            name, create_options, retries=retries
        ).raise_for_error()
        logger.info("bucket_created", project=self.project_id, bucket=name)
        return Bucket.from_gapi(response.body or {}, self.connection)
