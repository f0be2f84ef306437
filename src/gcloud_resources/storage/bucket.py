"""Cloud Storage buckets."""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from gcloud_resources.connection import ApiResponse
from gcloud_resources.errors import UnsupportedSource
from gcloud_resources.logging import get_logger
from gcloud_resources.models import build_options
from gcloud_resources.page import Page
from gcloud_resources.resource import Resource, from_rfc3339
from gcloud_resources.storage.connection import StorageConnection
from gcloud_resources.storage.cors import CorsBuilder, FrozenRules, freeze_rules, thaw_rules
from gcloud_resources.storage.file import File
from gcloud_resources.storage.models import FileListOptions, UploadOptions
from gcloud_resources.upload import guess_content_type, is_resumable, local_file, verify_chunk_size

logger = get_logger(__name__)


@dataclass
class FileList(Page[File]):
    """A page of files plus the common prefixes found when listing with a delimiter."""

    prefixes: list[str] = field(default_factory=list)


class Bucket(Resource):
    """A Cloud Storage bucket."""

    connection: StorageConnection

    def __repr__(self) -> str:
        return f"Bucket({self.name!r})"

    # Identity

    @property
    def name(self) -> str:
        return self._gapi.get("name", "")

    @property
    def url(self) -> str:
        return f"gs://{self.name}"

    # Attributes

    @property
    def id(self) -> str | None:
        return self.get_attribute("id")

    @property
    def api_url(self) -> str | None:
        return self.get_attribute("selfLink")

    @property
    def created_at(self) -> datetime | None:
        return from_rfc3339(self.get_attribute("timeCreated"))

    @property
    def location(self) -> str | None:
        return self.get_attribute("location")

    @property
    def storage_class(self) -> str | None:
        return self.get_attribute("storageClass")

    @property
    def versioning(self) -> bool:
        return bool((self.get_attribute("versioning") or {}).get("enabled", False))

    @versioning.setter
    def versioning(self, value: bool) -> None:
        self._patch_gapi({"versioning": {"enabled": bool(value)}})

    @property
    def logging_bucket(self) -> str | None:
        return (self.get_attribute("logging") or {}).get("logBucket")

    @logging_bucket.setter
    def logging_bucket(self, value: str | None) -> None:
        self._patch_gapi({"logging": {"logBucket": value}})

    @property
    def logging_prefix(self) -> str | None:
        return (self.get_attribute("logging") or {}).get("logObjectPrefix")

    @logging_prefix.setter
    def logging_prefix(self, value: str | None) -> None:
        self._patch_gapi({"logging": {"logObjectPrefix": value}})

    @property
    def website_main(self) -> str | None:
        return (self.get_attribute("website") or {}).get("mainPageSuffix")

    @website_main.setter
    def website_main(self, value: str | None) -> None:
        self._patch_gapi({"website": {"mainPageSuffix": value}})

    @property
    def website_404(self) -> str | None:
        return (self.get_attribute("website") or {}).get("notFoundPage")

    @website_404.setter
    def website_404(self, value: str | None) -> None:
        self._patch_gapi({"website": {"notFoundPage": value}})

    @property
    def cors(self) -> Any:
        """CORS rules.

        Read-only (tuple of read-only mappings) outside update(); inside an
        update() block the live rule list, editable in place.
        """
        if self._pending is not None:
            # Edits replace the whole list, so start from the full one
            self.ensure_full()
            rules = self._gapi.get("cors")
            if rules is None:
                rules = self._gapi["cors"] = []
            return rules
        return freeze_rules(self.get_attribute("cors") or [])

    @cors.setter
    def cors(self, value: Any) -> None:
        self._patch_gapi({"cors": thaw_rules(value or [])})

    @contextmanager
    def cors_builder(self) -> Iterator[CorsBuilder]:
        """Edit the CORS rules with a builder; they are patched on exit when changed.

        Example:
            with bucket.cors_builder() as cors:
                cors.add_rule("http://example.org", "GET")
                cors.pop(0)
        """
        builder = CorsBuilder(self.get_attribute("cors") or [])
        yield builder
        if builder.changed:
            self.cors = builder.to_list()

    # Operations

    def _fetch(self) -> ApiResponse:
        return self.connection.get_bucket(self.name)

    def _send_patch(self, patch: dict[str, Any]) -> ApiResponse:
        return self.connection.patch_bucket(self.name, patch)

    def delete(self, retries: int | None = None) -> bool:
        """Permanently delete the bucket; it must be empty.

        Args:
            retries: Times to retry transient failures (overrides the default).
        """
        self.connection.delete_bucket(self.name, retries=retries).raise_for_error()
        logger.info("bucket_deleted", bucket=self.name)
        return True

    def files(
        self,
        prefix: str | None = None,
        delimiter: str | None = None,
        page_token: str | None = None,
        max_results: int | None = None,
        versions: bool = False,
    ) -> FileList:
        """List one page of files in the bucket.

        Args:
            prefix: Only files whose names start with this prefix.
            delimiter: Group names sharing a prefix up to the delimiter into
                ``prefixes`` instead of listing them.
            page_token: Continuation token from a previous page.
            max_results: Maximum files per page.
            versions: Include every generation of each file.
        """
        options = build_options(
            FileListOptions,
            prefix=prefix,
            delimiter=delimiter,
            page_token=page_token,
            max_results=max_results,
            versions=versions,
        )
        body = self.connection.list_files(self.name, options).raise_for_error().body or {}
        return FileList(
            items=[File.from_gapi(gapi, self.connection) for gapi in body.get("items") or []],
            next_token=body.get("nextPageToken"),
            prefixes=list(body.get("prefixes") or []),
        )

    def file(self, path: str, generation: int | None = None) -> File | None:
        """Look up a file by name, or None if it does not exist."""
        response = self.connection.get_file(self.name, path, generation)
        if response.is_not_found:
            return None
        response.raise_for_error()
        return File.from_gapi(response.body or {}, self.connection, complete=True)

    def create_file(self, source: str | Path, path: str | None = None, **options: Any) -> File:
        """Upload a local file to the bucket.

        Files larger than the resumable threshold are uploaded through a
        resumable session, smaller ones in a single multipart request.

        Args:
            source: Local file path.
            path: Name of the new file (the source's base name when None).
            **options: UploadOptions fields (acl, content_type, cache_control,
                metadata, chunk_size, ...).

        Returns:
            The new file (partial representation).

        Raises:
            UnsupportedSource: If the source is not an existing local file.
            InvalidArgument: If an option is unknown or invalid.
        """
        upload_options = build_options(UploadOptions, **options)
        local_path = local_file(source)
        if local_path is None:
            raise UnsupportedSource(source)
        name = path or local_path.name
        content_type = upload_options.content_type or guess_content_type(local_path)

        if is_resumable(local_path.stat().st_size, self.connection.resumable_threshold):
            response = self.connection.insert_file_resumable(
                self.name,
                local_path,
                name,
                content_type,
                verify_chunk_size(upload_options.chunk_size),
                upload_options,
            )
        else:
            response = self.connection.insert_file_multipart(
                self.name, local_path, name, content_type, upload_options
            )
        response.raise_for_error()
        logger.info("file_created", bucket=self.name, file=name)
        return File.from_gapi(response.body or {}, self.connection)
