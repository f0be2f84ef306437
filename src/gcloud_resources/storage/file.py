"""Cloud Storage files (objects)."""

import base64
import hashlib
from datetime import datetime
from pathlib import Path
from typing import Any

from gcloud_resources.connection import ApiResponse
from gcloud_resources.errors import FileVerificationError
from gcloud_resources.logging import get_logger
from gcloud_resources.models import build_options
from gcloud_resources.resource import Resource, from_rfc3339
from gcloud_resources.storage.connection import StorageConnection
from gcloud_resources.storage.models import CopyFileOptions

logger = get_logger(__name__)


def md5_digest(data: bytes) -> str:
    """Base64-encoded MD5 digest, as reported in an object's md5Hash."""
    return base64.b64encode(hashlib.md5(data).digest()).decode("ascii")


class File(Resource):
    """A file stored in a bucket."""

    connection: StorageConnection

    def __repr__(self) -> str:
        return f"File({self.gs_url!r})"

    # Identity

    @property
    def name(self) -> str:
        return self._gapi.get("name", "")

    @property
    def bucket_name(self) -> str:
        return self._gapi.get("bucket", "")

    @property
    def generation(self) -> int | None:
        value = self._gapi.get("generation")
        return int(value) if value is not None else None

    @property
    def gs_url(self) -> str:
        """The gs:// URL of the file, usable as a BigQuery load or extract target."""
        return f"gs://{self.bucket_name}/{self.name}"

    url = gs_url

    # Attributes

    @property
    def id(self) -> str | None:
        return self.get_attribute("id")

    @property
    def metageneration(self) -> int | None:
        value = self.get_attribute("metageneration")
        return int(value) if value is not None else None

    @property
    def etag(self) -> str | None:
        return self.get_attribute("etag")

    @property
    def api_url(self) -> str | None:
        return self.get_attribute("selfLink")

    @property
    def media_url(self) -> str | None:
        return self.get_attribute("mediaLink")

    @property
    def size(self) -> int | None:
        value = self.get_attribute("size")
        return int(value) if value is not None else None

    @property
    def md5(self) -> str | None:
        return self.get_attribute("md5Hash")

    @property
    def crc32c(self) -> str | None:
        return self.get_attribute("crc32c")

    @property
    def created_at(self) -> datetime | None:
        return from_rfc3339(self.get_attribute("timeCreated"))

    @property
    def updated_at(self) -> datetime | None:
        return from_rfc3339(self.get_attribute("updated"))

    @property
    def content_type(self) -> str | None:
        return self.get_attribute("contentType")

    @content_type.setter
    def content_type(self, value: str | None) -> None:
        self._patch_gapi({"contentType": value})

    @property
    def cache_control(self) -> str | None:
        return self.get_attribute("cacheControl")

    @cache_control.setter
    def cache_control(self, value: str | None) -> None:
        self._patch_gapi({"cacheControl": value})

    @property
    def content_disposition(self) -> str | None:
        return self.get_attribute("contentDisposition")

    @content_disposition.setter
    def content_disposition(self, value: str | None) -> None:
        self._patch_gapi({"contentDisposition": value})

    @property
    def content_encoding(self) -> str | None:
        return self.get_attribute("contentEncoding")

    @content_encoding.setter
    def content_encoding(self, value: str | None) -> None:
        self._patch_gapi({"contentEncoding": value})

    @property
    def content_language(self) -> str | None:
        return self.get_attribute("contentLanguage")

    @content_language.setter
    def content_language(self, value: str | None) -> None:
        self._patch_gapi({"contentLanguage": value})

    @property
    def metadata(self) -> dict[str, str]:
        """Custom metadata; edit in place inside update() or assign a new dict."""
        if self._pending is not None:
            self.ensure_full()
            return self._gapi.setdefault("metadata", {})
        return dict(self.get_attribute("metadata") or {})

    @metadata.setter
    def metadata(self, value: dict[str, str] | None) -> None:
        self._patch_gapi({"metadata": value})

    # Operations

    def _fetch(self) -> ApiResponse:
        return self.connection.get_file(self.bucket_name, self.name)

    def _send_patch(self, patch: dict[str, Any]) -> ApiResponse:
        return self.connection.patch_file(self.bucket_name, self.name, patch)

    def download(self, path: str | Path, verify: bool = True) -> Path:
        """Download the file content to a local path.

        Args:
            path: Destination file path.
            verify: Compare the content's MD5 digest with the one the
                server reports.

        Returns:
            The destination path.

        Raises:
            FileVerificationError: If verification is on and the digests differ.
            ApiError: If the download fails.
        """
        response = self.connection.download_file(
            self.bucket_name, self.name, self.generation
        ).raise_for_error()
        destination = Path(path)
        destination.write_bytes(response.content)

        if verify:
            expected = self.md5
            if expected is not None:
                actual = md5_digest(response.content)
                if actual != expected:
                    raise FileVerificationError(str(destination), expected, actual)

        logger.debug(
            "file_downloaded",
            file=self.gs_url,
            path=str(destination),
            size=len(response.content),
        )
        return destination

    def copy(
        self,
        dest_bucket_or_path: Any,
        dest_path: str | None = None,
        generation: int | None = None,
        acl: str | None = None,
    ) -> "File":
        """Copy the file to a new path, in this bucket or another.

        Args:
            dest_bucket_or_path: Destination path in this bucket, or the
                destination bucket (name or Bucket) when dest_path is given.
            dest_path: Destination path in the destination bucket.
            generation: Copy this generation of the source file.
            acl: Predefined ACL for the new file.

        Returns:
            The new file (partial representation).
        """
        if dest_path is None:
            dest_bucket, dest_name = self.bucket_name, str(dest_bucket_or_path)
        elif isinstance(dest_bucket_or_path, str):
            dest_bucket, dest_name = dest_bucket_or_path, dest_path
        else:
            dest_bucket, dest_name = dest_bucket_or_path.name, dest_path

        options = build_options(CopyFileOptions, generation=generation, acl=acl)
        response = self.connection.copy_file(
            self.bucket_name, self.name, dest_bucket, dest_name, options
        ).raise_for_error()
        logger.info(
            "file_copied", source=self.gs_url, destination=f"gs://{dest_bucket}/{dest_name}"
        )
        return File.from_gapi(response.body or {}, self.connection)

    def delete(self) -> bool:
        """Permanently delete the file."""
        self.connection.delete_file(self.bucket_name, self.name).raise_for_error()
        logger.info("file_deleted", file=self.gs_url)
        return True
