"""Cloud Storage JSON API v1 operations."""

from pathlib import Path
from typing import Any
from urllib.parse import quote

from gcloud_resources.connection import ApiResponse, Connection
from gcloud_resources.storage.models import (
    BucketListOptions,
    CopyFileOptions,
    CreateBucketOptions,
    FileListOptions,
    UploadOptions,
)


def quote_name(name: str) -> str:
    """Percent-encode an object name for use as a single path segment."""
    return quote(name, safe="")


def _generation_params(generation: int | None) -> dict[str, Any] | None:
    return {"generation": generation} if generation is not None else None


class StorageConnection(Connection):
    """Named Cloud Storage operations mapped to REST endpoints."""

    service = "storage"
    api_base = "https://www.googleapis.com/storage/v1"
    upload_base = "https://www.googleapis.com/upload/storage/v1"

    @staticmethod
    def _bucket_path(bucket: str) -> str:
        return f"/b/{bucket}"

    def _file_path(self, bucket: str, name: str) -> str:
        return f"{self._bucket_path(bucket)}/o/{quote_name(name)}"

    # ------------------------------------------------------------------
    # Buckets
    # ------------------------------------------------------------------

    def list_buckets(self, options: BucketListOptions) -> ApiResponse:
        return self.request("GET", "/b", {"project": self.project, **options.to_params()})

    def get_bucket(self, bucket: str) -> ApiResponse:
        return self.request("GET", self._bucket_path(bucket))

    def insert_bucket(
        self,
        bucket: str,
        options: CreateBucketOptions,
        retries: int | None = None,
    ) -> ApiResponse:
        body: dict[str, Any] = {"name": bucket}
        if options.location is not None:
            body["location"] = options.location
        if options.storage_class is not None:
            body["storageClass"] = options.storage_class
        if options.versioning is not None:
            body["versioning"] = {"enabled": options.versioning}
        logging_config = {
            "logBucket": options.logging_bucket,
            "logObjectPrefix": options.logging_prefix,
        }
        if any(v is not None for v in logging_config.values()):
            body["logging"] = {k: v for k, v in logging_config.items() if v is not None}
        website = {
            "mainPageSuffix": options.website_main,
            "notFoundPage": options.website_404,
        }
        if any(v is not None for v in website.values()):
            body["website"] = {k: v for k, v in website.items() if v is not None}
        if options.cors is not None:
            body["cors"] = options.cors

        params: dict[str, Any] = {"project": self.project}
        if options.acl is not None:
            params["predefinedAcl"] = options.acl
        if options.default_acl is not None:
            params["predefinedDefaultObjectAcl"] = options.default_acl
        return self.request("POST", "/b", params, body=body, retries=retries)

    def patch_bucket(self, bucket: str, patch: dict[str, Any]) -> ApiResponse:
        return self.request("PATCH", self._bucket_path(bucket), body=patch)

    def delete_bucket(self, bucket: str, retries: int | None = None) -> ApiResponse:
        return self.request("DELETE", self._bucket_path(bucket), retries=retries)

    # ------------------------------------------------------------------
    # Files (objects)
    # ------------------------------------------------------------------

    def list_files(self, bucket: str, options: FileListOptions) -> ApiResponse:
        return self.request("GET", f"{self._bucket_path(bucket)}/o", options.to_params())

    def get_file(self, bucket: str, name: str, generation: int | None = None) -> ApiResponse:
        return self.request("GET", self._file_path(bucket, name), _generation_params(generation))

    def patch_file(self, bucket: str, name: str, patch: dict[str, Any]) -> ApiResponse:
        return self.request("PATCH", self._file_path(bucket, name), body=patch)

    def delete_file(self, bucket: str, name: str) -> ApiResponse:
        return self.request("DELETE", self._file_path(bucket, name))

    def copy_file(
        self,
        source_bucket: str,
        source_name: str,
        dest_bucket: str,
        dest_name: str,
        options: CopyFileOptions,
    ) -> ApiResponse:
        path = (
            f"{self._file_path(source_bucket, source_name)}"
            f"/copyTo{self._file_path(dest_bucket, dest_name)}"
        )
        params: dict[str, Any] = {}
        if options.generation is not None:
            params["sourceGeneration"] = options.generation
        if options.acl is not None:
            params["destinationPredefinedAcl"] = options.acl
        return self.request("POST", path, params)

    def download_file(
        self, bucket: str, name: str, generation: int | None = None
    ) -> ApiResponse:
        params: dict[str, Any] = {"alt": "media", **(_generation_params(generation) or {})}
        return self.request("GET", self._file_path(bucket, name), params)

    def insert_file_multipart(
        self,
        bucket: str,
        path: Path,
        name: str,
        content_type: str,
        options: UploadOptions,
    ) -> ApiResponse:
        return self.upload_multipart(
            f"{self.upload_base}{self._bucket_path(bucket)}/o",
            _file_metadata(name, content_type, options),
            path.read_bytes(),
            content_type,
            params=_upload_params(options),
        )

    def insert_file_resumable(
        self,
        bucket: str,
        path: Path,
        name: str,
        content_type: str,
        chunk_size: int | None,
        options: UploadOptions,
    ) -> ApiResponse:
        return self.upload_resumable(
            f"{self.upload_base}{self._bucket_path(bucket)}/o",
            _file_metadata(name, content_type, options),
            path,
            content_type,
            chunk_size=chunk_size,
            params=_upload_params(options),
        )


def _file_metadata(name: str, content_type: str, options: UploadOptions) -> dict[str, Any]:
    """Object resource metadata sent along with an upload."""
    optional = {
        "cacheControl": options.cache_control,
        "contentDisposition": options.content_disposition,
        "contentEncoding": options.content_encoding,
        "contentLanguage": options.content_language,
        "md5Hash": options.md5,
        "crc32c": options.crc32c,
        "metadata": options.metadata,
    }
    metadata: dict[str, Any] = {"name": name, "contentType": content_type}
    metadata.update({k: v for k, v in optional.items() if v is not None})
    return metadata


def _upload_params(options: UploadOptions) -> dict[str, Any] | None:
    if options.acl is None:
        return None
    return {"predefinedAcl": options.acl}
