"""Option models for Cloud Storage operations."""

from typing import Any

from pydantic import Field, field_validator

from gcloud_resources.models import Options, PrefixPageOptions
from gcloud_resources.storage.acl import predefined_rule_for

STORAGE_CLASSES = {
    "dra": "DURABLE_REDUCED_AVAILABILITY",
    "durable": "DURABLE_REDUCED_AVAILABILITY",
    "durable_reduced_availability": "DURABLE_REDUCED_AVAILABILITY",
    "nearline": "NEARLINE",
    "standard": "STANDARD",
    "std": "STANDARD",
}


def _predefined_acl(value: Any) -> str | None:
    if value is None:
        return None
    rule = predefined_rule_for(value)
    if rule is None:
        raise ValueError(f"unknown predefined ACL '{value}'")
    return rule


def storage_class_for(value: Any) -> str | None:
    """Map a storage class alias ("dra", "nearline", "std", ...) to its API name."""
    if value is None:
        return None
    return STORAGE_CLASSES.get(str(value).lower(), str(value).upper())


class BucketListOptions(PrefixPageOptions):
    """Options for listing buckets."""


class FileListOptions(PrefixPageOptions):
    """Options for listing files in a bucket."""

    delimiter: str | None = None
    versions: bool = False


class CreateBucketOptions(Options):
    """Optional attributes for a new bucket."""

    acl: str | None = None
    default_acl: str | None = None
    location: str | None = None
    logging_bucket: str | None = None
    logging_prefix: str | None = None
    storage_class: str | None = None
    versioning: bool | None = None
    website_main: str | None = None
    website_404: str | None = None
    cors: list[dict[str, Any]] | None = None

    @field_validator("acl", "default_acl", mode="before")
    @classmethod
    def normalize_acl(cls, value: Any) -> str | None:
        return _predefined_acl(value)

    @field_validator("storage_class", mode="before")
    @classmethod
    def normalize_storage_class(cls, value: Any) -> str | None:
        return storage_class_for(value)


class UploadOptions(Options):
    """Metadata and behavior for a file upload."""

    acl: str | None = None
    cache_control: str | None = None
    content_disposition: str | None = None
    content_encoding: str | None = None
    content_language: str | None = None
    content_type: str | None = None
    md5: str | None = None
    crc32c: str | None = None
    metadata: dict[str, str] | None = None
    chunk_size: int | None = Field(default=None, ge=0)

    @field_validator("acl", mode="before")
    @classmethod
    def normalize_acl(cls, value: Any) -> str | None:
        return _predefined_acl(value)


class CopyFileOptions(Options):
    """Options for copying a file."""

    generation: int | None = Field(default=None, ge=0)
    acl: str | None = None

    @field_validator("acl", mode="before")
    @classmethod
    def normalize_acl(cls, value: Any) -> str | None:
        return _predefined_acl(value)
