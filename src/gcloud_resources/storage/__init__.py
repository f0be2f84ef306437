"""Cloud Storage buckets and files."""

from gcloud_resources.storage.acl import predefined_rule_for
from gcloud_resources.storage.bucket import Bucket, FileList
from gcloud_resources.storage.connection import StorageConnection
from gcloud_resources.storage.cors import CorsBuilder
from gcloud_resources.storage.file import File
from gcloud_resources.storage.project import Project

__all__ = [
    "Bucket",
    "CorsBuilder",
    "File",
    "FileList",
    "Project",
    "StorageConnection",
    "predefined_rule_for",
]
