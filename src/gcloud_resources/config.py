"""Configuration loading and settings for gcloud_resources."""

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from gcloud_resources.models import RetryConfig

# Resumable uploads are used for local files larger than this many bytes
DEFAULT_RESUMABLE_THRESHOLD = 5_000_000


class Settings(BaseSettings):
    """Library settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=True,
    )

    # Project settings
    project_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GCLOUD_PROJECT", "GOOGLE_CLOUD_PROJECT"),
        description="Default project for both services",
    )
    bigquery_project_id: str | None = Field(
        default=None,
        validation_alias="BIGQUERY_PROJECT",
        description="Project override for BigQuery",
    )
    storage_project_id: str | None = Field(
        default=None,
        validation_alias="STORAGE_PROJECT",
        description="Project override for Cloud Storage",
    )
    keyfile: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("GCLOUD_KEYFILE", "GOOGLE_CLOUD_KEYFILE"),
        description="Service account keyfile (application default credentials when unset)",
    )

    # Transport settings
    retries: int = Field(
        default=3,
        ge=0,
        le=10,
        validation_alias="GCLOUD_RETRIES",
        description="Number of times a transient API failure is retried",
    )
    backoff_base: float = Field(
        default=1.0,
        ge=0.0,
        le=10.0,
        validation_alias="GCLOUD_BACKOFF_BASE",
        description="Exponential backoff multiplier in seconds",
    )
    backoff_max: float = Field(
        default=32.0,
        ge=0.0,
        le=300.0,
        validation_alias="GCLOUD_BACKOFF_MAX",
        description="Maximum wait between retries in seconds",
    )
    timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        le=600,
        validation_alias="GCLOUD_TIMEOUT_SECONDS",
        description="HTTP timeout for a single request",
    )

    # Upload settings
    resumable_threshold: int = Field(
        default=DEFAULT_RESUMABLE_THRESHOLD,
        ge=0,
        validation_alias="GCLOUD_RESUMABLE_THRESHOLD",
        description="Local files above this size use resumable uploads",
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    log_format: str = Field(
        default="json",
        validation_alias="LOG_FORMAT",
        description="Log output format (json or text)",
    )

    @property
    def retry(self) -> RetryConfig:
        """Retry configuration derived from the transport settings."""
        return RetryConfig(
            retries=self.retries,
            backoff_base=self.backoff_base,
            backoff_max=self.backoff_max,
        )

    def bigquery_project(self) -> str | None:
        """Resolve the BigQuery project: BIGQUERY_PROJECT > GCLOUD_PROJECT."""
        return self.bigquery_project_id or self.project_id

    def storage_project(self) -> str | None:
        """Resolve the Storage project: STORAGE_PROJECT > GCLOUD_PROJECT."""
        return self.storage_project_id or self.project_id
