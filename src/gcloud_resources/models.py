"""Pydantic models for retry behavior and per-operation options."""

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gcloud_resources.errors import InvalidArgument

OptionsT = TypeVar("OptionsT", bound=BaseModel)


class RetryConfig(BaseModel):
    """Configuration for retry behavior on transient failures."""

    retries: int = Field(default=3, ge=0, le=10)
    backoff_base: float = Field(default=1.0, ge=0.0, le=10.0)
    backoff_max: float = Field(default=32.0, ge=0.0, le=300.0)


class Options(BaseModel):
    """Base for operation options: every recognized key is declared, others are rejected."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    def to_params(self) -> dict[str, Any]:
        """Render the options as API query parameters (camelCase, unset values dropped)."""
        return self.model_dump(by_alias=True, exclude_none=True, exclude_defaults=True)


class PageOptions(Options):
    """Continuation options shared by every list operation."""

    page_token: str | None = Field(default=None, serialization_alias="pageToken")
    max_results: int | None = Field(default=None, ge=1, serialization_alias="maxResults")


class PrefixPageOptions(PageOptions):
    """List options for collections that support name prefix filtering."""

    prefix: str | None = None


def build_options(model: type[OptionsT], **values: Any) -> OptionsT:
    """Validate keyword options against an options model.

    Args:
        model: The options model for the operation.
        **values: Caller-supplied options. None values fall back to defaults.

    Returns:
        The validated options instance.

    Raises:
        InvalidArgument: If a key is unknown or a value is invalid.
    """
    provided = {k: v for k, v in values.items() if v is not None}
    try:
        return model.model_validate(provided)
    except ValidationError as e:
        raise InvalidArgument(str(e)) from e
