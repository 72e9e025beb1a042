"""Configuration model for the HTTP fetch layer."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from burrow.fetch.constants import (
    DEFAULT_MAX_RESPONSE_SIZE_BYTES,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)


class FetchConfig(BaseModel):
    """Configuration for all HTTP fetch operations.

    The per-request timeout is additionally capped by whatever is left of
    the run deadline.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = (
        DEFAULT_USER_AGENT
    )
    default_timeout_seconds: Annotated[float, Field(gt=0.0, le=300.0)] = (
        DEFAULT_TIMEOUT_SECONDS
    )
    max_response_size_bytes: Annotated[int, Field(ge=1024, le=100 * 1024 * 1024)] = (
        DEFAULT_MAX_RESPONSE_SIZE_BYTES
    )
