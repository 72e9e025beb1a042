"""Data models for the HTTP fetch layer."""

import json
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field

from burrow.fetch.constants import HTTP_STATUS_OK_MAX, HTTP_STATUS_OK_MIN


class HttpErrorClass(str, Enum):
    """Classification of HTTP fetch errors.

    - NETWORK_TIMEOUT: Request timed out
    - CONNECTION_ERROR: Could not establish connection
    - RESPONSE_SIZE_EXCEEDED: Response exceeded max size limit
    - HTTP_4XX: 4xx client error (except 429)
    - HTTP_5XX: 5xx server error
    - RATE_LIMITED: 429 Too Many Requests
    - DEADLINE_EXCEEDED: Run deadline passed before or during the request
    - UNKNOWN: Unclassified error
    """

    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    RESPONSE_SIZE_EXCEEDED = "RESPONSE_SIZE_EXCEEDED"
    HTTP_4XX = "HTTP_4XX"
    HTTP_5XX = "HTTP_5XX"
    RATE_LIMITED = "RATE_LIMITED"
    DEADLINE_EXCEEDED = "DEADLINE_EXCEEDED"
    UNKNOWN = "UNKNOWN"


class HttpError(BaseModel):
    """Typed error from an HTTP request."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    error_class: HttpErrorClass = Field(description="Classification of the error")
    message: Annotated[str, Field(min_length=1, description="Human-readable message")]
    status_code: int | None = Field(
        default=None, description="HTTP status code if available"
    )


class HttpResponse(BaseModel):
    """Response data or error information from an HTTP GET."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    status_code: int = Field(ge=0, le=599, description="HTTP status code, 0 if none")
    final_url: Annotated[
        str, Field(min_length=1, description="Final URL after redirects")
    ]
    headers: dict[str, str] = Field(
        default_factory=dict, description="Response headers"
    )
    body_bytes: bytes = Field(default=b"", description="Response body")
    error: HttpError | None = Field(
        default=None, description="Error details if the request failed"
    )

    @property
    def is_success(self) -> bool:
        """Check if the request was successful (2xx status, no error)."""
        return (
            self.error is None
            and HTTP_STATUS_OK_MIN <= self.status_code < HTTP_STATUS_OK_MAX
        )

    @property
    def body_size(self) -> int:
        """Get the size of the response body in bytes."""
        return len(self.body_bytes)

    def json(self) -> Any:  # noqa: ANN401
        """Decode the body as JSON.

        Raises:
            ValueError: If the body is not valid JSON.
        """
        return json.loads(self.body_bytes)


class ResponseSizeExceededError(Exception):
    """Raised while streaming when a body exceeds the configured limit."""
