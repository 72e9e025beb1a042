"""Error types for content sources."""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from burrow.context import DeadlineExceededError


class SourceErrorClass(str, Enum):
    """Classification of source errors.

    - FETCH: HTTP/network errors during fetch
    - PARSE: Response content could not be decoded
    - CONFIG: Source is missing credentials or settings
    - DEADLINE: Run deadline fired before the source finished
    - UNKNOWN: Unclassified error
    """

    FETCH = "FETCH"
    PARSE = "PARSE"
    CONFIG = "CONFIG"
    DEADLINE = "DEADLINE"
    UNKNOWN = "UNKNOWN"


class SourceError(Exception):
    """Base exception for content source failures.

    Provides structured error information for logging and rendering.
    """

    def __init__(
        self,
        error_class: SourceErrorClass,
        message: str,
        source: str | None = None,
        details: dict[str, str | int | bool | None] | None = None,
    ) -> None:
        """Initialize the source error.

        Args:
            error_class: Classification of the error.
            message: Human-readable error message.
            source: Name of the source that failed.
            details: Additional structured error details.
        """
        super().__init__(message)
        self.error_class = error_class
        self.message = message
        self.source = source
        self.details = details or {}


class ErrorRecord(BaseModel):
    """Serializable error record attached to a FetchResult."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    error_class: SourceErrorClass = Field(description="Error classification")
    message: Annotated[str, Field(min_length=1, description="Error message")]
    source: str | None = Field(default=None, description="Source name")
    details: dict[str, str | int | bool | None] = Field(
        default_factory=dict, description="Additional error details"
    )

    def __str__(self) -> str:
        return self.message

    @classmethod
    def from_exception(cls, error: BaseException, source: str) -> "ErrorRecord":
        """Create an ErrorRecord from any exception raised by a source.

        Args:
            error: The exception to convert.
            source: Name of the source the error belongs to.

        Returns:
            ErrorRecord instance.
        """
        if isinstance(error, SourceError):
            return cls(
                error_class=error.error_class,
                message=error.message or error.error_class.value,
                source=error.source or source,
                details=error.details,
            )
        if isinstance(error, DeadlineExceededError):
            return cls(
                error_class=SourceErrorClass.DEADLINE,
                message=error.message,
                source=source,
            )
        return cls(
            error_class=SourceErrorClass.UNKNOWN,
            message=f"Unexpected error: {error}" if str(error) else repr(error),
            source=source,
        )
