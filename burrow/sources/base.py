"""Content source interface and the per-source result record."""

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from burrow.context import FetchContext
from burrow.fetch.models import HttpResponse
from burrow.sources.errors import ErrorRecord, SourceError, SourceErrorClass
from burrow.sources.models import SourcePayload


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one source in one run.

    Produced exactly once per source per run and never mutated. Exactly
    one of ``data`` and ``error`` is normally set; the renderer shows the
    error in place of the section when present.
    """

    name: str
    data: SourcePayload | None = None
    error: ErrorRecord | None = None

    @property
    def ok(self) -> bool:
        """Check if the source produced data without error."""
        return self.error is None


@runtime_checkable
class ContentSource(Protocol):
    """Protocol for content sources.

    Sources are responsible for:
    1. Fetching content with the shared context's deadline
    2. Returning one typed payload
    3. Raising SourceError on failure instead of returning partial data
    """

    def name(self) -> str:
        """Human-readable name, also the result's identity."""
        ...

    def fetch(self, ctx: FetchContext) -> SourcePayload:
        """Fetch content from the source.

        Args:
            ctx: Shared run context.

        Returns:
            The source's payload.

        Raises:
            SourceError: If the source could not produce content.
        """
        ...


def require_setting(value: str, message: str, source: str) -> str:
    """Validate that a credential or setting is present.

    Args:
        value: Configured value.
        message: Error message when missing.
        source: Source name for the error.

    Returns:
        The value, unchanged.

    Raises:
        SourceError: If the value is empty.
    """
    if not value:
        raise SourceError(SourceErrorClass.CONFIG, message, source=source)
    return value


def check_response(response: HttpResponse, source: str, what: str) -> None:
    """Raise a FETCH error for a failed HTTP response.

    Args:
        response: Response from the HTTP fetcher.
        source: Source name for the error.
        what: Short description of the request, e.g. ``"r/python"``.

    Raises:
        SourceError: If the response carries an error or a non-2xx status.
    """
    if response.is_success:
        return
    if response.error is not None:
        message = f"fetching {what}: {response.error.message}"
        http_error = response.error.error_class.value
    else:
        message = f"fetching {what}: unexpected status {response.status_code}"
        http_error = None
    raise SourceError(
        SourceErrorClass.FETCH,
        message,
        source=source,
        details={"status_code": response.status_code, "http_error": http_error},
    )


def decode_json(response: HttpResponse, source: str, what: str) -> Any:  # noqa: ANN401
    """Decode a successful response body as JSON.

    Args:
        response: Successful response from the HTTP fetcher.
        source: Source name for the error.
        what: Short description of the payload.

    Returns:
        Decoded JSON value.

    Raises:
        SourceError: If the body is not valid JSON.
    """
    try:
        return response.json()
    except ValueError as e:
        raise SourceError(
            SourceErrorClass.PARSE,
            f"decoding {what}: {e}",
            source=source,
        ) from e
