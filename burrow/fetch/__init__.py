"""HTTP fetch layer with size limits and typed failures.

The client never retries and never raises for transport problems: every
outcome is an HttpResponse, with an HttpError attached on failure.
"""

from burrow.fetch.client import HttpFetcher
from burrow.fetch.config import FetchConfig
from burrow.fetch.models import (
    HttpError,
    HttpErrorClass,
    HttpResponse,
    ResponseSizeExceededError,
)
from burrow.fetch.redact import redact_headers, redact_url_credentials


__all__ = [
    "FetchConfig",
    "HttpError",
    "HttpErrorClass",
    "HttpFetcher",
    "HttpResponse",
    "ResponseSizeExceededError",
    "redact_headers",
    "redact_url_credentials",
]
