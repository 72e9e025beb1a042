"""HTTP client with size limits, deadline awareness, and failure isolation."""

import time
from io import BytesIO
from types import TracebackType
from urllib.parse import urlparse

import httpx
import structlog

from burrow.context import FetchContext
from burrow.fetch.config import FetchConfig
from burrow.fetch.constants import (
    DEFAULT_CHUNK_SIZE,
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    HTTP_STATUS_SERVER_ERROR_MAX,
    HTTP_STATUS_SERVER_ERROR_MIN,
    HTTP_STATUS_TOO_MANY_REQUESTS,
)
from burrow.fetch.models import (
    HttpError,
    HttpErrorClass,
    HttpResponse,
    ResponseSizeExceededError,
)
from burrow.fetch.redact import redact_headers, redact_url_credentials


logger = structlog.get_logger()


class HttpFetcher:
    """HTTP GET client shared by all content sources.

    Provides:
    - Per-request timeout capped by the run deadline
    - Maximum response size enforcement while streaming
    - Classification of every failure into an HttpError
    - Header redaction for logging

    The underlying httpx.Client is thread-safe and shared by all
    concurrent fetches of a run.
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the HTTP fetcher.

        Args:
            config: Fetch configuration (defaults apply when omitted).
            client: Pre-built httpx client, e.g. with a mock transport.
                When omitted the fetcher creates and owns one.
        """
        self._config = config or FetchConfig()
        self._owns_client = client is None
        self._client = client or httpx.Client(follow_redirects=True)
        self._log = logger.bind(component="fetch")

    @property
    def config(self) -> FetchConfig:
        """Get the fetch configuration."""
        return self._config

    def close(self) -> None:
        """Close the underlying client if this fetcher created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpFetcher":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def get(
        self,
        ctx: FetchContext,
        source: str,
        url: str,
        params: dict[str, str | int] | None = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        """Fetch a URL.

        Args:
            ctx: Shared run context; its deadline caps the timeout.
            source: Name of the source making the request (for logging).
            url: The URL to fetch.
            params: Query parameters.
            headers: Additional request headers.

        Returns:
            HttpResponse with status and body, or with an error attached.
        """
        start_time_ns = time.perf_counter_ns()
        request_headers = self._build_headers(headers)
        log = self._log.bind(
            source=source,
            url=redact_url_credentials(url),
            domain=urlparse(url).netloc,
        )

        timeout = self._timeout_for(ctx)
        if timeout is None:
            result = self._error_response(
                url,
                HttpErrorClass.DEADLINE_EXCEEDED,
                "Run deadline exceeded before request was sent",
            )
        else:
            result = self._execute(
                ctx=ctx,
                url=url,
                params=params,
                headers=request_headers,
                timeout=timeout,
                log=log,
            )

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        log.info(
            "fetch_complete",
            status_code=result.status_code,
            bytes=result.body_size,
            duration_ms=round(duration_ms, 2),
            error_class=result.error.error_class.value if result.error else None,
        )
        return result

    def _build_headers(self, extra_headers: dict[str, str] | None) -> dict[str, str]:
        """Build request headers.

        Args:
            extra_headers: Additional headers from caller.

        Returns:
            Complete headers dictionary.
        """
        headers: dict[str, str] = {
            "User-Agent": self._config.user_agent,
            "Accept": "*/*",
        }
        if extra_headers:
            headers.update(extra_headers)
        return headers

    def _timeout_for(self, ctx: FetchContext) -> float | None:
        """Compute the request timeout, or None if the run is out of time."""
        remaining = ctx.remaining()
        if remaining is None:
            return self._config.default_timeout_seconds
        if remaining <= 0:
            return None
        return min(self._config.default_timeout_seconds, remaining)

    def _execute(  # noqa: PLR0913
        self,
        ctx: FetchContext,
        url: str,
        params: dict[str, str | int] | None,
        headers: dict[str, str],
        timeout: float,
        log: structlog.stdlib.BoundLogger,
    ) -> HttpResponse:
        """Execute a single HTTP GET.

        Args:
            ctx: Shared run context.
            url: URL to fetch.
            params: Query parameters.
            headers: Request headers.
            timeout: Request timeout in seconds.
            log: Bound logger.

        Returns:
            HttpResponse from the request.
        """
        log.debug("fetch_started", headers=redact_headers(headers), timeout=timeout)

        try:
            with self._client.stream(
                "GET",
                url,
                params=params,
                headers=headers,
                timeout=timeout,
            ) as response:
                body = self._read_body_with_limit(response)
                return HttpResponse(
                    status_code=response.status_code,
                    final_url=str(response.url),
                    headers=dict(response.headers),
                    body_bytes=body,
                    error=self._classify_http_error(response.status_code),
                )

        except ResponseSizeExceededError as e:
            return self._error_response(
                url, HttpErrorClass.RESPONSE_SIZE_EXCEEDED, str(e)
            )

        except httpx.TimeoutException as e:
            if ctx.cancelled:
                return self._error_response(
                    url,
                    HttpErrorClass.DEADLINE_EXCEEDED,
                    f"Run deadline exceeded during request: {e}",
                )
            return self._error_response(
                url, HttpErrorClass.NETWORK_TIMEOUT, f"Request timed out: {e}"
            )

        except httpx.ConnectError as e:
            return self._error_response(
                url, HttpErrorClass.CONNECTION_ERROR, f"Connection failed: {e}"
            )

        except Exception as e:  # noqa: BLE001
            return self._error_response(
                url, HttpErrorClass.UNKNOWN, f"Unexpected error: {e}"
            )

    def _read_body_with_limit(self, response: httpx.Response) -> bytes:
        """Read response body with size limit.

        Args:
            response: Streaming HTTP response.

        Returns:
            Response body bytes.

        Raises:
            ResponseSizeExceededError: If the size limit is exceeded.
        """
        max_size = self._config.max_response_size_bytes
        content_length = response.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > max_size:
            msg = f"Response size {content_length} exceeds limit {max_size}"
            raise ResponseSizeExceededError(msg)

        buffer = BytesIO()
        total_read = 0
        for chunk in response.iter_bytes(chunk_size=DEFAULT_CHUNK_SIZE):
            total_read += len(chunk)
            if total_read > max_size:
                msg = (
                    f"Response size exceeded limit of {max_size} bytes "
                    f"(read {total_read} bytes)"
                )
                raise ResponseSizeExceededError(msg)
            buffer.write(chunk)

        return buffer.getvalue()

    def _classify_http_error(self, status_code: int) -> HttpError | None:
        """Classify HTTP status code as error.

        Args:
            status_code: HTTP status code.

        Returns:
            HttpError if status indicates error, None otherwise.
        """
        if HTTP_STATUS_OK_MIN <= status_code < HTTP_STATUS_OK_MAX:
            return None

        if status_code == HTTP_STATUS_TOO_MANY_REQUESTS:
            return HttpError(
                error_class=HttpErrorClass.RATE_LIMITED,
                message="Rate limited (429 Too Many Requests)",
                status_code=status_code,
            )

        if HTTP_STATUS_BAD_REQUEST <= status_code < HTTP_STATUS_SERVER_ERROR_MIN:
            return HttpError(
                error_class=HttpErrorClass.HTTP_4XX,
                message=f"Client error ({status_code})",
                status_code=status_code,
            )

        if HTTP_STATUS_SERVER_ERROR_MIN <= status_code < HTTP_STATUS_SERVER_ERROR_MAX:
            return HttpError(
                error_class=HttpErrorClass.HTTP_5XX,
                message=f"Server error ({status_code})",
                status_code=status_code,
            )

        return HttpError(
            error_class=HttpErrorClass.UNKNOWN,
            message=f"Unexpected status ({status_code})",
            status_code=status_code,
        )

    def _error_response(
        self,
        url: str,
        error_class: HttpErrorClass,
        message: str,
    ) -> HttpResponse:
        return HttpResponse(
            status_code=0,
            final_url=url,
            error=HttpError(error_class=error_class, message=message),
        )
