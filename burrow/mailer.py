"""Digest delivery through the Resend HTTP API."""

import base64
from datetime import datetime
from pathlib import Path
from types import TracebackType

import httpx
import structlog

from burrow.fetch.redact import redact_headers
from burrow.renderer.models import RenderedDigest


logger = structlog.get_logger()

RESEND_EMAILS_URL = "https://api.resend.com/emails"
DEFAULT_SEND_TIMEOUT_SECONDS = 30.0

HEADER_IMAGE_FILENAME = "header.jpg"
HEADER_IMAGE_CONTENT_ID = "header-image"


class DeliveryError(Exception):
    """Raised when the digest could not be handed to the mail API."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
            status_code: HTTP status returned by the API, if any.
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def digest_subject(now: datetime) -> str:
    """Build the subject line, e.g. ``Burrow Digest — Jan 2, 2006``."""
    return f"Burrow Digest — {now:%b} {now.day}, {now.year}"


class ResendMailer:
    """Sends rendered digests via Resend.

    One request per digest, never retried.
    """

    def __init__(  # noqa: PLR0913
        self,
        sender: str,
        recipient: str,
        api_key: str,
        header_image: bytes | None = None,
        client: httpx.Client | None = None,
        endpoint: str = RESEND_EMAILS_URL,
    ) -> None:
        """Initialize the mailer.

        Args:
            sender: From address.
            recipient: To address.
            api_key: Resend API key.
            header_image: JPEG bytes attached inline as the header image.
            client: Pre-built httpx client, e.g. with a mock transport.
            endpoint: Emails endpoint.
        """
        self._sender = sender
        self._recipient = recipient
        self._api_key = api_key
        self._header_image = header_image or None
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=DEFAULT_SEND_TIMEOUT_SECONDS)
        self._endpoint = endpoint
        self._log = logger.bind(component="mailer")

    @classmethod
    def load_header_image(cls, path: str | Path | None) -> bytes | None:
        """Read the inline header image, if one is configured.

        Args:
            path: Image path, or None.

        Returns:
            Image bytes, or None when no path is given.

        Raises:
            OSError: If the file cannot be read.
        """
        if not path:
            return None
        return Path(path).read_bytes()

    @property
    def has_header_image(self) -> bool:
        """Check whether an inline header image will be attached."""
        return self._header_image is not None

    def close(self) -> None:
        """Close the underlying client if this mailer created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "ResendMailer":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def build_payload(self, digest: RenderedDigest, now: datetime) -> dict[str, object]:
        """Build the Resend request body.

        Args:
            digest: Rendered digest bodies.
            now: Run time for the subject line.

        Returns:
            JSON-serializable request body.
        """
        payload: dict[str, object] = {
            "from": self._sender,
            "to": [self._recipient],
            "subject": digest_subject(now),
            "html": digest.html,
            "text": digest.text,
        }
        if self._header_image is not None:
            payload["attachments"] = [
                {
                    "filename": HEADER_IMAGE_FILENAME,
                    "content": base64.b64encode(self._header_image).decode("ascii"),
                    "content_id": HEADER_IMAGE_CONTENT_ID,
                }
            ]
        return payload

    def send(self, digest: RenderedDigest, now: datetime) -> str:
        """Send one digest.

        Args:
            digest: Rendered digest bodies.
            now: Run time for the subject line.

        Returns:
            The message id assigned by Resend (empty if none was returned).

        Raises:
            DeliveryError: On missing credentials, transport failure, or a
                non-2xx response.
        """
        if not self._api_key:
            msg = "Resend API key not configured"
            raise DeliveryError(msg)

        headers = {"Authorization": f"Bearer {self._api_key}"}
        self._log.debug(
            "digest_sending",
            recipient=self._recipient,
            headers=redact_headers(headers),
        )

        try:
            response = self._client.post(
                self._endpoint,
                json=self.build_payload(digest, now),
                headers=headers,
            )
        except httpx.HTTPError as e:
            msg = f"sending email via resend: {e}"
            raise DeliveryError(msg) from e

        if not response.is_success:
            msg = f"sending email via resend: status {response.status_code}: {response.text[:200]}"
            raise DeliveryError(msg, status_code=response.status_code)

        try:
            message_id = str(response.json().get("id", ""))
        except ValueError:
            message_id = ""

        self._log.info("digest_sent", recipient=self._recipient, message_id=message_id)
        return message_id
