"""Async HTTP client for the transcription and persistence service.

WHY: The editor talks to one remote service for three things: turning an
audio upload into a word list, saving the edited transcript, and fetching
a saved transcript for download. This module keeps the HTTP details
(paths, multipart encoding, status handling) out of the editor.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. TranscriptServiceClient
is an async context manager: enter it to open the connection pool, exit
to close it. Each remote operation is one method:
transcribe (POST /upload) → save (POST /update-json/{filename}) →
download (GET /download/{filename}).

RULES:
- Always use the async context manager
- Non-2xx responses raise TranscriptServiceError
- Network failures propagate as httpx.HTTPError
- A malformed /upload body raises InvalidTranscriptError
- Filenames are URL-quoted into the path
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from transcript_editor.config import (
    DOWNLOAD_SUFFIX,
    TRANSCRIPT_API_CONNECT_TIMEOUT_S,
    TRANSCRIPT_API_TIMEOUT_S,
    TRANSCRIPT_API_URL,
)
from transcript_editor.core.ir import InvalidTranscriptError, Transcript

logger = logging.getLogger(__name__)


class TranscriptServiceError(Exception):
    """Raised when the transcription service returns an error response.

    WHY: Callers need a typed exception to distinguish a service refusal
    from a network error or a malformed payload.

    RULES:
    - Always include status_code and message
    - message is the response body text
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Transcription service error {status_code}: {message}")


TRANSPORT_ERRORS = (TranscriptServiceError, InvalidTranscriptError, httpx.HTTPError)
"""Every failure a remote call can end in; callers catch these together."""


def download_filename(filename: str) -> str:
    """Name under which a saved transcript is offered to the user."""
    return f"{filename}{DOWNLOAD_SUFFIX}"


class TranscriptServiceClient:
    """Async client for the transcription/persistence service.

    RULES:
    - Use as: async with TranscriptServiceClient() as client: ...
    - base_url defaults to TRANSCRIPT_API_URL from config
    - transport is passed through to httpx (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or TRANSCRIPT_API_URL).rstrip("/")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> TranscriptServiceClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(
                TRANSCRIPT_API_TIMEOUT_S,
                connect=TRANSCRIPT_API_CONNECT_TIMEOUT_S,
            ),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "TranscriptServiceClient must be used as an async context manager: "
                "async with TranscriptServiceClient() as client: ..."
            )
        return self._client

    async def transcribe(self, filename: str, content: bytes) -> Transcript:
        """Upload audio and return the word-level transcript.

        WHY: Word boundaries and QC flags are computed remotely; the
        editor only receives the finished word list.

        HOW: Sends the bytes as multipart field ``file`` to POST /upload
        and validates the JSON body into a Transcript.

        Args:
            filename: Original audio filename (sent with the part).
            content: Raw audio bytes.

        Returns:
            The parsed Transcript.
        """
        client = self._ensure_client()
        logger.info("Uploading %s (%d bytes) for transcription", filename, len(content))

        resp = await client.post("/upload", files={"file": (filename, content)})
        if resp.status_code not in (200, 201):
            raise TranscriptServiceError(resp.status_code, resp.text)

        try:
            data = resp.json()
        except ValueError as exc:
            raise InvalidTranscriptError(
                "Transcription response is not valid JSON"
            ) from exc
        return Transcript.from_dict(data)

    async def save(self, filename: str, transcript: Transcript) -> None:
        """Persist the full transcript under ``filename``.

        HOW: POST /update-json/{filename} with the transcript as the JSON
        body (httpx sets Content-Type: application/json).
        """
        client = self._ensure_client()
        logger.info("Saving transcript for %s", filename)

        resp = await client.post(
            f"/update-json/{quote(filename)}",
            json=transcript.to_dict(),
        )
        if resp.status_code not in (200, 201, 204):
            raise TranscriptServiceError(resp.status_code, resp.text)

    async def download(self, filename: str) -> bytes:
        """Fetch the previously saved transcript for ``filename`` as raw bytes."""
        client = self._ensure_client()
        logger.info("Downloading transcript for %s", filename)

        resp = await client.get(f"/download/{quote(filename)}")
        if resp.status_code != 200:
            raise TranscriptServiceError(resp.status_code, resp.text)
        return resp.content
