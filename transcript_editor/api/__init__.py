"""Client package for the remote transcription and persistence service.

WHY: Upload, save, and download all go to the same remote service. This
package keeps every HTTP call behind one async client class.

HOW: Uses httpx.AsyncClient. TranscriptServiceClient exposes transcribe,
save, and download; responses are parsed into core.ir types.

RULES:
- All remote HTTP calls go through TranscriptServiceClient
- No direct httpx usage elsewhere in the package
"""

from transcript_editor.api.client import (
    TRANSPORT_ERRORS,
    TranscriptServiceClient,
    TranscriptServiceError,
    download_filename,
)

__all__ = [
    "TRANSPORT_ERRORS",
    "TranscriptServiceClient",
    "TranscriptServiceError",
    "download_filename",
]
