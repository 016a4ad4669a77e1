"""Configuration constants, supported formats, and .env loading.

WHY: The editor has a handful of tunable values (service URL, region
policy, colours, server bind address) that should be easy to find and
override without touching logic. Keeping them as plain module-level
constants lets both the core and the HTTP surface import one source of
truth.

HOW: python-dotenv loads the .env file on import. Every value is read
with os.getenv() and a sensible default, then converted to its type.

RULES:
- SUPPORTED_FORMATS lists accepted audio/video extensions (lowercase, with dot)
- Region policy values are in float seconds
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the editor is started from)
load_dotenv()

# ---------------------------------------------------------------------------
# Supported audio/video file extensions
# ---------------------------------------------------------------------------

SUPPORTED_FORMATS: set[str] = {
    ".mp3", ".mp4", ".mpeg", ".mpga", ".m4a", ".wav", ".webm",
}
"""Audio file extensions accepted by the transcription service."""

# ---------------------------------------------------------------------------
# Remote transcription / persistence service
# ---------------------------------------------------------------------------

TRANSCRIPT_API_URL = os.getenv(
    "TRANSCRIPT_API_URL",
    "https://audio-transcription-editor-13c6d97d2e6b.herokuapp.com",
)
TRANSCRIPT_API_TIMEOUT_S = float(os.getenv("TRANSCRIPT_API_TIMEOUT_S", "300"))
TRANSCRIPT_API_CONNECT_TIMEOUT_S = float(
    os.getenv("TRANSCRIPT_API_CONNECT_TIMEOUT_S", "30")
)

DOWNLOAD_SUFFIX = "_transcription.json"
"""Appended to the source filename when offering the saved transcript."""

# ---------------------------------------------------------------------------
# Region policy
# ---------------------------------------------------------------------------

MIN_REGION_LENGTH_S = float(os.getenv("MIN_REGION_LENGTH_S", "0.1"))
REGION_START_EPSILON_S = float(os.getenv("REGION_START_EPSILON_S", "0.1"))
"""Initial region start offset so the left handle is grabbable."""

REGION_COLOR = os.getenv("REGION_COLOR", "rgba(0, 0, 0, 0.25)")
REGION_HANDLE_COLOR = os.getenv("REGION_HANDLE_COLOR", "red")
REGION_HANDLE_WIDTH = os.getenv("REGION_HANDLE_WIDTH", "8px")
REGION_LABEL = "Selected Region"

# ---------------------------------------------------------------------------
# Local editor server
# ---------------------------------------------------------------------------

EDITOR_HOST = os.getenv("EDITOR_HOST", "127.0.0.1")
EDITOR_PORT = int(os.getenv("EDITOR_PORT", "8000"))
EDITOR_AUDIO_PATH = "/audio"
"""Route prefix under which the selected audio file is served to the renderer."""
