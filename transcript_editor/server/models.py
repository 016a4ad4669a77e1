"""Pydantic request/response models for the local editor API.

WHY: The browser front-end drives the editor over HTTP. Typed schemas
validate the events it reports (engine ready, region moved, form
submitted) and document every field in the /docs UI.

HOW: One model per request body or response shape. EditorState mirrors
TranscriptEditor.snapshot() so the front-end can re-render from a single
call after any event.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Times in requests are float seconds; word times in responses are ms
- Edit form values accept numbers or strings, validated by the editor
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class ReadyRequest(BaseModel):
    """Reported by the renderer once the audio is decoded."""

    duration: float = Field(gt=0, description="Total audio duration in seconds.")


class RegionUpdateRequest(BaseModel):
    """Reported when the user finishes dragging or resizing the region."""

    start: float = Field(ge=0, description="New region start in seconds.")
    end: float = Field(gt=0, description="New region end in seconds.")


class TickRequest(BaseModel):
    """Periodic playback position report."""

    position: float = Field(ge=0, description="Current playback position in seconds.")


class EditRequest(BaseModel):
    """Values of the edit form.

    RULES:
    - word must be non-empty
    - start and end are seconds (number or numeric string), start <= end
    """

    word: Optional[str] = Field(default=None, description="Corrected word text.")
    start: Optional[Union[float, str]] = Field(
        default=None, description="Word start in seconds."
    )
    end: Optional[Union[float, str]] = Field(
        default=None, description="Word end in seconds."
    )


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class FileSelectedResponse(BaseModel):
    """Acknowledges the chosen audio file."""

    filename: str = Field(description="Sanitized filename of the chosen audio.")
    size: int = Field(description="File size in bytes.")


class WordState(BaseModel):
    """One word as shown in the word list."""

    index: int = Field(description="Position of the word in the transcript.")
    word: str = Field(description="Word text.")
    start_time: int = Field(description="Word start in milliseconds.")
    end_time: int = Field(description="Word end in milliseconds.")
    qc: bool = Field(description="Quality check passed.")
    qc_word: Optional[str] = Field(default=None, description="Quality check feedback note.")
    edited: bool = Field(description="The word has been edited by the user.")
    editable: bool = Field(description="The word overlaps the selected region.")
    selected: bool = Field(description="The word is open in the edit panel.")


class RegionState(BaseModel):
    """The current time range, with read-only millisecond values."""

    start: float = Field(description="Region start in seconds.")
    end: float = Field(description="Region end in seconds.")
    start_ms: int = Field(description="Region start in milliseconds (display).")
    end_ms: int = Field(description="Region end in milliseconds (display).")


class EditState(BaseModel):
    """The open edit panel: form defaults and QC feedback."""

    index: int = Field(description="Position of the word being edited.")
    word: str = Field(description="Form default for the word text.")
    start: float = Field(description="Form default for the start, in seconds.")
    end: float = Field(description="Form default for the end, in seconds.")
    qc_note: Optional[str] = Field(
        default=None, description="QC feedback for the word, if any."
    )


class EditorState(BaseModel):
    """Everything the editor UI displays."""

    filename: Optional[str] = Field(default=None, description="Chosen audio filename.")
    transcribed_filename: Optional[str] = Field(
        default=None, description="Filename the current transcript belongs to."
    )
    audio_source: Optional[str] = Field(
        default=None, description="URL the renderer loads the audio from."
    )
    status: str = Field(description="Latest status message.")
    play_state: str = Field(description="unloaded, loading, paused, or playing.")
    duration: Optional[float] = Field(default=None, description="Audio duration in seconds.")
    region: Optional[RegionState] = Field(default=None, description="Current time range.")
    words: List[WordState] = Field(description="All transcript words in order.")
    edit: Optional[EditState] = Field(default=None, description="Open edit panel.")
    dirty: bool = Field(description="There are edits not yet saved.")


class PlaybackResponse(BaseModel):
    """Playback command the renderer must follow."""

    play_state: str = Field(description="unloaded, loading, paused, or playing.")
    playing: bool = Field(description="The renderer should be playing.")
    start: Optional[float] = Field(default=None, description="Playback start in seconds.")
    end: Optional[float] = Field(default=None, description="Playback stop position in seconds.")


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - detail is the failure notice shown to the user
    """

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
