"""Editor composition root: one file, one transcript, one region, one edit.

WHY: The region controller, transcript store, selection filter, edit
session, and service client are each small and independent. Something
has to wire them into the user-facing flow — choose file, transcribe,
scrub the region, edit words, save, download — and keep the editable
word set current after every change. That is this module.

HOW: TranscriptEditor subscribes to the store and the controller and
recomputes the editable indices eagerly whenever either changes. Remote
calls open a short-lived TranscriptServiceClient from the injected
factory; every remote failure is wrapped in TransportError after the
state is left exactly as it was. snapshot() renders the whole UI state
as plain data for the HTTP surface.

RULES:
- upload() without a chosen file raises EditorInputError and sends nothing
- A failed transcribe never replaces the transcript
- A failed save never marks anything saved
- Only words overlapping the current region can be opened for editing
- Saves and downloads are keyed by the file that was transcribed
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import quote

from transcript_editor.api.client import (
    TRANSPORT_ERRORS,
    TranscriptServiceClient,
    download_filename,
)
from transcript_editor.config import EDITOR_AUDIO_PATH, SUPPORTED_FORMATS
from transcript_editor.core.engine import AudioEngine
from transcript_editor.core.ir import Transcript, Word
from transcript_editor.core.region import PlayState, RegionController
from transcript_editor.core.selection import editable_indices
from transcript_editor.core.session import EditSession, FormValue, OpenEdit
from transcript_editor.core.store import TranscriptStore
from transcript_editor.errors import EditorInputError, TransportError

logger = logging.getLogger(__name__)

STATUS_TRANSCRIBING = "Transcribing audio..."
STATUS_TRANSCRIBED = "Audio transcribed successfully!"
STATUS_SAVED = "Edits Saved!"


@dataclass(frozen=True)
class AudioFile:
    """The audio file chosen by the user, held in memory."""

    filename: str
    content: bytes
    content_type: str | None = None


def validate_audio_filename(filename: str) -> None:
    """Raise EditorInputError if the extension is not a supported audio format."""
    ext = Path(filename).suffix.lower()
    if ext not in SUPPORTED_FORMATS:
        raise EditorInputError(
            "Unsupported file type '{}'. Supported formats: {}".format(
                ext, ", ".join(sorted(SUPPORTED_FORMATS))
            )
        )


class TranscriptEditor:
    """Single-user transcript correction session."""

    def __init__(
        self,
        engine_factory: Callable[[], AudioEngine],
        client_factory: Callable[[], TranscriptServiceClient] = TranscriptServiceClient,
    ) -> None:
        self._client_factory = client_factory
        self.store = TranscriptStore()
        self.session = EditSession(self.store)
        self.controller = RegionController(engine_factory)
        self.status = ""
        self._selected_file: AudioFile | None = None
        self._transcribed_file: AudioFile | None = None
        self._editable: list[int] = []

        self.store.subscribe(lambda _store: self._refresh_selection())
        self.controller.subscribe(lambda _range: self._refresh_selection())

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    @property
    def selected_file(self) -> AudioFile | None:
        return self._selected_file

    @property
    def transcribed_file(self) -> AudioFile | None:
        return self._transcribed_file

    def select_file(self, filename: str, content: bytes, content_type: str | None = None) -> AudioFile:
        filename = Path(filename).name
        validate_audio_filename(filename)
        self._selected_file = AudioFile(filename, content, content_type)
        logger.info("Selected %s (%d bytes)", filename, len(content))
        return self._selected_file

    def audio_file(self, filename: str) -> AudioFile | None:
        """The in-memory audio served to the renderer, looked up by name."""
        for audio in (self._transcribed_file, self._selected_file):
            if audio is not None and audio.filename == filename:
                return audio
        return None

    @staticmethod
    def audio_source(audio: AudioFile) -> str:
        return "{}/{}".format(EDITOR_AUDIO_PATH, quote(audio.filename))

    # ------------------------------------------------------------------
    # Remote operations
    # ------------------------------------------------------------------

    async def upload(self) -> Transcript:
        """Transcribe the chosen file and load its audio into the engine.

        RULES:
        - Raises EditorInputError before any request when no file is chosen
        - On failure: TransportError, status cleared, transcript untouched
        - On success: transcript replaced wholesale, engine reloaded
        """
        audio = self._selected_file
        if audio is None:
            raise EditorInputError("Please upload a file!")

        self.status = STATUS_TRANSCRIBING
        try:
            async with self._client_factory() as client:
                transcript = await client.transcribe(audio.filename, audio.content)
        except TRANSPORT_ERRORS as exc:
            self.status = ""
            logger.warning("Transcription of %s failed: %s", audio.filename, exc)
            raise TransportError("Error uploading file: {}".format(exc)) from exc

        self._transcribed_file = audio
        self.store.replace_all(transcript)
        self.controller.load(self.audio_source(audio))
        self._refresh_selection()
        self.status = STATUS_TRANSCRIBED
        return transcript

    async def save(self) -> None:
        """Send the whole transcript to the service for durable storage."""
        audio = self._transcribed_file
        transcript = self.store.transcript
        if audio is None or transcript is None:
            raise EditorInputError("Nothing to save yet. Upload and transcribe a file first.")

        revision = self.store.revision
        try:
            async with self._client_factory() as client:
                await client.save(audio.filename, transcript)
        except TRANSPORT_ERRORS as exc:
            logger.warning("Saving %s failed: %s", audio.filename, exc)
            raise TransportError("Error saving edits: {}".format(exc)) from exc

        self.store.mark_saved(revision)
        self.status = STATUS_SAVED

    async def download(self) -> tuple[str, bytes]:
        """Fetch the saved transcript; returns (artifact filename, content)."""
        audio = self._transcribed_file or self._selected_file
        if audio is None:
            raise EditorInputError("Please upload a file!")

        try:
            async with self._client_factory() as client:
                content = await client.download(audio.filename)
        except TRANSPORT_ERRORS as exc:
            logger.warning("Downloading %s failed: %s", audio.filename, exc)
            raise TransportError("Error downloading JSON: {}".format(exc)) from exc

        return download_filename(audio.filename), content

    # ------------------------------------------------------------------
    # Selection and editing
    # ------------------------------------------------------------------

    @property
    def editable_indices(self) -> list[int]:
        return list(self._editable)

    @property
    def editable_words(self) -> list[Word]:
        words = self.store.words
        return [words[i] for i in self._editable]

    def _refresh_selection(self) -> None:
        time_range = self.controller.time_range
        if time_range is None:
            self._editable = []
        else:
            self._editable = editable_indices(self.store.words, time_range)

    def open_edit(self, index: int) -> OpenEdit:
        """Open the edit panel on the word at ``index``."""
        if index not in self._editable:
            raise EditorInputError(
                "Word {} is not inside the selected region.".format(index)
            )
        word = self.store.words[index]
        return self.session.open(index, word, self.store.generation)

    def submit_edit(self, text: FormValue, start: FormValue, end: FormValue) -> Word:
        if not self.session.is_open:
            raise EditorInputError("No word is being edited.")
        return self.session.submit(text, start, end)

    def cancel_edit(self) -> None:
        self.session.cancel()

    def toggle_play(self) -> PlayState:
        return self.controller.toggle_play()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        """Plain-data view of everything the UI displays."""
        editable = set(self._editable)
        current = self.session.current
        selected_index = None
        if current is not None and current.generation == self.store.generation:
            selected_index = current.index

        words = []
        for i, word in enumerate(self.store.words):
            words.append({
                "index": i,
                "word": word.text,
                "start_time": word.start_time,
                "end_time": word.end_time,
                "qc": word.qc,
                "qc_word": word.qc_word,
                "edited": word.edited,
                "editable": i in editable,
                "selected": i == selected_index,
            })

        region = None
        time_range = self.controller.time_range
        if time_range is not None:
            start_ms, end_ms = time_range.to_ms()
            region = {"start": time_range.start, "end": time_range.end,
                      "start_ms": start_ms, "end_ms": end_ms}

        edit = None
        if current is not None:
            edit = {"index": current.index, "qc_note": current.qc_note}
            edit.update(current.form_defaults())

        audio = self._transcribed_file
        return {
            "filename": self._selected_file.filename if self._selected_file else None,
            "transcribed_filename": audio.filename if audio else None,
            "audio_source": self.audio_source(audio) if audio else None,
            "status": self.status,
            "play_state": self.controller.state.value,
            "duration": self.controller.duration,
            "region": region,
            "words": words,
            "edit": edit,
            "dirty": self.store.dirty,
        }
