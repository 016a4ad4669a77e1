"""The single in-flight word edit.

WHY: The edit panel shows one word at a time and its form must never be
pre-filled with values left over from a previous word. The session also
carries the word's position and the store generation so the commit hits
exactly the word that was opened.

HOW: EditSession holds at most one OpenEdit. open() first closes the
current edit and notifies listeners with ``None``, then installs the new
one and notifies again; a renderer that follows the notifications always
goes through an empty form before showing the next word. submit()
validates the form values, converts seconds to milliseconds, and commits
through the TranscriptStore.

RULES:
- Opening a new edit while one is open cancels the old one
- Validation failure raises EditValidationError and keeps the session open
- StaleEditError from the store closes the session and is re-raised
- cancel() never touches the store
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import Union

from transcript_editor.core.ir import Word, seconds_to_ms
from transcript_editor.core.store import TranscriptStore
from transcript_editor.errors import EditValidationError, StaleEditError

logger = logging.getLogger(__name__)

FormValue = Union[str, float, int, None]


@dataclass(frozen=True)
class OpenEdit:
    """The word currently shown in the edit panel.

    RULES:
    - index / generation identify the target inside the store
    - word is the snapshot the form is pre-filled from
    - qc_note is the QC feedback shown next to the form
    """

    index: int
    generation: int
    word: Word
    qc_note: str | None

    def form_defaults(self) -> dict[str, object]:
        """Initial values of the edit form (times in seconds)."""
        return {
            "word": self.word.text,
            "start": self.word.start_s,
            "end": self.word.end_s,
        }


SessionListener = Callable[[Union[OpenEdit, None]], None]


def _parse_seconds(name: str, value: FormValue) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise EditValidationError(f"{name} time is required.")
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise EditValidationError(f"{name} time must be a number of seconds (got {value!r}).")
    if not math.isfinite(seconds) or seconds < 0:
        raise EditValidationError(f"{name} time must be a non-negative number of seconds.")
    if not math.isfinite(seconds * 1000):
        raise EditValidationError(f"{name} time is too large (got {value!r}).")
    return seconds


class EditSession:
    """At most one open word edit, committed into a TranscriptStore."""

    def __init__(self, store: TranscriptStore) -> None:
        self._store = store
        self._current: OpenEdit | None = None
        self._listeners: list[SessionListener] = []

    @property
    def current(self) -> OpenEdit | None:
        return self._current

    @property
    def is_open(self) -> bool:
        return self._current is not None

    def subscribe(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def open(self, index: int, word: Word, generation: int) -> OpenEdit:
        """Start editing ``word``, found at ``index`` in ``generation``."""
        if self._current is not None:
            logger.debug("Replacing open edit at %d", self._current.index)
        self._close()
        self._current = OpenEdit(
            index=index,
            generation=generation,
            word=word,
            qc_note=word.qc_word,
        )
        self._notify()
        return self._current

    def submit(self, text: FormValue, start: FormValue, end: FormValue) -> Word:
        """Validate the form and commit it into the store.

        RULES:
        - text must be non-empty after stripping
        - start and end must be non-negative seconds with start <= end
        - Seconds become milliseconds rounded to nearest
        - Returns the committed word
        """
        current = self._current
        if current is None:
            raise EditValidationError("No word is being edited.")

        if text is None or not str(text).strip():
            raise EditValidationError("Word text is required.")
        start_s = _parse_seconds("Start", start)
        end_s = _parse_seconds("End", end)
        if start_s > end_s:
            raise EditValidationError(
                f"Start ({start_s}s) must not be after end ({end_s}s)."
            )

        try:
            committed = self._store.commit_edit(
                current.index,
                current.generation,
                str(text).strip(),
                seconds_to_ms(start_s),
                seconds_to_ms(end_s),
            )
        except StaleEditError:
            logger.warning("Discarding stale edit at %d", current.index)
            self._close()
            raise

        self._close()
        return committed

    def cancel(self) -> None:
        self._close()

    def _close(self) -> None:
        if self._current is None:
            return
        self._current = None
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._current)
