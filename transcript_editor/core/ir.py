"""Dataclasses for the transcript being edited and the active time range.

WHY: The transcription service returns loose JSON: a ``words`` array plus
whatever metadata it chooses to attach. The editor needs typed words with
validated timing, while still writing back every key it did not
understand, untouched, when the transcript is saved.

HOW: Three dataclasses:
  Word       — one transcribed token with millisecond timing and QC data
  Transcript — ordered words plus opaque pass-through metadata
  TimeRange  — the active playback/edit selection in float seconds

Transcript.from_dict() validates the raw payload with jsonschema before
building words, so a malformed response never reaches the store.

RULES:
- Storage times are integer milliseconds; the editing boundary is seconds
- 0 <= start_time <= end_time for every word
- Word order is the service's order and is never re-sorted
- Unknown word keys live in Word.extra, unknown top-level keys in
  Transcript.metadata; both round-trip unchanged
- ``edited`` is only written for words that were edited
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import jsonschema

_SCHEMA_PATH = Path(__file__).resolve().parent / "transcript_schema.json"

_WORD_KEYS = {"word", "start_time", "end_time", "qc", "qc_word", "edited"}


class InvalidTranscriptError(ValueError):
    """Raised when a transcription payload does not have the expected shape."""


def _load_schema() -> dict[str, Any]:
    """Load the transcript JSON schema from disk.

    Cached at module level after first call to avoid repeated I/O.
    """
    with open(_SCHEMA_PATH) as f:
        return json.load(f)


_CACHED_SCHEMA: dict[str, Any] | None = None


def _get_schema() -> dict[str, Any]:
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        _CACHED_SCHEMA = _load_schema()
    return _CACHED_SCHEMA


def seconds_to_ms(seconds: float) -> int:
    """Convert float seconds to integer milliseconds, rounding half up."""
    return int(math.floor(seconds * 1000 + 0.5))


@dataclass(frozen=True)
class Word:
    """One transcribed token.

    WHY: Every editing operation reads or replaces words. Making them
    frozen means a committed edit always produces a new object, so anything
    holding the old word (a render, an open session) still sees the values
    it was built from.

    RULES:
    - text: the token as displayed (wire key ``word``)
    - start_time / end_time: integer milliseconds
    - qc: pass/fail flag computed by the service
    - qc_word: optional feedback note for the QC panel
    - edited: True once a user edit has been committed
    """

    text: str
    start_time: int
    end_time: int
    qc: bool = False
    qc_word: str | None = None
    edited: bool = False
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        if self.start_time < 0 or self.end_time < 0:
            raise InvalidTranscriptError(
                f"Word {self.text!r} has negative timing "
                f"({self.start_time}ms - {self.end_time}ms)"
            )
        if self.start_time > self.end_time:
            raise InvalidTranscriptError(
                f"Word {self.text!r} starts after it ends "
                f"({self.start_time}ms > {self.end_time}ms)"
            )

    @property
    def start_s(self) -> float:
        return self.start_time / 1000

    @property
    def end_s(self) -> float:
        return self.end_time / 1000

    def with_edit(self, text: str, start_time: int, end_time: int) -> Word:
        """Return a copy carrying the edited fields and ``edited=True``."""
        return replace(
            self,
            text=text,
            start_time=start_time,
            end_time=end_time,
            edited=True,
        )

    @classmethod
    def from_dict(cls, data: dict) -> Word:
        """Parse a Word from one entry of the ``words`` array."""
        return cls(
            text=data["word"],
            start_time=int(data["start_time"]),
            end_time=int(data["end_time"]),
            qc=bool(data.get("qc", False)),
            qc_word=data.get("qc_word"),
            edited=bool(data.get("edited", False)),
            extra={k: v for k, v in data.items() if k not in _WORD_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = dict(self.extra)
        out.update({
            "word": self.text,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "qc": self.qc,
            "qc_word": self.qc_word,
        })
        if self.edited:
            out["edited"] = True
        return out


@dataclass
class Transcript:
    """An ordered word list plus the service's opaque metadata.

    RULES:
    - words: chronological, positional identity (index), never re-sorted
    - metadata: every top-level key except ``words``, passed through as-is
    """

    words: list[Word]
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> Transcript:
        """Validate and parse a raw transcription response.

        RULES:
        - Raises InvalidTranscriptError when the payload fails the schema
          or a word violates the timing invariant
        """
        try:
            jsonschema.validate(instance=data, schema=_get_schema())
        except jsonschema.ValidationError as exc:
            raise InvalidTranscriptError(
                f"Transcription response is malformed: {exc.message}"
            ) from exc

        words = [Word.from_dict(w) for w in data["words"]]
        metadata = {k: v for k, v in data.items() if k != "words"}
        return cls(words=words, metadata=metadata)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = dict(self.metadata)
        out["words"] = [w.to_dict() for w in self.words]
        return out


@dataclass(frozen=True)
class TimeRange:
    """The active playback/edit selection, in float seconds."""

    start: float
    end: float

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError(f"Time range cannot start before 0 (got {self.start})")
        if self.start >= self.end:
            raise ValueError(
                f"Time range start must be before its end ({self.start} >= {self.end})"
            )

    @property
    def length(self) -> float:
        return self.end - self.start

    def to_ms(self) -> tuple[int, int]:
        """Millisecond values shown in the read-only region fields."""
        return seconds_to_ms(self.start), seconds_to_ms(self.end)
