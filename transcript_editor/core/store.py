"""Authoritative holder of the transcript being edited.

WHY: Several components read the word list (selection filter, snapshot,
save) but only two events may change it: a new transcription arriving
and a committed edit. Centralizing both behind one small class keeps
ordering and positional identity intact and gives one place to notify
everything that depends on the words.

HOW: The store keeps the current Transcript, a ``generation`` counter
bumped on every wholesale replacement, and a ``revision`` counter bumped
on every mutation; the store is dirty while the revision is newer than
the last saved one. Listeners subscribed with subscribe() are called
synchronously after every mutation.

RULES:
- replace_all() discards prior edits; there is no merge
- commit_edit() targets an index captured together with the generation;
  a generation mismatch or a missing index raises StaleEditError
- A commit replaces the word object at its index; other indices keep
  their exact objects
- dirty is set by commits and cleared by replace_all() or by
  mark_saved() for the revision that was actually sent
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from transcript_editor.core.ir import Transcript, Word
from transcript_editor.errors import StaleEditError

logger = logging.getLogger(__name__)

StoreListener = Callable[["TranscriptStore"], None]


class TranscriptStore:
    """Ordered word list with positional, generation-checked edits."""

    def __init__(self) -> None:
        self._transcript: Transcript | None = None
        self._generation = 0
        self._revision = 0
        self._saved_revision = 0
        self._listeners: list[StoreListener] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def transcript(self) -> Transcript | None:
        return self._transcript

    @property
    def words(self) -> list[Word]:
        """The current word list (empty before the first transcription)."""
        if self._transcript is None:
            return []
        return self._transcript.words

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def revision(self) -> int:
        """Bumped by every mutation; a save records the revision it sent."""
        return self._revision

    @property
    def dirty(self) -> bool:
        return self._revision != self._saved_revision

    def subscribe(self, listener: StoreListener) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def replace_all(self, transcript: Transcript) -> None:
        """Install a freshly received transcript, discarding the old one."""
        self._transcript = transcript
        self._generation += 1
        self._revision += 1
        self._saved_revision = self._revision
        logger.info(
            "Transcript replaced (generation %d, %d words)",
            self._generation, len(transcript.words),
        )
        self._notify()

    def commit_edit(
        self,
        index: int,
        generation: int,
        text: str,
        start_time: int,
        end_time: int,
    ) -> Word:
        """Replace the word at ``index`` with an edited copy.

        WHY: Two words may share identical text and timing, so the target
        is located by position, never by value. The generation guards
        against a second upload landing while the edit form was open.

        RULES:
        - Raises StaleEditError if the generation changed or index is invalid
        - The new word keeps QC data and extra keys, with edited=True
        - Returns the new word
        """
        if self._transcript is None or generation != self._generation:
            raise StaleEditError(
                index,
                "The transcript was replaced while this word was being edited. "
                "Reopen the word to edit the current transcript.",
            )

        words = self._transcript.words
        if not 0 <= index < len(words):
            raise StaleEditError(
                index,
                f"No word at position {index}; the transcript has {len(words)} words.",
            )

        updated = words[index].with_edit(text, start_time, end_time)
        words[index] = updated
        self._revision += 1
        logger.info(
            "Committed edit at %d: %r (%dms - %dms)",
            index, text, start_time, end_time,
        )
        self._notify()
        return updated

    def mark_saved(self, revision: int) -> None:
        """Record that the content at ``revision`` reached durable storage.

        Edits committed after that revision keep the store dirty.
        """
        self._saved_revision = max(self._saved_revision, revision)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
