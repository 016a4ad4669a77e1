"""Selection filter: which words overlap the active time range.

WHY: Editing is scoped to what is currently selected and audible. The
set of editable words must follow both the region and the transcript,
so it is a pure function of the two and can be recomputed on every
change without bookkeeping.

HOW: A word is selected when its interval overlaps the range with
open bounds: ``start < range.end and end > range.start``, both sides
in seconds. A word that ends exactly where the range starts (or starts
exactly where it ends) is not selected.

RULES:
- Pure and deterministic; no state, no side effects
- Result keeps transcript order
- Indices are positional and are what an edit session captures
"""

from __future__ import annotations

from collections.abc import Sequence

from transcript_editor.core.ir import TimeRange, Word


def overlaps(word: Word, time_range: TimeRange) -> bool:
    return word.start_s < time_range.end and word.end_s > time_range.start


def editable_indices(words: Sequence[Word], time_range: TimeRange) -> list[int]:
    """Positions of the words overlapping ``time_range``, in order."""
    return [i for i, word in enumerate(words) if overlaps(word, time_range)]


def select_words(words: Sequence[Word], time_range: TimeRange) -> list[Word]:
    """The words overlapping ``time_range``, in transcript order."""
    return [words[i] for i in editable_indices(words, time_range)]
