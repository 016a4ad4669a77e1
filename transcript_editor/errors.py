"""Exception taxonomy for the editor.

WHY: Callers (the HTTP surface, tests) need to tell apart a user mistake,
a failed remote call, a rejected edit form, and an edit that lost its
target. Each maps to a different notice and HTTP status.

HOW: One small hierarchy rooted at EditorError. Remote-call failures are
wrapped in TransportError by the editor so callers never need to know
about httpx.

RULES:
- EditorInputError: nothing was sent or mutated (no file, not editable, ...)
- TransportError: a remote call failed; no partial state mutation happened
- EditValidationError: edit form rejected; the session stays open
- StaleEditError: the word targeted by an edit is no longer there
"""

from __future__ import annotations


class EditorError(Exception):
    """Base class for every error the editor reports to the user."""


class EditorInputError(EditorError):
    """Raised when an action is attempted without the input it needs."""


class TransportError(EditorError):
    """Raised when a transcribe, save, or download call fails."""


class EditValidationError(EditorError, ValueError):
    """Raised when a submitted edit has missing or invalid fields."""


class StaleEditError(EditorError):
    """Raised when an edit targets a transcript that has since been replaced.

    The session captured the word's index and the store generation when it
    opened. If a new upload replaced the transcript in between, or the index
    no longer exists, the edit is rejected instead of overwriting whatever
    now sits at that position.
    """

    def __init__(self, index: int, message: str) -> None:
        self.index = index
        super().__init__(message)
