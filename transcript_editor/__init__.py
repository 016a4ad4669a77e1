"""Transcript Region Editor — correct word-level transcripts while listening.

WHY: Automatic transcriptions need human correction, and correcting a
word is only reliable while hearing the audio around it. This package
keeps an audio region, the words inside it, and word edits consistent
so a user can scrub, listen, and fix words in place.

HOW: Four layers — core (transcript model, selection filter, store, edit
session, region controller), api (async client for the transcription
and persistence service), editor (composition root), and server (local
FastAPI surface driven by a browser front-end).

RULES:
- Only words overlapping the selected region are editable
- Edits target words by position, never by value
- A failed remote call leaves the editor state unchanged
"""

__version__ = "0.1.0"
