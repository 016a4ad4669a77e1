"""Core editing state: transcript model, selection, edits, and playback region.

WHY: The core package holds the logic that keeps the playback region,
the editable word subset, and word edits consistent. It has no HTTP or
rendering code so it can be driven by any front-end.

HOW: ir.py defines the data structures, selection.py the pure overlap
filter, store.py the word list, session.py the single open edit,
engine.py the audio engine interface, region.py the region controller.

RULES:
- No network I/O in this package
- All mutations are synchronous; callers serialize events
"""
