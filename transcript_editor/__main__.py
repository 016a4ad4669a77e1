"""Package entry point for ``python -m transcript_editor``.

WHY: Users start the local editor server with
``python -m transcript_editor`` and open the UI in a browser.

HOW: Delegates to server.app.run_editor(), which configures logging and
runs uvicorn on EDITOR_HOST:EDITOR_PORT.
"""

if __name__ == "__main__":
    from transcript_editor.server.app import run_editor
    run_editor()
