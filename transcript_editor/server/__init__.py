"""Local HTTP surface for the browser front-end.

WHY: The waveform renderer and edit form run in a browser; this package
exposes the editor to them as a small FastAPI app.

HOW: models.py holds the Pydantic schemas, app.py the routes and the
module-level editor instance.
"""
