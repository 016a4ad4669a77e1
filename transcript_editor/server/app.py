"""FastAPI application that lets a browser front-end drive the editor.

WHY: The waveform renderer and the word list/edit form live in a
browser. They need a local API that turns each user or renderer event
(file chosen, audio ready, region dragged, region clicked, form
submitted, save clicked) into one editor operation and hands back the
state to render.

HOW: A single module-level TranscriptEditor built on HeadlessEngine
serves one user. Every route is one event; FastAPI runs them on one
event loop and each mutation completes before the handler returns, so
events are applied strictly one after another. Editor errors are mapped
to HTTP status codes with the message as the failure notice.

RULES:
- EditorInputError → 400, EditValidationError → 422,
  StaleEditError → 409, TransportError → 502
- Renderer events before the audio is loaded → 409
- Error responses use the ErrorResponse schema
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.responses import Response

from transcript_editor import __version__
from transcript_editor.config import EDITOR_HOST, EDITOR_PORT
from transcript_editor.core.engine import HeadlessEngine
from transcript_editor.editor import TranscriptEditor
from transcript_editor.errors import (
    EditorError,
    EditorInputError,
    EditValidationError,
    StaleEditError,
    TransportError,
)
from transcript_editor.server.models import (
    EditorState,
    EditRequest,
    ErrorResponse,
    FileSelectedResponse,
    HealthResponse,
    PlaybackResponse,
    ReadyRequest,
    RegionUpdateRequest,
    TickRequest,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and editor setup
# ---------------------------------------------------------------------------

editor = TranscriptEditor(engine_factory=HeadlessEngine)

app = FastAPI(
    title="Transcript Region Editor API",
    description=(
        "Local API behind the transcript editor UI. Choose an audio file, "
        "transcribe it, select a region of the waveform, correct the words "
        "inside it while listening, then save and download the transcript."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

_ERROR_STATUS = (
    (StaleEditError, 409),
    (EditValidationError, 422),
    (EditorInputError, 400),
    (TransportError, 502),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _http_error(exc: EditorError) -> HTTPException:
    """Map an editor error to the HTTPException carrying its notice."""
    for exc_type, status_code in _ERROR_STATUS:
        if isinstance(exc, exc_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


def _state() -> EditorState:
    return EditorState(**editor.snapshot())


def _engine() -> HeadlessEngine:
    """Return the live engine, raising 409 when no audio is loaded."""
    engine = editor.controller.engine
    if not isinstance(engine, HeadlessEngine):
        raise HTTPException(status_code=409, detail="No audio is loaded.")
    return engine


def _playback() -> PlaybackResponse:
    engine = editor.controller.engine
    start = end = None
    playing = False
    if isinstance(engine, HeadlessEngine):
        playing = engine.playing
        if engine.play_bounds is not None:
            start, end = engine.play_bounds
    return PlaybackResponse(
        play_state=editor.controller.state.value,
        playing=playing,
        start=start,
        end=end,
    )


# ---------------------------------------------------------------------------
# Endpoints: File and transcription
# ---------------------------------------------------------------------------


@app.post(
    "/file",
    response_model=FileSelectedResponse,
    tags=["transcription"],
    summary="Choose the audio file",
    description=(
        "Hold an audio file in memory for transcription. Accepted formats: "
        "mp3, mp4, mpeg, mpga, m4a, wav, webm."
    ),
    responses={400: {"model": ErrorResponse, "description": "Unsupported file type"}},
)
async def choose_file(
    file: Annotated[UploadFile, File(description="Audio file to transcribe")],
) -> FileSelectedResponse:
    content = await file.read()
    try:
        audio = editor.select_file(file.filename or "", content, file.content_type)
    except EditorError as exc:
        raise _http_error(exc)
    return FileSelectedResponse(filename=audio.filename, size=len(audio.content))


@app.post(
    "/upload",
    response_model=EditorState,
    tags=["transcription"],
    summary="Upload and transcribe",
    description=(
        "Send the chosen file to the transcription service. On success the "
        "transcript replaces any previous one and the audio is loaded into "
        "the waveform engine."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "No file chosen"},
        502: {"model": ErrorResponse, "description": "Transcription service failed"},
    },
)
async def upload() -> EditorState:
    try:
        await editor.upload()
    except EditorError as exc:
        raise _http_error(exc)
    return _state()


@app.get(
    "/audio/{filename}",
    tags=["transcription"],
    summary="Audio for the waveform renderer",
    description="Serve the in-memory audio bytes of the chosen or transcribed file.",
    responses={404: {"model": ErrorResponse, "description": "Unknown file"}},
)
async def get_audio(filename: str) -> Response:
    audio = editor.audio_file(filename)
    if audio is None:
        raise HTTPException(status_code=404, detail="Audio file not found: {}".format(filename))
    return Response(
        content=audio.content,
        media_type=audio.content_type or "application/octet-stream",
    )


@app.get(
    "/state",
    response_model=EditorState,
    tags=["editor"],
    summary="Current editor state",
    description="Words with editable/selected flags, region, play state, and edit panel.",
)
async def get_state() -> EditorState:
    return _state()


# ---------------------------------------------------------------------------
# Endpoints: Waveform and playback
# ---------------------------------------------------------------------------


@app.post(
    "/waveform/ready",
    response_model=EditorState,
    tags=["waveform"],
    summary="Audio finished loading",
    description="Report the decoded duration. Initializes the region to the full file.",
    responses={409: {"model": ErrorResponse, "description": "No audio loaded"}},
)
async def waveform_ready(body: ReadyRequest) -> EditorState:
    try:
        _engine().emit_ready(body.duration)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return _state()


@app.post(
    "/region",
    response_model=EditorState,
    tags=["waveform"],
    summary="Region drag/resize finished",
    description=(
        "Replace the time range with the region's new bounds and recompute "
        "the editable words."
    ),
    responses={
        409: {"model": ErrorResponse, "description": "No audio loaded"},
        422: {"model": ErrorResponse, "description": "Region too short or not ready"},
    },
)
async def update_region(body: RegionUpdateRequest) -> EditorState:
    try:
        _engine().emit_region_updated(body.start, body.end)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return _state()


@app.post(
    "/region/click",
    response_model=PlaybackResponse,
    tags=["waveform"],
    summary="Region clicked",
    description="Toggle region playback. The click does not reach background handlers.",
    responses={409: {"model": ErrorResponse, "description": "No audio loaded"}},
)
async def click_region() -> PlaybackResponse:
    _engine().emit_region_clicked()
    return _playback()


@app.post(
    "/playback/toggle",
    response_model=PlaybackResponse,
    tags=["waveform"],
    summary="Play selection / pause",
    description="Play only the selected region when paused, pause when playing.",
)
async def toggle_playback() -> PlaybackResponse:
    editor.toggle_play()
    return _playback()


@app.post(
    "/playback/finish",
    response_model=PlaybackResponse,
    tags=["waveform"],
    summary="Playback finished",
    description="Report that playback reached its end; the state returns to paused.",
    responses={409: {"model": ErrorResponse, "description": "No audio loaded"}},
)
async def finish_playback() -> PlaybackResponse:
    _engine().emit_finish()
    return _playback()


@app.post(
    "/playback/tick",
    response_model=PlaybackResponse,
    tags=["waveform"],
    summary="Playback position tick",
    description="Report the playback position; playback stops at the region end.",
    responses={409: {"model": ErrorResponse, "description": "No audio loaded"}},
)
async def playback_tick(body: TickRequest) -> PlaybackResponse:
    _engine().emit_timeupdate(body.position)
    return _playback()


# ---------------------------------------------------------------------------
# Endpoints: Editing
# ---------------------------------------------------------------------------


@app.post(
    "/edit/{index}",
    response_model=EditorState,
    tags=["editor"],
    summary="Open the edit panel on a word",
    description="Only words overlapping the current region can be edited.",
    responses={400: {"model": ErrorResponse, "description": "Word not editable"}},
)
async def open_edit(index: int) -> EditorState:
    try:
        editor.open_edit(index)
    except EditorError as exc:
        raise _http_error(exc)
    return _state()


@app.put(
    "/edit",
    response_model=EditorState,
    tags=["editor"],
    summary="Submit the edit form",
    description=(
        "Commit the corrected text and timing (seconds) for the open word. "
        "The word is marked as edited."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "No word is being edited"},
        409: {"model": ErrorResponse, "description": "Transcript replaced since the edit opened"},
        422: {"model": ErrorResponse, "description": "Invalid form values"},
    },
)
async def submit_edit(body: EditRequest) -> EditorState:
    try:
        editor.submit_edit(body.word, body.start, body.end)
    except EditorError as exc:
        raise _http_error(exc)
    return _state()


@app.delete(
    "/edit",
    response_model=EditorState,
    tags=["editor"],
    summary="Close the edit panel",
    description="Discard the open edit without changing the transcript.",
)
async def cancel_edit() -> EditorState:
    editor.cancel_edit()
    return _state()


# ---------------------------------------------------------------------------
# Endpoints: Persistence
# ---------------------------------------------------------------------------


@app.post(
    "/save",
    response_model=EditorState,
    tags=["persistence"],
    summary="Save all changes",
    description="Send the full transcript to the service for durable storage.",
    responses={
        400: {"model": ErrorResponse, "description": "Nothing to save"},
        502: {"model": ErrorResponse, "description": "Save failed"},
    },
)
async def save() -> EditorState:
    try:
        await editor.save()
    except EditorError as exc:
        raise _http_error(exc)
    return _state()


@app.get(
    "/download",
    tags=["persistence"],
    summary="Download JSON",
    description="Fetch the saved transcript as '{filename}_transcription.json'.",
    responses={
        400: {"model": ErrorResponse, "description": "No file chosen"},
        502: {"model": ErrorResponse, "description": "Download failed"},
    },
)
async def download() -> Response:
    try:
        artifact_name, content = await editor.download()
    except EditorError as exc:
        raise _http_error(exc)
    return Response(
        content=content,
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="{}"'.format(artifact_name)},
    )


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness check.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_editor():
    """Entry point for the transcript-editor console script."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    logger.info("Starting transcript editor on %s:%d", EDITOR_HOST, EDITOR_PORT)
    uvicorn.run(app, host=EDITOR_HOST, port=EDITOR_PORT)
