"""Shared test fixtures for the transcript_editor test suite.

WHY: Most test modules need the same small transcript (the "cat"/"dog"
example with a 10 second file) and a way to stand in for the remote
transcription service without a network.

HOW: Pytest fixtures provide the raw service response, the parsed
Transcript, and a ServiceStub that plays the remote service through
httpx.MockTransport while recording every request it receives.

RULES:
- SAMPLE_RESPONSE matches the /upload response shape exactly
- The service is never reached over the network
- Each test gets fresh stubs and editors (no shared mutable state)
"""

from __future__ import annotations

import asyncio
import copy
import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from transcript_editor.api.client import TranscriptServiceClient
from transcript_editor.core.engine import HeadlessEngine
from transcript_editor.core.ir import Transcript
from transcript_editor.editor import TranscriptEditor

BASE_URL = "http://transcripts.test"

SAMPLE_RESPONSE: Dict[str, Any] = {
    "words": [
        {"word": "cat", "start_time": 0,    "end_time": 500,  "qc": True,  "qc_word": None},
        {"word": "dog", "start_time": 6000, "end_time": 6500, "qc": False, "qc_word": "Expected 'dot'"},
    ],
    "language": "en",
    "task": "verbal_fluency",
}


class ServiceStub:
    """Fake transcription service behind httpx.MockTransport.

    Routes registered with respond() are answered with a fresh response
    on every request; an unregistered route answers 404. ``fail_with``
    makes every request raise the given exception instead, to simulate
    network failures.
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self._routes: Dict[tuple, tuple] = {}
        self.fail_with: Optional[Exception] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with
        route = self._routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, text="Not found")
        status_code, kwargs = route
        return httpx.Response(status_code, **kwargs)

    def respond(self, method: str, path: str, status_code: int, **kwargs: Any) -> None:
        self._routes[(method, path)] = (status_code, kwargs)

    def client_factory(self) -> Callable[[], TranscriptServiceClient]:
        transport = httpx.MockTransport(self.handler)
        return lambda: TranscriptServiceClient(base_url=BASE_URL, transport=transport)

    def request_json(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)


@pytest.fixture
def sample_response() -> Dict[str, Any]:
    return copy.deepcopy(SAMPLE_RESPONSE)


@pytest.fixture
def sample_transcript(sample_response) -> Transcript:
    return Transcript.from_dict(sample_response)


@pytest.fixture
def service(sample_response) -> ServiceStub:
    """Service stub that transcribes, saves, and downloads successfully."""
    stub = ServiceStub()
    stub.respond("POST", "/upload", 200, json=sample_response)
    stub.respond("POST", "/update-json/test.mp3", 200, json={"ok": True})
    stub.respond(
        "GET", "/download/test.mp3", 200,
        content=json.dumps(sample_response).encode("utf-8"),
    )
    return stub


@pytest.fixture
def editor(service) -> TranscriptEditor:
    return TranscriptEditor(engine_factory=HeadlessEngine, client_factory=service.client_factory())


@pytest.fixture
def ready_editor(editor) -> TranscriptEditor:
    """Editor with test.mp3 transcribed and a 10 second file loaded."""
    editor.select_file("test.mp3", b"fake audio data", "audio/mpeg")
    asyncio.run(editor.upload())
    editor.controller.engine.emit_ready(10.0)
    return editor
