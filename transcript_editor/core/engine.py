"""Audio engine interface and the headless engine driven over HTTP.

WHY: Decoding, drawing, and playing audio belong to an external engine
(a waveform renderer in the browser). The region controller only needs
a narrow command surface on it, plus a way to receive the engine's
events. Modelling the events as one explicit listener object, instead
of ad hoc handlers registered on a global engine, lets the controller
switch every handler off at once when it replaces the engine.

HOW: AudioEngine is an ABC with the six commands the controller issues.
EngineListener is the ABC the controller hands to load(); the engine
calls it for ready, region update-end, region click, finish, and
playback ticks. HeadlessEngine implements AudioEngine without producing
sound: it records the current playback command for a remote renderer to
follow and exposes emit_* methods through which that renderer's events
enter the system.

RULES:
- One engine instance per load(); destroy() is final
- A destroyed engine drops every emitted event
- A region click whose propagation was stopped never reaches the
  engine's background click handlers
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, replace

from transcript_editor.config import (
    MIN_REGION_LENGTH_S,
    REGION_COLOR,
    REGION_HANDLE_COLOR,
    REGION_HANDLE_WIDTH,
    REGION_LABEL,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Region:
    """The draggable, resizable selection drawn over the waveform."""

    start: float
    end: float
    min_length: float = MIN_REGION_LENGTH_S
    drag: bool = True
    resize: bool = True
    color: str = REGION_COLOR
    handle_color: str = REGION_HANDLE_COLOR
    handle_width: str = REGION_HANDLE_WIDTH
    content: str = REGION_LABEL

    def with_bounds(self, start: float, end: float) -> Region:
        return replace(self, start=start, end=end)


class RegionClickEvent:
    """A click on the region, carrying a propagation flag."""

    def __init__(self) -> None:
        self.propagation_stopped = False

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


class EngineListener(ABC):
    """Receiver for engine events, handed to AudioEngine.load()."""

    @abstractmethod
    def on_ready(self, duration: float) -> None:
        """Audio decoded; ``duration`` is the total length in seconds."""

    @abstractmethod
    def on_region_updated(self, start: float, end: float) -> None:
        """The user finished dragging or resizing the region."""

    @abstractmethod
    def on_region_clicked(self, event: RegionClickEvent) -> None:
        """The region was clicked."""

    @abstractmethod
    def on_finish(self) -> None:
        """Playback reached its natural end."""

    @abstractmethod
    def on_timeupdate(self, position: float) -> None:
        """Playback tick with the current position in seconds."""


class AudioEngine(ABC):
    """Command surface of an audio rendering engine.

    To plug in a different renderer:
    1. Subclass AudioEngine
    2. Call the listener passed to load() for each engine event
    3. Pass a factory for it to RegionController
    """

    @abstractmethod
    def load(self, source: str, listener: EngineListener) -> None:
        """Start loading ``source`` and report events to ``listener``."""

    @abstractmethod
    def add_region(self, region: Region) -> None:
        """Draw ``region`` over the waveform."""

    @abstractmethod
    def update_region(self, region: Region) -> None:
        """Redraw the region with the bounds the controller accepted."""

    @abstractmethod
    def play_range(self, start: float, end: float) -> None:
        """Play from ``start`` and stop at ``end`` (seconds)."""

    @abstractmethod
    def pause(self) -> None:
        """Pause playback."""

    @abstractmethod
    def destroy(self) -> None:
        """Release the engine and stop delivering events."""


class HeadlessEngine(AudioEngine):
    """Engine state mirror for a renderer that lives in a browser.

    WHY: The local HTTP surface has no audio device. The browser renders
    and plays the waveform; this engine holds the commands the browser
    must follow and turns the browser's reports into listener calls.

    RULES:
    - playing / play_bounds describe the last play_range() or pause()
    - region is the last region added or updated
    - emit_* methods are no-ops once destroyed or before load()
    """

    def __init__(self) -> None:
        self.source: str | None = None
        self.region: Region | None = None
        self.duration: float | None = None
        self.playing = False
        self.play_bounds: tuple[float, float] | None = None
        self.position = 0.0
        self.destroyed = False
        self._listener: EngineListener | None = None
        self._background_click_handlers: list[Callable[[RegionClickEvent], None]] = []

    # ------------------------------------------------------------------
    # AudioEngine commands
    # ------------------------------------------------------------------

    def load(self, source: str, listener: EngineListener) -> None:
        self.source = source
        self._listener = listener

    def add_region(self, region: Region) -> None:
        self.region = region

    def update_region(self, region: Region) -> None:
        self.region = region

    def play_range(self, start: float, end: float) -> None:
        self.playing = True
        self.play_bounds = (start, end)
        self.position = start

    def pause(self) -> None:
        self.playing = False

    def destroy(self) -> None:
        self.destroyed = True
        self.playing = False
        self._listener = None
        self._background_click_handlers.clear()

    # ------------------------------------------------------------------
    # Events reported by the renderer
    # ------------------------------------------------------------------

    def on_background_click(self, handler: Callable[[RegionClickEvent], None]) -> None:
        """Register a handler for clicks that were not consumed by the region."""
        self._background_click_handlers.append(handler)

    def _active_listener(self, event_name: str) -> EngineListener | None:
        if self._listener is None:
            logger.debug("Dropping %s event from inactive engine", event_name)
        return self._listener

    def emit_ready(self, duration: float) -> None:
        listener = self._active_listener("ready")
        if listener is None:
            return
        self.duration = duration
        listener.on_ready(duration)

    def emit_region_updated(self, start: float, end: float) -> None:
        listener = self._active_listener("region-updated")
        if listener is None:
            return
        listener.on_region_updated(start, end)

    def emit_region_clicked(self) -> RegionClickEvent:
        event = RegionClickEvent()
        listener = self._active_listener("region-clicked")
        if listener is None:
            return event
        listener.on_region_clicked(event)
        if not event.propagation_stopped:
            for handler in list(self._background_click_handlers):
                handler(event)
        return event

    def emit_finish(self) -> None:
        listener = self._active_listener("finish")
        if listener is None:
            return
        self.playing = False
        listener.on_finish()

    def emit_timeupdate(self, position: float) -> None:
        listener = self._active_listener("timeupdate")
        if listener is None:
            return
        self.position = position
        listener.on_timeupdate(position)
