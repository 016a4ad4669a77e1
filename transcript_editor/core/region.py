"""Waveform/region controller: one engine, one region, play/pause state.

WHY: The time range that scopes editing comes from the region the user
drags over the waveform, and playback must stay inside that region.
Loading a new file has to replace the engine completely so events from
the previous one cannot leak into the new session.

HOW: RegionController owns the current AudioEngine (built by an injected
factory) and a PlayState machine:

    UNLOADED -> LOADING -> PAUSED <-> PLAYING
                  ^__________________________|  (load() restarts)

Every load() deactivates the previous listener subscription, destroys
the previous engine, and subscribes a fresh listener to a fresh engine.
Engine events reach the controller only through the active
subscription. Range listeners are notified synchronously whenever the
time range changes.

RULES:
- on_ready sets TimeRange(0, duration) and adds a region starting at the
  start epsilon (0.0 if the file is too short for it)
- on_region_updated is the only path that changes the time range; bounds
  are clamped to [0, duration] and must span at least min_region_length
- toggle_play plays the region, never the whole file
- Reaching the region end (finish or tick) returns to PAUSED, and so
  does a tick outside the region
- Moving the region while playing restarts playback at the new start
- Region clicks stop propagation before toggling playback
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable

from transcript_editor.config import MIN_REGION_LENGTH_S, REGION_START_EPSILON_S
from transcript_editor.core.engine import AudioEngine, EngineListener, Region, RegionClickEvent
from transcript_editor.core.ir import TimeRange

logger = logging.getLogger(__name__)

RangeListener = Callable[[TimeRange], None]

_LENGTH_TOLERANCE = 1e-9


class PlayState(str, enum.Enum):
    """Controller states. PAUSED and PLAYING together form "ready"."""

    UNLOADED = "unloaded"
    LOADING = "loading"
    PAUSED = "paused"
    PLAYING = "playing"


class _Subscription(EngineListener):
    """Forwards engine events to the controller until deactivated."""

    def __init__(self, controller: RegionController) -> None:
        self._controller = controller
        self.active = True

    def on_ready(self, duration: float) -> None:
        if self.active:
            self._controller._handle_ready(duration)

    def on_region_updated(self, start: float, end: float) -> None:
        if self.active:
            self._controller._handle_region_updated(start, end)

    def on_region_clicked(self, event: RegionClickEvent) -> None:
        if self.active:
            self._controller._handle_region_clicked(event)

    def on_finish(self) -> None:
        if self.active:
            self._controller._handle_finish()

    def on_timeupdate(self, position: float) -> None:
        if self.active:
            self._controller._handle_timeupdate(position)


class RegionController:
    """Owns the audio engine, the selection region, and play state."""

    def __init__(
        self,
        engine_factory: Callable[[], AudioEngine],
        min_region_length: float = MIN_REGION_LENGTH_S,
        region_start_epsilon: float = REGION_START_EPSILON_S,
    ) -> None:
        self._engine_factory = engine_factory
        self._min_region_length = min_region_length
        self._region_start_epsilon = region_start_epsilon
        self._engine: AudioEngine | None = None
        self._subscription: _Subscription | None = None
        self._state = PlayState.UNLOADED
        self._duration: float | None = None
        self._region: Region | None = None
        self._time_range: TimeRange | None = None
        self._range_listeners: list[RangeListener] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def state(self) -> PlayState:
        return self._state

    @property
    def ready(self) -> bool:
        return self._state in (PlayState.PAUSED, PlayState.PLAYING)

    @property
    def playing(self) -> bool:
        return self._state is PlayState.PLAYING

    @property
    def engine(self) -> AudioEngine | None:
        return self._engine

    @property
    def duration(self) -> float | None:
        return self._duration

    @property
    def region(self) -> Region | None:
        return self._region

    @property
    def time_range(self) -> TimeRange | None:
        return self._time_range

    def subscribe(self, listener: RangeListener) -> None:
        self._range_listeners.append(listener)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def load(self, audio_source: str) -> AudioEngine:
        """Tear down any current engine and start loading ``audio_source``."""
        self._teardown()

        engine = self._engine_factory()
        subscription = _Subscription(self)
        self._engine = engine
        self._subscription = subscription
        self._state = PlayState.LOADING
        logger.info("Loading audio %s", audio_source)
        engine.load(audio_source, subscription)
        return engine

    def toggle_play(self) -> PlayState:
        """Play the region if paused, pause if playing; no-op unless ready."""
        if not self.ready or self._engine is None or self._region is None:
            logger.debug("toggle_play ignored in state %s", self._state.value)
            return self._state

        if self._state is PlayState.PLAYING:
            self._engine.pause()
            self._state = PlayState.PAUSED
        else:
            self._engine.play_range(self._region.start, self._region.end)
            self._state = PlayState.PLAYING
        return self._state

    def _teardown(self) -> None:
        if self._subscription is not None:
            self._subscription.active = False
            self._subscription = None
        if self._engine is not None:
            self._engine.destroy()
            self._engine = None
        self._duration = None
        self._region = None
        self._time_range = None

    # ------------------------------------------------------------------
    # Engine events (reached only through the active subscription)
    # ------------------------------------------------------------------

    def _handle_ready(self, duration: float) -> None:
        if duration <= 0:
            raise ValueError(f"Audio duration must be positive (got {duration})")

        start = self._region_start_epsilon
        if duration - start < self._min_region_length:
            start = 0.0

        self._duration = duration
        self._region = Region(start=start, end=duration, min_length=self._min_region_length)
        self._state = PlayState.PAUSED
        assert self._engine is not None
        self._engine.add_region(self._region)
        logger.info("Audio ready (%.3fs)", duration)
        self._set_time_range(TimeRange(0.0, duration))

    def _handle_region_updated(self, start: float, end: float) -> None:
        if self._region is None or self._duration is None:
            raise ValueError("Cannot update the region before the audio is ready")

        start = max(0.0, start)
        end = min(self._duration, end)
        if end - start + _LENGTH_TOLERANCE < self._min_region_length:
            raise ValueError(
                f"Region must be at least {self._min_region_length}s long "
                f"(got {start:.3f}s - {end:.3f}s)"
            )

        self._region = self._region.with_bounds(start, end)
        assert self._engine is not None
        self._engine.update_region(self._region)
        if self._state is PlayState.PLAYING:
            self._engine.play_range(start, end)
        self._set_time_range(TimeRange(start, end))

    def _handle_region_clicked(self, event: RegionClickEvent) -> None:
        event.stop_propagation()
        self.toggle_play()

    def _handle_finish(self) -> None:
        if self._state is PlayState.PLAYING:
            self._state = PlayState.PAUSED

    def _handle_timeupdate(self, position: float) -> None:
        if self._state is not PlayState.PLAYING or self._region is None:
            return
        if not self._region.start <= position < self._region.end:
            assert self._engine is not None
            self._engine.pause()
            self._state = PlayState.PAUSED

    def _set_time_range(self, time_range: TimeRange) -> None:
        self._time_range = time_range
        for listener in list(self._range_listeners):
            listener(time_range)
