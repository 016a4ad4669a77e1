"""Tests for RegionController and HeadlessEngine.

WHY: The region is the only source of the edit time range, and a stale
engine from a previous file must never move it. Playback must stay
inside the region.
"""

from __future__ import annotations

import pytest

from transcript_editor.core.engine import HeadlessEngine
from transcript_editor.core.ir import TimeRange
from transcript_editor.core.region import PlayState, RegionController


@pytest.fixture
def controller() -> RegionController:
    return RegionController(engine_factory=HeadlessEngine)


@pytest.fixture
def ready(controller) -> RegionController:
    controller.load("/audio/test.mp3")
    controller.engine.emit_ready(10.0)
    return controller


class TestLoad:
    """Engine lifecycle."""

    def test_initial_state(self, controller):
        assert controller.state is PlayState.UNLOADED
        assert controller.engine is None
        assert controller.time_range is None

    def test_load_creates_engine(self, controller):
        engine = controller.load("/audio/test.mp3")
        assert controller.engine is engine
        assert engine.source == "/audio/test.mp3"
        assert controller.state is PlayState.LOADING
        assert not controller.ready

    def test_ready_sets_full_range_and_region(self, ready):
        assert ready.state is PlayState.PAUSED
        assert ready.duration == 10.0
        assert ready.time_range == TimeRange(0.0, 10.0)
        region = ready.region
        assert (region.start, region.end) == (0.1, 10.0)
        assert region.drag and region.resize
        assert region.handle_color == "red"
        assert ready.engine.region is region

    def test_short_file_region_starts_at_zero(self, controller):
        controller.load("/audio/short.mp3")
        controller.engine.emit_ready(0.15)
        assert controller.region.start == 0.0
        assert controller.region.end == 0.15

    def test_non_positive_duration_rejected(self, controller):
        controller.load("/audio/test.mp3")
        with pytest.raises(ValueError):
            controller.engine.emit_ready(0.0)
        assert controller.state is PlayState.LOADING

    def test_reload_destroys_previous_engine(self, ready):
        old = ready.engine
        new = ready.load("/audio/other.mp3")
        assert old.destroyed
        assert new is not old
        assert ready.state is PlayState.LOADING
        assert ready.time_range is None
        assert ready.region is None

    def test_late_events_from_old_engine_ignored(self, ready):
        old = ready.engine
        ready.load("/audio/other.mp3")
        ready.engine.emit_ready(20.0)
        seen = []
        ready.subscribe(seen.append)
        old.emit_region_updated(1.0, 2.0)
        old.emit_ready(5.0)
        assert seen == []
        assert ready.time_range == TimeRange(0.0, 20.0)

    def test_stale_subscription_ignored_even_if_engine_alive(self, ready):
        old = ready.engine
        listener = old._listener
        ready.load("/audio/other.mp3")
        ready.engine.emit_ready(20.0)
        listener.on_region_updated(1.0, 2.0)
        assert ready.time_range == TimeRange(0.0, 20.0)


class TestRegionUpdates:
    """Region drag/resize is the only path that changes the range."""

    def test_update_changes_range(self, ready):
        seen = []
        ready.subscribe(seen.append)
        ready.engine.emit_region_updated(0.0, 2.0)
        assert ready.time_range == TimeRange(0.0, 2.0)
        assert seen == [TimeRange(0.0, 2.0)]
        assert (ready.region.start, ready.region.end) == (0.0, 2.0)
        assert (ready.engine.region.start, ready.engine.region.end) == (0.0, 2.0)

    def test_bounds_clamped_to_duration(self, ready):
        ready.engine.emit_region_updated(-1.0, 12.0)
        assert ready.time_range == TimeRange(0.0, 10.0)

    def test_too_short_region_rejected(self, ready):
        with pytest.raises(ValueError, match="at least"):
            ready.engine.emit_region_updated(3.0, 3.05)
        assert ready.time_range == TimeRange(0.0, 10.0)

    def test_minimum_length_accepted(self, ready):
        ready.engine.emit_region_updated(3.0, 3.1)
        assert ready.time_range == TimeRange(3.0, 3.1)

    def test_update_before_ready_rejected(self, controller):
        controller.load("/audio/test.mp3")
        with pytest.raises(ValueError):
            controller.engine.emit_region_updated(0.0, 2.0)


class TestPlayback:
    """Play/pause confined to the region."""

    def test_toggle_ignored_before_ready(self, controller):
        assert controller.toggle_play() is PlayState.UNLOADED
        controller.load("/audio/test.mp3")
        assert controller.toggle_play() is PlayState.LOADING
        assert not controller.engine.playing

    def test_toggle_plays_region(self, ready):
        ready.engine.emit_region_updated(2.0, 4.0)
        assert ready.toggle_play() is PlayState.PLAYING
        assert ready.engine.play_bounds == (2.0, 4.0)
        assert ready.toggle_play() is PlayState.PAUSED
        assert not ready.engine.playing

    def test_region_click_toggles_and_stops_propagation(self, ready):
        background = []
        ready.engine.on_background_click(background.append)
        event = ready.engine.emit_region_clicked()
        assert event.propagation_stopped
        assert ready.state is PlayState.PLAYING
        assert background == []

    def test_finish_returns_to_paused(self, ready):
        ready.toggle_play()
        ready.engine.emit_finish()
        assert ready.state is PlayState.PAUSED
        assert ready.toggle_play() is PlayState.PLAYING

    def test_tick_past_region_end_pauses(self, ready):
        ready.engine.emit_region_updated(2.0, 4.0)
        ready.toggle_play()
        ready.engine.emit_timeupdate(3.9)
        assert ready.state is PlayState.PLAYING
        ready.engine.emit_timeupdate(4.0)
        assert ready.state is PlayState.PAUSED
        assert not ready.engine.playing

    def test_moving_region_while_playing_replays_new_range(self, ready):
        ready.toggle_play()
        ready.engine.emit_timeupdate(1.0)
        ready.engine.emit_region_updated(5.0, 7.0)
        assert ready.state is PlayState.PLAYING
        assert ready.engine.play_bounds == (5.0, 7.0)
        assert ready.engine.position == 5.0

    def test_tick_before_region_start_pauses(self, ready):
        ready.toggle_play()
        ready.engine.emit_timeupdate(1.0)
        ready.engine.emit_region_updated(5.0, 7.0)
        ready.engine.emit_timeupdate(2.0)
        assert ready.state is PlayState.PAUSED
        assert not ready.engine.playing

    def test_moving_region_while_paused_does_not_play(self, ready):
        ready.engine.emit_region_updated(5.0, 7.0)
        assert ready.state is PlayState.PAUSED
        assert not ready.engine.playing

    def test_tick_while_paused_ignored(self, ready):
        ready.engine.emit_timeupdate(50.0)
        assert ready.state is PlayState.PAUSED


class TestHeadlessEngine:
    """Event delivery rules of the headless engine."""

    def test_events_before_load_dropped(self):
        engine = HeadlessEngine()
        engine.emit_ready(10.0)
        assert engine.duration is None

    def test_destroyed_engine_drops_events(self, ready):
        engine = ready.engine
        engine.destroy()
        event = engine.emit_region_clicked()
        assert not event.propagation_stopped
        assert ready.state is PlayState.PAUSED
