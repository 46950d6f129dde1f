"""Tests for the time-based autoscroll state machine."""

from __future__ import annotations

import pytest

from adzone.autoscroll import AutoscrollNavigator
from adzone.interaction import InteractionKind, InteractionMonitor
from adzone.models import AutoscrollState
from tests.conftest import FakeScheduler, FakeViewport

FRAME = 1 / 60


def _build(
    scheduler: FakeScheduler,
    viewport: FakeViewport,
    *,
    frame_interval: float = FRAME,
    content_pending=None,
    on_hold=None,
    hold_limit: float = 2.0,
    states: list[AutoscrollState] | None = None,
) -> tuple[AutoscrollNavigator, InteractionMonitor]:
    navigator: AutoscrollNavigator | None = None

    def on_user(kind: InteractionKind) -> None:
        assert navigator is not None
        navigator.handle_user_interaction(kind)

    monitor = InteractionMonitor(on_user, noise_threshold=0.25)
    navigator = AutoscrollNavigator(
        viewport,
        scheduler,
        monitor,
        velocity=10.0,
        bottom_epsilon=0.5,
        frame_interval=frame_interval,
        clock=scheduler.clock,
        content_pending=content_pending,
        on_hold=on_hold,
        hold_limit=hold_limit,
        on_state_change=states.append if states is not None else None,
    )
    viewport.listener = monitor.observe_scroll
    return navigator, monitor


@pytest.fixture
def viewport() -> FakeViewport:
    return FakeViewport(content_height=200.0, height=20.0)


class TestStartup:
    def test_no_frames_without_content(self, scheduler, viewport):
        navigator, _ = _build(scheduler, viewport)
        assert navigator.state is AutoscrollState.IDLE
        scheduler.advance(1.0)
        assert scheduler.pending == []
        assert viewport.writes == []

    def test_content_starts_running(self, scheduler, viewport):
        states = []
        navigator, _ = _build(scheduler, viewport, states=states)
        navigator.set_content_available(True)
        assert navigator.state is AutoscrollState.RUNNING
        assert len(scheduler.pending) == 1
        assert states == [AutoscrollState.RUNNING]

    def test_only_one_frame_scheduled(self, scheduler, viewport):
        navigator, _ = _build(scheduler, viewport)
        for _ in range(3):
            navigator.set_content_available(True)
        assert len(scheduler.pending) == 1
        scheduler.advance(0.5)
        assert len(scheduler.pending) == 1

    def test_interaction_before_content_keeps_it_paused(self, scheduler, viewport):
        navigator, monitor = _build(scheduler, viewport)
        monitor.observe_event(InteractionKind.WHEEL)
        navigator.set_content_available(True)
        assert navigator.state is AutoscrollState.PAUSED_BY_USER
        assert scheduler.pending == []

    def test_empty_window_suspends_frames(self, scheduler, viewport):
        navigator, _ = _build(scheduler, viewport)
        navigator.set_content_available(True)
        navigator.set_content_available(False)
        assert navigator.state is AutoscrollState.IDLE
        assert scheduler.pending == []


class TestMotion:
    @pytest.mark.parametrize("frame_interval", [1 / 60, 1 / 20, 1 / 144])
    def test_distance_is_velocity_times_time(self, scheduler, viewport, frame_interval):
        navigator, _ = _build(scheduler, viewport, frame_interval=frame_interval)
        navigator.set_content_available(True)
        # the first frame only stamps the clock
        scheduler.advance(frame_interval)
        assert viewport.offset == pytest.approx(0.0)
        scheduler.advance(1.0)
        assert viewport.offset == pytest.approx(10.0, abs=1e-6)

    def test_frame_rates_agree(self):
        offsets = []
        for frame_interval in (1 / 60, 1 / 20):
            scheduler = FakeScheduler()
            viewport = FakeViewport(content_height=200.0, height=20.0)
            navigator, _ = _build(scheduler, viewport, frame_interval=frame_interval)
            navigator.set_content_available(True)
            scheduler.advance(frame_interval)
            scheduler.advance(3.0)
            offsets.append(viewport.offset)
        assert offsets[0] == pytest.approx(offsets[1], abs=1e-6)

    def test_own_writes_do_not_pause(self, scheduler, viewport):
        navigator, monitor = _build(scheduler, viewport)
        navigator.set_content_available(True)
        scheduler.advance(2.0)
        assert navigator.state is AutoscrollState.RUNNING
        assert navigator.user_scrolled is False
        assert monitor.user_interacted is False

    def test_starts_from_current_offset(self, scheduler, viewport):
        viewport.offset = 40.0
        navigator, _ = _build(scheduler, viewport)
        navigator.set_content_available(True)
        scheduler.advance(FRAME)
        scheduler.advance(1.0)
        assert viewport.offset == pytest.approx(50.0, abs=1e-6)


class TestUserInteraction:
    def test_page_down_pauses_and_resume_continues_from_offset(self, scheduler, viewport):
        navigator, monitor = _build(scheduler, viewport)
        navigator.set_content_available(True)
        scheduler.advance(1.0)
        assert monitor.observe_key("pagedown") is True
        assert navigator.state is AutoscrollState.PAUSED_BY_USER
        assert scheduler.pending == []

        viewport.user_scroll(30.0)
        scheduler.advance(1.0)
        assert viewport.offset == 30.0

        navigator.resume()
        assert navigator.state is AutoscrollState.RUNNING
        assert navigator.user_scrolled is False
        scheduler.advance(FRAME)
        assert viewport.offset == pytest.approx(30.0)
        scheduler.advance(0.5)
        assert viewport.offset == pytest.approx(35.0, abs=1e-6)

    def test_wheel_pauses(self, scheduler, viewport):
        navigator, monitor = _build(scheduler, viewport)
        navigator.set_content_available(True)
        monitor.observe_event(InteractionKind.WHEEL)
        assert navigator.state is AutoscrollState.PAUSED_BY_USER

    def test_manual_drag_while_running_pauses(self, scheduler, viewport):
        navigator, _ = _build(scheduler, viewport)
        navigator.set_content_available(True)
        scheduler.advance(0.5)
        viewport.user_scroll(viewport.offset + 5.0)
        assert navigator.state is AutoscrollState.PAUSED_BY_USER
        assert navigator.user_scrolled is True

    def test_pause_is_sticky_until_resumed(self, scheduler, viewport):
        navigator, monitor = _build(scheduler, viewport)
        navigator.set_content_available(True)
        monitor.observe_event(InteractionKind.TOUCH)
        navigator.set_content_available(True)
        scheduler.advance(2.0)
        assert navigator.state is AutoscrollState.PAUSED_BY_USER


class TestCommands:
    def test_pause_and_toggle(self, scheduler, viewport):
        navigator, _ = _build(scheduler, viewport)
        navigator.set_content_available(True)
        navigator.pause()
        assert navigator.state is AutoscrollState.PAUSED_BY_COMMAND
        assert scheduler.pending == []
        assert navigator.toggle() is AutoscrollState.RUNNING
        assert navigator.toggle() is AutoscrollState.PAUSED_BY_COMMAND

    def test_user_input_during_command_pause_only_sets_flag(self, scheduler, viewport):
        navigator, monitor = _build(scheduler, viewport)
        navigator.set_content_available(True)
        navigator.pause()
        monitor.observe_event(InteractionKind.POINTER)
        assert navigator.state is AutoscrollState.PAUSED_BY_COMMAND
        assert navigator.user_scrolled is True
        navigator.resume()
        assert navigator.state is AutoscrollState.RUNNING
        assert navigator.user_scrolled is False

    def test_resume_when_running_is_noop(self, scheduler, viewport):
        navigator, _ = _build(scheduler, viewport)
        navigator.set_content_available(True)
        navigator.resume()
        assert len(scheduler.pending) == 1

    def test_resume_without_content_goes_idle(self, scheduler, viewport):
        navigator, _ = _build(scheduler, viewport)
        navigator.pause()
        navigator.resume()
        assert navigator.state is AutoscrollState.IDLE
        assert scheduler.pending == []


class TestBottom:
    def test_stops_at_bottom(self, scheduler):
        viewport = FakeViewport(content_height=30.0, height=20.0)
        states = []
        navigator, _ = _build(scheduler, viewport, states=states)
        navigator.set_content_available(True)
        scheduler.advance(2.0)
        assert navigator.state is AutoscrollState.STOPPED_AT_BOTTOM
        assert viewport.offset == 10.0
        assert scheduler.pending == []
        assert states[-1] is AutoscrollState.STOPPED_AT_BOTTOM

    def test_bottom_is_terminal(self, scheduler):
        viewport = FakeViewport(content_height=30.0, height=20.0)
        navigator, _ = _build(scheduler, viewport)
        navigator.set_content_available(True)
        scheduler.advance(2.0)
        navigator.resume()
        navigator.pause()
        navigator.toggle()
        assert navigator.state is AutoscrollState.STOPPED_AT_BOTTOM
        assert scheduler.pending == []

    def test_holds_at_bottom_while_content_pending(self, scheduler):
        content = {"height": 30.0, "pending": True}
        viewport = FakeViewport(content_height=lambda: content["height"], height=20.0)
        navigator, _ = _build(scheduler, viewport, content_pending=lambda: content["pending"])
        navigator.set_content_available(True)
        scheduler.advance(2.0)
        assert navigator.state is AutoscrollState.RUNNING
        assert viewport.offset == 10.0

        # a page lands: the loop re-reads the height and keeps going
        content["height"] = 60.0
        content["pending"] = False
        scheduler.advance(1.0)
        assert viewport.offset == pytest.approx(20.0, abs=0.2)
        scheduler.advance(3.0)
        assert navigator.state is AutoscrollState.STOPPED_AT_BOTTOM
        assert viewport.offset == 40.0

    def test_hold_rechecks_then_parks_until_content_arrives(self, scheduler):
        content = {"height": 30.0}
        holds: list[float] = []
        viewport = FakeViewport(content_height=lambda: content["height"], height=20.0)
        navigator, _ = _build(
            scheduler,
            viewport,
            content_pending=lambda: True,
            on_hold=lambda: holds.append(scheduler.now),
            hold_limit=1.0,
        )
        navigator.set_content_available(True)
        scheduler.advance(5.0)
        assert len(holds) > 1
        assert holds[-1] - holds[0] == pytest.approx(1.0, abs=2 * FRAME)
        # parked: still running, but no timer ticks at the edge
        assert navigator.state is AutoscrollState.RUNNING
        assert navigator.frame_pending is False
        assert scheduler.pending == []
        assert viewport.offset == 10.0

        content["height"] = 60.0
        navigator.set_content_available(True)
        assert navigator.frame_pending is True
        scheduler.advance(FRAME)
        assert viewport.offset == pytest.approx(10.0)
        scheduler.advance(1.0)
        assert viewport.offset == pytest.approx(20.0, abs=1e-6)

    def test_content_shorter_than_viewport(self, scheduler):
        viewport = FakeViewport(content_height=10.0, height=20.0)
        navigator, _ = _build(scheduler, viewport)
        navigator.set_content_available(True)
        scheduler.advance(FRAME)
        assert navigator.state is AutoscrollState.STOPPED_AT_BOTTOM
        assert viewport.offset == 0.0


class TestTeardown:
    def test_no_frame_after_teardown(self, scheduler, viewport):
        states = []
        navigator, _ = _build(scheduler, viewport, states=states)
        navigator.set_content_available(True)
        scheduler.advance(0.5)
        frame = scheduler.pending[0]
        writes = len(viewport.writes)
        recorded = len(states)

        navigator.teardown()
        navigator.teardown()
        assert frame.active is False
        scheduler.advance(2.0)
        assert len(viewport.writes) == writes
        assert len(states) == recorded
        assert navigator.torn_down is True

    def test_commands_after_teardown_are_noops(self, scheduler, viewport):
        navigator, _ = _build(scheduler, viewport)
        navigator.teardown()
        navigator.set_content_available(True)
        navigator.resume()
        navigator.restart()
        assert scheduler.pending == []

    def test_restart_returns_to_idle(self, scheduler):
        viewport = FakeViewport(content_height=30.0, height=20.0)
        navigator, _ = _build(scheduler, viewport)
        navigator.set_content_available(True)
        scheduler.advance(2.0)
        navigator.restart()
        assert navigator.state is AutoscrollState.IDLE
        navigator.set_content_available(True)
        assert navigator.state is AutoscrollState.RUNNING
