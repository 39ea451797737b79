"""Tests for the poll scheduler state machine."""

from __future__ import annotations

import pytest

from livecricket.live.scheduler import PollScheduler, SchedulerState


class Counter:
    def __init__(self, fail: bool = False):
        self.calls = 0
        self.fail = fail

    def __call__(self) -> None:
        self.calls += 1
        if self.fail:
            raise RuntimeError("boom")


@pytest.fixture
def cycle() -> Counter:
    return Counter()


@pytest.fixture
def intervals() -> list:
    return [1.0]


@pytest.fixture
def scheduler(cycle, intervals, timers) -> PollScheduler:
    return PollScheduler(cycle, lambda: intervals[-1], timer_factory=timers, name="test")


class TestLifecycle:
    def test_starts_idle(self, scheduler, timers):
        assert scheduler.state == SchedulerState.IDLE
        assert not scheduler.is_alive
        assert timers.timers == []

    def test_start_runs_cycle_then_arms(self, scheduler, cycle, timers):
        scheduler.start()
        assert cycle.calls == 1
        assert scheduler.state == SchedulerState.ACTIVE
        assert scheduler.is_alive
        assert len(timers.pending) == 1
        assert timers.last.interval == 1.0
        assert scheduler.interval == 1.0

    def test_start_twice_is_ignored(self, scheduler, cycle, timers):
        scheduler.start()
        scheduler.start()
        assert cycle.calls == 1
        assert len(timers.pending) == 1

    def test_tick_runs_and_rearms(self, scheduler, cycle, timers):
        scheduler.start()
        timers.fire_pending()
        timers.fire_pending()
        assert cycle.calls == 3
        assert scheduler.cycles_run == 3
        assert len(timers.pending) == 1

    def test_pause_cancels_timer(self, scheduler, cycle, timers):
        scheduler.start()
        armed = timers.last
        scheduler.pause()
        assert scheduler.state == SchedulerState.PAUSED
        assert armed.cancelled
        assert timers.pending == []
        assert scheduler.interval is None

    def test_resume_runs_immediately(self, scheduler, cycle, timers):
        scheduler.start()
        scheduler.pause()
        scheduler.resume()
        assert cycle.calls == 2
        assert scheduler.state == SchedulerState.ACTIVE
        assert len(timers.pending) == 1

    def test_resume_when_not_paused_is_ignored(self, scheduler, cycle):
        scheduler.resume()
        assert cycle.calls == 0
        assert scheduler.state == SchedulerState.IDLE

    def test_set_visible(self, scheduler, cycle):
        scheduler.start()
        scheduler.set_visible(False)
        assert scheduler.state == SchedulerState.PAUSED
        scheduler.set_visible(True)
        assert scheduler.state == SchedulerState.ACTIVE
        assert cycle.calls == 2

    def test_stop(self, scheduler, timers):
        scheduler.start()
        scheduler.stop()
        assert scheduler.state == SchedulerState.IDLE
        assert not scheduler.is_alive
        assert timers.pending == []

    def test_stop_from_paused(self, scheduler):
        scheduler.start()
        scheduler.pause()
        scheduler.stop()
        assert scheduler.state == SchedulerState.IDLE


class TestStaleTicks:
    def test_tick_after_pause_is_ignored(self, scheduler, cycle, timers):
        scheduler.start()
        armed = timers.last
        scheduler.pause()
        armed.fire()
        assert cycle.calls == 1
        assert timers.pending == []

    def test_tick_after_stop_is_ignored(self, scheduler, cycle, timers):
        scheduler.start()
        armed = timers.last
        scheduler.stop()
        armed.fire()
        assert cycle.calls == 1
        assert timers.pending == []

    def test_superseded_timer_is_ignored(self, scheduler, cycle, timers):
        scheduler.start()
        old = timers.last
        scheduler.reschedule()
        assert old.cancelled
        old.fire()
        assert cycle.calls == 1
        assert len(timers.pending) == 1

    def test_at_most_one_timer_armed(self, scheduler, timers):
        scheduler.start()
        for _ in range(5):
            timers.fire_pending()
            assert len(timers.pending) == 1
        scheduler.pause()
        scheduler.resume()
        scheduler.reschedule()
        assert len(timers.pending) == 1


class TestCadence:
    def test_interval_reread_on_every_arm(self, scheduler, intervals, timers):
        scheduler.start()
        intervals.append(30.0)
        timers.fire_pending()
        assert timers.last.interval == 30.0
        assert scheduler.interval == 30.0

    def test_reschedule_applies_new_interval_now(self, scheduler, intervals, timers):
        scheduler.start()
        intervals.append(60.0)
        scheduler.reschedule()
        assert timers.last.interval == 60.0
        assert len(timers.pending) == 1

    def test_reschedule_ignored_when_paused(self, scheduler, timers):
        scheduler.start()
        scheduler.pause()
        scheduler.reschedule()
        assert timers.pending == []


class TestCycleFailures:
    def test_exception_does_not_stop_schedule(self, intervals, timers):
        failing = Counter(fail=True)
        scheduler = PollScheduler(failing, lambda: intervals[-1], timer_factory=timers)
        scheduler.start()
        timers.fire_pending()
        assert failing.calls == 2
        assert scheduler.state == SchedulerState.ACTIVE
        assert len(timers.pending) == 1
