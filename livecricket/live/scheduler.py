"""
Poll scheduling.

Drives a fetch-and-commit cycle for one view at a cadence chosen from the
match lifecycle phase. One-shot timers are chained (each tick runs a cycle
and then arms the next), so at most one cycle is in flight per view and a
phase change picked up by a cycle takes effect on the very next arm.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    PAUSED = "paused"


class TimerHandle(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


def thread_timer_factory(interval: float, callback: Callable[[], None]) -> TimerHandle:
    timer = threading.Timer(interval, callback)
    timer.daemon = True
    return timer


class PollScheduler:
    """Owns the single recurring timer of one view.

    Args:
        cycle: One fetch-and-commit cycle. Exceptions are logged and do not
            stop the schedule.
        interval_provider: Returns the current polling interval in seconds,
            re-read every time the timer is armed.
        timer_factory: Builds a one-shot timer; defaults to a daemon
            ``threading.Timer``.
        name: Label used in log lines.
    """

    def __init__(
        self,
        cycle: Callable[[], object],
        interval_provider: Callable[[], float],
        timer_factory: Optional[TimerFactory] = None,
        name: str = "poller",
    ):
        self._cycle = cycle
        self._interval_provider = interval_provider
        self._timer_factory = timer_factory or thread_timer_factory
        self._name = name

        self._lock = threading.RLock()
        self._state = SchedulerState.IDLE
        self._timer: Optional[TimerHandle] = None
        self._generation = 0
        self._alive = False
        self._interval: Optional[float] = None
        self.cycles_run = 0

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_alive(self) -> bool:
        """False once the view has been torn down."""
        return self._alive

    @property
    def interval(self) -> Optional[float]:
        """Interval of the currently armed timer, if any."""
        return self._interval

    def start(self) -> None:
        """Idle -> Active: run one cycle immediately, then arm the timer."""
        with self._lock:
            if self._state != SchedulerState.IDLE:
                logger.debug("[%s] start() ignored in state %s", self._name, self._state.value)
                return
            self._state = SchedulerState.ACTIVE
            self._alive = True
        logger.info("[%s] Polling started", self._name)
        self._run_and_rearm()

    def pause(self) -> None:
        """Active -> Paused: the timer is cancelled, not just skipped."""
        with self._lock:
            if self._state != SchedulerState.ACTIVE:
                return
            self._state = SchedulerState.PAUSED
            self._cancel_timer()
        logger.info("[%s] Polling paused", self._name)

    def resume(self) -> None:
        """Paused -> Active: run one cycle immediately, then re-arm."""
        with self._lock:
            if self._state != SchedulerState.PAUSED:
                return
            self._state = SchedulerState.ACTIVE
        logger.info("[%s] Polling resumed", self._name)
        self._run_and_rearm()

    def set_visible(self, visible: bool) -> None:
        if visible:
            self.resume()
        else:
            self.pause()

    def stop(self) -> None:
        """Any state -> Idle. Cycles still in flight must check is_alive."""
        with self._lock:
            was = self._state
            self._alive = False
            self._state = SchedulerState.IDLE
            self._cancel_timer()
        if was != SchedulerState.IDLE:
            logger.info("[%s] Polling stopped after %d cycles", self._name, self.cycles_run)

    def reschedule(self) -> None:
        """Re-arm now using the current interval, dropping the pending tick."""
        with self._lock:
            if self._state == SchedulerState.ACTIVE:
                self._arm()

    def _run_and_rearm(self) -> None:
        self._run_cycle()
        with self._lock:
            if self._state == SchedulerState.ACTIVE:
                self._arm()

    def _run_cycle(self) -> None:
        self.cycles_run += 1
        try:
            self._cycle()
        except Exception as e:
            logger.error("[%s] Poll cycle failed: %s", self._name, e, exc_info=True)

    def _arm(self) -> None:
        self._cancel_timer()
        interval = float(self._interval_provider())
        if self._interval is not None and interval != self._interval:
            logger.info("[%s] Polling cadence changed: %.1fs -> %.1fs", self._name, self._interval, interval)
        self._interval = interval
        self._generation += 1
        generation = self._generation
        self._timer = self._timer_factory(interval, lambda: self._on_tick(generation))
        self._timer.start()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._generation += 1
        self._interval = None if self._state != SchedulerState.ACTIVE else self._interval

    def _on_tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._state != SchedulerState.ACTIVE:
                return
            self._timer = None
        self._run_and_rearm()
