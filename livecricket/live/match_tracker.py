"""
Live match tracker.

Per-view pipeline for one match:
Feed fetch -> Change detection -> Over reconstruction -> Subscribers

The tracker keeps presenting the last committed state through any provider
outage. Only a failure before the first commit is surfaced as an error.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from livecricket.config import EngineConfig, LifecyclePhase
from livecricket.data.feed_client import FeedError, MatchFeed
from livecricket.data.feed_models import MatchSnapshot
from livecricket.live.scheduler import PollScheduler, SchedulerState, TimerFactory
from livecricket.state.ball_classifier import BallClassifier
from livecricket.state.change_detector import ChangeDetector, Fingerprint
from livecricket.state.commentary import CommentaryReconstructor, Over
from livecricket.state.lifecycle import MatchLifecycleClassifier

logger = logging.getLogger(__name__)

FIRST_LOAD_ERROR = "Unable to load match details. Please try again."


class LoadState(Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class TrackerUpdate:
    """What subscribers receive on every committed poll."""

    match_id: str
    snapshot: MatchSnapshot
    overs: tuple[Over, ...]
    phase: LifecyclePhase
    fingerprint: Fingerprint


Subscriber = Callable[[TrackerUpdate], None]


class LiveMatchTracker:
    """Polls one match and publishes only material changes.

    Usage:
        tracker = LiveMatchTracker("12345", HttpMatchFeed(config.feed), config)
        unsubscribe = tracker.subscribe(render)
        tracker.start()
        ...
        tracker.set_visible(False)  # view hidden: polling paused
        tracker.stop()              # view torn down
    """

    def __init__(
        self,
        match_id: str,
        feed: MatchFeed,
        config: Optional[EngineConfig] = None,
        timer_factory: Optional[TimerFactory] = None,
    ):
        self.match_id = str(match_id)
        self._feed = feed
        self._config = config or EngineConfig()
        self._lifecycle = MatchLifecycleClassifier()
        self._detector = ChangeDetector()
        self._reconstructor = CommentaryReconstructor(
            BallClassifier(run_out_extras_count=self._config.scoring.run_out_extras_count)
        )

        self._lock = threading.RLock()
        self._snapshot: Optional[MatchSnapshot] = None
        self._overs: tuple[Over, ...] = ()
        self._phase = LifecyclePhase.UPCOMING
        self._load_state = LoadState.LOADING
        self._error: Optional[str] = None
        self._subscribers: list[Subscriber] = []

        self._scheduler = PollScheduler(
            cycle=self.poll_once,
            interval_provider=lambda: self._config.polling.interval_for(self._phase),
            timer_factory=timer_factory,
            name=f"match:{self.match_id}",
        )

    # --- Outbound interface ---

    def get_current_snapshot(self) -> Optional[MatchSnapshot]:
        return self._snapshot

    def get_over_history(self) -> list[Over]:
        return list(self._overs)

    def get_lifecycle_phase(self) -> LifecyclePhase:
        return self._phase

    @property
    def load_state(self) -> LoadState:
        return self._load_state

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def scheduler(self) -> PollScheduler:
        return self._scheduler

    @property
    def detector(self) -> ChangeDetector:
        return self._detector

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback fired once per committed poll.

        Returns a function that removes the subscription.
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    # --- View lifecycle ---

    def start(self) -> None:
        self._scheduler.start()

    def stop(self) -> None:
        """Tear down the view. Waits for a commit already in progress."""
        with self._lock:
            self._scheduler.stop()

    def set_visible(self, visible: bool) -> None:
        self._scheduler.set_visible(visible)

    @property
    def is_active(self) -> bool:
        return self._scheduler.state == SchedulerState.ACTIVE

    # --- Poll cycle ---

    def poll_once(self) -> bool:
        """Run one fetch-and-commit cycle. Returns True if a commit happened.

        Results are only committed while the tracker is started; anything
        that resolves after stop() is discarded.
        """
        try:
            snapshot = self._feed.fetch_match(self.match_id)
        except FeedError as e:
            self._on_fetch_failure(e)
            return False

        with self._lock:
            if not self._scheduler.is_alive:
                logger.debug("Discarding match %s result after teardown", self.match_id)
                return False

            decision = self._detector.evaluate(snapshot)
            if not decision.commit:
                return False

            overs = tuple(self._reconstructor.reconstruct(snapshot.commentary, snapshot))
            phase = self._lifecycle.classify(snapshot.header.state)
            previous_phase = self._phase

            self._snapshot = snapshot
            self._overs = overs
            self._phase = phase
            self._load_state = LoadState.READY
            self._error = None
            update = TrackerUpdate(
                match_id=self.match_id,
                snapshot=snapshot,
                overs=overs,
                phase=phase,
                fingerprint=decision.fingerprint,
            )
            subscribers = list(self._subscribers)

        if phase != previous_phase:
            logger.info(
                "Match %s phase %s -> %s (%s)",
                self.match_id, previous_phase.value, phase.value, snapshot.header.state,
            )
        logger.debug(
            "Committed match %s: %s/%s (%s ov), %d overs reconstructed",
            self.match_id, snapshot.miniscore.score, snapshot.miniscore.wickets,
            snapshot.miniscore.overs, len(overs),
        )
        self._publish(update, subscribers)
        return True

    def _on_fetch_failure(self, error: FeedError) -> None:
        with self._lock:
            first_load = self._snapshot is None
            if first_load and self._scheduler.is_alive:
                self._load_state = LoadState.ERROR
                self._error = str(error) or FIRST_LOAD_ERROR
        if first_load:
            logger.error("Failed to load match %s: %s", self.match_id, error)
        else:
            logger.warning("Match %s poll failed, keeping last state: %s", self.match_id, error)

    def _publish(self, update: TrackerUpdate, subscribers: list[Subscriber]) -> None:
        for callback in subscribers:
            try:
                callback(update)
            except Exception as e:
                logger.error("Subscriber failed for match %s: %s", self.match_id, e, exc_info=True)
