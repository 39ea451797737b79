"""
Match listing tracker.

Polls the live, recent or upcoming match listing and publishes the list
only when a match was added or removed, or changed its status or scores.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from livecricket.config import EngineConfig, ListingType
from livecricket.data.feed_client import FeedError, MatchFeed
from livecricket.data.feed_models import MatchSummary
from livecricket.live.scheduler import PollScheduler, TimerFactory
from livecricket.state.change_detector import ListingChangeDetector

logger = logging.getLogger(__name__)

ListingSubscriber = Callable[[list[MatchSummary]], None]


class MatchListTracker:
    """Visibility-aware poller for one match listing."""

    def __init__(
        self,
        listing: ListingType,
        feed: MatchFeed,
        config: Optional[EngineConfig] = None,
        timer_factory: Optional[TimerFactory] = None,
    ):
        self.listing = listing
        self._feed = feed
        self._config = config or EngineConfig()
        self._detector = ListingChangeDetector()
        self._lock = threading.RLock()
        self._matches: list[MatchSummary] = []
        self._loaded = False
        self._subscribers: list[ListingSubscriber] = []
        self._scheduler = PollScheduler(
            cycle=self.poll_once,
            interval_provider=lambda: self._config.polling.listing_interval_for(listing),
            timer_factory=timer_factory,
            name=f"listing:{listing.value}",
        )

    @property
    def scheduler(self) -> PollScheduler:
        return self._scheduler

    @property
    def loaded(self) -> bool:
        return self._loaded

    def get_matches(self) -> list[MatchSummary]:
        return list(self._matches)

    def subscribe(self, callback: ListingSubscriber) -> Callable[[], None]:
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def start(self) -> None:
        self._scheduler.start()

    def stop(self) -> None:
        """Tear down the view. Waits for a commit already in progress."""
        with self._lock:
            self._scheduler.stop()

    def set_visible(self, visible: bool) -> None:
        self._scheduler.set_visible(visible)

    def poll_once(self) -> bool:
        try:
            matches = self._feed.fetch_listing(self.listing)
        except FeedError as e:
            logger.warning("Failed to fetch %s matches: %s", self.listing.value, e)
            return False

        with self._lock:
            if not self._scheduler.is_alive:
                return False
            if not self._detector.evaluate(matches):
                return False
            self._matches = list(matches)
            self._loaded = True
            subscribers = list(self._subscribers)
            snapshot = list(self._matches)

        logger.debug("%s listing updated: %d matches", self.listing.value, len(snapshot))
        for callback in subscribers:
            try:
                callback(snapshot)
            except Exception as e:
                logger.error("Listing subscriber failed: %s", e, exc_info=True)
        return True
