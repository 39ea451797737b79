"""
Configuration management for the Live Cricket Tracker.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum

from dotenv import load_dotenv

load_dotenv()


class LifecyclePhase(Enum):
    UPCOMING = "upcoming"
    LIVE = "live"
    BREAK = "break"
    COMPLETE = "complete"


class ListingType(Enum):
    LIVE = "live"
    RECENT = "recent"
    UPCOMING = "upcoming"


@dataclass(frozen=True)
class FeedConfig:
    """Remote score provider configuration."""
    base_url: str = "http://localhost:5000"
    request_timeout_s: float = 5.0  # Fetch deadline
    user_agent: str = "livecricket/0.1"


@dataclass(frozen=True)
class PollingConfig:
    """Polling cadence per lifecycle phase and per listing view."""
    live_interval_s: float = 1.0  # In Progress / Stumps
    break_interval_s: float = 60.0
    upcoming_interval_s: float = 60.0
    complete_interval_s: float = 30.0

    live_listing_interval_s: float = 1.0
    recent_listing_interval_s: float = 10.0
    upcoming_listing_interval_s: float = 30.0

    def interval_for(self, phase: LifecyclePhase) -> float:
        """Seconds between polls for a match in the given phase."""
        return {
            LifecyclePhase.LIVE: self.live_interval_s,
            LifecyclePhase.BREAK: self.break_interval_s,
            LifecyclePhase.UPCOMING: self.upcoming_interval_s,
            LifecyclePhase.COMPLETE: self.complete_interval_s,
        }.get(phase, self.upcoming_interval_s)

    def listing_interval_for(self, listing: ListingType) -> float:
        return {
            ListingType.LIVE: self.live_listing_interval_s,
            ListingType.RECENT: self.recent_listing_interval_s,
            ListingType.UPCOMING: self.upcoming_listing_interval_s,
        }[listing]


@dataclass(frozen=True)
class ScoringConfig:
    """Ball scoring conventions."""
    # A run-out ball carrying a bye/extra tag still scores the extra runs
    run_out_extras_count: bool = True


@dataclass
class EngineConfig:
    """Top-level tracker configuration."""
    feed: FeedConfig = field(default_factory=FeedConfig)
    polling: PollingConfig = field(default_factory=PollingConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Load configuration from environment variables."""
        return cls(
            feed=FeedConfig(
                base_url=os.getenv("CRICKET_API_BASE_URL", "http://localhost:5000").rstrip("/"),
                request_timeout_s=float(os.getenv("CRICKET_FEED_TIMEOUT", "5")),
            ),
            polling=PollingConfig(
                live_interval_s=float(os.getenv("CRICKET_LIVE_POLL_SECONDS", "1")),
            ),
            scoring=ScoringConfig(
                run_out_extras_count=os.getenv(
                    "CRICKET_RUN_OUT_EXTRAS_COUNT", "true"
                ).lower() != "false",
            ),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


# Provider endpoints, relative to FeedConfig.base_url
MATCH_DETAILS_PATH = "/match-details/{match_id}"
HEALTH_PATH = "/health"

LISTING_PATHS: dict[ListingType, str] = {
    ListingType.LIVE: "/live-cricket-scores",
    ListingType.RECENT: "/recent-cricket-scores",
    ListingType.UPCOMING: "/upcoming-cricket-scores",
}

LISTING_KEYS: dict[ListingType, str] = {
    ListingType.LIVE: "liveMatches",
    ListingType.RECENT: "recentMatches",
    ListingType.UPCOMING: "upcomingMatches",
}
