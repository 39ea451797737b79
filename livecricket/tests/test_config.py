"""Tests for livecricket/config.py"""

from livecricket.config import EngineConfig, ListingType, PollingConfig


class TestEngineConfig:
    def test_defaults(self, monkeypatch):
        for name in ("CRICKET_API_BASE_URL", "CRICKET_FEED_TIMEOUT",
                     "CRICKET_LIVE_POLL_SECONDS", "CRICKET_RUN_OUT_EXTRAS_COUNT", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        config = EngineConfig.from_env()
        assert config.feed.base_url == "http://localhost:5000"
        assert config.feed.request_timeout_s == 5.0
        assert config.polling.live_interval_s == 1.0
        assert config.scoring.run_out_extras_count is True
        assert config.log_level == "INFO"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("CRICKET_API_BASE_URL", "https://scores.example.com/")
        monkeypatch.setenv("CRICKET_FEED_TIMEOUT", "2.5")
        monkeypatch.setenv("CRICKET_LIVE_POLL_SECONDS", "3")
        monkeypatch.setenv("CRICKET_RUN_OUT_EXTRAS_COUNT", "false")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        config = EngineConfig.from_env()
        assert config.feed.base_url == "https://scores.example.com"
        assert config.feed.request_timeout_s == 2.5
        assert config.polling.live_interval_s == 3.0
        assert config.scoring.run_out_extras_count is False
        assert config.log_level == "DEBUG"


class TestPollingConfig:
    def test_listing_intervals(self):
        polling = PollingConfig()
        assert polling.listing_interval_for(ListingType.LIVE) == 1.0
        assert polling.listing_interval_for(ListingType.RECENT) == 10.0
        assert polling.listing_interval_for(ListingType.UPCOMING) == 30.0
