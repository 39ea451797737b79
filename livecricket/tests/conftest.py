"""Shared test fixtures for live cricket tracker tests."""

from __future__ import annotations

from typing import Callable, Optional

import pytest

from livecricket.config import EngineConfig, FeedConfig, PollingConfig, ScoringConfig
from livecricket.data.feed_models import RawCommentaryEvent


class FakeTimer:
    """One-shot timer that only fires when a test says so."""

    def __init__(self, interval: float, callback: Callable[[], None]):
        self.interval = interval
        self.callback = callback
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def pending(self) -> bool:
        return self.started and not self.cancelled and not self.fired

    def fire(self) -> None:
        self.fired = True
        self.callback()


class FakeTimerFactory:
    """Records every timer the scheduler creates."""

    def __init__(self) -> None:
        self.timers: list[FakeTimer] = []

    def __call__(self, interval: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(interval, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self.timers if t.pending]

    @property
    def last(self) -> FakeTimer:
        return self.timers[-1]

    def fire_pending(self) -> None:
        """Fire the single armed timer."""
        pending = self.pending
        assert len(pending) == 1, f"expected one armed timer, found {len(pending)}"
        pending[0].fire()


@pytest.fixture
def timers() -> FakeTimerFactory:
    return FakeTimerFactory()


@pytest.fixture
def engine_config() -> EngineConfig:
    """Standard test configuration."""
    return EngineConfig(
        feed=FeedConfig(base_url="http://scores.test", request_timeout_s=5.0),
        polling=PollingConfig(),
        scoring=ScoringConfig(run_out_extras_count=True),
    )


def make_event(
    over: Optional[float],
    text: str = "",
    runs: Optional[int] = 0,
    kind: str = "NONE",
    batsman: str = "Bat_1",
    bowler: str = "Bowl_1",
    ball: Optional[int] = 1,
    summary=None,
) -> RawCommentaryEvent:
    return RawCommentaryEvent(
        over_number=over,
        ball_number=ball,
        event_kind=kind,
        commentary_text=text,
        legal_runs=runs,
        batsman=batsman,
        bowler=bowler,
        over_break_summary=summary,
    )


def make_commentary_payload(
    over: Optional[float],
    text: str,
    runs: int = 0,
    event: str = "NONE",
    batsman: str = "Bat_1",
    bowler: str = "Bowl_1",
    separator: Optional[dict] = None,
) -> dict:
    payload: dict = {
        "overNumber": over,
        "ballNbr": 1,
        "event": event,
        "commText": text,
        "legalRuns": runs,
        "batsmanDetails": {"playerName": batsman},
        "bowlerDetails": {"playerName": bowler},
    }
    if separator is not None:
        payload["overSeparator"] = separator
    return payload


def make_match_payload(
    score: int = 100,
    wickets: int = 2,
    overs: str = "14.4",
    state: str = "In Progress",
    status: str = "Thunder opt to bat",
    recent: str = "1 0 4 | Wd 1 W 6",
    striker_runs: int = 30,
    non_striker_runs: int = 12,
    bowler: tuple = ("3.4", 25, 1),
    commentary: Optional[list] = None,
    wrap: bool = True,
) -> dict:
    """Provider match-details response."""
    data = {
        "matchHeader": {
            "matchId": 5001,
            "state": state,
            "status": status,
            "matchFormat": "T20",
            "seriesName": "Test Series",
            "team1": {"name": "Thunder", "sName": "THU"},
            "team2": {"name": "Strikers", "sName": "STR"},
            "tossResults": {"tossWinnerName": "Thunder", "decision": "Batting"},
            "matchStartTimestamp": 1760000000000,
        },
        "miniscore": {
            "batTeam": {"teamSName": "THU", "teamScore": score, "teamWkts": wickets},
            "overs": overs,
            "recentOvsStats": recent,
            "batsmanStriker": {"name": "Bat_1", "runs": striker_runs, "balls": 20, "fours": 3, "sixes": 1},
            "batsmanNonStriker": {"name": "Bat_2", "runs": non_striker_runs, "balls": 10},
            "bowlerStriker": {"name": "Bowl_1", "overs": bowler[0], "runs": bowler[1], "wickets": bowler[2]},
            "inningsId": 1,
            "currentRunRate": 6.8,
            "matchScoreDetails": {
                "inningsScoreList": [
                    {"inningsId": 1, "batTeamName": "THU", "score": score, "wickets": wickets, "overs": overs},
                ],
            },
        },
        "commentaryList": commentary if commentary is not None else [],
    }
    if not wrap:
        return data
    return {"status": "success", "data": data}
