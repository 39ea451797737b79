"""
Provider feed data model.

Typed views over the score provider's JSON payloads: the match snapshot
(header, miniscore, play-by-play commentary) and the match listings.
The provider payload is untrusted and only partially structured, so every
parser here tolerates missing or mistyped fields instead of raising.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Optional

OVER_BREAK = "over-break"


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        # "2.0" strings and non-finite floats such as a parsed 1e999
        number = _as_float(value)
        return int(number) if number is not None else None


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _player_name(value: Any) -> str:
    """Pull a player name out of the provider's nested player objects."""
    if isinstance(value, dict):
        return _as_str(
            value.get("playerName") or value.get("name")
            or value.get("batName") or value.get("bowlName")
        ).strip()
    return _as_str(value).strip()


@dataclass(frozen=True)
class OverBreakSummary:
    """Authoritative end-of-over record emitted once per completed over."""

    summary: str = ""
    runs: Optional[int] = None
    score: Optional[int] = None
    wickets: Optional[int] = None
    striker: str = ""
    non_striker: str = ""
    bowler: str = ""
    over_number: Optional[float] = None  # Over this summary belongs to

    @property
    def over(self) -> Optional[int]:
        if self.over_number is None:
            return None
        return math.floor(self.over_number)

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["OverBreakSummary"]:
        if not isinstance(payload, dict):
            return None
        bowler = payload.get("bowlNames")
        if isinstance(bowler, list):
            bowler = bowler[0] if bowler else ""
        return cls(
            summary=_as_str(payload.get("o_summary")).strip(),
            runs=_as_int(payload.get("runs")),
            score=_as_int(payload.get("score")),
            wickets=_as_int(payload.get("wickets")),
            striker=_player_name(payload.get("batStrikerObj")),
            non_striker=_player_name(payload.get("batNonStrikerObj")),
            bowler=_player_name(payload.get("bowlerObj") or bowler),
            over_number=_as_float(payload.get("overNum")),
        )


@dataclass(frozen=True)
class RawCommentaryEvent:
    """One entry in the provider's play-by-play feed (newest-first)."""

    over_number: Optional[float] = None  # e.g. 14.3
    ball_number: Optional[int] = None
    event_kind: str = ""  # "wicket", "over-break", "NONE", ...
    commentary_text: str = ""
    legal_runs: Optional[int] = None
    batsman: str = ""
    bowler: str = ""
    over_break_summary: Optional[OverBreakSummary] = None
    timestamp: Optional[int] = None

    @property
    def over(self) -> Optional[int]:
        """Completed-over index the ball belongs to (floor of over_number)."""
        if self.over_number is None:
            return None
        return math.floor(self.over_number)

    @property
    def is_over_break(self) -> bool:
        return self.event_kind.strip().lower() == OVER_BREAK

    @property
    def has_delivery(self) -> bool:
        """True when the event carries full delivery metadata."""
        return self.over_number is not None and bool(self.bowler) and bool(self.batsman)

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["RawCommentaryEvent"]:
        if not isinstance(payload, dict):
            return None
        return cls(
            over_number=_as_float(payload.get("overNumber")),
            ball_number=_as_int(payload.get("ballNbr")),
            event_kind=_as_str(payload.get("event")),
            commentary_text=_as_str(payload.get("commText")),
            legal_runs=_as_int(payload.get("legalRuns")),
            batsman=_player_name(payload.get("batsmanDetails")),
            bowler=_player_name(payload.get("bowlerDetails")),
            over_break_summary=OverBreakSummary.from_payload(payload.get("overSeparator")),
            timestamp=_as_int(payload.get("timestamp")),
        )


@dataclass(frozen=True)
class TeamInfo:
    name: str = ""
    short_name: str = ""

    @property
    def label(self) -> str:
        return self.short_name or self.name

    @classmethod
    def from_payload(cls, payload: Any, default: str = "") -> "TeamInfo":
        data = _as_dict(payload)
        return cls(
            name=_as_str(data.get("name")) or default,
            short_name=_as_str(data.get("sName") or data.get("shortName")),
        )


@dataclass(frozen=True)
class TossResult:
    winner: str = ""
    decision: str = ""


@dataclass(frozen=True)
class MatchHeader:
    """Pre-match and status metadata."""

    match_id: str = ""
    state: str = ""  # Lifecycle state: "In Progress", "Complete", ...
    status: str = ""  # Free-text status line
    match_format: str = ""
    series_name: str = ""
    venue: str = ""
    team1: TeamInfo = field(default_factory=TeamInfo)
    team2: TeamInfo = field(default_factory=TeamInfo)
    toss: Optional[TossResult] = None
    start_timestamp: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "MatchHeader":
        data = _as_dict(payload)
        toss_data = data.get("tossResults")
        toss = None
        if isinstance(toss_data, dict) and toss_data.get("tossWinnerName"):
            toss = TossResult(
                winner=_as_str(toss_data.get("tossWinnerName")),
                decision=_as_str(toss_data.get("decision")),
            )
        venue = data.get("venue")
        if isinstance(venue, dict):
            venue = venue.get("name") or venue.get("ground")
        return cls(
            match_id=_as_str(data.get("matchId")),
            state=_as_str(data.get("state")),
            status=_as_str(data.get("status")),
            match_format=_as_str(data.get("matchFormat") or data.get("matchType")),
            series_name=_as_str(data.get("seriesName")),
            venue=_as_str(venue),
            team1=TeamInfo.from_payload(data.get("team1"), default="Team 1"),
            team2=TeamInfo.from_payload(data.get("team2"), default="Team 2"),
            toss=toss,
            start_timestamp=_as_int(data.get("matchStartTimestamp")),
        )


@dataclass(frozen=True)
class BatterState:
    name: str = ""
    runs: Optional[int] = None
    balls: Optional[int] = None
    fours: Optional[int] = None
    sixes: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["BatterState"]:
        if not isinstance(payload, dict):
            return None
        return cls(
            name=_player_name(payload),
            runs=_as_int(payload.get("runs", payload.get("batRuns"))),
            balls=_as_int(payload.get("balls", payload.get("batBalls"))),
            fours=_as_int(payload.get("fours", payload.get("batFours"))),
            sixes=_as_int(payload.get("sixes", payload.get("batSixes"))),
        )


@dataclass(frozen=True)
class BowlerState:
    name: str = ""
    overs: str = ""
    runs: Optional[int] = None
    wickets: Optional[int] = None

    @property
    def figures(self) -> tuple[str, Optional[int], Optional[int]]:
        return (self.overs, self.runs, self.wickets)

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["BowlerState"]:
        if not isinstance(payload, dict):
            return None
        return cls(
            name=_player_name(payload),
            overs=_as_str(payload.get("overs", payload.get("bowlOvs"))),
            runs=_as_int(payload.get("runs", payload.get("bowlRuns"))),
            wickets=_as_int(payload.get("wickets", payload.get("bowlWkts"))),
        )


@dataclass(frozen=True)
class InningsScore:
    innings_id: Optional[int] = None
    batting_team: str = ""
    score: Optional[int] = None
    wickets: Optional[int] = None
    overs: str = ""

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["InningsScore"]:
        if not isinstance(payload, dict):
            return None
        return cls(
            innings_id=_as_int(payload.get("inningsId")),
            batting_team=_as_str(payload.get("batTeamName")),
            score=_as_int(payload.get("score")),
            wickets=_as_int(payload.get("wickets")),
            overs=_as_str(payload.get("overs")),
        )


@dataclass(frozen=True)
class Miniscore:
    """Current innings mini-state: score, batters at the crease, bowler."""

    batting_team: str = ""
    score: Optional[int] = None
    wickets: Optional[int] = None
    overs: str = ""
    recent_overs: str = ""  # e.g. "... | 1 4 Wd 0 W"
    striker: Optional[BatterState] = None
    non_striker: Optional[BatterState] = None
    bowler: Optional[BowlerState] = None
    innings_id: Optional[int] = None
    current_run_rate: Optional[float] = None
    required_run_rate: Optional[float] = None
    innings_scores: tuple[InningsScore, ...] = ()

    @classmethod
    def from_payload(cls, payload: Any) -> "Miniscore":
        data = _as_dict(payload)
        bat_team = _as_dict(data.get("batTeam"))
        score_details = _as_dict(data.get("matchScoreDetails"))
        innings_list = score_details.get("inningsScoreList")
        innings: list[InningsScore] = []
        if isinstance(innings_list, list):
            for item in innings_list:
                parsed = InningsScore.from_payload(item)
                if parsed is not None:
                    innings.append(parsed)
        return cls(
            batting_team=_as_str(bat_team.get("teamSName") or bat_team.get("teamName")),
            score=_as_int(bat_team.get("teamScore")),
            wickets=_as_int(bat_team.get("teamWkts")),
            overs=_as_str(data.get("overs")),
            recent_overs=_as_str(data.get("recentOvsStats")),
            striker=BatterState.from_payload(data.get("batsmanStriker")),
            non_striker=BatterState.from_payload(data.get("batsmanNonStriker")),
            bowler=BowlerState.from_payload(data.get("bowlerStriker")),
            innings_id=_as_int(data.get("inningsId")),
            current_run_rate=_as_float(data.get("currentRunRate")),
            required_run_rate=_as_float(data.get("requiredRunRate")),
            innings_scores=tuple(innings),
        )


@dataclass(frozen=True)
class MatchSnapshot:
    """Full fetched match state for one poll cycle."""

    header: MatchHeader = field(default_factory=MatchHeader)
    miniscore: Miniscore = field(default_factory=Miniscore)
    commentary: tuple[RawCommentaryEvent, ...] = ()

    @property
    def current_innings(self) -> Optional[InningsScore]:
        """Innings matching the miniscore's innings id, else the latest one."""
        scores = self.miniscore.innings_scores
        for innings in scores:
            if innings.innings_id == self.miniscore.innings_id:
                return innings
        return scores[-1] if scores else None

    def innings(self, innings_id: int) -> Optional[InningsScore]:
        for innings in self.miniscore.innings_scores:
            if innings.innings_id == innings_id:
                return innings
        return None

    @classmethod
    def from_payload(cls, payload: Any) -> "MatchSnapshot":
        data = _as_dict(payload)
        events: list[RawCommentaryEvent] = []
        commentary = data.get("commentaryList")
        if isinstance(commentary, list):
            for item in commentary:
                event = RawCommentaryEvent.from_payload(item)
                if event is not None:
                    events.append(event)
        return cls(
            header=MatchHeader.from_payload(data.get("matchHeader")),
            miniscore=Miniscore.from_payload(data.get("miniscore")),
            commentary=tuple(events),
        )


@dataclass(frozen=True)
class MatchSummary:
    """One entry of a live/recent/upcoming match listing."""

    match_id: str
    series_name: str = ""
    description: str = ""
    team1: str = ""
    team2: str = ""
    state: str = ""
    status: str = ""
    scores: Any = None  # Opaque provider score block, compared structurally

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["MatchSummary"]:
        if not isinstance(payload, dict):
            return None
        match_id = _as_str(payload.get("matchId")).strip()
        if not match_id:
            return None
        team1 = payload.get("team1")
        team2 = payload.get("team2")
        return cls(
            match_id=match_id,
            series_name=_as_str(payload.get("seriesName")),
            description=_as_str(payload.get("matchDesc")),
            team1=TeamInfo.from_payload(team1).label if isinstance(team1, dict) else _as_str(team1),
            team2=TeamInfo.from_payload(team2).label if isinstance(team2, dict) else _as_str(team2),
            state=_as_str(payload.get("state")),
            status=_as_str(payload.get("status")),
            scores=payload.get("scores"),
        )
