"""
Ball outcome classification.

Turns a single delivery's free-text commentary (or a compact token from the
recent-overs strip, e.g. "2nb") into a normalized outcome token and the
number of runs it adds to the over.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, NamedTuple, Optional

import numpy as np

logger = logging.getLogger(__name__)

WICKET = "W"
WIDE = "Wd"
NO_BALL = "NB"
LEG_BYE = "LB"
RUN_OUT = "R"

# Deliveries that carry a one-run penalty on top of any runs scored
PENALTY_TOKENS = frozenset({WIDE, NO_BALL})

_DIGITS = re.compile(r"\d+")
_SIX = re.compile(r"\bsix\b", re.IGNORECASE)
_FOUR = re.compile(r"\bfour\b", re.IGNORECASE)
_WIDE = re.compile(r"\bwides?\b", re.IGNORECASE)
_NO_BALL = re.compile(r"\bno[ -]?ball\b", re.IGNORECASE)
_LEG_BYE = re.compile(r"\bleg[ -]?byes?\b", re.IGNORECASE)
_EXTRA = re.compile(r"\bwides?\b|\bno[ -]?ball\b|\bbyes?\b", re.IGNORECASE)
# "Bowler to Batter, <outcome>, <description>"
_COMMENTARY_LEAD = re.compile(r"^\s*[^,]+?\bto\b[^,]+,\s*([^,]*)")


@dataclass(frozen=True)
class Ball:
    """A single delivery's outcome."""

    token: str  # "0".."6", "W", "Wd", "NB", "LB"
    runs: int = 0  # Runs carried by the delivery, excluding any penalty
    striker: str = ""
    bowler: str = ""
    raw_text: str = ""
    is_wicket: bool = False
    over_number: Optional[float] = None

    @property
    def display(self) -> str:
        return display_token(self.token)

    @property
    def is_penalty_extra(self) -> bool:
        return self.token in PENALTY_TOKENS


class Classification(NamedTuple):
    token: str
    runs: int
    is_wicket: bool


def outcome_clause(text: str) -> str:
    """The outcome part of a commentary line, e.g. "wide" in
    "Starc to Kohli, wide, way down leg". Lines without the usual
    "bowler to batter," lead are returned whole.
    """
    match = _COMMENTARY_LEAD.match(text or "")
    if match:
        return match.group(1).strip()
    return (text or "").strip()


def first_number(text: str, default: int = 0) -> int:
    match = _DIGITS.search(text or "")
    return int(match.group()) if match else default


def display_token(token: str) -> str:
    """Presentation form of a token: "Wd" -> "WD", "nb" -> "NB", "R" -> "RO"."""
    normalized = (token or "").strip().upper()
    if _DIGITS.sub("", normalized) == RUN_OUT:
        return normalized.replace(RUN_OUT, "RO")
    return normalized


def cumulative(values: Iterable[int]) -> list[int]:
    """Running sum of per-ball contributions."""
    arr = np.asarray(list(values), dtype=np.int64)
    return [int(v) for v in np.cumsum(arr)]


class BallClassifier:
    """Classifies deliveries and scores them for running over totals.

    Args:
        run_out_extras_count: How to score a run-out (or any wicket) that
            also carries an extra tag such as a bye. The provider's
            convention is that the extra runs still count (True). With
            False such deliveries score nothing and classify as "W".
    """

    def __init__(self, run_out_extras_count: bool = True):
        self.run_out_extras_count = run_out_extras_count

    def classify(
        self,
        text: str,
        legal_runs: Optional[int] = None,
        event_kind: str = "",
    ) -> Classification:
        """Classify a commentary line. First matching rule wins."""
        clause = outcome_clause(text)
        declared = legal_runs if legal_runs is not None and legal_runs >= 0 else None
        runs = declared if declared is not None else first_number(clause)
        is_wicket = "wicket" in (event_kind or "").lower()
        has_extra = bool(_EXTRA.search(clause))

        if is_wicket and (not has_extra or not self.run_out_extras_count):
            return Classification(WICKET, 0, True)
        if _WIDE.search(clause):
            return Classification(WIDE, runs, is_wicket)
        if _NO_BALL.search(clause):
            return Classification(NO_BALL, runs, is_wicket)
        if _SIX.search(clause):
            return Classification("6", 6, is_wicket)
        if _FOUR.search(clause):
            return Classification("4", 4, is_wicket)
        if _LEG_BYE.search(clause):
            return Classification(LEG_BYE, runs, is_wicket)
        return Classification(str(runs), runs, is_wicket)

    def make_ball(
        self,
        text: str,
        legal_runs: Optional[int] = None,
        event_kind: str = "",
        striker: str = "",
        bowler: str = "",
        over_number: Optional[float] = None,
    ) -> Ball:
        token, runs, is_wicket = self.classify(text, legal_runs, event_kind)
        return Ball(
            token=token,
            runs=runs,
            striker=striker,
            bowler=bowler,
            raw_text=text,
            is_wicket=is_wicket,
            over_number=over_number,
        )

    def contribution(self, ball: Ball) -> int:
        """Runs a ball adds to its over's running total."""
        if ball.token == WICKET:
            return 0
        if ball.token in PENALTY_TOKENS:
            return ball.runs + 1
        return ball.runs

    def running_totals(self, balls: Iterable[Ball]) -> list[int]:
        """Cumulative over runs after each ball, in bowled order."""
        return cumulative(self.contribution(b) for b in balls)

    def score_token(self, token: str) -> int:
        """Score a compact recent-overs token such as "1", "W", "Wd",
        "2nb", "1lb" or "R" (run out).
        """
        upper = (token or "").strip().upper()
        if not upper:
            return 0
        runs = first_number(upper)
        letters = _DIGITS.sub("", upper).replace("+", "")
        has_wide = "WD" in letters
        has_no_ball = "NB" in letters
        has_leg_bye = "LB" in letters
        rest = letters.replace("WD", "").replace("NB", "").replace("LB", "")
        has_bye = "B" in rest
        rest = rest.replace("B", "")
        has_extra = has_wide or has_no_ball or has_leg_bye or has_bye

        if WICKET in rest or RUN_OUT in rest:
            if not has_extra or not self.run_out_extras_count:
                return 0
        return runs + (1 if has_wide or has_no_ball else 0)

    def token_totals(self, tokens: Iterable[str]) -> list[int]:
        return cumulative(self.score_token(t) for t in tokens)
