"""
Text helpers for presenting match state.

Commentary cleanup, toss wording, the current-over strip and one-line
match headlines.
"""

from __future__ import annotations

import re
from typing import NamedTuple, Optional

from livecricket.config import LifecyclePhase
from livecricket.data.feed_models import MatchSnapshot, TossResult
from livecricket.state.ball_classifier import BallClassifier
from livecricket.state.lifecycle import classify_state

_TAGS = re.compile(r"<[^>]*>?")
# Provider formatting placeholders such as "B0$"
_PLACEHOLDER = re.compile(r"B\d*\$")

COMMENTARY_PREVIEW_CHARS = 100


def clean_commentary_text(text: str, max_length: int = COMMENTARY_PREVIEW_CHARS) -> str:
    """Strip markup and placeholders, truncated for ball tooltips."""
    cleaned = _TAGS.sub("", text or "")
    cleaned = _PLACEHOLDER.sub("", cleaned)
    return cleaned[:max_length].strip()


def format_toss_result(toss: Optional[TossResult]) -> str:
    if toss is None or not toss.winner:
        return "Toss yet to happen"
    decision = "bat first" if "bat" in toss.decision.lower() else "bowl first"
    return f"{toss.winner} chose to {decision}."


class OverProgress(NamedTuple):
    tokens: list[str]
    running_totals: list[int]
    total: int


def recent_over_tokens(recent_overs: str) -> list[str]:
    """Balls of the latest over in the "... | 1 4 Wd 0" strip."""
    if not recent_overs:
        return []
    return recent_overs.split("|")[-1].split()


def current_over_progress(
    recent_overs: str, classifier: Optional[BallClassifier] = None
) -> OverProgress:
    classifier = classifier or BallClassifier()
    tokens = recent_over_tokens(recent_overs)
    totals = classifier.token_totals(tokens)
    return OverProgress(tokens, totals, totals[-1] if totals else 0)


def match_headline(snapshot: MatchSnapshot) -> str:
    """One-line summary, e.g. "LIVE: 145/3 (16.2) - IND vs AUS"."""
    header = snapshot.header
    teams = f"{header.team1.label} vs {header.team2.label}"
    phase = classify_state(header.state)
    mini = snapshot.miniscore
    if phase == LifecyclePhase.LIVE and mini.score is not None:
        overs = f" ({mini.overs})" if mini.overs else ""
        return f"LIVE: {mini.score}/{mini.wickets or 0}{overs} - {teams}"
    if phase == LifecyclePhase.COMPLETE and header.status:
        return f"{header.status} - {teams}"
    if header.series_name:
        return f"{teams} - {header.series_name}"
    return teams
