"""
Over history reconstruction.

Rebuilds a per-over view of the innings from the provider's flat,
newest-first commentary feed. The feed has no stable event identity and is
re-delivered (in full or in part) on every poll, so the history is derived
from scratch each time rather than merged incrementally.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from livecricket.data.feed_models import MatchSnapshot, OverBreakSummary, RawCommentaryEvent
from livecricket.state.ball_classifier import Ball, BallClassifier

logger = logging.getLogger(__name__)

NOISE_KINDS = frozenset({"", "none"})


@dataclass(frozen=True)
class Over:
    """Aggregate of the balls bowled in one over."""

    over_number: int
    balls: tuple[Ball, ...] = ()  # Bowled order, oldest first
    running_totals: tuple[int, ...] = ()  # Over runs after each ball
    summary: str = ""
    bowler: str = "N/A"
    striker_at_start: str = "N/A"
    non_striker_at_start: str = "N/A"
    over_runs: int = 0
    reported_runs: Optional[int] = None  # From the over-break record, if any
    cumulative_score: Optional[int] = None
    cumulative_wickets: Optional[int] = None
    in_progress: bool = False

    @property
    def tokens(self) -> list[str]:
        return [b.token for b in self.balls]

    @property
    def wickets_in_over(self) -> int:
        return sum(1 for b in self.balls if b.is_wicket)


@dataclass
class _PendingOver:
    """Accumulated balls of the over currently being walked (newest first)."""

    over_number: int
    balls: list[Ball] = field(default_factory=list)


class CommentaryReconstructor:
    """Groups commentary events into overs with running totals.

    Stateless between calls: ``reconstruct`` is a pure function of its
    inputs and the classifier's scoring convention.
    """

    def __init__(self, classifier: Optional[BallClassifier] = None):
        self._classifier = classifier or BallClassifier()

    def reconstruct(
        self,
        events: Iterable[RawCommentaryEvent],
        snapshot: Optional[MatchSnapshot] = None,
    ) -> list[Over]:
        """Rebuild the over history, newest over first.

        Malformed events are dropped; an empty feed yields an empty list.
        """
        overs: list[Over] = []
        summaries: dict[int, OverBreakSummary] = {}
        pending: Optional[_PendingOver] = None
        current_over: Optional[int] = None
        dropped = 0

        for event in events:
            if not isinstance(event, RawCommentaryEvent):
                dropped += 1
                continue
            over = event.over
            if self._is_noise(event):
                continue

            # Only deliveries and over-break markers open a new over
            if event.is_over_break or (
                event.has_delivery and over is not None and over != current_over
            ):
                marker = event.over_break_summary
                if marker is not None:
                    closes = marker.over if marker.over is not None else over
                    if closes is not None:
                        summaries.setdefault(closes, marker)
                if pending is not None and pending.balls:
                    overs.append(self._finalize(pending, event, summaries))
                current_over = over
                pending = _PendingOver(over) if over is not None else None

            if event.has_delivery and pending is not None:
                pending.balls.append(
                    self._classifier.make_ball(
                        event.commentary_text,
                        legal_runs=event.legal_runs,
                        event_kind=event.event_kind,
                        striker=event.batsman,
                        bowler=event.bowler,
                        over_number=event.over_number,
                    )
                )
            elif over is not None and not event.is_over_break:
                dropped += 1

        if pending is not None and pending.balls:
            if all(o.over_number != pending.over_number for o in overs):
                overs.append(self._finalize(pending, None, summaries))

        if dropped:
            logger.debug("Dropped %d malformed commentary events", dropped)

        return self._finish(overs, snapshot)

    @staticmethod
    def _is_noise(event: RawCommentaryEvent) -> bool:
        return (
            event.over is None
            and event.event_kind.strip().lower() in NOISE_KINDS
            and event.ball_number is None
        )

    def _finalize(
        self,
        pending: _PendingOver,
        marker_event: Optional[RawCommentaryEvent],
        summaries: dict[int, OverBreakSummary],
    ) -> Over:
        balls = list(reversed(pending.balls))
        first = balls[0]
        summary = summaries.get(pending.over_number)
        if summary is None and marker_event is not None:
            marker = marker_event.over_break_summary
            # A marker that does not say which over it closes is taken as
            # closing the accumulated one
            if marker is not None and marker.over is None and marker_event.over is None:
                summary = marker

        totals = self._classifier.running_totals(balls)
        return Over(
            over_number=pending.over_number,
            balls=tuple(balls),
            running_totals=tuple(totals),
            summary=(summary.summary if summary and summary.summary
                     else " ".join(b.token for b in balls)),
            bowler=first.bowler or (summary.bowler if summary else "") or "N/A",
            striker_at_start=first.striker or (summary.striker if summary else "") or "N/A",
            non_striker_at_start=(summary.non_striker if summary else "") or "N/A",
            over_runs=totals[-1] if totals else 0,
            reported_runs=summary.runs if summary else None,
            cumulative_score=summary.score if summary else None,
            cumulative_wickets=summary.wickets if summary else None,
        )

    def _finish(self, overs: list[Over], snapshot: Optional[MatchSnapshot]) -> list[Over]:
        unique: list[Over] = []
        seen: set[int] = set()
        for over in overs:
            if over.over_number in seen:
                continue
            seen.add(over.over_number)
            unique.append(over)
        unique.sort(key=lambda o: o.over_number, reverse=True)

        # The newest over without an end-of-over record is still being bowled
        if unique and unique[0].reported_runs is None and unique[0].cumulative_score is None:
            live = unique[0]
            score = snapshot.miniscore.score if snapshot else None
            wickets = snapshot.miniscore.wickets if snapshot else None
            unique[0] = Over(
                over_number=live.over_number,
                balls=live.balls,
                running_totals=live.running_totals,
                summary=live.summary,
                bowler=live.bowler,
                striker_at_start=live.striker_at_start,
                non_striker_at_start=live.non_striker_at_start,
                over_runs=live.over_runs,
                reported_runs=None,
                cumulative_score=score,
                cumulative_wickets=wickets,
                in_progress=True,
            )
        return unique


def reconstruct_overs(
    events: Iterable[RawCommentaryEvent],
    snapshot: Optional[MatchSnapshot] = None,
    classifier: Optional[BallClassifier] = None,
) -> list[Over]:
    return CommentaryReconstructor(classifier).reconstruct(events, snapshot)
