"""
Snapshot change detection.

Decides whether a freshly fetched snapshot is a material change worth
publishing. Only a fixed subset of fields is compared: provider payloads
reorder keys and carry volatile metadata (timestamps, internal ids) that
would otherwise produce spurious commits.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import asdict, dataclass
from typing import Any, Optional, Sequence

from livecricket.data.feed_models import MatchSnapshot, MatchSummary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fingerprint:
    """Salient fields of a snapshot, compared by value."""

    score: Optional[int]
    wickets: Optional[int]
    overs: str
    recent_balls: str
    striker_runs: Optional[int]
    non_striker_runs: Optional[int]
    bowler_figures: tuple[str, Optional[int], Optional[int]]
    status: str
    state: str

    @property
    def digest(self) -> str:
        canonical = json.dumps(asdict(self), sort_keys=True, separators=(",", ":"))
        return hashlib.sha1(canonical.encode("utf-8")).hexdigest()


def fingerprint(snapshot: MatchSnapshot) -> Fingerprint:
    mini = snapshot.miniscore
    return Fingerprint(
        score=mini.score,
        wickets=mini.wickets,
        overs=mini.overs,
        recent_balls=mini.recent_overs,
        striker_runs=mini.striker.runs if mini.striker else None,
        non_striker_runs=mini.non_striker.runs if mini.non_striker else None,
        bowler_figures=mini.bowler.figures if mini.bowler else ("", None, None),
        status=snapshot.header.status,
        state=snapshot.header.state,
    )


def should_commit(
    previous: Optional[Fingerprint], snapshot: MatchSnapshot
) -> tuple[Fingerprint, bool]:
    """Fingerprint the snapshot and report whether it differs from previous."""
    current = fingerprint(snapshot)
    return current, current != previous


@dataclass(frozen=True)
class CommitDecision:
    fingerprint: Fingerprint
    commit: bool


class ChangeDetector:
    """Holds the last committed fingerprint for one view."""

    def __init__(self) -> None:
        self._previous: Optional[Fingerprint] = None
        self.commits = 0
        self.discards = 0

    @property
    def previous(self) -> Optional[Fingerprint]:
        return self._previous

    def evaluate(self, snapshot: MatchSnapshot) -> CommitDecision:
        """Compare against the last commit; record the fingerprint on change."""
        current, commit = should_commit(self._previous, snapshot)
        if commit:
            self._previous = current
            self.commits += 1
            logger.debug("Snapshot changed (fingerprint %s)", current.digest[:12])
        else:
            self.discards += 1
        return CommitDecision(current, commit)

    def reset(self) -> None:
        self._previous = None


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=str)


class ListingChangeDetector:
    """Change detection for match listings.

    A listing changes when its length changes, or when any match is new or
    differs from its previous entry in status or scores.
    """

    def __init__(self) -> None:
        self._previous: dict[str, tuple[str, str]] = {}
        self._count = 0
        self._initialized = False

    def evaluate(self, matches: Sequence[MatchSummary]) -> bool:
        current = {m.match_id: (m.status, _canonical(m.scores)) for m in matches}
        changed = not self._initialized or len(matches) != self._count
        if not changed:
            changed = any(
                self._previous.get(match_id) != entry
                for match_id, entry in current.items()
            )
        if changed:
            self._previous = current
            self._count = len(matches)
            self._initialized = True
        return changed

    def reset(self) -> None:
        self._previous = {}
        self._count = 0
        self._initialized = False
