"""Tests for snapshot and listing change detection."""

from __future__ import annotations

import copy

from livecricket.data.feed_models import MatchSnapshot, MatchSummary
from livecricket.state.change_detector import (
    ChangeDetector,
    ListingChangeDetector,
    fingerprint,
    should_commit,
)
from livecricket.tests.conftest import make_commentary_payload, make_match_payload


def snapshot(**kwargs) -> MatchSnapshot:
    return MatchSnapshot.from_payload(make_match_payload(wrap=False, **kwargs))


def summary(match_id: str, status: str = "In Progress", scores=None) -> MatchSummary:
    return MatchSummary(match_id=match_id, team1="IND", team2="AUS", status=status, scores=scores)


class TestFingerprint:
    def test_stable_for_equal_snapshots(self):
        assert fingerprint(snapshot()) == fingerprint(snapshot())
        assert fingerprint(snapshot()).digest == fingerprint(snapshot()).digest

    def test_ignores_key_order(self):
        payload = make_match_payload(wrap=False)
        reordered = dict(reversed(list(payload.items())))
        reordered["miniscore"] = dict(reversed(list(payload["miniscore"].items())))
        assert fingerprint(MatchSnapshot.from_payload(payload)) == fingerprint(
            MatchSnapshot.from_payload(reordered)
        )

    def test_ignores_volatile_fields(self):
        payload = make_match_payload(wrap=False)
        later = copy.deepcopy(payload)
        later["matchHeader"]["matchStartTimestamp"] = 1760009999999
        later["commentaryList"] = [make_commentary_payload(14.4, "Starc to Kohli, no run")]
        assert fingerprint(MatchSnapshot.from_payload(payload)) == fingerprint(
            MatchSnapshot.from_payload(later)
        )

    def test_score_change(self):
        assert fingerprint(snapshot(score=100)) != fingerprint(snapshot(score=104))

    def test_wicket_change(self):
        assert fingerprint(snapshot(wickets=2)) != fingerprint(snapshot(wickets=3))

    def test_batter_and_bowler_changes(self):
        assert fingerprint(snapshot(striker_runs=30)) != fingerprint(snapshot(striker_runs=31))
        assert fingerprint(snapshot(non_striker_runs=12)) != fingerprint(snapshot(non_striker_runs=13))
        assert fingerprint(snapshot(bowler=("3.4", 25, 1))) != fingerprint(snapshot(bowler=("3.5", 25, 1)))

    def test_status_and_state_changes(self):
        assert fingerprint(snapshot(status="a")) != fingerprint(snapshot(status="b"))
        assert fingerprint(snapshot(state="In Progress")) != fingerprint(snapshot(state="Innings Break"))

    def test_should_commit(self):
        first, commit = should_commit(None, snapshot())
        assert commit
        _, commit = should_commit(first, snapshot())
        assert not commit


class TestChangeDetector:
    def test_identical_snapshots_commit_once(self):
        detector = ChangeDetector()
        decisions = [detector.evaluate(snapshot()) for _ in range(5)]
        assert [d.commit for d in decisions] == [True, False, False, False, False]
        assert detector.commits == 1
        assert detector.discards == 4

    def test_commits_on_change(self):
        detector = ChangeDetector()
        detector.evaluate(snapshot(score=100))
        assert detector.evaluate(snapshot(score=101)).commit
        assert detector.previous == fingerprint(snapshot(score=101))

    def test_discard_keeps_previous(self):
        detector = ChangeDetector()
        detector.evaluate(snapshot(score=100))
        detector.evaluate(snapshot(score=100))
        assert detector.previous == fingerprint(snapshot(score=100))

    def test_reset(self):
        detector = ChangeDetector()
        detector.evaluate(snapshot())
        detector.reset()
        assert detector.previous is None
        assert detector.evaluate(snapshot()).commit


class TestListingChangeDetector:
    def test_first_evaluation_changes(self):
        assert ListingChangeDetector().evaluate([])

    def test_same_listing_is_unchanged(self):
        detector = ListingChangeDetector()
        detector.evaluate([summary("1"), summary("2")])
        assert not detector.evaluate([summary("1"), summary("2")])

    def test_length_change(self):
        detector = ListingChangeDetector()
        detector.evaluate([summary("1")])
        assert detector.evaluate([summary("1"), summary("2")])

    def test_status_change(self):
        detector = ListingChangeDetector()
        detector.evaluate([summary("1", status="Toss delayed")])
        assert detector.evaluate([summary("1", status="In Progress")])

    def test_score_change(self):
        detector = ListingChangeDetector()
        detector.evaluate([summary("1", scores={"team1": {"runs": 10}})])
        assert detector.evaluate([summary("1", scores={"team1": {"runs": 14}})])

    def test_score_key_order_is_ignored(self):
        detector = ListingChangeDetector()
        detector.evaluate([summary("1", scores={"runs": 10, "wkts": 1})])
        assert not detector.evaluate([summary("1", scores={"wkts": 1, "runs": 10})])

    def test_replaced_match(self):
        detector = ListingChangeDetector()
        detector.evaluate([summary("1")])
        assert detector.evaluate([summary("2")])

    def test_duplicate_ids_settle(self):
        detector = ListingChangeDetector()
        detector.evaluate([summary("1"), summary("1")])
        assert not detector.evaluate([summary("1"), summary("1")])

    def test_reset(self):
        detector = ListingChangeDetector()
        detector.evaluate([summary("1")])
        detector.reset()
        assert detector.evaluate([summary("1")])
