"""
Live Cricket Tracker entry point.

Coordinates the polling pipeline for a terminal session:
Provider Feed -> Change Detection -> Over Reconstruction -> Console Output

Supports three modes:
1. Match: follow one match's score and over history
2. Listing: follow the live, recent or upcoming match list
3. Demo: replay a scripted over through the full pipeline

Usage:
    python -m livecricket.orchestrator --match 91234
    python -m livecricket.orchestrator --listing live
    python -m livecricket.orchestrator --demo
"""

from __future__ import annotations

import argparse
import logging
import signal
import threading
from dataclasses import replace
from typing import Optional

from livecricket.config import EngineConfig, ListingType, PollingConfig

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("livecricket.orchestrator")


def _wait(stop_event: threading.Event, duration: Optional[float]) -> None:
    def _shutdown(signum, frame):
        logger.info("Shutting down...")
        stop_event.set()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)
    stop_event.wait(timeout=duration)


def render_update(update) -> None:
    """Log a committed match update."""
    from livecricket.utils.text import current_over_progress, match_headline

    logger.info(match_headline(update.snapshot))
    status = update.snapshot.header.status
    if status:
        logger.info("  %s", status)
    progress = current_over_progress(update.snapshot.miniscore.recent_overs)
    if progress.tokens:
        logger.info(
            "  This over: %s | totals %s | %d runs",
            " ".join(progress.tokens), progress.running_totals, progress.total,
        )
    for over in update.overs[:2]:
        logger.info(
            "  Over %d%s: %s  (%s) %d runs, %s",
            over.over_number + 1,
            " *" if over.in_progress else "",
            " ".join(b.display for b in over.balls),
            " ".join(str(t) for t in over.running_totals),
            over.over_runs,
            over.bowler,
        )


def run_match(config: EngineConfig, match_id: str, duration: Optional[float] = None) -> None:
    """Follow one match until interrupted."""
    from livecricket.data.feed_client import HttpMatchFeed
    from livecricket.live.match_tracker import LiveMatchTracker

    logger.info("=" * 60)
    logger.info("LIVE CRICKET TRACKER - MATCH %s", match_id)
    logger.info("=" * 60)
    logger.info("Provider: %s", config.feed.base_url)

    feed = HttpMatchFeed(config.feed)
    tracker = LiveMatchTracker(match_id, feed, config)
    tracker.subscribe(render_update)
    stop_event = threading.Event()
    tracker.start()
    if tracker.error:
        logger.error("Error loading data: %s", tracker.error)
    try:
        _wait(stop_event, duration)
    finally:
        tracker.stop()
        feed.close()


def run_listing(config: EngineConfig, listing: ListingType, duration: Optional[float] = None) -> None:
    """Follow a match listing until interrupted."""
    from livecricket.data.feed_client import HttpMatchFeed
    from livecricket.live.listing_tracker import MatchListTracker

    logger.info("=" * 60)
    logger.info("LIVE CRICKET TRACKER - %s MATCHES", listing.value.upper())
    logger.info("=" * 60)

    def show(matches) -> None:
        logger.info("%d %s matches", len(matches), listing.value)
        for match in matches:
            logger.info(
                "  [%s] %s vs %s - %s", match.match_id, match.team1, match.team2,
                match.status or match.state,
            )

    feed = HttpMatchFeed(config.feed)
    tracker = MatchListTracker(listing, feed, config)
    tracker.subscribe(show)
    stop_event = threading.Event()
    tracker.start()
    try:
        _wait(stop_event, duration)
    finally:
        tracker.stop()
        feed.close()


def build_demo_payloads() -> list[dict]:
    """Scripted match-details responses: over 15 bowled ball by ball."""
    balls = [
        (14.1, "Starc to Kohli, wide, down the leg side", 0, "NONE"),
        (14.1, "Starc to Kohli, 1 run, pushed to cover", 1, "NONE"),
        (14.2, "Starc to Rahul, out Bowled!! Through the gate", 0, "WICKET"),
        (14.3, "Starc to Pant, SIX, launched over long-on", 6, "SIX"),
        (14.4, "Starc to Pant, no run, defended", 0, "NONE"),
        (14.5, "Starc to Pant, FOUR, cut hard", 4, "FOUR"),
        (14.6, "Starc to Pant, 2 runs, worked to deep square", 2, "NONE"),
    ]
    batters = ["Kohli", "Kohli", "Rahul", "Pant", "Pant", "Pant", "Pant"]
    header = {
        "matchId": 91234,
        "state": "In Progress",
        "status": "India opt to bat",
        "matchFormat": "T20",
        "seriesName": "Demo Series",
        "team1": {"name": "India", "sName": "IND"},
        "team2": {"name": "Australia", "sName": "AUS"},
        "tossResults": {"tossWinnerName": "India", "decision": "Batting"},
    }
    payloads: list[dict] = []
    commentary: list[dict] = []
    score, wickets = 120, 2
    previous_over = "1 0 4 1 2 1"
    this_over: list[str] = []
    for idx, (over, text, runs, event) in enumerate(balls):
        wicket = event == "WICKET"
        score += runs + (1 if "wide" in text else 0)
        wickets += 1 if wicket else 0
        commentary.insert(0, {
            "overNumber": over,
            "ballNbr": idx + 1,
            "event": event,
            "commText": text,
            "legalRuns": runs,
            "batsmanDetails": {"playerName": batters[idx]},
            "bowlerDetails": {"playerName": "Starc"},
        })
        this_over.append("W" if wicket else ("Wd" if "wide" in text else str(runs)))
        recent = f"{previous_over} | {' '.join(this_over)}"
        last = idx == len(balls) - 1
        payloads.append({
            "status": "success",
            "data": {
                "matchHeader": {**header, "state": "Innings Break" if last else "In Progress"},
                "miniscore": {
                    "batTeam": {"teamSName": "IND", "teamScore": score, "teamWkts": wickets},
                    "overs": f"{int(over)}.{round((over % 1) * 10)}",
                    "recentOvsStats": recent,
                    "batsmanStriker": {"name": batters[idx], "runs": runs},
                    "bowlerStriker": {"name": "Starc", "overs": "3.6", "runs": 30, "wickets": 1},
                    "inningsId": 1,
                },
                "commentaryList": list(commentary),
            },
        })
        # The same state is re-delivered once: it must not be re-published
        payloads.append(payloads[-1])
    return payloads


def run_demo(config: EngineConfig) -> None:
    """Replay a scripted over through the full pipeline."""
    from livecricket.data.feed_client import SimulatedMatchFeed
    from livecricket.live.match_tracker import LiveMatchTracker

    logger.info("=" * 60)
    logger.info("LIVE CRICKET TRACKER - DEMO MODE")
    logger.info("=" * 60)

    feed = SimulatedMatchFeed()
    payloads = build_demo_payloads()
    feed.script_match("91234", payloads)
    demo_config = replace(
        config,
        polling=PollingConfig(live_interval_s=0.2, break_interval_s=2.0),
    )
    tracker = LiveMatchTracker("91234", feed, demo_config)
    tracker.subscribe(render_update)

    tracker.start()
    stop_event = threading.Event()
    stop_event.wait(timeout=0.2 * len(payloads) + 1.0)
    tracker.stop()

    print("\n" + "=" * 60)
    print("DEMO RESULTS")
    print("=" * 60)
    print(f"Polls: {feed.fetch_count} | Commits: {tracker.detector.commits} | "
          f"Discarded: {tracker.detector.discards}")
    print(f"Final phase: {tracker.get_lifecycle_phase().value}")
    for over in tracker.get_over_history():
        print(f"Over {over.over_number + 1}: {' '.join(over.tokens)} -> {list(over.running_totals)}")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Live Cricket Tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m livecricket.orchestrator --demo
  python -m livecricket.orchestrator --match 91234
  python -m livecricket.orchestrator --listing upcoming
        """,
    )

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--match", type=str, metavar="MATCH_ID", help="Follow one match")
    mode.add_argument("--listing", type=str, choices=[t.value for t in ListingType], help="Follow a match listing")
    mode.add_argument("--demo", action="store_true", help="Replay a scripted over")

    parser.add_argument("--base-url", type=str, help="Score provider base URL")
    parser.add_argument("--duration", type=float, help="Stop after this many seconds")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    config = EngineConfig.from_env()
    logging.getLogger().setLevel(config.log_level.upper())
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    if args.base_url:
        config = replace(config, feed=replace(config.feed, base_url=args.base_url.rstrip("/")))

    if args.demo:
        run_demo(config)
    elif args.match:
        run_match(config, args.match, duration=args.duration)
    elif args.listing:
        run_listing(config, ListingType(args.listing), duration=args.duration)


if __name__ == "__main__":
    main()
