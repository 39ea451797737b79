"""
Score provider feed interface.

Provides an abstraction over the remote score provider's HTTP endpoints.
Includes a simulated feed that replays scripted payloads for demos and tests.
"""

from __future__ import annotations

import json
import logging
import time
from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Callable, Iterable, Optional, Union

import requests

from livecricket.config import (
    HEALTH_PATH,
    LISTING_KEYS,
    LISTING_PATHS,
    MATCH_DETAILS_PATH,
    FeedConfig,
    ListingType,
)
from livecricket.data.feed_models import MatchSnapshot, MatchSummary

logger = logging.getLogger(__name__)


class FeedError(Exception):
    """Base class for provider failures. Always treated as transient."""


class FeedTransportError(FeedError):
    """Network failure, deadline exceeded, or non-success HTTP status."""


class FeedPayloadError(FeedError):
    """Response could not be decoded or did not report success."""


def unwrap_response(payload: Any) -> dict:
    """Validate the provider envelope and return it.

    Raises:
        FeedPayloadError: if the payload is not an object or its
            ``status`` field is not ``"success"``.
    """
    if not isinstance(payload, dict):
        raise FeedPayloadError("Provider response is not a JSON object")
    status = payload.get("status")
    if status != "success":
        message = payload.get("message") or f"Provider reported status {status!r}"
        raise FeedPayloadError(str(message))
    return payload


def parse_match_details(payload: Any) -> MatchSnapshot:
    body = unwrap_response(payload)
    data = body.get("data")
    if not isinstance(data, dict):
        raise FeedPayloadError("Match details response has no data")
    return MatchSnapshot.from_payload(data)


def parse_listing(listing: ListingType, payload: Any) -> list[MatchSummary]:
    body = unwrap_response(payload)
    items = body.get(LISTING_KEYS[listing]) or []
    if not isinstance(items, list):
        raise FeedPayloadError(f"{LISTING_KEYS[listing]} is not a list")
    matches: list[MatchSummary] = []
    for item in items:
        summary = MatchSummary.from_payload(item)
        if summary is not None:
            matches.append(summary)
    return matches


class MatchFeed(ABC):
    """Abstract base class for score provider feeds."""

    @abstractmethod
    def fetch_match(self, match_id: str) -> MatchSnapshot:
        """Fetch the full snapshot for a match.

        Raises:
            FeedError: on any transport or payload failure.
        """

    @abstractmethod
    def fetch_listing(self, listing: ListingType) -> list[MatchSummary]:
        """Fetch a live/recent/upcoming match listing.

        Raises:
            FeedError: on any transport or payload failure.
        """

    def close(self) -> None:
        """Release any held connections."""


class HttpMatchFeed(MatchFeed):
    """Score provider reached over HTTP with a per-request deadline.

    ``request_timeout_s`` bounds the whole fetch, not just each socket
    operation: the body is streamed and the elapsed time is checked after
    every chunk. A single stalled read is still bounded by the same value
    as the requests read timeout.
    """

    CHUNK_SIZE = 16 * 1024

    def __init__(
        self,
        config: Optional[FeedConfig] = None,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._config = config or FeedConfig()
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self._config.user_agent})
        self._clock = clock

    @property
    def base_url(self) -> str:
        return self._config.base_url.rstrip("/")

    def _deadline_error(self, url: str) -> FeedTransportError:
        return FeedTransportError(
            f"Request to {url} exceeded {self._config.request_timeout_s}s deadline"
        )

    def _get_json(self, path: str) -> Any:
        url = f"{self.base_url}{path}"
        deadline = self._config.request_timeout_s
        started = self._clock()
        try:
            resp = self._session.get(url, timeout=deadline, stream=True)
        except requests.Timeout as e:
            raise self._deadline_error(url) from e
        except requests.RequestException as e:
            raise FeedTransportError(f"Request to {url} failed: {e}") from e

        try:
            if not resp.ok:
                raise FeedTransportError(f"HTTP {resp.status_code} from {url}")
            chunks: list[bytes] = []
            try:
                for chunk in resp.iter_content(chunk_size=self.CHUNK_SIZE):
                    chunks.append(chunk)
                    if self._clock() - started > deadline:
                        raise self._deadline_error(url)
            except requests.Timeout as e:
                raise self._deadline_error(url) from e
            except requests.RequestException as e:
                raise FeedTransportError(f"Reading {url} failed: {e}") from e
        finally:
            resp.close()

        try:
            return json.loads(b"".join(chunks))
        except ValueError as e:
            raise FeedPayloadError(f"Invalid JSON from {url}") from e

    def fetch_match(self, match_id: str) -> MatchSnapshot:
        payload = self._get_json(MATCH_DETAILS_PATH.format(match_id=match_id))
        return parse_match_details(payload)

    def fetch_listing(self, listing: ListingType) -> list[MatchSummary]:
        return parse_listing(listing, self._get_json(LISTING_PATHS[listing]))

    def is_healthy(self) -> bool:
        """Probe the provider's health endpoint."""
        try:
            resp = self._session.get(
                f"{self.base_url}{HEALTH_PATH}",
                timeout=self._config.request_timeout_s,
            )
        except requests.RequestException as e:
            logger.warning("Health check failed: %s", e)
            return False
        return resp.ok

    def close(self) -> None:
        self._session.close()


ScriptedResponse = Union[dict, Exception]


class SimulatedMatchFeed(MatchFeed):
    """Replays scripted provider payloads.

    Each fetch consumes the next scripted response for that match or
    listing; once the script is exhausted the last response repeats, the
    way a finished match keeps returning the same state. A scripted
    exception is raised instead of returned.
    """

    def __init__(self) -> None:
        self._matches: dict[str, deque[ScriptedResponse]] = {}
        self._listings: dict[ListingType, deque[ScriptedResponse]] = {}
        self.fetch_count = 0

    def script_match(self, match_id: str, responses: Iterable[ScriptedResponse]) -> None:
        self._matches.setdefault(str(match_id), deque()).extend(responses)

    def script_listing(self, listing: ListingType, responses: Iterable[ScriptedResponse]) -> None:
        self._listings.setdefault(listing, deque()).extend(responses)

    @staticmethod
    def _next(queue: Optional[deque[ScriptedResponse]], label: str) -> dict:
        if not queue:
            raise FeedTransportError(f"No scripted response for {label}")
        response = queue.popleft() if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        return response

    def fetch_match(self, match_id: str) -> MatchSnapshot:
        self.fetch_count += 1
        payload = self._next(self._matches.get(str(match_id)), f"match {match_id}")
        return parse_match_details(payload)

    def fetch_listing(self, listing: ListingType) -> list[MatchSummary]:
        self.fetch_count += 1
        payload = self._next(self._listings.get(listing), f"{listing.value} listing")
        return parse_listing(listing, payload)
