"""
Match lifecycle classification.

Maps the provider's free-text match state onto the coarse lifecycle
phases that drive polling cadence.
"""

from __future__ import annotations

import logging
from typing import Optional

from livecricket.config import LifecyclePhase

logger = logging.getLogger(__name__)

# "Stumps" polls at the live cadence
LIVE_STATES = frozenset({"in progress", "stumps"})
BREAK_STATES = frozenset({"innings break", "drinks break", "lunch break", "tea break"})
COMPLETE_STATES = frozenset({"complete", "abandon", "abandoned", "no result"})
UPCOMING_STATES = frozenset({"upcoming", "preview", "toss"})


class MatchLifecycleClassifier:
    """Classifies a header state string into a LifecyclePhase.

    Unknown states fall back to UPCOMING, the slowest cadence.
    """

    def classify(self, state: Optional[str]) -> LifecyclePhase:
        key = " ".join((state or "").split()).lower()
        if key in LIVE_STATES:
            return LifecyclePhase.LIVE
        if key in BREAK_STATES or key.endswith(" break"):
            return LifecyclePhase.BREAK
        if key in COMPLETE_STATES:
            return LifecyclePhase.COMPLETE
        if key and key not in UPCOMING_STATES:
            logger.debug("Unrecognized match state %r, treating as upcoming", state)
        return LifecyclePhase.UPCOMING


_default_classifier = MatchLifecycleClassifier()


def classify_state(state: Optional[str]) -> LifecyclePhase:
    """Module-level shortcut for MatchLifecycleClassifier().classify."""
    return _default_classifier.classify(state)
