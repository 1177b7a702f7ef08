"""Aggregate statistics over stored assessments.

The aggregator sits in front of ``AssessmentStore`` and never fails:
when the store is not connected, errors out, or has no data yet, it
answers with fixed defaults instead. The calculation endpoint relies
on that to show a comparison figure even when persistence is down.
"""
from __future__ import annotations

import logging
import math
from typing import Dict

from ..errors import StoreUnavailableError
from ..store import AssessmentStore, empty_distribution

logger = logging.getLogger(__name__)

DEFAULT_AVERAGE_SCORE = 75


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class StatisticsAggregator:
    """Average and distribution with fallbacks."""

    def __init__(self, store: AssessmentStore, default_average: int = DEFAULT_AVERAGE_SCORE) -> None:
        self.store = store
        self.default_average = default_average

    def average(self) -> int:
        """Return the rounded average score, or ``default_average`` when unknown.

        A stored mean of exactly 0 also falls back to ``default_average``.
        """
        if not self.store.connection.is_connected:
            logger.info(
                "Assessment store is %s; using default average %d",
                self.store.connection.state.value, self.default_average,
            )
            return self.default_average
        try:
            average = self.store.average_score()
        except StoreUnavailableError as exc:
            logger.warning("Using default average score: %s", exc.message)
            return self.default_average
        if not average:
            return self.default_average
        return round_half_up(average)

    def distribution(self) -> Dict[str, int]:
        """Return bucket counts, all zero when the store cannot be queried."""
        if not self.store.connection.is_connected:
            logger.info(
                "Assessment store is %s; returning empty distribution",
                self.store.connection.state.value,
            )
            return empty_distribution()
        try:
            return self.store.score_distribution()
        except StoreUnavailableError as exc:
            logger.warning("Returning empty distribution: %s", exc.message)
            return empty_distribution()
