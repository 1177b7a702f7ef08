"""Routes for aggregate statistics.

Both endpoints are read paths: a store outage degrades the numbers
(zero average, empty distribution) rather than failing the request.
"""
from __future__ import annotations

import logging

from flask import Blueprint, current_app

from ..errors import StoreUnavailableError

logger = logging.getLogger(__name__)

statistics_bp = Blueprint("statistics", __name__)


@statistics_bp.route("/average-score", methods=["GET"])
def average_score() -> tuple[dict, int]:
    """Return the unrounded mean of all stored scores, or 0 when there are none."""
    try:
        average = current_app.extensions["assessment_store"].average_score()
    except StoreUnavailableError as exc:
        logger.warning("Reporting average score as 0: %s", exc.message)
        average = None
    return {"success": True, "averageScore": average or 0}, 200


@statistics_bp.route("/score-distribution", methods=["GET"])
def score_distribution() -> tuple[dict, int]:
    """Return the number of stored scores in each wellbeing band."""
    distribution = current_app.extensions["statistics"].distribution()
    return {"success": True, "distribution": distribution}, 200
