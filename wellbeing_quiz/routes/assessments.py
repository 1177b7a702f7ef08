"""
Routes for scoring and storing questionnaire submissions.

``/calculate-results`` scores the answers on the server, answers the
caller straight away and hands the assessment to the background
writer. ``/submit-assessment`` stores an assessment the client has
already scored and reports whether the write succeeded.
``/user-history`` and ``/latest`` list stored scores; when the store
is unavailable they answer with an empty list.
"""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, request

from ..errors import StoreUnavailableError, ValidationError, error_response
from ..models import AssessmentRecord
from ..schemas import (
    AssessmentSummarySchema,
    CalculateResultsSchema,
    SubmitAssessmentSchema,
    load_request,
)
from ..services.scoring import compute
from ..store import DEFAULT_LATEST_LIMIT, MAX_LATEST_LIMIT

logger = logging.getLogger(__name__)

assessments_bp = Blueprint("assessments", __name__)


def _store():
    return current_app.extensions["assessment_store"]


@assessments_bp.route("/calculate-results", methods=["POST"])
def calculate_results() -> tuple[dict, int]:
    """Score a questionnaire and return the results.

    Accepts ``answers`` (a list of answers in questionnaire order) and an
    optional ``userId``. The response includes the average score of all
    stored assessments for comparison. Persisting the assessment is best
    effort and never delays or changes the response.
    """
    payload = load_request(CalculateResultsSchema(), request.get_json(silent=True))
    try:
        result = compute(
            payload["answers"],
            by_question_id=current_app.config["RECOMMENDATIONS_BY_QUESTION_ID"],
        )
        average = current_app.extensions["statistics"].average()
    except ValidationError:
        raise
    except Exception as exc:
        logger.exception("Error calculating results")
        return error_response("Failed to calculate results", str(exc), 500)

    store = _store()
    if store.connection.is_connected:
        record = AssessmentRecord(
            score=result.score,
            answers=tuple(payload["answers"]),
            user_id=payload["user_id"],
        )
        current_app.extensions["assessment_writer"].submit(current_app._get_current_object(), record)
    else:
        logger.info("Assessment store is %s; result not saved", store.connection.state.value)

    results = result.to_dict()
    results["averageScore"] = average
    return {"success": True, "results": results}, 200


@assessments_bp.route("/submit-assessment", methods=["POST"])
def submit_assessment() -> tuple[dict, int]:
    """Store an assessment scored by the client.

    Accepts ``score`` (0-100), ``answers``, and optional ``timestamp``
    and ``userId``. The write is synchronous: if it fails the caller
    gets HTTP 500.
    """
    record = load_request(SubmitAssessmentSchema(), request.get_json(silent=True))
    try:
        assessment_id = _store().insert(record)
    except StoreUnavailableError as exc:
        logger.error("Error submitting assessment: %s", exc.message)
        return error_response("Failed to submit assessment", exc.message, 500)
    return {
        "success": True,
        "message": "Assessment submitted successfully",
        "assessmentId": assessment_id,
    }, 201


@assessments_bp.route("/user-history/", defaults={"user_id": ""}, methods=["GET"])
@assessments_bp.route("/user-history/<user_id>", methods=["GET"])
def user_history(user_id: str) -> tuple[dict, int]:
    """List a respondent's scores, newest first."""
    user_id = user_id.strip()
    if not user_id:
        return error_response("User ID is required", "userId path parameter is empty", 400)
    try:
        history = _store().user_history(user_id)
    except StoreUnavailableError as exc:
        logger.warning("Returning empty history for %s: %s", user_id, exc.message)
        history = []
    return {"success": True, "history": AssessmentSummarySchema(many=True).dump(history)}, 200


def _parse_limit(raw: str | None) -> int:
    try:
        limit = int(raw) if raw is not None else DEFAULT_LATEST_LIMIT
    except ValueError:
        return DEFAULT_LATEST_LIMIT
    if limit <= 0:
        return DEFAULT_LATEST_LIMIT
    return min(limit, MAX_LATEST_LIMIT)


@assessments_bp.route("/latest", methods=["GET"])
def latest_assessments() -> tuple[dict, int]:
    """List the most recent scores. ``limit`` defaults to 10 and is capped at 100."""
    limit = _parse_limit(request.args.get("limit"))
    try:
        assessments = _store().latest(limit)
    except StoreUnavailableError as exc:
        logger.warning("Returning no latest assessments: %s", exc.message)
        assessments = []
    return {"success": True, "assessments": AssessmentSummarySchema(many=True).dump(assessments)}, 200
