"""Route for the motivational quote shown next to the results."""
from __future__ import annotations

from flask import Blueprint, current_app

quotes_bp = Blueprint("quotes", __name__)


@quotes_bp.route("/quote", methods=["GET"])
def quote() -> tuple[dict, int]:
    """Return a quote from the remote service or the local fallback list."""
    payload = current_app.extensions["quote_client"].fetch()
    return {"success": True, **payload}, 200
