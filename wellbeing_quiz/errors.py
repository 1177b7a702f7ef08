"""Centralised error handling and custom exceptions.

This module defines the exception taxonomy used across the service
and provides Flask error handlers that serialise them into the JSON
error envelope ``{"success": false, "message": ..., "error": ...}``.
The scoring engine and the store raise these exceptions without
knowing anything about HTTP status codes; the handlers registered by
the application factory translate them.
"""
from __future__ import annotations

import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


def error_response(message: str, error: str, status_code: int, **extra):
    """Build the JSON error envelope shared by every endpoint."""
    body = {"success": False, "message": message, "error": error}
    body.update(extra)
    return jsonify(body), status_code


class ValidationError(Exception):
    """Raised when a request payload is malformed or incomplete."""

    def __init__(self, message: str, fields: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.fields = fields or {}

    def to_response(self, status_code: int = 400):
        return error_response("Invalid request", self.message, status_code, fields=self.fields)


class InvalidInputError(ValidationError):
    """Raised when the scoring engine receives input it cannot score."""


class StoreUnavailableError(Exception):
    """Raised when the assessment store cannot be reached or queried."""

    def __init__(self, message: str = "Assessment store is unavailable") -> None:
        super().__init__(message)
        self.message = message

    def to_response(self, status_code: int = 500):
        return error_response("Assessment store is unavailable", self.message, status_code)


class UpstreamServiceError(Exception):
    """Raised when a remote service (the quote provider) fails.

    Callers substitute local fallback data; this error never reaches
    an HTTP client.
    """


def register_error_handlers(app) -> None:
    """Register custom error handlers on the given Flask app."""
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        return err.to_response(400)

    @app.errorhandler(StoreUnavailableError)
    def handle_store_unavailable(err: StoreUnavailableError):
        logger.warning("Unhandled store failure: %s", err.message)
        return err.to_response(500)

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        if isinstance(err, HTTPException):
            return err
        logger.exception("Unhandled error while serving request")
        return error_response("Internal server error", str(err), 500)
