"""Identifier generation for assessments and anonymous respondents."""
from __future__ import annotations

import secrets
import string
import uuid

_TOKEN_ALPHABET = string.ascii_lowercase + string.digits
USER_TOKEN_LENGTH = 26


def new_assessment_id() -> str:
    """Return an opaque identifier for a new assessment row."""
    return uuid.uuid4().hex


def generate_user_id() -> str:
    """Return a random pseudo-identity for a respondent.

    The quiz has no accounts, so every submission without a ``userId``
    gets a fresh token. It groups history on the client side only and
    carries no security meaning.
    """
    return "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(USER_TOKEN_LENGTH))
