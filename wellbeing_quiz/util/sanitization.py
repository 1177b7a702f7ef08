"""Sanitisation helpers for questionnaire text.

Question and answer labels arrive from the browser and are stored
verbatim otherwise. Tags are stripped and whitespace collapsed before
they reach the database so that nothing stored can be rendered as
markup by a future admin view.
"""
from __future__ import annotations

import re

TAG_RE = re.compile(r"<[^>]+>")
SPACE_RE = re.compile(r"\s+")


def strip_tags(text: str | None) -> str:
    """Remove HTML tags and collapse runs of whitespace.

    Parameters
    ----------
    text: str | None
        The input string that may contain HTML tags.

    Returns
    -------
    str
        The cleaned string, or ``""`` for empty input.
    """
    if not text:
        return ""
    no_tags = TAG_RE.sub("", text)
    return SPACE_RE.sub(" ", no_tags).strip()
