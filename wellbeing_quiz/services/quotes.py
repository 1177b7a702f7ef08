"""Motivational quote proxy.

The front end shows a quote next to the results. Quotes come from a
remote service configured with ``QUOTE_API_URL`` that answers with a
JSON object ``{"content": ..., "author": ...}``. Whenever that service
is not configured or misbehaves, a quote from a short local list is
served instead and tagged with ``source: "fallback"``.
"""
from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional

import requests

from ..errors import UpstreamServiceError

logger = logging.getLogger(__name__)

FALLBACK_QUOTES: List[Dict[str, str]] = [
    {
        "text": "Mental health is not a destination, but a process. It's about how you drive, "
                "not where you're going.",
        "author": "Noam Shpancer",
    },
    {
        "text": "You don't have to be positive all the time. It's perfectly okay to feel sad, "
                "angry, annoyed, frustrated, scared, or anxious.",
        "author": "Lori Deschene",
    },
    {"text": "Self-care is how you take your power back.", "author": "Lalah Delia"},
    {
        "text": "The greatest glory in living lies not in never falling, but in rising every "
                "time we fall.",
        "author": "Nelson Mandela",
    },
    {
        "text": "You are not alone in this journey. Every step you take is a step towards healing.",
        "author": "Unknown",
    },
]


class QuoteClient:
    """Fetch a quote from the remote service, falling back to a local one."""

    def __init__(
        self,
        url: Optional[str],
        timeout: float = 5.0,
        session: Optional[requests.Session] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.rng = rng or random.Random()

    def fetch_remote(self) -> Dict[str, str]:
        """Return the remote quote.

        Raises
        ------
        UpstreamServiceError
            If no URL is configured, the request fails, or the body is
            not a quote.
        """
        if not self.url:
            raise UpstreamServiceError("QUOTE_API_URL is not configured")
        try:
            response = self.session.get(self.url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as exc:
            raise UpstreamServiceError(f"Quote request failed: {exc}") from exc
        except ValueError as exc:
            raise UpstreamServiceError("Quote service returned invalid JSON") from exc

        if not isinstance(data, dict) or not data.get("content"):
            raise UpstreamServiceError("Quote service returned an unexpected body")
        return {"text": data["content"], "author": data.get("author") or "Unknown"}

    def fallback(self) -> Dict[str, str]:
        return dict(self.rng.choice(FALLBACK_QUOTES))

    def fetch(self) -> Dict[str, object]:
        """Return ``{"quote": {...}, "source": "remote" | "fallback"}``."""
        try:
            return {"quote": self.fetch_remote(), "source": "remote"}
        except UpstreamServiceError as exc:
            logger.warning("Serving fallback quote: %s", exc)
            return {"quote": self.fallback(), "source": "fallback"}
