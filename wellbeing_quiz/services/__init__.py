"""Service layer for the wellbeing quiz.

This package contains the logic that sits between the Flask route
handlers and the assessment store: scoring a questionnaire, computing
aggregate statistics with fallbacks, and fetching quotes from the
remote quote service.

Nothing in this package performs HTTP request handling. Services
return plain Python data structures and raise exceptions defined in
``wellbeing_quiz.errors`` when something goes wrong.
"""

from .scoring import ScoreResult, compute
from .statistics import StatisticsAggregator
from .quotes import QuoteClient

__all__ = [
    "ScoreResult",
    "compute",
    "StatisticsAggregator",
    "QuoteClient",
]
