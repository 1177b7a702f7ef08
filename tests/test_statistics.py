"""Tests for the statistics aggregator's fallbacks."""
from __future__ import annotations

from types import SimpleNamespace

from wellbeing_quiz.errors import StoreUnavailableError
from wellbeing_quiz.models import AssessmentRecord
from wellbeing_quiz.services.statistics import StatisticsAggregator, round_half_up
from wellbeing_quiz.store import ConnectionState, empty_distribution


class FakeStore:
    """In-memory stand-in for ``AssessmentStore``."""

    def __init__(self, scores=(), state=ConnectionState.CONNECTED, fail=False) -> None:
        self.scores = list(scores)
        self.fail = fail
        self.connection = SimpleNamespace(state=state, is_connected=state is ConnectionState.CONNECTED)

    def average_score(self):
        if self.fail:
            raise StoreUnavailableError("boom")
        return sum(self.scores) / len(self.scores) if self.scores else None

    def score_distribution(self):
        if self.fail:
            raise StoreUnavailableError("boom")
        return {"excellent": 1, "good": 0, "moderate": 0, "fair": 0, "poor": len(self.scores) - 1}


def test_average_rounds_half_up() -> None:
    assert StatisticsAggregator(FakeStore([80, 81])).average() == 81
    assert StatisticsAggregator(FakeStore([10, 20, 20])).average() == 17
    assert round_half_up(72.5) == 73


def test_average_defaults_to_75_when_empty() -> None:
    assert StatisticsAggregator(FakeStore()).average() == 75


def test_average_defaults_when_store_fails() -> None:
    assert StatisticsAggregator(FakeStore([10], fail=True)).average() == 75


def test_average_defaults_when_not_connected() -> None:
    for state in (ConnectionState.CONNECTING, ConnectionState.DISCONNECTED):
        store = FakeStore([10], state=state, fail=True)
        assert StatisticsAggregator(store).average() == 75


def test_custom_default_average() -> None:
    assert StatisticsAggregator(FakeStore(), default_average=60).average() == 60


def test_distribution_delegates_to_store() -> None:
    assert StatisticsAggregator(FakeStore([95, 10])).distribution()["excellent"] == 1


def test_distribution_is_zero_when_unavailable() -> None:
    assert StatisticsAggregator(FakeStore(fail=True)).distribution() == empty_distribution()
    disconnected = FakeStore(state=ConnectionState.DISCONNECTED)
    assert StatisticsAggregator(disconnected).distribution() == empty_distribution()


def test_aggregator_over_real_store(app) -> None:
    store = app.extensions["assessment_store"]
    aggregator = app.extensions["statistics"]
    with app.app_context():
        assert aggregator.average() == 75
        store.insert(AssessmentRecord(score=40))
        store.insert(AssessmentRecord(score=95))
        assert aggregator.average() == 68
        assert aggregator.distribution() == {
            "excellent": 1, "good": 0, "moderate": 0, "fair": 1, "poor": 0,
        }


def test_average_defaults_when_stored_mean_is_zero() -> None:
    assert StatisticsAggregator(FakeStore([0, 0])).average() == 75
