"""Tests for the scoring engine."""
from __future__ import annotations

import itertools

import pytest

from conftest import make_answers
from wellbeing_quiz.errors import InvalidInputError, ValidationError
from wellbeing_quiz.services.scoring import (
    DEFAULT_RULES,
    DESCRIPTION_LADDER,
    GENERAL_RECOMMENDATIONS,
    LOWEST_DESCRIPTION,
    compute,
    describe_score,
    percentage_score,
    recommend,
)

SLEEP, ACTIVITY, SOCIAL, ANXIETY, BALANCE = (rule.message for rule in DEFAULT_RULES)


def test_all_top_answers_score_excellent() -> None:
    result = compute(make_answers(5, 5, 5, 5, 5, 5))
    assert result.score == 100
    assert result.description.startswith("Excellent mental wellbeing")
    assert result.recommendations == list(GENERAL_RECOMMENDATIONS)


def test_all_bottom_answers_fire_every_rule() -> None:
    result = compute(make_answers(1, 1, 1, 1, 1, 1))
    assert result.score == 20
    assert result.description == LOWEST_DESCRIPTION
    assert result.recommendations == [SLEEP, ACTIVITY, SOCIAL, ANXIETY, BALANCE]


def test_two_fired_rules_still_get_all_general_recommendations() -> None:
    result = compute(make_answers(5, 2, 2, 5, 5, 5))
    assert result.recommendations == [SLEEP, ACTIVITY, *GENERAL_RECOMMENDATIONS]
    assert len(result.recommendations) == 5


def test_three_fired_rules_get_no_general_recommendations() -> None:
    result = compute(make_answers(5, 3, 3, 3, 5, 5))
    assert result.recommendations == [SLEEP, ACTIVITY, SOCIAL]


def test_anxiety_threshold_is_two() -> None:
    assert ANXIETY not in recommend(make_answers(5, 5, 5, 5, 3, 5))
    assert ANXIETY in recommend(make_answers(5, 5, 5, 5, 2, 5))


def test_missing_positions_do_not_fire() -> None:
    # Only the sleep question exists beyond the first one.
    assert recommend(make_answers(1, 1)) == [SLEEP, *GENERAL_RECOMMENDATIONS]


def test_first_answer_has_no_rule() -> None:
    assert recommend(make_answers(1)) == list(GENERAL_RECOMMENDATIONS)


def test_empty_answers_are_rejected() -> None:
    with pytest.raises(InvalidInputError):
        compute([])
    assert issubclass(InvalidInputError, ValidationError)


def test_half_scores_round_up() -> None:
    # 9 of 40 points is 22.5%.
    answers = make_answers(1, 1, 1, 1, 1, 1, 1, 2)
    assert percentage_score(answers) == 23


@pytest.mark.parametrize("count", [1, 2, 3, 6])
def test_score_matches_formula_and_range(count: int) -> None:
    for values in itertools.product(range(1, 6), repeat=count):
        score = percentage_score(make_answers(*values))
        exact = 100 * sum(values) / (5 * count)
        assert 0 <= score <= 100
        assert abs(score - exact) <= 0.5


@pytest.mark.parametrize(
    "score, expected_index",
    [(100, 0), (90, 0), (89, 1), (75, 1), (74, 2), (60, 2), (59, 3), (40, 3), (39, None), (0, None)],
)
def test_description_boundaries(score: int, expected_index) -> None:
    expected = LOWEST_DESCRIPTION if expected_index is None else DESCRIPTION_LADDER[expected_index][1]
    assert describe_score(score) == expected


def test_descriptions_are_monotonic() -> None:
    order = [description for _, description in DESCRIPTION_LADDER] + [LOWEST_DESCRIPTION]
    ranks = [order.index(describe_score(score)) for score in range(0, 101)]
    assert ranks == sorted(ranks, reverse=True)


def test_recommendations_never_empty_and_general_entries_unique() -> None:
    for values in itertools.product((1, 3, 5), repeat=6):
        recommendations = recommend(make_answers(*values))
        assert recommendations
        general = [r for r in recommendations if r in GENERAL_RECOMMENDATIONS]
        assert len(general) == len(set(general))


def test_rules_can_match_on_question_id() -> None:
    answers = list(reversed(make_answers(5, 1, 5, 5, 5, 5)))
    # Positionally the low sleep answer now sits at index 4 (anxiety).
    assert recommend(answers) == [ANXIETY, *GENERAL_RECOMMENDATIONS]
    assert recommend(answers, by_question_id=True) == [SLEEP, *GENERAL_RECOMMENDATIONS]


def test_result_serialises_to_dict() -> None:
    data = compute(make_answers(4, 4, 4, 4, 4, 4)).to_dict()
    assert data["score"] == 80
    assert data["description"].startswith("Good mental wellbeing")
    assert set(data) == {"score", "description", "recommendations"}
