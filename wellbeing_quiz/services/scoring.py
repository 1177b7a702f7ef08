"""Wellbeing score and recommendation computation.

``compute`` turns a questionnaire's answers into a percentage score,
a short description of what the score means and a list of
recommendations. It is a pure function: no database access, no
logging, nothing kept between calls. Route handlers call it and
decide separately what to persist.

Recommendations come from a small rule table. Each rule looks at one
answer and fires when its value is at or below the rule's threshold.
By default a rule addresses an answer by its position in the
questionnaire; rules can instead be matched on ``questionId`` so that
reordering the questions on the front end does not change their
meaning.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..errors import InvalidInputError
from ..models import MAX_ANSWER_VALUE, Answer


@dataclass(frozen=True)
class RecommendationRule:
    """Advice given when the answer at ``position`` is ``<= threshold``."""

    position: int
    threshold: int
    message: str
    question_id: Optional[int] = None


@dataclass(frozen=True)
class ScoreResult:
    score: int
    description: str
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "description": self.description,
            "recommendations": list(self.recommendations),
        }


# Evaluated top-down; the first threshold the score reaches wins.
DESCRIPTION_LADDER: Tuple[Tuple[int, str], ...] = (
    (90, "Excellent mental wellbeing. You appear to have strong coping mechanisms "
         "and healthy lifestyle habits."),
    (75, "Good mental wellbeing. You have many positive habits, though there may be "
         "areas for improvement."),
    (60, "Moderate mental wellbeing. Consider addressing specific areas that may be "
         "affecting your mental health."),
    (40, "Your mental wellbeing could benefit from attention. Consider speaking with "
         "a mental health professional."),
)
LOWEST_DESCRIPTION = (
    "Your responses suggest you may be experiencing significant mental health "
    "challenges. We strongly recommend consulting with a healthcare professional."
)

DEFAULT_RULES: Tuple[RecommendationRule, ...] = (
    RecommendationRule(
        position=1, question_id=2, threshold=3,
        message="Improve your sleep habits by maintaining a regular sleep schedule and "
                "creating a relaxing bedtime routine.",
    ),
    RecommendationRule(
        position=2, question_id=3, threshold=3,
        message="Increase your physical activity. Even 30 minutes of moderate exercise "
                "most days can significantly improve mental wellbeing.",
    ),
    RecommendationRule(
        position=3, question_id=4, threshold=3,
        message="Strengthen your social connections. Reach out to friends or family, or "
                "consider joining community groups or activities.",
    ),
    RecommendationRule(
        position=4, question_id=5, threshold=2,
        message="Practice stress-reduction techniques such as mindfulness, deep breathing, "
                "or meditation to manage anxiety.",
    ),
    RecommendationRule(
        position=5, question_id=6, threshold=3,
        message="Improve your work-life balance by setting boundaries, taking breaks, and "
                "making time for activities you enjoy.",
    ),
)

GENERAL_RECOMMENDATIONS: Tuple[str, ...] = (
    "Practice gratitude by regularly noting things you're thankful for.",
    "Limit screen time and social media consumption, especially before bed.",
    "Stay hydrated and maintain a balanced diet rich in fruits, vegetables, and whole grains.",
)

# Fewer fired rules than this and all general recommendations are appended.
MIN_SPECIFIC_RECOMMENDATIONS = 3


def percentage_score(answers: Sequence[Answer]) -> int:
    """Return the answers' total as a percentage of the maximum possible total.

    Halves round up, so 22.5 becomes 23.

    Raises
    ------
    InvalidInputError
        If ``answers`` is empty.
    """
    if not answers:
        raise InvalidInputError("At least one answer is required to calculate a score.")
    count = len(answers)
    total = sum(answer.answer_value for answer in answers)
    # floor(100 * total / (MAX * count) + 1/2) in integer arithmetic
    return (200 * total + MAX_ANSWER_VALUE * count) // (2 * MAX_ANSWER_VALUE * count)


def describe_score(score: int) -> str:
    """Return the description for ``score``."""
    for minimum, description in DESCRIPTION_LADDER:
        if score >= minimum:
            return description
    return LOWEST_DESCRIPTION


def _answer_for(
    rule: RecommendationRule,
    answers: Sequence[Answer],
    by_question: Optional[Dict[int, Answer]],
) -> Optional[Answer]:
    if by_question is not None and rule.question_id is not None:
        return by_question.get(rule.question_id)
    if 0 <= rule.position < len(answers):
        return answers[rule.position]
    return None


def recommend(
    answers: Sequence[Answer],
    rules: Sequence[RecommendationRule] = DEFAULT_RULES,
    by_question_id: bool = False,
) -> List[str]:
    """Return the recommendations triggered by ``answers``.

    Fired rule messages come first, in rule order. When fewer than
    ``MIN_SPECIFIC_RECOMMENDATIONS`` rules fire, every general
    recommendation is appended after them, so two fired rules give
    five recommendations in total.
    """
    by_question = None
    if by_question_id:
        by_question = {answer.question_id: answer for answer in answers}

    recommendations = []
    for rule in rules:
        answer = _answer_for(rule, answers, by_question)
        if answer is not None and answer.answer_value <= rule.threshold:
            recommendations.append(rule.message)

    if len(recommendations) < MIN_SPECIFIC_RECOMMENDATIONS:
        recommendations.extend(GENERAL_RECOMMENDATIONS)
    return recommendations


def compute(
    answers: Sequence[Answer],
    rules: Sequence[RecommendationRule] = DEFAULT_RULES,
    by_question_id: bool = False,
) -> ScoreResult:
    """Score a completed questionnaire.

    Parameters
    ----------
    answers: Sequence[Answer]
        The answers in questionnaire order. Must not be empty.
    rules: Sequence[RecommendationRule], optional
        The recommendation rule table, ``DEFAULT_RULES`` by default.
    by_question_id: bool, default False
        Match rules to answers by ``questionId`` instead of position.

    Returns
    -------
    ScoreResult
        Score, description and recommendations.
    """
    score = percentage_score(answers)
    return ScoreResult(
        score=score,
        description=describe_score(score),
        recommendations=recommend(answers, rules, by_question_id),
    )
