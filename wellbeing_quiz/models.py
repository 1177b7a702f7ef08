"""
Data model for the wellbeing quiz.

Two kinds of objects live here. ``Answer`` and ``AssessmentRecord`` are
plain immutable values: the scoring engine works on ``Answer`` objects
and the assessment store accepts ``AssessmentRecord`` objects, so
neither needs a database session. ``Assessment`` and
``AssessmentAnswer`` are the SQLAlchemy rows the store writes. Each
assessment owns an ordered list of answers; ``position`` keeps the
questionnaire order because the recommendation rules depend on it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Tuple

from .db import db
from .util.identifiers import generate_user_id, new_assessment_id


MIN_ANSWER_VALUE = 1
MAX_ANSWER_VALUE = 5
MIN_SCORE = 0
MAX_SCORE = 100


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime (the storage convention)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True)
class Answer:
    """One questionnaire response."""

    question_id: int
    question_text: str
    answer_text: str
    answer_value: int

    def to_dict(self) -> dict:
        return {
            "questionId": self.question_id,
            "questionText": self.question_text,
            "answerText": self.answer_text,
            "answerValue": self.answer_value,
        }


@dataclass(frozen=True)
class AssessmentRecord:
    """An assessment that has not been stored yet."""

    score: int
    answers: Tuple[Answer, ...] = field(default_factory=tuple)
    timestamp: Optional[datetime] = None
    user_id: Optional[str] = None


class Assessment(db.Model):
    __allow_unmapped__ = True
    """A scored questionnaire submission. Rows are never updated."""
    __tablename__ = "assessments"

    id: str = db.Column(db.String(32), primary_key=True, default=new_assessment_id)
    score: int = db.Column(db.Integer, nullable=False, index=True)
    timestamp: datetime = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    user_id: str = db.Column(db.String(64), nullable=False, default=generate_user_id, index=True)

    answers = db.relationship(
        "AssessmentAnswer",
        back_populates="assessment",
        cascade="all, delete-orphan",
        order_by="AssessmentAnswer.position",
    )

    __table_args__ = (
        db.CheckConstraint(f"score >= {MIN_SCORE} AND score <= {MAX_SCORE}", name="ck_assessment_score_range"),
    )

    @classmethod
    def from_record(cls, record: AssessmentRecord) -> Assessment:
        """Build an unsaved row (with its answers) from an ``AssessmentRecord``."""
        assessment = cls(score=record.score)
        if record.timestamp is not None:
            assessment.timestamp = record.timestamp
        if record.user_id:
            assessment.user_id = record.user_id
        assessment.answers = [
            AssessmentAnswer.from_answer(answer, position)
            for position, answer in enumerate(record.answers)
        ]
        return assessment

    def __repr__(self) -> str:
        return f"<Assessment {self.id} score={self.score}>"


class AssessmentAnswer(db.Model):
    __allow_unmapped__ = True
    """A single answer stored as part of an assessment."""
    __tablename__ = "assessment_answers"

    id: int = db.Column(db.Integer, primary_key=True)
    assessment_id: str = db.Column(db.String(32), db.ForeignKey("assessments.id"), nullable=False)
    position: int = db.Column(db.Integer, nullable=False)
    question_id: int = db.Column(db.Integer, nullable=False)
    question_text: str = db.Column(db.String(500), nullable=False)
    answer_text: str = db.Column(db.String(255), nullable=False)
    answer_value: int = db.Column(db.Integer, nullable=False)

    assessment = db.relationship("Assessment", back_populates="answers")

    __table_args__ = (
        db.UniqueConstraint("assessment_id", "position", name="uix_assessment_position"),
        db.CheckConstraint(
            f"answer_value >= {MIN_ANSWER_VALUE} AND answer_value <= {MAX_ANSWER_VALUE}",
            name="ck_answer_value_range",
        ),
    )

    @classmethod
    def from_answer(cls, answer: Answer, position: int) -> AssessmentAnswer:
        return cls(
            position=position,
            question_id=answer.question_id,
            question_text=answer.question_text,
            answer_text=answer.answer_text,
            answer_value=answer.answer_value,
        )

    def to_answer(self) -> Answer:
        return Answer(
            question_id=self.question_id,
            question_text=self.question_text,
            answer_text=self.answer_text,
            answer_value=self.answer_value,
        )

    def __repr__(self) -> str:
        return f"<AssessmentAnswer assessment={self.assessment_id} q={self.question_id} value={self.answer_value}>"
