"""
Serialization schemas using Marshmallow for the wellbeing quiz.

Request schemas validate incoming JSON (camelCase keys, as sent by
the front end) and load it into the immutable values from
``models``. Response schemas dump stored assessments. Marshmallow's
own ``ValidationError`` never leaves this module: ``load_request``
converts it into ``wellbeing_quiz.errors.ValidationError`` so the
registered error handler can answer with HTTP 400.
"""

from __future__ import annotations

from datetime import timezone

from marshmallow import EXCLUDE, Schema, fields, post_load, validate
from marshmallow import ValidationError as MarshmallowValidationError
from marshmallow_sqlalchemy import SQLAlchemySchema, auto_field

from .errors import ValidationError
from .models import (
    MAX_ANSWER_VALUE,
    MAX_SCORE,
    MIN_ANSWER_VALUE,
    MIN_SCORE,
    Answer,
    Assessment,
    AssessmentRecord,
)
from .util.sanitization import strip_tags

# Question ids are stored in a 32-bit INTEGER column.
MIN_QUESTION_ID = 0
MAX_QUESTION_ID = 2**31 - 1


class AnswerSchema(Schema):
    """Schema for a single questionnaire answer."""

    class Meta:
        unknown = EXCLUDE

    question_id = fields.Integer(
        required=True,
        strict=True,
        validate=validate.Range(min=MIN_QUESTION_ID, max=MAX_QUESTION_ID),
        data_key="questionId",
    )
    question_text = fields.String(required=True, validate=validate.Length(min=1, max=500), data_key="questionText")
    answer_text = fields.String(required=True, validate=validate.Length(min=1, max=255), data_key="answerText")
    answer_value = fields.Integer(
        required=True,
        strict=True,
        validate=validate.Range(min=MIN_ANSWER_VALUE, max=MAX_ANSWER_VALUE),
        data_key="answerValue",
    )

    @post_load
    def make_answer(self, data: dict, **kwargs) -> Answer:
        return Answer(
            question_id=data["question_id"],
            question_text=strip_tags(data["question_text"]),
            answer_text=strip_tags(data["answer_text"]),
            answer_value=data["answer_value"],
        )


class CalculateResultsSchema(Schema):
    """Body of ``POST /api/calculate-results``."""

    class Meta:
        unknown = EXCLUDE

    answers = fields.List(fields.Nested(AnswerSchema), required=True)
    user_id = fields.String(load_default=None, validate=validate.Length(max=64), data_key="userId")


class SubmitAssessmentSchema(Schema):
    """Body of ``POST /api/submit-assessment`` (a score computed by the client)."""

    class Meta:
        unknown = EXCLUDE

    score = fields.Integer(required=True, strict=True, validate=validate.Range(min=MIN_SCORE, max=MAX_SCORE))
    answers = fields.List(fields.Nested(AnswerSchema), required=True, validate=validate.Length(min=1))
    timestamp = fields.DateTime(load_default=None, allow_none=True)
    user_id = fields.String(load_default=None, validate=validate.Length(max=64), data_key="userId")

    @post_load
    def make_record(self, data: dict, **kwargs) -> AssessmentRecord:
        timestamp = data.get("timestamp")
        if timestamp is not None and timestamp.tzinfo is not None:
            timestamp = timestamp.astimezone(timezone.utc).replace(tzinfo=None)
        return AssessmentRecord(
            score=data["score"],
            answers=tuple(data["answers"]),
            timestamp=timestamp,
            user_id=data.get("user_id"),
        )


class AssessmentSummarySchema(SQLAlchemySchema):
    """Score and timestamp of a stored assessment, for history listings."""

    class Meta:
        model = Assessment

    score = auto_field()
    timestamp = fields.Function(lambda obj: obj.timestamp.replace(tzinfo=timezone.utc).isoformat())


def load_request(schema: Schema, payload):
    """Load ``payload`` with ``schema``, raising our ``ValidationError`` on failure."""
    if payload is None:
        raise ValidationError("Request body must be a JSON object.")
    try:
        return schema.load(payload)
    except MarshmallowValidationError as err:
        fields_ = err.messages if isinstance(err.messages, dict) else {"_schema": err.messages}
        raise ValidationError("Request body failed validation.", fields=fields_) from err
