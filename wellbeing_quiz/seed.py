"""Database commands for local development.

``flask init-db`` creates the tables (the project has no migrations)
and ``flask seed-demo`` inserts a few scored demo assessments so the
statistics endpoints have something to show. Both are registered on
the app by ``create_app``.
"""
from __future__ import annotations

from datetime import timedelta

import click
from flask import current_app

from .db import db
from .models import Answer, AssessmentRecord, utcnow
from .services.scoring import compute

QUESTIONS = (
    (1, "How would you rate your overall mood in the past two weeks?"),
    (2, "How well have you been sleeping?"),
    (3, "How often do you engage in physical activity?"),
    (4, "How connected do you feel to friends and family?"),
    (5, "How well are you managing feelings of anxiety or worry?"),
    (6, "How satisfied are you with your work-life balance?"),
)
ANSWER_LABELS = {1: "Very poor", 2: "Poor", 3: "Fair", 4: "Good", 5: "Excellent"}

# One row per demo respondent, values in questionnaire order.
DEMO_RESPONSES = (
    ("demo-user-a", (5, 5, 4, 5, 4, 5)),
    ("demo-user-a", (4, 3, 3, 4, 3, 4)),
    ("demo-user-b", (3, 2, 2, 3, 2, 3)),
    ("demo-user-b", (2, 1, 2, 2, 1, 2)),
    ("demo-user-c", (4, 4, 4, 3, 4, 4)),
)


def demo_records() -> list[AssessmentRecord]:
    """Build the demo assessments, scored by the scoring engine."""
    now = utcnow()
    records = []
    for offset, (user_id, values) in enumerate(DEMO_RESPONSES):
        answers = tuple(
            Answer(
                question_id=question_id,
                question_text=question_text,
                answer_text=ANSWER_LABELS[value],
                answer_value=value,
            )
            for (question_id, question_text), value in zip(QUESTIONS, values)
        )
        records.append(
            AssessmentRecord(
                score=compute(answers).score,
                answers=answers,
                timestamp=now - timedelta(days=len(DEMO_RESPONSES) - offset),
                user_id=user_id,
            )
        )
    return records


def run_seeds() -> list[str]:
    """Insert the demo assessments and return their identifiers."""
    store = current_app.extensions["assessment_store"]
    return [store.insert(record) for record in demo_records()]


def register_commands(app) -> None:
    @app.cli.command("init-db")
    def init_db_command() -> None:
        """Create the database tables."""
        db.create_all()
        click.echo("Database tables created.")

    @app.cli.command("seed-demo")
    def seed_demo_command() -> None:
        """Insert demo assessments."""
        db.create_all()
        ids = run_seeds()
        click.echo(f"Inserted {len(ids)} demo assessments.")
