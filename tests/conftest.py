"""Shared pytest fixtures.

Each test gets its own application backed by a temporary SQLite file.
A file (rather than ``sqlite://``) is used so that the background
writer's thread opens its own connection.
"""
from __future__ import annotations

import pytest

from wellbeing_quiz import create_app, db
from wellbeing_quiz.models import Answer


def make_answers(*values: int) -> list[Answer]:
    """Build answers with question ids 1..n for the given values."""
    return [
        Answer(
            question_id=index + 1,
            question_text=f"Question {index + 1}",
            answer_text=f"Answer {value}",
            answer_value=value,
        )
        for index, value in enumerate(values)
    ]


def answer_payload(*values: int) -> list[dict]:
    return [answer.to_dict() for answer in make_answers(*values)]


@pytest.fixture()
def app_factory(tmp_path):
    created = []

    def factory(**overrides):
        config = {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'test.db'}",
            "QUOTE_API_URL": None,
        }
        config.update(overrides)
        app = create_app(config)
        with app.app_context():
            db.create_all()
        created.append(app)
        return app

    yield factory

    for app in created:
        app.extensions["assessment_writer"].shutdown()
        with app.app_context():
            db.session.remove()
            db.engine.dispose()


@pytest.fixture()
def app(app_factory):
    return app_factory()


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture()
def store(app):
    return app.extensions["assessment_store"]
