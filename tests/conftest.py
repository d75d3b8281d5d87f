"""
Pytest configuration and fixtures

Every test gets its own file-backed SQLite database, so committed data
never leaks between tests and threads can share the store.
"""
import os
import tempfile
from datetime import datetime
from types import SimpleNamespace

# Point the import-time engine at a scratch file before the app is loaded
os.environ.setdefault(
    "DATABASE_URL", f"sqlite:///{os.path.join(tempfile.gettempdir(), 'levelup_test.db')}"
)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from levelup.core.clock import get_now
from levelup.core.config import Base, get_db
from levelup.core.security import create_access_token
from levelup.models import (
    Category,
    GoalTemplate,
    OnboardingQuestion,
    OnboardingQuestionWeight,
    User,
    UserGoal,
    UserPriority,
)

# Thursday
FIXED_NOW = datetime(2024, 3, 14, 10, 0)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'levelup.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------

@pytest.fixture
def seed(db):
    """
    Catalog shared by most tests.

    - 3 categories: health, work, relations
    - 13 enabled French questions, question i weighted 1.0 toward category (i-1) % 3,
      plus a -1.0 weight from Q13 toward work
    - 1 disabled French question and 1 English question
    - templates: walk (health, daily), inbox (work, daily),
      call (relations, weekly), read (relations, daily, 2 per day)
    - users alice and bob
    """
    health = Category(name="Santé")
    work = Category(name="Travail")
    relations = Category(name="Relations")
    db.add_all([health, work, relations])
    db.flush()
    categories = [health, work, relations]

    questions = []
    for i in range(1, 14):
        question = OnboardingQuestion(
            code=f"Q{i}", question=f"Question {i}", language="fr", sort_order=i
        )
        db.add(question)
        db.flush()
        db.add(
            OnboardingQuestionWeight(
                question_id=question.id, category_id=categories[(i - 1) % 3].id, weight=1.0
            )
        )
        questions.append(question)
    db.add(
        OnboardingQuestionWeight(question_id=questions[12].id, category_id=work.id, weight=-1.0)
    )

    disabled = OnboardingQuestion(
        code="Q_OFF", question="Retired question", language="fr", enabled=False, sort_order=99
    )
    english = OnboardingQuestion(code="Q_EN", question="English question", language="en")
    db.add_all([disabled, english])

    walk = GoalTemplate(title="Marcher 30 minutes", category_id=health.id, base_xp=40)
    inbox = GoalTemplate(title="Vider sa boîte mail", category_id=work.id, base_xp=40)
    call = GoalTemplate(
        title="Appeler un proche", category_id=relations.id, base_xp=40,
        frequency_type="weekly", week_start=1,
    )
    read = GoalTemplate(
        title="Lire 10 pages", category_id=relations.id, base_xp=10, max_per_period=2
    )
    db.add_all([walk, inbox, call, read])

    alice = User(username="alice", email="alice@example.com")
    bob = User(username="bob", email="bob@example.com")
    db.add_all([alice, bob])
    db.commit()

    return SimpleNamespace(
        health=health.id,
        work=work.id,
        relations=relations.id,
        questions=[q.id for q in questions],
        disabled_question=disabled.id,
        english_question=english.id,
        walk=walk.id,
        inbox=inbox.id,
        call=call.id,
        read=read.id,
        alice=alice.id,
        bob=bob.id,
    )


@pytest.fixture
def ranked_priorities(db, seed):
    """Alice prefers health (90) over work (70) over relations (10)."""
    db.add_all([
        UserPriority(user_id=seed.alice, category_id=seed.health, score=90.0),
        UserPriority(user_id=seed.alice, category_id=seed.work, score=70.0),
        UserPriority(user_id=seed.alice, category_id=seed.relations, score=10.0),
    ])
    db.commit()


@pytest.fixture
def make_goal(db):
    """Subscribe a user to a template, inheriting the template cadence unless overridden."""
    def _make_goal(user_id, template_id, **overrides):
        goal = UserGoal(user_id=user_id, template_id=template_id, **overrides)
        db.add(goal)
        db.commit()
        return goal.id
    return _make_goal


def answers_for(question_ids, value_for=lambda index: 3):
    return [
        {"question_id": qid, "value": value_for(index)}
        for index, qid in enumerate(question_ids)
    ]


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

@pytest.fixture
def clock():
    """Mutable request time. Set `clock.now` to move time forward."""
    return SimpleNamespace(now=FIXED_NOW)


@pytest.fixture
def client(session_factory, clock):
    from main import app

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_now] = lambda: clock.now
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user_id):
        token = create_access_token({"sub": str(user_id)})
        return {"Authorization": f"Bearer {token}"}
    return _headers
