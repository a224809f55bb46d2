import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.orm import selectinload
from sqlalchemy.pool import StaticPool

from quizapp.auth.jwt import create_access_token, user_claims
from quizapp.database import Base, get_db
from quizapp.main import app
from quizapp.models import (
    User, Quiz, Question, QuestionOption, QuizSubmission,
    QuizVisibility, SubmissionStatus,
)


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict:
    token = create_access_token(user_claims(user))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers():
    return auth_headers


async def create_user(session, name="Alice", email="alice@example.com") -> User:
    user = User(name=name, email=email, password_hash="not-a-real-hash")
    session.add(user)
    await session.commit()
    return user


async def create_quiz(session, creator, questions, **fields) -> Quiz:
    """
    `questions` is a list of (question_type, points, [(option_text, is_correct), ...]).
    Returns the quiz with questions and options loaded.
    """
    fields.setdefault("title", "General Knowledge")
    fields.setdefault("is_published", True)
    fields.setdefault("visibility", QuizVisibility.PUBLIC)

    quiz = Quiz(creator_id=creator.id, total_questions=len(questions), **fields)
    session.add(quiz)
    await session.flush()

    for position, (qtype, points, options) in enumerate(questions, start=1):
        question = Question(
            quiz_id=quiz.id,
            question_text=f"Question {position}",
            question_type=qtype,
            points=points,
            position=position,
        )
        question.options = [
            QuestionOption(option_text=text, is_correct=correct, position=i)
            for i, (text, correct) in enumerate(options, start=1)
        ]
        session.add(question)

    await session.commit()

    result = await session.execute(
        select(Quiz)
        .options(selectinload(Quiz.questions).selectinload(Question.options))
        .where(Quiz.id == quiz.id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def create_submission(
    session,
    quiz,
    user=None,
    status=SubmissionStatus.IN_PROGRESS,
    score=0,
    total_points=0,
    submitted_at=None,
    created_at=None,
    name=None,
    email=None,
) -> QuizSubmission:
    submission = QuizSubmission(
        quiz_id=quiz.id,
        user_id=user.id if user else None,
        submitted_by_name=name,
        submitted_by_email=email,
        status=status,
        score=score,
        total_points=total_points,
        submitted_at=submitted_at,
        created_at=created_at or datetime.utcnow() - timedelta(minutes=5),
    )
    session.add(submission)
    await session.commit()
    return submission


@pytest.fixture
def make_user():
    return create_user


@pytest.fixture
def make_quiz():
    return create_quiz


@pytest.fixture
def make_submission():
    return create_submission
