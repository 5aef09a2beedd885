"""Pytest fixtures for assessor tests.

Every test gets its own SQLite database file, so sessions opened by the code
under test (the orchestrator opens one per step) and by the test itself see
the same data without sharing a connection.

Usage:
    def test_something(attempt_factory, answer_factory, question_factory):
        question = question_factory(question_type=QuestionType.MultipleChoice)
        attempt = attempt_factory(question.assessment_id)
        answer_factory(attempt.attempt_id, question.question_id, {"selectedOptions": ["a"]})
"""

from __future__ import annotations

import asyncio
import datetime
import os
import typing as t
from pathlib import Path

import pydantic as p
import pytest
import sqlalchemy as sqla
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

import assessor
import assessor.lib.json as json
from assessor.core import AssessorContainer, TimestampProvider
from assessor.core.config import EvaluationSettings
from assessor.core.container.storage import provide_session_factory, SessionFactory
from assessor.evaluation import InterviewIntelligence, Orchestrator, StrategyRegistry
from assessor.evaluation.registry import create_registry
from assessor.llm import ScoreRequest
from assessor.model import Answer, Assessment, AssessmentID, Attempt, AttemptID, AttemptStatus, \
    DeploymentEnvironment, Question, QuestionID, QuestionType, ViolationEvent
from assessor.storage import answer as answer_storage
from assessor.storage import assessment as assessment_storage
from assessor.storage import attempt as attempt_storage
from assessor.storage import question as question_storage
from assessor.storage import violation as violation_storage
from assessor.storage.table import metadata

Root = Path(os.path.dirname(assessor.__file__)).parent


class StubScorer(object):
    """An external scorer that replies from canned data.

    `replies` maps template names to a reply; `default` answers every other
    template. A reply may be a dict, an exception instance (raised), or a
    callable taking the request. `delay` is slept before replying.
    """

    def __init__(
        self,
        replies: dict[str, t.Any] | None = None,
        *,
        default: t.Any = None,
        delay: float = 0.0,
    ) -> None:
        self.replies = replies or {}
        self.default = default
        self.delay = delay
        self.requests: list[ScoreRequest] = []

    async def score(self, request: ScoreRequest) -> dict[str, t.Any]:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        reply = self.replies.get(request.template, self.default)
        if isinstance(reply, BaseException):
            raise reply
        if callable(reply):
            return reply(request)
        if reply is None:
            raise AssertionError(f"no canned reply for {request.template}")
        return reply


@pytest.fixture(scope="session")
def container() -> t.Generator[AssessorContainer]:
    """Boot the DI container once per test session in the Test environment."""
    ct = AssessorContainer()

    AssessorContainer.boot(
        ct,
        debug=True,
        env=DeploymentEnvironment.Test,
        config_root=p.FileUrl(f"file://{Root}/config"),
        override=(),
    )

    yield ct

    ct.shutdown_resources()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "assessor.db"


@pytest.fixture
def engine(db_path: Path) -> t.Generator[sqla.Engine]:
    engine = sqla.create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
        json_serializer=json.dumps,
        json_deserializer=json.loads,
    )
    metadata.create_all(engine)

    yield engine

    engine.dispose()


@pytest.fixture
def session_factory(engine: sqla.Engine) -> SessionFactory:
    return provide_session_factory(engine)


@pytest.fixture
def db_session(session_factory: SessionFactory) -> t.Generator[Session]:
    """A session for arranging and inspecting data; callers open their own transactions."""
    session = session_factory()

    yield session

    session.close()


@pytest.fixture
def utcnow() -> TimestampProvider:
    """Provide a timestamp provider for tests."""
    return lambda: datetime.datetime.now(datetime.UTC)


@pytest.fixture
def evaluation_settings() -> EvaluationSettings:
    return EvaluationSettings(
        scorer={"timeout_seconds": 1, "max_retries": 0, "backoff_seconds": 0},
        interview={"max_polls": 5, "poll_interval_seconds": 0},
    )


@pytest.fixture
def registry_factory(
    session_factory: SessionFactory, evaluation_settings: EvaluationSettings
) -> t.Callable[..., StrategyRegistry]:
    """Build the production registry around stub scorers."""

    def create(scorer: t.Any = None, interview_scorer: t.Any = None) -> StrategyRegistry:
        scorer = scorer or StubScorer()
        intelligence = InterviewIntelligence(interview_scorer or scorer, session_factory)
        return create_registry(scorer, intelligence, session_factory, evaluation_settings)

    return create


@pytest.fixture
def orchestrator_factory(
    registry_factory: t.Callable[..., StrategyRegistry],
    session_factory: SessionFactory,
    utcnow: TimestampProvider,
) -> t.Callable[..., Orchestrator]:
    def create(scorer: t.Any = None, interview_scorer: t.Any = None) -> Orchestrator:
        return Orchestrator(registry_factory(scorer, interview_scorer), session_factory, clock=utcnow)

    return create


@pytest.fixture
def assessment_factory(db_session: Session) -> t.Callable[..., Assessment]:
    def create_assessment(title: str = "Backend Engineer Screen", duration_minutes: int | None = 60) -> Assessment:
        with db_session.begin():
            return assessment_storage.create(
                {"title": title, "duration_minutes": duration_minutes},
                session=db_session,
            )

    return create_assessment


@pytest.fixture
def test_assessment(assessment_factory: t.Callable[..., Assessment]) -> Assessment:
    return assessment_factory()


@pytest.fixture
def question_factory(db_session: Session, test_assessment: Assessment) -> t.Callable[..., Question]:
    """Factory for questions of the test assessment.

    Usage:
        question = question_factory(QuestionType.Coding, points=20, config={"language": "python"})
    """

    def create_question(
        question_type: QuestionType | str = QuestionType.MultipleChoice,
        *,
        points: int = 10,
        config: dict[str, t.Any] | None = None,
        position: int = 0,
        assessment_id: AssessmentID | None = None,
    ) -> Question:
        with db_session.begin():
            return question_storage.create(
                {
                    "assessment_id": assessment_id or test_assessment.assessment_id,
                    "question_type": question_type,
                    "points": points,
                    "config": config or {},
                    "position": position,
                },
                session=db_session,
            )

    return create_question


@pytest.fixture
def choice_question(question_factory: t.Callable[..., Question]) -> Question:
    """A single-answer choice question worth 10 points; option `b` is correct."""
    return question_factory(
        QuestionType.MultipleChoice,
        points=10,
        config={
            "question": "Which HTTP status means Not Found?",
            "options": [
                {"id": "a", "text": "400", "isCorrect": False},
                {"id": "b", "text": "404", "isCorrect": True},
                {"id": "c", "text": "500", "isCorrect": False},
            ],
        },
    )


@pytest.fixture
def attempt_factory(db_session: Session, test_assessment: Assessment) -> t.Callable[..., Attempt]:
    def create_attempt(
        assessment_id: AssessmentID | None = None,
        *,
        status: AttemptStatus = AttemptStatus.Submitted,
        started_at: datetime.datetime | None = None,
        submitted_at: datetime.datetime | None = None,
        last_activity_at: datetime.datetime | None = None,
        participant: str | None = "candidate@example.com",
    ) -> Attempt:
        now = datetime.datetime.now(datetime.UTC)
        with db_session.begin():
            return attempt_storage.create(
                {
                    "assessment_id": assessment_id or test_assessment.assessment_id,
                    "participant": participant,
                    "status": status,
                    "started_at": started_at or now - datetime.timedelta(minutes=20),
                    "submitted_at": submitted_at,
                    "last_activity_at": last_activity_at,
                },
                session=db_session,
            )

    return create_attempt


@pytest.fixture
def test_attempt(attempt_factory: t.Callable[..., Attempt]) -> Attempt:
    return attempt_factory()


@pytest.fixture
def answer_factory(db_session: Session) -> t.Callable[..., Answer]:
    def create_answer(attempt_id: AttemptID, question_id: QuestionID, content: t.Any = None) -> Answer:
        with db_session.begin():
            return answer_storage.create(
                {"attempt_id": attempt_id, "question_id": question_id, "content": content},
                session=db_session,
            )

    return create_answer


@pytest.fixture
def violation_factory(db_session: Session) -> t.Callable[..., ViolationEvent]:
    def create_violation(
        attempt_id: AttemptID,
        violation_type: str = "tab_switch",
        occurred_at: datetime.datetime | None = None,
        details: dict[str, t.Any] | None = None,
    ) -> ViolationEvent:
        with db_session.begin():
            return violation_storage.append(
                {
                    "attempt_id": attempt_id,
                    "violation_type": violation_type,
                    "occurred_at": occurred_at,
                    "details": details or {},
                },
                session=db_session,
            )

    return create_violation


def load_attempt(session: Session, attempt_id: AttemptID) -> Attempt:
    with session.begin():
        attempt = attempt_storage.get(attempt_id, session=session)
    assert attempt is not None
    return attempt


@pytest.fixture
def app(container: AssessorContainer) -> FastAPI:
    """Create the FastAPI application with the booted container wired in."""
    from assessor.core.config.web import WebSettings
    from assessor.web.main import _create_app  # pyright: ignore[reportPrivateUsage]

    container.wire(
        modules=[
            "assessor.web.main",
            "assessor.web.route.attempt",
            "assessor.web.route.violation",
        ]
    )
    return _create_app(config=WebSettings(**container.config.web()))


@pytest.fixture
def client(
    app: FastAPI,
    container: AssessorContainer,
    session_factory: SessionFactory,
    orchestrator_factory: t.Callable[..., Orchestrator],
) -> t.Generator[TestClient]:
    """A TestClient whose requests use the per-test database and stub scorers."""
    persistent = container.storage().persistent()
    evaluation = container.evaluation()
    persistent.session_factory.override(session_factory)
    evaluation.orchestrator.override(orchestrator_factory())

    with TestClient(app) as test_client:
        yield test_client

    evaluation.orchestrator.reset_override()
    persistent.session_factory.reset_override()
