"""Tests for stuck-attempt recovery."""

from __future__ import annotations

import asyncio
import datetime
import typing as t

import pytest
import sqlalchemy as sqla
from sqlalchemy.orm import Session

from assessor.core.config.evaluation import SweepSettings
from assessor.evaluation import Orchestrator
from assessor.evaluation.sweep import retrigger, stuck_reason, sweep
from assessor.model import Answer, Assessment, AssessmentID, Attempt, AttemptID, AttemptStatus, EvaluationStatus, \
    Question
from assessor.storage import attempt as attempt_storage
from assessor.storage.table import attempts

from ..conftest import load_attempt

NOW = datetime.datetime(2026, 3, 2, 12, 0, tzinfo=datetime.UTC)


def attempt(
    *,
    started: int | None = 10,
    last_activity: int | None = None,
) -> Attempt:
    """An in-progress attempt started `started` minutes before NOW."""
    return Attempt(
        attempt_id=AttemptID(),
        assessment_id=AssessmentID(),
        status=AttemptStatus.InProgress,
        started_at=NOW - datetime.timedelta(minutes=started) if started is not None else None,
        last_activity_at=NOW - datetime.timedelta(minutes=last_activity) if last_activity is not None else None,
        create_time=NOW - datetime.timedelta(hours=2),
        update_time=NOW - datetime.timedelta(hours=2),
    )


class TestStuckReason(object):
    settings = SweepSettings()

    def reason(self, a: Attempt, *, duration: int | None = 60, answers: int = 0) -> str | None:
        return stuck_reason(a, duration_minutes=duration, answer_count=answers, settings=self.settings, now=NOW)

    def test_within_time(self) -> None:
        assert self.reason(attempt(started=10)) is None

    def test_time_expired(self) -> None:
        assert self.reason(attempt(started=61), answers=10) == "time_expired"

    def test_untimed_assessment_never_expires(self) -> None:
        assert self.reason(attempt(started=600, last_activity=1), duration=None) is None

    def test_abandoned(self) -> None:
        assert self.reason(attempt(started=45, last_activity=31), duration=None, answers=2) == "abandoned"

    def test_enough_answers_is_not_abandoned(self) -> None:
        assert self.reason(attempt(started=45, last_activity=31), duration=None, answers=3) is None

    def test_idle_falls_back_to_creation(self) -> None:
        assert self.reason(attempt(started=None), duration=None) == "abandoned"


@pytest.fixture
def answered_attempt(
    attempt_factory: t.Callable[..., Attempt],
    choice_question: Question,
    answer_factory: t.Callable[..., Answer],
) -> t.Callable[..., Attempt]:
    def create(**kwargs: t.Any) -> Attempt:
        a = attempt_factory(**kwargs)
        answer_factory(a.attempt_id, choice_question.question_id, {"selectedOptions": ["b"]})
        return a

    return create


def backdate(session: Session, attempt_id: AttemptID, minutes: int) -> None:
    with session.begin():
        session.execute(
            sqla.update(attempts)
            .where(attempts.attempt_id == attempt_id)
            .values(update_time=datetime.datetime.now(datetime.UTC) - datetime.timedelta(minutes=minutes))
        )


class TestSweep(object):
    def test_submits_and_evaluates_stuck_attempts(
        self,
        orchestrator_factory: t.Callable[..., Orchestrator],
        assessment_factory: t.Callable[..., Assessment],
        answered_attempt: t.Callable[..., Attempt],
        attempt_factory: t.Callable[..., Attempt],
        db_session: Session,
    ) -> None:
        now = datetime.datetime.now(datetime.UTC)
        untimed = assessment_factory(title="Take-home", duration_minutes=None)
        expired = answered_attempt(status=AttemptStatus.InProgress, started_at=now - datetime.timedelta(minutes=90))
        abandoned = attempt_factory(
            untimed.assessment_id,
            status=AttemptStatus.InProgress,
            started_at=now - datetime.timedelta(minutes=50),
            last_activity_at=now - datetime.timedelta(minutes=45),
        )
        active = answered_attempt(status=AttemptStatus.InProgress, started_at=now - datetime.timedelta(minutes=5))

        result = asyncio.run(sweep(orchestrator_factory(), SweepSettings()))

        assert sorted(result.submitted) == sorted([expired.attempt_id, abandoned.attempt_id])
        assert result.restarted == []
        assert result.failed == []

        a = load_attempt(db_session, expired.attempt_id)
        assert a.status is AttemptStatus.Evaluated
        assert a.evaluation_status is EvaluationStatus.Completed
        assert a.submitted_at is not None
        assert a.total_score == 10

        assert load_attempt(db_session, abandoned.attempt_id).evaluation_status is EvaluationStatus.Completed
        assert load_attempt(db_session, active.attempt_id).status is AttemptStatus.InProgress

    def test_restarts_stale_evaluations(
        self,
        orchestrator_factory: t.Callable[..., Orchestrator],
        answered_attempt: t.Callable[..., Attempt],
        db_session: Session,
    ) -> None:
        stale = answered_attempt()
        fresh = answered_attempt()
        with db_session.begin():
            for a in (stale, fresh):
                attempt_storage.update(
                    a.attempt_id, {"evaluation_status": EvaluationStatus.InProgress}, session=db_session
                )
        backdate(db_session, stale.attempt_id, minutes=45)

        result = asyncio.run(sweep(orchestrator_factory(), SweepSettings()))

        assert result.restarted == [stale.attempt_id]
        assert load_attempt(db_session, stale.attempt_id).evaluation_status is EvaluationStatus.Completed
        assert load_attempt(db_session, fresh.attempt_id).evaluation_status is EvaluationStatus.InProgress


class TestRetrigger(object):
    def test_evaluates_unfinished_attempts(
        self,
        orchestrator_factory: t.Callable[..., Orchestrator],
        answered_attempt: t.Callable[..., Attempt],
        db_session: Session,
    ) -> None:
        never = answered_attempt()
        failed = answered_attempt()
        with db_session.begin():
            attempt_storage.update(failed.attempt_id, {"evaluation_status": EvaluationStatus.Failed}, session=db_session)

        result = asyncio.run(retrigger(orchestrator_factory()))

        assert sorted(result.evaluated) == sorted([never.attempt_id, failed.attempt_id])
        assert result.failed == []
        for a in (never, failed):
            reloaded = load_attempt(db_session, a.attempt_id)
            assert reloaded.evaluation_status is EvaluationStatus.Completed
            assert reloaded.total_score == 10

    def test_repairs_mismatched_totals(
        self,
        orchestrator_factory: t.Callable[..., Orchestrator],
        answered_attempt: t.Callable[..., Attempt],
        db_session: Session,
    ) -> None:
        a = answered_attempt()
        orchestrator = orchestrator_factory()
        asyncio.run(orchestrator.evaluate(a.attempt_id))
        with db_session.begin():
            attempt_storage.update(a.attempt_id, {"total_score": 3.0}, session=db_session)

        result = asyncio.run(retrigger(orchestrator))

        assert result.evaluated == []
        assert result.repaired == [a.attempt_id]
        assert load_attempt(db_session, a.attempt_id).total_score == 10

    def test_consistent_attempts_are_left_alone(
        self,
        orchestrator_factory: t.Callable[..., Orchestrator],
        answered_attempt: t.Callable[..., Attempt],
    ) -> None:
        a = answered_attempt()
        orchestrator = orchestrator_factory()
        asyncio.run(orchestrator.evaluate(a.attempt_id))

        result = asyncio.run(retrigger(orchestrator))

        assert result == ([], [], [])
