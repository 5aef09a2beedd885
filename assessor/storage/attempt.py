from __future__ import annotations

import datetime
import typing as t

import sqlalchemy as sqla
from sqlalchemy import select

from assessor.core import di
from assessor.model import AssessmentID, Attempt, AttemptID, AttemptStatus, EvaluationStatus, ProctoringSummary

from . import Session
from .table import attempts


def get(key: AttemptID, session: Session = di.Provide["storage.persistent.session"]) -> Attempt | None:
    stmt = select(attempts.__table__).where(attempts.attempt_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return Attempt(**row) if row else None


def find(
    *,
    assessment_id: AssessmentID | None = None,
    status: AttemptStatus | None = None,
    evaluation_status: EvaluationStatus | t.Collection[EvaluationStatus] | None = None,
    updated_before: datetime.datetime | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Attempt, ...]:
    stmt = select(attempts.__table__).order_by(attempts.create_time)
    if assessment_id is not None:
        stmt = stmt.where(attempts.assessment_id == assessment_id)
    if status is not None:
        stmt = stmt.where(attempts.status == status)
    if isinstance(evaluation_status, EvaluationStatus):
        stmt = stmt.where(attempts.evaluation_status == evaluation_status)
    elif evaluation_status is not None:
        stmt = stmt.where(attempts.evaluation_status.in_(list(evaluation_status)))
    if updated_before is not None:
        stmt = stmt.where(attempts.update_time < updated_before)
    rows = session.execute(stmt).mappings().all()
    return tuple(Attempt(**row) for row in rows)


def create(params: AttemptCreateParams, session: Session = di.Provide["storage.persistent.session"]) -> Attempt:
    attempt = attempts(
        attempt_id=AttemptID(),
        assessment_id=params["assessment_id"],
        participant=params.get("participant"),
        status=params.get("status", AttemptStatus.NotStarted),
        started_at=params.get("started_at"),
        submitted_at=params.get("submitted_at"),
        last_activity_at=params.get("last_activity_at"),
    )
    session.add(attempt)
    session.flush()
    return get(attempt.attempt_id, session=session)  # type: ignore


def update(
    key: AttemptID,
    params: AttemptUpdateParams,
    session: Session = di.Provide["storage.persistent.session"],
) -> Attempt | None:
    """Apply `params` to the attempt; unlike most fields, timestamps may be cleared with an explicit None."""
    stmt = select(attempts).where(attempts.attempt_id == key)
    attempt = session.execute(stmt).scalar_one_or_none()
    if attempt is None:
        return None
    for field, value in params.items():
        actual_value: t.Any = value
        if isinstance(value, ProctoringSummary):
            actual_value = value.model_dump(mode="json")
        setattr(attempt, field, actual_value)
    session.flush()
    return get(key, session=session)


def transition(
    key: AttemptID,
    *,
    from_status: EvaluationStatus,
    to_status: EvaluationStatus,
    session: Session = di.Provide["storage.persistent.session"],
) -> bool:
    """Move the evaluation from `from_status` to `to_status`; False if it was in any other state."""
    stmt = (
        sqla.update(attempts)
        .where(attempts.attempt_id == key, attempts.evaluation_status == from_status)
        .values(evaluation_status=to_status)
    )
    result = session.execute(stmt, execution_options={"synchronize_session": False})
    return result.rowcount > 0  # type: ignore[attr-defined]


class AttemptCreateParams(t.TypedDict, total=False):
    assessment_id: t.Required[AssessmentID]
    participant: str | None
    status: AttemptStatus
    started_at: datetime.datetime | None
    submitted_at: datetime.datetime | None
    last_activity_at: datetime.datetime | None


class AttemptUpdateParams(t.TypedDict, total=False):
    status: AttemptStatus
    evaluation_status: EvaluationStatus
    total_score: float
    max_score: float
    integrity_score: int
    proctoring_summary: ProctoringSummary | None
    submitted_at: datetime.datetime | None
    evaluated_at: datetime.datetime | None
    last_activity_at: datetime.datetime | None
