"""Append-only violation event log."""

from __future__ import annotations

import datetime
import typing as t

import sqlalchemy as sqla

from assessor.core import di
from assessor.model import AttemptID, ViolationEvent, ViolationID, ViolationSeverity

from . import Session
from .table import violations


def get(key: ViolationID, *, session: Session = di.Provide["storage.persistent.session"]) -> ViolationEvent | None:
    stmt = sqla.select(violations.__table__).where(violations.violation_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return ViolationEvent(**row) if row else None


def find(
    *,
    attempt_id: AttemptID,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[ViolationEvent, ...]:
    stmt = (
        sqla.select(violations.__table__)
        .where(violations.attempt_id == attempt_id)
        .order_by(violations.occurred_at, violations.violation_id)
    )
    rows = session.execute(stmt).mappings().all()
    return tuple(ViolationEvent(**row) for row in rows)


def append(params: ViolationCreateParams, session: Session = di.Provide["storage.persistent.session"]) -> ViolationEvent:
    violation = violations(
        violation_id=ViolationID(),
        attempt_id=params["attempt_id"],
        violation_type=params["violation_type"],
        occurred_at=params.get("occurred_at") or datetime.datetime.now(datetime.UTC),
        severity=params.get("severity", ViolationSeverity.Medium),
        details=params.get("details", {}),
    )
    session.add(violation)
    session.flush()
    return get(violation.violation_id, session=session)  # type: ignore


class ViolationCreateParams(t.TypedDict, total=False):
    attempt_id: t.Required[AttemptID]
    violation_type: t.Required[str]
    occurred_at: datetime.datetime | None
    severity: ViolationSeverity
    details: dict[str, t.Any]
