"""Proctoring reports; one per attempt, replaced on every evaluation."""

from __future__ import annotations

import sqlalchemy as sqla

from assessor.core import di
from assessor.lib.sql import upsert
from assessor.model import AttemptID, ProctoringReport, ReportID, TimelineEvent

from . import Session
from .table import proctoring_reports


def get(attempt_id: AttemptID, *, session: Session = di.Provide["storage.persistent.session"]) -> ProctoringReport | None:
    stmt = sqla.select(proctoring_reports.__table__).where(proctoring_reports.attempt_id == attempt_id)
    row = session.execute(stmt).mappings().one_or_none()
    return ProctoringReport(**row) if row else None


def save(
    attempt_id: AttemptID,
    *,
    integrity_score: int,
    total_violations: int,
    events_timeline: list[TimelineEvent],
    recommendations: str,
    session: Session = di.Provide["storage.persistent.session"],
) -> ProctoringReport:
    upsert(
        session,
        proctoring_reports,
        {
            "report_id": ReportID(),
            "attempt_id": attempt_id,
            "integrity_score": integrity_score,
            "total_violations": total_violations,
            "events_timeline": [e.model_dump(mode="json") for e in events_timeline],
            "recommendations": recommendations,
        },
        index_elements=["attempt_id"],
        preserve=["report_id"],
    )
    session.flush()
    result = get(attempt_id, session=session)
    assert result is not None
    return result
