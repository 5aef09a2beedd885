from __future__ import annotations

import typing as t

from sqlalchemy import select

from assessor.core import di
from assessor.model import Assessment, AssessmentID

from . import Session
from .table import assessments


def get(key: AssessmentID, session: Session = di.Provide["storage.persistent.session"]) -> Assessment | None:
    stmt = select(assessments.__table__).where(assessments.assessment_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return Assessment(**row) if row else None


def create(params: AssessmentCreateParams, session: Session = di.Provide["storage.persistent.session"]) -> Assessment:
    assessment = assessments(
        assessment_id=AssessmentID(),
        title=params["title"],
        duration_minutes=params.get("duration_minutes"),
    )
    session.add(assessment)
    session.flush()
    return get(assessment.assessment_id, session=session)  # type: ignore


class AssessmentCreateParams(t.TypedDict, total=False):
    title: t.Required[str]
    duration_minutes: int | None
