"""Storage for interview analyses, one per interview answer."""

from __future__ import annotations

import typing as t

import sqlalchemy as sqla

from assessor.core import di
from assessor.lib.sql import upsert
from assessor.model import AnswerID, InterviewAnalysis

from . import Session
from .table import interview_analyses


def get(answer_id: AnswerID, *, session: Session = di.Provide["storage.persistent.session"]) -> InterviewAnalysis | None:
    stmt = sqla.select(interview_analyses.__table__).where(interview_analyses.answer_id == answer_id)
    row = session.execute(stmt).mappings().one_or_none()
    return InterviewAnalysis(**row) if row else None


def save(
    answer_id: AnswerID,
    params: InterviewAnalysisParams,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> InterviewAnalysis:
    upsert(session, interview_analyses, {"answer_id": answer_id, **params}, index_elements=["answer_id"])
    session.flush()
    result = get(answer_id, session=session)
    assert result is not None
    return result


def delete(answer_id: AnswerID, *, session: Session = di.Provide["storage.persistent.session"]) -> bool:
    stmt = sqla.delete(interview_analyses).where(interview_analyses.answer_id == answer_id)
    result = session.execute(stmt)
    return result.rowcount > 0  # type: ignore[attr-defined]


class InterviewAnalysisParams(t.TypedDict, total=False):
    overall_score: t.Required[int]
    communication_score: t.Required[int]
    technical_score: t.Required[int]
    behavioral_score: t.Required[int]
    conversation_quality_score: int | None
    insights: dict[str, t.Any]
    competency_analysis: dict[str, t.Any]
    recommendations: list[str]
