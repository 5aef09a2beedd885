from __future__ import annotations

import typing as t

from sqlalchemy import select

from assessor.core import di
from assessor.model import AssessmentID, Question, QuestionID, QuestionType

from . import Session
from .table import questions


def get(key: QuestionID, session: Session = di.Provide["storage.persistent.session"]) -> Question | None:
    stmt = select(questions.__table__).where(questions.question_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return Question(**row) if row else None


def find(
    *,
    assessment_id: AssessmentID | None = None,
    question_ids: t.Collection[QuestionID] | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Question, ...]:
    stmt = select(questions.__table__).order_by(questions.position)
    if assessment_id is not None:
        stmt = stmt.where(questions.assessment_id == assessment_id)
    if question_ids is not None:
        stmt = stmt.where(questions.question_id.in_(list(question_ids)))
    rows = session.execute(stmt).mappings().all()
    return tuple(Question(**row) for row in rows)


def create(params: QuestionCreateParams, session: Session = di.Provide["storage.persistent.session"]) -> Question:
    question_type = params["question_type"]
    question = questions(
        question_id=QuestionID(),
        assessment_id=params["assessment_id"],
        question_type=question_type.value if isinstance(question_type, QuestionType) else question_type,
        points=params.get("points", 0),
        config=params.get("config", {}),
        position=params.get("position", 0),
    )
    session.add(question)
    session.flush()
    return get(question.question_id, session=session)  # type: ignore


class QuestionCreateParams(t.TypedDict, total=False):
    assessment_id: t.Required[AssessmentID]
    question_type: t.Required[QuestionType | str]
    points: int
    config: dict[str, t.Any]
    position: int
