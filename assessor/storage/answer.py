from __future__ import annotations

import datetime
import typing as t

from sqlalchemy import func, select

from assessor.core import di
from assessor.model import Answer, AnswerID, AttemptID, QuestionID

from . import Session
from .table import answers


def get(key: AnswerID, session: Session = di.Provide["storage.persistent.session"]) -> Answer | None:
    stmt = select(answers.__table__).where(answers.answer_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return Answer(**row) if row else None


def find(*, attempt_id: AttemptID, session: Session = di.Provide["storage.persistent.session"]) -> tuple[Answer, ...]:
    stmt = select(answers.__table__).where(answers.attempt_id == attempt_id).order_by(answers.submitted_at)
    rows = session.execute(stmt).mappings().all()
    return tuple(Answer(**row) for row in rows)


def count(attempt_id: AttemptID, session: Session = di.Provide["storage.persistent.session"]) -> int:
    stmt = select(func.count()).select_from(answers).where(answers.attempt_id == attempt_id)
    return session.execute(stmt).scalar_one()


def create(params: AnswerCreateParams, session: Session = di.Provide["storage.persistent.session"]) -> Answer:
    answer = answers(
        answer_id=AnswerID(),
        attempt_id=params["attempt_id"],
        question_id=params["question_id"],
        content=params.get("content"),
        submitted_at=params.get("submitted_at") or datetime.datetime.now(datetime.UTC),
    )
    session.add(answer)
    session.flush()
    return get(answer.answer_id, session=session)  # type: ignore


class AnswerCreateParams(t.TypedDict, total=False):
    attempt_id: t.Required[AttemptID]
    question_id: t.Required[QuestionID]
    content: dict[str, t.Any] | list[t.Any] | str | None
    submitted_at: datetime.datetime | None
