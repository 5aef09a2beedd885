"""Idempotent score store.

At most one record exists per answer. `record` inserts a new record or
replaces every scored column of the existing one in a single statement, so
retried and concurrent evaluations of the same answer converge on the last
write instead of duplicating rows.
"""

from __future__ import annotations

import datetime
import typing as t

import sqlalchemy as sqla

from assessor.core import di
from assessor.lib.sql import upsert
from assessor.model import AnswerID, AttemptID, ScoreRecord, ScoreRecordID

from . import Session
from .table import score_records


class ScoreTotals(t.NamedTuple):
    score: float
    max_score: float
    count: int


def get(answer_id: AnswerID, *, session: Session = di.Provide["storage.persistent.session"]) -> ScoreRecord | None:
    stmt = sqla.select(score_records.__table__).where(score_records.answer_id == answer_id)
    row = session.execute(stmt).mappings().one_or_none()
    return ScoreRecord(**row) if row else None


def find(
    *,
    attempt_id: AttemptID,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[ScoreRecord, ...]:
    stmt = (
        sqla.select(score_records.__table__)
        .where(score_records.attempt_id == attempt_id)
        .order_by(score_records.evaluated_at)
    )
    rows = session.execute(stmt).mappings().all()
    return tuple(ScoreRecord(**row) for row in rows)


def record(
    answer_id: AnswerID,
    *,
    attempt_id: AttemptID,
    score: float,
    max_score: float,
    integrity_score: int,
    evaluator: str,
    feedback: dict[str, t.Any],
    summary: str = "",
    fallback_reason: str | None = None,
    evaluated_at: datetime.datetime | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> ScoreRecord:
    """Insert or replace the score record for `answer_id`.

    The record keeps its original `score_id` when replaced.
    """
    upsert(
        session,
        score_records,
        {
            "score_id": ScoreRecordID(),
            "answer_id": answer_id,
            "attempt_id": attempt_id,
            "score": score,
            "max_score": max_score,
            "integrity_score": integrity_score,
            "evaluator": evaluator,
            "feedback": feedback,
            "summary": summary,
            "fallback_reason": fallback_reason,
            "evaluated_at": evaluated_at or datetime.datetime.now(datetime.UTC),
        },
        index_elements=["answer_id"],
        preserve=["score_id"],
    )
    session.flush()
    result = get(answer_id, session=session)
    assert result is not None
    return result


def totals(attempt_id: AttemptID, *, session: Session = di.Provide["storage.persistent.session"]) -> ScoreTotals:
    """Sum score and max score over every record belonging to the attempt."""
    stmt = sqla.select(
        sqla.func.coalesce(sqla.func.sum(score_records.score), 0.0),
        sqla.func.coalesce(sqla.func.sum(score_records.max_score), 0.0),
        sqla.func.count(),
    ).where(score_records.attempt_id == attempt_id)
    score, max_score, count = session.execute(stmt).one()
    return ScoreTotals(float(score), float(max_score), int(count))
