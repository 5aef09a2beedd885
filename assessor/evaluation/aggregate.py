"""Attempt aggregate writer.

The attempt row is written twice per evaluation: an interim aggregate that
is advisory only, and a final aggregate recomputed from every score record
of the attempt once all background work has settled.
"""

from __future__ import annotations

import datetime
import logging
import math

from sqlalchemy.orm import Session

from assessor import integrity
from assessor.model import Attempt, AttemptID, AttemptStatus, EvaluationStatus, ViolationEvent
from assessor.storage import answer as answer_storage
from assessor.storage import attempt as attempt_storage
from assessor.storage import report as report_storage
from assessor.storage import score as score_storage

from .errors import AttemptNotFound

logger = logging.getLogger(__name__)


def write_interim(
    attempt_id: AttemptID,
    *,
    total_score: float,
    max_score: float,
    violations: list[ViolationEvent],
    submitted_at: datetime.datetime,
    session: Session,
) -> Attempt:
    attempt = _update(
        attempt_id,
        session,
        status=AttemptStatus.Submitted,
        evaluation_status=EvaluationStatus.InProgress,
        total_score=total_score,
        max_score=max_score,
        integrity_score=integrity.integrity_score(violations),
        proctoring_summary=integrity.build_summary(violations),
        submitted_at=submitted_at,
    )
    logger.info(
        "wrote interim aggregate",
        extra={"attempt_id": attempt_id, "total_score": total_score, "max_score": max_score},
    )
    return attempt


def write_final(
    attempt_id: AttemptID,
    *,
    violations: list[ViolationEvent],
    evaluated_at: datetime.datetime,
    session: Session,
) -> Attempt:
    """Sum every score record of the attempt and complete its evaluation.

    The evaluation stays `in_progress` if any answer is still unscored.
    """
    totals = score_storage.totals(attempt_id, session=session)
    answers = answer_storage.count(attempt_id, session=session)
    score = integrity.integrity_score(violations)

    if totals.count < answers:
        logger.warning(
            "attempt has unscored answers, not completing",
            extra={"attempt_id": attempt_id, "answers": answers, "scored": totals.count},
        )
        return _update(attempt_id, session, total_score=totals.score, max_score=totals.max_score)

    report = integrity.build_report(violations)
    report_storage.save(
        attempt_id,
        integrity_score=report.integrity_score,
        total_violations=report.total_violations,
        events_timeline=report.events_timeline,
        recommendations=report.recommendations,
        session=session,
    )
    attempt = _update(
        attempt_id,
        session,
        status=AttemptStatus.Evaluated,
        evaluation_status=EvaluationStatus.Completed,
        total_score=totals.score,
        max_score=totals.max_score,
        integrity_score=score,
        proctoring_summary=integrity.build_summary(violations),
        evaluated_at=evaluated_at,
    )
    logger.info(
        "wrote final aggregate",
        extra={
            "attempt_id": attempt_id,
            "total_score": totals.score,
            "max_score": totals.max_score,
            "integrity_score": score,
        },
    )
    return attempt


def write_empty(
    attempt_id: AttemptID,
    *,
    violations: list[ViolationEvent],
    evaluated_at: datetime.datetime,
    session: Session,
) -> Attempt:
    """An attempt without answers completes immediately at 0/0."""
    return _update(
        attempt_id,
        session,
        status=AttemptStatus.Evaluated,
        evaluation_status=EvaluationStatus.Completed,
        total_score=0.0,
        max_score=0.0,
        integrity_score=integrity.integrity_score(violations),
        proctoring_summary=integrity.build_summary(violations),
        evaluated_at=evaluated_at,
    )


def mark_failed(attempt_id: AttemptID, *, session: Session) -> bool:
    """Fail an evaluation that is `in_progress`; an evaluation in any other state is left as it is."""
    if attempt_storage.get(attempt_id, session=session) is None:
        raise AttemptNotFound(attempt_id)
    failed = attempt_storage.transition(
        attempt_id,
        from_status=EvaluationStatus.InProgress,
        to_status=EvaluationStatus.Failed,
        session=session,
    )
    if not failed:
        logger.info("evaluation not in progress, status left unchanged", extra={"attempt_id": attempt_id})
    return failed


def totals_match(attempt: Attempt, *, session: Session) -> bool:
    totals = score_storage.totals(attempt.attempt_id, session=session)
    return math.isclose(totals.score, attempt.total_score) and math.isclose(totals.max_score, attempt.max_score)


def _update(attempt_id: AttemptID, session: Session, **params: object) -> Attempt:
    attempt = attempt_storage.update(attempt_id, params, session=session)  # type: ignore[arg-type]
    if attempt is None:
        raise AttemptNotFound(attempt_id)
    return attempt
