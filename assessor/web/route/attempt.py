"""Attempt evaluation API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from assessor.core import di
from assessor.evaluation import AttemptNotFound, Orchestrator, PersistenceError
from assessor.model import AttemptID, EvaluationSummary
from assessor.storage import attempt as attempt_storage
from assessor.storage import report as report_storage
from assessor.storage import score as score_storage

from ..view.attempt import AttemptResponse, ProctoringReportResponse, ProctoringSummaryResponse, ScoreRecordResponse, \
    TimelineEventResponse

router = APIRouter(prefix="/api/attempts", tags=["attempts"])


@router.post("/{attempt_id}/evaluate", operation_id="evaluate_attempt")
@di.inject
async def evaluate_attempt(
    attempt_id: AttemptID,
    rescore: bool = False,
    orchestrator: Orchestrator = Depends(di.Provide["evaluation.orchestrator"]),
) -> EvaluationSummary:
    """
    Score the attempt's fast answers and start background evaluation of the
    rest; poll the attempt until `evaluationStatus` is completed
    """
    try:
        return await orchestrator.evaluate(attempt_id, rescore=rescore)
    except AttemptNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attempt not found") from e
    except PersistenceError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Evaluation store unavailable, retry later"
        ) from e


@router.get("/{attempt_id}", operation_id="get_attempt")
@di.inject
def get_attempt(
    attempt_id: AttemptID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> AttemptResponse:
    with session.begin():
        attempt = attempt_storage.get(attempt_id, session=session)
        if attempt is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attempt not found")
        records = score_storage.find(attempt_id=attempt_id, session=session)

    summary = None
    if attempt.proctoring_summary is not None:
        summary = ProctoringSummaryResponse(**attempt.proctoring_summary.model_dump(by_alias=False))

    return AttemptResponse(
        attempt_id=attempt.attempt_id,
        status=attempt.status,
        evaluation_status=attempt.evaluation_status,
        total_score=attempt.total_score,
        max_score=attempt.max_score,
        integrity_score=attempt.integrity_score,
        proctoring_summary=summary,
        started_at=attempt.started_at,
        submitted_at=attempt.submitted_at,
        evaluated_at=attempt.evaluated_at,
        scores=[
            ScoreRecordResponse(
                score_id=r.score_id,
                answer_id=r.answer_id,
                score=r.score,
                max_score=r.max_score,
                integrity_score=r.integrity_score,
                evaluator=r.evaluator,
                summary=r.summary,
                fallback_reason=r.fallback_reason,
                feedback=r.feedback,
                evaluated_at=r.evaluated_at,
            )
            for r in records
        ],
    )


@router.get("/{attempt_id}/report", operation_id="get_proctoring_report")
@di.inject
def get_proctoring_report(
    attempt_id: AttemptID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> ProctoringReportResponse:
    """The proctoring report written when the attempt's evaluation completed."""
    with session.begin():
        report = report_storage.get(attempt_id, session=session)
    if report is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Proctoring report not found")

    return ProctoringReportResponse(
        report_id=report.report_id,
        attempt_id=report.attempt_id,
        integrity_score=report.integrity_score,
        total_violations=report.total_violations,
        events_timeline=[
            TimelineEventResponse(type=e.type, timestamp=e.timestamp, severity=e.severity)
            for e in report.events_timeline
        ],
        recommendations=report.recommendations,
        create_time=report.create_time,
    )
