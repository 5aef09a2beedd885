"""Proctoring violation ingestion.

Events are appended as they arrive and only consumed when the attempt is
evaluated.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from assessor.core import di
from assessor.model import AttemptID, ViolationEvent
from assessor.storage import attempt as attempt_storage
from assessor.storage import violation as violation_storage

from ..view.violation import ViolationListResponse, ViolationRequest, ViolationResponse

router = APIRouter(prefix="/api/attempts/{attempt_id}/violations", tags=["violations"])


@router.post("", operation_id="record_violation", status_code=status.HTTP_201_CREATED)
@di.inject
def record_violation(
    attempt_id: AttemptID,
    request: ViolationRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> ViolationResponse:
    with session.begin():
        if attempt_storage.get(attempt_id, session=session) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attempt not found")
        event = violation_storage.append(
            {
                "attempt_id": attempt_id,
                "violation_type": request.violation_type,
                "severity": request.severity,
                "occurred_at": request.occurred_at,
                "details": request.details,
            },
            session=session,
        )
    return _to_response(event)


@router.get("", operation_id="list_violations")
@di.inject
def list_violations(
    attempt_id: AttemptID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> ViolationListResponse:
    with session.begin():
        if attempt_storage.get(attempt_id, session=session) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attempt not found")
        events = violation_storage.find(attempt_id=attempt_id, session=session)
    return ViolationListResponse(violations=[_to_response(e) for e in events], total=len(events))


def _to_response(event: ViolationEvent) -> ViolationResponse:
    return ViolationResponse(
        violation_id=event.violation_id,
        attempt_id=event.attempt_id,
        violation_type=event.violation_type,
        severity=event.severity,
        occurred_at=event.occurred_at,
        details=event.details,
    )
