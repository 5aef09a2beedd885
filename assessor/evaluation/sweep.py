"""Recovery for attempts that never reached a completed evaluation."""

from __future__ import annotations

import datetime
import logging
import typing as t

from assessor.model import Attempt, AttemptID, AttemptStatus, EvaluationStatus
from assessor.storage import answer as answer_storage
from assessor.storage import assessment as assessment_storage
from assessor.storage import attempt as attempt_storage
from assessor.storage import violation as violation_storage

from . import aggregate
from .base import transaction
from .errors import PersistenceError
from .orchestrator import Orchestrator

if t.TYPE_CHECKING:
    from assessor.core.config.evaluation import SweepSettings

logger = logging.getLogger(__name__)


class SweepResult(t.NamedTuple):
    submitted: list[AttemptID]
    restarted: list[AttemptID]
    failed: list[AttemptID]


class RetriggerResult(t.NamedTuple):
    evaluated: list[AttemptID]
    repaired: list[AttemptID]
    failed: list[AttemptID]


def stuck_reason(
    attempt: Attempt,
    *,
    duration_minutes: int | None,
    answer_count: int,
    settings: SweepSettings,
    now: datetime.datetime,
) -> str | None:
    """Why an in-progress attempt should be submitted on the participant's behalf, if at all."""
    if attempt.started_at is not None and duration_minutes:
        if now > attempt.started_at + datetime.timedelta(minutes=duration_minutes):
            return "time_expired"

    last_seen = attempt.last_activity_at or attempt.started_at or attempt.create_time
    idle = now - last_seen
    if answer_count < settings.abandon_min_answers and idle > datetime.timedelta(minutes=settings.abandon_after_minutes):
        return "abandoned"
    return None


async def sweep(orchestrator: Orchestrator, settings: SweepSettings) -> SweepResult:
    """Submit expired or abandoned attempts and restart stale evaluations."""
    now = orchestrator.clock()
    submitted: list[AttemptID] = []
    with transaction(orchestrator.session_factory) as session:
        for attempt in attempt_storage.find(status=AttemptStatus.InProgress, session=session):
            assessment = assessment_storage.get(attempt.assessment_id, session=session)
            reason = stuck_reason(
                attempt,
                duration_minutes=assessment.duration_minutes if assessment else None,
                answer_count=answer_storage.count(attempt.attempt_id, session=session),
                settings=settings,
                now=now,
            )
            if reason is None:
                continue
            attempt_storage.update(
                attempt.attempt_id,
                {"status": AttemptStatus.Submitted, "submitted_at": now},
                session=session,
            )
            logger.info("submitted stuck attempt", extra={"attempt_id": attempt.attempt_id, "reason": reason})
            submitted.append(attempt.attempt_id)

        stale = attempt_storage.find(
            evaluation_status=EvaluationStatus.InProgress,
            updated_before=now - datetime.timedelta(minutes=settings.stale_evaluation_minutes),
            session=session,
        )
    restarted = [a.attempt_id for a in stale if a.attempt_id not in submitted]

    failed = await _evaluate_all(orchestrator, [*submitted, *restarted])
    return SweepResult(submitted, restarted, failed)


async def retrigger(orchestrator: Orchestrator) -> RetriggerResult:
    """
    Evaluate every submitted attempt whose evaluation never completed, then
    repair completed attempts whose totals disagree with their score records
    """
    with transaction(orchestrator.session_factory) as session:
        pending = attempt_storage.find(
            status=AttemptStatus.Submitted,
            evaluation_status=(EvaluationStatus.NotStarted, EvaluationStatus.InProgress, EvaluationStatus.Failed),
            session=session,
        )
        for attempt in pending:
            attempt_storage.update(
                attempt.attempt_id, {"evaluation_status": EvaluationStatus.NotStarted}, session=session
            )
        mismatched = [
            a
            for a in attempt_storage.find(evaluation_status=EvaluationStatus.Completed, session=session)
            if not aggregate.totals_match(a, session=session)
        ]

    evaluated = [a.attempt_id for a in pending]
    failed = await _evaluate_all(orchestrator, evaluated)

    repaired: list[AttemptID] = []
    for attempt in mismatched:
        try:
            with transaction(orchestrator.session_factory) as session:
                violations = list(violation_storage.find(attempt_id=attempt.attempt_id, session=session))
                aggregate.write_final(
                    attempt.attempt_id, violations=violations, evaluated_at=orchestrator.clock(), session=session
                )
        except PersistenceError:
            logger.exception("could not repair attempt aggregate", extra={"attempt_id": attempt.attempt_id})
            failed.append(attempt.attempt_id)
            continue
        logger.info(
            "repaired attempt aggregate",
            extra={"attempt_id": attempt.attempt_id, "total_score": attempt.total_score},
        )
        repaired.append(attempt.attempt_id)

    return RetriggerResult(evaluated, repaired, failed)


async def _evaluate_all(orchestrator: Orchestrator, attempt_ids: list[AttemptID]) -> list[AttemptID]:
    failed: list[AttemptID] = []
    for attempt_id in attempt_ids:
        try:
            await orchestrator.evaluate(attempt_id)
        except PersistenceError:
            # already logged and marked failed by the orchestrator
            failed.append(attempt_id)
    return failed
