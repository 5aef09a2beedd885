"""Evaluation orchestrator.

For one attempt: fast answers are scored inline on the triggering call, slow
answers are fanned out as background tasks that each own one answer, an
interim aggregate is written, and a supervisory task joins every background
task before writing the final aggregate.

`evaluation_status` moves `not_started -> in_progress -> completed`; it
becomes `failed` only when the store fails. Evaluator failures never fail an
evaluation, they are recorded as zero or fallback scores.
"""

from __future__ import annotations

import asyncio
import logging
import typing as t
from dataclasses import dataclass

from sqlalchemy.orm import Session

from assessor import integrity
from assessor.core.provider import TimestampProvider, utcnow
from assessor.model import Answer, AnswerID, Attempt, AttemptID, EvaluationStatus, EvaluationSummary, Question, \
    QuestionID, ScoreRecord, ViolationEvent
from assessor.storage import answer as answer_storage
from assessor.storage import attempt as attempt_storage
from assessor.storage import question as question_storage
from assessor.storage import score as score_storage
from assessor.storage import violation as violation_storage

from . import aggregate
from .base import EvaluationResult, Evaluator, SessionFactory, transaction
from .errors import AttemptNotFound, PersistenceError
from .registry import StrategyRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkItem:
    answer: Answer
    question: Question
    evaluator: Evaluator


@dataclass(frozen=True)
class Plan:
    attempt: Attempt
    violations: list[ViolationEvent]
    fast: list[WorkItem]
    slow: list[WorkItem]
    # answers already scored by an earlier run
    reused: list[ScoreRecord]
    answer_count: int


class Orchestrator(object):
    def __init__(
        self,
        registry: StrategyRegistry,
        session_factory: SessionFactory,
        *,
        clock: TimestampProvider = utcnow,
    ) -> None:
        self.registry = registry
        self.session_factory = session_factory
        self.clock = clock
        self._tasks: set[asyncio.Task[t.Any]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def evaluate(self, attempt_id: AttemptID, *, rescore: bool = False) -> EvaluationSummary:
        """Trigger evaluation of an attempt.

        Returns once fast answers are scored and, if any answer is slow, the
        interim aggregate is written. A completed attempt is returned as
        stored unless `rescore` is set.

        Raises:
            AttemptNotFound: no such attempt
            PersistenceError: the store failed; an evaluation already in progress is marked failed
                and may be triggered again
        """
        try:
            return await self._evaluate(attempt_id, rescore)
        except PersistenceError:
            logger.exception("evaluation failed on store error", extra={"attempt_id": attempt_id})
            self._mark_failed(attempt_id)
            raise

    async def drain(self) -> None:
        """Wait until every background and supervisory task has settled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _evaluate(self, attempt_id: AttemptID, rescore: bool) -> EvaluationSummary:
        with transaction(self.session_factory) as session:
            attempt = attempt_storage.get(attempt_id, session=session)
            if attempt is None:
                raise AttemptNotFound(attempt_id)
            if attempt.evaluation_status is EvaluationStatus.Completed and not rescore:
                logger.info("attempt already evaluated", extra={"attempt_id": attempt_id})
                return summarize(attempt, background=0)
            plan = self._plan(attempt, rescore, session=session)

        if plan.answer_count == 0:
            with transaction(self.session_factory) as session:
                attempt = aggregate.write_empty(
                    attempt_id, violations=plan.violations, evaluated_at=self.clock(), session=session
                )
            logger.info("attempt has no answers", extra={"attempt_id": attempt_id})
            return summarize(attempt, background=0)

        with transaction(self.session_factory) as session:
            attempt_storage.update(attempt_id, {"evaluation_status": EvaluationStatus.InProgress}, session=session)

        score = integrity.integrity_score(plan.violations)
        logger.info(
            "evaluating attempt",
            extra={
                "attempt_id": attempt_id,
                "fast": len(plan.fast),
                "slow": len(plan.slow),
                "reused": len(plan.reused),
                "integrity_score": score,
            },
        )

        fast_total = sum(r.score for r in plan.reused)
        for item in plan.fast:
            record = await self._score(item, score)
            fast_total += record.score

        if not plan.slow:
            with transaction(self.session_factory) as session:
                attempt = aggregate.write_final(
                    attempt_id, violations=plan.violations, evaluated_at=self.clock(), session=session
                )
            return summarize(attempt, background=0)

        max_score = float(sum(item.question.points for item in [*plan.fast, *plan.slow]))
        max_score += sum(r.max_score for r in plan.reused)
        with transaction(self.session_factory) as session:
            attempt = aggregate.write_interim(
                attempt_id,
                total_score=fast_total,
                max_score=max_score,
                violations=plan.violations,
                submitted_at=plan.attempt.submitted_at or self.clock(),
                session=session,
            )

        workers = [self._spawn(self._score(item, score), f"evaluate:{item.answer.answer_id}") for item in plan.slow]
        self._spawn(self._finalize(attempt_id, workers), f"finalize:{attempt_id}")
        return summarize(attempt, background=len(workers))

    def _plan(self, attempt: Attempt, rescore: bool, *, session: Session) -> Plan:
        answers = answer_storage.find(attempt_id=attempt.attempt_id, session=session)
        violations = list(violation_storage.find(attempt_id=attempt.attempt_id, session=session))
        questions: dict[QuestionID, Question] = {
            q.question_id: q
            for q in question_storage.find(question_ids={a.question_id for a in answers}, session=session)
        }
        existing: dict[AnswerID, ScoreRecord] = {}
        if not rescore:
            existing = {r.answer_id: r for r in score_storage.find(attempt_id=attempt.attempt_id, session=session)}

        fast: list[WorkItem] = []
        slow: list[WorkItem] = []
        reused: list[ScoreRecord] = []
        for answer in answers:
            if (record := existing.get(answer.answer_id)) is not None:
                reused.append(record)
                continue
            question = questions[answer.question_id]
            evaluator = self.registry.resolve(question, answer)
            (fast if evaluator.is_fast else slow).append(WorkItem(answer, question, evaluator))

        return Plan(attempt, violations, fast, slow, reused, len(answers))

    async def _score(self, item: WorkItem, integrity_score: int) -> ScoreRecord:
        """Evaluate one answer and record its score; only store errors escape."""
        result: EvaluationResult = await item.evaluator.settle(item.answer, item.question)
        with transaction(self.session_factory) as session:
            record = score_storage.record(
                item.answer.answer_id,
                attempt_id=item.answer.attempt_id,
                score=result.score,
                max_score=result.max_score,
                integrity_score=integrity_score,
                evaluator=item.evaluator.name,
                feedback=result.feedback,
                summary=result.summary,
                fallback_reason=result.fallback_reason,
                evaluated_at=self.clock(),
                session=session,
            )
        logger.info(
            "recorded score",
            extra={
                "attempt_id": item.answer.attempt_id,
                "answer_id": item.answer.answer_id,
                "evaluator": item.evaluator.name,
                "score": record.score,
                "max_score": record.max_score,
                "fallback_reason": record.fallback_reason,
            },
        )
        return record

    async def _finalize(self, attempt_id: AttemptID, workers: list[asyncio.Task[ScoreRecord]]) -> Attempt | None:
        results = await asyncio.gather(*workers, return_exceptions=True)
        if failures := [r for r in results if isinstance(r, BaseException)]:
            for failure in failures:
                logger.error(
                    "background evaluation failed",
                    extra={"attempt_id": attempt_id, "error": f"{type(failure).__name__}: {failure}"},
                )
            self._mark_failed(attempt_id)
            return None

        try:
            with transaction(self.session_factory) as session:
                violations = list(violation_storage.find(attempt_id=attempt_id, session=session))
                return aggregate.write_final(
                    attempt_id, violations=violations, evaluated_at=self.clock(), session=session
                )
        except PersistenceError:
            logger.exception("final aggregate failed", extra={"attempt_id": attempt_id})
            self._mark_failed(attempt_id)
            return None

    def _spawn(self, coro: t.Coroutine[t.Any, t.Any, t.Any], name: str) -> asyncio.Task[t.Any]:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _mark_failed(self, attempt_id: AttemptID) -> None:
        try:
            with transaction(self.session_factory) as session:
                aggregate.mark_failed(attempt_id, session=session)
        except (PersistenceError, AttemptNotFound):
            logger.exception("could not mark evaluation failed", extra={"attempt_id": attempt_id})


def summarize(attempt: Attempt, *, background: int) -> EvaluationSummary:
    return EvaluationSummary(
        attempt_id=attempt.attempt_id,
        total_score=attempt.total_score,
        max_score=attempt.max_score,
        integrity_score=attempt.integrity_score,
        background_task_count=background,
        background_processing=background > 0,
        evaluation_status=attempt.evaluation_status,
    )
