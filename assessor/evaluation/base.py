"""The evaluator contract.

An evaluator scores one answer against its question. `evaluate` may raise
any `EvaluationError`; `settle` never does: structural problems become a
zero score and every other failure becomes the evaluator's fallback score,
with the reason carried in the feedback.
"""

from __future__ import annotations

import abc
import contextlib
import logging
import math
import typing as t
from dataclasses import dataclass, field

import pydantic as p
import sqlalchemy.exc
from sqlalchemy.orm import Session

from assessor.lib.util import clamp
from assessor.llm import ExternalScorer, ScoreRequest
from assessor.model import Answer, Question

from .errors import EvaluationError, MalformedScorerResponse, PersistenceError, StructuralError

logger = logging.getLogger(__name__)

SessionFactory = t.Callable[[], Session]
TModel = t.TypeVar("TModel", bound=p.BaseModel)

# 0-100 rating as returned by the scorer; out-of-range values are clamped, NaN and infinities rejected
Percent = t.Annotated[float, p.Field(allow_inf_nan=False), p.AfterValidator(lambda v: clamp(v, 0.0, 100.0))]


@dataclass(frozen=True)
class EvaluationResult:
    score: float
    max_score: float
    feedback: dict[str, t.Any] = field(default_factory=dict)
    summary: str = ""
    fallback_reason: str | None = None


def round_score(value: float) -> int:
    """Round half up, so 2.5 points become 3 rather than 2."""
    return math.floor(value + 0.5)


@contextlib.contextmanager
def transaction(session_factory: SessionFactory) -> t.Generator[Session]:
    """A short-lived session inside a single transaction; store failures surface as `PersistenceError`."""
    try:
        with session_factory() as session, session.begin():
            yield session
    except sqlalchemy.exc.SQLAlchemyError as e:
        raise PersistenceError(str(e)) from e


class Evaluator(abc.ABC):
    name: t.ClassVar[str]
    # fast evaluators run inline on the triggering call
    is_fast: t.ClassVar[bool] = False

    fallback_ratio: float = 0.0

    @abc.abstractmethod
    async def evaluate(self, answer: Answer, question: Question) -> EvaluationResult: ...

    async def settle(self, answer: Answer, question: Question) -> EvaluationResult:
        try:
            return await self.evaluate(answer, question)
        except PersistenceError:
            raise
        except StructuralError as e:
            logger.warning(
                "answer is structurally invalid",
                extra={"answer_id": answer.answer_id, "evaluator": self.name, "error": str(e)},
            )
            return self.structural(question, e)
        except EvaluationError as e:
            logger.warning(
                "evaluation degraded to fallback",
                extra={"answer_id": answer.answer_id, "evaluator": self.name, "reason": e.reason, "error": str(e)},
            )
            return self.fallback(question, e.reason, str(e))
        except Exception as e:
            logger.exception(
                "evaluator failed unexpectedly",
                extra={"answer_id": answer.answer_id, "evaluator": self.name},
            )
            return self.fallback(question, "error", f"{type(e).__name__}: {e}")

    def structural(self, question: Question, error: StructuralError) -> EvaluationResult:
        return EvaluationResult(
            score=0.0,
            max_score=float(question.points),
            feedback={"evaluation_method": self.name, "error": str(error), "reason": error.reason},
            summary=f"structural error: {error}",
        )

    def fallback(self, question: Question, reason: str, detail: str = "") -> EvaluationResult:
        summary = f"fallback applied: {reason}"
        return EvaluationResult(
            score=float(round_score(question.points * self.fallback_ratio)),
            max_score=float(question.points),
            feedback={
                "evaluation_method": self.name,
                "fallback": True,
                "fallback_ratio": self.fallback_ratio,
                "reason": reason,
                "detail": detail,
                "summary": summary,
            },
            summary=summary,
            fallback_reason=reason,
        )


class ModelBackedEvaluator(Evaluator):
    """Base for evaluators that delegate judgement to the external scorer."""

    template: t.ClassVar[str]

    def __init__(self, scorer: ExternalScorer, *, fallback_ratio: float = 0.0) -> None:
        self.scorer = scorer
        self.fallback_ratio = fallback_ratio

    async def request(self, schema: type[TModel], **context: t.Any) -> TModel:
        data = await self.scorer.score(ScoreRequest(template=self.template, context=context))
        try:
            return schema.model_validate(data)
        except p.ValidationError as e:
            raise MalformedScorerResponse(f"unexpected {schema.__name__}: {e.error_count()} validation error(s)") from e


def answer_text(answer: Answer) -> str:
    content = answer.content
    if isinstance(content, dict):
        content = content.get("text", content.get("answer"))
    if content is None:
        return ""
    if not isinstance(content, str):
        raise StructuralError("free-text answer must be a string")
    return content


def answer_code(answer: Answer, question: Question, default_language: str = "javascript") -> tuple[str, str]:
    """Return `(code, language)` from a single-blob or single-file answer."""
    content = answer.content
    language = question.config.get("language") or default_language
    if isinstance(content, str):
        return content, language
    if not isinstance(content, dict):
        raise StructuralError("code answer must be an object or a string")

    files = content.get("files")
    if isinstance(files, list) and files and isinstance(files[0], dict):
        first = t.cast(dict[str, t.Any], files[0])
        code = first.get("content") or first.get("file_content") or ""
        return str(code), first.get("language") or language

    code = content.get("code", "")
    if not isinstance(code, str):
        raise StructuralError("code must be a string")
    return code, content.get("language") or language
