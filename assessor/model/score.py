import datetime
import typing as t

import pydantic as p
from pydantic.alias_generators import to_camel

from .attempt import EvaluationStatus
from .base import BaseModel
from .id import AnswerID, AttemptID, ScoreRecordID


class ScoreRecord(BaseModel):
    score_id: ScoreRecordID
    answer_id: AnswerID
    attempt_id: AttemptID

    score: float
    max_score: float
    integrity_score: int
    evaluator: str
    feedback: dict[str, t.Any] = {}
    summary: str = ""
    fallback_reason: str | None = None
    evaluated_at: datetime.datetime


class EvaluationSummary(BaseModel):
    """Result of an evaluation trigger, serialized with camelCase keys."""

    model_config = p.ConfigDict(alias_generator=to_camel, populate_by_name=True)

    attempt_id: AttemptID
    total_score: float
    max_score: float
    integrity_score: int
    background_task_count: int
    background_processing: bool
    evaluation_status: EvaluationStatus
