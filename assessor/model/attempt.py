import datetime
import enum
import typing as t

from .base import BaseModel, WithTimestamps
from .id import AnswerID, AssessmentID, AttemptID, QuestionID


class AttemptStatus(enum.Enum):
    NotStarted = "not_started"
    InProgress = "in_progress"
    Submitted = "submitted"
    Evaluated = "evaluated"


class EvaluationStatus(enum.Enum):
    NotStarted = "not_started"
    InProgress = "in_progress"
    Completed = "completed"
    Failed = "failed"


class ProctoringSummary(BaseModel):
    integrity_score: int
    violations_count: int
    technical_issues: list[dict[str, t.Any]] = []
    notes: str = ""


class Attempt(WithTimestamps):
    attempt_id: AttemptID
    assessment_id: AssessmentID
    participant: str | None = None

    status: AttemptStatus = AttemptStatus.NotStarted
    evaluation_status: EvaluationStatus = EvaluationStatus.NotStarted

    total_score: float = 0.0
    max_score: float = 0.0
    integrity_score: int = 100
    proctoring_summary: ProctoringSummary | None = None

    started_at: datetime.datetime | None = None
    submitted_at: datetime.datetime | None = None
    evaluated_at: datetime.datetime | None = None
    last_activity_at: datetime.datetime | None = None


class Answer(BaseModel):
    answer_id: AnswerID
    attempt_id: AttemptID
    question_id: QuestionID

    # shape depends on the question type
    content: dict[str, t.Any] | list[t.Any] | str | None = None
    submitted_at: datetime.datetime
