import typing as t

from .base import BaseModel, WithCtime
from .id import AnswerID


class InterviewTurn(BaseModel):
    role: str
    content: str


class InterviewAnalysis(WithCtime):
    answer_id: AnswerID

    overall_score: int
    communication_score: int
    technical_score: int
    behavioral_score: int

    conversation_quality_score: int | None = None
    insights: dict[str, t.Any] = {}
    competency_analysis: dict[str, t.Any] = {}
    recommendations: list[str] = []
