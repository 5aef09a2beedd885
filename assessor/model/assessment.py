import enum
import typing as t

import pydantic as p

from .base import WithCtime
from .id import AssessmentID, QuestionID


class QuestionType(enum.Enum):
    MultipleChoice = "mcq"
    Subjective = "subjective"
    Coding = "coding"
    Selenium = "selenium"
    Project = "project_based"
    Interview = "interview"


class Assessment(WithCtime):
    assessment_id: AssessmentID
    title: str
    duration_minutes: int | None = None


class Question(WithCtime):
    question_id: QuestionID
    assessment_id: AssessmentID

    # unknown tags are kept as plain strings so they can still be routed to
    # the fallback evaluator
    question_type: t.Annotated[QuestionType | str, p.Field(union_mode="left_to_right")]
    points: int = 0
    config: dict[str, t.Any] = {}
    position: int = 0

    @property
    def type_tag(self) -> str:
        if isinstance(self.question_type, QuestionType):
            return self.question_type.value
        return self.question_type
