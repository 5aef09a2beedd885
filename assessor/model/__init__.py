__all__ = [
    # Base
    "BaseModel",
    "WithCtime",
    "WithMtime",
    "WithTimestamps",
    # Enums
    "DeploymentEnvironment",
    # ID Types
    "AssessmentID",
    "QuestionID",
    "AttemptID",
    "AnswerID",
    "ScoreRecordID",
    "ViolationID",
    "ReportID",
    # Assessments
    "Assessment",
    "Question",
    "QuestionType",
    # Attempts
    "Attempt",
    "AttemptStatus",
    "EvaluationStatus",
    "Answer",
    "ProctoringSummary",
    # Scores
    "ScoreRecord",
    "EvaluationSummary",
    # Integrity
    "ViolationEvent",
    "ViolationType",
    "ViolationSeverity",
    "TimelineEvent",
    "ProctoringReport",
    # Interviews
    "InterviewTurn",
    "InterviewAnalysis",
]

from .assessment import Assessment, Question, QuestionType
from .attempt import Answer, Attempt, AttemptStatus, EvaluationStatus, ProctoringSummary
from .base import BaseModel, WithCtime, WithMtime, WithTimestamps
from .enum import DeploymentEnvironment
from .id import AnswerID, AssessmentID, AttemptID, QuestionID, ReportID, ScoreRecordID, ViolationID
from .interview import InterviewAnalysis, InterviewTurn
from .score import EvaluationSummary, ScoreRecord
from .violation import ProctoringReport, TimelineEvent, ViolationEvent, ViolationSeverity, ViolationType
