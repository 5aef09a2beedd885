import datetime
import enum
import typing as t

from sqlalchemy import ForeignKey, func, MetaData, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, MappedAsDataclass

from assessor.model import AnswerID, AssessmentID, AttemptID, AttemptStatus, EvaluationStatus, QuestionID, ReportID, \
    ScoreRecordID, ViolationID, ViolationSeverity

from .type import JSONDocument, ShortUUIDKeyType, UTCDateTime, ValueEnumMapper

metadata = MetaData()


class base(MappedAsDataclass, DeclarativeBase):
    metadata = metadata
    type_annotation_map = {
        AssessmentID: ShortUUIDKeyType(AssessmentID),
        QuestionID: ShortUUIDKeyType(QuestionID),
        AttemptID: ShortUUIDKeyType(AttemptID),
        AnswerID: ShortUUIDKeyType(AnswerID),
        ScoreRecordID: ShortUUIDKeyType(ScoreRecordID),
        ViolationID: ShortUUIDKeyType(ViolationID),
        ReportID: ShortUUIDKeyType(ReportID),
        datetime.datetime: UTCDateTime(),
        dict[str, t.Any]: JSONDocument,
        list[t.Any]: JSONDocument,
        enum.Enum: ValueEnumMapper,
    }


# Assessments & Questions


class assessments(base):
    __tablename__ = "assessments"

    assessment_id: Mapped[AssessmentID] = mapped_column(primary_key=True)
    title: Mapped[str]
    duration_minutes: Mapped[int | None] = mapped_column(default=None)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())


class questions(base):
    __tablename__ = "questions"

    question_id: Mapped[QuestionID] = mapped_column(primary_key=True)
    assessment_id: Mapped[AssessmentID] = mapped_column(ForeignKey("assessments.assessment_id"))
    # plain string: unrecognized types must still load
    question_type: Mapped[str]
    points: Mapped[int] = mapped_column(default=0)
    config: Mapped[dict[str, t.Any]] = mapped_column(default_factory=dict)
    position: Mapped[int] = mapped_column(default=0)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())


# Attempts & Answers


class attempts(base):
    __tablename__ = "attempts"

    attempt_id: Mapped[AttemptID] = mapped_column(primary_key=True)
    assessment_id: Mapped[AssessmentID] = mapped_column(ForeignKey("assessments.assessment_id"))
    participant: Mapped[str | None] = mapped_column(default=None)
    status: Mapped[AttemptStatus] = mapped_column(default=AttemptStatus.NotStarted)
    evaluation_status: Mapped[EvaluationStatus] = mapped_column(default=EvaluationStatus.NotStarted)
    total_score: Mapped[float] = mapped_column(default=0.0)
    max_score: Mapped[float] = mapped_column(default=0.0)
    integrity_score: Mapped[int] = mapped_column(default=100)
    proctoring_summary: Mapped[dict[str, t.Any] | None] = mapped_column(default=None)
    started_at: Mapped[datetime.datetime | None] = mapped_column(default=None)
    submitted_at: Mapped[datetime.datetime | None] = mapped_column(default=None)
    evaluated_at: Mapped[datetime.datetime | None] = mapped_column(default=None)
    last_activity_at: Mapped[datetime.datetime | None] = mapped_column(default=None)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


class answers(base):
    __tablename__ = "answers"
    __table_args__ = (UniqueConstraint("attempt_id", "question_id"),)

    answer_id: Mapped[AnswerID] = mapped_column(primary_key=True)
    attempt_id: Mapped[AttemptID] = mapped_column(ForeignKey("attempts.attempt_id"), index=True)
    question_id: Mapped[QuestionID] = mapped_column(ForeignKey("questions.question_id"))
    content: Mapped[t.Any] = mapped_column(JSONDocument, default=None, nullable=True)
    submitted_at: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())


# Evaluation


class score_records(base):
    __tablename__ = "score_records"

    score_id: Mapped[ScoreRecordID] = mapped_column(primary_key=True)
    # at most one record per answer; writes are upserts on this column
    answer_id: Mapped[AnswerID] = mapped_column(ForeignKey("answers.answer_id"), unique=True)
    attempt_id: Mapped[AttemptID] = mapped_column(ForeignKey("attempts.attempt_id"), index=True)
    score: Mapped[float]
    max_score: Mapped[float]
    integrity_score: Mapped[int]
    evaluator: Mapped[str]
    evaluated_at: Mapped[datetime.datetime]
    feedback: Mapped[dict[str, t.Any]] = mapped_column(default_factory=dict)
    summary: Mapped[str] = mapped_column(default="")
    fallback_reason: Mapped[str | None] = mapped_column(default=None)


class interview_analyses(base):
    __tablename__ = "interview_analyses"

    answer_id: Mapped[AnswerID] = mapped_column(ForeignKey("answers.answer_id"), primary_key=True)
    overall_score: Mapped[int]
    communication_score: Mapped[int]
    technical_score: Mapped[int]
    behavioral_score: Mapped[int]
    conversation_quality_score: Mapped[int | None] = mapped_column(default=None)
    insights: Mapped[dict[str, t.Any]] = mapped_column(default_factory=dict)
    competency_analysis: Mapped[dict[str, t.Any]] = mapped_column(default_factory=dict)
    recommendations: Mapped[list[t.Any]] = mapped_column(default_factory=list)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())


# Integrity


class violations(base):
    __tablename__ = "violations"

    violation_id: Mapped[ViolationID] = mapped_column(primary_key=True)
    attempt_id: Mapped[AttemptID] = mapped_column(ForeignKey("attempts.attempt_id"), index=True)
    violation_type: Mapped[str]
    occurred_at: Mapped[datetime.datetime]
    severity: Mapped[ViolationSeverity] = mapped_column(default=ViolationSeverity.Medium)
    details: Mapped[dict[str, t.Any]] = mapped_column(default_factory=dict)


class proctoring_reports(base):
    __tablename__ = "proctoring_reports"

    report_id: Mapped[ReportID] = mapped_column(primary_key=True)
    attempt_id: Mapped[AttemptID] = mapped_column(ForeignKey("attempts.attempt_id"), unique=True)
    integrity_score: Mapped[int]
    total_violations: Mapped[int]
    recommendations: Mapped[str]
    events_timeline: Mapped[list[t.Any]] = mapped_column(default_factory=list)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
