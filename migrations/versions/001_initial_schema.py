"""Initial schema for attempt evaluation and integrity

Revision ID: 001_initial
Revises:
Create Date: 2026-09-28

"""

import typing as t

from alembic import op
from sqlalchemy import func as f
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.schema import Column, ForeignKey, UniqueConstraint
from sqlalchemy.types import DateTime, Float, Integer, JSON, String, Text

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | t.Sequence[str] | None = None
depends_on: str | t.Sequence[str] | None = None

Document = JSON().with_variant(JSONB(), "postgresql")
Timestamp = DateTime(timezone=True)


def upgrade() -> None:
    # Assessments
    op.create_table(
        "assessments",
        Column("assessment_id", String(22), primary_key=True),
        Column("title", String, nullable=False),
        Column("duration_minutes", Integer, nullable=True),
        Column("create_time", Timestamp, server_default=f.now(), nullable=False),
    )

    # Questions
    op.create_table(
        "questions",
        Column("question_id", String(22), primary_key=True),
        Column("assessment_id", String(22), ForeignKey("assessments.assessment_id"), nullable=False),
        Column("question_type", String, nullable=False),
        Column("points", Integer, nullable=False),
        Column("config", Document, nullable=False),
        Column("position", Integer, nullable=False),
        Column("create_time", Timestamp, server_default=f.now(), nullable=False),
    )

    # Attempts
    op.create_table(
        "attempts",
        Column("attempt_id", String(22), primary_key=True),
        Column("assessment_id", String(22), ForeignKey("assessments.assessment_id"), nullable=False),
        Column("participant", String, nullable=True),
        Column("status", String(32), nullable=False),
        Column("evaluation_status", String(32), nullable=False),
        Column("total_score", Float, nullable=False),
        Column("max_score", Float, nullable=False),
        Column("integrity_score", Integer, nullable=False),
        Column("proctoring_summary", Document, nullable=True),
        Column("started_at", Timestamp, nullable=True),
        Column("submitted_at", Timestamp, nullable=True),
        Column("evaluated_at", Timestamp, nullable=True),
        Column("last_activity_at", Timestamp, nullable=True),
        Column("create_time", Timestamp, server_default=f.now(), nullable=False),
        Column("update_time", Timestamp, server_default=f.now(), onupdate=f.now(), nullable=False),
    )
    op.create_index("ix_attempts_status", "attempts", ["status", "evaluation_status"])

    # Answers
    op.create_table(
        "answers",
        Column("answer_id", String(22), primary_key=True),
        Column("attempt_id", String(22), ForeignKey("attempts.attempt_id"), nullable=False, index=True),
        Column("question_id", String(22), ForeignKey("questions.question_id"), nullable=False),
        Column("content", Document, nullable=True),
        Column("submitted_at", Timestamp, server_default=f.now(), nullable=False),
        UniqueConstraint("attempt_id", "question_id"),
    )

    # Score records, at most one per answer
    op.create_table(
        "score_records",
        Column("score_id", String(22), primary_key=True),
        Column("answer_id", String(22), ForeignKey("answers.answer_id"), nullable=False, unique=True),
        Column("attempt_id", String(22), ForeignKey("attempts.attempt_id"), nullable=False, index=True),
        Column("score", Float, nullable=False),
        Column("max_score", Float, nullable=False),
        Column("integrity_score", Integer, nullable=False),
        Column("evaluator", String, nullable=False),
        Column("evaluated_at", Timestamp, nullable=False),
        Column("feedback", Document, nullable=False),
        Column("summary", Text, nullable=False),
        Column("fallback_reason", String, nullable=True),
    )

    # Interview analyses
    op.create_table(
        "interview_analyses",
        Column("answer_id", String(22), ForeignKey("answers.answer_id"), primary_key=True),
        Column("overall_score", Integer, nullable=False),
        Column("communication_score", Integer, nullable=False),
        Column("technical_score", Integer, nullable=False),
        Column("behavioral_score", Integer, nullable=False),
        Column("conversation_quality_score", Integer, nullable=True),
        Column("insights", Document, nullable=False),
        Column("competency_analysis", Document, nullable=False),
        Column("recommendations", Document, nullable=False),
        Column("create_time", Timestamp, server_default=f.now(), nullable=False),
    )

    # Violations
    op.create_table(
        "violations",
        Column("violation_id", String(22), primary_key=True),
        Column("attempt_id", String(22), ForeignKey("attempts.attempt_id"), nullable=False, index=True),
        Column("violation_type", String, nullable=False),
        Column("occurred_at", Timestamp, nullable=False),
        Column("severity", String(32), nullable=False),
        Column("details", Document, nullable=False),
    )

    # Proctoring reports, one per attempt
    op.create_table(
        "proctoring_reports",
        Column("report_id", String(22), primary_key=True),
        Column("attempt_id", String(22), ForeignKey("attempts.attempt_id"), nullable=False, unique=True),
        Column("integrity_score", Integer, nullable=False),
        Column("total_violations", Integer, nullable=False),
        Column("recommendations", Text, nullable=False),
        Column("events_timeline", Document, nullable=False),
        Column("create_time", Timestamp, server_default=f.now(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("proctoring_reports")
    op.drop_table("violations")
    op.drop_table("interview_analyses")
    op.drop_table("score_records")
    op.drop_table("answers")
    op.drop_index("ix_attempts_status", table_name="attempts")
    op.drop_table("attempts")
    op.drop_table("questions")
    op.drop_table("assessments")
