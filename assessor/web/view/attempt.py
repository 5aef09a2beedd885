"""View models for attempt endpoints."""

from __future__ import annotations

import datetime
import typing as t

from assessor.model import AnswerID, AttemptID, AttemptStatus, EvaluationStatus, ReportID, ScoreRecordID, \
    ViolationSeverity

from .base import ApiModel


class ScoreRecordResponse(ApiModel):
    score_id: ScoreRecordID
    answer_id: AnswerID
    score: float
    max_score: float
    integrity_score: int
    evaluator: str
    summary: str
    fallback_reason: str | None
    feedback: dict[str, t.Any]
    evaluated_at: datetime.datetime


class ProctoringSummaryResponse(ApiModel):
    integrity_score: int
    violations_count: int
    technical_issues: list[dict[str, t.Any]]
    notes: str


class AttemptResponse(ApiModel):
    """An attempt's aggregate; totals are advisory until `evaluationStatus` is completed."""

    attempt_id: AttemptID
    status: AttemptStatus
    evaluation_status: EvaluationStatus
    total_score: float
    max_score: float
    integrity_score: int
    proctoring_summary: ProctoringSummaryResponse | None
    started_at: datetime.datetime | None
    submitted_at: datetime.datetime | None
    evaluated_at: datetime.datetime | None
    scores: list[ScoreRecordResponse]


class TimelineEventResponse(ApiModel):
    type: str
    timestamp: datetime.datetime
    severity: ViolationSeverity


class ProctoringReportResponse(ApiModel):
    report_id: ReportID
    attempt_id: AttemptID
    integrity_score: int
    total_violations: int
    events_timeline: list[TimelineEventResponse]
    recommendations: str
    create_time: datetime.datetime
