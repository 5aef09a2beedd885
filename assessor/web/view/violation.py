"""View models for violation ingestion."""

from __future__ import annotations

import datetime
import typing as t

import annotated_types as ant

from assessor.model import AttemptID, ViolationID, ViolationSeverity

from .base import ApiModel


class ViolationRequest(ApiModel):
    violation_type: t.Annotated[str, ant.MinLen(1), ant.MaxLen(64)]
    severity: ViolationSeverity = ViolationSeverity.Medium
    # defaults to the time of ingestion
    occurred_at: datetime.datetime | None = None
    details: dict[str, t.Any] = {}


class ViolationResponse(ApiModel):
    violation_id: ViolationID
    attempt_id: AttemptID
    violation_type: str
    severity: ViolationSeverity
    occurred_at: datetime.datetime
    details: dict[str, t.Any]


class ViolationListResponse(ApiModel):
    violations: list[ViolationResponse]
    total: int
