import datetime
import enum
import typing as t

from .base import BaseModel, WithCtime
from .id import AttemptID, ReportID, ViolationID


class ViolationType(enum.Enum):
    TabSwitch = "tab_switch"
    FullscreenExit = "fullscreen_exit"
    MultipleFaces = "multiple_faces"
    NoFace = "no_face"
    CopyPaste = "copy_paste"
    TechnicalIssue = "technical_issue"


class ViolationSeverity(enum.Enum):
    Low = "low"
    Medium = "medium"
    High = "high"
    Critical = "critical"


class ViolationEvent(BaseModel):
    violation_id: ViolationID
    attempt_id: AttemptID

    # free-form; unknown types receive the default deduction
    violation_type: str
    severity: ViolationSeverity = ViolationSeverity.Medium
    occurred_at: datetime.datetime
    details: dict[str, t.Any] = {}


class TimelineEvent(BaseModel):
    type: str
    timestamp: datetime.datetime
    severity: ViolationSeverity


class ProctoringReport(WithCtime):
    report_id: ReportID
    attempt_id: AttemptID

    integrity_score: int
    total_violations: int
    events_timeline: list[TimelineEvent] = []
    recommendations: str
