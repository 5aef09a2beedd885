"""Violation aggregation and integrity guidance.

Everything here is a pure function of the event list: the integrity score is
recomputed at several points of an attempt's life and must never drift
between them.
"""

from __future__ import annotations

import typing as t

from assessor.model import ProctoringSummary, TimelineEvent, ViolationEvent, ViolationType

MaxIntegrity: t.Final = 100

DEDUCTIONS: t.Final[t.Mapping[str, int]] = {
    ViolationType.TabSwitch.value: 5,
    ViolationType.FullscreenExit.value: 10,
    ViolationType.MultipleFaces.value: 15,
    ViolationType.NoFace.value: 20,
    ViolationType.CopyPaste.value: 25,
}
DEFAULT_DEDUCTION: t.Final = 3

# spellings emitted by older proctoring clients
ALIASES: t.Final[t.Mapping[str, str]] = {
    "face_not_detected": ViolationType.NoFace.value,
    "critical_multi_face": ViolationType.MultipleFaces.value,
    "multi_face": ViolationType.MultipleFaces.value,
}

# lower bound of each band, highest first
RECOMMENDATIONS: t.Final[list[tuple[int, str]]] = [
    (90, "Assessment completed with high integrity. No additional action required."),
    (70, "Minor integrity concerns detected. Review of flagged events is recommended."),
    (50, "Moderate integrity concerns detected. Manual review of the attempt is strongly recommended."),
    (0, "Significant integrity concerns detected. Manual review and potential re-assessment are recommended."),
]


def canonical_type(violation_type: str) -> str:
    """`Tab-Switch`, `tab-switch` and `tab_switch` all name the same event."""
    tag = violation_type.strip().lower().replace("-", "_").replace(" ", "_")
    return ALIASES.get(tag, tag)


def deduction(violation_type: str) -> int:
    return DEDUCTIONS.get(canonical_type(violation_type), DEFAULT_DEDUCTION)


def integrity_score(events: t.Iterable[ViolationEvent]) -> int:
    """Start from 100, subtract a fixed weight per event, floor at 0."""
    total = sum(deduction(e.violation_type) for e in events)
    return max(0, MaxIntegrity - total)


def recommendations(score: int) -> str:
    for threshold, text in RECOMMENDATIONS:
        if score >= threshold:
            return text
    return RECOMMENDATIONS[-1][1]


def notes(events: t.Sequence[ViolationEvent]) -> str:
    if not events:
        return "No proctoring violations detected. Assessment completed under normal conditions."
    return f"{len(events)} proctoring violation(s) detected"


def build_summary(events: t.Sequence[ViolationEvent]) -> ProctoringSummary:
    """The proctoring summary stored on the attempt row."""
    return ProctoringSummary(
        integrity_score=integrity_score(events),
        violations_count=len(events),
        technical_issues=[
            {"type": e.violation_type, "timestamp": e.occurred_at.isoformat(), "details": e.details}
            for e in events
            if canonical_type(e.violation_type) == ViolationType.TechnicalIssue.value
        ],
        notes=notes(events),
    )


class ReportContent(t.NamedTuple):
    integrity_score: int
    total_violations: int
    events_timeline: list[TimelineEvent]
    recommendations: str


def build_report(events: t.Sequence[ViolationEvent]) -> ReportContent:
    score = integrity_score(events)
    return ReportContent(
        integrity_score=score,
        total_violations=len(events),
        events_timeline=[
            TimelineEvent(type=e.violation_type, timestamp=e.occurred_at, severity=e.severity) for e in events
        ],
        recommendations=recommendations(score),
    )
