"""Tests for assessor.integrity."""

from __future__ import annotations

import datetime

from assessor import integrity
from assessor.model import AttemptID, ViolationEvent, ViolationID, ViolationSeverity

T0 = datetime.datetime(2026, 3, 2, 9, 0, tzinfo=datetime.UTC)


def event(violation_type: str, minute: int = 0, **details: object) -> ViolationEvent:
    return ViolationEvent(
        violation_id=ViolationID(),
        attempt_id=AttemptID(),
        violation_type=violation_type,
        occurred_at=T0 + datetime.timedelta(minutes=minute),
        details=details,
    )


class TestIntegrityScore(object):
    """Tests for integrity.integrity_score()."""

    def test_no_events_is_full_integrity(self) -> None:
        assert integrity.integrity_score([]) == 100

    def test_ten_tab_switches(self) -> None:
        """Each tab switch costs five points."""
        events = [event("tab_switch", minute=i) for i in range(10)]

        assert integrity.integrity_score(events) == 50

    def test_hyphenated_and_cased_types_are_canonicalized(self) -> None:
        events = [event("tab-switch"), event("Tab-Switch"), event("TAB_SWITCH")]

        assert integrity.integrity_score(events) == 85

    def test_fixed_deduction_per_type(self) -> None:
        events = [
            event("tab_switch"),
            event("fullscreen_exit"),
            event("multiple_faces"),
            event("no_face"),
            event("copy_paste"),
        ]

        assert integrity.integrity_score(events) == 100 - (5 + 10 + 15 + 20 + 25)

    def test_unclassified_type_costs_three(self) -> None:
        assert integrity.integrity_score([event("devtools_opened")]) == 97

    def test_legacy_aliases(self) -> None:
        assert integrity.deduction("face-not-detected") == 20
        assert integrity.deduction("critical-multi-face") == 15

    def test_floors_at_zero(self) -> None:
        events = [event("copy_paste", minute=i) for i in range(5)]

        assert integrity.integrity_score(events) == 0

    def test_order_does_not_matter(self) -> None:
        events = [event("no_face", 1), event("tab_switch", 2), event("other", 3)]

        assert integrity.integrity_score(events) == integrity.integrity_score(list(reversed(events)))

    def test_accepts_any_iterable(self) -> None:
        assert integrity.integrity_score(event("tab_switch") for _ in range(2)) == 90

    def test_never_rises_as_events_arrive(self) -> None:
        kinds = ["tab_switch", "devtools_opened", "no_face", "Tab-Switch", "copy_paste", "fullscreen_exit"]
        events: list[ViolationEvent] = []
        previous = integrity.integrity_score(events)

        for i in range(30):
            events.append(event(kinds[i % len(kinds)], minute=i))
            score = integrity.integrity_score(events)
            assert 0 <= score <= previous <= 100
            previous = score

        assert previous == 0


class TestRecommendations(object):
    """Tests for integrity.recommendations()."""

    def test_bands(self) -> None:
        assert "high integrity" in integrity.recommendations(100)
        assert "high integrity" in integrity.recommendations(90)
        assert "Minor" in integrity.recommendations(89)
        assert "Minor" in integrity.recommendations(70)
        assert "Moderate" in integrity.recommendations(69)
        assert "Moderate" in integrity.recommendations(50)
        assert "Significant" in integrity.recommendations(49)
        assert "Significant" in integrity.recommendations(0)


class TestSummary(object):
    """Tests for integrity.build_summary()."""

    def test_clean_attempt(self) -> None:
        summary = integrity.build_summary([])

        assert summary.integrity_score == 100
        assert summary.violations_count == 0
        assert summary.technical_issues == []
        assert summary.notes.startswith("No proctoring violations detected")

    def test_technical_issues_are_collected(self) -> None:
        events = [event("tab_switch"), event("technical-issue", 3, kind="camera_lost")]

        summary = integrity.build_summary(events)

        assert summary.violations_count == 2
        assert summary.integrity_score == 92
        assert summary.notes == "2 proctoring violation(s) detected"
        assert summary.technical_issues == [
            {"type": "technical-issue", "timestamp": (T0 + datetime.timedelta(minutes=3)).isoformat(),
             "details": {"kind": "camera_lost"}},
        ]


class TestReport(object):
    """Tests for integrity.build_report()."""

    def test_timeline_follows_events(self) -> None:
        events = [event("tab_switch", 0), event("copy_paste", 5)]

        report = integrity.build_report(events)

        assert report.integrity_score == 70
        assert report.total_violations == 2
        assert [e.type for e in report.events_timeline] == ["tab_switch", "copy_paste"]
        assert all(e.severity is ViolationSeverity.Medium for e in report.events_timeline)
        assert "Minor" in report.recommendations
