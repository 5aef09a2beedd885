__all__ = [
    "DEFAULT_DEDUCTION",
    "DEDUCTIONS",
    "build_report",
    "canonical_type",
    "deduction",
    "ReportContent",
    "build_summary",
    "integrity_score",
    "notes",
    "recommendations",
]

from .aggregator import build_report, build_summary, canonical_type, deduction, DEDUCTIONS, DEFAULT_DEDUCTION, \
    integrity_score, notes, recommendations, ReportContent
