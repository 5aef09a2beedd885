from __future__ import annotations

import typing as t

import annotated_types as ant

from .base import ConfigSection

Ratio = t.Annotated[float, ant.Ge(0.0), ant.Le(1.0)]


class ScorerPolicySettings(ConfigSection):
    """Bounded wait and retry policy for external scorer calls."""

    timeout_seconds: t.Annotated[float, ant.Gt(0)] = 30.0
    max_retries: t.Annotated[int, ant.Ge(0)] = 2
    backoff_seconds: t.Annotated[float, ant.Ge(0)] = 0.5
    backoff_cap_seconds: t.Annotated[float, ant.Ge(0)] = 4.0


class InterviewSettings(ConfigSection):
    max_polls: t.Annotated[int, ant.Ge(1)] = 10
    poll_interval_seconds: t.Annotated[float, ant.Ge(0)] = 3.0


class SweepSettings(ConfigSection):
    abandon_min_answers: int = 3
    abandon_after_minutes: int = 30
    stale_evaluation_minutes: int = 30


class EvaluationSettings(ConfigSection):
    scorer: ScorerPolicySettings = ScorerPolicySettings()
    interview: InterviewSettings = InterviewSettings()
    sweep: SweepSettings = SweepSettings()

    # share of the question's points awarded when a model-backed evaluator
    # cannot obtain a usable result, keyed by question type
    fallback_ratio: dict[str, Ratio] = {
        "subjective": 0.0,
        "coding": 0.0,
        "selenium": 0.0,
        "project_based": 0.0,
        "interview": 0.5,
    }
    # code containing any of these is routed to the selenium evaluator
    selenium_markers: list[str] = ["WebDriver", "selenium", "driver.find", "By.xpath", "By.id"]
