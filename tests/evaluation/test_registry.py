"""Tests for the strategy registry."""

from __future__ import annotations

import typing as t

from assessor.evaluation import StrategyRegistry
from assessor.evaluation.evaluator import ChoiceEvaluator, CodeEvaluator, FallbackEvaluator, InterviewEvaluator, \
    ProjectEvaluator, SeleniumEvaluator, TextEvaluator
from assessor.model import QuestionType

from ..conftest import StubScorer
from .test_evaluators import answer, question


class TestResolve(object):
    """Tests for StrategyRegistry.resolve() on the production registry."""

    def test_every_question_type_is_registered(self, registry_factory: t.Callable[..., StrategyRegistry]) -> None:
        registry = registry_factory()
        expected = {
            QuestionType.MultipleChoice: ChoiceEvaluator,
            QuestionType.Subjective: TextEvaluator,
            QuestionType.Coding: CodeEvaluator,
            QuestionType.Selenium: SeleniumEvaluator,
            QuestionType.Project: ProjectEvaluator,
            QuestionType.Interview: InterviewEvaluator,
        }

        for question_type, evaluator_cls in expected.items():
            assert question_type.value in registry
            evaluator = registry.resolve(question(question_type), answer({"code": "x"}))
            assert isinstance(evaluator, evaluator_cls)

    def test_only_choice_is_fast(self, registry_factory: t.Callable[..., StrategyRegistry]) -> None:
        registry = registry_factory()

        fast = {qt for qt in QuestionType if registry.get(qt.value).is_fast}

        assert fast == {QuestionType.MultipleChoice}

    def test_unknown_type_uses_fallback(self, registry_factory: t.Callable[..., StrategyRegistry]) -> None:
        registry = registry_factory()

        evaluator = registry.resolve(question("essay_video"), answer(None))

        assert isinstance(evaluator, FallbackEvaluator)
        assert "essay_video" not in registry

    def test_fallback_ratios_follow_settings(self, registry_factory: t.Callable[..., StrategyRegistry]) -> None:
        registry = registry_factory()

        assert registry.get("subjective").fallback_ratio == 0.0
        assert registry.get("interview").fallback_ratio == 0.5


class TestSeleniumRouting(object):
    """Coding questions are routed to the selenium evaluator when they drive a browser."""

    def test_configured_language(self) -> None:
        registry = StrategyRegistry(selenium_markers=["WebDriver"])
        q = question(QuestionType.Coding, config={"language": "Selenium-Java"})

        assert registry.is_selenium(q, answer({"code": "class LoginTest {}"}))

    def test_configured_question_type(self) -> None:
        registry = StrategyRegistry()
        q = question(QuestionType.Coding, config={"questionType": "selenium"})

        assert registry.is_selenium(q, answer("anything"))

    def test_marker_in_code(self) -> None:
        registry = StrategyRegistry(selenium_markers=["WebDriver", "By.id"])
        q = question(QuestionType.Coding)

        assert registry.is_selenium(q, answer({"code": "WebDriver driver = new ChromeDriver();"}))
        assert registry.is_selenium(q, answer({"files": [{"content": "driver.findElement(By.id('x'))"}]}))
        assert not registry.is_selenium(q, answer({"code": "print('hello')"}))

    def test_resolve_reroutes_coding_only(self) -> None:
        registry = StrategyRegistry(selenium_markers=["WebDriver"])
        code, selenium = CodeEvaluator(StubScorer()), SeleniumEvaluator(StubScorer())
        registry.register(QuestionType.Coding, code)
        registry.register(QuestionType.Selenium, selenium)
        driver_code = answer({"code": "new WebDriver()"})

        assert registry.resolve(question(QuestionType.Coding), driver_code) is selenium
        assert registry.resolve(question(QuestionType.Coding), answer({"code": "1 + 1"})) is code
        assert isinstance(registry.resolve(question(QuestionType.Subjective), driver_code), FallbackEvaluator)
