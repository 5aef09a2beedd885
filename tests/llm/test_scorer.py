"""Tests for the chat-model backed external scorer."""

from __future__ import annotations

import asyncio
import typing as t
from unittest.mock import AsyncMock, MagicMock

import jinja2
import pytest
from langchain_core.language_models import FakeListChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from assessor.core.container.template import provide_llm_env
from assessor.evaluation import MalformedScorerResponse, ScorerTimeout, ScorerUnavailable
from assessor.llm import ChatModelScorer, ExternalScorer, parse_json_object, ScoreRequest, UnavailableScorer


@pytest.fixture
def env() -> jinja2.Environment:
    return jinja2.Environment(
        loader=jinja2.DictLoader({"grade.j2": "Grade this answer: {{ answer }}"}),
        undefined=jinja2.StrictUndefined,
    )


def request() -> ScoreRequest:
    return ScoreRequest(template="grade.j2", context={"answer": "HTTP 404 means not found"})


def mock_model(*effects: t.Any) -> MagicMock:
    model = MagicMock()
    model.ainvoke = AsyncMock(side_effect=list(effects))
    return model


class TestParseJsonObject(object):
    """Tests for parse_json_object()."""

    def test_raw_object(self) -> None:
        assert parse_json_object('{"score": 7}') == {"score": 7}

    def test_fenced_object(self) -> None:
        text = 'Here is my assessment:\n```json\n{"score": 7, "feedback": "ok"}\n```\nThanks'

        assert parse_json_object(text) == {"score": 7, "feedback": "ok"}

    def test_embedded_object(self) -> None:
        assert parse_json_object('The result is {"score": 3} overall.') == {"score": 3}

    def test_array_is_malformed(self) -> None:
        with pytest.raises(MalformedScorerResponse):
            parse_json_object("[1, 2, 3]")

    def test_prose_is_malformed(self) -> None:
        with pytest.raises(MalformedScorerResponse):
            parse_json_object("I cannot grade this answer.")


class TestChatModelScorer(object):
    """Tests for ChatModelScorer.score()."""

    def test_satisfies_protocol(self, env: jinja2.Environment) -> None:
        scorer = ChatModelScorer(FakeListChatModel(responses=["{}"]), env=env)

        assert isinstance(scorer, ExternalScorer)
        assert isinstance(UnavailableScorer("no key"), ExternalScorer)

    def test_renders_prompt_and_parses_reply(self, env: jinja2.Environment) -> None:
        model = mock_model(AIMessage(content='{"score": 8, "feedback": "Correct."}'))
        scorer = ChatModelScorer(model, env=env)

        result = asyncio.run(scorer.score(request()))

        assert result == {"score": 8, "feedback": "Correct."}
        (messages,), _ = model.ainvoke.call_args
        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[1], HumanMessage)
        assert messages[1].content == "Grade this answer: HTTP 404 means not found"

    def test_fake_chat_model(self, env: jinja2.Environment) -> None:
        """Works against a real langchain chat model implementation."""
        scorer = ChatModelScorer(FakeListChatModel(responses=['```json\n{"score": 5}\n```']), env=env)

        assert asyncio.run(scorer.score(request())) == {"score": 5}

    def test_content_blocks(self, env: jinja2.Environment) -> None:
        model = mock_model(AIMessage(content=[{"type": "text", "text": '{"score": 2}'}]))
        scorer = ChatModelScorer(model, env=env)

        assert asyncio.run(scorer.score(request())) == {"score": 2}

    def test_timeout(self, env: jinja2.Environment) -> None:
        async def hang(*_: t.Any, **__: t.Any) -> AIMessage:
            await asyncio.sleep(5)
            return AIMessage(content="{}")

        model = MagicMock()
        model.ainvoke = AsyncMock(side_effect=hang)
        scorer = ChatModelScorer(model, env=env, timeout=0.01, max_retries=0)

        with pytest.raises(ScorerTimeout):
            asyncio.run(scorer.score(request()))

    def test_provider_error_is_unavailable(self, env: jinja2.Environment) -> None:
        scorer = ChatModelScorer(mock_model(ConnectionError("reset by peer")), env=env, max_retries=0)

        with pytest.raises(ScorerUnavailable, match="ConnectionError"):
            asyncio.run(scorer.score(request()))

    def test_retries_transient_failures(self, env: jinja2.Environment) -> None:
        model = mock_model(
            ConnectionError("reset by peer"),
            RuntimeError("overloaded"),
            AIMessage(content='{"score": 4}'),
        )
        scorer = ChatModelScorer(model, env=env, max_retries=2, backoff=0)

        assert asyncio.run(scorer.score(request())) == {"score": 4}
        assert model.ainvoke.await_count == 3

    def test_gives_up_after_max_retries(self, env: jinja2.Environment) -> None:
        model = mock_model(*[ConnectionError("down")] * 3)
        scorer = ChatModelScorer(model, env=env, max_retries=2, backoff=0)

        with pytest.raises(ScorerUnavailable):
            asyncio.run(scorer.score(request()))
        assert model.ainvoke.await_count == 3

    def test_malformed_reply_is_not_retried(self, env: jinja2.Environment) -> None:
        model = mock_model(AIMessage(content="no json here"), AIMessage(content='{"score": 1}'))
        scorer = ChatModelScorer(model, env=env, max_retries=2, backoff=0)

        with pytest.raises(MalformedScorerResponse):
            asyncio.run(scorer.score(request()))
        assert model.ainvoke.await_count == 1

    def test_request_timeout_overrides_default(self, env: jinja2.Environment) -> None:
        async def slow(*_: t.Any, **__: t.Any) -> AIMessage:
            await asyncio.sleep(0.05)
            return AIMessage(content='{"score": 6}')

        model = MagicMock()
        model.ainvoke = AsyncMock(side_effect=slow)
        scorer = ChatModelScorer(model, env=env, timeout=0.01, max_retries=0)

        result = asyncio.run(
            scorer.score(ScoreRequest(template="grade.j2", context={"answer": "x"}, timeout=2.0))
        )

        assert result == {"score": 6}


class TestUnavailableScorer(object):
    def test_always_unavailable(self) -> None:
        with pytest.raises(ScorerUnavailable, match="OpenAI API key required"):
            asyncio.run(UnavailableScorer("OpenAI API key required").score(request()))


class TestPromptTemplates(object):
    """The packaged prompts render with the variables their evaluators supply."""

    @pytest.fixture
    def package_env(self) -> jinja2.Environment:
        return provide_llm_env("assessor", "templates")

    def test_subjective(self, package_env: jinja2.Environment) -> None:
        prompt = package_env.get_template("scorer/subjective.j2").render(
            question="Explain idempotency.", expected=None, answer="Same result when repeated.", points=10
        )

        assert "Explain idempotency." in prompt
        assert "Expected answer" not in prompt
        assert "out of 10 points" in prompt

    def test_coding(self, package_env: jinja2.Environment) -> None:
        prompt = package_env.get_template("scorer/coding.j2").render(
            problem="Reverse a string",
            expected=None,
            code="def rev(s): return s[::-1]",
            language="python",
            test_cases=[{"input": "abc", "expected": "cba"}],
        )

        assert "def rev(s)" in prompt
        assert '"expected": "cba"' in prompt

    def test_selenium(self, package_env: jinja2.Environment) -> None:
        prompt = package_env.get_template("scorer/selenium.j2").render(
            problem="Log in", code="driver.findElement(By.id('user'))", language="java", test_cases=[]
        )

        assert "overall_score" in prompt

    def test_project(self, package_env: jinja2.Environment) -> None:
        prompt = package_env.get_template("scorer/project.j2").render(
            problem="Todo API", code="// File: main.js\nconsole.log(1)", language="javascript", test_cases=[]
        )

        assert "// File: main.js" in prompt

    def test_interview_intelligence(self, package_env: jinja2.Environment) -> None:
        prompt = package_env.get_template("scorer/interview_intelligence.j2").render(
            turns=[{"role": "interviewer", "content": "Tell me about a hard bug."}]
        )

        assert "[interviewer] Tell me about a hard bug." in prompt
