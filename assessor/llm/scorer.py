"""External scorer capability.

Model-backed evaluators never talk to a chat model directly; they hand a
`ScoreRequest` (prompt template and its variables) to an `ExternalScorer`
and get back the parsed JSON object. Every failure surfaces as one of the
evaluation errors, so callers decide between a score and a fallback without
knowing which provider is behind the scorer.
"""

from __future__ import annotations

import asyncio
import logging
import re
import typing as t
from dataclasses import dataclass, field

import jinja2
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

import assessor.lib.json as json
from assessor.evaluation.errors import MalformedScorerResponse, ScorerTimeout, ScorerUnavailable, TransientExternalError

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are an expert assessment evaluator. Respond only with valid JSON, no markdown formatting."


@dataclass(frozen=True)
class ScoreRequest:
    template: str
    context: dict[str, t.Any] = field(default_factory=dict)
    system: str = DEFAULT_SYSTEM_PROMPT
    timeout: float | None = None


@t.runtime_checkable
class ExternalScorer(t.Protocol):
    async def score(self, request: ScoreRequest) -> dict[str, t.Any]: ...


class ChatModelScorer(object):
    """Scores prompts with a langchain chat model.

    Each call is bounded by `timeout` seconds. Timeouts and provider errors
    are retried up to `max_retries` times, sleeping `backoff` seconds before
    the first retry and doubling up to `backoff_cap`. A reply that is not a
    JSON object is not retried.
    """

    def __init__(
        self,
        model: BaseChatModel,
        *,
        env: jinja2.Environment,
        timeout: float = 30.0,
        max_retries: int = 2,
        backoff: float = 0.5,
        backoff_cap: float = 4.0,
    ) -> None:
        self.model = model
        self.env = env
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff = backoff
        self.backoff_cap = backoff_cap

    async def score(self, request: ScoreRequest) -> dict[str, t.Any]:
        prompt = self.env.get_template(request.template).render(**request.context)
        messages = [SystemMessage(content=request.system), HumanMessage(content=prompt)]
        timeout = request.timeout or self.timeout

        delay = self.backoff
        for attempt in range(self.max_retries + 1):
            try:
                text = await self._invoke(messages, timeout)
            except TransientExternalError as e:
                if attempt >= self.max_retries:
                    raise
                logger.warning(
                    "scorer call failed, retrying",
                    extra={"template": request.template, "attempt": attempt + 1, "reason": e.reason, "delay": delay},
                )
                await asyncio.sleep(delay)
                delay = min(delay * 2, self.backoff_cap)
                continue
            return parse_json_object(text)

        raise AssertionError("unreachable")

    async def _invoke(self, messages: list[t.Any], timeout: float) -> str:
        try:
            response = await asyncio.wait_for(self.model.ainvoke(messages), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise ScorerTimeout(f"no response within {timeout}s") from e
        except Exception as e:
            raise ScorerUnavailable(f"{type(e).__name__}: {e}") from e
        return get_content_str(response.content)


class UnavailableScorer(object):
    """Stands in when no chat model can be constructed (e.g. missing API key)."""

    def __init__(self, reason: str) -> None:
        self.reason = reason

    async def score(self, request: ScoreRequest) -> dict[str, t.Any]:
        raise ScorerUnavailable(self.reason)


def get_content_str(content: t.Any) -> str:
    """Extract string content from a LangChain message content field."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for item in t.cast(list[t.Any], content):
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and item.get("type") == "text":
                parts.append(str(item.get("text", "")))
        return " ".join(parts)
    return str(content)


def parse_json_object(text: str) -> dict[str, t.Any]:
    """Parse a JSON object from a reply that may wrap it in markdown or prose."""
    candidates = [text.strip()]

    fenced = re.search(r"```(?:json)?\s*(\{.*\})\s*```", text, re.DOTALL)
    if fenced:
        candidates.append(fenced.group(1))

    start, end = text.find("{"), text.rfind("}")
    if 0 <= start < end:
        candidates.append(text[start : end + 1])

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(parsed, dict):
            return t.cast(dict[str, t.Any], parsed)

    raise MalformedScorerResponse(f"reply is not a JSON object: {text[:200]!r}")
