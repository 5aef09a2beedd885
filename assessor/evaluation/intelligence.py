"""Interview intelligence.

Analyzes an interview transcript and stores the resulting performance
metrics. Analyses run as their own tasks; consumers observe completion only
by finding the stored analysis.
"""

from __future__ import annotations

import asyncio
import logging
import typing as t

import pydantic as p

from assessor.llm import ExternalScorer, ScoreRequest
from assessor.model import Answer, AnswerID, InterviewAnalysis, InterviewTurn
from assessor.storage import interview as interview_storage

from .base import Percent, round_score, SessionFactory, transaction
from .errors import MalformedScorerResponse, StructuralError

logger = logging.getLogger(__name__)


class PersonalityInsights(p.BaseModel):
    communication_style: str = ""
    confidence: Percent = 0.0
    analytical_thinking: Percent = 0.0
    creativity: Percent = 0.0
    leadership: Percent = 0.0


class CompetencyAnalysis(p.BaseModel):
    technical_competency: Percent = 0.0
    problem_solving: Percent = 0.0
    teamwork: Percent = 0.0
    adaptability: Percent = 0.0


class EngagementMetrics(p.BaseModel):
    interaction_density: Percent = 0.0
    response_time: str = "medium"
    question_engagement: Percent = 0.0


class ConversationAnalysis(p.BaseModel):
    conversation_quality_score: Percent
    skills_demonstrated: list[str] = []
    personality_insights: PersonalityInsights = PersonalityInsights()
    competency_analysis: CompetencyAnalysis = CompetencyAnalysis()
    conversation_flow_score: Percent = 0.0
    engagement_metrics: EngagementMetrics = EngagementMetrics()
    recommendations: list[str] = []


def transcript(answer: Answer) -> list[InterviewTurn]:
    content = answer.content
    turns = content.get("transcript") if isinstance(content, dict) else content
    if not isinstance(turns, list) or not turns:
        raise StructuralError("no conversation data available for analysis")
    try:
        return [InterviewTurn.model_validate(turn) for turn in t.cast(list[t.Any], turns)]
    except p.ValidationError as e:
        raise StructuralError(f"malformed interview transcript: {e.error_count()} invalid turn(s)") from e


class InterviewIntelligence(object):
    template: t.ClassVar[str] = "scorer/interview_intelligence.j2"
    system: t.ClassVar[str] = (
        "You are an expert interview analyst and HR professional. "
        "Provide detailed, objective analysis of interview conversations as valid JSON."
    )

    def __init__(self, scorer: ExternalScorer, session_factory: SessionFactory) -> None:
        self.scorer = scorer
        self.session_factory = session_factory
        self._tasks: set[asyncio.Task[InterviewAnalysis]] = set()

    def start(self, answer_id: AnswerID, turns: list[InterviewTurn]) -> asyncio.Task[InterviewAnalysis]:
        task = asyncio.create_task(self.analyze(answer_id, turns), name=f"interview-intelligence:{answer_id}")
        self._tasks.add(task)
        task.add_done_callback(self._settled)
        return task

    async def drain(self) -> None:
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def analyze(self, answer_id: AnswerID, turns: list[InterviewTurn]) -> InterviewAnalysis:
        data = await self.scorer.score(
            ScoreRequest(
                template=self.template,
                context={"turns": [turn.model_dump() for turn in turns]},
                system=self.system,
            )
        )
        try:
            result = ConversationAnalysis.model_validate(data)
        except p.ValidationError as e:
            raise MalformedScorerResponse(f"unexpected conversation analysis: {e.error_count()} error(s)") from e

        competency = result.competency_analysis
        with transaction(self.session_factory) as session:
            analysis = interview_storage.save(
                answer_id,
                {
                    "overall_score": round_score(result.conversation_quality_score),
                    "communication_score": round_score(
                        (result.personality_insights.confidence + result.conversation_flow_score) / 2
                    ),
                    "technical_score": round_score(competency.technical_competency),
                    "behavioral_score": round_score((competency.teamwork + competency.adaptability) / 2),
                    "conversation_quality_score": round_score(result.conversation_quality_score),
                    "insights": {
                        "skills_demonstrated": result.skills_demonstrated,
                        "personality_insights": result.personality_insights.model_dump(),
                        "engagement_metrics": result.engagement_metrics.model_dump(),
                        "conversation_flow_score": result.conversation_flow_score,
                        "conversation_length": len(turns),
                    },
                    "competency_analysis": competency.model_dump(),
                    "recommendations": result.recommendations,
                },
                session=session,
            )
        logger.info(
            "interview analysis stored",
            extra={"answer_id": answer_id, "overall_score": analysis.overall_score},
        )
        return analysis

    def _settled(self, task: asyncio.Task[InterviewAnalysis]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        if (e := task.exception()) is not None:
            logger.warning("interview analysis failed", extra={"task": task.get_name(), "error": str(e)})
