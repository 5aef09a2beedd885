from __future__ import annotations

import asyncio

from assessor.model import Answer, Question
from assessor.storage import interview as interview_storage

from ..base import EvaluationResult, Evaluator, round_score, SessionFactory, transaction
from ..errors import AnalysisTimeout
from ..intelligence import InterviewIntelligence, transcript


class InterviewEvaluator(Evaluator):
    """
    Starts interview intelligence for the transcript and polls for the stored
    analysis, giving up after `max_polls` checks `poll_interval` seconds apart
    """

    name = "interview"

    def __init__(
        self,
        intelligence: InterviewIntelligence,
        session_factory: SessionFactory,
        *,
        max_polls: int = 10,
        poll_interval: float = 3.0,
        fallback_ratio: float = 0.5,
    ) -> None:
        self.intelligence = intelligence
        self.session_factory = session_factory
        self.max_polls = max_polls
        self.poll_interval = poll_interval
        self.fallback_ratio = fallback_ratio

    async def evaluate(self, answer: Answer, question: Question) -> EvaluationResult:
        turns = transcript(answer)

        # a previous analysis must not satisfy this evaluation's poll
        with transaction(self.session_factory) as session:
            interview_storage.delete(answer.answer_id, session=session)
        self.intelligence.start(answer.answer_id, turns)

        for _ in range(self.max_polls):
            await asyncio.sleep(self.poll_interval)
            with transaction(self.session_factory) as session:
                analysis = interview_storage.get(answer.answer_id, session=session)
            if analysis is not None:
                break
        else:
            raise AnalysisTimeout(f"analysis not available after {self.max_polls} polls")

        score = round_score(analysis.overall_score / 100 * question.points)
        return EvaluationResult(
            score=float(score),
            max_score=float(question.points),
            feedback={
                "evaluation_method": self.name,
                "overall_score": analysis.overall_score,
                "communication_score": analysis.communication_score,
                "technical_score": analysis.technical_score,
                "behavioral_score": analysis.behavioral_score,
                "insights": analysis.insights,
                "competency_analysis": analysis.competency_analysis,
                "recommendations": analysis.recommendations,
            },
            summary=(
                f"Interview evaluation - Overall: {analysis.overall_score}%, "
                f"Communication: {analysis.communication_score}%, Technical: {analysis.technical_score}%"
            ),
        )
