from __future__ import annotations

import typing as t

from assessor.model import Answer, Question

from ..base import EvaluationResult, Evaluator
from ..errors import StructuralError


class ChoiceEvaluator(Evaluator):
    """Rule-based scoring of multiple-choice selections; all or nothing."""

    name = "choice"
    is_fast = True

    async def evaluate(self, answer: Answer, question: Question) -> EvaluationResult:
        correct = correct_options(question)
        selected = selected_options(answer)

        if len(selected) == 1 and len(correct) == 1:
            is_correct = selected[0] == correct[0]
        elif len(selected) > 1 or len(correct) > 1:
            is_correct = set(selected) == set(correct)
        else:
            is_correct = False

        points = float(question.points)
        return EvaluationResult(
            score=points if is_correct else 0.0,
            max_score=points,
            feedback={
                "evaluation_method": self.name,
                "correct": is_correct,
                "selected_options": selected,
            },
            summary="Automated MCQ evaluation",
        )


def correct_options(question: Question) -> list[str]:
    options = question.config.get("options")
    if not isinstance(options, list) or not options:
        raise StructuralError("choice question has no options")
    correct: list[str] = []
    for option in t.cast(list[t.Any], options):
        if not isinstance(option, dict) or "id" not in option:
            raise StructuralError("choice option without an id")
        if option.get("isCorrect"):
            correct.append(str(option["id"]))
    return correct


def selected_options(answer: Answer) -> list[str]:
    content = answer.content
    selected = content.get("selectedOptions", []) if isinstance(content, dict) else content
    if selected is None:
        return []
    if not isinstance(selected, list):
        raise StructuralError("selectedOptions must be a list")
    return [str(s) for s in t.cast(list[t.Any], selected)]
