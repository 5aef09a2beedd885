__all__ = [
    "ChoiceEvaluator",
    "CodeEvaluator",
    "FallbackEvaluator",
    "InterviewEvaluator",
    "ProjectEvaluator",
    "SeleniumEvaluator",
    "TextEvaluator",
]

from .choice import ChoiceEvaluator
from .code import CodeEvaluator
from .fallback import FallbackEvaluator
from .interview import InterviewEvaluator
from .project import ProjectEvaluator
from .selenium import SeleniumEvaluator
from .text import TextEvaluator
