__all__ = [
    "AssessorContainer",
    "BootConfiguration",
    "EvaluationContainer",
    "LLMContainer",
    "StorageContainer",
    "TemplateContainer",
]

from .assessor import AssessorContainer, BootConfiguration
from .evaluation import EvaluationContainer
from .llm import LLMContainer
from .storage import StorageContainer
from .template import TemplateContainer
