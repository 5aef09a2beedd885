__all__ = [
    "EvaluationSettings",
    "LLMSettings",
    "LoggingSettings",
    "ModelSettings",
    "Secrets",
    "Settings",
    "StorageSettings",
    "TemplateSettings",
    "WebSettings",
]


from .evaluation import EvaluationSettings
from .llm import LLMSettings, ModelSettings
from .logging import LoggingSettings
from .secrets import Secrets
from .settings import Settings
from .storage import StorageSettings
from .template import TemplateSettings
from .web import WebSettings
