from .provider import create_chat_model, ModelConfig, ProviderType
from .scorer import ChatModelScorer, ExternalScorer, parse_json_object, ScoreRequest, UnavailableScorer

__all__ = [
    "ChatModelScorer",
    "ExternalScorer",
    "ModelConfig",
    "ProviderType",
    "ScoreRequest",
    "UnavailableScorer",
    "create_chat_model",
    "parse_json_object",
]
