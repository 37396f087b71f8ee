from .base import GenerationConfig, ProviderHealth, SummaryProvider
from .chain import ProviderChain
from .factory import ProviderFactory
from .gemini import GeminiProvider
from .huggingface import HuggingFaceProvider

__all__ = [
    "GenerationConfig",
    "ProviderHealth",
    "SummaryProvider",
    "ProviderChain",
    "ProviderFactory",
    "GeminiProvider",
    "HuggingFaceProvider",
]
