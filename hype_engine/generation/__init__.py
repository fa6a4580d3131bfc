from .cascade import GenerationCascade, build_providers, encode_stream
from .providers import (
    AnthropicProvider, AttemptOutcome, GeminiProvider, GenerationProvider, ProviderAttempt,
)

__all__ = [
    "GenerationCascade", "build_providers", "encode_stream",
    "AnthropicProvider", "AttemptOutcome", "GeminiProvider", "GenerationProvider", "ProviderAttempt",
]
