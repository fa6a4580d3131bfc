"""
HypeTrader — Generation Cascade
─────────────────────────────────
Ordered list of providers tried one at a time until one answers.

    gemini-2.0-flash → gemini-2.5-flash → gemini-2.0-flash-lite → claude…

Strictly sequential: a later provider is only called once the earlier one
has failed, and nothing is retried. When the list is exhausted:

    every attempt rate limited   GenerationRateLimitedError (HTTP 429)
    anything else                GenerationFailedError      (HTTP 500)
"""

import json
import logging
import re
from typing import Dict, Iterator, List, Optional

import anthropic
import httpx

from hype_engine.config import Settings
from hype_engine.errors import (
    ConfigurationError, GenerationFailedError, GenerationRateLimitedError, InvalidRequestError,
)
from hype_engine.generation import prompts
from hype_engine.generation.providers import (
    AnthropicProvider, AttemptOutcome, GeminiProvider, GenerationProvider, ProviderAttempt,
)

log = logging.getLogger("hype.generation")

ROLES = ("user", "assistant", "system")


def build_providers(settings: Settings, client: httpx.AsyncClient,
                    anthropic_client: Optional["anthropic.Anthropic"] = None) -> List[GenerationProvider]:
    """Default chain: every configured Gemini model, then every Anthropic model."""
    providers: List[GenerationProvider] = []
    if settings.google_api_key:
        providers += [GeminiProvider(m, settings.google_api_key, client) for m in settings.gemini_models]
    if settings.anthropic_api_key or anthropic_client is not None:
        sdk = anthropic_client or anthropic.Anthropic(
            api_key=settings.anthropic_api_key, timeout=settings.request_timeout * 4,
        )
        providers += [AnthropicProvider(m, sdk) for m in settings.anthropic_models]
    return providers


def validate_messages(messages: List[Dict[str, str]]) -> List[Dict[str, str]]:
    if not messages:
        raise InvalidRequestError("messages must not be empty")
    cleaned = []
    for m in messages:
        role = m.get("role")
        if role not in ROLES:
            raise InvalidRequestError(f"Unsupported message role {role!r}")
        cleaned.append({"role": role, "content": str(m.get("content") or "")})
    if not any(m["role"] != "system" for m in cleaned):
        raise InvalidRequestError("messages need at least one user or assistant turn")
    return cleaned


class GenerationCascade:

    def __init__(self, providers: List[GenerationProvider]):
        self.providers = list(providers)

    @property
    def provider_ids(self) -> List[str]:
        return [p.provider_id for p in self.providers]

    async def generate(self, messages: List[Dict[str, str]], system_prompt: Optional[str] = None) -> str:
        if not self.providers:
            raise ConfigurationError("API key not configured")
        messages = validate_messages(messages)
        prompt = system_prompt if system_prompt is not None else prompts.system_prompt()

        attempts: List[ProviderAttempt] = []
        for provider in self.providers:
            log.info(f"Trying {provider.provider_id}")
            result = await provider.attempt(messages, prompt)
            attempts.append(result)
            if result.ok:
                log.info(f"{provider.provider_id} answered in {result.elapsed_ms}ms, {len(result.text)} chars")
                return result.text

        last_error = next((a.error for a in reversed(attempts) if a.error), None)
        if all(a.outcome == AttemptOutcome.RATE_LIMITED for a in attempts):
            log.error(f"All {len(attempts)} providers rate limited")
            raise GenerationRateLimitedError(
                "All models are rate limited - please try again later",
                attempts=attempts, last_error=last_error,
            )
        log.error(f"All {len(attempts)} providers failed. Last error: {last_error}")
        raise GenerationFailedError(
            f"Failed to get response: {last_error or 'Unknown error'}",
            attempts=attempts, last_error=last_error,
        )


# ── Wire format ───────────────────────────────────────────────

_PARAGRAPH_BREAK = re.compile(r"(?<=\n\n)")


def encode_stream(text: str) -> Iterator[str]:
    """
    Chat stream lines the frontend understands: ``0:<json string>\\n``,
    one per paragraph. Decoding and concatenating every line gives back
    ``text`` unchanged.
    """
    segments = [s for s in _PARAGRAPH_BREAK.split(text) if s]
    if not segments:
        segments = [""]
    for segment in segments:
        yield f"0:{json.dumps(segment, ensure_ascii=False)}\n"
