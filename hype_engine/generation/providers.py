"""
HypeTrader — Generation Providers
───────────────────────────────────
One provider = one model on one vendor. ``attempt()`` never raises for an
upstream failure; every outcome is folded into a ProviderAttempt so the
cascade can decide whether to move on.

    success        text came back
    rate_limited   429 / 529, quota or overload message, HTML error page
    hard_error     anything else (bad key, schema change, empty answer)
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

import anthropic
import httpx

from hype_sources.base import looks_like_html, mentions_rate_limit

log = logging.getLogger("hype.generation")

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

TEMPERATURE       = 0.9
GEMINI_MAX_TOKENS = 8192
CLAUDE_MAX_TOKENS = 2048


class AttemptOutcome(str, Enum):
    SUCCESS      = "success"
    RATE_LIMITED = "rate_limited"
    HARD_ERROR   = "hard_error"


@dataclass
class ProviderAttempt:
    provider_id: str
    outcome:     AttemptOutcome
    text:        Optional[str] = None
    error:       Optional[str] = None
    elapsed_ms:  int = 0

    @property
    def ok(self) -> bool:
        return self.outcome == AttemptOutcome.SUCCESS

    def to_dict(self) -> dict:
        return {
            "provider_id": self.provider_id,
            "outcome":     self.outcome.value,
            "error":       self.error,
            "elapsed_ms":  self.elapsed_ms,
        }


def split_messages(messages: List[Dict[str, str]], system_prompt: str) -> Tuple[str, List[Dict[str, str]]]:
    """
    Fold ``system`` turns into the system instruction and return
    (system_text, conversation) with only user/assistant turns left.
    """
    extra = []
    turns = []
    for m in messages:
        role = m.get("role", "user")
        content = m.get("content") or ""
        if role == "system":
            extra.append(content)
        else:
            turns.append({"role": "assistant" if role == "assistant" else "user", "content": content})
    system_text = "\n\n".join([system_prompt] + extra) if extra else system_prompt
    return system_text, turns


class GenerationProvider(ABC):

    @property
    @abstractmethod
    def provider_id(self) -> str:
        ...

    @abstractmethod
    async def _call(self, system_text: str, turns: List[Dict[str, str]]) -> ProviderAttempt:
        ...

    async def attempt(self, messages: List[Dict[str, str]], system_prompt: str) -> ProviderAttempt:
        system_text, turns = split_messages(messages, system_prompt)
        started = time.monotonic()
        try:
            result = await self._call(system_text, turns)
        except Exception as e:
            log.exception(f"{self.provider_id} raised unexpectedly")
            result = self._hard_error(f"{type(e).__name__}: {e}")
        result.elapsed_ms = int((time.monotonic() - started) * 1000)
        return result

    def _rate_limited(self, detail: str = "") -> ProviderAttempt:
        log.warning(f"{self.provider_id} rate limited{': ' + detail if detail else ''}")
        return ProviderAttempt(self.provider_id, AttemptOutcome.RATE_LIMITED, error=detail or "rate limited")

    def _hard_error(self, detail: str) -> ProviderAttempt:
        log.warning(f"{self.provider_id} failed: {detail}")
        return ProviderAttempt(self.provider_id, AttemptOutcome.HARD_ERROR, error=detail)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.provider_id}>"


# ── Gemini (raw REST) ─────────────────────────────────────────

class GeminiProvider(GenerationProvider):

    def __init__(self, model: str, api_key: str, client: httpx.AsyncClient):
        self.model   = model
        self.api_key = api_key
        self.client  = client

    @property
    def provider_id(self) -> str:
        return f"gemini:{self.model}"

    def build_body(self, system_text: str, turns: List[Dict[str, str]]) -> dict:
        return {
            "contents": [
                {"role": "model" if t["role"] == "assistant" else "user", "parts": [{"text": t["content"]}]}
                for t in turns
            ],
            "systemInstruction": {"parts": [{"text": system_text}]},
            "generationConfig": {"temperature": TEMPERATURE, "maxOutputTokens": GEMINI_MAX_TOKENS},
        }

    async def _call(self, system_text: str, turns: List[Dict[str, str]]) -> ProviderAttempt:
        url = f"{GEMINI_BASE_URL}/{self.model}:generateContent"
        try:
            r = await self.client.post(
                url,
                json=self.build_body(system_text, turns),
                headers={"Content-Type": "application/json", "x-goog-api-key": self.api_key},
            )
        except httpx.HTTPError as e:
            return self._hard_error(f"{type(e).__name__}: {e}")

        raw = r.text
        log.info(f"{self.provider_id} → HTTP {r.status_code}, {len(raw)} bytes")
        try:
            data = r.json()
        except ValueError:
            if looks_like_html(raw):
                return self._rate_limited("HTML error page")
            if r.status_code == 429:
                return self._rate_limited("HTTP 429")
            return self._hard_error("Unparseable response")

        if not isinstance(data, dict):
            return self._hard_error("Unparseable response")

        error = data.get("error")
        if error:
            message = str(error.get("message", "")) if isinstance(error, dict) else str(error)
            code = error.get("code") if isinstance(error, dict) else None
            if r.status_code == 429 or code == 429 or "RESOURCE_EXHAUSTED" in message \
                    or mentions_rate_limit(message):
                return self._rate_limited(message)
            return self._hard_error(message or f"HTTP {r.status_code}")

        if r.status_code == 429:
            return self._rate_limited("HTTP 429")

        text = _gemini_text(data)
        if not text.strip():
            return self._hard_error("Empty response")
        return ProviderAttempt(self.provider_id, AttemptOutcome.SUCCESS, text=text)


def _gemini_text(data: dict) -> str:
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return ""
    content = candidates[0].get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return ""
    return "".join(str(p.get("text") or "") for p in parts if isinstance(p, dict))


# ── Anthropic (SDK) ───────────────────────────────────────────

class AnthropicProvider(GenerationProvider):
    """Sync SDK client, run in the default executor so the event loop stays free."""

    def __init__(self, model: str, client: "anthropic.Anthropic", max_tokens: int = CLAUDE_MAX_TOKENS):
        self.model      = model
        self.client     = client
        self.max_tokens = max_tokens

    @property
    def provider_id(self) -> str:
        return f"anthropic:{self.model}"

    async def _call(self, system_text: str, turns: List[Dict[str, str]]) -> ProviderAttempt:
        loop = asyncio.get_running_loop()
        try:
            response = await loop.run_in_executor(None, lambda: self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=TEMPERATURE,
                system=system_text,
                messages=turns,
            ))
        except anthropic.RateLimitError as e:
            return self._rate_limited(str(e))
        except anthropic.APIStatusError as e:
            message = str(e)
            if e.status_code in (429, 529) or "overloaded" in message.lower() \
                    or mentions_rate_limit(message) or looks_like_html(message):
                return self._rate_limited(message)
            return self._hard_error(message)
        except anthropic.APIError as e:
            return self._hard_error(f"{type(e).__name__}: {e}")

        text = "".join(
            getattr(block, "text", "") for block in (response.content or [])
            if getattr(block, "type", "text") == "text"
        ).strip()
        if not text:
            return self._hard_error("Empty response")
        log.info(f"{self.provider_id} → {len(text)} chars")
        return ProviderAttempt(self.provider_id, AttemptOutcome.SUCCESS, text=text)
