from __future__ import annotations

import logging
from functools import lru_cache

from openai import OpenAI

from app.core.config import settings

logger = logging.getLogger(__name__)


class InsightsLLMError(RuntimeError):
    def __init__(self, message: str, *, code: str = "llm_unavailable"):
        super().__init__(message)
        self.code = code


def _looks_like_placeholder(value: str) -> bool:
    lower = value.strip().lower()
    return lower.startswith("your_") or lower.startswith("replace_") or lower in {"changeme", "todo"}


def insights_llm_enabled() -> bool:
    if not settings.insights_llm_enabled:
        return False
    api_key = (settings.openrouter_api_key or "").strip()
    if not api_key or _looks_like_placeholder(api_key):
        return False
    return True


@lru_cache(maxsize=1)
def _client() -> OpenAI:
    return OpenAI(
        api_key=(settings.openrouter_api_key or "").strip(),
        base_url=settings.openrouter_base_url,
        timeout=settings.insights_timeout_s,
        max_retries=0,
        default_headers={
            "HTTP-Referer": settings.app_url,
            "X-Title": "SkillSync Career Pathways",
        },
    )


def model_name() -> str:
    return settings.insights_model


def chat_completion(
    *,
    system_prompt: str,
    user_prompt: str,
    temperature: float = 0.3,
    max_output_tokens: int = 2500,
) -> str:
    if not insights_llm_enabled():
        raise InsightsLLMError("OPENROUTER_API_KEY is not configured.", code="llm_disabled")

    try:
        response = _client().chat.completions.create(
            model=model_name(),
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_output_tokens,
        )
    except Exception as exc:  # noqa: BLE001 - surfaced to the caller as a typed error
        logger.warning("insights_llm_failed model=%s prompt_len=%s: %s", model_name(), len(user_prompt), exc)
        raise InsightsLLMError(f"Failed to call OpenRouter: {exc}", code="llm_exception") from exc

    content = response.choices[0].message.content if response.choices else ""
    if not content:
        raise InsightsLLMError("No response from OpenRouter API", code="empty_response")
    return str(content)
