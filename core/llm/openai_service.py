"""
OpenAI Service - LLM implementation using the OpenAI SDK.

Works against any OpenAI-compatible chat-completions endpoint; the default
configuration points at Gemini's OpenAI-compatible API. Images are sent as
base64 data URIs in ``image_url`` content parts.
"""
from typing import Any, Dict, List, Optional, Sequence
import logging
import re

import openai
from openai import AsyncOpenAI
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity import RetryCallState
from core.llm.interfaces import LLMProvider
from core.media.image_fetcher import EncodedImage

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Retry helpers
# ---------------------------------------------------------------------------

RETRYABLE_ERRORS = (
    openai.RateLimitError,
    openai.APITimeoutError,
    openai.APIConnectionError,
    openai.InternalServerError,
)


def _log_retry(retry_state: RetryCallState) -> None:
    """Log a warning before each retry sleep."""
    exc = retry_state.outcome.exception()
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    kind = "Rate limit hit" if isinstance(exc, openai.RateLimitError) else "Transient API error"
    logger.warning(
        "%s (attempt %s). Waiting %.1fs before retry. Details: %s",
        kind, retry_state.attempt_number, wait, exc,
    )


def _parse_reset_duration(value: str) -> float:
    """Parse a reset-timer header value like '1s', '500ms', '1m30s' into seconds."""
    total = 0.0
    for amount, unit in re.findall(r"([\d.]+)(ms|s|m|h)", value):
        a = float(amount)
        if unit == "ms":
            total += a / 1000
        elif unit == "s":
            total += a
        elif unit == "m":
            total += a * 60
        else:  # h
            total += a * 3600
    return total


def _wait_from_rate_limit_headers(exc: openai.RateLimitError) -> float:
    """Longest wait declared by ``retry-after`` or the ``x-ratelimit-reset-*`` headers; 0.0 if none."""
    headers = getattr(getattr(exc, "response", None), "headers", None)
    if headers is None:
        return 0.0

    candidates: List[float] = []
    retry_after = headers.get("retry-after", "")
    if retry_after:
        try:
            candidates.append(float(retry_after))
        except ValueError:
            pass

    for header in ("x-ratelimit-reset-requests", "x-ratelimit-reset-tokens"):
        parsed = _parse_reset_duration(headers.get(header, ""))
        if parsed > 0:
            candidates.append(parsed)

    return max(candidates) if candidates else 0.0


def _wait_respecting_retry_after(retry_state: RetryCallState) -> float:
    """Server-declared wait for rate limits, capped exponential backoff otherwise."""
    exc = retry_state.outcome.exception()
    if isinstance(exc, openai.RateLimitError):
        wait = _wait_from_rate_limit_headers(exc)
        if wait > 0:
            wait = min(wait, 120)  # safety cap at 2 min
            logger.info("Rate limit headers indicate %.1fs wait.", wait)
            return wait

    # Fallback: exponential backoff 2 -> 4 -> 8 ... capped at 60s
    exp = wait_exponential(multiplier=1, min=2, max=60)
    return exp(retry_state)


def _llm_retry(**kwargs):
    """Return a tenacity @retry decorator for LLM API calls."""
    return retry(
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        wait=_wait_respecting_retry_after,
        stop=stop_after_attempt(8),
        before_sleep=_log_retry,
        reraise=True,
        **kwargs,
    )


def build_user_content(prompt: str, images: Optional[Sequence[EncodedImage]]) -> Any:
    """Plain string for text-only prompts, content parts (images first) for vision."""
    if not images:
        return prompt
    parts: List[Dict[str, Any]] = [
        {"type": "image_url", "image_url": {"url": image.data_uri}}
        for image in images
    ]
    parts.append({"type": "text", "text": prompt})
    return parts


class OpenAIService(LLMProvider):
    """
    OpenAI-compatible LLM Service.

    Provides text and vision completions with retry on transient API errors.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model_config: Optional[Dict[str, Any]] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model_config = model_config or {}
        if client is None:
            client_kwargs: Dict[str, Any] = {}
            if api_key:
                client_kwargs['api_key'] = api_key
            if base_url:
                client_kwargs['base_url'] = base_url
            if self.model_config.get('request_timeout_seconds'):
                client_kwargs['timeout'] = self.model_config['request_timeout_seconds']
            client = AsyncOpenAI(**client_kwargs)
        self.client = client

        self.model = self.model_config.get('model', 'gemini-2.0-flash')
        self.temperature = self.model_config.get('temperature', 0.7)
        self.max_output_tokens = self.model_config.get('max_output_tokens', 2048)

    @_llm_retry()
    async def generate(
        self,
        prompt: str,
        images: Optional[Sequence[EncodedImage]] = None,
        system_prompt: Optional[str] = None,
    ) -> str:
        messages: List[Dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": build_user_content(prompt, images)})

        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=self.temperature,
            max_tokens=self.max_output_tokens,
        )

        try:
            content = response.choices[0].message.content
        except (IndexError, AttributeError) as e:
            logger.error(f"Malformed completion response from {self.model}: {e}")
            raise ValueError(f"Malformed completion response: {e}") from e
        if not content:
            raise ValueError(f"Empty completion from {self.model}")

        logger.debug(f"{self.model} returned {len(content)} chars ({len(images or [])} images)")
        return content

    async def close(self) -> None:
        await self.client.close()
