"""
Unit tests for the OpenAI-compatible LLM service.

Tests verify:
- Vision content parts put images ahead of the prompt
- generate() sends system and user messages and returns the text
- Empty completions are errors
- Rate-limit headers drive the retry wait
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai

from core.llm.openai_service import (
    OpenAIService,
    _parse_reset_duration,
    _wait_from_rate_limit_headers,
    build_user_content,
)
from core.media.image_fetcher import EncodedImage


def _completion(content):
    mock_message = MagicMock()
    mock_message.content = content
    mock_choice = MagicMock()
    mock_choice.message = mock_message
    mock_response = MagicMock()
    mock_response.choices = [mock_choice]
    return mock_response


def _rate_limit_error(headers):
    request = httpx.Request("POST", "https://llm.test/v1/chat/completions")
    response = httpx.Response(429, headers=headers, request=request)
    return openai.RateLimitError("rate limited", response=response, body=None)


class TestBuildUserContent:

    def test_text_only_is_plain_string(self):
        assert build_user_content("hello", None) == "hello"
        assert build_user_content("hello", []) == "hello"

    def test_images_come_first(self):
        images = [EncodedImage("AAA", "image/png"), EncodedImage("BBB")]
        parts = build_user_content("assess", images)

        assert parts[0] == {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAA"}}
        assert parts[1]["image_url"]["url"] == "data:image/jpeg;base64,BBB"
        assert parts[2] == {"type": "text", "text": "assess"}


class TestGenerate:

    @pytest.fixture
    def service(self):
        """Create service with mocked client."""
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=_completion('{"ok": true}'))
        return OpenAIService(model_config={"model": "test-model", "temperature": 0.2}, client=client)

    async def test_sends_system_and_user_messages(self, service):
        text = await service.generate("prompt", system_prompt="be a scout")

        assert text == '{"ok": true}'
        kwargs = service.client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["temperature"] == 0.2
        assert kwargs["messages"] == [
            {"role": "system", "content": "be a scout"},
            {"role": "user", "content": "prompt"},
        ]

    async def test_vision_request(self, service):
        await service.generate("prompt", images=[EncodedImage("AAA")])

        messages = service.client.chat.completions.create.call_args.kwargs["messages"]
        assert len(messages) == 1
        assert messages[0]["content"][0]["type"] == "image_url"

    async def test_empty_completion_raises(self, service):
        service.client.chat.completions.create.return_value = _completion("")
        with pytest.raises(ValueError):
            await service.generate("prompt")

    async def test_no_choices_raises(self, service):
        response = MagicMock()
        response.choices = []
        service.client.chat.completions.create.return_value = response
        with pytest.raises(ValueError):
            await service.generate("prompt")


class TestRateLimitWait:

    @pytest.mark.parametrize("value,expected", [("1s", 1.0), ("500ms", 0.5), ("1m30s", 90.0), ("", 0.0)])
    def test_parse_reset_duration(self, value, expected):
        assert _parse_reset_duration(value) == expected

    def test_longest_declared_wait_wins(self):
        exc = _rate_limit_error({"retry-after": "3", "x-ratelimit-reset-tokens": "7s"})
        assert _wait_from_rate_limit_headers(exc) == 7.0

    def test_no_headers(self):
        assert _wait_from_rate_limit_headers(_rate_limit_error({})) == 0.0
