"""Tests for the chat-completions client."""
import json
from unittest.mock import patch

import httpx
import pytest

from talkitout.llm_router import LLMNotConfigured, complete

_RealAsyncClient = httpx.AsyncClient


def _client_with(handler):
    def factory(**kwargs):
        return _RealAsyncClient(transport=httpx.MockTransport(handler), **kwargs)
    return factory


class TestComplete:
    @pytest.mark.asyncio
    async def test_requires_key(self, settings):
        with pytest.raises(LLMNotConfigured):
            await complete(settings, [{"role": "user", "content": "hi"}])

    @pytest.mark.asyncio
    async def test_posts_and_returns_stripped_content(self, llm_settings):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"choices": [{"message": {"content": "  hello there \n"}}]})

        with patch("talkitout.llm_router.httpx.AsyncClient", new=_client_with(handler)):
            text = await complete(llm_settings, [{"role": "user", "content": "hi"}], temperature=0.3, max_tokens=150)

        assert text == "hello there"
        assert seen["url"].endswith("/chat/completions")
        assert seen["auth"] == "Bearer sk-test"
        assert seen["body"]["temperature"] == 0.3
        assert seen["body"]["max_tokens"] == 150
        assert seen["body"]["model"] == llm_settings.ai_model

    @pytest.mark.asyncio
    async def test_no_choices_is_empty_string(self, llm_settings):
        handler = lambda request: httpx.Response(200, json={"choices": []})
        with patch("talkitout.llm_router.httpx.AsyncClient", new=_client_with(handler)):
            assert await complete(llm_settings, []) == ""

    @pytest.mark.asyncio
    async def test_non_2xx_raises(self, llm_settings):
        handler = lambda request: httpx.Response(500, json={"error": "boom"})
        with patch("talkitout.llm_router.httpx.AsyncClient", new=_client_with(handler)):
            with pytest.raises(httpx.HTTPStatusError):
                await complete(llm_settings, [])
