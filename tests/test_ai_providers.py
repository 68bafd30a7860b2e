"""Tests for AI Provider implementations and the provider factory.

HTTP providers run against httpx.MockTransport; the Anthropic client is
replaced with a mock, so no test reaches a real API.
"""

import json
import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from app.config import Settings
from app.agent.providers import AIResponse, ModelProvider, ProviderConfig

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def make_settings(**overrides) -> Settings:
    """Settings with every API key blank unless overridden."""
    values = {
        "claude_api_key": "",
        "grok_api_key": "",
        "gemini_api_key": "",
        "ai_provider": "gemini",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_config(provider: ModelProvider) -> ProviderConfig:
    return ProviderConfig(
        provider=provider,
        planning_model="vision-large",
        fast_model="vision-small",
        api_key="test-key",
        max_tokens=512,
    )


class TestProviderFactory:
    """Tests for the provider factory module."""

    def test_model_provider_enum(self):
        """Test ModelProvider enum values."""
        assert ModelProvider.CLAUDE.value == "claude"
        assert ModelProvider.GROK.value == "grok"
        assert ModelProvider.GEMINI.value == "gemini"

    def test_get_available_providers(self):
        """Test that available providers follow the configured keys."""
        from app.agent.providers.factory import get_available_providers

        settings = make_settings(claude_api_key="a", gemini_api_key="b")

        assert get_available_providers(settings) == [ModelProvider.CLAUDE, ModelProvider.GEMINI]
        assert get_available_providers(make_settings()) == []

    def test_default_provider_prefers_configured_choice(self):
        """Test AI_PROVIDER wins when its key is set."""
        from app.agent.providers.factory import get_default_provider

        settings = make_settings(ai_provider="grok", grok_api_key="g", claude_api_key="c")

        assert get_default_provider(settings) == ModelProvider.GROK

    def test_default_provider_falls_back(self):
        """Test an unconfigured choice falls back to a configured provider."""
        from app.agent.providers.factory import get_default_provider

        settings = make_settings(ai_provider="gemini", claude_api_key="c")

        assert get_default_provider(settings) == ModelProvider.CLAUDE

    def test_default_provider_unknown_name(self):
        """Test an unknown AI_PROVIDER value is ignored."""
        from app.agent.providers.factory import get_default_provider

        settings = make_settings(ai_provider="palm", grok_api_key="g")

        assert get_default_provider(settings) == ModelProvider.GROK

    @pytest.mark.parametrize("provider", list(ModelProvider))
    def test_missing_key_raises(self, provider):
        """Test creating an unconfigured provider raises ValueError."""
        from app.agent.providers.factory import create_provider

        with pytest.raises(ValueError, match="API key not configured"):
            create_provider(provider, make_settings())

    def test_create_each_provider(self):
        """Test each provider type is built with its configured models."""
        from app.agent.providers.factory import create_provider
        from app.agent.providers.claude_provider import ClaudeProvider
        from app.agent.providers.grok_provider import GrokProvider
        from app.agent.providers.gemini_provider import GeminiProvider

        settings = make_settings(
            claude_api_key="c",
            grok_api_key="g",
            gemini_api_key="m",
            gemini_model_planning="gemini-test-pro",
            max_output_tokens=1234,
        )

        assert isinstance(create_provider(ModelProvider.CLAUDE, settings), ClaudeProvider)
        assert isinstance(create_provider(ModelProvider.GROK, settings), GrokProvider)

        gemini = create_provider(ModelProvider.GEMINI, settings)
        assert isinstance(gemini, GeminiProvider)
        assert gemini.get_model("planning") == "gemini-test-pro"
        assert gemini.config.max_tokens == 1234
        assert gemini.name == "gemini"

    def test_grok_uses_module_base_url(self):
        """Test the factory leaves the Grok endpoint to the provider's default."""
        from app.agent.providers.factory import create_provider, get_provider_config
        from app.agent.providers.grok_provider import GROK_BASE_URL

        settings = make_settings(grok_api_key="g")

        assert get_provider_config(ModelProvider.GROK, settings).base_url is None
        assert create_provider(ModelProvider.GROK, settings)._base_url == GROK_BASE_URL

    def test_ai_response_carries_only_content_and_usage(self):
        """Test the provider reply model exposes content and usage only."""
        assert set(AIResponse.model_fields) == {"content", "usage"}

    def test_create_default_provider_unconfigured(self):
        """Test the default provider cannot be built without keys."""
        from app.agent.providers.factory import create_default_provider

        with pytest.raises(ValueError):
            create_default_provider(make_settings())


class TestGrokProvider:
    """Tests for the Grok provider over a mocked transport."""

    @pytest.mark.asyncio
    async def test_vision_request_and_response(self):
        """Test the chat completion body and content extraction."""
        from app.agent.providers.grok_provider import GrokProvider

        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["path"] = request.url.path
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "choices": [{"message": {"content": "Bearish trend."}}],
                "usage": {"prompt_tokens": 10, "completion_tokens": 3, "total_tokens": 13},
            })

        provider = GrokProvider(make_config(ModelProvider.GROK))
        provider._client = httpx.AsyncClient(
            base_url="https://api.x.ai/v1", transport=httpx.MockTransport(handler)
        )

        response = await provider.analyze_image("aW1n", "User: Trend?", media_type="image/jpeg", system="sys")

        assert response.content == "Bearish trend."
        assert response.usage["total_tokens"] == 13
        assert captured["path"] == "/v1/chat/completions"
        body = captured["body"]
        assert body["model"] == "vision-large"
        assert body["max_tokens"] == 512
        assert body["messages"][0] == {"role": "system", "content": "sys"}
        image_part, text_part = body["messages"][1]["content"]
        assert image_part["image_url"]["url"] == "data:image/jpeg;base64,aW1n"
        assert text_part == {"type": "text", "text": "User: Trend?"}
        await provider.aclose()

    @pytest.mark.asyncio
    async def test_http_error_propagates(self):
        """Test a non-success status raises HTTPStatusError."""
        from app.agent.providers.grok_provider import GrokProvider

        provider = GrokProvider(make_config(ModelProvider.GROK))
        provider._client = httpx.AsyncClient(
            base_url="https://api.x.ai/v1",
            transport=httpx.MockTransport(lambda request: httpx.Response(429, json={"error": "quota"})),
        )

        with pytest.raises(httpx.HTTPStatusError):
            await provider.analyze_image("aW1n", "Trend?")
        await provider.aclose()


class TestGeminiProvider:
    """Tests for the Gemini provider over a mocked transport."""

    @pytest.mark.asyncio
    async def test_generate_content_request_and_response(self):
        """Test the generateContent body and text concatenation."""
        from app.agent.providers.gemini_provider import GeminiProvider

        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["path"] = request.url.path
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "candidates": [{"content": {"parts": [{"text": "Bearish "}, {"text": "trend."}]}}],
                "usageMetadata": {"promptTokenCount": 7, "candidatesTokenCount": 2, "totalTokenCount": 9},
            })

        provider = GeminiProvider(make_config(ModelProvider.GEMINI))
        provider._client = httpx.AsyncClient(
            base_url="https://generativelanguage.googleapis.com/v1beta",
            transport=httpx.MockTransport(handler),
        )

        response = await provider.analyze_image("aW1n", "User: Trend?", media_type="image/png", model_type="fast")

        assert response.content == "Bearish trend."
        assert response.usage == {"prompt_tokens": 7, "completion_tokens": 2, "total_tokens": 9}
        assert captured["path"] == "/v1beta/models/vision-small:generateContent"
        parts = captured["body"]["contents"][0]["parts"]
        assert parts[0] == {"text": "User: Trend?"}
        assert parts[1] == {"inline_data": {"mime_type": "image/png", "data": "aW1n"}}
        assert "systemInstruction" not in captured["body"]
        assert captured["body"]["generationConfig"]["maxOutputTokens"] == 512
        await provider.aclose()

    @pytest.mark.asyncio
    async def test_empty_candidates(self):
        """Test a reply without candidates yields empty content."""
        from app.agent.providers.gemini_provider import GeminiProvider

        provider = GeminiProvider(make_config(ModelProvider.GEMINI))
        provider._client = httpx.AsyncClient(
            base_url="https://generativelanguage.googleapis.com/v1beta",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"candidates": []})),
        )

        response = await provider.analyze_image("aW1n", "Trend?")

        assert response.content == ""
        await provider.aclose()


class TestClaudeProvider:
    """Tests for the Claude provider with a mocked Anthropic client."""

    @pytest.fixture
    def claude_provider(self):
        from app.agent.providers.claude_provider import ClaudeProvider

        provider = ClaudeProvider(make_config(ModelProvider.CLAUDE))
        client = MagicMock()
        client.messages.create = AsyncMock(return_value=SimpleNamespace(
            content=[
                SimpleNamespace(type="text", text="Bearish"),
                SimpleNamespace(type="text", text="trend."),
            ],
            usage=SimpleNamespace(input_tokens=12, output_tokens=4),
        ))
        provider._client = client
        return provider

    @pytest.mark.asyncio
    async def test_vision_request(self, claude_provider):
        """Test the image block, system prompt and text extraction."""
        response = await claude_provider.analyze_image(
            "aW1n", "User: Trend?", media_type="image/gif", system="sys"
        )

        assert isinstance(response, AIResponse)
        assert response.content == "Bearish\ntrend."
        assert response.usage == {"input_tokens": 12, "output_tokens": 4}

        kwargs = claude_provider._client.messages.create.call_args.kwargs
        assert kwargs["model"] == "vision-large"
        assert kwargs["system"] == "sys"
        image_block, text_block = kwargs["messages"][0]["content"]
        assert image_block["source"] == {"type": "base64", "media_type": "image/gif", "data": "aW1n"}
        assert text_block == {"type": "text", "text": "User: Trend?"}

    @pytest.mark.asyncio
    async def test_unsupported_media_type_sent_as_png(self, claude_provider):
        """Test media types Claude does not accept fall back to PNG."""
        await claude_provider.analyze_image("aW1n", "Trend?", media_type="image/bmp")

        kwargs = claude_provider._client.messages.create.call_args.kwargs
        assert kwargs["messages"][0]["content"][0]["source"]["media_type"] == "image/png"
        assert "system" not in kwargs
