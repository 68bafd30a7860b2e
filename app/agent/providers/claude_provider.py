"""Claude (Anthropic) AI Provider implementation.

This provider uses the Anthropic SDK to send chart images to Claude's
vision models.
"""

import logging
from typing import Optional, Dict, Any

import anthropic
from anthropic import APIError, APIConnectionError, RateLimitError

from app.agent.providers import (
    AIProvider,
    ProviderConfig,
    AIResponse,
)

logger = logging.getLogger(__name__)

# Media types accepted by the Messages API image block
SUPPORTED_MEDIA_TYPES = {"image/png", "image/jpeg", "image/gif", "image/webp"}


class ClaudeProvider(AIProvider):
    """Claude AI provider using the Anthropic SDK."""

    def __init__(self, config: ProviderConfig):
        """Initialize the Claude provider.

        Args:
            config: Provider configuration with API key and model names
        """
        super().__init__(config)
        self._client: Optional[anthropic.AsyncAnthropic] = None

    def _get_client(self) -> anthropic.AsyncAnthropic:
        """Get or create the Anthropic async client."""
        if self._client is None:
            kwargs = {"api_key": self.config.api_key}
            if self.config.base_url:
                kwargs["base_url"] = self.config.base_url
            self._client = anthropic.AsyncAnthropic(**kwargs)
        return self._client

    def _extract_response(self, response) -> AIResponse:
        """Extract text content from an Anthropic response.

        Args:
            response: Anthropic API response

        Returns:
            AIResponse with extracted content
        """
        text_parts = [
            block.text
            for block in response.content
            if getattr(block, "type", None) == "text"
        ]

        usage = None
        if getattr(response, "usage", None):
            usage = {
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            }

        return AIResponse(
            content="\n".join(text_parts),
            usage=usage,
        )

    async def analyze_image(
        self,
        image_base64: str,
        prompt: str,
        media_type: str = "image/png",
        system: Optional[str] = None,
        model_type: str = "planning",
    ) -> AIResponse:
        """Analyze an image using Claude's vision capabilities.

        Args:
            image_base64: Base64-encoded image data (PNG, JPEG, GIF, or WebP)
            prompt: Analysis prompt
            media_type: Declared media type; unsupported types fall back to PNG
            system: Optional system instruction
            model_type: Model to use (default: planning for better analysis)

        Returns:
            AIResponse with analysis content
        """
        client = self._get_client()
        model = self.get_model(model_type)

        if media_type not in SUPPORTED_MEDIA_TYPES:
            logger.debug(f"Unsupported media type {media_type} for Claude, sending as image/png")
            media_type = "image/png"

        message_content = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": media_type,
                    "data": image_base64,
                },
            },
            {
                "type": "text",
                "text": prompt,
            },
        ]

        request_params: Dict[str, Any] = {
            "model": model,
            "max_tokens": self.config.max_tokens,
            "messages": [{"role": "user", "content": message_content}],
        }
        if system:
            request_params["system"] = system

        try:
            logger.debug(f"Claude vision request: model={model}")
            response = await client.messages.create(**request_params)
            return self._extract_response(response)

        except RateLimitError as e:
            logger.warning(f"Claude rate limit hit: {e}")
            raise
        except APIConnectionError as e:
            logger.error(f"Claude connection error: {e}")
            raise
        except APIError as e:
            logger.error(f"Claude vision error: {e}")
            raise

    async def aclose(self) -> None:
        """Close the Anthropic client."""
        if self._client is not None:
            await self._client.close()
            self._client = None
