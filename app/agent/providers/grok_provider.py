"""Grok (xAI) AI Provider implementation.

This provider uses the xAI API (OpenAI-compatible) to send chart images to
Grok's vision models through the standard /v1/chat/completions endpoint.
"""

import logging
from typing import Optional, List, Dict, Any

import httpx

from app.agent.providers import (
    AIProvider,
    ProviderConfig,
    AIResponse,
)

logger = logging.getLogger(__name__)

# Grok API base URL
GROK_BASE_URL = "https://api.x.ai/v1"


class GrokProvider(AIProvider):
    """Grok AI provider using the xAI API."""

    def __init__(self, config: ProviderConfig):
        """Initialize the Grok provider.

        Args:
            config: Provider configuration with API key and model names
        """
        super().__init__(config)
        self._client: Optional[httpx.AsyncClient] = None
        self._base_url = config.base_url or GROK_BASE_URL

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP async client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers={
                    "Authorization": f"Bearer {self.config.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=httpx.Timeout(180.0, connect=30.0),
            )
        return self._client

    def _build_messages(
        self,
        image_base64: str,
        prompt: str,
        media_type: str,
        system: Optional[str],
    ) -> List[Dict[str, Any]]:
        """Build OpenAI-format vision messages.

        Args:
            image_base64: Base64-encoded image data
            prompt: Analysis prompt
            media_type: Declared media type of the image
            system: Optional system prompt to prepend

        Returns:
            List of message dicts in OpenAI format
        """
        messages: List[Dict[str, Any]] = []

        if system:
            messages.append({"role": "system", "content": system})

        messages.append({
            "role": "user",
            "content": [
                {
                    "type": "image_url",
                    "image_url": {
                        "url": f"data:{media_type};base64,{image_base64}",
                    },
                },
                {
                    "type": "text",
                    "text": prompt,
                },
            ],
        })
        return messages

    def _extract_response(self, data: Dict[str, Any]) -> AIResponse:
        """Extract content from a Grok chat completion.

        Args:
            data: JSON response data

        Returns:
            AIResponse with extracted content
        """
        content = ""
        if data.get("choices"):
            message = data["choices"][0].get("message", {})
            content = message.get("content") or ""

        usage = None
        if "usage" in data:
            usage = {
                "prompt_tokens": data["usage"].get("prompt_tokens", 0),
                "completion_tokens": data["usage"].get("completion_tokens", 0),
                "total_tokens": data["usage"].get("total_tokens", 0),
            }

        return AIResponse(
            content=content,
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
        """Analyze an image using Grok's vision capabilities.

        Args:
            image_base64: Base64-encoded image data
            prompt: Analysis prompt
            media_type: Declared media type of the image
            system: Optional system instruction
            model_type: Model to use (default: planning for better analysis)

        Returns:
            AIResponse with analysis content

        Raises:
            httpx.HTTPStatusError: If the API request fails
        """
        client = self._get_client()
        model = self.get_model(model_type)

        body = {
            "model": model,
            "messages": self._build_messages(image_base64, prompt, media_type, system),
            "max_tokens": self.config.max_tokens,
        }

        try:
            logger.debug(f"Grok vision request: model={model}")
            response = await client.post("/chat/completions", json=body)
            response.raise_for_status()
            return self._extract_response(response.json())

        except httpx.HTTPStatusError as e:
            logger.error(f"Grok vision error: {e.response.status_code} - {e.response.text}")
            raise
        except httpx.RequestError as e:
            error_detail = str(e) or f"{type(e).__name__}: {repr(e)}"
            logger.error(f"Grok vision connection error: {error_detail}")
            raise

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
