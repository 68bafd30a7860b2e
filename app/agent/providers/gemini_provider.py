"""Gemini (Google) AI Provider implementation.

This provider calls the Gemini REST API (``models/{model}:generateContent``)
over httpx, sending the prompt text and the chart image as inline data parts.
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

# Gemini API base URL
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiProvider(AIProvider):
    """Gemini AI provider using the Generative Language REST API."""

    def __init__(self, config: ProviderConfig):
        """Initialize the Gemini provider.

        Args:
            config: Provider configuration with API key and model names
        """
        super().__init__(config)
        self._client: Optional[httpx.AsyncClient] = None
        self._base_url = config.base_url or GEMINI_BASE_URL

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP async client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers={
                    "x-goog-api-key": self.config.api_key,
                    "Content-Type": "application/json",
                },
                timeout=httpx.Timeout(180.0, connect=30.0),
            )
        return self._client

    def _build_request_body(
        self,
        image_base64: str,
        prompt: str,
        media_type: str,
        system: Optional[str],
    ) -> Dict[str, Any]:
        """Build the generateContent request body.

        The prompt part precedes the image part.
        """
        body: Dict[str, Any] = {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"text": prompt},
                        {"inline_data": {"mime_type": media_type, "data": image_base64}},
                    ],
                }
            ],
            "generationConfig": {"maxOutputTokens": self.config.max_tokens},
        }
        if system:
            body["systemInstruction"] = {"parts": [{"text": system}]}
        return body

    def _extract_response(self, data: Dict[str, Any]) -> AIResponse:
        """Concatenate the text parts of the first candidate.

        Args:
            data: JSON response data

        Returns:
            AIResponse with extracted content
        """
        text_parts: List[str] = []
        candidates = data.get("candidates") or []
        if candidates:
            for part in candidates[0].get("content", {}).get("parts", []):
                if part.get("text"):
                    text_parts.append(part["text"])

        usage = None
        raw_usage = data.get("usageMetadata")
        if raw_usage:
            usage = {
                "prompt_tokens": raw_usage.get("promptTokenCount", 0),
                "completion_tokens": raw_usage.get("candidatesTokenCount", 0),
                "total_tokens": raw_usage.get("totalTokenCount", 0),
            }

        return AIResponse(
            content="".join(text_parts),
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
        """Analyze an image using Gemini's vision capabilities.

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
        body = self._build_request_body(image_base64, prompt, media_type, system)

        try:
            logger.debug(f"Gemini vision request: model={model}")
            response = await client.post(f"/models/{model}:generateContent", json=body)
            response.raise_for_status()
            return self._extract_response(response.json())

        except httpx.HTTPStatusError as e:
            logger.error(f"Gemini vision error: {e.response.status_code} - {e.response.text}")
            raise
        except httpx.RequestError as e:
            error_detail = str(e) or f"{type(e).__name__}: {repr(e)}"
            logger.error(f"Gemini vision connection error: {error_detail}")
            raise

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
