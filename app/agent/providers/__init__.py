"""AI Provider abstraction layer for chart analysis.

This module provides a unified interface for vision-capable model providers
(Claude, Grok, Gemini), so the analysis endpoint can switch models through
configuration alone.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional, Dict, Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class ModelProvider(str, Enum):
    """Supported AI model providers."""
    CLAUDE = "claude"
    GROK = "grok"
    GEMINI = "gemini"


class ProviderConfig(BaseModel):
    """Configuration for an AI provider."""
    provider: ModelProvider
    planning_model: str = Field(..., description="Model ID for full chart analysis")
    fast_model: str = Field(..., description="Model ID for quick follow-up answers")
    api_key: str = Field(..., description="API key for the provider")
    base_url: Optional[str] = Field(None, description="Base URL override for the API")
    max_tokens: int = Field(2000, description="Maximum tokens per response", gt=0)


class AIResponse(BaseModel):
    """Response from an AI provider."""
    content: str = Field(..., description="Text content of the response")
    usage: Optional[Dict[str, Any]] = Field(None, description="Token usage information")


class AIProvider(ABC):
    """Abstract base class for vision-capable AI providers.

    Implementations send one image plus one text prompt and return the
    model's text reply. They hold a lazily created client handle and are
    constructed once per process.
    """

    def __init__(self, config: ProviderConfig):
        """Initialize the provider with configuration.

        Args:
            config: Provider configuration including API key and model names
        """
        self.config = config
        logger.info(f"Initializing {config.provider.value} provider")

    @property
    def name(self) -> str:
        """Provider name, e.g. 'claude'."""
        return self.config.provider.value

    @abstractmethod
    async def analyze_image(
        self,
        image_base64: str,
        prompt: str,
        media_type: str = "image/png",
        system: Optional[str] = None,
        model_type: str = "planning",
    ) -> AIResponse:
        """Analyze an image using the AI model's vision capabilities.

        Args:
            image_base64: Base64-encoded image data
            prompt: Analysis prompt (linearized conversation + question)
            media_type: Declared media type of the image
            system: Optional system instruction
            model_type: Model to use for analysis

        Returns:
            AIResponse with analysis content
        """
        pass

    async def aclose(self) -> None:
        """Release the underlying client, if any."""
        return None

    def get_model(self, model_type: str = "fast") -> str:
        """Get the model ID for the specified type.

        Args:
            model_type: "planning" or "fast"

        Returns:
            Model ID string
        """
        if model_type == "planning":
            return self.config.planning_model
        return self.config.fast_model


__all__ = [
    "ModelProvider",
    "ProviderConfig",
    "AIResponse",
    "AIProvider",
]
