"""AI Provider factory for creating provider instances from configuration.

The application builds exactly one provider at startup and injects it into
request handlers; nothing here caches instances at module level.
"""

import logging
from typing import List, Optional

from app.config import Settings, get_settings
from app.agent.providers import (
    ModelProvider,
    ProviderConfig,
    AIProvider,
)
from app.agent.providers.claude_provider import ClaudeProvider
from app.agent.providers.grok_provider import GrokProvider
from app.agent.providers.gemini_provider import GeminiProvider

logger = logging.getLogger(__name__)


def get_provider_config(provider: ModelProvider, settings: Optional[Settings] = None) -> ProviderConfig:
    """Get the configuration for a specific provider.

    Reads API keys and model names from the application settings.

    Args:
        provider: The provider to get configuration for
        settings: Settings to read from (defaults to the cached settings)

    Returns:
        ProviderConfig with all settings populated

    Raises:
        ValueError: If the provider's API key is not configured
    """
    settings = settings or get_settings()

    if provider == ModelProvider.CLAUDE:
        if not settings.claude_api_key:
            raise ValueError(
                "Claude API key not configured. "
                "Set CLAUDE_API_KEY in your environment or .env file."
            )
        return ProviderConfig(
            provider=provider,
            planning_model=settings.claude_model_planning,
            fast_model=settings.claude_model_fast,
            api_key=settings.claude_api_key,
            base_url=None,  # Use default Anthropic URL
            max_tokens=settings.max_output_tokens,
        )

    elif provider == ModelProvider.GROK:
        if not settings.grok_api_key:
            raise ValueError(
                "Grok API key not configured. "
                "Set GROK_API_KEY in your environment or .env file."
            )
        return ProviderConfig(
            provider=provider,
            planning_model=settings.grok_model_planning,
            fast_model=settings.grok_model_fast,
            api_key=settings.grok_api_key,
            base_url=None,  # Use GROK_BASE_URL
            max_tokens=settings.max_output_tokens,
        )

    elif provider == ModelProvider.GEMINI:
        if not settings.gemini_api_key:
            raise ValueError(
                "Gemini API key not configured. "
                "Set GEMINI_API_KEY in your environment or .env file."
            )
        return ProviderConfig(
            provider=provider,
            planning_model=settings.gemini_model_planning,
            fast_model=settings.gemini_model_fast,
            api_key=settings.gemini_api_key,
            base_url=None,
            max_tokens=settings.max_output_tokens,
        )

    else:
        raise ValueError(f"Unknown provider: {provider}")


def create_provider(provider: ModelProvider, settings: Optional[Settings] = None) -> AIProvider:
    """Create a new provider instance.

    Args:
        provider: The provider type to create
        settings: Settings to read from (defaults to the cached settings)

    Returns:
        A new AIProvider instance

    Raises:
        ValueError: If the provider is not configured or unknown
    """
    config = get_provider_config(provider, settings)

    if provider == ModelProvider.CLAUDE:
        return ClaudeProvider(config)
    elif provider == ModelProvider.GROK:
        return GrokProvider(config)
    elif provider == ModelProvider.GEMINI:
        return GeminiProvider(config)
    else:
        raise ValueError(f"Unknown provider: {provider}")


def get_available_providers(settings: Optional[Settings] = None) -> List[ModelProvider]:
    """Get a list of providers that are properly configured.

    Returns:
        List of ModelProvider values that have API keys configured
    """
    settings = settings or get_settings()
    return [p for p in ModelProvider if is_provider_available(p, settings)]


def is_provider_available(provider: ModelProvider, settings: Optional[Settings] = None) -> bool:
    """Check if a provider is configured and available.

    Args:
        provider: The provider to check
        settings: Settings to read from (defaults to the cached settings)

    Returns:
        True if the provider's API key is configured
    """
    settings = settings or get_settings()

    if provider == ModelProvider.CLAUDE:
        return bool(settings.claude_api_key)
    elif provider == ModelProvider.GROK:
        return bool(settings.grok_api_key)
    elif provider == ModelProvider.GEMINI:
        return bool(settings.gemini_api_key)

    return False


def get_default_provider(settings: Optional[Settings] = None) -> ModelProvider:
    """Get the provider to use based on configuration.

    The configured ``AI_PROVIDER`` wins when its key is set; otherwise the
    first configured provider is used.

    Returns:
        The default ModelProvider
    """
    settings = settings or get_settings()

    try:
        preferred = ModelProvider(settings.ai_provider.lower())
    except ValueError:
        logger.warning(f"Unknown AI_PROVIDER '{settings.ai_provider}', ignoring")
        preferred = None

    if preferred is not None and is_provider_available(preferred, settings):
        return preferred

    available = get_available_providers(settings)
    if available:
        if preferred is not None:
            logger.warning(
                f"{preferred.value} provider not configured, falling back to {available[0].value}"
            )
        return available[0]

    # Nothing configured - will raise error when actually created
    logger.warning("No AI provider API key configured")
    return preferred or ModelProvider.GEMINI


def create_default_provider(settings: Optional[Settings] = None) -> AIProvider:
    """Create the provider selected by configuration.

    Raises:
        ValueError: If no provider is configured
    """
    settings = settings or get_settings()
    return create_provider(get_default_provider(settings), settings)
