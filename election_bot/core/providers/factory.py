from .anthropic import AnthropicAdapter
from .base import ProviderAdapter
from .openai import OpenAIAdapter


def create_provider_adapter(provider: str) -> ProviderAdapter:
    """Create the adapter for a provider name.

    Args:
        provider: Provider type ('openai', 'anthropic' or its alias 'claude')

    Returns:
        Stateless ProviderAdapter instance

    Raises:
        ValueError: If provider type is not supported
    """
    provider_lower = provider.lower()

    if provider_lower == "openai":
        return OpenAIAdapter()

    if provider_lower in ("anthropic", "claude"):
        return AnthropicAdapter()

    raise ValueError(
        f"Unsupported provider: {provider}. "
        f"Supported providers: 'openai', 'anthropic'"
    )
