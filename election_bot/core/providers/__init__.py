from .anthropic import AnthropicAdapter
from .base import ProviderAdapter
from .factory import create_provider_adapter
from .openai import OpenAIAdapter

__all__ = ["AnthropicAdapter", "OpenAIAdapter", "ProviderAdapter", "create_provider_adapter"]
