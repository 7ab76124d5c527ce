"""Provider selection and fallback for chat completions."""

import logging
from dataclasses import replace
from typing import Mapping, Optional, Sequence

from ..common.enums import ProviderName
from ..models import CompletionResult, Message, ProviderConfig
from .errors import ConfigurationError, ProviderUnavailableError, UpstreamError
from .llm_client import LLMClient
from .providers import ProviderAdapter, create_provider_adapter

logger = logging.getLogger(__name__)


def _apply_model_override(config: ProviderConfig, model: Optional[str]) -> ProviderConfig:
    """Use a requested model only where it belongs to the provider."""
    if not model:
        return config
    is_claude_model = "claude" in model.lower()
    if (config.provider == ProviderName.ANTHROPIC) == is_claude_model:
        return replace(config, model=model)
    return config


class CompletionOrchestrator:
    """Picks a provider, calls it, and falls back once on failure.

    Policy:
        1. Preferred provider is OpenAI and it has a key: try OpenAI. Any
           failure is logged and triggers fallback.
        2. Fallback goes to Anthropic if it has a key, otherwise
           ``ProviderUnavailableError``.
        3. Otherwise go straight to Anthropic if it has a key, otherwise
           ``ConfigurationError``.

    At most one HTTP call per provider per turn, never concurrently.

    Usage:
        orchestrator = CompletionOrchestrator(
            provider_configs={"openai": openai_cfg, "anthropic": anthropic_cfg},
            client=LLMClient(timeout=30.0),
        )
        result = await orchestrator.complete(history, Message("user", "When is polling?"))
    """

    def __init__(
        self,
        provider_configs: Mapping[str, Optional[ProviderConfig]],
        client: LLMClient,
        adapters: Optional[Mapping[str, ProviderAdapter]] = None,
    ):
        self.provider_configs = dict(provider_configs)
        self.client = client
        self.adapters: dict[str, ProviderAdapter] = dict(adapters) if adapters else {
            name: create_provider_adapter(name) for name in (ProviderName.OPENAI, ProviderName.ANTHROPIC)
        }

    @property
    def configured_providers(self) -> list[str]:
        return [name for name, config in self.provider_configs.items() if config is not None]

    async def complete(
        self,
        history: Sequence[Message],
        latest_user_message: Message,
        preferred_provider: str = ProviderName.OPENAI,
        system_prompt: Optional[str] = None,
        model: Optional[str] = None,
        history_window: Optional[int] = None,
    ) -> CompletionResult:
        """Produce a canonical completion for the latest user message.

        Args:
            history: Prior turns, oldest first (system turns allowed)
            latest_user_message: Message to answer
            preferred_provider: 'openai' or 'anthropic'
            system_prompt: Dedicated system instruction, if any
            model: Requested model; applied only to the provider it names
            history_window: Number of trailing prior turns to send (None = all)

        Raises:
            ConfigurationError: No provider has a key
            ProviderUnavailableError: OpenAI failed and Anthropic has no key
            UpstreamError: Anthropic failed (directly or as the fallback)
        """
        openai_config = self.provider_configs.get(ProviderName.OPENAI)
        anthropic_config = self.provider_configs.get(ProviderName.ANTHROPIC)

        if preferred_provider == ProviderName.OPENAI and openai_config is not None:
            try:
                return await self._attempt(
                    ProviderName.OPENAI, openai_config, system_prompt,
                    history, latest_user_message, model, history_window,
                )
            except UpstreamError as e:
                level = logging.WARNING if e.transient else logging.ERROR
                logger.log(level, f"OpenAI failed (status={e.status}, transient={e.transient}), trying Claude fallback: {e}")

            if anthropic_config is None:
                logger.error("OpenAI failed and no Anthropic key is configured")
                raise ProviderUnavailableError()

        elif anthropic_config is None:
            logger.error("No usable provider key configured")
            raise ConfigurationError()

        return await self._attempt(
            ProviderName.ANTHROPIC, anthropic_config, system_prompt,
            history, latest_user_message, model, history_window,
        )

    async def _attempt(
        self,
        provider: ProviderName,
        config: ProviderConfig,
        system_prompt: Optional[str],
        history: Sequence[Message],
        latest_user_message: Message,
        model: Optional[str],
        history_window: Optional[int],
    ) -> CompletionResult:
        adapter = self.adapters[provider]
        config = _apply_model_override(config, model)

        request = adapter.build_request(
            system_prompt, history, latest_user_message, config, history_window=history_window
        )
        body = await self.client.send(provider, request, is_transient=adapter.is_transient_failure)

        try:
            result = adapter.extract_completion(body)
        except (KeyError, IndexError, TypeError, AttributeError, ValueError) as e:
            raise UpstreamError(provider, f"{provider} returned a malformed body: {e!r}", transient=False) from e

        if not result.model:
            result.model = config.model

        logger.info(
            f"Completion served by {provider} ({result.model}), "
            f"tokens={result.usage.total_tokens}"
        )
        return result
