"""Provider adapter interface."""

import time
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from ...common.enums import ProviderName
from ...models import CompletionResult, Message, ProviderConfig, ProviderRequest


class ProviderAdapter(ABC):
    """Wire format of one upstream LLM provider.

    Hides the provider-specific details:
    - Endpoint URL and authentication headers
    - Request body layout (message roles, system prompt placement)
    - Response field extraction into a ``CompletionResult``
    - Which HTTP statuses count as transient

    Adapters are stateless; the orchestrator owns the HTTP call.
    """

    name: ProviderName
    url: str

    @abstractmethod
    def build_request(
        self,
        system_prompt: Optional[str],
        history: Sequence[Message],
        latest_user_message: Message,
        config: ProviderConfig,
        history_window: Optional[int] = None,
    ) -> ProviderRequest:
        """Build the upstream request.

        Args:
            system_prompt: Dedicated system instruction (None to send none)
            history: Prior turns, oldest first
            latest_user_message: The message being answered
            config: Provider credentials and generation settings
            history_window: Keep only this many trailing prior turns (None keeps all)

        Returns:
            ProviderRequest with url, headers and JSON body
        """
        pass

    @abstractmethod
    def extract_completion(self, body: dict[str, Any]) -> CompletionResult:
        """Map a raw response body onto the canonical completion.

        Raises:
            KeyError, IndexError, TypeError, AttributeError: If the body is malformed
        """
        pass

    def is_transient_failure(self, status: int) -> bool:
        """Whether an HTTP status is worth failing over on."""
        return status in (408, 409, 429) or status >= 500

    @staticmethod
    def _window(history: Sequence[Message], history_window: Optional[int]) -> list[Message]:
        if history_window is None:
            return list(history)
        if history_window <= 0:
            return []
        return list(history[-history_window:])

    @staticmethod
    def _now_millis() -> int:
        return int(time.time() * 1000)
