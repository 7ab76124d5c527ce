"""Anthropic Messages API adapter.

The Messages API does not accept a system-role entry inside ``messages``.
The dedicated system prompt goes into the top-level ``system`` field; any
system-role message still present in the history is sent as a user turn
prefixed with ``"System: "``.
"""

from typing import Any, Optional, Sequence

from ...common.enums import ProviderName, Role
from ...models import CompletionResult, Message, ProviderConfig, ProviderRequest, Usage
from .base import ProviderAdapter

ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
SYSTEM_PREFIX = "System: "


def remap_system_messages(messages: Sequence[Message]) -> list[dict[str, str]]:
    """Convert messages to Anthropic wire dicts, folding system turns into user turns."""
    remapped = []
    for msg in messages:
        if msg.role == Role.SYSTEM:
            remapped.append({"role": Role.USER.value, "content": f"{SYSTEM_PREFIX}{msg.content}"})
        else:
            remapped.append(msg.to_dict())
    return remapped


class AnthropicAdapter(ProviderAdapter):
    """Anthropic-style provider."""

    name = ProviderName.ANTHROPIC
    url = ANTHROPIC_MESSAGES_URL

    def build_request(
        self,
        system_prompt: Optional[str],
        history: Sequence[Message],
        latest_user_message: Message,
        config: ProviderConfig,
        history_window: Optional[int] = None,
    ) -> ProviderRequest:
        turns = self._window(history, history_window) + [latest_user_message]

        body: dict[str, Any] = {
            "model": config.model,
            "max_tokens": config.max_tokens,
            "messages": remap_system_messages(turns),
        }
        if system_prompt:
            body["system"] = system_prompt

        return ProviderRequest(
            url=self.url,
            headers={
                "x-api-key": config.api_key,
                "Content-Type": "application/json",
                "anthropic-version": ANTHROPIC_VERSION,
            },
            body=body,
        )

    def extract_completion(self, body: dict[str, Any]) -> CompletionResult:
        content = body["content"][0]["text"]
        if not isinstance(content, str):
            raise TypeError("Anthropic response has no text content")

        usage = body.get("usage")
        usage = usage if isinstance(usage, dict) else {}
        input_tokens = usage.get("input_tokens") or 0
        output_tokens = usage.get("output_tokens") or 0

        # Anthropic returns no total; it is always our own sum.
        now_millis = self._now_millis()
        return CompletionResult(
            id=f"chatcmpl-{now_millis}",
            created=now_millis // 1000,
            model=body.get("model", ""),
            content=content,
            usage=Usage(
                prompt_tokens=input_tokens,
                completion_tokens=output_tokens,
                total_tokens=input_tokens + output_tokens,
            ),
            provider=self.name,
            finish_reason="stop",
        )
