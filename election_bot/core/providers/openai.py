"""OpenAI Chat Completions adapter."""

from typing import Any, Optional, Sequence

from ...common.enums import ProviderName, Role
from ...models import CompletionResult, Message, ProviderConfig, ProviderRequest, Usage
from .base import ProviderAdapter

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"


class OpenAIAdapter(ProviderAdapter):
    """OpenAI-style provider.

    Messages keep their roles as-is. The system prompt, when given, is sent
    as the first message of the list.
    """

    name = ProviderName.OPENAI
    url = OPENAI_CHAT_URL

    def build_request(
        self,
        system_prompt: Optional[str],
        history: Sequence[Message],
        latest_user_message: Message,
        config: ProviderConfig,
        history_window: Optional[int] = None,
    ) -> ProviderRequest:
        messages: list[dict[str, str]] = []
        if system_prompt:
            messages.append({"role": Role.SYSTEM.value, "content": system_prompt})
        messages.extend(m.to_dict() for m in self._window(history, history_window))
        messages.append(latest_user_message.to_dict())

        return ProviderRequest(
            url=self.url,
            headers={
                "Authorization": f"Bearer {config.api_key}",
                "Content-Type": "application/json",
            },
            body={
                "model": config.model,
                "messages": messages,
                "max_tokens": config.max_tokens,
                "temperature": config.temperature,
            },
        )

    def extract_completion(self, body: dict[str, Any]) -> CompletionResult:
        choice = body["choices"][0]
        content = choice["message"]["content"]
        if not isinstance(content, str):
            raise TypeError("OpenAI response has no text content")

        usage = body.get("usage")
        usage = usage if isinstance(usage, dict) else {}
        prompt_tokens = usage.get("prompt_tokens") or 0
        completion_tokens = usage.get("completion_tokens") or 0

        now_millis = self._now_millis()
        return CompletionResult(
            id=body.get("id") or f"chatcmpl-{now_millis}",
            created=body.get("created") or now_millis // 1000,
            model=body.get("model", ""),
            content=content,
            usage=Usage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
            provider=self.name,
            finish_reason=choice.get("finish_reason") or "stop",
        )
