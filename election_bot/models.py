"""Shared data models for the Election Bot."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .common.enums import ProviderName


@dataclass
class Message:
    """Chat message exchanged with the LLM and kept in session history.

    Attributes:
        role: Message role - "user", "assistant", or "system"
        content: Message text content
    """
    role: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": str(self.role), "content": self.content}


@dataclass
class Usage:
    """Token usage in canonical (provider-agnostic) form."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass
class CompletionResult:
    """Canonical completion produced from any upstream provider.

    Attributes:
        id: Completion identifier (fabricated for providers that lack one)
        created: Epoch seconds at response time
        model: Model name that served the request
        content: Assistant text
        usage: Token usage statistics
        provider: Provider that actually served the request
        finish_reason: Stop reason reported in the single-choice wrapper
    """
    id: str
    created: int
    model: str
    content: str
    usage: Usage = field(default_factory=Usage)
    provider: Optional[ProviderName] = None
    finish_reason: str = "stop"
    object: str = "chat.completion"

    def to_dict(self) -> dict[str, Any]:
        """Render the result in the OpenAI ``chat.completion`` shape."""
        return {
            "id": self.id,
            "object": self.object,
            "created": self.created,
            "model": self.model,
            "choices": [
                {
                    "index": 0,
                    "message": {"role": "assistant", "content": self.content},
                    "finish_reason": self.finish_reason,
                }
            ],
            "usage": {
                "prompt_tokens": self.usage.prompt_tokens,
                "completion_tokens": self.usage.completion_tokens,
                "total_tokens": self.usage.total_tokens,
            },
        }


@dataclass(frozen=True)
class ProviderConfig:
    """Upstream provider settings. Sourced from the environment only."""
    provider: ProviderName
    api_key: str = field(repr=False)
    model: str
    max_tokens: int = 2000
    temperature: float = 0.7


@dataclass
class ProviderRequest:
    """A fully built upstream HTTP request."""
    url: str
    headers: dict[str, str]
    body: dict[str, Any]


@dataclass(frozen=True)
class ElectionDataSnapshot:
    """Loaded election datasets, keyed by dataset name.

    Attributes:
        datasets: Mapping from dataset name to parsed JSON (or CSV rows)
        data_types: Source formats that contributed data (e.g. "JSON", "CSV")
        loaded_at: ISO timestamp of the load, if any
    """
    datasets: Mapping[str, Any] = field(default_factory=dict)
    data_types: tuple[str, ...] = ()
    loaded_at: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "datasets", MappingProxyType(dict(self.datasets)))

    def get(self, name: str, default: Any = None) -> Any:
        return self.datasets.get(name, default)

    @property
    def is_empty(self) -> bool:
        return not self.datasets
