"""Shared fixtures for Election Bot tests."""

import json
from typing import Callable

import httpx
import pytest

from election_bot.config import Settings
from election_bot.core.analytics import AnalyticsTracker
from election_bot.core.context_formatter import ContextFormatter
from election_bot.core.data_loader import ElectionDataLoader
from election_bot.core.keyword_filter import KeywordFilter
from election_bot.core.llm_client import LLMClient
from election_bot.core.orchestrator import CompletionOrchestrator
from election_bot.core.session import SessionDependencies
from election_bot.models import ElectionDataSnapshot

OPENAI_URL = "https://api.openai.com/v1/chat/completions"
ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"


def openai_body(content: str = "OpenAI answer", prompt_tokens: int = 5, completion_tokens: int = 3) -> dict:
    return {
        "id": "chatcmpl-openai-1",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "gpt-4o-mini",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}],
        "usage": {"prompt_tokens": prompt_tokens, "completion_tokens": completion_tokens},
    }


def anthropic_body(content: str = "Claude answer", input_tokens: int = 4, output_tokens: int = 6) -> dict:
    return {
        "id": "msg_1",
        "type": "message",
        "model": "claude-3-sonnet-20240229",
        "content": [{"type": "text", "text": content}],
        "usage": {"input_tokens": input_tokens, "output_tokens": output_tokens},
    }


class FakeUpstream:
    """Routes upstream calls by URL to canned responses and records them."""

    def __init__(self):
        self.routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def reply(self, url: str, status: int = 200, body: dict | None = None):
        self.routes[url] = lambda request: httpx.Response(status, json=body if body is not None else {})

    def fail(self, url: str, exc: Exception):
        def raise_exc(request):
            raise exc
        self.routes[url] = raise_exc

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.routes[str(request.url)](request)

    def urls(self) -> list[str]:
        return [str(r.url) for r in self.requests]

    def json_of(self, index: int) -> dict:
        return json.loads(self.requests[index].content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        openai_api_key="sk-test",
        anthropic_api_key="sk-ant-test",
        data_dir="does-not-exist",
        config_path="does-not-exist.yaml",
    )


@pytest.fixture
def make_orchestrator(settings, upstream):
    """Build an orchestrator over the fake upstream, optionally dropping keys."""

    def _make(openai: bool = True, anthropic: bool = True) -> CompletionOrchestrator:
        return CompletionOrchestrator(
            provider_configs={
                "openai": settings.provider_config("openai") if openai else None,
                "anthropic": settings.provider_config("anthropic") if anthropic else None,
            },
            client=LLMClient(timeout=5.0, transport=upstream.transport),
        )

    return _make


@pytest.fixture
def snapshot() -> ElectionDataSnapshot:
    return ElectionDataSnapshot(
        datasets={
            "bihar-election-complete": {
                "election": {
                    "name": "General Election to the Legislative Assembly of Bihar, 2025",
                    "state": "Bihar",
                    "total_constituencies": 243,
                    "type": "Legislative Assembly Election",
                },
                "schedule": {
                    "announcement_date": "2025-10-06",
                    "phases": [
                        {"phase_number": 1, "constituencies_count": 121,
                         "polling_date": "2025-11-06", "polling_day": "Thursday"},
                        {"phase_number": 2, "constituencies_count": 122,
                         "polling_date": "2025-11-11", "polling_day": "Tuesday"},
                    ],
                    "counting_date": "2025-11-14",
                    "counting_day": "Friday",
                },
                "voter_information": {
                    "total_seats": 243,
                    "polling_hours": "7:00 AM to 6:00 PM",
                    "identification_required": True,
                    "reserved_seats": {
                        "scheduled_caste": "36 seats (SC category)",
                        "scheduled_tribe": "2 seats (ST category)",
                        "general": "205 seats",
                    },
                },
            },
            "bihar-party-performance": {
                "parties": [
                    {"party_name": "RJD",
                     "performance_2020": {"seats_won": 75, "vote_share": 23.11},
                     "performance_2015": {"seats_won": 80, "vote_share": 18.35},
                     "performance_2010": {"seats_won": 22, "vote_share": 18.84}},
                    {"party_name": "Total",
                     "performance_2020": {"seats_won": 243, "vote_share": 100}},
                ]
            },
            "bihar-constituencies-summary": [
                {"AC_Number": "1", "Held_Party": "BJP"},
                {"AC_Number": "2", "Held_Party": "RJD"},
                {"AC_Number": "3", "Held_Party": "BJP"},
            ],
        },
        data_types=("JSON", "CSV"),
        loaded_at="2025-10-30T00:00:00+00:00",
    )


class StaticLoader(ElectionDataLoader):
    """Loader that hands out a prebuilt snapshot without touching disk."""

    def __init__(self, snapshot: ElectionDataSnapshot):
        super().__init__("unused")
        self._snapshot = snapshot


@pytest.fixture
def make_deps(make_orchestrator, snapshot):
    def _make(openai: bool = True, anthropic: bool = True, **overrides) -> SessionDependencies:
        values = dict(
            orchestrator=make_orchestrator(openai=openai, anthropic=anthropic),
            data_loader=StaticLoader(snapshot),
            keyword_filter=KeywordFilter(),
            formatter=ContextFormatter(),
            analytics=AnalyticsTracker(),
            title="ElectionSathi",
            preferred_provider="openai",
            history_window=5,
        )
        values.update(overrides)
        return SessionDependencies(**values)

    return _make
