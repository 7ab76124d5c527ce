"""Application context holding the shared service instances.

Built once per process by ``build_context`` and handed to the app
explicitly; nothing here is a module-level singleton.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from ..common.enums import ProviderName
from ..config import Settings
from .analytics import AnalyticsTracker
from .config import ConfigLoader
from .context_formatter import ContextFormatter
from .data_loader import ElectionDataLoader
from .keyword_filter import KeywordFilter
from .llm_client import LLMClient
from .orchestrator import CompletionOrchestrator
from .session import SessionDependencies, SessionStore

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Service instances shared by the HTTP handlers."""
    settings: Settings
    llm_client: LLMClient
    orchestrator: CompletionOrchestrator
    keyword_filter: KeywordFilter
    data_loader: ElectionDataLoader
    analytics: AnalyticsTracker
    sessions: SessionStore

    async def close(self):
        await self.llm_client.close()


def build_context(
    settings: Settings,
    config: Optional[ConfigLoader] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AppContext:
    """Wire up every service from settings and optional YAML overrides.

    Args:
        settings: Environment settings
        config: YAML overrides (denylist, dataset list); None loads settings.config_path
        transport: Custom httpx transport for upstream calls
    """
    config = config or ConfigLoader(settings.config_path)

    llm_client = LLMClient(timeout=settings.request_timeout, transport=transport)
    orchestrator = CompletionOrchestrator(
        provider_configs={
            name: settings.provider_config(name)
            for name in (ProviderName.OPENAI, ProviderName.ANTHROPIC)
        },
        client=llm_client,
    )
    keyword_filter = KeywordFilter(config.string_list("keyword_filter.blocked_keywords"))
    data_loader = ElectionDataLoader(settings.data_dir, config.string_list("election_data.datasets"))
    analytics = AnalyticsTracker()

    sessions = SessionStore(
        SessionDependencies(
            orchestrator=orchestrator,
            data_loader=data_loader,
            keyword_filter=keyword_filter,
            formatter=ContextFormatter(),
            analytics=analytics,
            title=settings.bot_title,
            preferred_provider=settings.default_provider,
            history_window=settings.history_window,
        ),
        max_sessions=settings.max_sessions,
    )

    configured = orchestrator.configured_providers
    if configured:
        logger.info(f"Configured providers: {', '.join(configured)}")
    else:
        logger.warning("No provider API keys configured; chat requests will be rejected")

    return AppContext(
        settings=settings,
        llm_client=llm_client,
            orchestrator=orchestrator,
            keyword_filter=keyword_filter,
            data_loader=data_loader,
            analytics=analytics,
        sessions=sessions,
    )
