"""Core modules for the Election Bot chat pipeline."""

from .analytics import AnalyticsTracker
from .context_formatter import ContextFormatter
from .data_loader import ElectionDataLoader
from .keyword_filter import KeywordFilter
from .llm_client import LLMClient
from .orchestrator import CompletionOrchestrator
from .session import ChatSession, SessionDependencies, SessionStore

__all__ = [
    "AnalyticsTracker", "ContextFormatter", "ElectionDataLoader", "KeywordFilter",
    "LLMClient", "CompletionOrchestrator",
    "ChatSession", "SessionDependencies", "SessionStore",
]
