"""Chat session controller and in-memory session store.

A ``ChatSession`` owns one conversation: it screens each user turn with the
keyword filter, asks the orchestrator for a completion, and appends the
outcome to the history. The ``SessionStore`` keeps the most recently used
sessions in memory, up to a fixed limit.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional

from ..common.enums import ProviderName, Role
from ..models import CompletionResult, Message
from ..utils import render_prompt
from .analytics import AnalyticsTracker
from .context_formatter import ContextFormatter
from .data_loader import ElectionDataLoader
from .errors import ConversationBusyError, ElectionBotError, RequestValidationError
from .keyword_filter import REFUSAL_MESSAGE, KeywordFilter
from .orchestrator import CompletionOrchestrator

logger = logging.getLogger(__name__)

GREETING_TEMPLATE = (
    "Hello! I'm {title}, your trusted companion for election insights. "
    "I can help you with voting information, registration, polling locations, candidate details, and more."
)
APOLOGY_MESSAGE = (
    "I apologize, but I encountered an error. "
    "Please try again or contact support if the issue persists."
)
SYSTEM_PROMPT_NAME = "election_assistant"

FEEDBACK_CATEGORIES: tuple[str, ...] = (
    "Accuracy of information",
    "Response helpfulness",
    "User interface",
    "Response speed",
    "Overall experience",
    "Feature request",
    "Bug report",
    "Other",
)

DEFAULT_MAX_SESSIONS = 1000


@dataclass
class TurnResult:
    """Outcome of one user turn.

    Attributes:
        reply: Assistant message appended to the history
        blocked_keyword: Denylisted phrase that blocked the question, if any
        completion: Upstream completion, when one was produced
        error: Error message, when the upstream call failed
    """
    reply: Message
    blocked_keyword: Optional[str] = None
    completion: Optional[CompletionResult] = None
    error: Optional[str] = None


@dataclass
class SessionDependencies:
    """Collaborators shared by every session of one process."""
    orchestrator: CompletionOrchestrator
    data_loader: ElectionDataLoader
    keyword_filter: KeywordFilter
    formatter: ContextFormatter
    analytics: AnalyticsTracker
    title: str = "ElectionSathi"
    preferred_provider: str = ProviderName.OPENAI
    history_window: Optional[int] = 5


class ChatSession:
    """One conversation and its append-only message history."""

    def __init__(self, session_id: str, deps: SessionDependencies):
        self.session_id = session_id
        self.deps = deps
        self.messages: list[Message] = [self._greeting()]
        self._in_flight = False

    @property
    def is_busy(self) -> bool:
        return self._in_flight

    def _greeting(self) -> Message:
        return Message(role=Role.ASSISTANT, content=GREETING_TEMPLATE.format(title=self.deps.title))

    def build_system_prompt(self) -> str:
        """Persona instructions plus the formatted election data briefing."""
        snapshot = self.deps.data_loader.load()
        return render_prompt(
            SYSTEM_PROMPT_NAME,
            title=self.deps.title,
            election_context=self.deps.formatter.format(snapshot),
        )

    async def submit(self, text: str) -> TurnResult:
        """Handle one user turn.

        Raises:
            RequestValidationError: If the text is empty
            ConversationBusyError: If a previous turn is still in flight
        """
        content = (text or "").strip()
        if not content:
            raise RequestValidationError("Message content is required")
        if self._in_flight:
            raise ConversationBusyError()

        analytics = self.deps.analytics
        user_message = Message(role=Role.USER, content=content)

        blocked_keyword = self.deps.keyword_filter.check(content)
        if blocked_keyword:
            logger.info(f"Blocked question in session {self.session_id}: keyword='{blocked_keyword}'")
            reply = Message(role=Role.ASSISTANT, content=REFUSAL_MESSAGE)
            self.messages.extend([user_message, reply])
            analytics.track("blocked_question", session_id=self.session_id, keyword=blocked_keyword)
            return TurnResult(reply=reply, blocked_keyword=blocked_keyword)

        history = list(self.messages)
        self.messages.append(user_message)
        analytics.track("message_sent", session_id=self.session_id, message_length=len(content))

        self._in_flight = True
        try:
            completion = await self.deps.orchestrator.complete(
                history,
                user_message,
                preferred_provider=self.deps.preferred_provider,
                system_prompt=self.build_system_prompt(),
                history_window=self.deps.history_window,
            )
        except ElectionBotError as e:
            logger.warning(f"Completion failed for session {self.session_id}: {e.message}")
            return self._fail(e.message)
        except Exception as e:
            logger.exception(f"Unexpected error in session {self.session_id}")
            return self._fail(str(e) or type(e).__name__)
        finally:
            self._in_flight = False

        reply = Message(role=Role.ASSISTANT, content=completion.content)
        self.messages.append(reply)
        analytics.track(
            "response_received",
            session_id=self.session_id,
            provider=completion.provider,
            response_length=len(completion.content),
        )
        return TurnResult(reply=reply, completion=completion)

    def _fail(self, error: str) -> TurnResult:
        reply = Message(role=Role.ASSISTANT, content=APOLOGY_MESSAGE)
        self.messages.append(reply)
        self.deps.analytics.track("error_occurred", session_id=self.session_id, error=error)
        return TurnResult(reply=reply, error=error)

    def clear(self):
        """Reset the conversation to the seeded greeting.

        Raises:
            ConversationBusyError: If a turn is still in flight
        """
        if self._in_flight:
            raise ConversationBusyError()
        self.messages = [self._greeting()]
        self.deps.analytics.track("conversation_cleared", session_id=self.session_id)

    def record_feedback(
        self,
        message_index: int,
        positive: Optional[bool] = None,
        rating: Optional[int] = None,
        category: Optional[str] = None,
        comment: Optional[str] = None,
        email: Optional[str] = None,
    ):
        """Record feedback on an assistant message.

        Either a thumbs up/down (``positive``) or a detailed review: a 1-5
        ``rating`` plus one of ``FEEDBACK_CATEGORIES``, with an optional
        comment and contact email. Only the presence and length of the free
        text reach the analytics log.

        Raises:
            RequestValidationError: Bad index, non-assistant message or invalid fields
        """
        if not 0 <= message_index < len(self.messages):
            raise RequestValidationError(f"No message at index {message_index}")
        if self.messages[message_index].role != Role.ASSISTANT:
            raise RequestValidationError("Feedback can only be given on assistant messages")

        detailed = rating is not None or category is not None or bool(comment) or bool(email)
        if positive is None and not detailed:
            raise RequestValidationError("Feedback needs a thumbs up/down or a rating")

        if detailed:
            if rating is None or category is None:
                raise RequestValidationError("A rating and a category are both required")
            if isinstance(rating, bool) or not 1 <= rating <= 5:
                raise RequestValidationError("Rating must be between 1 and 5")
            if category not in FEEDBACK_CATEGORIES:
                raise RequestValidationError(f"Unknown feedback category: {category}")

        if positive is not None:
            self.deps.analytics.track(
                "feedback_given",
                session_id=self.session_id,
                message_index=message_index,
                positive=positive,
            )

        if not detailed:
            return

        comment = (comment or "").strip()
        self.deps.analytics.track(
            "feedback_submitted",
            session_id=self.session_id,
            message_index=message_index,
            rating=rating,
            category=category,
            has_comment=bool(comment),
            has_email=bool((email or "").strip()),
            comment_length=len(comment),
        )


class SessionStore:
    """In-memory session registry.

    Usage:
        store = SessionStore(deps)
        session = store.get_or_create("tab-1")
        turn = await session.submit("When is polling day?")
    """

    def __init__(self, deps: SessionDependencies, max_sessions: int = DEFAULT_MAX_SESSIONS):
        self.deps = deps
        self.max_sessions = max(1, max_sessions)
        # Least recently used first
        self._sessions: OrderedDict[str, ChatSession] = OrderedDict()

    def get(self, session_id: str) -> Optional[ChatSession]:
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
        return session

    def get_or_create(self, session_id: str) -> ChatSession:
        session = self.get(session_id)
        if session is None:
            session = ChatSession(session_id, self.deps)
            self._sessions[session_id] = session
            logger.info(f"Created chat session {session_id}")
            self._evict()
        return session

    def _evict(self):
        while len(self._sessions) > self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info(f"Evicted idle chat session {evicted_id} (limit {self.max_sessions})")

    def __len__(self) -> int:
        return len(self._sessions)
