"""Unit tests for the chat session controller."""

import pytest

from conftest import ANTHROPIC_URL, OPENAI_URL, StaticLoader, openai_body
from election_bot.common.enums import Role
from election_bot.core.errors import ConversationBusyError, RequestValidationError
from election_bot.core.keyword_filter import REFUSAL_MESSAGE
from election_bot.core.session import APOLOGY_MESSAGE, FEEDBACK_CATEGORIES, ChatSession, SessionStore
from election_bot.models import ElectionDataSnapshot


def test_new_session_starts_with_greeting(make_deps):
    session = ChatSession("s1", make_deps(title="VoteBuddy"))

    assert len(session.messages) == 1
    assert session.messages[0].role == Role.ASSISTANT
    assert session.messages[0].content.startswith("Hello! I'm VoteBuddy, your trusted companion")
    assert not session.is_busy


@pytest.mark.asyncio
async def test_blocked_question_never_reaches_upstream(make_deps, upstream):
    deps = make_deps()
    session = ChatSession("s1", deps)

    turn = await session.submit("Who should I vote for?")

    assert turn.blocked_keyword == "who should i vote for"
    assert turn.reply.content == REFUSAL_MESSAGE
    assert [m.role for m in session.messages] == [Role.ASSISTANT, Role.USER, Role.ASSISTANT]
    assert upstream.requests == []
    assert [e.event_name for e in deps.analytics.recent()] == ["blocked_question"]


@pytest.mark.asyncio
async def test_successful_turn_appends_reply(make_deps, upstream):
    upstream.reply(OPENAI_URL, body=openai_body("Counting is on 14 November."))
    deps = make_deps()
    session = ChatSession("s1", deps)

    turn = await session.submit("  When is counting day?  ")

    assert turn.error is None
    assert turn.completion.content == "Counting is on 14 November."
    assert session.messages[1].content == "When is counting day?"
    assert session.messages[-1].content == "Counting is on 14 November."
    assert [e.event_name for e in deps.analytics.recent()] == ["message_sent", "response_received"]


@pytest.mark.asyncio
async def test_request_carries_system_prompt_and_history(make_deps, upstream):
    upstream.reply(OPENAI_URL, body=openai_body())
    session = ChatSession("s1", make_deps())

    await session.submit("When is phase one?")

    messages = upstream.json_of(0)["messages"]
    assert messages[0]["role"] == "system"
    assert "You are ElectionSathi" in messages[0]["content"]
    assert "BIHAR ELECTION DATA 2025:" in messages[0]["content"]
    # greeting, then the new question
    assert messages[1]["role"] == "assistant"
    assert messages[-1] == {"role": "user", "content": "When is phase one?"}


@pytest.mark.asyncio
async def test_history_window_limits_prior_turns(make_deps, upstream):
    upstream.reply(OPENAI_URL, body=openai_body())
    session = ChatSession("s1", make_deps(history_window=2))

    for i in range(3):
        await session.submit(f"question {i}")

    messages = upstream.json_of(2)["messages"]
    assert [m["content"] for m in messages[1:]] == ["question 1", "OpenAI answer", "question 2"]


@pytest.mark.asyncio
async def test_missing_data_uses_fallback_context(make_deps, upstream):
    upstream.reply(OPENAI_URL, body=openai_body())
    session = ChatSession("s1", make_deps(data_loader=StaticLoader(ElectionDataSnapshot())))

    await session.submit("When is phase one?")

    assert "No specific election data available." in upstream.json_of(0)["messages"][0]["content"]


@pytest.mark.asyncio
async def test_upstream_failure_appends_apology(make_deps, upstream):
    upstream.reply(OPENAI_URL, status=500)
    upstream.reply(ANTHROPIC_URL, status=500)
    deps = make_deps()
    session = ChatSession("s1", deps)

    turn = await session.submit("When is counting day?")

    assert turn.reply.content == APOLOGY_MESSAGE
    assert turn.error == "anthropic API error: 500"
    assert [m.role for m in session.messages] == [Role.ASSISTANT, Role.USER, Role.ASSISTANT]
    assert deps.analytics.recent("error_occurred")[0].properties["error"] == turn.error
    assert not session.is_busy


@pytest.mark.asyncio
async def test_no_keys_is_reported_as_apology(make_deps, upstream):
    session = ChatSession("s1", make_deps(openai=False, anthropic=False))

    turn = await session.submit("When is counting day?")

    assert turn.reply.content == APOLOGY_MESSAGE
    assert turn.error == "No API keys configured"
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_empty_submission_rejected(make_deps):
    session = ChatSession("s1", make_deps())

    with pytest.raises(RequestValidationError):
        await session.submit("   ")

    assert len(session.messages) == 1


@pytest.mark.asyncio
async def test_second_submission_while_in_flight_rejected(make_deps):
    session = ChatSession("s1", make_deps())
    session._in_flight = True

    with pytest.raises(ConversationBusyError):
        await session.submit("When is counting day?")

    assert len(session.messages) == 1


@pytest.mark.asyncio
async def test_clear_resets_to_greeting(make_deps):
    deps = make_deps()
    session = ChatSession("s1", deps)
    await session.submit("Who is the best candidate?")

    session.clear()

    assert len(session.messages) == 1
    assert session.messages[0].content.startswith("Hello! I'm ElectionSathi")
    assert deps.analytics.recent()[-1].event_name == "conversation_cleared"


def test_feedback_only_on_assistant_messages(make_deps):
    deps = make_deps()
    session = ChatSession("s1", deps)

    session.record_feedback(0, positive=True)

    event = deps.analytics.recent("feedback_given")[0]
    assert event.properties == {"message_index": 0, "positive": True}
    with pytest.raises(RequestValidationError):
        session.record_feedback(5, positive=False)


@pytest.mark.asyncio
async def test_feedback_on_user_message_rejected(make_deps):
    session = ChatSession("s1", make_deps())
    await session.submit("Who should I vote for?")

    with pytest.raises(RequestValidationError):
        session.record_feedback(1, positive=True)


def test_session_store(make_deps):
    store = SessionStore(make_deps())

    first = store.get_or_create("a")

    assert store.get_or_create("a") is first
    assert store.get("a") is first
    assert store.get("b") is None
    assert store.get_or_create("b") is not first


def test_clear_while_in_flight_rejected(make_deps):
    session = ChatSession("s1", make_deps())
    session.messages.append(session.messages[0])
    session._in_flight = True

    with pytest.raises(ConversationBusyError):
        session.clear()

    assert len(session.messages) == 2


def test_detailed_feedback_logs_only_comment_metadata(make_deps):
    deps = make_deps()
    session = ChatSession("s1", deps)

    session.record_feedback(
        0, rating=4, category="Response helpfulness",
        comment="  Very clear  ", email="voter@example.com",
    )

    event = deps.analytics.recent("feedback_submitted")[0]
    assert event.properties == {
        "message_index": 0,
        "rating": 4,
        "category": "Response helpfulness",
        "has_comment": True,
        "has_email": True,
        "comment_length": 10,
    }
    assert deps.analytics.recent("feedback_given") == []


@pytest.mark.parametrize("fields", [
    {},
    {"rating": 0, "category": "Other"},
    {"rating": 6, "category": "Other"},
    {"rating": 3},
    {"category": "Other"},
    {"rating": 3, "category": "Something else"},
    {"positive": True, "comment": "no rating"},
])
def test_invalid_feedback_rejected(make_deps, fields):
    deps = make_deps()
    session = ChatSession("s1", deps)

    with pytest.raises(RequestValidationError):
        session.record_feedback(0, **fields)

    assert deps.analytics.recent() == []


def test_feedback_categories():
    assert len(FEEDBACK_CATEGORIES) == 8
    assert FEEDBACK_CATEGORIES[-1] == "Other"


def test_session_store_evicts_least_recently_used(make_deps):
    store = SessionStore(make_deps(), max_sessions=2)

    a = store.get_or_create("a")
    store.get_or_create("b")
    store.get("a")
    store.get_or_create("c")

    assert len(store) == 2
    assert store.get("b") is None
    assert store.get("a") is a
    assert store.get("c") is not None
