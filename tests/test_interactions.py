from relaybot.application.interactions import (
    CONTENT_MISSING,
    NEW_CHAT_STARTED,
    NOT_OWNER,
    REASONING_MISSING,
    InteractionService,
    owner_from_custom_id,
)
from relaybot.domain.models.output import MessageKind
from relaybot.domain.services.session_service import SessionService
from relaybot.infrastructure.cache.message_cache import TTLMessageCache


def _service():
    sessions = SessionService()
    reasoning_cache = TTLMessageCache()
    content_cache = TTLMessageCache()
    return InteractionService(sessions, reasoning_cache, content_cache), sessions, reasoning_cache, content_cache


def test_reveal_short_reasoning_as_embed():
    service, _, reasoning_cache, _ = _service()
    reasoning_cache.set("m1", "because")

    reply = service.reveal_reasoning("m1")

    assert reply.kind == MessageKind.NOTICE
    assert reply.title == "🧠 Full Reasoning"
    assert reply.body == "because"
    assert reply.attachment is None


def test_reveal_long_reasoning_as_file():
    service, _, reasoning_cache, _ = _service()
    reasoning_cache.set("m1", "r" * 2001)

    reply = service.reveal_reasoning("m1")

    assert reply.content == "Here is the full reasoning process:"
    assert reply.attachment.filename == "reasoning.txt"
    assert len(reply.attachment.data) == 2001


def test_reveal_missing_reasoning_is_a_notice():
    service, _, _, _ = _service()
    assert service.reveal_reasoning("gone").content == REASONING_MISSING


def test_collapse_then_expand_round_trip():
    service, _, _, content_cache = _service()
    body = "First sentence. Second sentence."

    collapsed = service.toggle_collapse("m1", body, collapsing=True)
    assert collapsed.body == "First sentence. ..."
    assert collapsed.collapsed is True
    assert content_cache.get("m1") == body

    expanded = service.toggle_collapse("m1", collapsed.body, collapsing=False)
    assert expanded.body == body
    assert expanded.collapsed is False


def test_expand_after_eviction_reports_missing_content():
    service, _, _, _ = _service()
    result = service.toggle_collapse("m1", "short ...", collapsing=False)
    assert result.body is None
    assert result.notice.content == CONTENT_MISSING


def test_new_chat_by_owner_resets_session():
    service, sessions, _, _ = _service()
    sessions.get_session("42", "c1").add_user_turn("old")

    reply = service.start_new_chat("new_chat_42", "42", "c1")

    assert reply.content == NEW_CHAT_STARTED
    assert len(sessions.get_session("42", "c1").turns) == 0


def test_new_chat_by_someone_else_is_refused():
    service, sessions, _, _ = _service()
    sessions.get_session("42", "c1").add_user_turn("keep")

    reply = service.start_new_chat("new_chat_42", "7", "c1")

    assert reply.content == NOT_OWNER
    assert len(sessions.get_session("42", "c1").turns) == 1


def test_owner_from_custom_id():
    assert owner_from_custom_id("new_chat_123") == "123"
    assert owner_from_custom_id("new_chat") is None
    assert owner_from_custom_id("show_reasoning") is None
