from relaybot.domain.models.conversation import Session
from relaybot.domain.models.stream import Usage
from relaybot.domain.services.session_service import SessionService


def test_session_trims_oldest_turns():
    session = Session(max_history=3)
    for i in range(5):
        session.add_user_turn(f"q{i}")

    assert [t.content for t in session.turns] == ["q2", "q3", "q4"]


def test_turns_serialize_for_api_calls():
    session = Session()
    session.add_user_turn("hi")
    session.add_assistant_turn("hello")
    assert [t.to_dict() for t in session.turns] == [
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
    ]


def test_sessions_are_scoped_per_user_and_channel():
    sessions = SessionService(max_history=5)
    a = sessions.get_session("u1", "c1")
    assert sessions.get_session("u1", "c1") is a
    assert sessions.get_session("u1", "c2") is not a
    assert sessions.get_session("u2", "c1") is not a
    assert a.max_history == 5


def test_reset_and_toggle_reasoning():
    sessions = SessionService()
    session = sessions.get_session("u1", "c1")
    session.add_user_turn("old")

    assert sessions.toggle_reasoning("u1", "c1") is True
    assert sessions.toggle_reasoning("u1", "c1") is False

    fresh = sessions.reset_session("u1", "c1")
    assert fresh is not session
    assert sessions.get_session("u1", "c1").turns == []


def test_usage_from_api_dict_and_object():
    assert Usage.from_api(None) is None
    assert Usage.from_api({"total_tokens": 10, "completion_tokens_details": {"reasoning_tokens": 3}}) == Usage(10, 3)
    assert Usage.from_api({"total_tokens": 10}) == Usage(10, 0)
    assert Usage(7, 1).footer_text() == "Total Tokens: 7 | Reasoning Tokens: 1"
