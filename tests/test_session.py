import pytest

from oneit_core.config import JsonStore
from oneit_core.session import SessionStore, extract_session_token


def test_new_store_has_no_session(session_store):
    assert session_store.current() is None


def test_adopt_persists_across_restart(store):
    SessionStore(store).adopt("abc123")

    reopened = SessionStore(JsonStore(store.path))
    assert reopened.current() == "abc123"


def test_adopt_replaces_previous_token(session_store):
    session_store.adopt("first")
    session_store.adopt("second")
    assert session_store.current() == "second"


def test_clear_removes_memory_and_disk_copy(store):
    sessions = SessionStore(store)
    sessions.adopt("abc123")
    sessions.clear()

    assert sessions.current() is None
    assert SessionStore(JsonStore(store.path)).current() is None


def test_clear_notifies_listeners(session_store):
    calls = []
    session_store.add_clear_listener(lambda: calls.append("cleared"))
    session_store.adopt("tok")
    session_store.clear()
    assert calls == ["cleared"]


def test_removed_listener_is_not_called(session_store):
    calls = []
    listener = lambda: calls.append("cleared")
    session_store.add_clear_listener(listener)
    session_store.remove_clear_listener(listener)
    session_store.clear()
    assert calls == []


def test_failing_listener_does_not_block_others(session_store):
    calls = []

    def broken():
        raise RuntimeError("boom")

    session_store.add_clear_listener(broken)
    session_store.add_clear_listener(lambda: calls.append("ok"))
    session_store.clear()
    assert calls == ["ok"]


def test_extract_token_from_set_cookie():
    headers = ["JSESSIONID=7F3A9C; Path=/; HttpOnly"]
    assert extract_session_token(headers) == "7F3A9C"


def test_extract_token_ignores_other_cookies():
    headers = ["theme=dark; Path=/", "JSESSIONID=abc; Path=/"]
    assert extract_session_token(headers) == "abc"


def test_extract_token_last_header_wins():
    headers = ["JSESSIONID=old; Path=/", "JSESSIONID=new; Path=/"]
    assert extract_session_token(headers) == "new"


def test_extract_token_with_expires_attribute():
    headers = ["JSESSIONID=xyz; Expires=Wed, 21 Oct 2026 07:28:00 GMT; Path=/"]
    assert extract_session_token(headers) == "xyz"


def test_extract_token_absent():
    assert extract_session_token([]) is None
    assert extract_session_token(None) is None
    assert extract_session_token(["theme=dark"]) is None


@pytest.mark.parametrize("header", [
    "JSESSIONID=abc123; Path=/; Secure; HttpOnly; Partitioned",
    "JSESSIONID=abc123; Path=/; SameSite=None; Secure; Priority=High",
    'JSESSIONID="abc123"; Path=/',
])
def test_extract_token_ignores_unknown_attributes(header):
    assert extract_session_token([header]) == "abc123"


def test_extract_token_skips_malformed_header():
    headers = ["JSESSIONID=good; Path=/", "garbage; Path=/"]
    assert extract_session_token(headers) == "good"
