import json
import os
import tempfile

# Keep the client's log/state files out of the source tree.
os.environ.setdefault("ONEIT_HOME", tempfile.mkdtemp(prefix="oneit-test-"))

import pytest

from oneit_core.config import JsonStore, Preferences
from oneit_core.http_client import BackendClient
from oneit_core.session import SessionStore

SERVER = "http://attendance.test"


class FakeResponse:
    def __init__(self, status_code=200, body=None, set_cookie=None, text=None):
        self.status_code = status_code
        self._body = body
        self.headers = {"Set-Cookie": set_cookie} if set_cookie else {}
        self.raw = None
        if text is None:
            text = json.dumps(body) if body is not None else ""
        self.text = text

    def json(self):
        if self._body is None:
            raise ValueError("No JSON object could be decoded")
        return self._body


class FakeHttp:
    """
    Stands in for requests.Session: replays canned responses, records calls.
    A queued callable is invoked when its request is sent and its return
    value is used as the response.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def queue(self, *responses):
        self.responses.extend(responses)

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": dict(headers or {})})
        response = self.responses.pop(0)
        if callable(response):
            response = response()
        if isinstance(response, Exception):
            raise response
        return response

    def close(self):
        pass

    @property
    def last_cookie(self):
        return self.calls[-1]["headers"].get("Cookie")


@pytest.fixture
def store(tmp_path):
    return JsonStore(tmp_path / "state.json")


@pytest.fixture
def session_store(store):
    return SessionStore(store)


@pytest.fixture
def preferences(store):
    return Preferences(store)


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def client(session_store, http):
    return BackendClient(SERVER, session_store, http=http)
