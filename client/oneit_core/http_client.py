"""
HTTP session with connection pooling and SSL, plus BackendClient.

BackendClient is the one place that talks to the backend:
  - attaches the current session token as the JSESSIONID cookie
  - adopts any fresh token from the response's Set-Cookie headers
  - clears the session on any 401
  - folds requests exceptions and undecodable bodies into ApiResponse

The requests cookie jar is disabled so the token only ever travels through
SessionStore.
"""

import os
from dataclasses import dataclass
from http.cookiejar import DefaultCookiePolicy
from typing import Any, Optional
from urllib.parse import urlsplit

import certifi
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .constants import (
    SESSION_COOKIE, REQUEST_TIMEOUT_SEC, CONNECT_RETRIES, MSG_INVALID_SERVER_URL,
)
from .config import log, mask_token
from .session import extract_session_token

# Only connection establishment is retried: the request has not reached the
# server yet, so no submission can be sent twice.
_retry_strategy = Retry(
    total=CONNECT_RETRIES,
    connect=CONNECT_RETRIES,
    read=0,
    status=0,
    other=0,
    backoff_factor=0.5,
    allowed_methods=None,
    raise_on_status=False,
)


def _get_ca_bundle():
    """CA bundle path: env var when it points at a file, else certifi."""
    env_ca = os.environ.get('REQUESTS_CA_BUNDLE') or os.environ.get('SSL_CERT_FILE')
    if env_ca and os.path.isfile(env_ca):
        return env_ca
    return certifi.where()


def create_session():
    """Create a new requests.Session with connection pooling, SSL and no cookie jar."""
    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=1,
        pool_maxsize=3,
        max_retries=_retry_strategy,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.verify = _get_ca_bundle()
    session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))
    return session


def set_cookie_headers(response):
    """Every raw Set-Cookie header value of a response, in order."""
    raw_headers = getattr(getattr(response, "raw", None), "headers", None)
    if raw_headers is not None and hasattr(raw_headers, "getlist"):
        return list(raw_headers.getlist("Set-Cookie"))
    value = response.headers.get("Set-Cookie")
    return [value] if value else []


def is_valid_server_url(server_url):
    try:
        parts = urlsplit(server_url or "")
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc)


@dataclass
class ApiResponse:
    status_code: Optional[int] = None
    body: Any = None            # decoded JSON, None when absent or undecodable
    text: str = ""
    error: Optional[str] = None  # set when no usable response arrived

    @property
    def reached_server(self):
        return self.error is None and self.status_code is not None


class BackendClient:
    """Blocking backend calls. Run them from worker threads, never the Tk thread."""

    def __init__(self, server_url, session_store, http=None, timeout=REQUEST_TIMEOUT_SEC):
        self.server_url = (server_url or "").strip().rstrip("/")
        self._session_store = session_store
        self._http = http if http is not None else create_session()
        self._timeout = timeout

    @property
    def session_store(self):
        return self._session_store

    def url_for(self, endpoint):
        return f"{self.server_url}{endpoint.value}"

    def post(self, endpoint, payload=None):
        """POST to an endpoint with the current session cookie attached."""
        if not is_valid_server_url(self.server_url):
            log.warning("Refusing request to invalid server URL %r", self.server_url)
            return ApiResponse(error=MSG_INVALID_SERVER_URL)

        url = self.url_for(endpoint)
        headers = {"Accept": "application/json"}
        token = self._session_store.current()
        if token:
            headers["Cookie"] = f"{SESSION_COOKIE}={token}"

        try:
            if payload is None:
                resp = self._http.post(url, headers=headers, timeout=self._timeout)
            else:
                resp = self._http.post(url, json=payload, headers=headers, timeout=self._timeout)
        except requests.RequestException as e:
            log.warning("POST %s network error: %s", endpoint.value, e)
            return ApiResponse(error=f"Network error: {e}")

        fresh = extract_session_token(set_cookie_headers(resp))
        if fresh:
            self._session_store.adopt(fresh)

        if resp.status_code == 401:
            log.warning("POST %s -> 401, clearing session %s", endpoint.value, mask_token(token))
            self._session_store.clear()

        try:
            body = resp.json()
        except ValueError:
            body = None

        log.info("POST %s -> HTTP %d", endpoint.value, resp.status_code)
        return ApiResponse(status_code=resp.status_code, body=body, text=resp.text or "")

    def close(self):
        try:
            self._http.close()
        except Exception as e:
            log.debug("Ignoring error while closing HTTP session: %s", e)
