"""
SessionStore: the single owner of the backend session token.

Other components read a snapshot with current(); only adopt() and clear()
change it. Both persist immediately through the backing JsonStore.
"""

import threading

from .constants import SESSION_COOKIE, KEY_SESSION_TOKEN
from .config import log, mask_token


class SessionStore:
    def __init__(self, store):
        self._store = store
        self._lock = threading.Lock()
        self._token = store.get(KEY_SESSION_TOKEN) or None
        self._listeners = []
        if self._token:
            log.info("Restored session %s", mask_token(self._token))

    def current(self):
        """Current token or None when unauthenticated."""
        with self._lock:
            return self._token

    def adopt(self, token):
        """Replace the current token and persist it. Last write wins."""
        with self._lock:
            changed = token != self._token
            self._token = token
            self._store.set(KEY_SESSION_TOKEN, token)
        if changed:
            log.info("Adopted session %s", mask_token(token))

    def clear(self):
        """Forget the token in memory and on disk, then notify listeners."""
        with self._lock:
            had_token = self._token is not None
            self._token = None
            self._store.remove(KEY_SESSION_TOKEN)
            listeners = list(self._listeners)
        if had_token:
            log.info("Session cleared")
        for callback in listeners:
            try:
                callback()
            except Exception as e:
                log.error("Session clear listener error: %s", e, exc_info=True)

    def add_clear_listener(self, callback):
        with self._lock:
            self._listeners.append(callback)

    def remove_clear_listener(self, callback):
        with self._lock:
            if callback in self._listeners:
                self._listeners.remove(callback)


def extract_session_token(set_cookie_headers):
    """
    Return the session cookie value found in a list of raw Set-Cookie
    header values, or None. When several headers carry it the last wins.

    Only the leading name=value pair of each header is read; attributes
    after the first ';' never affect the result.
    """
    token = None
    for header in set_cookie_headers or ():
        pair = header.split(";", 1)[0]
        name, sep, value = pair.partition("=")
        if not sep:
            log.warning("Ignoring malformed Set-Cookie header: %r", pair)
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]
        if name.strip() == SESSION_COOKIE and value:
            token = value
    return token
