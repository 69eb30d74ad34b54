"""
Paths, logging setup, settings load/save, persisted key-value state, safe_print.
"""

import os
import json
import sys
import logging
import threading
from pathlib import Path

from .constants import (
    DEFAULT_SERVER_URL, REQUEST_TIMEOUT_SEC, KEY_SERVER_URL, KEY_BADGE_NUMBER,
)


# ─── Paths ───────────────────────────────────────────────────────
# One settings file and one state file per user per machine.
_FOLDER_NAME = "OneIT"

if os.environ.get("ONEIT_HOME"):
    BASE_DIR = Path(os.environ["ONEIT_HOME"])
elif sys.platform == "win32":
    BASE_DIR = Path(os.environ.get("PROGRAMDATA", "C:\\ProgramData")) / _FOLDER_NAME
else:
    BASE_DIR = Path(__file__).parent.parent

BASE_DIR.mkdir(parents=True, exist_ok=True)

CONFIG_FILE = BASE_DIR / "config.json"
STATE_FILE = BASE_DIR / "state.json"
LOG_FILE = BASE_DIR / "client.log"


# ─── Safe print (no crash when --noconsole) ──────────────────────

def safe_print(*args, **kwargs):
    try:
        print(*args, **kwargs)
    except Exception:
        pass


# ─── Logging ─────────────────────────────────────────────────────

try:
    if LOG_FILE.exists() and LOG_FILE.stat().st_size > 1_000_000:
        LOG_FILE.write_text("")
except OSError:
    pass

logging.basicConfig(
    filename=str(LOG_FILE),
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    encoding="utf-8",
)
log = logging.getLogger("oneit")

console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(logging.INFO)
console_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
log.addHandler(console_handler)


def mask_token(token):
    """Loggable form of a session token: first 6 characters only."""
    if not token:
        return "<none>"
    return token[:6] + "..."


# ─── Settings ────────────────────────────────────────────────────

_DEFAULT_SETTINGS = {
    "serverUrl": DEFAULT_SERVER_URL,
    "requestTimeoutSec": REQUEST_TIMEOUT_SEC,
}


def load_config(path=None):
    """Load settings from disk merged over defaults. Never fails."""
    path = Path(path) if path else CONFIG_FILE
    settings = dict(_DEFAULT_SETTINGS)
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict):
                settings.update(data)
            else:
                log.warning("Ignoring %s: top-level value is not an object", path)
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Could not read %s: %s, using defaults", path, e)
    return settings


def save_config(config, path=None):
    """Save settings dict to disk."""
    path = Path(path) if path else CONFIG_FILE
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)
    log.info("Config saved to %s", path)


# ─── Persisted client state ──────────────────────────────────────

class JsonStore:
    """
    Small key-value store persisted as one JSON object.

    Every set/remove rewrites the whole file, so the state survives a
    process restart. A missing or corrupt file reads as empty.
    """

    def __init__(self, path=None):
        self._path = Path(path) if path else STATE_FILE
        self._lock = threading.Lock()
        self._data = self._read()

    @property
    def path(self):
        return self._path

    def _read(self):
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            log.warning("State file %s unreadable (%s), starting empty", self._path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self):
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")

    def get(self, key, default=None):
        with self._lock:
            return self._data.get(key, default)

    def set(self, key, value):
        with self._lock:
            self._data[key] = value
            self._write()

    def remove(self, *keys):
        with self._lock:
            changed = False
            for key in keys:
                if key in self._data:
                    del self._data[key]
                    changed = True
            if changed:
                self._write()


class Preferences:
    """Last-used server URL and badge number, kept across session expiry."""

    def __init__(self, store):
        self._store = store

    @property
    def server_url(self):
        return self._store.get(KEY_SERVER_URL)

    @property
    def badge_number(self):
        return self._store.get(KEY_BADGE_NUMBER)

    def remember(self, server_url, badge_number):
        self._store.set(KEY_SERVER_URL, server_url)
        self._store.set(KEY_BADGE_NUMBER, badge_number)

    def forget(self):
        self._store.remove(KEY_SERVER_URL, KEY_BADGE_NUMBER)
