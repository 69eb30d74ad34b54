"""
Outcome values: the single return channel of every controller operation.

Callers branch on the type; `message` is always a user-facing string.
"""

from dataclasses import dataclass, field
from typing import Tuple

from .constants import MSG_SESSION_EXPIRED, MSG_LOGGED_OUT
from .models import EmployeeProfile


@dataclass(frozen=True)
class Outcome:
    ok = False

    @property
    def message(self) -> str:
        return ""


# ─── Attendance ──────────────────────────────────────────────────

@dataclass(frozen=True)
class Accepted(Outcome):
    server_message: str
    ok = True

    @property
    def message(self):
        return self.server_message


# ─── Failures (shared by every flow) ─────────────────────────────

@dataclass(frozen=True)
class Rejected(Outcome):
    reason: str

    @property
    def message(self):
        return self.reason


@dataclass(frozen=True)
class SessionExpired(Outcome):
    @property
    def message(self):
        return MSG_SESSION_EXPIRED


@dataclass(frozen=True)
class PolicyBlocked(Outcome):
    reason: str

    @property
    def message(self):
        return self.reason


@dataclass(frozen=True)
class DeviceCapabilityFailure(Outcome):
    reason: str

    @property
    def message(self):
        return self.reason


@dataclass(frozen=True)
class TransportFailure(Outcome):
    detail: str

    @property
    def message(self):
        return self.detail


# ─── Authentication ──────────────────────────────────────────────

@dataclass(frozen=True)
class OtpRequired(Outcome):
    """Credentials accepted; a one-time code is now expected."""
    badge_number: str
    ok = True

    @property
    def message(self):
        return "Enter the 6-digit code sent to your device."


@dataclass(frozen=True)
class Authenticated(Outcome):
    profile: EmployeeProfile
    server_message: str = ""
    ok = True

    @property
    def message(self):
        return f"Welcome, {self.profile.display_name}!"


@dataclass(frozen=True)
class LoggedOut(Outcome):
    """Local session is gone. `server_message` is set when the server disagreed."""
    server_message: str = ""
    ok = True

    @property
    def message(self):
        return self.server_message or MSG_LOGGED_OUT


# ─── Timesheet ───────────────────────────────────────────────────

@dataclass(frozen=True)
class TimesheetLoaded(Outcome):
    entries: Tuple = field(default_factory=tuple)
    ok = True

    @property
    def message(self):
        return f"{len(self.entries)} day(s)"
