"""
Domain values exchanged between the controllers and the backend.
"""

import platform
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .constants import OTP_LENGTH


class Endpoint(str, Enum):
    LOGIN = "/api/login"
    VERIFY_OTP = "/api/verify-totp"
    LOGOUT = "/api/logout"
    CHECK_IN = "/api/checkIn"
    CHECK_OUT = "/api/checkOut"
    TIMESHEET = "/api/timesheet"


class AttendanceAction(Enum):
    CHECK_IN = "Check-in"
    CHECK_OUT = "Check-out"

    @property
    def endpoint(self) -> Endpoint:
        return Endpoint.CHECK_IN if self is AttendanceAction.CHECK_IN else Endpoint.CHECK_OUT


@dataclass(frozen=True)
class Credentials:
    """Exists only for the duration of one login request. Never persisted."""
    badge_number: str
    password: str = field(repr=False)

    def to_payload(self) -> dict:
        return {"badgeNumber": self.badge_number, "password": self.password}


def normalize_otp(raw: str) -> str:
    """Keep ASCII digits only and truncate to the code length. Idempotent."""
    digits = "".join(ch for ch in (raw or "") if ch in "0123456789")
    return digits[:OTP_LENGTH]


@dataclass(frozen=True)
class OtpChallenge:
    code: str = field(repr=False)

    def __post_init__(self):
        if len(self.code) != OTP_LENGTH or not all(ch in "0123456789" for ch in self.code):
            raise ValueError(f"OTP code must be exactly {OTP_LENGTH} digits")

    @classmethod
    def from_input(cls, raw: str) -> "OtpChallenge":
        """Normalize what the user typed; raises ValueError if still too short."""
        return cls(normalize_otp(raw))

    @staticmethod
    def is_submittable(raw: str) -> bool:
        return len(normalize_otp(raw)) == OTP_LENGTH

    def to_payload(self) -> dict:
        return {"totpCode": self.code}


@dataclass(frozen=True)
class EmployeeProfile:
    badge_number: str
    display_name: str


@dataclass(frozen=True)
class GeoFix:
    latitude: float
    longitude: float
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class DeviceInfo:
    model: str
    os_version: str

    @classmethod
    def detect(cls) -> "DeviceInfo":
        model = platform.machine() or "Unknown"
        os_version = f"{platform.system()} {platform.release()}".strip() or "Unknown"
        return cls(model=model, os_version=os_version)


@dataclass(frozen=True)
class AttendanceRequest:
    """Built fresh for every submission."""
    badge_number: str
    latitude: float
    longitude: float
    device_model: str
    device_os_version: str
    action: AttendanceAction

    @classmethod
    def build(cls, action: AttendanceAction, fix: GeoFix, badge_number: str,
              device: DeviceInfo) -> "AttendanceRequest":
        return cls(
            badge_number=badge_number,
            latitude=fix.latitude,
            longitude=fix.longitude,
            device_model=device.model,
            device_os_version=device.os_version,
            action=action,
        )

    def to_payload(self) -> dict:
        return {
            "badgeNumber": self.badge_number,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "mobileModel": self.device_model,
            "mobileOS": self.device_os_version,
        }


def message_of(body) -> Optional[str]:
    """The `message` field of a decoded JSON object, if it is a string."""
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str):
            return message
    return None
