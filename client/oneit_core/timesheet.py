"""
Timesheet fetch and display formatting.
"""

from dataclasses import dataclass
from datetime import datetime

from .config import log
from .constants import INVALID_DURATION, MSG_UNEXPECTED_RESPONSE
from .classifier import classify
from .models import Endpoint
from .outcomes import TimesheetLoaded, TransportFailure


@dataclass(frozen=True)
class TimesheetEntry:
    day_date: str
    check_in: str
    check_out: str
    total_minutes: str

    @classmethod
    def from_json(cls, item):
        return cls(
            day_date=str(item["dayDate"]),
            check_in=str(item["checkIn"]),
            check_out=str(item["checkOut"]),
            total_minutes=str(item["totalMinutes"]),
        )


def fetch_timesheet(client):
    """Returns TimesheetLoaded or the classified failure."""
    resp = client.post(Endpoint.TIMESHEET)
    if resp.reached_server and resp.status_code == 200:
        if not isinstance(resp.body, list):
            log.warning("Timesheet body is not a list")
            return TransportFailure(MSG_UNEXPECTED_RESPONSE)
        try:
            entries = tuple(TimesheetEntry.from_json(item) for item in resp.body)
        except (KeyError, TypeError) as e:
            log.warning("Timesheet entry failed to decode: %s", e)
            return TransportFailure(MSG_UNEXPECTED_RESPONSE)
        log.info("Timesheet loaded: %d day(s)", len(entries))
        return TimesheetLoaded(entries)
    return classify(resp.status_code, resp.body, resp.error, Endpoint.TIMESHEET)


# ─── Formatting ──────────────────────────────────────────────────

def format_duration(total_minutes):
    """'125' -> '2h 5m'. Anything that is not an integer -> INVALID_DURATION."""
    try:
        minutes = int(str(total_minutes).strip())
    except (TypeError, ValueError):
        return INVALID_DURATION
    hours, rest = divmod(abs(minutes), 60)
    sign = "-" if minutes < 0 else ""
    return f"{sign}{hours}h {rest}m"


def format_date(day_date):
    """'2024-12-25' -> 'Wednesday, Dec 25'. Unparseable input is returned as is."""
    try:
        parsed = datetime.strptime(day_date, "%Y-%m-%d")
    except (TypeError, ValueError):
        return day_date
    return f"{parsed:%A, %b} {parsed.day}"


def format_time(time_string):
    """'14:05:00.000' -> '2:05 PM'. Unparseable input is returned as is."""
    try:
        parsed = datetime.strptime(time_string, "%H:%M:%S.%f")
    except (TypeError, ValueError):
        return time_string
    hour = parsed.hour % 12 or 12
    suffix = "AM" if parsed.hour < 12 else "PM"
    return f"{hour}:{parsed.minute:02d} {suffix}"
