"""
Guard chain driver.

A guard is a callable taking the GuardContext and returning None to let
the chain proceed, or a terminal Outcome to stop it. run_guards evaluates
them strictly in order and stops at the first terminal outcome, so a guard
never runs unless every guard before it passed.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from .config import log
from .models import AttendanceAction, GeoFix
from .outcomes import Outcome


@dataclass
class GuardContext:
    action: AttendanceAction
    fix: Optional[GeoFix] = None          # set by the location guard
    ran: List[str] = field(default_factory=list)


Guard = Callable[[GuardContext], Optional[Outcome]]


def guard_name(guard):
    return getattr(guard, "guard_name", None) or getattr(guard, "__name__", repr(guard))


def run_guards(guards: Sequence[Guard], context: GuardContext) -> Optional[Outcome]:
    """Return the first terminal outcome, or None when every guard passed."""
    for guard in guards:
        name = guard_name(guard)
        context.ran.append(name)
        outcome = guard(context)
        if outcome is not None:
            log.info("%s blocked by %s: %s", context.action.value, name, outcome.message)
            return outcome
    return None
