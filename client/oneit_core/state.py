"""
Authentication states and the transitions allowed between them.

AuthFlowController is the only writer; everything else reads.
"""

from enum import Enum


class AuthState(Enum):
    UNAUTHENTICATED = "unauthenticated"
    CREDENTIALS_PENDING = "credentials_pending"
    OTP_PENDING = "otp_pending"
    AUTHENTICATED = "authenticated"
    SESSION_EXPIRED = "session_expired"


_TRANSITIONS = {
    AuthState.UNAUTHENTICATED: {AuthState.CREDENTIALS_PENDING},
    # Expired and half-finished logins may start over with new credentials.
    AuthState.SESSION_EXPIRED: {AuthState.CREDENTIALS_PENDING, AuthState.UNAUTHENTICATED},
    AuthState.OTP_PENDING: {
        AuthState.AUTHENTICATED, AuthState.UNAUTHENTICATED, AuthState.CREDENTIALS_PENDING,
    },
    AuthState.CREDENTIALS_PENDING: {AuthState.OTP_PENDING, AuthState.UNAUTHENTICATED},
    AuthState.AUTHENTICATED: {AuthState.UNAUTHENTICATED, AuthState.SESSION_EXPIRED},
}


class FlowError(RuntimeError):
    """An operation was invoked in a state that does not allow it."""


def can_transition(current, target):
    return target in _TRANSITIONS.get(current, ())
