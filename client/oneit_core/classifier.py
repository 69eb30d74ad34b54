"""
Maps a transport result to a semantic outcome. Pure: no I/O, no session
mutation. Callers clear the SessionStore on 401 themselves.
"""

from .constants import (
    MSG_INVALID_CODE, MSG_INVALID_CREDENTIALS, MSG_SERVER_ERROR,
    MSG_UNEXPECTED_RESPONSE, MSG_REQUEST_REJECTED,
)
from .models import Endpoint, message_of
from .outcomes import Accepted, Rejected, SessionExpired, TransportFailure


def classify(status_code, body, transport_error=None, endpoint=None):
    """
    Classify one backend reply.

    status_code      -- HTTP status, or None when no response arrived
    body             -- decoded JSON body, or None when it did not decode
    transport_error  -- text describing why no usable response arrived
    endpoint         -- the Endpoint called; tunes the 401/403 wording

    A 200 yields Accepted(message); the auth controllers turn that into
    their own success values.
    """
    if transport_error is not None or status_code is None:
        return TransportFailure(transport_error or MSG_UNEXPECTED_RESPONSE)

    if status_code == 200:
        message = message_of(body)
        if message is None:
            return TransportFailure(MSG_UNEXPECTED_RESPONSE)
        return Accepted(message)

    if status_code == 401:
        if endpoint is Endpoint.LOGIN:
            return Rejected(MSG_INVALID_CREDENTIALS)
        return SessionExpired()

    if status_code == 400:
        return Rejected(message_of(body) or MSG_REQUEST_REJECTED)

    if status_code == 403 and endpoint is Endpoint.VERIFY_OTP:
        return Rejected(MSG_INVALID_CODE)

    if status_code == 500:
        return TransportFailure(MSG_SERVER_ERROR)

    return TransportFailure(MSG_UNEXPECTED_RESPONSE)
