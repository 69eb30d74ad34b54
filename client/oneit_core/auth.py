"""
AuthFlowController: moves the user from credentials, through the OTP
challenge, to an authenticated session and back out again.

  Unauthenticated --submit_credentials--> CredentialsPending --> OtpPending
  OtpPending      --submit_code--------> Authenticated | OtpPending | Unauthenticated
  Authenticated   --logout-------------> Unauthenticated
  Authenticated   --any 401------------> SessionExpired

All network calls are blocking; the UI runs them on worker threads.
Nothing here retries automatically.
"""

from .config import log
from .constants import LOGIN_SUCCESS_MESSAGE, MSG_LOGIN_CANCELLED, MSG_UNEXPECTED_RESPONSE
from .classifier import classify
from .http_client import BackendClient
from .models import Credentials, Endpoint, EmployeeProfile, OtpChallenge, message_of
from .outcomes import (
    Accepted, Authenticated, LoggedOut, OtpRequired, Rejected, SessionExpired,
    TransportFailure,
)
from .state import AuthState, FlowError, can_transition


class AuthFlowController:
    def __init__(self, session_store, preferences, client_factory=None):
        self._session = session_store
        self._prefs = preferences
        self._client_factory = client_factory or (
            lambda server_url: BackendClient(server_url, session_store)
        )
        self._state = AuthState.UNAUTHENTICATED
        self._client = None
        self._server_url = None
        self._pending_badge = None
        self._profile = None
        self._logging_out = False
        session_store.add_clear_listener(self._on_session_cleared)

    # ─── Read-only views ─────────────────────────────────────

    @property
    def state(self):
        return self._state

    @property
    def profile(self):
        """EmployeeProfile while authenticated, else None."""
        return self._profile

    @property
    def client(self):
        """BackendClient bound to the server of the current login."""
        return self._client

    @property
    def server_url(self):
        return self._server_url

    @property
    def pending_badge(self):
        return self._pending_badge

    # ─── Transitions ─────────────────────────────────────────

    def _move(self, target):
        if not can_transition(self._state, target):
            raise FlowError(f"Cannot go from {self._state.value} to {target.value}")
        log.info("Auth state: %s -> %s", self._state.value, target.value)
        self._state = target

    def _on_session_cleared(self):
        if self._state is AuthState.AUTHENTICATED and not self._logging_out:
            log.warning("Session cleared while authenticated, marking expired")
            self._move(AuthState.SESSION_EXPIRED)

    def begin_login(self, keep_session=False):
        """
        The user is (re)entering credentials: drop any stale session and
        leave the expired state. Returns the remembered (server_url, badge).

        keep_session=True is for the first screen after start-up, where a
        persisted token may still be valid and is sent along with the login.
        """
        if self._state in (AuthState.AUTHENTICATED, AuthState.CREDENTIALS_PENDING):
            raise FlowError(f"Cannot start a login while {self._state.value}")
        if not keep_session:
            self._session.clear()
        if self._state is not AuthState.UNAUTHENTICATED:
            self._move(AuthState.UNAUTHENTICATED)
        self._profile = None
        self._pending_badge = None
        return self._prefs.server_url, self._prefs.badge_number

    def submit_credentials(self, credentials, server_url):
        """Send badge + password. Success moves to OtpPending."""
        if not isinstance(credentials, Credentials):
            raise TypeError("credentials must be a Credentials instance")
        self._move(AuthState.CREDENTIALS_PENDING)

        server_url = (server_url or "").strip().rstrip("/")
        self._server_url = server_url
        self._client = self._client_factory(server_url)

        log.info("Logging in badge %s at %s", credentials.badge_number, server_url)
        resp = self._client.post(Endpoint.LOGIN, credentials.to_payload())
        outcome = classify(resp.status_code, resp.body, resp.error, Endpoint.LOGIN)

        if isinstance(outcome, Accepted):
            if outcome.server_message == LOGIN_SUCCESS_MESSAGE:
                badge = credentials.badge_number
                self._prefs.remember(server_url, badge)
                self._pending_badge = badge
                self._move(AuthState.OTP_PENDING)
                return OtpRequired(badge)
            outcome = Rejected(f"{MSG_UNEXPECTED_RESPONSE}: {outcome.server_message}")

        log.warning("Login failed: %s", outcome.message)
        self._move(AuthState.UNAUTHENTICATED)
        return outcome

    def submit_code(self, challenge):
        """Send an already-normalized OTP. Success moves to Authenticated."""
        if self._state is not AuthState.OTP_PENDING:
            raise FlowError(f"No OTP expected while {self._state.value}")
        if not isinstance(challenge, OtpChallenge):
            raise TypeError("challenge must be an OtpChallenge instance")

        resp = self._client.post(Endpoint.VERIFY_OTP, challenge.to_payload())
        if self._state is not AuthState.OTP_PENDING:
            log.warning("Login abandoned during code verification (now %s)", self._state.value)
            if self._state is AuthState.UNAUTHENTICATED:
                self._session.clear()
            return Rejected(MSG_LOGIN_CANCELLED)

        outcome = classify(resp.status_code, resp.body, resp.error, Endpoint.VERIFY_OTP)

        if isinstance(outcome, Accepted):
            badge = resp.body.get("badgeNumber")
            name = resp.body.get("name")
            if not isinstance(badge, str) or not isinstance(name, str):
                log.warning("OTP response missing badgeNumber/name")
                return TransportFailure(MSG_UNEXPECTED_RESPONSE)
            self._profile = EmployeeProfile(badge_number=badge, display_name=name)
            self._prefs.remember(self._server_url, badge)
            self._move(AuthState.AUTHENTICATED)
            return Authenticated(self._profile, outcome.server_message)

        if isinstance(outcome, SessionExpired):
            self._pending_badge = None
            self._move(AuthState.UNAUTHENTICATED)
            return outcome

        log.warning("OTP verification failed: %s", outcome.message)
        return outcome

    def logout(self):
        """
        Ask the server to end the session, then clear local state whatever
        it answered. A 401 here is a normal stale-session logout.
        """
        if self._state in (AuthState.UNAUTHENTICATED, AuthState.CREDENTIALS_PENDING):
            raise FlowError(f"Nothing to log out of while {self._state.value}")

        server_message = ""
        self._logging_out = True
        try:
            if self._client is not None:
                resp = self._client.post(Endpoint.LOGOUT)
                if resp.error is not None:
                    server_message = resp.error
                elif resp.status_code not in (200, 401):
                    server_message = message_of(resp.body) or resp.text or MSG_UNEXPECTED_RESPONSE
                    log.warning("Logout returned HTTP %d: %s", resp.status_code, server_message)
            self._session.clear()
            self._prefs.forget()
        finally:
            self._logging_out = False

        self._profile = None
        self._pending_badge = None
        self._move(AuthState.UNAUTHENTICATED)
        return LoggedOut(server_message)
