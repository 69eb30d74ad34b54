import pytest
import requests

from oneit_core.guards import GuardContext, run_guards
from oneit_core.location import LocationProvider
from oneit_core.models import AttendanceAction, DeviceInfo
from oneit_core.outcomes import (
    Accepted, DeviceCapabilityFailure, PolicyBlocked, Rejected, SessionExpired,
    TransportFailure,
)
from oneit_core.pipeline import AttendanceGuardPipeline
from oneit_core.platform_probe import OwnerVerifier, UnavailableVerifier, VpnProbe

from conftest import SERVER, FakeResponse


class RecordingVerifier(OwnerVerifier):
    def __init__(self, answer=True, unavailable=None):
        self.answer = answer
        self.unavailable = unavailable
        self.prompts = []

    def availability(self):
        return self.unavailable

    def verify(self, reason):
        self.prompts.append(reason)
        return self.answer


class Interfaces:
    def __init__(self, *names, error=None):
        self.names = list(names)
        self.error = error
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.error:
            raise self.error
        return self.names


DEVICE = DeviceInfo(model="arm64", os_version="Darwin 23.1")


@pytest.fixture
def location():
    provider = LocationProvider()
    provider.update(24.7136, 46.6753)
    return provider


@pytest.fixture
def verifier():
    return RecordingVerifier()


@pytest.fixture
def interfaces():
    return Interfaces("lo0", "en0")


@pytest.fixture
def pipeline(client, location, interfaces, verifier):
    return AttendanceGuardPipeline(client, location, VpnProbe(interfaces), verifier, "A1", DEVICE)


def test_guard_order(pipeline):
    names = [guard.__name__ for guard in pipeline.guards]
    assert names == ["location_guard", "vpn_guard", "biometric_guard"]


def test_check_in_accepted(pipeline, http, verifier):
    http.queue(FakeResponse(200, {"message": "Check-in recorded"}))
    outcome = pipeline.submit(AttendanceAction.CHECK_IN)

    assert outcome == Accepted("Check-in recorded")
    assert verifier.prompts == ["Authenticate to Check-In or Check-Out"]
    call = http.calls[0]
    assert call["url"] == f"{SERVER}/api/checkIn"
    assert call["json"] == {
        "badgeNumber": "A1",
        "latitude": 24.7136,
        "longitude": 46.6753,
        "mobileModel": "arm64",
        "mobileOS": "Darwin 23.1",
    }


def test_check_out_uses_its_endpoint(pipeline, http):
    http.queue(FakeResponse(200, {"message": "bye"}))
    pipeline.submit(AttendanceAction.CHECK_OUT)
    assert http.calls[0]["url"] == f"{SERVER}/api/checkOut"


def test_request_carries_session_cookie(pipeline, http, session_store):
    session_store.adopt("sess-7")
    http.queue(FakeResponse(200, {"message": "ok"}))
    pipeline.submit(AttendanceAction.CHECK_IN)
    assert http.last_cookie == "JSESSIONID=sess-7"


def test_missing_location_stops_everything(client, interfaces, verifier, http):
    pipeline = AttendanceGuardPipeline(
        client, LocationProvider(), VpnProbe(interfaces), verifier, "A1", DEVICE)
    outcome = pipeline.submit(AttendanceAction.CHECK_IN)

    assert outcome == DeviceCapabilityFailure("location unavailable")
    assert interfaces.calls == 0
    assert verifier.prompts == []
    assert http.calls == []


@pytest.mark.parametrize("vpn", ["utun0", "ppp0", "ipsec0", "tap1", "tun0", "UTUN3"])
def test_vpn_blocks_before_biometrics(client, location, verifier, http, vpn):
    pipeline = AttendanceGuardPipeline(
        client, location, VpnProbe(Interfaces("en0", vpn)), verifier, "A1", DEVICE)
    outcome = pipeline.submit(AttendanceAction.CHECK_IN)

    assert outcome == PolicyBlocked("VPN not allowed")
    assert verifier.prompts == []
    assert http.calls == []


def test_interface_scan_failure(client, location, verifier, http):
    pipeline = AttendanceGuardPipeline(
        client, location, VpnProbe(Interfaces(error=OSError("denied"))), verifier, "A1", DEVICE)
    outcome = pipeline.submit(AttendanceAction.CHECK_IN)

    assert isinstance(outcome, DeviceCapabilityFailure)
    assert verifier.prompts == []
    assert http.calls == []


def test_biometrics_unavailable(client, location, interfaces, http):
    pipeline = AttendanceGuardPipeline(
        client, location, VpnProbe(interfaces), UnavailableVerifier("no Touch ID"), "A1", DEVICE)
    outcome = pipeline.submit(AttendanceAction.CHECK_IN)

    assert outcome == DeviceCapabilityFailure("no Touch ID")
    assert http.calls == []


def test_biometric_cancel(client, location, interfaces, http):
    verifier = RecordingVerifier(answer=False)
    pipeline = AttendanceGuardPipeline(
        client, location, VpnProbe(interfaces), verifier, "A1", DEVICE)
    outcome = pipeline.submit(AttendanceAction.CHECK_OUT)

    assert outcome == DeviceCapabilityFailure("authentication failed")
    assert len(verifier.prompts) == 1
    assert http.calls == []


def test_session_expired_clears_token(pipeline, http, session_store):
    session_store.adopt("sess-7")
    http.queue(FakeResponse(401, {"message": "Session expired"}))
    outcome = pipeline.submit(AttendanceAction.CHECK_IN)

    assert outcome == SessionExpired()
    assert session_store.current() is None


@pytest.mark.parametrize("response, expected", [
    (FakeResponse(400, {"message": "You are outside the office area"}),
     Rejected("You are outside the office area")),
    (FakeResponse(500, {"message": "boom"}), TransportFailure("server error, try again later")),
    (FakeResponse(404, {"message": "missing"}), TransportFailure("unexpected response")),
    (FakeResponse(200, None, text="<html/>"), TransportFailure("unexpected response")),
])
def test_server_replies_are_classified(pipeline, http, response, expected):
    http.queue(response)
    assert pipeline.submit(AttendanceAction.CHECK_IN) == expected


def test_network_failure(pipeline, http):
    http.queue(requests.ConnectionError("no route to host"))
    outcome = pipeline.submit(AttendanceAction.CHECK_IN)
    assert isinstance(outcome, TransportFailure)
    assert "no route to host" in outcome.message


def test_renewed_token_adopted_on_rejection(pipeline, http, session_store):
    session_store.adopt("old")
    http.queue(FakeResponse(400, {"message": "too early"}, set_cookie="JSESSIONID=fresh; Path=/"))
    pipeline.submit(AttendanceAction.CHECK_IN)
    assert session_store.current() == "fresh"


def test_uses_latest_fix(pipeline, http, location):
    location.update(1.5, 2.5)
    http.queue(FakeResponse(200, {"message": "ok"}))
    pipeline.submit(AttendanceAction.CHECK_IN)
    assert http.calls[0]["json"]["latitude"] == 1.5
    assert http.calls[0]["json"]["longitude"] == 2.5


def test_submit_requires_action(pipeline):
    with pytest.raises(TypeError):
        pipeline.submit("checkIn")


# ─── Driver loop ─────────────────────────────────────────────────

def test_run_guards_short_circuits():
    ran = []

    def first(context):
        ran.append("first")

    def second(context):
        ran.append("second")
        return PolicyBlocked("stop")

    def third(context):
        ran.append("third")

    context = GuardContext(action=AttendanceAction.CHECK_IN)
    outcome = run_guards([first, second, third], context)

    assert outcome == PolicyBlocked("stop")
    assert ran == ["first", "second"]
    assert context.ran == ["first", "second"]


def test_run_guards_all_pass():
    context = GuardContext(action=AttendanceAction.CHECK_OUT)
    assert run_guards([lambda c: None, lambda c: None], context) is None
    assert len(context.ran) == 2
