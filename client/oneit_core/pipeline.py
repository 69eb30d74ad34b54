"""
AttendanceGuardPipeline: gated check-in / check-out submission.

submit() runs, in this order and stopping at the first failure:
  1. location guard:  a fix must already be known
  2. VPN guard:       no tunnel/PPP/IPsec/tap interface may be active
  3. biometric guard: the device owner must re-authenticate
then posts the AttendanceRequest and classifies the reply.

A VPN-connected device never reaches the biometric prompt, and a device
with no fix never reaches either check. The network call is only made
after every guard passed.
"""

from .config import log
from .constants import (
    BIOMETRIC_PROMPT_REASON, MSG_AUTH_FAILED, MSG_INTERFACES_UNAVAILABLE,
    MSG_LOCATION_UNAVAILABLE, MSG_VPN_BLOCKED,
)
from .classifier import classify
from .guards import GuardContext, run_guards
from .models import AttendanceAction, AttendanceRequest, DeviceInfo
from .outcomes import DeviceCapabilityFailure, PolicyBlocked


class AttendanceGuardPipeline:
    def __init__(self, client, location, vpn_probe, verifier, badge_number, device=None):
        self._client = client
        self._location = location
        self._vpn_probe = vpn_probe
        self._verifier = verifier
        self._badge_number = badge_number
        self._device = device or DeviceInfo.detect()

    @property
    def guards(self):
        """The guard chain, in evaluation order."""
        return [self.location_guard, self.vpn_guard, self.biometric_guard]

    # ─── Guards ──────────────────────────────────────────────

    def location_guard(self, context):
        fix = self._location.latest()
        if fix is None:
            return DeviceCapabilityFailure(MSG_LOCATION_UNAVAILABLE)
        context.fix = fix
        return None

    def vpn_guard(self, context):
        try:
            connected = self._vpn_probe.is_connected()
        except OSError as e:
            log.warning("Interface scan failed: %s", e)
            return DeviceCapabilityFailure(MSG_INTERFACES_UNAVAILABLE)
        if connected:
            return PolicyBlocked(MSG_VPN_BLOCKED)
        return None

    def biometric_guard(self, context):
        unavailable = self._verifier.availability()
        if unavailable:
            return DeviceCapabilityFailure(unavailable)
        if not self._verifier.verify(BIOMETRIC_PROMPT_REASON):
            return DeviceCapabilityFailure(MSG_AUTH_FAILED)
        return None

    # ─── Submission ──────────────────────────────────────────

    def submit(self, action):
        """Run the guard chain and, if it passes, post the attendance event."""
        if not isinstance(action, AttendanceAction):
            raise TypeError("action must be an AttendanceAction")

        context = GuardContext(action=action)
        blocked = run_guards(self.guards, context)
        if blocked is not None:
            return blocked

        request = AttendanceRequest.build(action, context.fix, self._badge_number, self._device)
        log.info("%s for badge %s at %.5f, %.5f", action.value, request.badge_number,
                 request.latitude, request.longitude)
        resp = self._client.post(action.endpoint, request.to_payload())
        outcome = classify(resp.status_code, resp.body, resp.error, action.endpoint)
        log.info("%s outcome: %s (%s)", action.value, type(outcome).__name__, outcome.message)
        return outcome
