"""
Host platform checks used by the attendance guard chain:
  - VPN detection (network interface names of the tunnel/PPP/IPsec/tap families)
  - Owner verification (biometric re-authentication) behind a small interface
"""

import socket
from pathlib import Path

from .config import log
from .constants import VPN_INTERFACE_PATTERNS, MSG_BIOMETRICS_UNAVAILABLE

_SYSFS_NET = Path("/sys/class/net")


# ─── Network interfaces ──────────────────────────────────────────

def _is_up(name):
    """Linux reports state in sysfs; tun devices usually say 'unknown'."""
    operstate = _SYSFS_NET / name / "operstate"
    try:
        return operstate.read_text().strip() != "down"
    except OSError:
        return True


def list_active_interfaces():
    """Names of the host's network interfaces that are not administratively down."""
    return [name for _, name in socket.if_nameindex() if _is_up(name)]


def matching_vpn_interfaces(names, patterns=VPN_INTERFACE_PATTERNS):
    lowered = [p.lower() for p in patterns]
    return [name for name in names if any(p in name.lower() for p in lowered)]


class VpnProbe:
    """Reports whether any active interface looks like a VPN tunnel."""

    def __init__(self, list_interfaces=list_active_interfaces, patterns=VPN_INTERFACE_PATTERNS):
        self._list_interfaces = list_interfaces
        self._patterns = tuple(patterns)

    def vpn_interfaces(self):
        """Matching interface names. Raises OSError when the scan fails."""
        matches = matching_vpn_interfaces(self._list_interfaces(), self._patterns)
        if matches:
            log.info("VPN interface(s) present: %s", ", ".join(matches))
        return matches

    def is_connected(self):
        return bool(self.vpn_interfaces())


# ─── Owner verification ──────────────────────────────────────────

class OwnerVerifier:
    """
    Local re-authentication of the device owner.

    availability() returns None when verification can be attempted, or a
    human-readable reason when the hardware/OS cannot do it.
    verify() blocks until the user finishes the prompt; False means the
    user cancelled or failed.
    """

    def availability(self):
        raise NotImplementedError

    def verify(self, reason):
        raise NotImplementedError


class UnavailableVerifier(OwnerVerifier):
    """Used on hosts without a biometric facility: always reports unavailable."""

    def __init__(self, reason=MSG_BIOMETRICS_UNAVAILABLE):
        self._reason = reason

    def availability(self):
        return self._reason

    def verify(self, reason):
        return False


class PromptVerifier(OwnerVerifier):
    """Delegates to a prompt callable supplied by the presentation layer."""

    def __init__(self, prompt):
        self._prompt = prompt

    def availability(self):
        return None

    def verify(self, reason):
        return bool(self._prompt(reason))
