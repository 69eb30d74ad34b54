"""
Entry point and composition root.

Builds the one SessionStore, Preferences, LocationProvider and VpnProbe
for the process and hands them to the UI.
"""

import sys

from .constants import CLIENT_VERSION, VPN_INTERFACE_PATTERNS
from .config import log, safe_print, load_config, JsonStore, Preferences
from .location import LocationProvider
from .platform_probe import VpnProbe
from .session import SessionStore


def build_services(config, store=None):
    """Construct the shared collaborators from settings."""
    store = store if store is not None else JsonStore()
    session_store = SessionStore(store)
    preferences = Preferences(store)
    location = LocationProvider.from_config(config)
    patterns = config.get("vpnInterfacePatterns") or VPN_INTERFACE_PATTERNS
    vpn_probe = VpnProbe(patterns=patterns)
    return session_store, preferences, location, vpn_probe


def main():
    """Primary client entry point."""
    safe_print("oneIT Attendance Client v" + CLIENT_VERSION)
    safe_print()

    config = load_config()
    session_store, preferences, location, vpn_probe = build_services(config)
    log.info("Starting against %s", preferences.server_url or config["serverUrl"])

    # Imported here so headless callers of build_services never load Tk.
    from .app import ClientApp

    app = ClientApp(config, session_store, preferences, location=location, vpn_probe=vpn_probe)
    try:
        app.run()
    except KeyboardInterrupt:
        safe_print("\nClient stopped by user.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
