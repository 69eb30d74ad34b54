"""
oneIT Attendance: Desktop Client
=================================
Log in with badge number and password, confirm the one-time code, then
check in or out. Check-in/out is refused while a VPN is active and needs
the device owner to confirm it is them.

Usage:
    python oneit.py
"""

import sys

from oneit_core.runner import main

if __name__ == "__main__":
    sys.exit(main())
