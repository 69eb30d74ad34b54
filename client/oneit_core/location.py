"""
LocationProvider: holds the most recent device position.

Producers push fixes with update(); the attendance pipeline only ever reads
latest() and never waits for a fix to appear.
"""

import threading
import time

from .config import log
from .models import GeoFix


class LocationProvider:
    def __init__(self):
        self._lock = threading.Lock()
        self._fix = None

    def update(self, latitude, longitude, timestamp=None):
        fix = GeoFix(float(latitude), float(longitude),
                     timestamp if timestamp is not None else time.time())
        with self._lock:
            self._fix = fix
        return fix

    def latest(self):
        """Most recent GeoFix, or None when no position is known."""
        with self._lock:
            return self._fix

    @classmethod
    def from_config(cls, config):
        """Seed with the fixed workstation position from settings, if any."""
        provider = cls()
        lat, lon = config.get("latitude"), config.get("longitude")
        if lat is None or lon is None:
            log.info("No fixed position configured; check-in/out needs a location fix")
            return provider
        try:
            provider.update(lat, lon)
            log.info("Using configured position %.5f, %.5f", float(lat), float(lon))
        except (TypeError, ValueError) as e:
            log.warning("Ignoring configured position: %s", e)
        return provider
