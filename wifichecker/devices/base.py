"""Device subsystem interface."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from wifichecker.core.model import ConnectionSnapshot, ScanEntry, StoredProfile


class WifiDevice(Protocol):
    """Radio and network-profile capabilities the checker drives.

    Implementations own the radio; the checker only issues requests and
    observes reported state. Calls are made from the checker's worker thread.
    """

    def get_connection_snapshot(self) -> ConnectionSnapshot:
        """Return the current association state."""

    def is_radio_enabled(self) -> bool:
        """Return whether the wireless radio is on."""

    def set_radio_enabled(self, enabled: bool) -> None:
        """Request the radio be switched on or off."""

    def list_profiles(self) -> Sequence[StoredProfile]:
        """Return the stored network profiles."""

    def update_profile(self, profile: StoredProfile) -> None:
        """Persist changes to an existing profile."""

    def add_profile(self, profile: StoredProfile) -> int:
        """Store a new profile and return its id, or -1 when rejected."""

    def enable_profile(self, profile_id: int, *, exclusive: bool) -> bool:
        """Enable a stored profile, optionally deprioritising all others."""

    def reconnect(self) -> None:
        """Ask the device to (re)associate using the enabled profiles."""

    def start_scan(self) -> bool:
        """Trigger a scan; return False when the request is rejected."""

    def get_scan_results(self) -> Sequence[ScanEntry]:
        """Return the most recent scan results (possibly empty)."""
