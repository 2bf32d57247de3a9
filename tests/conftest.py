from __future__ import annotations

from dataclasses import replace

import pytest

from wifichecker.core.model import (
    ConnectionSnapshot,
    ReconnectPolicy,
    RetryPolicy,
    ScanEntry,
    StoredProfile,
)


class FakeDevice:
    """In-memory device that records every call made against it."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.radio_on = True
        self.radio_turns_on = True
        self.radio_enable_delay = 0
        self.network_name: str | None = None
        self.ip_assigned = False
        self.auth_completed = False
        self.profiles: list[StoredProfile] = []
        self.updated: list[StoredProfile] = []
        self.added: list[StoredProfile] = []
        self.add_result: int | None = None
        self.enable_result = True
        self.enabled: list[tuple[int, bool]] = []
        self.scan_accepted = True
        self.scan_results: list[ScanEntry] = []
        self.empty_scan_polls = 0
        self.associates = True
        self.association_delay = 0
        self.snapshot_error: Exception | None = None
        self._radio_pending: int | None = None
        self._reconnected = False
        self._enabled_id: int | None = None

    def count(self, name: str) -> int:
        return self.calls.count(name)

    def connect_to(self, name: str) -> None:
        self.network_name = name
        self.ip_assigned = True
        self.auth_completed = True

    def get_connection_snapshot(self) -> ConnectionSnapshot:
        self.calls.append("get_connection_snapshot")
        if self.snapshot_error is not None:
            raise self.snapshot_error
        if self._reconnected and self.associates:
            if self.association_delay > 0:
                self.association_delay -= 1
            else:
                name = next(
                    (p.name for p in [*self.profiles, *self.added] if p.id == self._enabled_id),
                    None,
                )
                if name is not None:
                    self.connect_to(name)
        return ConnectionSnapshot(
            network_name=self.network_name,
            ip_assigned=self.ip_assigned,
            auth_completed=self.auth_completed,
            radio_enabled=self.radio_on,
        )

    def is_radio_enabled(self) -> bool:
        self.calls.append("is_radio_enabled")
        if not self.radio_on and self._radio_pending is not None:
            if self._radio_pending == 0:
                self.radio_on = True
            else:
                self._radio_pending -= 1
        return self.radio_on

    def set_radio_enabled(self, enabled: bool) -> None:
        self.calls.append("set_radio_enabled")
        if enabled and self.radio_turns_on:
            self._radio_pending = self.radio_enable_delay

    def list_profiles(self) -> list[StoredProfile]:
        self.calls.append("list_profiles")
        return list(self.profiles)

    def update_profile(self, profile: StoredProfile) -> None:
        self.calls.append("update_profile")
        self.updated.append(profile)
        self.profiles = [profile if p.id == profile.id else p for p in self.profiles]

    def add_profile(self, profile: StoredProfile) -> int:
        self.calls.append("add_profile")
        profile_id = self.add_result if self.add_result is not None else 100 + len(self.added)
        self.added.append(replace(profile, id=profile_id))
        return profile_id

    def enable_profile(self, profile_id: int, *, exclusive: bool) -> bool:
        self.calls.append("enable_profile")
        self.enabled.append((profile_id, exclusive))
        self._enabled_id = profile_id
        return self.enable_result

    def reconnect(self) -> None:
        self.calls.append("reconnect")
        self._reconnected = True

    def start_scan(self) -> bool:
        self.calls.append("start_scan")
        return self.scan_accepted

    def get_scan_results(self) -> list[ScanEntry]:
        self.calls.append("get_scan_results")
        if self.empty_scan_polls > 0:
            self.empty_scan_polls -= 1
            return []
        return list(self.scan_results)


@pytest.fixture
def device() -> FakeDevice:
    return FakeDevice()


@pytest.fixture
def fast_policy() -> ReconnectPolicy:
    return ReconnectPolicy(
        radio_enable=RetryPolicy(interval_s=0, attempts=30),
        scan_results=RetryPolicy(interval_s=0, attempts=30),
        association=RetryPolicy(interval_s=0, attempts=15),
    )


@pytest.fixture
def make_device():
    return FakeDevice
