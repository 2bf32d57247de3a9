"""Resolve or create the stored profile for the target network."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace

from wifichecker.core.cancellation import CancellationToken, poll
from wifichecker.core.errors import ProfileAddRejectedError, ProfileNotFoundError, ScanTriggerFailedError
from wifichecker.core.model import (
    UNSAVED_PROFILE_ID,
    AuthParams,
    OpenAuth,
    PskAuth,
    ReconnectPolicy,
    RetryPolicy,
    ScanEntry,
    SecurityMode,
    StoredProfile,
    TargetProfile,
    WepAuth,
)
from wifichecker.core.security import classify
from wifichecker.devices.base import WifiDevice

LOGGER = logging.getLogger(__name__)

DEFAULT_SCAN_POLICY = ReconnectPolicy().scan_results


def auth_for(mode: SecurityMode, secret: str | None) -> AuthParams:
    if mode is SecurityMode.OPEN:
        return OpenAuth()
    if mode is SecurityMode.WEP:
        return WepAuth(key=secret or "", tx_key_index=0)
    return PskAuth(pre_shared_key=secret or "")


def build_profile(target: TargetProfile, entry: ScanEntry, *, priority: int = 0) -> StoredProfile:
    mode = classify(entry.capabilities)
    LOGGER.debug("Network %r security mode: %s", entry.name, mode.value)
    return StoredProfile(
        id=UNSAVED_PROFILE_ID,
        name=target.name or entry.name,
        priority=priority,
        auth=auth_for(mode, target.secret),
        enabled=True,
    )


def _max_priority(profiles: Sequence[StoredProfile]) -> int:
    return max((p.priority for p in profiles), default=-1)


def _find_profile(name: str, profiles: Sequence[StoredProfile]) -> StoredProfile | None:
    match: StoredProfile | None = None
    for profile in profiles:
        if profile.name == name:
            match = profile
    return match


def ensure_profile(
    target: TargetProfile,
    device: WifiDevice,
    *,
    policy: RetryPolicy = DEFAULT_SCAN_POLICY,
    token: CancellationToken | None = None,
) -> int:
    """Return the id of a stored profile for ``target``, creating one if needed.

    An existing profile below the highest stored priority is raised above it
    and disabled so the device re-evaluates it. Otherwise the network is
    looked up in a fresh scan and a new profile is built from its advertised
    security.
    """
    if not target.name:
        raise ValueError("ensure_profile requires a target network name")
    token = token or CancellationToken()

    existing = list(device.list_profiles())
    max_priority = _max_priority(existing)
    found = _find_profile(target.name, existing)

    if found is not None:
        if found.priority < max_priority:
            updated = replace(found, priority=max_priority + 1, enabled=False)
            LOGGER.info(
                "Raising priority of %r from %d to %d",
                found.name,
                found.priority,
                updated.priority,
            )
            device.update_profile(updated)
        return found.id

    LOGGER.info("No stored profile for %r; scanning", target.name)
    scan_accepted = device.start_scan()
    if not scan_accepted:
        LOGGER.warning("Scan request rejected; polling for existing results")

    results = poll(
        policy,
        lambda: list(device.get_scan_results()),
        token,
        label="scan results",
    ) or []

    entry = next((r for r in results if r.name == target.name), None)
    if entry is None:
        if not scan_accepted:
            raise ScanTriggerFailedError()
        raise ProfileNotFoundError()

    profile = build_profile(target, entry, priority=max_priority + 1)
    profile_id = device.add_profile(profile)
    LOGGER.debug("add_profile returned %d", profile_id)
    if profile_id < 0:
        raise ProfileAddRejectedError()
    return profile_id
