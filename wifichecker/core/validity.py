"""Association validity check against a target network."""

from __future__ import annotations

from wifichecker.core.model import ConnectionSnapshot, TargetProfile


def is_valid(target: TargetProfile, snapshot: ConnectionSnapshot | None) -> bool:
    if not target.name:
        return True
    if snapshot is None:
        return False
    return (
        snapshot.radio_enabled is True
        and snapshot.network_name == target.name
        and snapshot.ip_assigned is True
        and snapshot.auth_completed is True
    )
