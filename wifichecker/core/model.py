"""Core data models used across the orchestrator, devices, and CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

UNSAVED_PROFILE_ID = -1


@dataclass(frozen=True)
class TargetProfile:
    name: str | None
    secret: str | None = None

    @property
    def constrained(self) -> bool:
        return bool(self.name)


@dataclass(frozen=True)
class ConnectionSnapshot:
    network_name: str | None = None
    ip_assigned: bool = False
    auth_completed: bool = False
    radio_enabled: bool = False


@dataclass(frozen=True)
class ScanEntry:
    name: str
    capabilities: str = ""


class SecurityMode(str, Enum):
    WEP = "WEP"
    PSK = "PSK"
    EAP = "EAP"
    OPEN = "OPEN"


@dataclass(frozen=True)
class OpenAuth:
    pass


@dataclass(frozen=True)
class WepAuth:
    key: str
    tx_key_index: int = 0
    group_ciphers: tuple[str, ...] = ("WEP40",)


@dataclass(frozen=True)
class PskAuth:
    pre_shared_key: str
    hidden: bool = True
    group_ciphers: tuple[str, ...] = ("TKIP", "CCMP")
    pairwise_ciphers: tuple[str, ...] = ("TKIP", "CCMP")
    protocols: tuple[str, ...] = ("RSN", "WPA")


AuthParams = Union[OpenAuth, WepAuth, PskAuth]


@dataclass(frozen=True)
class StoredProfile:
    id: int
    name: str
    priority: int = 0
    auth: AuthParams | None = None
    enabled: bool = True


@dataclass(frozen=True)
class Success:
    pass


@dataclass(frozen=True)
class Failure:
    reason: str
    kind: str = "CheckFailure"


Outcome = Union[Success, Failure]


class RunState(str, Enum):
    IDLE = "idle"
    CHECKING_VALIDITY = "checking_validity"
    REQUESTING_CONSENT = "requesting_consent"
    ENABLING_RADIO = "enabling_radio"
    RESOLVING_PROFILE = "resolving_profile"
    ENABLING_NETWORK = "enabling_network"
    AWAITING_ASSOCIATION = "awaiting_association"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.SUCCEEDED, RunState.FAILED)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded polling: ``attempts`` waits of ``interval_s``, each preceded by a check, then a final check."""

    interval_s: float
    attempts: int

    @property
    def budget_s(self) -> float:
        return self.interval_s * self.attempts


@dataclass(frozen=True)
class ReconnectPolicy:
    radio_enable: RetryPolicy = field(default_factory=lambda: RetryPolicy(interval_s=1.0, attempts=30))
    scan_results: RetryPolicy = field(default_factory=lambda: RetryPolicy(interval_s=1.0, attempts=30))
    association: RetryPolicy = field(default_factory=lambda: RetryPolicy(interval_s=5.0, attempts=15))
