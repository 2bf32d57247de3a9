"""Stable public API for embedding wifichecker.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from concurrent.futures import Executor
from typing import Callable

from wifichecker.core.config import CheckerConfig, load_config
from wifichecker.core.errors import (
    AssociationTimeoutError,
    CheckFailure,
    ConfigError,
    ConfigValidationError,
    DeviceCommandError,
    DeviceError,
    DeviceUnavailableError,
    ProfileAddRejectedError,
    ProfileEnableRejectedError,
    ProfileNotFoundError,
    ProvisionError,
    RadioEnableTimeoutError,
    ScanTriggerFailedError,
    UnexpectedFaultError,
    UserDeclinedError,
    WifiCheckerError,
)
from wifichecker.core.model import (
    ConnectionSnapshot,
    Failure,
    OpenAuth,
    Outcome,
    PskAuth,
    ReconnectPolicy,
    RetryPolicy,
    ScanEntry,
    SecurityMode,
    StoredProfile,
    Success,
    TargetProfile,
    WepAuth,
)
from wifichecker.core.security import classify
from wifichecker.core.session import CheckerCallbacks, CheckerSession
from wifichecker.core.validity import is_valid
from wifichecker.devices.base import WifiDevice
from wifichecker.devices.nmcli import NMCLIDevice

__all__ = [
    "WifiCheckerError",
    "CheckFailure",
    "ConfigError",
    "ConfigValidationError",
    "DeviceError",
    "DeviceCommandError",
    "DeviceUnavailableError",
    "UserDeclinedError",
    "RadioEnableTimeoutError",
    "ProvisionError",
    "ProfileNotFoundError",
    "ScanTriggerFailedError",
    "ProfileAddRejectedError",
    "ProfileEnableRejectedError",
    "AssociationTimeoutError",
    "UnexpectedFaultError",
    "ConnectionSnapshot",
    "Failure",
    "OpenAuth",
    "Outcome",
    "PskAuth",
    "ReconnectPolicy",
    "RetryPolicy",
    "ScanEntry",
    "SecurityMode",
    "StoredProfile",
    "Success",
    "TargetProfile",
    "WepAuth",
    "CheckerConfig",
    "load_config",
    "WifiDevice",
    "NMCLIDevice",
    "classify",
    "is_valid",
    "wifi_valid",
    "WifiChecker",
]


def wifi_valid(target: TargetProfile, device: WifiDevice) -> bool:
    """Return whether ``device`` is currently associated with ``target``."""
    if not target.name:
        return True
    return is_valid(target, device.get_connection_snapshot())


class WifiChecker:
    """Threaded Wi-Fi checker.

    Checks whether the device is associated with the target network and, if
    not, reconnects it. ``begin_checking`` returns immediately; exactly one of
    ``on_success`` or ``on_failure(reason)`` is called per run unless the run
    is stopped or superseded first. ``on_reconnection_consent(from, to)`` is
    asked before the device is switched to another network.

    Callbacks run on the checker's worker thread. Pass ``callback_executor``
    to have them submitted to an executor owned by the caller instead.
    """

    def __init__(
        self,
        on_success: Callable[[], None],
        on_failure: Callable[[str], None],
        on_reconnection_consent: Callable[[str | None, str], bool],
        *,
        policy: ReconnectPolicy | None = None,
        callback_executor: Executor | None = None,
    ) -> None:
        self._session = CheckerSession(
            CheckerCallbacks(
                on_success=on_success,
                on_failure=on_failure,
                on_reconnection_consent=on_reconnection_consent,
            ),
            policy=policy,
            callback_executor=callback_executor,
        )

    @property
    def running(self) -> bool:
        return self._session.running

    def begin_checking(self, target: TargetProfile, device: WifiDevice) -> None:
        self._session.start(target, device)

    def stop_checking(self) -> None:
        self._session.stop()

    def wait(self, timeout: float | None = None) -> bool:
        return self._session.join(timeout)
