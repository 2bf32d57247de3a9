"""Domain-specific errors for wifichecker."""

from __future__ import annotations


class WifiCheckerError(Exception):
    """Base error for wifichecker."""


class ConfigError(WifiCheckerError):
    """Raised when the configuration file cannot be read."""


class ConfigValidationError(ConfigError):
    """Raised when the configuration file does not conform to schema or semantics."""


class DeviceError(WifiCheckerError):
    """Base device subsystem error."""


class DeviceUnavailableError(DeviceError):
    """Raised when the device management tooling is not installed."""


class DeviceCommandError(DeviceError):
    """Raised when a device management command fails or times out."""


class CheckFailure(WifiCheckerError):
    """Terminal failure of a reconnection run.

    ``kind`` names the failure category and ``reason`` is the short message
    handed to the caller's failure callback.
    """

    kind = "CheckFailure"
    default_reason = "WiFi check failed"

    def __init__(self, reason: str | None = None) -> None:
        self.reason = reason or self.default_reason
        super().__init__(self.reason)


class UserDeclinedError(CheckFailure):
    kind = "UserDeclined"
    default_reason = "Wrong WiFi network"


class RadioEnableTimeoutError(CheckFailure):
    kind = "RadioEnableTimeout"
    default_reason = "Un-able to enable to WiFi"


class ProvisionError(CheckFailure):
    """Raised when the target network profile cannot be resolved or created."""

    kind = "ProvisionError"
    default_reason = "Unable to provision WiFi network"


class ProfileNotFoundError(ProvisionError):
    kind = "ProfileNotFound"
    default_reason = "WiFi network not found"


class ScanTriggerFailedError(ProvisionError):
    kind = "ScanTriggerFailed"
    default_reason = "wifi scan fail"


class ProfileAddRejectedError(ProvisionError):
    kind = "ProfileAddRejected"
    default_reason = "Failed to add the WiFi configure"


class ProfileEnableRejectedError(CheckFailure):
    kind = "ProfileEnableRejected"
    default_reason = "Failed to enable network"


class AssociationTimeoutError(CheckFailure):
    kind = "AssociationTimeout"
    default_reason = "WiFi connection timed out"


class UnexpectedFaultError(CheckFailure):
    """Wraps any fault that escaped the designed transitions."""

    kind = "UnexpectedFault"
    default_reason = "exception"

    @classmethod
    def from_exception(cls, exc: BaseException) -> UnexpectedFaultError:
        detail = str(exc) or type(exc).__name__
        return cls(f"exception: {detail}")


class RunCancelled(Exception):
    """Raised inside a worker when its run has been cancelled.

    Not a ``WifiCheckerError``: a cancelled run reports nothing to the caller.
    """
