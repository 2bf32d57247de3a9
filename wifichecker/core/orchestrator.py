"""Reconnection state machine.

A run moves through::

    IDLE -> CHECKING_VALIDITY -> REQUESTING_CONSENT -> ENABLING_RADIO
         -> RESOLVING_PROFILE -> ENABLING_NETWORK -> AWAITING_ASSOCIATION
         -> SUCCEEDED | FAILED

Each non-terminal state has one handler that performs the device calls for
that phase and returns the next state. Designed failures are raised as
``CheckFailure`` subclasses; anything else becomes an ``UnexpectedFault``.
Cancellation surfaces as ``RunCancelled`` and produces no outcome.
"""

from __future__ import annotations

import logging
from typing import Callable

from wifichecker.core.cancellation import CancellationToken, poll
from wifichecker.core.errors import (
    AssociationTimeoutError,
    CheckFailure,
    ProfileEnableRejectedError,
    RadioEnableTimeoutError,
    RunCancelled,
    UnexpectedFaultError,
    UserDeclinedError,
)
from wifichecker.core.model import (
    UNSAVED_PROFILE_ID,
    Failure,
    Outcome,
    ReconnectPolicy,
    RunState,
    Success,
    TargetProfile,
)
from wifichecker.core.provisioner import ensure_profile
from wifichecker.core.validity import is_valid
from wifichecker.devices.base import WifiDevice

LOGGER = logging.getLogger(__name__)

ConsentCallback = Callable[[str | None, str], bool]


class ReconnectionOrchestrator:
    def __init__(
        self,
        target: TargetProfile,
        device: WifiDevice,
        *,
        consent: ConsentCallback,
        policy: ReconnectPolicy | None = None,
        token: CancellationToken | None = None,
    ) -> None:
        self.target = target
        self.device = device
        self.policy = policy or ReconnectPolicy()
        self.token = token or CancellationToken()
        self._consent = consent
        self._state = RunState.IDLE
        self._profile_id = UNSAVED_PROFILE_ID
        self._handlers: dict[RunState, Callable[[], RunState]] = {
            RunState.IDLE: self._start,
            RunState.CHECKING_VALIDITY: self._check_validity,
            RunState.REQUESTING_CONSENT: self._request_consent,
            RunState.ENABLING_RADIO: self._enable_radio,
            RunState.RESOLVING_PROFILE: self._resolve_profile,
            RunState.ENABLING_NETWORK: self._enable_network,
            RunState.AWAITING_ASSOCIATION: self._await_association,
        }

    @property
    def state(self) -> RunState:
        return self._state

    def run(self) -> Outcome:
        """Drive the machine to a terminal state and return its outcome.

        Raises ``RunCancelled`` if the token is cancelled before completion.
        """
        if self._state is not RunState.IDLE:
            raise RuntimeError("ReconnectionOrchestrator instances are single-use")
        try:
            while not self._state.is_terminal:
                self.token.raise_if_cancelled()
                self._transition(self._handlers[self._state]())
        except RunCancelled:
            LOGGER.debug("Run for %r cancelled in state %s", self.target.name, self._state.value)
            raise
        except CheckFailure as exc:
            return self._fail(exc)
        except Exception as exc:
            LOGGER.exception("Unexpected fault while checking WiFi for %r", self.target.name)
            return self._fail(UnexpectedFaultError.from_exception(exc))
        return Success()

    def _transition(self, next_state: RunState) -> None:
        LOGGER.debug("%s -> %s", self._state.value, next_state.value)
        self._state = next_state

    def _fail(self, exc: CheckFailure) -> Failure:
        self._transition(RunState.FAILED)
        LOGGER.info("WiFi check for %r failed: %s", self.target.name, exc.reason)
        return Failure(reason=exc.reason, kind=exc.kind)

    def _valid(self) -> bool:
        return is_valid(self.target, self.device.get_connection_snapshot())

    def _start(self) -> RunState:
        if not self.target.constrained:
            return RunState.SUCCEEDED
        return RunState.CHECKING_VALIDITY

    def _check_validity(self) -> RunState:
        if self._valid():
            return RunState.SUCCEEDED
        return RunState.REQUESTING_CONSENT

    def _request_consent(self) -> RunState:
        current = self.device.get_connection_snapshot().network_name
        if not self._consent(current, self.target.name):
            raise UserDeclinedError()
        return RunState.ENABLING_RADIO

    def _enable_radio(self) -> RunState:
        LOGGER.debug("Wait for networking")
        self.device.set_radio_enabled(True)
        enabled = poll(
            self.policy.radio_enable,
            self.device.is_radio_enabled,
            self.token,
            label="WiFi enable",
        )
        if not enabled:
            raise RadioEnableTimeoutError()
        return RunState.RESOLVING_PROFILE

    def _resolve_profile(self) -> RunState:
        self._profile_id = ensure_profile(
            self.target,
            self.device,
            policy=self.policy.scan_results,
            token=self.token,
        )
        return RunState.ENABLING_NETWORK

    def _enable_network(self) -> RunState:
        accepted = self.device.enable_profile(self._profile_id, exclusive=True)
        LOGGER.debug("enable_profile(%d) returned %s", self._profile_id, accepted)
        if not accepted:
            raise ProfileEnableRejectedError()
        return RunState.AWAITING_ASSOCIATION

    def _await_association(self) -> RunState:
        self.device.reconnect()
        if not poll(self.policy.association, self._valid, self.token, label="association"):
            raise AssociationTimeoutError()
        return RunState.SUCCEEDED
