"""Lifecycle wrapper owning at most one in-flight reconnection run."""

from __future__ import annotations

import itertools
import logging
import threading
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from typing import Callable

from wifichecker.core.cancellation import CancellationToken
from wifichecker.core.errors import RunCancelled, UnexpectedFaultError
from wifichecker.core.model import Failure, Outcome, ReconnectPolicy, Success, TargetProfile
from wifichecker.core.orchestrator import ConsentCallback, ReconnectionOrchestrator
from wifichecker.devices.base import WifiDevice

LOGGER = logging.getLogger(__name__)

_RUN_IDS = itertools.count(1)


@dataclass(frozen=True)
class CheckerCallbacks:
    on_success: Callable[[], None]
    on_failure: Callable[[str], None]
    on_reconnection_consent: ConsentCallback


@dataclass
class _Run:
    token: CancellationToken
    thread: threading.Thread | None = None


class CheckerSession:
    """Run reconnection checks on a background worker, one at a time.

    Callbacks are invoked on the worker thread, or submitted to
    ``callback_executor`` when one is given, and never under the session
    lock. A run cancelled before its outcome is handed off delivers nothing.
    """

    def __init__(
        self,
        callbacks: CheckerCallbacks,
        *,
        policy: ReconnectPolicy | None = None,
        callback_executor: Executor | None = None,
    ) -> None:
        self._callbacks = callbacks
        self._policy = policy or ReconnectPolicy()
        self._executor = callback_executor
        self._lock = threading.RLock()
        self._current: _Run | None = None
        self._worker: threading.Thread | None = None

    @property
    def running(self) -> bool:
        with self._lock:
            run = self._current
        return run is not None and run.thread is not None and run.thread.is_alive()

    def start(self, target: TargetProfile, device: WifiDevice) -> None:
        """Cancel any in-flight run and start a new one. Returns immediately."""
        with self._lock:
            self._cancel_locked()
            run = _Run(token=CancellationToken())
            thread = threading.Thread(
                target=self._work,
                args=(run, target, device),
                name=f"wifi-checker-{next(_RUN_IDS)}",
                daemon=True,
            )
            run.thread = thread
            self._current = run
            self._worker = thread
            thread.start()

    def stop(self) -> None:
        """Cancel the in-flight run without waiting for its worker to exit."""
        with self._lock:
            self._cancel_locked()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the latest worker, including its callbacks; return True once it has exited."""
        with self._lock:
            worker = self._worker
        if worker is None:
            return True
        worker.join(timeout)
        return not worker.is_alive()

    def _cancel_locked(self) -> None:
        if self._current is not None:
            self._current.token.cancel()
            self._current = None

    def _work(self, run: _Run, target: TargetProfile, device: WifiDevice) -> None:
        try:
            orchestrator = ReconnectionOrchestrator(
                target,
                device,
                consent=self._consent_for(run),
                policy=self._policy,
                token=run.token,
            )
            outcome = orchestrator.run()
        except RunCancelled:
            return
        except Exception as exc:
            LOGGER.exception("WiFi checker worker failed")
            fault = UnexpectedFaultError.from_exception(exc)
            outcome = Failure(reason=fault.reason, kind=fault.kind)
        self._deliver(run, outcome)

    def _consent_for(self, run: _Run) -> ConsentCallback:
        def consent(current: str | None, target: str) -> bool:
            run.token.raise_if_cancelled()
            callback = self._callbacks.on_reconnection_consent
            if self._executor is None:
                return bool(callback(current, target))
            return bool(self._executor.submit(callback, current, target).result())

        return consent

    def _deliver(self, run: _Run, outcome: Outcome) -> None:
        with self._lock:
            if run.token.cancelled:
                return
            if self._current is run:
                self._current = None
        if isinstance(outcome, Success):
            self._invoke(self._callbacks.on_success)
        else:
            self._invoke(self._callbacks.on_failure, outcome.reason)

    def _invoke(self, callback: Callable[..., None], *args: object) -> None:
        if self._executor is not None:
            self._executor.submit(callback, *args).add_done_callback(_log_callback_error)
            return
        try:
            callback(*args)
        except Exception:
            LOGGER.exception("WiFi checker callback %r raised", callback)


def _log_callback_error(future: Future[None]) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        LOGGER.error("WiFi checker callback raised", exc_info=exc)
