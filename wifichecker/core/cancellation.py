"""Cooperative cancellation and bounded polling for reconnection runs."""

from __future__ import annotations

import logging
import threading
from typing import Callable, TypeVar

from wifichecker.core.errors import RunCancelled
from wifichecker.core.model import RetryPolicy

T = TypeVar("T")
LOGGER = logging.getLogger(__name__)


class CancellationToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RunCancelled()

    def sleep(self, seconds: float) -> None:
        """Wait ``seconds``, raising ``RunCancelled`` as soon as a cancel arrives."""
        if seconds > 0:
            if self._event.wait(seconds):
                raise RunCancelled()
        else:
            self.raise_if_cancelled()


def poll(
    policy: RetryPolicy,
    check: Callable[[], T],
    token: CancellationToken,
    *,
    label: str = "condition",
) -> T | None:
    """Evaluate ``check`` until it returns a truthy value or the budget runs out.

    Sleeps ``policy.interval_s`` after each of ``policy.attempts`` failed
    checks and then checks once more, so the full ``policy.budget_s`` is
    waited before giving up. Returns the first truthy result, or ``None``.
    """
    for attempt in range(1, policy.attempts + 1):
        token.raise_if_cancelled()
        result = check()
        if result:
            return result
        LOGGER.debug("Waiting for %s (%d/%d)", label, attempt, policy.attempts)
        token.sleep(policy.interval_s)
    token.raise_if_cancelled()
    return check() or None
