from __future__ import annotations

import threading

from wifichecker.api import TargetProfile, WifiChecker, wifi_valid
from wifichecker.core.model import StoredProfile


def test_public_checker_reconnects_and_reports_success(device, fast_policy) -> None:
    device.connect_to("Cafe")
    device.profiles = [
        StoredProfile(id=1, name="Cafe", priority=3),
        StoredProfile(id=2, name="HomeNet", priority=1),
    ]
    done = threading.Event()
    events: list[str] = []
    asked: list[tuple[str | None, str]] = []

    def consent(current, target) -> bool:
        asked.append((current, target))
        return True

    checker = WifiChecker(
        on_success=lambda: (events.append("success"), done.set()),
        on_failure=lambda reason: (events.append(reason), done.set()),
        on_reconnection_consent=consent,
        policy=fast_policy,
    )

    checker.begin_checking(TargetProfile(name="HomeNet"), device)

    assert done.wait(5)
    assert checker.wait(5)
    assert events == ["success"]
    assert asked == [("Cafe", "HomeNet")]
    assert wifi_valid(TargetProfile(name="HomeNet"), device) is True


def test_public_checker_stop_before_outcome(device, fast_policy) -> None:
    gate = threading.Event()
    asked = threading.Event()
    events: list[str] = []

    def consent(current, target) -> bool:
        asked.set()
        gate.wait(5)
        return True

    checker = WifiChecker(
        on_success=lambda: events.append("success"),
        on_failure=events.append,
        on_reconnection_consent=consent,
        policy=fast_policy,
    )

    checker.begin_checking(TargetProfile(name="HomeNet"), device)
    assert asked.wait(5)
    assert checker.running is True
    checker.stop_checking()
    assert checker.running is False
    gate.set()

    assert checker.wait(5)
    assert events == []


def test_wifi_valid_without_constraint(device) -> None:
    assert wifi_valid(TargetProfile(name=None), device) is True
    assert device.calls == []
    assert wifi_valid(TargetProfile(name="HomeNet"), device) is False
