from __future__ import annotations

import pytest

from wifichecker.core.model import SecurityMode
from wifichecker.core.security import classify


@pytest.mark.parametrize(
    ("capabilities", "expected"),
    [
        ("[WPA2-PSK-CCMP][ESS]", SecurityMode.PSK),
        ("[WEP][ESS]", SecurityMode.WEP),
        ("[WPA2-EAP-CCMP][ESS]", SecurityMode.EAP),
        ("[ESS]", SecurityMode.OPEN),
        ("", SecurityMode.OPEN),
        (None, SecurityMode.OPEN),
    ],
)
def test_classify_markers(capabilities, expected) -> None:
    assert classify(capabilities) is expected


def test_eap_wins_over_psk_regardless_of_position() -> None:
    assert classify("[WPA-PSK-TKIP][WPA2-EAP-CCMP]") is SecurityMode.EAP
    assert classify("[WPA2-EAP-CCMP][WPA-PSK-TKIP]") is SecurityMode.EAP


def test_psk_wins_over_wep() -> None:
    assert classify("[WEP][WPA-PSK]") is SecurityMode.PSK


def test_markers_are_case_sensitive() -> None:
    assert classify("[wpa2-psk]") is SecurityMode.OPEN
