"""Security classification of advertised network capabilities."""

from __future__ import annotations

from wifichecker.core.model import SecurityMode

# Strongest first.
_MARKERS = (SecurityMode.EAP, SecurityMode.PSK, SecurityMode.WEP)


def classify(capabilities: str | None) -> SecurityMode:
    if not capabilities:
        return SecurityMode.OPEN
    for mode in _MARKERS:
        if mode.value in capabilities:
            return mode
    return SecurityMode.OPEN
