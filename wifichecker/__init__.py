"""Wi-Fi association checker and reconnection orchestrator."""

__version__ = "0.1.0"
