"""NetworkManager device implementation using the nmcli command line tool."""

from __future__ import annotations

import logging
import re
import subprocess
import threading
from collections.abc import Sequence

from wifichecker.core.errors import DeviceCommandError, DeviceUnavailableError
from wifichecker.core.model import (
    UNSAVED_PROFILE_ID,
    ConnectionSnapshot,
    OpenAuth,
    PskAuth,
    ScanEntry,
    StoredProfile,
    WepAuth,
)

LOGGER = logging.getLogger(__name__)

_WIRELESS_TYPE = "802-11-wireless"
_CONNECTED_STATE = "100"
_UUID_RE = re.compile(r"\(([0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})\)", re.IGNORECASE)
_SECRET_KEYS = {"wifi-sec.psk", "wifi-sec.wep-key0"}


def split_terse(line: str, maxsplit: int = -1) -> list[str]:
    """Split one line of ``nmcli -t`` output on unescaped colons."""
    fields: list[str] = []
    current: list[str] = []
    escaped = False
    for char in line:
        if escaped:
            current.append(char)
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == ":" and (maxsplit < 0 or len(fields) < maxsplit):
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
    fields.append("".join(current))
    return fields


def scan_capabilities(security: str, wpa_flags: str = "", rsn_flags: str = "") -> str:
    """Render nmcli security columns as a bracketed capability string."""
    tokens: list[str] = []
    for column in (security, wpa_flags, rsn_flags):
        for token in column.split():
            if token in ("--", "(none)"):
                continue
            token = "EAP" if token.upper() == "802.1X" else token.upper()
            if token not in tokens:
                tokens.append(token)
    return "".join(f"[{token}]" for token in tokens)


def _redact(args: Sequence[str]) -> list[str]:
    redacted = list(args)
    for index, arg in enumerate(redacted[:-1]):
        if arg in _SECRET_KEYS:
            redacted[index + 1] = "***"
    return redacted


class NMCLIDevice:
    """Drive the Wi-Fi radio through NetworkManager.

    Stored profiles are NetworkManager connections; their integer ids are
    handles issued by this instance and mapped to connection UUIDs.
    """

    def __init__(self, interface: str | None = None, *, timeout_s: float = 15.0) -> None:
        self._preferred_interface = interface
        self._detected_interface: str | None = None
        self._timeout_s = timeout_s
        self._lock = threading.Lock()
        self._uuids: dict[int, str] = {}
        self._handles: dict[str, int] = {}

    # ------------------------------- helpers -------------------------------
    def _run(self, args: Sequence[str]) -> str:
        cmd = ["nmcli", *args]
        shown = " ".join(_redact(cmd))
        try:
            completed = subprocess.run(
                cmd,
                check=True,
                capture_output=True,
                text=True,
                timeout=self._timeout_s,
            )
        except FileNotFoundError as exc:
            raise DeviceUnavailableError("nmcli command unavailable; NetworkManager is required") from exc
        except subprocess.TimeoutExpired as exc:
            raise DeviceCommandError(f"{shown} timed out after {self._timeout_s:g}s") from exc
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip() or (exc.stdout or "").strip() or f"exit {exc.returncode}"
            raise DeviceCommandError(f"{shown} -> {detail}") from exc
        return completed.stdout

    def _succeeds(self, args: Sequence[str]) -> bool:
        try:
            self._run(args)
        except DeviceCommandError as exc:
            LOGGER.warning("%s", exc)
            return False
        return True

    def _interface(self) -> str:
        if self._preferred_interface:
            return self._preferred_interface
        if self._detected_interface:
            return self._detected_interface
        output = self._run(["-t", "-f", "DEVICE,TYPE", "device"])
        for line in output.splitlines():
            fields = split_terse(line)
            if len(fields) >= 2 and fields[1] == "wifi" and fields[0]:
                self._detected_interface = fields[0]
                return fields[0]
        raise DeviceCommandError("No Wi-Fi interface detected")

    def _handle(self, uuid: str) -> int:
        with self._lock:
            handle = self._handles.get(uuid)
            if handle is None:
                handle = len(self._handles)
                self._handles[uuid] = handle
                self._uuids[handle] = uuid
            return handle

    def _uuid(self, profile_id: int) -> str | None:
        with self._lock:
            return self._uuids.get(profile_id)

    def _fields(self, args: Sequence[str]) -> dict[str, str]:
        values: dict[str, str] = {}
        for line in self._run(args).splitlines():
            parts = split_terse(line, maxsplit=1)
            if len(parts) == 2:
                values.setdefault(parts[0], parts[1])
        return values

    def _active_ssid(self, interface: str) -> str | None:
        output = self._run(
            ["-t", "-f", "ACTIVE,SSID", "device", "wifi", "list", "ifname", interface, "--rescan", "no"]
        )
        for line in output.splitlines():
            fields = split_terse(line)
            if len(fields) >= 2 and fields[0] == "yes" and fields[1]:
                return fields[1]
        return None

    # ------------------------------ WifiDevice -----------------------------
    def get_connection_snapshot(self) -> ConnectionSnapshot:
        radio_enabled = self.is_radio_enabled()
        if not radio_enabled:
            return ConnectionSnapshot(radio_enabled=False)
        interface = self._interface()
        details = self._fields(["-t", "-f", "GENERAL.STATE,IP4.ADDRESS", "device", "show", interface])
        state = details.get("GENERAL.STATE", "")
        address = next((v for k, v in details.items() if k.startswith("IP4.ADDRESS") and v), "")
        return ConnectionSnapshot(
            network_name=self._active_ssid(interface),
            ip_assigned=bool(address),
            auth_completed=state.startswith(_CONNECTED_STATE),
            radio_enabled=True,
        )

    def is_radio_enabled(self) -> bool:
        return self._run(["-t", "radio", "wifi"]).strip() == "enabled"

    def set_radio_enabled(self, enabled: bool) -> None:
        self._run(["radio", "wifi", "on" if enabled else "off"])

    def list_profiles(self) -> list[StoredProfile]:
        profiles: list[StoredProfile] = []
        for line in self._run(["-t", "-f", "NAME,UUID,TYPE", "connection", "show"]).splitlines():
            fields = split_terse(line)
            if len(fields) < 3 or fields[2] != _WIRELESS_TYPE:
                continue
            name, uuid = fields[0], fields[1]
            details = self._fields(
                [
                    "-t",
                    "-f",
                    "802-11-wireless.ssid,connection.autoconnect-priority,connection.autoconnect",
                    "connection",
                    "show",
                    uuid,
                ]
            )
            try:
                priority = int(details.get("connection.autoconnect-priority", "0"))
            except ValueError:
                priority = 0
            profiles.append(
                StoredProfile(
                    id=self._handle(uuid),
                    name=details.get("802-11-wireless.ssid") or name,
                    priority=priority,
                    enabled=details.get("connection.autoconnect", "yes") == "yes",
                )
            )
        return profiles

    def update_profile(self, profile: StoredProfile) -> None:
        uuid = self._uuid(profile.id)
        if uuid is None:
            raise DeviceCommandError(f"Unknown profile id {profile.id}")
        self._run(
            [
                "connection",
                "modify",
                uuid,
                "connection.autoconnect-priority",
                str(profile.priority),
                "connection.autoconnect",
                "yes" if profile.enabled else "no",
            ]
        )

    def add_profile(self, profile: StoredProfile) -> int:
        args = ["connection", "add", "type", "wifi", "con-name", profile.name, "ssid", profile.name]
        args += ["ifname", self._interface()]
        args += ["connection.autoconnect-priority", str(profile.priority)]
        auth = profile.auth or OpenAuth()
        if isinstance(auth, WepAuth):
            args += [
                "wifi-sec.key-mgmt",
                "none",
                "wifi-sec.wep-key0",
                auth.key,
                "wifi-sec.wep-tx-keyidx",
                str(auth.tx_key_index),
            ]
        elif isinstance(auth, PskAuth):
            args += [
                "wifi-sec.key-mgmt",
                "wpa-psk",
                "wifi-sec.psk",
                auth.pre_shared_key,
                "wifi-sec.proto",
                ",".join(p.lower() for p in auth.protocols),
                "wifi-sec.group",
                ",".join(c.lower() for c in auth.group_ciphers),
                "wifi-sec.pairwise",
                ",".join(c.lower() for c in auth.pairwise_ciphers),
                "802-11-wireless.hidden",
                "yes" if auth.hidden else "no",
            ]
        try:
            output = self._run(args)
        except DeviceCommandError as exc:
            LOGGER.warning("Adding profile %r rejected: %s", profile.name, exc)
            return UNSAVED_PROFILE_ID
        match = _UUID_RE.search(output)
        if not match:
            LOGGER.warning("Could not read connection UUID from nmcli output: %s", output.strip())
            return UNSAVED_PROFILE_ID
        return self._handle(match.group(1).lower())

    def enable_profile(self, profile_id: int, *, exclusive: bool) -> bool:
        uuid = self._uuid(profile_id)
        if uuid is None:
            LOGGER.warning("Cannot enable unknown profile id %d", profile_id)
            return False
        if not self._succeeds(["connection", "modify", uuid, "connection.autoconnect", "yes"]):
            return False
        args = ["--wait", "0", "connection", "up", uuid]
        if exclusive:
            # Binding to the interface replaces whatever connection is active there.
            args += ["ifname", self._interface()]
        return self._succeeds(args)

    def reconnect(self) -> None:
        self._succeeds(["--wait", "0", "device", "connect", self._interface()])

    def start_scan(self) -> bool:
        return self._succeeds(["device", "wifi", "rescan", "ifname", self._interface()])

    def get_scan_results(self) -> list[ScanEntry]:
        output = self._run(
            [
                "-t",
                "-f",
                "SSID,SECURITY,WPA-FLAGS,RSN-FLAGS",
                "device",
                "wifi",
                "list",
                "ifname",
                self._interface(),
                "--rescan",
                "no",
            ]
        )
        entries: list[ScanEntry] = []
        seen: set[str] = set()
        for line in output.splitlines():
            fields = split_terse(line)
            if len(fields) < 4 or not fields[0] or fields[0] in seen:
                continue
            seen.add(fields[0])
            entries.append(ScanEntry(name=fields[0], capabilities=scan_capabilities(*fields[1:4])))
        return entries
