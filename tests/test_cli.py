from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from wifichecker import cli
from wifichecker.core.errors import DeviceUnavailableError
from wifichecker.core.model import ScanEntry, StoredProfile

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    return tmp_path


@pytest.fixture
def patched_device(monkeypatch: pytest.MonkeyPatch, device):
    interfaces: list[str | None] = []

    def factory(interface=None, **kwargs):
        interfaces.append(interface)
        return device

    monkeypatch.setattr(cli, "NMCLIDevice", factory)
    device.interfaces = interfaces
    return device


def test_check_when_already_connected(patched_device) -> None:
    patched_device.connect_to("HomeNet")

    result = runner.invoke(cli.app, ["check", "--network", "HomeNet"])

    assert result.exit_code == 0
    assert "Connected to HomeNet" in result.stdout
    assert patched_device.count("set_radio_enabled") == 0


def test_check_provisions_with_yes(patched_device) -> None:
    patched_device.connect_to("Cafe")
    patched_device.scan_results = [ScanEntry(name="HomeNet", capabilities="[WPA2-PSK-CCMP]")]

    result = runner.invoke(cli.app, ["check", "-n", "HomeNet", "--secret", "hunter22", "--yes"])

    assert result.exit_code == 0
    assert "Connected to HomeNet" in result.stdout
    assert patched_device.added[0].auth.pre_shared_key == "hunter22"


def test_check_declined_prompt_fails_cleanly(patched_device) -> None:
    patched_device.connect_to("Cafe")

    result = runner.invoke(cli.app, ["check", "-n", "HomeNet"], input="n\n")

    assert result.exit_code == 1
    assert "Switch to 'HomeNet'?" in result.stdout
    assert "Error: Wrong WiFi network" in result.stderr
    assert "Traceback" not in result.stderr


def test_check_without_network_succeeds(patched_device) -> None:
    result = runner.invoke(cli.app, ["check"])

    assert result.exit_code == 0
    assert "No network required" in result.stdout
    assert patched_device.calls == []


def test_check_uses_config_file(patched_device, isolated_config: Path) -> None:
    config = isolated_config / "config.yaml"
    config.write_text(
        "network:\n  name: HomeNet\ninterface: wlan7\n",
        encoding="utf-8",
    )
    patched_device.profiles = [StoredProfile(id=3, name="HomeNet", priority=0)]

    result = runner.invoke(cli.app, ["check", "--config", str(config), "--yes"])

    assert result.exit_code == 0
    assert patched_device.interfaces == ["wlan7"]
    assert patched_device.enabled == [(3, True)]


def test_check_bad_config_is_clean_error(patched_device, isolated_config: Path) -> None:
    result = runner.invoke(cli.app, ["check", "--config", str(isolated_config / "missing.yaml")])

    assert result.exit_code == 1
    assert "Error: Could not read config file" in result.stderr


def test_status_reports_validity(patched_device) -> None:
    patched_device.connect_to("Cafe")

    result = runner.invoke(cli.app, ["status", "--network", "HomeNet"])

    assert result.exit_code == 0
    assert "network: Cafe" in result.stdout
    assert "HomeNet: invalid" in result.stdout


def test_scan_lists_security_modes(patched_device) -> None:
    patched_device.scan_results = [
        ScanEntry(name="HomeNet", capabilities="[WPA2-PSK-CCMP]"),
        ScanEntry(name="Lobby", capabilities=""),
    ]

    result = runner.invoke(cli.app, ["scan"])

    assert result.exit_code == 0
    assert "HomeNet: PSK" in result.stdout
    assert "Lobby: OPEN" in result.stdout


def test_scan_warns_when_trigger_rejected(patched_device) -> None:
    patched_device.scan_accepted = False

    result = runner.invoke(cli.app, ["scan"])

    assert result.exit_code == 0
    assert "Warning: scan request rejected" in result.stderr
    assert "No networks found" in result.stdout


def test_profiles_sorted_by_priority(patched_device) -> None:
    patched_device.profiles = [
        StoredProfile(id=0, name="Cafe", priority=1),
        StoredProfile(id=1, name="HomeNet", priority=4, enabled=False),
    ]

    result = runner.invoke(cli.app, ["profiles"])

    assert result.exit_code == 0
    lines = result.stdout.strip().splitlines()
    assert lines == ["HomeNet priority=4 disabled", "Cafe priority=1 enabled"]


def test_device_unavailable_is_clean_error(monkeypatch: pytest.MonkeyPatch) -> None:
    class MissingDevice:
        def __init__(self, interface=None, **kwargs) -> None:
            pass

        def list_profiles(self):
            raise DeviceUnavailableError("nmcli command unavailable; NetworkManager is required")

    monkeypatch.setattr(cli, "NMCLIDevice", MissingDevice)

    result = runner.invoke(cli.app, ["profiles"])

    assert result.exit_code == 1
    assert "Error: nmcli command unavailable" in result.stderr
    assert "Traceback" not in result.stdout


def test_secret_without_network_is_rejected(patched_device) -> None:
    result = runner.invoke(cli.app, ["check", "--secret", "hunter22"])

    assert result.exit_code == 1
    assert "Error: --secret requires a network" in result.stderr
    assert patched_device.calls == []
