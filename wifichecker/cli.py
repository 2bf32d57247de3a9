"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

import typer

from wifichecker.api import WifiChecker
from wifichecker.core.config import CheckerConfig, load_config
from wifichecker.core.errors import ConfigError, WifiCheckerError
from wifichecker.core.model import TargetProfile
from wifichecker.core.security import classify
from wifichecker.core.validity import is_valid
from wifichecker.devices.nmcli import NMCLIDevice

app = typer.Typer(help="Check and repair Wi-Fi association with a required network")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _target(cfg: CheckerConfig, network: str | None, secret: str | None) -> TargetProfile:
    if network:
        return TargetProfile(name=network, secret=secret)
    if cfg.target is not None:
        return TargetProfile(name=cfg.target.name, secret=secret or cfg.target.secret)
    if secret:
        raise ConfigError("--secret requires a network; pass --network or set network.name in the config")
    return TargetProfile(name=None)


@app.command("check")
def check(
    network: str | None = typer.Option(None, "--network", "-n", help="Required network name (SSID)"),
    secret: str | None = typer.Option(None, "--secret", help="Passphrase used when creating a new profile"),
    config: Path | None = typer.Option(None, "--config", help="Path to config YAML"),
    interface: str | None = typer.Option(None, "--interface", help="Wi-Fi interface"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Switch networks without prompting"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Ensure the device is associated with the required network."""
    _configure_logging(verbose)
    try:
        cfg = load_config(config)
        target = _target(cfg, network, secret)
        device = NMCLIDevice(interface or cfg.interface)
    except WifiCheckerError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    done = threading.Event()
    failures: list[str] = []

    def on_success() -> None:
        done.set()

    def on_failure(reason: str) -> None:
        failures.append(reason)
        done.set()

    def on_consent(current: str | None, wanted: str) -> bool:
        if yes:
            return True
        return typer.confirm(f"Connected to '{current or '<none>'}'. Switch to '{wanted}'?", default=False)

    checker = WifiChecker(on_success, on_failure, on_consent, policy=cfg.policy)
    checker.begin_checking(target, device)
    try:
        done.wait()
    except KeyboardInterrupt:
        checker.stop_checking()
        typer.echo("Cancelled", err=True)
        raise typer.Exit(code=130) from None

    if failures:
        typer.echo(f"Error: {failures[0]}", err=True)
        raise typer.Exit(code=1)
    if target.name:
        typer.echo(f"Connected to {target.name}")
    else:
        typer.echo("No network required")


@app.command("status")
def status(
    network: str | None = typer.Option(None, "--network", "-n", help="Network to validate against"),
    config: Path | None = typer.Option(None, "--config", help="Path to config YAML"),
    interface: str | None = typer.Option(None, "--interface", help="Wi-Fi interface"),
) -> None:
    """Show the current association and whether it satisfies the target."""
    try:
        cfg = load_config(config)
        target = _target(cfg, network, None)
        snapshot = NMCLIDevice(interface or cfg.interface).get_connection_snapshot()
    except WifiCheckerError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    typer.echo(f"radio: {'on' if snapshot.radio_enabled else 'off'}")
    typer.echo(f"network: {snapshot.network_name or '<none>'}")
    typer.echo(f"ip: {'yes' if snapshot.ip_assigned else 'no'}")
    typer.echo(f"authenticated: {'yes' if snapshot.auth_completed else 'no'}")
    if target.name:
        verdict = "valid" if is_valid(target, snapshot) else "invalid"
        typer.echo(f"{target.name}: {verdict}")


@app.command("scan")
def scan(
    interface: str | None = typer.Option(None, "--interface", help="Wi-Fi interface"),
) -> None:
    """Trigger a scan and list visible networks with their security mode."""
    try:
        device = NMCLIDevice(interface)
        if not device.start_scan():
            typer.echo("Warning: scan request rejected; showing cached results", err=True)
        entries = device.get_scan_results()
    except WifiCheckerError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    if not entries:
        typer.echo("No networks found")
        return
    for entry in entries:
        typer.echo(f"{entry.name}: {classify(entry.capabilities).value}")


@app.command("profiles")
def profiles(
    interface: str | None = typer.Option(None, "--interface", help="Wi-Fi interface"),
) -> None:
    """List stored Wi-Fi profiles by priority."""
    try:
        stored = NMCLIDevice(interface).list_profiles()
    except WifiCheckerError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    if not stored:
        typer.echo("No stored Wi-Fi profiles")
        return
    for profile in sorted(stored, key=lambda p: p.priority, reverse=True):
        state = "enabled" if profile.enabled else "disabled"
        typer.echo(f"{profile.name} priority={profile.priority} {state}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
