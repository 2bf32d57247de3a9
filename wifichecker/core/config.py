"""Configuration loading and validation for wifichecker."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, replace
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from wifichecker.core.errors import ConfigError, ConfigValidationError
from wifichecker.core.model import ReconnectPolicy, RetryPolicy, TargetProfile

LOGGER = logging.getLogger(__name__)

_POLICY_PHASES = ("radio_enable", "scan_results", "association")


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


# Keep yes/no/on/off as strings so secrets are never coerced to booleans.
UniqueKeyLoader.yaml_implicit_resolvers = {
    first_char: [(tag, regexp) for tag, regexp in mappings if tag != "tag:yaml.org,2002:bool"]
    for first_char, mappings in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ConfigValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class CheckerConfig:
    target: TargetProfile | None = None
    policy: ReconnectPolicy = field(default_factory=ReconnectPolicy)
    interface: str | None = None
    source: Path | None = None


def default_config_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "wifichecker" / "config.yaml"


def _load_schema_validator() -> Any:
    schema_text = resources.files("wifichecker.schemas").joinpath("config.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Could not read config file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigValidationError(f"Config file {path} must contain a mapping at root")
    return loaded


def _build_policy(doc: dict[str, Any]) -> ReconnectPolicy:
    policy = ReconnectPolicy()
    for phase in _POLICY_PHASES:
        phase_doc = doc.get(phase)
        if not phase_doc:
            continue
        default: RetryPolicy = getattr(policy, phase)
        policy = replace(
            policy,
            **{
                phase: RetryPolicy(
                    interval_s=float(phase_doc.get("interval_s", default.interval_s)),
                    attempts=int(phase_doc.get("attempts", default.attempts)),
                )
            },
        )
    return policy


def parse_config(doc: dict[str, Any], source: Path | None = None) -> CheckerConfig:
    validator = _load_schema_validator()
    network = doc.get("network")
    if isinstance(network, dict) and isinstance(network.get("secret"), (int, float)):
        raise ConfigValidationError(
            f"network.secret in {source or 'config'} must be a string; quote numeric passphrases, e.g. secret: \"12345678\""
        )
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ConfigValidationError(f"Schema validation failed for {source or 'config'}{where}: {exc.message}") from exc

    target = None
    if network:
        name = network["name"].strip()
        if not name:
            raise ConfigValidationError("network.name must not be blank")
        target = TargetProfile(name=name, secret=network.get("secret"))

    return CheckerConfig(
        target=target,
        policy=_build_policy(doc.get("policy", {})),
        interface=doc.get("interface"),
        source=source,
    )


def load_config(path: Path | str | None = None) -> CheckerConfig:
    """Load the config at ``path``, or the default location if it exists.

    An explicit path must exist; a missing default file yields defaults.
    """
    if path is not None:
        config_path = Path(path)
    else:
        config_path = default_config_path()
        if not config_path.is_file():
            LOGGER.debug("No config file at %s; using defaults", config_path)
            return CheckerConfig()
    return parse_config(_read_yaml(config_path), source=config_path)
