"""Configuration helpers for the peridio CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_PATH = Path.home() / ".peridio" / "config.toml"
DEFAULT_BASE_URL = "https://api.cremini.peridio.com"
BASE_URL_ENV_VAR = "PERIDIO_BASE_URL"
ORGANIZATION_NAME_ENV_VAR = "PERIDIO_ORGANIZATION_NAME"
API_KEY_ENV_VAR = "PERIDIO_API_KEY"
CA_PATH_ENV_VAR = "PERIDIO_CA_PATH"
PROFILE_ENV_VAR = "PERIDIO_PROFILE"

_COLOR_CHOICES = {"auto", "always", "never"}


@dataclass(frozen=True)
class CLIConfig:
    base_url: str = DEFAULT_BASE_URL
    organization_name: str | None = None
    api_key: str | None = None
    ca_path: str | None = None
    color: str = "auto"
    timeout: float = 10.0
    retries: int = 2
    profile: str | None = None


@dataclass(frozen=True)
class GlobalOptions:
    """Effective settings for one invocation after flags are applied."""

    base_url: str
    organization_name: str | None
    api_key: str | None
    ca_path: str | None
    color: str
    timeout: float
    retries: int


class ConfigError(ValueError):
    """Raised when CLI config is invalid."""


def _load_toml(path: Path) -> dict[str, Any]:
    raw = path.read_text(encoding="utf-8")

    try:  # Python 3.11+
        import tomllib  # type: ignore[attr-defined]
        try:
            return tomllib.loads(raw)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML in {path}: {exc}") from exc
    except ModuleNotFoundError:
        try:
            import tomli
        except ModuleNotFoundError as exc:
            raise ConfigError("toml parser unavailable; install tomli for Python < 3.11") from exc
        try:
            return tomli.loads(raw)
        except tomli.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML in {path}: {exc}") from exc


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value).strip() or None


def _env(name: str) -> str | None:
    value = os.getenv(name)
    return value.strip() or None if value else None


def _select_source(parsed: dict[str, Any], profile: str | None) -> dict[str, Any]:
    section = parsed.get("cli")
    if isinstance(section, dict):
        source = dict(section)
    elif section is None:
        source = {key: value for key, value in parsed.items() if key != "profiles"}
    else:
        raise ConfigError("[cli] must be a table")

    if profile is None:
        return source

    profiles = parsed.get("profiles", {})
    if not isinstance(profiles, dict):
        raise ConfigError("[profiles] must be a table")
    overrides = profiles.get(profile)
    if not isinstance(overrides, dict):
        raise ConfigError(f"unknown profile: {profile}")
    source.update(overrides)
    return source


def load_cli_config(path: str | Path | None = None, *, profile: str | None = None) -> CLIConfig:
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    profile = profile or _env(PROFILE_ENV_VAR)
    if config_path.exists():
        parsed = _load_toml(config_path)
    elif profile is not None:
        raise ConfigError(f"unknown profile: {profile}")
    else:
        parsed = {}

    source = _select_source(parsed, profile)

    configured_base_url = str(source.get("base_url", DEFAULT_BASE_URL)).strip()
    base_url = _env(BASE_URL_ENV_VAR) or configured_base_url
    if not base_url:
        raise ConfigError("base_url must not be empty")

    organization_name = _env(ORGANIZATION_NAME_ENV_VAR) or _optional_str(
        source.get("organization_name")
    )
    api_key = _env(API_KEY_ENV_VAR) or _optional_str(source.get("api_key"))
    ca_path = _env(CA_PATH_ENV_VAR) or _optional_str(source.get("ca_path"))

    color = str(source.get("color", "auto")).strip().lower()
    if color not in _COLOR_CHOICES:
        raise ConfigError("color must be one of: auto, always, never")

    try:
        timeout = float(source.get("timeout", 10.0))
    except (TypeError, ValueError) as exc:
        raise ConfigError("timeout must be a number") from exc
    if timeout <= 0:
        raise ConfigError("timeout must be > 0")

    retries = source.get("retries", 2)
    if isinstance(retries, bool) or not isinstance(retries, int) or retries < 0:
        raise ConfigError("retries must be an integer >= 0")

    return CLIConfig(
        base_url=base_url,
        organization_name=organization_name,
        api_key=api_key,
        ca_path=ca_path,
        color=color,
        timeout=timeout,
        retries=retries,
        profile=profile,
    )


def resolve_global_options(
    config: CLIConfig,
    *,
    base_url: str | None = None,
    organization_name: str | None = None,
    api_key: str | None = None,
    ca_path: str | None = None,
    color: str | None = None,
) -> GlobalOptions:
    return GlobalOptions(
        base_url=base_url or config.base_url,
        organization_name=organization_name or config.organization_name,
        api_key=api_key or config.api_key,
        ca_path=ca_path or config.ca_path,
        color=color or config.color,
        timeout=config.timeout,
        retries=config.retries,
    )
