"""
Configuration management for GiveMeASong.

This module loads application settings and the static platform display table
from TOML files. Settings come from the packaged defaults.toml, an optional
user file layered on top, and finally the GIVEMEASONG_API_URL environment
variable, which is the only environment-derived setting.
"""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from givemeasong.core import ConfigError

logger = logging.getLogger(__name__)

# Path to the config directory
CONFIG_DIR = Path(__file__).parent

API_URL_ENV_VAR = "GIVEMEASONG_API_URL"

DEFAULT_API_BASE = "http://localhost:8000"
DEFAULT_APP_NAME = "GiveMeASong"
DEFAULT_FAVICON = "/favicon.ico"


@dataclass(frozen=True)
class Settings:
    """Loaded application settings."""

    api_base: str = DEFAULT_API_BASE
    app_name: str = DEFAULT_APP_NAME
    default_favicon: str = DEFAULT_FAVICON
    locale: str = "en"
    # None means "whatever the HTTP transport uses by default"
    timeout: float | None = None

    def __post_init__(self) -> None:
        # Endpoint paths are appended with a leading slash
        object.__setattr__(self, "api_base", self.api_base.rstrip("/"))


@dataclass(frozen=True)
class PlatformEntry:
    """One row of the platform display table."""

    label: str
    icon: str
    color: str


def _read_toml(path: Path) -> dict[str, Any]:
    logger.debug("Loading config from %s", path)
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e


def _merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge two parsed TOML documents, one table level deep."""
    merged = {k: dict(v) if isinstance(v, dict) else v for k, v in base.items()}
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key].update(value)
        else:
            merged[key] = value
    return merged


def load_settings(
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> Settings:
    """
    Load settings.

    Args:
        config_path: Optional user TOML file merged over the packaged defaults.
        env: Environment mapping. Defaults to os.environ.

    Returns:
        Loaded Settings instance.
    """
    if env is None:
        env = os.environ

    data = _read_toml(CONFIG_DIR / "defaults.toml")
    if config_path is not None:
        data = _merge(data, _read_toml(config_path))

    api = data.get("api", {})
    document = data.get("document", {})
    ui = data.get("ui", {})

    api_base = env.get(API_URL_ENV_VAR) or api.get("base_url") or DEFAULT_API_BASE

    timeout = api.get("timeout")
    if timeout is not None and not isinstance(timeout, (int, float)):
        raise ConfigError(f"api.timeout must be a number, got {timeout!r}")

    return Settings(
        api_base=str(api_base),
        app_name=str(document.get("app_name", DEFAULT_APP_NAME)),
        default_favicon=str(document.get("default_favicon", DEFAULT_FAVICON)),
        locale=str(ui.get("locale", "en")),
        timeout=float(timeout) if timeout is not None else None,
    )


def load_platform_table(config_path: Path | None = None) -> dict[str, PlatformEntry]:
    """
    Load the platform display table.

    Args:
        config_path: Path to platforms.toml. If None, uses default location.

    Returns:
        Mapping of platform key -> PlatformEntry, always including "default".

    Raises:
        ConfigError: If the table has no "default" entry or a row is incomplete.
    """
    if config_path is None:
        config_path = CONFIG_DIR / "platforms.toml"

    data = _read_toml(config_path)

    table: dict[str, PlatformEntry] = {}
    for key, row in data.items():
        if not isinstance(row, dict):
            continue
        try:
            table[key] = PlatformEntry(
                label=str(row["label"]),
                icon=str(row["icon"]),
                color=str(row["color"]),
            )
        except KeyError as e:
            raise ConfigError(f"Platform '{key}' is missing {e.args[0]!r}") from e

    if "default" not in table:
        raise ConfigError(f"No 'default' platform entry in {config_path}")

    return table


# Global singleton instance (lazy loaded)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings (lazy loaded singleton).

    Returns:
        The Settings instance.
    """
    global _settings

    if _settings is None:
        _settings = load_settings()

    return _settings


def reload_settings(config_path: Path | None = None) -> Settings:
    """
    Force reload of settings.

    Returns:
        The newly loaded Settings instance.
    """
    global _settings
    _settings = load_settings(config_path)
    return _settings
