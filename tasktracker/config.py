"""Settings loaded from `config/settings.toml`.

Every value lives in the TOML file; there are no environment or CLI
overrides. Missing sections or keys stop the application at startup.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import re
import tomllib
from typing import Any, Callable


PROJECT_ROOT = Path(__file__).resolve().parent.parent
CONFIG_PATH = PROJECT_ROOT / "config" / "settings.toml"
TEMPLATE_PATH = CONFIG_PATH.with_name("settings.toml.template")


class SettingsError(RuntimeError):
    """Raised when configuration cannot be loaded."""


def _load_config_file(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise SettingsError(
            f"No configuration at '{path}'. Create it from "
            f"'{TEMPLATE_PATH.relative_to(PROJECT_ROOT)}' before starting the server."
        )
    with path.open("rb") as fp:
        return tomllib.load(fp)


def _run_hour(value: Any) -> int:
    hour = int(value)
    if not 0 <= hour <= 23:
        raise SettingsError(f"'scheduler.run_hour' must be between 0 and 23, got {hour}")
    return hour


def _origins(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    return [str(origin) for origin in value]


# attribute -> (section, key, converter)
_REQUIRED: dict[str, tuple[str, str, Callable[[Any], Any]]] = {
    "database_url": ("database", "url", str),
    "secret_key": ("security", "secret_key", str),
    "algorithm": ("security", "algorithm", str),
    "access_token_expire_minutes": ("security", "access_token_expire_minutes", int),
    "bcrypt_rounds": ("security", "bcrypt_rounds", int),
    "host": ("server", "host", str),
    "port": ("server", "port", int),
    "debug": ("server", "debug", bool),
    "cors_origins": ("cors", "origins", _origins),
    "api_prefix": ("api", "prefix", lambda value: str(value).rstrip("/")),
    "scheduler_enabled": ("scheduler", "enabled", bool),
    "scheduler_run_hour": ("scheduler", "run_hour", _run_hour),
}


def _lookup(raw: dict[str, Any], section: str, key: str) -> Any:
    table = raw.get(section)
    if not isinstance(table, dict):
        raise SettingsError(f"Section '[{section}]' is missing in '{CONFIG_PATH}'.")
    if key not in table:
        raise SettingsError(f"Missing key '{section}.{key}' in '{CONFIG_PATH}'.")
    return table[key]


def _extract_settings(raw: dict[str, Any]) -> dict[str, Any]:
    """Flatten the TOML document into keyword arguments for `Settings`."""
    values = {
        attribute: convert(_lookup(raw, section, key))
        for attribute, (section, key, convert) in _REQUIRED.items()
    }
    # [logging] is optional; relative directories resolve against the project root
    log_dir = Path(raw.get("logging", {}).get("directory", "logs"))
    values["log_dir"] = log_dir if log_dir.is_absolute() else PROJECT_ROOT / log_dir
    return values


@dataclass(slots=True)
class Settings:
    """Application settings loaded from a config file."""

    database_url: str
    secret_key: str
    algorithm: str
    access_token_expire_minutes: int
    bcrypt_rounds: int
    host: str
    port: int
    debug: bool
    cors_origins: list[str]
    api_prefix: str
    scheduler_enabled: bool
    scheduler_run_hour: int
    log_dir: Path

    @property
    def allow_all_origins(self) -> bool:
        return "*" in self.cors_origins

    @property
    def cors_origins_list(self) -> list[str]:
        """Origins matched literally."""
        return [origin for origin in self.cors_origins if "*" not in origin]

    @property
    def cors_origin_regex(self) -> str | None:
        """Wildcard origins such as "http://192.168.1.*:3000" joined into one pattern."""
        wildcards = [origin for origin in self.cors_origins if "*" in origin and origin != "*"]
        if not wildcards:
            return None
        patterns = (re.escape(origin).replace(r"\*", ".*") for origin in wildcards)
        return "|".join(f"(?:{pattern})" for pattern in patterns)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Load settings on first use and reuse them afterwards."""
    global _settings
    if _settings is None:
        _settings = Settings(**_extract_settings(_load_config_file(CONFIG_PATH)))
    return _settings
