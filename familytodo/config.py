"""Server settings for FamilyTodo, read from ``config/settings.toml`` at the repository root."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import re
import tomllib
from typing import Any


CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "settings.toml"

# TOML section -> keys that must be present in it
REQUIRED_KEYS: dict[str, tuple[str, ...]] = {
    "database": ("url",),
    "server": ("host", "port", "debug"),
    "cors": ("origins",),
    "api": ("version",),
}


class SettingsError(RuntimeError):
    """The settings file is missing or incomplete."""


def _read_toml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise SettingsError(
            f"Settings file {path} is missing; the FamilyTodo server "
            "needs it with [database], [server], [cors] and [api] tables."
        )
    with path.open("rb") as fp:
        return tomllib.load(fp)


def _checked_tables(raw: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Return the required tables after making sure every required key is set."""
    tables: dict[str, dict[str, Any]] = {}
    for name, keys in REQUIRED_KEYS.items():
        table = raw.get(name)
        if not isinstance(table, dict):
            raise SettingsError(f"No [{name}] table in {CONFIG_PATH}")
        absent = [key for key in keys if key not in table]
        if absent:
            raise SettingsError(
                f"{CONFIG_PATH} lacks " + ", ".join(f"{name}.{key}" for key in absent)
            )
        tables[name] = table
    return tables


@dataclass(slots=True)
class Settings:
    """Effective server settings."""

    database_url: str
    host: str
    port: int
    debug: bool
    cors_origins: list[str]
    api_version_path: str
    # None means "<repository>/logs"
    log_dir: str | None

    @classmethod
    def from_toml(cls, raw: dict[str, Any]) -> "Settings":
        tables = _checked_tables(raw)
        server = tables["server"]
        return cls(
            database_url=tables["database"]["url"],
            host=server["host"],
            port=server["port"],
            debug=server["debug"],
            cors_origins=list(tables["cors"]["origins"]),
            api_version_path=f"/api/v{tables['api']['version']}",
            log_dir=raw.get("logging", {}).get("dir"),
        )

    @property
    def cors_origins_list(self) -> list[str | re.Pattern[str]]:
        """Exact origins as strings; origins with ``*`` (e.g. "http://192.168.1.*:5173") as patterns."""
        return [
            re.compile(re.escape(origin).replace(r"\*", ".*")) if "*" in origin else origin
            for origin in self.cors_origins
        ]


_settings: Settings | None = None


def get_settings() -> Settings:
    """Load the settings file once and reuse the result."""
    global _settings
    if _settings is None:
        _settings = Settings.from_toml(_read_toml(CONFIG_PATH))
    return _settings
