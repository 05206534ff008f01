"""Environment-driven configuration for the timeline."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .persistence.rest import DEFAULT_API_URL

__all__ = ["ConfigError", "DATA_SOURCES", "TimelineConfig", "load_env_file"]


class ConfigError(RuntimeError):
    """Raised when a configuration value or ``.env`` entry is malformed."""


def load_env_file(env_file: str | Path | None = None) -> list[str]:
    """Export ``KEY=VALUE`` pairs from ``env_file`` into :data:`os.environ`.

    Without an explicit path the ``.env`` file in the working directory is used.
    Variables that are already set win over the file. Returns the keys that
    were newly exported.
    """

    path = Path(env_file) if env_file is not None else Path.cwd() / ".env"
    if not path.is_file():
        return []

    exported: list[str] = []
    for key, value in _iter_env_entries(path):
        if key not in os.environ:
            os.environ[key] = value
            exported.append(key)
    return exported


def _iter_env_entries(path: Path) -> Iterable[tuple[str, str]]:
    for number, raw_line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        key, sep, raw_value = line.partition("=")
        key = key.strip()
        if not sep:
            raise ConfigError(f"Invalid line {number} in {path.name!r}: expected KEY=VALUE, got {raw_line!r}")
        if not key:
            raise ConfigError(f"Missing variable name on line {number} of {path.name!r}")
        yield key, _unquote(raw_value.strip())


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


DATA_SOURCES = ("local", "server", "memory")
DEFAULT_STORAGE_PATH = "work_orders.json"


@dataclass(frozen=True)
class TimelineConfig:
    """Settings resolved from the environment."""

    data_source: str = "local"
    api_url: str = DEFAULT_API_URL
    storage_path: Path = Path(DEFAULT_STORAGE_PATH)
    timezone: ZoneInfo | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "TimelineConfig":
        env = os.environ if environ is None else environ

        data_source = env.get("TIMELINE_DATA_SOURCE", "local").strip().lower()
        if data_source not in DATA_SOURCES:
            raise ConfigError(
                f"TIMELINE_DATA_SOURCE must be one of {', '.join(DATA_SOURCES)}; got {data_source!r}"
            )

        api_url = env.get("TIMELINE_API_URL", "").strip() or DEFAULT_API_URL
        if not api_url.startswith(("http://", "https://")):
            raise ConfigError(f"TIMELINE_API_URL must be an http(s) URL; got {api_url!r}")

        storage_path = Path(env.get("TIMELINE_STORAGE_PATH", "").strip() or DEFAULT_STORAGE_PATH)

        timezone_name = env.get("TIMELINE_TIMEZONE", "").strip()
        timezone = None
        if timezone_name:
            try:
                timezone = ZoneInfo(timezone_name)
            except (ZoneInfoNotFoundError, ValueError) as exc:
                raise ConfigError(f"Unknown timezone in TIMELINE_TIMEZONE: {timezone_name!r}") from exc

        return cls(
            data_source=data_source,
            api_url=api_url,
            storage_path=storage_path,
            timezone=timezone,
        )

    def now(self) -> datetime:
        """Current local wall-clock time as a naive datetime."""

        if self.timezone is None:
            return datetime.now()
        return datetime.now(tz=self.timezone).replace(tzinfo=None)
