"""Runtime settings for live measures.

Resolution order (last wins): built-in defaults, `.measures/sync.conf` in
the repository, environment variables, explicit CLI flags.

Config file format: INI-like sections, `key = value` lines, # comments:

    [server]
    base_url = https://sonar.example.com

    [storage]
    hot_zone = /var/cache/measures
    supports_upsert = false
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

log = logging.getLogger(__name__)

DEFAULT_SERVER_URL = "http://localhost:9000"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class Settings:
    hot_zone: str | None = None
    server_url: str = DEFAULT_SERVER_URL
    supports_upsert: bool | None = None  # None = probe the backend


def parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"Not a boolean value: '{raw}'")


def _read_conf(conf: Path) -> dict[str, dict[str, str]]:
    """Parse sync.conf into {section: {key: value}}."""
    sections: dict[str, dict[str, str]] = {}
    current: dict[str, str] | None = None
    for raw_line in conf.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("[") and line.endswith("]"):
            current = sections.setdefault(line[1:-1].strip().lower(), {})
            continue
        if current is None or "=" not in line:
            log.debug("Ignoring line outside a section in %s: %s", conf, line)
            continue
        key, _, value = line.partition("=")
        current[key.strip().lower()] = value.strip()
    return sections


def load_settings(repo: str | Path | None = None) -> Settings:
    """Build Settings from sync.conf and the environment."""
    settings = Settings()

    conf = Path(repo or os.getcwd()) / ".measures" / "sync.conf"
    if conf.exists():
        sections = _read_conf(conf)
        server = sections.get("server", {})
        storage = sections.get("storage", {})
        if server.get("base_url"):
            settings.server_url = server["base_url"]
        if storage.get("hot_zone"):
            settings.hot_zone = storage["hot_zone"]
        if storage.get("supports_upsert"):
            settings.supports_upsert = parse_bool(storage["supports_upsert"])

    env_hz = os.environ.get("MEASURES_HOT_ZONE", "")
    if env_hz:
        settings.hot_zone = env_hz
    env_url = os.environ.get("MEASURES_SERVER_URL", "")
    if env_url:
        settings.server_url = env_url
    env_upsert = os.environ.get("MEASURES_SUPPORTS_UPSERT", "")
    if env_upsert:
        settings.supports_upsert = parse_bool(env_upsert)

    settings.server_url = settings.server_url.rstrip("/")
    return settings
