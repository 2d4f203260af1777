"""Workspace configuration for the updater (``config/config.toml``)."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from cannon_core.updates.transport import DEFAULT_TIMEOUT_SECONDS, DEFAULT_USER_AGENT, TransportConfig

logger = logging.getLogger(__name__)

CONFIG_RELATIVE_PATH = Path("config") / "config.toml"


@dataclass(frozen=True)
class UpdaterConfig:
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    user_agent: str = DEFAULT_USER_AGENT
    archive_pattern: str = "*.smod"
    metadata_entry: str = "manifest.json"
    metadata_key: str = "steve_cannon"
    launch_target: str = "Stonehearth.exe"
    archives_subdir: str = "mods"

    def transport_config(self) -> TransportConfig:
        return TransportConfig(timeout_seconds=self.timeout_seconds, user_agent=self.user_agent)


def _load_updater_section(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        return {}
    try:
        payload = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
        logger.warning("ignoring unreadable config %s: %s", config_path, exc)
        return {}
    section = payload.get("updater")
    return section if isinstance(section, dict) else {}


def _text(section: dict[str, Any], key: str, default: str) -> str:
    value = str(section.get(key) or "").strip()
    return value or default


def load_updater_config(root: Path, config_path: Path | None = None) -> UpdaterConfig:
    path = config_path if config_path is not None else root / CONFIG_RELATIVE_PATH
    section = _load_updater_section(path)
    defaults = UpdaterConfig()

    timeout = float(section.get("timeout_seconds", defaults.timeout_seconds))
    if timeout <= 0:
        raise ValueError(f"updater.timeout_seconds must be positive, got {timeout}")

    return UpdaterConfig(
        timeout_seconds=timeout,
        user_agent=_text(section, "user_agent", defaults.user_agent),
        archive_pattern=_text(section, "archive_pattern", defaults.archive_pattern),
        metadata_entry=_text(section, "metadata_entry", defaults.metadata_entry),
        metadata_key=_text(section, "metadata_key", defaults.metadata_key),
        launch_target=_text(section, "launch_target", defaults.launch_target),
        archives_subdir=_text(section, "archives_subdir", defaults.archives_subdir),
    )
