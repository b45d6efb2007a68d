"""Global configuration: glftpd paths and thresholds with env overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from slowkicker.policy.history import DEFAULT_CAPACITY
from slowkicker.policy.loader import parse_rules
from slowkicker.policy.models import DEFAULT_DIRECTORIES, DirectoryRule

DEFAULT_ROOT = "/glftpd"
DEFAULT_IPC_KEY = 0xDEADBABE

_SETTINGS = (
    "glftpd_root",
    "ipc_key",
    "interval",
    "undupe_timeout",
    "history_size",
    "group_lookup",
    "audit_categories",
)


@dataclass
class SlowKickerConfig:
    """Application-wide configuration."""

    glftpd_root: str = DEFAULT_ROOT
    ipc_key: int = DEFAULT_IPC_KEY
    interval: float = 1.0
    undupe_timeout: float = 10.0
    history_size: int = DEFAULT_CAPACITY
    group_lookup: bool = True
    audit_categories: bool = True
    directories: tuple[DirectoryRule, ...] = field(
        default_factory=lambda: DEFAULT_DIRECTORIES
    )

    @property
    def log_file(self) -> Path:
        return Path(self.glftpd_root) / "ftp-data" / "logs" / "slowkicker.log"

    @property
    def audit_log_file(self) -> Path:
        return Path(self.glftpd_root) / "ftp-data" / "logs" / "glftpd.log"

    @property
    def lock_file(self) -> Path:
        return Path(self.glftpd_root) / "tmp" / "slowkicker.lock"

    @property
    def group_file(self) -> Path:
        return Path(self.glftpd_root) / "etc" / "group"

    @property
    def undupe_binary(self) -> Path:
        return Path(self.glftpd_root) / "bin" / "undupe"

    @classmethod
    def load(cls, path: str | Path | None = None) -> SlowKickerConfig:
        """Load config from an optional YAML file, then environment variables."""
        config = cls()

        if path is None:
            path = os.environ.get("SLOWKICKER_CONFIG") or None
        if path is not None:
            config.update_from_file(path)

        env_root = os.environ.get("SLOWKICKER_ROOT")
        if env_root:
            config.glftpd_root = env_root

        env_interval = os.environ.get("SLOWKICKER_INTERVAL")
        if env_interval:
            config.interval = float(env_interval)

        return config

    def update_from_file(self, path: str | Path) -> None:
        try:
            data = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ValueError(f"Config YAML could not be parsed: {e}") from e
        if data is None:
            return
        if not isinstance(data, dict):
            raise ValueError("Config YAML must be a mapping")
        self.update(data)

    def update(self, data: dict) -> None:
        unknown = set(data) - set(_SETTINGS) - {"directories"}
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")

        for name in _SETTINGS:
            if name not in data:
                continue
            current = getattr(self, name)
            value = data[name]
            if isinstance(current, bool):
                if not isinstance(value, bool):
                    raise ValueError(f"'{name}' must be true or false")
            else:
                try:
                    if isinstance(current, int) and isinstance(value, str):
                        value = int(value, 0)
                    value = type(current)(value)
                except (TypeError, ValueError) as e:
                    raise ValueError(f"'{name}' is invalid: {e}") from e
            setattr(self, name, value)

        if "directories" in data:
            self.directories = parse_rules(data["directories"])

        if self.interval <= 0:
            raise ValueError("'interval' must be positive")
        if self.undupe_timeout <= 0:
            raise ValueError("'undupe_timeout' must be positive")
        if self.history_size < 1:
            raise ValueError("'history_size' must be at least 1")
