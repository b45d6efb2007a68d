"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from slowkicker.config import SlowKickerConfig
from slowkicker.policy.models import DirectoryRule


@pytest.fixture
def iso_rule() -> DirectoryRule:
    return DirectoryRule(mask="/site/iso/*", min_speed=75, min_duration=15, max_kicks=3)


@pytest.fixture
def rules(iso_rule: DirectoryRule) -> tuple[DirectoryRule, ...]:
    return (
        iso_rule,
        DirectoryRule(mask="/site/mp3/*", min_speed=50, min_duration=10, max_kicks=2),
        DirectoryRule(mask="/site/*", min_speed=10, min_duration=30, max_kicks=1),
    )


@pytest.fixture
def glftpd_root(tmp_path: Path) -> Path:
    """A minimal glftpd tree: site dirs, logs, tmp, etc/group."""
    root = tmp_path / "glftpd"
    (root / "site" / "iso" / "rel").mkdir(parents=True)
    (root / "site" / "mp3").mkdir(parents=True)
    (root / "ftp-data" / "logs").mkdir(parents=True)
    (root / "tmp").mkdir()
    (root / "bin").mkdir()
    (root / "etc").mkdir()
    (root / "etc" / "group").write_text(
        "glftpd:GLFTPD Group:100:\nSiteOps:Site Operators:200:\n"
    )
    return root


@pytest.fixture
def config(glftpd_root: Path, rules: tuple[DirectoryRule, ...]) -> SlowKickerConfig:
    return SlowKickerConfig(
        glftpd_root=str(glftpd_root),
        interval=0.01,
        undupe_timeout=1.0,
        directories=rules,
    )
