"""Tests for the kick sequence, undupe call and audit log."""

from __future__ import annotations

import logging
import signal
import subprocess
import time
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from slowkicker.actions.audit import AuditLog, format_audit_line, format_timestamp
from slowkicker.actions.kick import KickAction, classify_kick
from slowkicker.actions.undupe import UndupeCommand
from slowkicker.policy.models import KickReason
from slowkicker.resolve import GroupResolver
from slowkicker.session.models import SessionSnapshot

PATH = "/site/iso/rel/file.rar"


def _make_session(pid: int = 4242, group_id: int = 100) -> SessionSnapshot:
    return SessionSnapshot(
        username="alice",
        group_id=group_id,
        current_dir="/site/iso/rel",
        status="STOR file.rar",
        pid=pid,
        transfer_start=0.0,
        bytes_transferred=0,
    )


@pytest.fixture
def upload(glftpd_root: Path) -> Path:
    real = glftpd_root / PATH.lstrip("/")
    real.write_bytes(b"partial data")
    return real


@pytest.fixture
def undupe() -> MagicMock:
    return MagicMock(spec=UndupeCommand)


@pytest.fixture
def audit_path(glftpd_root: Path) -> Path:
    return glftpd_root / "ftp-data" / "logs" / "glftpd.log"


@pytest.fixture
def action(glftpd_root: Path, undupe: MagicMock, audit_path: Path) -> KickAction:
    return KickAction(
        root=str(glftpd_root),
        undupe=undupe,
        audit=AuditLog(audit_path),
        groups=GroupResolver(glftpd_root / "etc" / "group"),
    )


class TestKickAction:
    @patch("slowkicker.actions.kick.os.kill")
    def test_successful_kick(
        self,
        mock_kill: MagicMock,
        action: KickAction,
        upload: Path,
        undupe: MagicMock,
        audit_path: Path,
        caplog: pytest.LogCaptureFixture,
    ):
        with caplog.at_level(logging.INFO, logger="slowkicker"):
            kick = action.execute(_make_session(), PATH, 24.4)

        assert kick is not None
        assert kick.reason is KickReason.SLOW
        assert kick.group == "glftpd"
        assert kick.path == PATH
        mock_kill.assert_called_once_with(4242, signal.SIGTERM)
        assert not upload.exists()
        undupe.execute.assert_called_once_with("alice", PATH)
        assert "Kicked user for slow uploading: alice: 24kB/s: /site/iso/rel/file.rar" in caplog.text

        line = audit_path.read_text()
        assert line.endswith(' SLOW: "/site/iso/rel/file.rar" "alice" "glftpd" "24"\n')

    @patch("slowkicker.actions.kick.os.kill")
    def test_zero_byte_file(self, mock_kill: MagicMock, action: KickAction, upload: Path, audit_path: Path):
        upload.write_bytes(b"")
        kick = action.execute(_make_session(), PATH, 0.0)
        assert kick is not None
        assert kick.reason is KickReason.ZERO_BYTE
        assert 'ZEROBYTE: "/site/iso/rel/file.rar" "alice" "glftpd"\n' in audit_path.read_text()

    @patch("slowkicker.actions.kick.os.kill")
    def test_stalled_upload(self, mock_kill: MagicMock, action: KickAction, upload: Path, audit_path: Path):
        kick = action.execute(_make_session(group_id=999), PATH, 0.0)
        assert kick is not None
        assert kick.reason is KickReason.STALLED
        assert 'STALLED: "/site/iso/rel/file.rar" "alice" "NoGroup"\n' in audit_path.read_text()

    @patch("slowkicker.actions.kick.os.kill", side_effect=ProcessLookupError(3, "No such process"))
    def test_process_already_gone(
        self, mock_kill: MagicMock, action: KickAction, upload: Path, undupe: MagicMock, caplog: pytest.LogCaptureFixture
    ):
        with caplog.at_level(logging.DEBUG, logger="slowkicker"):
            assert action.execute(_make_session(), PATH, 1.0) is None
        assert upload.exists()
        undupe.execute.assert_not_called()
        assert caplog.records == []

    @patch("slowkicker.actions.kick.os.kill", side_effect=PermissionError(1, "Operation not permitted"))
    def test_kill_not_permitted(
        self, mock_kill: MagicMock, action: KickAction, upload: Path, caplog: pytest.LogCaptureFixture
    ):
        with caplog.at_level(logging.ERROR, logger="slowkicker"):
            assert action.execute(_make_session(), PATH, 1.0) is None
        assert upload.exists()
        assert "Unable to kill process: 4242: Operation not permitted" in caplog.text

    @patch("slowkicker.actions.kick.os.kill")
    def test_missing_file_is_not_kicked(
        self,
        mock_kill: MagicMock,
        action: KickAction,
        undupe: MagicMock,
        audit_path: Path,
        caplog: pytest.LogCaptureFixture,
    ):
        with caplog.at_level(logging.DEBUG, logger="slowkicker"):
            assert action.execute(_make_session(), PATH, 1.0) is None
        mock_kill.assert_called_once()
        undupe.execute.assert_not_called()
        assert not audit_path.exists()
        assert caplog.records == []

    @patch("slowkicker.actions.kick.os.kill")
    def test_stat_error(self, mock_kill: MagicMock, action: KickAction, upload: Path, caplog: pytest.LogCaptureFixture):
        with patch("slowkicker.actions.kick.os.stat", side_effect=PermissionError(13, "Permission denied")):
            with caplog.at_level(logging.ERROR, logger="slowkicker"):
                assert action.execute(_make_session(), PATH, 1.0) is None
        assert upload.exists()
        assert "Unable to stat path" in caplog.text

    @patch("slowkicker.actions.kick.os.kill")
    def test_unlink_error(
        self, mock_kill: MagicMock, action: KickAction, upload: Path, undupe: MagicMock, caplog: pytest.LogCaptureFixture
    ):
        with patch("slowkicker.actions.kick.os.unlink", side_effect=PermissionError(13, "Permission denied")):
            with caplog.at_level(logging.ERROR, logger="slowkicker"):
                assert action.execute(_make_session(), PATH, 1.0) is None
        undupe.execute.assert_not_called()
        assert "Unable to delete file" in caplog.text

    @patch("slowkicker.actions.kick.os.kill")
    def test_undupe_failure_does_not_fail_kick(self, mock_kill: MagicMock, action: KickAction, upload: Path, undupe: MagicMock):
        undupe.execute.return_value = False
        assert action.execute(_make_session(), PATH, 1.0) is not None

    @patch("slowkicker.actions.kick.os.kill")
    def test_without_group_lookup(
        self, mock_kill: MagicMock, glftpd_root: Path, upload: Path, undupe: MagicMock, audit_path: Path
    ):
        action = KickAction(
            root=str(glftpd_root),
            undupe=undupe,
            audit=AuditLog(audit_path, categorized=False),
        )
        kick = action.execute(_make_session(), PATH, 0.0)
        assert kick is not None
        assert kick.group == ""
        assert audit_path.read_text().endswith(' SLOW: "/site/iso/rel/file.rar" "alice" "0"\n')


@pytest.mark.parametrize(
    ("size", "speed", "reason"),
    [
        (0, 0.0, KickReason.ZERO_BYTE),
        (0, 12.0, KickReason.ZERO_BYTE),
        (100, 0.0, KickReason.STALLED),
        (100, 0.4, KickReason.SLOW),
    ],
)
def test_classify_kick(size: int, speed: float, reason: KickReason):
    assert classify_kick(size, speed) is reason


class TestAuditFormat:
    def test_slow(self):
        line = format_audit_line(KickReason.SLOW, "alice", PATH, 24.6, "glftpd")
        assert line == 'SLOW: "/site/iso/rel/file.rar" "alice" "glftpd" "25"'

    def test_zero_byte_has_no_speed(self):
        line = format_audit_line(KickReason.ZERO_BYTE, "alice", PATH, 24.6, "glftpd")
        assert line == 'ZEROBYTE: "/site/iso/rel/file.rar" "alice" "glftpd"'

    def test_stalled_has_no_speed(self):
        line = format_audit_line(KickReason.STALLED, "alice", PATH, 0.0, "glftpd")
        assert line == 'STALLED: "/site/iso/rel/file.rar" "alice" "glftpd"'

    def test_simple_variant(self):
        line = format_audit_line(KickReason.ZERO_BYTE, "alice", PATH, 3.2, None, categorized=False)
        assert line == 'SLOW: "/site/iso/rel/file.rar" "alice" "3"'

    def test_timestamp_format(self):
        # 2014-01-05 is a Sunday; day of month is space padded
        now = time.mktime((2014, 1, 5, 13, 4, 5, 0, 0, -1))
        assert format_timestamp(now) == "Sun Jan  5 13:04:05 2014"

    def test_write_failure_is_reported(self, tmp_path: Path):
        audit = AuditLog(tmp_path / "missing" / "glftpd.log")
        assert audit.write(KickReason.SLOW, "alice", PATH, 1.0, "glftpd") is False


class TestUndupeCommand:
    @patch("slowkicker.actions.undupe.subprocess.run")
    def test_invocation(self, mock_run: MagicMock):
        undupe = UndupeCommand(Path("/glftpd/bin/undupe"), timeout=3)
        assert undupe.execute("alice", "/site/iso/rel/my file.rar")

        args, kwargs = mock_run.call_args
        assert args[0] == ["/glftpd/bin/undupe", "-u", "alice", "-f", "my file.rar"]
        assert kwargs["stdout"] is subprocess.DEVNULL
        assert kwargs["stderr"] is subprocess.DEVNULL
        assert kwargs["timeout"] == 3

    @patch("slowkicker.actions.undupe.subprocess.run")
    def test_exit_status_ignored(self, mock_run: MagicMock):
        mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=1)
        assert UndupeCommand(Path("/bin/undupe")).execute("alice", PATH)

    @patch(
        "slowkicker.actions.undupe.subprocess.run",
        side_effect=subprocess.TimeoutExpired(cmd="undupe", timeout=3),
    )
    def test_timeout(self, mock_run: MagicMock, caplog: pytest.LogCaptureFixture):
        with caplog.at_level(logging.WARNING, logger="slowkicker"):
            assert not UndupeCommand(Path("/bin/undupe"), timeout=3).execute("alice", PATH)
        assert "Undupe timed out" in caplog.text

    @patch("slowkicker.actions.undupe.subprocess.run", side_effect=FileNotFoundError(2, "No such file"))
    def test_missing_binary(self, mock_run: MagicMock):
        assert not UndupeCommand(Path("/nope/undupe")).execute("alice", PATH)

    @patch("slowkicker.actions.undupe.subprocess.run")
    def test_malformed_path(self, mock_run: MagicMock, caplog: pytest.LogCaptureFixture):
        with caplog.at_level(logging.ERROR, logger="slowkicker"):
            assert not UndupeCommand(Path("/bin/undupe")).execute("alice", "file.rar")
        mock_run.assert_not_called()
        assert "Undupe failed, malformed path: alice: file.rar" in caplog.text
