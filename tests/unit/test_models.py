from datetime import datetime, timezone
from pathlib import Path

from codebak.models import (
    BackupEntry,
    BackupResult,
    ChangeStatus,
    DiffLine,
    ErrorLevel,
    FileStat,
    LineKind,
    ProcessError,
    Snapshot,
)


def test_backup_entry_serialization() -> None:
    entry = BackupEntry(
        file="20240115-103000.zip",
        sha256="ab" * 32,
        size_bytes=2048,
        created_at=datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc),
        file_count=12,
        excluded=["node_modules"],
    )
    data = entry.to_dict()

    assert entry.version == "20240115-103000"
    assert data["created_at"] == "2024-01-15T10:30:00+00:00"
    assert "git_head" not in data
    assert BackupEntry.from_dict(data) == entry


def test_backup_result_succeeded() -> None:
    assert BackupResult(project="p").succeeded
    assert not BackupResult(project="p", skipped=True).succeeded
    assert not BackupResult(project="p", error=RuntimeError("x")).succeeded


def test_change_status_order() -> None:
    statuses = sorted([ChangeStatus.DELETED, ChangeStatus.ADDED, ChangeStatus.MODIFIED], key=lambda s: s.sort_order)
    assert statuses == [ChangeStatus.MODIFIED, ChangeStatus.ADDED, ChangeStatus.DELETED]
    assert ChangeStatus("A") is ChangeStatus.ADDED


def test_diff_line_render() -> None:
    assert DiffLine(0, 3, LineKind.ADDED, "new").render() == "+new"
    assert DiffLine(2, 2, LineKind.UNCHANGED, "same").render() == " same"


def test_file_stat_name() -> None:
    assert FileStat(path=Path("/code/proj/main.go"), size_bytes=1, mtime=0.0).name == "main.go"


def test_snapshot_has_tags() -> None:
    snapshot = Snapshot(
        id="abcd1234",
        time=datetime(2024, 1, 1),
        hostname="host",
        paths=["/secrets"],
        tags=["codebak", "env"],
    )
    assert snapshot.has_tags(["codebak"])
    assert not snapshot.has_tags(["codebak", "ssh"])


def test_error_record_describe() -> None:
    error = ProcessError(
        code="W-ARCHIVE-SKIP",
        level=ErrorLevel.RECOVERABLE,
        message="Permission denied",
        file_path="/code/proj/secret.txt",
    )
    assert error.describe() == "[W-ARCHIVE-SKIP] /code/proj/secret.txt: Permission denied"
    assert error.to_dict()["level"] == "W"
