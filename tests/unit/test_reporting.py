from datetime import datetime, timezone
from pathlib import Path

import pytest

from codebak.models import BackupEntry, BackupResult, ChangeStatus, DiffResult, FileChange, FileDiffResult
from codebak.utils import reporting
from codebak.utils.errors import NotFoundError


@pytest.mark.parametrize(
    ("num_bytes", "expected"),
    [
        (0, "0 B"),
        (1023, "1023 B"),
        (1024, "1.0 KB"),
        (1536 * 1024, "1.5 MB"),
        (3 * 1024 ** 3, "3.0 GB"),
    ],
)
def test_format_size(num_bytes: int, expected: str) -> None:
    assert reporting.format_size(num_bytes) == expected


def test_build_run_summary() -> None:
    results = [
        BackupResult(project="api", archive_path=Path("/b/api/x.zip"), size_bytes=2048, file_count=3, reason="no previous backup"),
        BackupResult(project="docs", skipped=True, reason="no changes detected"),
        BackupResult(project="ghost", error=NotFoundError("project not found")),
    ]

    text = reporting.build_run_summary(results)

    assert "  * api 2.0 KB no previous backup 3 files" in text
    assert "  - docs (no changes detected)" in text
    assert "  x ghost: project not found" in text
    assert text.endswith("Done: 1 backed up, 1 skipped, 1 errors\n")


def test_format_versions() -> None:
    entry = BackupEntry(
        file="20240115-103000.zip",
        sha256="0" * 64,
        size_bytes=1024,
        created_at=datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc),
        git_head="abcdef1234567",
        file_count=7,
    )

    text = reporting.format_versions("api", [entry])

    assert text.startswith("Backups for api:")
    assert "20240115-103000" in text
    assert "abcdef1" in text and "abcdef12" not in text
    assert reporting.format_versions("api", []) == "No backups found for api\n"


def test_format_diff() -> None:
    result = DiffResult(
        version_a="a",
        version_b="b",
        changes=[FileChange("x.txt", ChangeStatus.MODIFIED, 1, 2)],
        modified=1,
    )
    assert "  M x.txt" in reporting.format_diff(result)
    assert "no differences" in reporting.format_diff(DiffResult("a", "b"))


def test_format_file_diff_binary() -> None:
    result = FileDiffResult(path="img.png", version_a="a", version_b="b", is_binary=True)
    assert reporting.format_file_diff(result).endswith("Binary files differ\n")
