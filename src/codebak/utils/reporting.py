"""報告輸出工具。"""

from __future__ import annotations

from typing import Iterable, List

from ..models import BackupEntry, BackupResult, DiffResult, FileDiffResult

SIZE_UNITS = "KMGTPE"
SHORT_REVISION_LENGTH = 7


def format_size(num_bytes: int) -> str:
    """Binary-prefixed size with one decimal, e.g. ``1.5 MB``."""
    unit = 1024
    if num_bytes < unit:
        return f"{num_bytes} B"
    div, exp = unit, 0
    remaining = num_bytes // unit
    while remaining >= unit:
        div *= unit
        exp += 1
        remaining //= unit
    return f"{num_bytes / div:.1f} {SIZE_UNITS[exp]}B"


def build_run_summary(results: Iterable[BackupResult]) -> str:
    lines: List[str] = []
    backed_up = skipped = failed = 0
    for result in results:
        if result.error is not None:
            lines.append(f"  x {result.project}: {result.error}")
            failed += 1
        elif result.skipped:
            lines.append(f"  - {result.project} ({result.reason})")
            skipped += 1
        else:
            lines.append(
                f"  * {result.project} {format_size(result.size_bytes)} "
                f"{result.reason} {result.file_count} files"
            )
            if result.skipped_files:
                lines.append(f"    ! {len(result.skipped_files)} unreadable files skipped")
            backed_up += 1

    footer = f"Done: {backed_up} backed up, {skipped} skipped"
    if failed:
        footer += f", {failed} errors"
    lines.extend(["", footer])
    return "\n".join(lines) + "\n"


def format_versions(project: str, entries: Iterable[BackupEntry]) -> str:
    entries = list(entries)
    if not entries:
        return f"No backups found for {project}\n"

    row = "  {:<20} {:>10} {:>8} {}"
    lines = [
        f"Backups for {project}:",
        "",
        row.format("VERSION", "SIZE", "FILES", "GIT HEAD"),
        row.format("-------", "----", "-----", "--------"),
    ]
    for entry in entries:
        revision = entry.git_head[:SHORT_REVISION_LENGTH] or "-"
        lines.append(row.format(entry.version, format_size(entry.size_bytes), entry.file_count, revision))
    return "\n".join(lines) + "\n"


def format_diff(result: DiffResult) -> str:
    lines = [f"{result.version_a} -> {result.version_b}"]
    if result.is_empty:
        lines.append("  no differences")
    for change in result.changes:
        lines.append(f"  {change.status.value} {change.path}")
    lines.append(f"{result.modified} modified, {result.added} added, {result.deleted} deleted")
    return "\n".join(lines) + "\n"


def format_file_diff(result: FileDiffResult) -> str:
    header = f"--- {result.version_a}/{result.path}\n+++ {result.version_b}/{result.path}\n"
    if result.error:
        return header + f"{result.error}\n"
    if result.is_binary:
        return header + "Binary files differ\n"
    return header + "".join(line.render() + "\n" for line in result.lines)
