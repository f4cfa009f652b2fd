"""比較同一專案的兩個備份版本。"""

from __future__ import annotations

from pathlib import Path
from typing import List, Union

from ..models import ChangeStatus, DiffResult, FileChange, FileDiffResult
from ..ports.archive import ArchiveCodec
from ..utils import time_utils
from ..utils.errors import CodebakError, with_context
from ..utils.logger import get_logger
from .line_diff import DEFAULT_SNIFF_BYTES, LineDiffer, greedy_line_diff, is_binary, split_lines


class DiffEngine:
    """File-level and line-level comparison of two archives of one project."""

    def __init__(
        self,
        codec: ArchiveCodec,
        backup_dir: Path,
        *,
        line_differ: LineDiffer = greedy_line_diff,
        binary_sniff_bytes: int = DEFAULT_SNIFF_BYTES,
        logger=None,
    ) -> None:
        self.codec = codec
        self.backup_dir = Path(backup_dir)
        self.line_differ = line_differ
        self.binary_sniff_bytes = binary_sniff_bytes
        self.logger = logger or get_logger(self.__class__.__name__)

    def archive_path(self, project: str, version: str) -> Path:
        file_name = time_utils.version_from_file(version) + time_utils.ARCHIVE_SUFFIX
        return self.backup_dir / project / file_name

    def is_binary(self, content: bytes) -> bool:
        return is_binary(content, self.binary_sniff_bytes)

    def compute_diff(self, project: str, version_a: str, version_b: str) -> DiffResult:
        files_a = self._list(project, version_a)
        files_b = self._list(project, version_b)

        result = DiffResult(
            version_a=time_utils.version_from_file(version_a),
            version_b=time_utils.version_from_file(version_b),
        )
        changes: List[FileChange] = []
        for path in files_a.keys() | files_b.keys():
            info_a = files_a.get(path)
            info_b = files_b.get(path)
            if info_b is None:
                changes.append(FileChange(path, ChangeStatus.DELETED, size_a=info_a.size))
                result.deleted += 1
            elif info_a is None:
                changes.append(FileChange(path, ChangeStatus.ADDED, size_b=info_b.size))
                result.added += 1
            elif info_a.size != info_b.size or info_a.crc32 != info_b.crc32:
                changes.append(FileChange(path, ChangeStatus.MODIFIED, info_a.size, info_b.size))
                result.modified += 1

        changes.sort(key=lambda change: (change.status.sort_order, change.path))
        result.changes = changes
        return result

    def _list(self, project: str, version: str):
        try:
            return self.codec.list(self.archive_path(project, version))
        except CodebakError as exc:
            raise with_context(exc, f"reading {version}") from exc

    def compute_file_diff(
        self,
        project: str,
        version_a: str,
        version_b: str,
        rel_path: str,
        status: Union[ChangeStatus, str],
    ) -> FileDiffResult:
        status = ChangeStatus(status)
        result = FileDiffResult(
            path=rel_path,
            version_a=time_utils.version_from_file(version_a),
            version_b=time_utils.version_from_file(version_b),
        )

        content_a = b""
        content_b = b""
        try:
            if status != ChangeStatus.ADDED:
                content_a = self.codec.read_file(self.archive_path(project, version_a), rel_path, project)
            if status != ChangeStatus.DELETED:
                content_b = self.codec.read_file(self.archive_path(project, version_b), rel_path, project)
        except CodebakError as exc:
            result.error = f"Error reading file: {exc}"
            self.logger.warning("DIFF_READ_FAILED: %s %s (%s)", project, rel_path, exc)
            return result

        if self.is_binary(content_a) or self.is_binary(content_b):
            result.is_binary = True
            return result

        lines_a = split_lines(content_a) if status != ChangeStatus.ADDED else []
        lines_b = split_lines(content_b) if status != ChangeStatus.DELETED else []
        result.lines = self.line_differ(lines_a, lines_b)
        return result
