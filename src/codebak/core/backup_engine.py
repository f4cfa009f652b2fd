"""Incremental backup orchestration: detect, archive, record, prune."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from ..models import BackupEntry, BackupResult
from ..ports.archive import ArchiveCodec
from ..ports.filesystem import FileSystem
from ..ports.vcs import VersionControl
from ..utils import time_utils
from ..utils.errors import BackupIOError, CodebakError, NotFoundError
from ..utils.hash_calc import compute_sha256
from ..utils.logger import get_logger
from .change_detector import ChangeDetector
from .manifest import Manifest


@dataclass
class RetentionPolicy:
    keep_last: int = 0


class BackupEngine:
    def __init__(
        self,
        fs: FileSystem,
        vcs: VersionControl,
        codec: ArchiveCodec,
        *,
        detector: Optional[ChangeDetector] = None,
        clock: Callable[[], datetime] = time_utils.now,
        chunk_size_kb: int = 1024,
        logger=None,
    ) -> None:
        self.fs = fs
        self.vcs = vcs
        self.codec = codec
        self.logger = logger or get_logger(self.__class__.__name__)
        self.detector = detector or ChangeDetector(fs, vcs, logger=self.logger)
        self.clock = clock
        self.chunk_size_kb = chunk_size_kb

    def list_projects(self, source_dir: Path) -> List[str]:
        """Immediate, non-hidden subdirectories of ``source_dir``, sorted."""
        try:
            children = self.fs.list_dir(source_dir)
        except FileNotFoundError as exc:
            raise NotFoundError(f"source directory not found: {source_dir}") from exc
        except OSError as exc:
            raise BackupIOError(f"listing {source_dir}: {exc}") from exc
        return sorted(child.name for child in children if child.is_dir and not child.name.startswith("."))

    def run_backup(
        self,
        source_dir: Path,
        backup_dir: Path,
        exclude: Iterable[str],
        retention: Optional[RetentionPolicy] = None,
    ) -> List[BackupResult]:
        patterns = list(exclude)
        results = []
        for project in self.list_projects(source_dir):
            results.append(self.backup_project(project, source_dir, backup_dir, patterns, retention))
        return results

    def backup_project(
        self,
        project: str,
        source_dir: Path,
        backup_dir: Path,
        exclude: Iterable[str],
        retention: Optional[RetentionPolicy] = None,
    ) -> BackupResult:
        result = BackupResult(project=project)
        try:
            self._backup(result, Path(source_dir), Path(backup_dir), list(exclude), retention)
        except CodebakError as exc:
            result.error = exc
            self.logger.error("BACKUP_FAILED: %s (%s)", project, exc)
        except Exception as exc:  # noqa: BLE001
            error = BackupIOError(f"unexpected failure backing up {project}: {exc!r}")
            error.__cause__ = exc
            result.error = error
            self.logger.exception("BACKUP_FAILED: %s (%r)", project, exc)
        return result

    def _backup(
        self,
        result: BackupResult,
        source_dir: Path,
        backup_dir: Path,
        exclude: List[str],
        retention: Optional[RetentionPolicy],
    ) -> None:
        project = result.project
        project_path = source_dir / project
        if not self.fs.is_dir(project_path):
            raise NotFoundError(f"project not found: {project_path}")

        manifest = Manifest.load(self.fs, backup_dir, project)
        manifest.source = str(project_path)

        changed, reason = self.detector.has_changes(project_path, manifest.latest_backup())
        result.reason = reason
        if not changed:
            result.skipped = True
            self.logger.info("SKIPPED: %s (%s)", project, reason)
            return

        project_backup_dir = backup_dir / project
        try:
            self.fs.makedirs(project_backup_dir)
        except OSError as exc:
            raise BackupIOError(f"creating backup directory {project_backup_dir}: {exc}") from exc

        # created_at is the moment archiving starts; a file modified while the
        # archive is written is newer than the entry and counts as a change next run.
        started_at = self.clock()
        archive_path = project_backup_dir / time_utils.archive_file_name(started_at)
        if self.fs.exists(archive_path):
            self.logger.warning("ARCHIVE_OVERWRITE: %s", archive_path)

        created = self.codec.create(archive_path, project_path, exclude)
        result.skipped_files = list(created.skipped)

        try:
            size_bytes = self.fs.stat(archive_path).size_bytes
            checksum = compute_sha256(archive_path, fs=self.fs, chunk_size_kb=self.chunk_size_kb)
        except OSError as exc:
            self.logger.warning("ORPHAN_ARCHIVE: %s", archive_path)
            raise BackupIOError(f"checksumming {archive_path}: {exc}") from exc

        entry = BackupEntry(
            file=archive_path.name,
            sha256=checksum,
            size_bytes=size_bytes,
            created_at=started_at,
            git_head=self.vcs.current_revision(project_path),
            file_count=created.file_count,
            excluded=list(exclude),
        )
        manifest.add_backup(entry)

        if retention is not None and retention.keep_last > 0:
            for name in manifest.prune(self.fs, backup_dir, retention.keep_last):
                self.logger.info("PRUNED: %s/%s", project, name)

        try:
            manifest.save(self.fs, backup_dir)
        except BackupIOError:
            self.logger.warning("ORPHAN_ARCHIVE: %s", archive_path)
            raise

        result.archive_path = archive_path
        result.size_bytes = size_bytes
        result.file_count = created.file_count
        result.git_head = entry.git_head
        self.logger.info(
            "BACKED_UP: %s -> %s (%d files, %d bytes)",
            project,
            archive_path.name,
            created.file_count,
            size_bytes,
        )
