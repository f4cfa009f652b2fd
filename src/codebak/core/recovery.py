"""Verify and restore project archives."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, List

from ..models import BackupEntry
from ..ports.archive import ArchiveCodec
from ..ports.filesystem import FileSystem
from ..utils import time_utils
from ..utils.errors import (
    BackupIOError,
    CodebakError,
    ConflictError,
    IntegrityError,
    NotFoundError,
)
from ..utils.hash_calc import compute_sha256
from ..utils.logger import get_logger
from .manifest import Manifest


@dataclass
class RecoverOptions:
    version: str = ""
    wipe: bool = False
    archive: bool = False


class RecoveryEngine:
    """Restores ``<source_dir>/<project>`` from a verified archive.

    An existing project directory is only touched when the caller asked
    for it: ``wipe`` deletes it, ``archive`` renames it to
    ``<project>-archived-<YYYYMMDD-HHMMSS>``. With neither, recovery fails
    with ``ConflictError`` before anything is modified.
    """

    def __init__(
        self,
        fs: FileSystem,
        codec: ArchiveCodec,
        source_dir: Path,
        backup_dir: Path,
        *,
        clock: Callable[[], datetime] = time_utils.now,
        chunk_size_kb: int = 1024,
        logger=None,
    ) -> None:
        self.fs = fs
        self.codec = codec
        self.source_dir = Path(source_dir)
        self.backup_dir = Path(backup_dir)
        self.clock = clock
        self.chunk_size_kb = chunk_size_kb
        self.logger = logger or get_logger(self.__class__.__name__)

    def list_versions(self, project: str) -> List[BackupEntry]:
        return list(Manifest.load(self.fs, self.backup_dir, project).backups)

    def verify(self, project: str, version: str = "") -> BackupEntry:
        entry = self._find_entry(project, version)
        archive_path = self.backup_dir / project / entry.file
        try:
            actual = compute_sha256(archive_path, fs=self.fs, chunk_size_kb=self.chunk_size_kb)
        except FileNotFoundError as exc:
            raise NotFoundError(f"archive missing: {archive_path}") from exc
        except OSError as exc:
            raise BackupIOError(f"reading {archive_path}: {exc}") from exc

        if actual != entry.sha256:
            raise IntegrityError(f"checksum mismatch for {entry.file}: expected {entry.sha256}, got {actual}")
        return entry

    def recover(self, project: str, options: RecoverOptions | None = None) -> Path:
        options = options or RecoverOptions()
        entry = self._find_entry(project, options.version)

        try:
            self.verify(project, entry.version)
        except CodebakError as exc:
            raise IntegrityError(f"verification failed: {exc}") from exc

        target = self.source_dir / project
        if self.fs.exists(target):
            self._clear_target(project, target, options)

        archive_path = self.backup_dir / project / entry.file
        self.codec.extract(archive_path, self.source_dir)
        self.logger.info("RECOVERED: %s from %s", project, entry.file)
        return target

    def _clear_target(self, project: str, target: Path, options: RecoverOptions) -> None:
        if options.wipe:
            try:
                self.fs.remove_tree(target)
            except OSError as exc:
                raise BackupIOError(f"removing {target}: {exc}") from exc
            self.logger.info("WIPED: %s", target)
        elif options.archive:
            archived = self.source_dir / f"{project}-archived-{time_utils.format_version(self.clock())}"
            try:
                self.fs.rename(target, archived)
            except OSError as exc:
                raise BackupIOError(f"archiving {target}: {exc}") from exc
            self.logger.info("ARCHIVED: %s -> %s", target, archived.name)
        else:
            raise ConflictError(f"project already exists: {target} (use wipe or archive)")

    def _find_entry(self, project: str, version: str) -> BackupEntry:
        manifest = Manifest.load(self.fs, self.backup_dir, project)
        entry = manifest.find_backup(version)
        if entry is None:
            if version:
                raise NotFoundError(f"version {version} not found for {project}")
            raise NotFoundError(f"no backups found for {project}")
        return entry
