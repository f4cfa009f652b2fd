"""Decides whether a project needs a new backup."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

from ..models import BackupEntry
from ..ports.filesystem import FileSystem
from ..ports.vcs import VersionControl
from ..utils.logger import get_logger

SHORT_REVISION_LENGTH = 7

NO_PREVIOUS_BACKUP = "no previous backup"
HEAD_UNCHANGED = "git HEAD unchanged"
FILES_MODIFIED = "files modified since last backup"
NO_CHANGES = "no changes detected"


def short_revision(revision: str) -> str:
    return revision[:SHORT_REVISION_LENGTH]


class ChangeDetector:
    def __init__(self, fs: FileSystem, vcs: VersionControl, logger=None) -> None:
        self.fs = fs
        self.vcs = vcs
        self.logger = logger or get_logger(self.__class__.__name__)

    def has_changes(self, project_path: Path, last_backup: Optional[BackupEntry]) -> Tuple[bool, str]:
        if last_backup is None:
            return True, NO_PREVIOUS_BACKUP

        if self.vcs.is_repository(project_path):
            current = self.vcs.current_revision(project_path)
            previous = last_backup.git_head
            # Only two known, non-empty revisions are conclusive.
            if current and previous:
                if current != previous:
                    return True, f"git HEAD changed: {short_revision(previous)} -> {short_revision(current)}"
                return False, HEAD_UNCHANGED

        if self._modified_since(project_path, last_backup.created_at.timestamp()):
            return True, FILES_MODIFIED
        return False, NO_CHANGES

    def _modified_since(self, project_path: Path, threshold: float) -> bool:
        try:
            if self.fs.stat(project_path).mtime > threshold:
                return True
        except OSError as exc:
            self.logger.warning("無法讀取專案資訊: %s (%s)", project_path, exc)

        for item in self.fs.walk(project_path):
            if item.mtime > threshold:
                return True
        return False
