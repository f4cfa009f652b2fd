"""Outcome of archiving and backing up one project."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .error_record import ProcessError


@dataclass
class ArchiveCreateResult:
    file_count: int
    skipped: List[ProcessError] = field(default_factory=list)


@dataclass
class BackupResult:
    project: str
    archive_path: Optional[Path] = None
    size_bytes: int = 0
    file_count: int = 0
    git_head: str = ""
    skipped: bool = False
    reason: str = ""
    error: Optional[Exception] = None
    skipped_files: List[ProcessError] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.error is None and not self.skipped
