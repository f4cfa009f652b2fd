"""Filesystem entry metadata shared by the filesystem adapters."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class FileStat:
    path: Path
    size_bytes: int
    mtime: float
    is_dir: bool = False
    is_symlink: bool = False
    mode: int = 0o644

    @property
    def name(self) -> str:
        return self.path.name
