"""Archive codec capability."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Protocol, runtime_checkable

from ..models import ArchiveCreateResult, ArchiveFileInfo


@runtime_checkable
class ArchiveCodec(Protocol):
    def create(self, destination: Path, source_dir: Path, exclude: Iterable[str]) -> ArchiveCreateResult:
        """Archive ``source_dir`` under ``<source_dir.name>/`` at ``destination``."""
        ...

    def extract(self, archive_path: Path, dest_dir: Path) -> None:
        ...

    def list(self, archive_path: Path) -> Dict[str, ArchiveFileInfo]:
        """Map of relative path (project prefix stripped) to entry metadata."""
        ...

    def read_file(self, archive_path: Path, rel_path: str, project: str) -> bytes:
        ...
