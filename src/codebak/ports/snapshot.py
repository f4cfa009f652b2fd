"""Encrypted snapshot backups for sensitive paths.

Only the contract lives here; the process wrapper around the external tool
is not part of this package.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Protocol, Sequence, runtime_checkable

from ..models import Snapshot

LATEST_SNAPSHOT = "latest"


@runtime_checkable
class SnapshotClient(Protocol):
    def init(self, repo_path: Path, password: str) -> None:
        """Create a repository; fails when one already exists at ``repo_path``."""
        ...

    def backup(
        self,
        repo_path: Path,
        password: str,
        paths: Sequence[Path],
        tags: Sequence[str] = (),
    ) -> str:
        """Back up ``paths`` and return the new snapshot id."""
        ...

    def snapshots(
        self,
        repo_path: Path,
        password: str,
        tags: Optional[Sequence[str]] = None,
    ) -> List[Snapshot]:
        ...

    def restore(self, repo_path: Path, password: str, snapshot_id: str, target_dir: Path) -> None:
        """Restore ``snapshot_id`` (``"latest"`` when empty) into ``target_dir``."""
        ...

    def forget(self, repo_path: Path, password: str, keep_last: int, prune: bool = False) -> None:
        ...

    def is_initialized(self, repo_path: Path) -> bool:
        ...
