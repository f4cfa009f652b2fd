"""Per-project backup history persisted as ``manifest.json``."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..models import BackupEntry
from ..ports.filesystem import FileSystem
from ..utils import time_utils
from ..utils.errors import BackupIOError, ManifestFormatError
from ..utils.logger import get_logger

MANIFEST_FILE_NAME = "manifest.json"


def manifest_path(backup_dir: Path, project: str) -> Path:
    return backup_dir / project / MANIFEST_FILE_NAME


@dataclass
class Manifest:
    """Chronological (oldest first) list of a project's backups.

    Entries are only ever appended, or dropped from the oldest end by
    ``prune``; they are never reordered or edited in place.
    """

    project: str
    source: str = ""
    backups: List[BackupEntry] = field(default_factory=list)

    @classmethod
    def load(cls, fs: FileSystem, backup_dir: Path, project: str) -> "Manifest":
        path = manifest_path(backup_dir, project)
        try:
            raw = fs.read_bytes(path)
        except FileNotFoundError:
            return cls(project=project)
        except OSError as exc:
            raise BackupIOError(f"loading manifest {path}: {exc}") from exc

        try:
            data = json.loads(raw.decode("utf-8"))
            backups = [BackupEntry.from_dict(item) for item in data.get("backups") or []]
            return cls(
                project=str(data.get("project") or project),
                source=str(data.get("source") or ""),
                backups=backups,
            )
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise ManifestFormatError(f"malformed manifest {path}: {exc}") from exc

    def to_dict(self) -> dict[str, object]:
        return {
            "project": self.project,
            "source": self.source,
            "backups": [entry.to_dict() for entry in self.backups],
        }

    def save(self, fs: FileSystem, backup_dir: Path) -> Path:
        path = manifest_path(backup_dir, self.project)
        temp_path = path.with_suffix(".json.tmp")
        payload = json.dumps(self.to_dict(), ensure_ascii=False, indent=2) + "\n"
        try:
            fs.makedirs(path.parent)
            fs.write_bytes(temp_path, payload.encode("utf-8"))
            fs.rename(temp_path, path)
        except OSError as exc:
            raise BackupIOError(f"saving manifest {path}: {exc}") from exc
        return path

    def add_backup(self, entry: BackupEntry) -> None:
        self.backups.append(entry)

    def latest_backup(self) -> Optional[BackupEntry]:
        if not self.backups:
            return None
        return self.backups[-1]

    def find_backup(self, version: str = "") -> Optional[BackupEntry]:
        """Latest entry for an empty ``version``, else the entry whose archive is ``<version>.zip``."""
        if not version:
            return self.latest_backup()
        wanted = time_utils.version_from_file(version) + time_utils.ARCHIVE_SUFFIX
        for entry in self.backups:
            if entry.file == wanted:
                return entry
        return None

    def prune(self, fs: FileSystem, backup_dir: Path, keep_last: int) -> List[str]:
        """Keep the ``keep_last`` newest entries and delete the older archives.

        An entry is dropped even when its archive cannot be deleted; only the
        names that were actually removed (or already gone) are returned.
        """
        if keep_last <= 0 or len(self.backups) <= keep_last:
            return []

        logger = get_logger("Manifest")
        to_remove = len(self.backups) - keep_last
        deleted: list[str] = []
        for entry in self.backups[:to_remove]:
            archive_path = backup_dir / self.project / entry.file
            try:
                fs.remove(archive_path)
            except FileNotFoundError:
                pass
            except OSError as exc:
                logger.warning("PRUNE_FAILED: %s (%s)", archive_path, exc)
                continue
            deleted.append(entry.file)

        self.backups = self.backups[to_remove:]
        return deleted
