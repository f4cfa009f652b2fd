"""One recorded archive version of a project."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List

from ..utils import time_utils


@dataclass(frozen=True)
class BackupEntry:
    file: str
    sha256: str
    size_bytes: int
    created_at: datetime
    git_head: str = ""
    file_count: int = 0
    excluded: List[str] = field(default_factory=list)

    @property
    def version(self) -> str:
        return time_utils.version_from_file(self.file)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "file": self.file,
            "sha256": self.sha256,
            "size_bytes": self.size_bytes,
            "created_at": time_utils.to_iso(self.created_at),
        }
        if self.git_head:
            payload["git_head"] = self.git_head
        payload["file_count"] = self.file_count
        payload["excluded"] = list(self.excluded)
        return payload

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BackupEntry":
        return cls(
            file=str(data["file"]),
            sha256=str(data["sha256"]),
            size_bytes=int(data.get("size_bytes", 0) or 0),
            created_at=time_utils.from_iso(str(data["created_at"])),
            git_head=str(data.get("git_head") or ""),
            file_count=int(data.get("file_count", 0) or 0),
            excluded=[str(item) for item in data.get("excluded") or []],
        )
