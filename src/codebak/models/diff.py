"""Version comparison results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class ChangeStatus(str, Enum):
    MODIFIED = "M"
    ADDED = "A"
    DELETED = "D"

    @property
    def sort_order(self) -> int:
        return _STATUS_ORDER[self]


_STATUS_ORDER = {
    ChangeStatus.MODIFIED: 0,
    ChangeStatus.ADDED: 1,
    ChangeStatus.DELETED: 2,
}


class LineKind(str, Enum):
    UNCHANGED = " "
    ADDED = "+"
    DELETED = "-"


@dataclass
class FileChange:
    path: str
    status: ChangeStatus
    size_a: int = 0
    size_b: int = 0


@dataclass
class DiffResult:
    version_a: str
    version_b: str
    changes: List[FileChange] = field(default_factory=list)
    added: int = 0
    modified: int = 0
    deleted: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.changes

    def paths_with(self, status: ChangeStatus) -> List[str]:
        return [change.path for change in self.changes if change.status == status]


@dataclass(frozen=True)
class DiffLine:
    line_a: int
    line_b: int
    kind: LineKind
    content: str

    def render(self) -> str:
        return f"{self.kind.value}{self.content}"


@dataclass
class FileDiffResult:
    path: str
    version_a: str
    version_b: str
    lines: List[DiffLine] = field(default_factory=list)
    is_binary: bool = False
    error: str = ""
