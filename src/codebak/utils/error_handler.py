"""錯誤收集與報告工具。"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..models.error_record import ErrorLevel, ProcessError


@dataclass
class ErrorHandler:
    """Collects per-file problems that do not abort the surrounding operation."""

    errors: List[ProcessError] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.errors)

    def add(self, error: ProcessError) -> None:
        self.errors.append(error)

    def add_warning(self, code: str, message: str, file_path: Optional[str] = None) -> None:
        self.add(ProcessError(code=code, level=ErrorLevel.RECOVERABLE, message=message, file_path=file_path))

    def add_exception(self, code: str, exc: BaseException, file_path: Optional[str] = None) -> None:
        self.add(ProcessError.from_exception(code, exc, file_path))

    def get_by_level(self, level: ErrorLevel) -> List[ProcessError]:
        return [error for error in self.errors if error.level == level]

    def file_paths(self) -> List[str]:
        return [error.file_path for error in self.errors if error.file_path]

    def to_dicts(self) -> List[dict[str, object]]:
        return [error.to_dict() for error in self.errors]
