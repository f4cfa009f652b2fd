"""錯誤與警告記錄。"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorLevel(str, Enum):
    INFO = "I"
    RECOVERABLE = "W"
    FATAL = "E"


@dataclass
class ProcessError:
    code: str
    level: ErrorLevel
    message: str
    file_path: Optional[str] = None

    @classmethod
    def from_exception(
        cls,
        code: str,
        exc: BaseException,
        file_path: Optional[str] = None,
        level: ErrorLevel = ErrorLevel.RECOVERABLE,
    ) -> "ProcessError":
        return cls(code=code, level=level, message=str(exc) or exc.__class__.__name__, file_path=file_path)

    def describe(self) -> str:
        if self.file_path:
            return f"[{self.code}] {self.file_path}: {self.message}"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, object]:
        return {
            "code": self.code,
            "level": self.level.value,
            "message": self.message,
            "file_path": self.file_path,
        }
