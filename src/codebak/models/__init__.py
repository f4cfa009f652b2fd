"""資料模型模組。"""

from .archive_info import ArchiveFileInfo
from .backup_entry import BackupEntry
from .backup_result import ArchiveCreateResult, BackupResult
from .diff import ChangeStatus, DiffLine, DiffResult, FileChange, FileDiffResult, LineKind
from .error_record import ErrorLevel, ProcessError
from .file_stat import FileStat
from .snapshot import Snapshot

__all__ = [
    "ArchiveCreateResult",
    "ArchiveFileInfo",
    "BackupEntry",
    "BackupResult",
    "ChangeStatus",
    "DiffLine",
    "DiffResult",
    "ErrorLevel",
    "FileChange",
    "FileDiffResult",
    "FileStat",
    "LineKind",
    "ProcessError",
    "Snapshot",
]
