"""核心流程模組。"""

from .backup_engine import BackupEngine, RetentionPolicy
from .change_detector import ChangeDetector
from .diff_engine import DiffEngine
from .line_diff import get_line_differ, greedy_line_diff, is_binary, sequence_line_diff
from .manifest import Manifest, manifest_path
from .recovery import RecoverOptions, RecoveryEngine

__all__ = [
    "BackupEngine",
    "ChangeDetector",
    "DiffEngine",
    "Manifest",
    "RecoverOptions",
    "RecoveryEngine",
    "RetentionPolicy",
    "get_line_differ",
    "greedy_line_diff",
    "is_binary",
    "manifest_path",
    "sequence_line_diff",
]
