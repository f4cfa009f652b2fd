"""工具模組。"""

from . import path_utils, time_utils
from .errors import (
    BackupIOError,
    CodebakError,
    ConfigError,
    ConflictError,
    IntegrityError,
    ManifestFormatError,
    NotFoundError,
    SecurityError,
)

__all__ = [
    "path_utils",
    "time_utils",
    "BackupIOError",
    "CodebakError",
    "ConfigError",
    "ConflictError",
    "IntegrityError",
    "ManifestFormatError",
    "NotFoundError",
    "SecurityError",
]
