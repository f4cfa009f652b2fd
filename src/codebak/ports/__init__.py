"""Capabilities the engine consumes, expressed as structural protocols.

Each protocol has a production adapter and an in-memory adapter under
``codebak.adapters``.
"""

from .archive import ArchiveCodec
from .filesystem import FileSystem
from .snapshot import SnapshotClient
from .vcs import VersionControl

__all__ = ["ArchiveCodec", "FileSystem", "SnapshotClient", "VersionControl"]
