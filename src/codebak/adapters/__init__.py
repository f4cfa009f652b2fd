"""Port implementations: production adapters and in-memory doubles."""

from .git_client import GitCLIClient
from .memory import InMemoryArchiveCodec, InMemoryFileSystem, InMemorySnapshotClient, StaticVersionControl
from .os_filesystem import OSFileSystem
from .zip_codec import MAX_DECOMPRESS_SIZE, ZipArchiveCodec

__all__ = [
    "GitCLIClient",
    "InMemoryArchiveCodec",
    "InMemoryFileSystem",
    "InMemorySnapshotClient",
    "MAX_DECOMPRESS_SIZE",
    "OSFileSystem",
    "StaticVersionControl",
    "ZipArchiveCodec",
]
