"""Filesystem capability."""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Iterator, List, Protocol, runtime_checkable

from ..models.file_stat import FileStat


@runtime_checkable
class FileSystem(Protocol):
    """Everything the engine does to disk outside the archive codec.

    Missing paths raise ``FileNotFoundError`` like the ``os`` functions do.
    """

    def list_dir(self, path: Path) -> List[FileStat]:
        """Immediate children of ``path``, sorted by name."""
        ...

    def stat(self, path: Path) -> FileStat:
        ...

    def exists(self, path: Path) -> bool:
        ...

    def is_dir(self, path: Path) -> bool:
        ...

    def makedirs(self, path: Path) -> None:
        ...

    def read_bytes(self, path: Path) -> bytes:
        ...

    def write_bytes(self, path: Path, data: bytes) -> None:
        ...

    def open_read(self, path: Path) -> BinaryIO:
        ...

    def remove(self, path: Path) -> None:
        ...

    def remove_tree(self, path: Path) -> None:
        ...

    def rename(self, src: Path, dst: Path) -> None:
        ...

    def walk(self, root: Path) -> Iterator[FileStat]:
        """Yield every entry below ``root`` (not ``root`` itself), top-down.

        Entries that cannot be stat'ed are skipped. Symlinks are reported but
        never followed.
        """
        ...
