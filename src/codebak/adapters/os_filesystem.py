"""Filesystem adapter backed by ``os``/``shutil``."""

from __future__ import annotations

import os
import shutil
import stat as stat_module
from pathlib import Path
from typing import BinaryIO, Iterator, List

from ..models import FileStat


def _to_stat(path: Path, result: os.stat_result) -> FileStat:
    return FileStat(
        path=path,
        size_bytes=result.st_size,
        mtime=result.st_mtime,
        is_dir=stat_module.S_ISDIR(result.st_mode),
        is_symlink=stat_module.S_ISLNK(result.st_mode),
        mode=stat_module.S_IMODE(result.st_mode),
    )


class OSFileSystem:
    def list_dir(self, path: Path) -> List[FileStat]:
        entries: list[FileStat] = []
        with os.scandir(path) as iterator:
            for entry in iterator:
                entries.append(_to_stat(Path(entry.path), entry.stat(follow_symlinks=False)))
        return sorted(entries, key=lambda item: item.name)

    def stat(self, path: Path) -> FileStat:
        return _to_stat(path, path.stat())

    def exists(self, path: Path) -> bool:
        return path.exists()

    def is_dir(self, path: Path) -> bool:
        return path.is_dir()

    def makedirs(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)

    def read_bytes(self, path: Path) -> bytes:
        return path.read_bytes()

    def write_bytes(self, path: Path, data: bytes) -> None:
        path.write_bytes(data)

    def open_read(self, path: Path) -> BinaryIO:
        return path.open("rb")

    def remove(self, path: Path) -> None:
        path.unlink()

    def remove_tree(self, path: Path) -> None:
        shutil.rmtree(path)

    def rename(self, src: Path, dst: Path) -> None:
        os.replace(src, dst)

    def walk(self, root: Path) -> Iterator[FileStat]:
        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            for name in sorted(dirnames + filenames):
                candidate = current / name
                try:
                    yield _to_stat(candidate, candidate.lstat())
                except OSError:
                    continue
