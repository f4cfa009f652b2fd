"""Hash calculation helpers."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import BinaryIO, Iterable

from ..ports.filesystem import FileSystem

DEFAULT_CHUNK_SIZE_KB = 1024


def hash_stream(
    handle: BinaryIO,
    algorithms: Iterable[str] = ("sha256",),
    chunk_size_kb: int = DEFAULT_CHUNK_SIZE_KB,
) -> dict[str, str]:
    hashers = {algo: hashlib.new(algo) for algo in algorithms}
    while True:
        chunk = handle.read(chunk_size_kb * 1024)
        if not chunk:
            break
        for hasher in hashers.values():
            hasher.update(chunk)
    return {algo: hasher.hexdigest() for algo, hasher in hashers.items()}


def compute_sha256(
    path: Path,
    *,
    fs: FileSystem,
    chunk_size_kb: int = DEFAULT_CHUNK_SIZE_KB,
) -> str:
    """Stream ``path`` through SHA-256 without loading it into memory.

    OSError propagates to the caller.
    """
    with fs.open_read(path) as handle:
        return hash_stream(handle, ("sha256",), chunk_size_kb)["sha256"]
