"""Per-entry metadata read back from an archive listing."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ArchiveFileInfo:
    size: int
    crc32: int
