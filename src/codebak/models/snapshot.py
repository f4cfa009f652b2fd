"""Encrypted snapshot metadata returned by a snapshot client."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List


@dataclass(frozen=True)
class Snapshot:
    id: str
    time: datetime
    hostname: str = ""
    paths: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)

    def has_tags(self, tags: List[str]) -> bool:
        return all(tag in self.tags for tag in tags)
