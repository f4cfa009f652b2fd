"""Version-control capability."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class VersionControl(Protocol):
    def current_revision(self, path: Path) -> str:
        """Revision id checked out at ``path``; empty string when unknown."""
        ...

    def is_repository(self, path: Path) -> bool:
        ...
