"""路徑處理工具。"""

from __future__ import annotations

import fnmatch
import os
from pathlib import Path, PurePosixPath
from typing import Iterable


def should_exclude(name: str, patterns: Iterable[str]) -> bool:
    """True when a base name equals or glob-matches any exclusion pattern."""
    for pattern in patterns:
        if name == pattern:
            return True
        if fnmatch.fnmatchcase(name, pattern):
            return True
    return False


def is_within_dir(base_dir: Path, target: Path) -> bool:
    """Check ``target`` is ``base_dir`` or below it, after absolutizing both.

    The separator is appended before the prefix test so ``/home/user`` does
    not contain ``/home/username``.
    """
    base = os.path.normpath(os.path.abspath(base_dir))
    candidate = os.path.normpath(os.path.abspath(target))
    if candidate == base:
        return True
    return candidate.startswith(base.rstrip(os.sep) + os.sep)


def archive_name(project: str, relative: Path) -> str:
    return str(PurePosixPath(project, *relative.parts))


def strip_project_prefix(name: str) -> str:
    _, sep, rest = name.partition("/")
    if not sep:
        return name
    return rest


def display_path(path) -> str:
    """Printable form of a path whose name may not be valid UTF-8."""
    return str(path).encode("utf-8", "backslashreplace").decode("utf-8")
