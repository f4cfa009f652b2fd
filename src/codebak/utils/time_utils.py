"""時間戳處理工具。"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

VERSION_FORMAT = "%Y%m%d-%H%M%S"
ARCHIVE_SUFFIX = ".zip"

_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def now() -> datetime:
    return datetime.now().astimezone()


def format_version(moment: datetime) -> str:
    return moment.strftime(VERSION_FORMAT)


def archive_file_name(moment: datetime) -> str:
    return f"{format_version(moment)}{ARCHIVE_SUFFIX}"


def version_from_file(file_name: str) -> str:
    if file_name.endswith(ARCHIVE_SUFFIX):
        return file_name[: -len(ARCHIVE_SUFFIX)]
    return file_name


def parse_version(version: str) -> Optional[datetime]:
    try:
        return datetime.strptime(version_from_file(version), VERSION_FORMAT)
    except ValueError:
        return None


def to_iso(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return moment.isoformat()


def from_iso(value: str) -> datetime:
    # Manifests written by older releases use RFC3339 with nanoseconds and "Z".
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    value = _FRACTION_RE.sub(r"\1", value)
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed
