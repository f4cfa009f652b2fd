"""Line-level differs for text files stored in two archive versions."""

from __future__ import annotations

import difflib
from typing import Callable, Dict, List, Sequence

from ..models import DiffLine, LineKind

LineDiffer = Callable[[Sequence[str], Sequence[str]], List[DiffLine]]

DEFAULT_SNIFF_BYTES = 8000


def is_binary(content: bytes, sniff_bytes: int = DEFAULT_SNIFF_BYTES) -> bool:
    """NUL byte or invalid UTF-8 within the first ``sniff_bytes`` bytes."""
    if not content:
        return False
    head = content[:sniff_bytes]
    if b"\x00" in head:
        return True
    try:
        head.decode("utf-8")
    except UnicodeDecodeError as exc:
        # A multibyte sequence cut off by the sniff window is still text.
        truncated = len(content) > sniff_bytes and exc.reason == "unexpected end of data"
        return not truncated
    return False


def split_lines(content: bytes) -> List[str]:
    return content.decode("utf-8", errors="replace").split("\n")


def greedy_line_diff(lines_a: Sequence[str], lines_b: Sequence[str]) -> List[DiffLine]:
    """Walk both sides once, preferring deletions over additions.

    When the heads differ, the A line is emitted as deleted if it does not
    occur anywhere in the rest of B; otherwise the B head is emitted as
    added. Cheap, but not a minimal edit script.
    """
    result: list[DiffLine] = []
    i = j = 0
    while i < len(lines_a) or j < len(lines_b):
        if i < len(lines_a) and j < len(lines_b) and lines_a[i] == lines_b[j]:
            result.append(DiffLine(i + 1, j + 1, LineKind.UNCHANGED, lines_a[i]))
            i += 1
            j += 1
        elif i < len(lines_a) and (j >= len(lines_b) or lines_a[i] not in lines_b[j:]):
            result.append(DiffLine(i + 1, 0, LineKind.DELETED, lines_a[i]))
            i += 1
        else:
            result.append(DiffLine(0, j + 1, LineKind.ADDED, lines_b[j]))
            j += 1
    return result


def sequence_line_diff(lines_a: Sequence[str], lines_b: Sequence[str]) -> List[DiffLine]:
    matcher = difflib.SequenceMatcher(None, lines_a, lines_b, autojunk=False)
    result: list[DiffLine] = []
    for tag, a_start, a_end, b_start, b_end in matcher.get_opcodes():
        if tag == "equal":
            for offset in range(a_end - a_start):
                result.append(
                    DiffLine(a_start + offset + 1, b_start + offset + 1, LineKind.UNCHANGED, lines_a[a_start + offset])
                )
            continue
        # replace = deletions followed by additions
        for index in range(a_start, a_end):
            result.append(DiffLine(index + 1, 0, LineKind.DELETED, lines_a[index]))
        for index in range(b_start, b_end):
            result.append(DiffLine(0, index + 1, LineKind.ADDED, lines_b[index]))
    return result


LINE_DIFFERS: Dict[str, LineDiffer] = {
    "greedy": greedy_line_diff,
    "sequence": sequence_line_diff,
}


def get_line_differ(name: str) -> LineDiffer:
    try:
        return LINE_DIFFERS[name]
    except KeyError:
        raise ValueError(f"unknown diff algorithm: {name}") from None
