import os
from pathlib import Path

import pytest

from codebak.utils import path_utils


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("node_modules", True),
        ("cache.pyc", True),
        (".DS_Store", True),
        ("main.py", False),
        ("node_modules_backup", False),
    ],
)
def test_should_exclude(name: str, expected: bool) -> None:
    assert path_utils.should_exclude(name, ["node_modules", "*.pyc", ".DS_Store"]) is expected


def test_should_exclude_is_case_sensitive() -> None:
    assert path_utils.should_exclude("MAIN.PYC", ["*.pyc"]) is False


@pytest.mark.parametrize(
    ("target", "expected"),
    [
        ("/home/user", True),
        ("/home/user/code/a.txt", True),
        ("/home/user/../other", False),
        ("/home/username/a.txt", False),
    ],
)
def test_is_within_dir(target: str, expected: bool) -> None:
    assert path_utils.is_within_dir(Path("/home/user"), Path(target)) is expected


def test_archive_name_uses_forward_slashes() -> None:
    assert path_utils.archive_name("proj", Path("src") / "pkg" / "a.go") == "proj/src/pkg/a.go"


def test_strip_project_prefix() -> None:
    assert path_utils.strip_project_prefix("proj/src/a.go") == "src/a.go"
    assert path_utils.strip_project_prefix("README") == "README"


def test_display_path_escapes_undecodable_bytes() -> None:
    name = os.fsdecode(b"bad\xff.txt")

    shown = path_utils.display_path(Path("/code") / name)

    assert shown == "/code/bad\\udcff.txt"
    shown.encode("utf-8")
