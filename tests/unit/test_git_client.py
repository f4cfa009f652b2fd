import shutil
import subprocess
from pathlib import Path

import pytest

from codebak.adapters import GitCLIClient

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def _git(repo: Path, *args: str) -> str:
    result = subprocess.run(["git", *args], cwd=repo, check=True, capture_output=True, text=True)
    return result.stdout.strip()


def test_plain_directory_is_not_a_repository(tmp_path: Path) -> None:
    client = GitCLIClient()
    assert client.is_repository(tmp_path) is False


def test_missing_git_binary_yields_empty_revision(tmp_path: Path) -> None:
    client = GitCLIClient(git_binary="git-does-not-exist")
    assert client.current_revision(tmp_path) == ""


@requires_git
def test_current_revision(tmp_path: Path) -> None:
    _git(tmp_path, "init")
    _git(tmp_path, "config", "user.email", "dev@example.com")
    _git(tmp_path, "config", "user.name", "Dev")
    (tmp_path / "README.md").write_text("hello", encoding="utf-8")
    _git(tmp_path, "add", "-A")
    _git(tmp_path, "commit", "-m", "Initial commit")

    client = GitCLIClient()

    assert client.is_repository(tmp_path) is True
    assert client.current_revision(tmp_path) == _git(tmp_path, "rev-parse", "HEAD")


@requires_git
def test_repository_without_commits(tmp_path: Path) -> None:
    _git(tmp_path, "init")

    client = GitCLIClient()

    assert client.is_repository(tmp_path) is True
    assert client.current_revision(tmp_path) == ""
