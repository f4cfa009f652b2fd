"""Version-control adapter that shells out to the git CLI."""

from __future__ import annotations

import subprocess
from pathlib import Path

from ..utils.logger import get_logger


class GitCLIClient:
    def __init__(self, git_binary: str = "git", logger=None) -> None:
        self.git_binary = git_binary
        self.logger = logger or get_logger(self.__class__.__name__)

    def current_revision(self, path: Path) -> str:
        try:
            result = subprocess.run(
                [self.git_binary, "rev-parse", "HEAD"],
                cwd=path,
                check=False,
                capture_output=True,
                text=True,
            )
        except (FileNotFoundError, NotADirectoryError) as exc:
            self.logger.warning("git rev-parse failed in %s: %s", path, exc)
            return ""
        if result.returncode != 0:
            return ""
        return result.stdout.strip()

    def is_repository(self, path: Path) -> bool:
        return (path / ".git").exists()
