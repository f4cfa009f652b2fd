"""日誌工具。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

LOGGER_NAMESPACE = "codebak"


def get_logger(name: str, log_file: Optional[Path] = None) -> logging.Logger:
    """Return a namespaced logger; WARNING and above also go to ``log_file``.

    The file is opened lazily so read-only commands never create it.
    """
    logger = logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)
    logger.propagate = False

    log_path = log_file or (Path.cwd() / "error.log")
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    file_handler = logging.FileHandler(log_path, encoding="utf-8", delay=True)
    file_handler.setLevel(logging.WARNING)
    file_handler.setFormatter(formatter)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(logging.INFO)
    stream_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)

    return logger
