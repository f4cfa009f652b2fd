"""設定檔驗證邏輯。"""

from __future__ import annotations

from typing import Any

DIFF_ALGORITHMS = {"greedy", "sequence"}


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def validate_config(config: dict[str, Any]) -> list[str]:
    errors: list[str] = []

    def add_error(path: str, message: str) -> None:
        errors.append(f"{path}: {message}")

    def section(name: str) -> dict[str, Any] | None:
        value = config.get(name, {})
        if not isinstance(value, dict):
            add_error(name, "must be an object")
            return None
        return value

    for key in ("source_dir", "backup_dir"):
        value = config.get(key)
        if not isinstance(value, str) or not value.strip():
            add_error(key, "must be a non-empty string")

    exclude = config.get("exclude", [])
    if not isinstance(exclude, list) or any(not isinstance(item, str) for item in exclude):
        add_error("exclude", "must be a list of strings")

    retention = section("retention")
    keep_last = retention.get("keep_last", 0) if retention is not None else 0
    if not isinstance(keep_last, int) or isinstance(keep_last, bool) or keep_last < 0:
        add_error("retention.keep_last", "must be an integer >= 0 (0 disables pruning)")

    hash_config = section("hash")
    if hash_config is not None and not _is_positive_int(hash_config.get("chunk_size_kb")):
        add_error("hash.chunk_size_kb", "must be a positive integer")

    archive = section("archive")
    if archive is not None and not _is_positive_int(archive.get("max_entry_size_bytes")):
        add_error("archive.max_entry_size_bytes", "must be a positive integer")

    diff = section("diff")
    if diff is not None:
        if diff.get("algorithm") not in DIFF_ALGORITHMS:
            add_error("diff.algorithm", f"must be one of {sorted(DIFF_ALGORITHMS)}")
        if not _is_positive_int(diff.get("binary_sniff_bytes")):
            add_error("diff.binary_sniff_bytes", "must be a positive integer")

    git = section("git")
    binary = git.get("binary") if git is not None else ""
    if git is not None and (not isinstance(binary, str) or not binary.strip()):
        add_error("git.binary", "must be a non-empty string")

    log = section("log")
    log_file = log.get("file") if log is not None else None
    if log_file is not None and (not isinstance(log_file, str) or not log_file.strip()):
        add_error("log.file", "must be null or a non-empty string")

    return errors
