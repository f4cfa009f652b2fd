import json
from pathlib import Path

import pytest

from codebak.config import ConfigManager
from codebak.utils.errors import ConfigError


def test_config_load_defaults() -> None:
    config = ConfigManager()
    assert config.get("source_dir") == "~/code"
    assert config.get("backup_dir") == "~/.backups"
    assert config.get("retention.keep_last") == 30
    assert config.get("hash.chunk_size_kb") == 1024
    assert config.get("archive.max_entry_size_bytes") == 10 * 1024 * 1024 * 1024
    assert config.get("diff.algorithm") == "greedy"
    assert config.get("diff.binary_sniff_bytes") == 8000
    assert config.get("log.file") is None
    assert "node_modules" in config.get("exclude")
    assert "*.pyc" in config.get("exclude")
    assert config.validate_config() == []


def test_config_user_file_overrides_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps({"backup_dir": "/mnt/backups", "retention": {"keep_last": 5}}),
        encoding="utf-8",
    )

    config = ConfigManager(config_path)

    assert config.get("backup_dir") == "/mnt/backups"
    assert config.get("retention.keep_last") == 5
    assert config.get("hash.chunk_size_kb") == 1024


def test_config_missing_user_file_uses_defaults(tmp_path: Path) -> None:
    config = ConfigManager(tmp_path / "absent.json")
    assert config.get("retention.keep_last") == 30


def test_config_get_path_expands_home() -> None:
    config = ConfigManager()
    assert config.get_path("source_dir") == Path.home() / "code"
    assert config.get_path("log.file") is None


def test_config_validation() -> None:
    config = ConfigManager()
    config.set("retention.keep_last", -1)
    config.set("diff.algorithm", "myers")
    config.set("exclude", "node_modules")

    errors = config.validate_config()

    assert any(error.startswith("retention.keep_last") for error in errors)
    assert any(error.startswith("diff.algorithm") for error in errors)
    assert any(error.startswith("exclude") for error in errors)


def test_config_save_round_trip(tmp_path: Path) -> None:
    config = ConfigManager()
    config.set("source_dir", "/work")
    config_path = tmp_path / "nested" / "config.json"

    config.save_user_config(config_path)

    assert ConfigManager(config_path).get("source_dir") == "/work"


def test_config_accessors() -> None:
    config = ConfigManager()
    config.set("retention.keep_last", 7)

    assert config.keep_last() == 7
    assert config.exclude_patterns()[0] == "node_modules"


@pytest.mark.parametrize("content", ["{broken", "[1, 2]"])
def test_config_unreadable_user_file(tmp_path: Path, content: str) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        ConfigManager(config_path)


@pytest.mark.parametrize("section", ["retention", "hash", "archive", "diff", "git", "log"])
def test_config_validation_rejects_non_object_sections(section: str) -> None:
    config = ConfigManager()
    config.set(section, 5)

    errors = config.validate_config()

    assert f"{section}: must be an object" in errors
