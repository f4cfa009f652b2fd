"""設定管理器。"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, List, Optional

from ..utils.errors import ConfigError
from . import defaults
from .schema import validate_config

CONFIG_DIR_NAME = ".codebak"
CONFIG_FILE_NAME = "config.json"


def default_config_path() -> Path:
    return Path.home() / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _lookup(config: dict[str, Any], dotted_key: str, default: Any = None) -> Any:
    node: Any = config
    for part in dotted_key.split("."):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node


def _assign(config: dict[str, Any], dotted_key: str, value: Any) -> None:
    *parents, leaf = dotted_key.split(".")
    node = config
    for part in parents:
        node = node.setdefault(part, {})
    node[leaf] = value


def _read_user_file(path: Path) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        raise ConfigError(f"reading config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"reading config {path}: top level must be a JSON object")
    return data


class ConfigManager:
    """三層設定管理：預設、使用者、執行期。

    A missing user file is not an error; the defaults apply.
    """

    def __init__(self, user_config_path: Optional[Path] = None) -> None:
        self.user_config_path = user_config_path
        self._defaults = copy.deepcopy(defaults.DEFAULT_CONFIG)
        self._user = _read_user_file(user_config_path) if user_config_path else {}
        self._runtime: dict[str, Any] = {}
        self._config = _deep_merge(self._defaults, self._user)

    def get(self, key: str, default: Any = None) -> Any:
        return _lookup(self._config, key, default)

    def get_path(self, key: str) -> Optional[Path]:
        value = self.get(key)
        if not value:
            return None
        return Path(str(value)).expanduser()

    def set(self, key: str, value: Any) -> None:
        _assign(self._runtime, key, value)
        self._config = _deep_merge(_deep_merge(self._defaults, self._user), self._runtime)

    def exclude_patterns(self) -> List[str]:
        return [str(pattern) for pattern in self.get("exclude", [])]

    def keep_last(self) -> int:
        return int(self.get("retention.keep_last", 0))

    def validate_config(self) -> list[str]:
        return validate_config(self._config)

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._config)

    def save_user_config(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as handle:
            json.dump(self._config, handle, ensure_ascii=False, indent=2)
            handle.write("\n")
