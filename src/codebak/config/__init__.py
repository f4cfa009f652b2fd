"""設定模組。"""

from .manager import ConfigManager, default_config_path
from .schema import validate_config

__all__ = ["ConfigManager", "default_config_path", "validate_config"]
