"""預設設定值。"""

DEFAULT_EXCLUDE = [
    "node_modules",
    ".venv",
    "__pycache__",
    ".git",
    "*.pyc",
    ".DS_Store",
    ".idea",
    ".vscode",
    "target",
    "dist",
    "build",
]

DEFAULT_CONFIG = {
    "source_dir": "~/code",
    "backup_dir": "~/.backups",
    "exclude": list(DEFAULT_EXCLUDE),
    "retention": {
        "keep_last": 30,
    },
    "hash": {
        "chunk_size_kb": 1024,
    },
    "archive": {
        "max_entry_size_bytes": 10 * 1024 * 1024 * 1024,
    },
    "diff": {
        "algorithm": "greedy",
        "binary_sniff_bytes": 8000,
    },
    "git": {
        "binary": "git",
    },
    "log": {
        "file": None,
    },
}
