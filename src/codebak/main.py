from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from . import __version__
from .adapters import GitCLIClient, OSFileSystem, ZipArchiveCodec
from .config import ConfigManager, default_config_path
from .core import (
    BackupEngine,
    DiffEngine,
    RecoverOptions,
    RecoveryEngine,
    RetentionPolicy,
    get_line_differ,
)
from .models import ChangeStatus
from .utils import reporting
from .utils.errors import CodebakError, ConfigError
from .utils.logger import get_logger


@dataclass
class Services:
    config: ConfigManager
    source_dir: Path
    backup_dir: Path
    log_file: Optional[Path]

    def backup_engine(self) -> BackupEngine:
        fs = OSFileSystem()
        return BackupEngine(
            fs,
            GitCLIClient(self.config.get("git.binary", "git"), logger=self._logger("GitCLIClient")),
            self._codec(),
            chunk_size_kb=self.config.get("hash.chunk_size_kb", 1024),
            logger=self._logger("BackupEngine"),
        )

    def recovery_engine(self) -> RecoveryEngine:
        return RecoveryEngine(
            OSFileSystem(),
            self._codec(),
            self.source_dir,
            self.backup_dir,
            chunk_size_kb=self.config.get("hash.chunk_size_kb", 1024),
            logger=self._logger("RecoveryEngine"),
        )

    def diff_engine(self) -> DiffEngine:
        return DiffEngine(
            self._codec(),
            self.backup_dir,
            line_differ=get_line_differ(self.config.get("diff.algorithm", "greedy")),
            binary_sniff_bytes=self.config.get("diff.binary_sniff_bytes", 8000),
            logger=self._logger("DiffEngine"),
        )

    def _codec(self) -> ZipArchiveCodec:
        return ZipArchiveCodec(
            max_entry_size=self.config.get("archive.max_entry_size_bytes"),
            chunk_size_kb=self.config.get("hash.chunk_size_kb", 1024),
            logger=self._logger("ZipArchiveCodec"),
        )

    def _logger(self, name: str):
        return get_logger(name, self.log_file)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    config_path = Path(args.config).expanduser() if args.config else default_config_path()
    if args.command == "init":
        return _run_init(config_path)

    try:
        config = ConfigManager(config_path)
    except ConfigError as exc:
        print(f"Error loading config: {exc}", file=sys.stderr)
        return 1

    problems = config.validate_config()
    if problems:
        for problem in problems:
            print(f"Invalid config: {problem}", file=sys.stderr)
        return 1

    services = Services(
        config=config,
        source_dir=config.get_path("source_dir"),
        backup_dir=config.get_path("backup_dir"),
        log_file=config.get_path("log.file"),
    )
    handlers = {
        "run": _run_backup,
        "list": _run_list,
        "status": _run_status,
        "verify": _run_verify,
        "recover": _run_recover,
        "diff": _run_diff,
    }
    try:
        return handlers[args.command](args, services, config_path)
    except CodebakError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="codebak", description="Incremental code backup tool")
    parser.add_argument("--config", help="Path to config file", default=None)
    parser.add_argument("--version", action="version", version=f"codebak v{__version__}")

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("init", help="Write the default config file")
    subparsers.add_parser("status", help="Show configured directories")

    run = subparsers.add_parser("run", help="Back up changed projects")
    run.add_argument("project", nargs="?", help="Back up only this project")

    list_cmd = subparsers.add_parser("list", help="List backups of a project")
    list_cmd.add_argument("project")

    verify = subparsers.add_parser("verify", help="Verify an archive checksum")
    verify.add_argument("project")
    verify.add_argument("--version", dest="backup_version", default="", help="YYYYMMDD-HHMMSS (default: latest)")

    recover = subparsers.add_parser("recover", help="Restore a project from a backup")
    recover.add_argument("project")
    recover.add_argument("--version", dest="backup_version", default="", help="YYYYMMDD-HHMMSS (default: latest)")
    disposition = recover.add_mutually_exclusive_group()
    disposition.add_argument("--wipe", action="store_true", help="Delete the current project first")
    disposition.add_argument("--archive", action="store_true", help="Rename the current project first")

    diff = subparsers.add_parser("diff", help="Compare two backups of a project")
    diff.add_argument("project")
    diff.add_argument("version_a")
    diff.add_argument("version_b")
    diff.add_argument("--file", dest="file_path", help="Show line changes for one file")

    return parser


def _run_init(config_path: Path) -> int:
    if config_path.exists():
        print(f"Config already exists at {config_path}")
        return 1
    try:
        ConfigManager().save_user_config(config_path)
    except OSError as exc:
        print(f"Error saving config: {exc}", file=sys.stderr)
        return 1
    print(f"Created config at {config_path}")
    return 0


def _run_backup(args: argparse.Namespace, services: Services, config_path: Path) -> int:
    config = services.config
    engine = services.backup_engine()
    exclude = config.exclude_patterns()
    retention = RetentionPolicy(keep_last=config.keep_last())

    print(f"=> Scanning {services.source_dir}...")
    if args.project:
        results = [
            engine.backup_project(args.project, services.source_dir, services.backup_dir, exclude, retention)
        ]
    else:
        results = engine.run_backup(services.source_dir, services.backup_dir, exclude, retention)

    print()
    print(reporting.build_run_summary(results), end="")
    return 1 if any(result.error is not None for result in results) else 0


def _run_list(args: argparse.Namespace, services: Services, config_path: Path) -> int:
    versions = services.recovery_engine().list_versions(args.project)
    print(reporting.format_versions(args.project, versions), end="")
    return 0


def _run_status(args: argparse.Namespace, services: Services, config_path: Path) -> int:
    print("codebak status:")
    print(f"  Source:  {services.source_dir}")
    print(f"  Backup:  {services.backup_dir}")
    print(f"  Config:  {config_path}")
    return 0


def _run_verify(args: argparse.Namespace, services: Services, config_path: Path) -> int:
    try:
        entry = services.recovery_engine().verify(args.project, args.backup_version)
    except CodebakError as exc:
        print(f"Verification failed: {exc}", file=sys.stderr)
        return 1
    print(f"* Checksum verified for {args.project} ({entry.version})")
    return 0


def _run_recover(args: argparse.Namespace, services: Services, config_path: Path) -> int:
    options = RecoverOptions(version=args.backup_version, wipe=args.wipe, archive=args.archive)
    if options.wipe:
        print(f"! Recovering {args.project} (wiping current)...")
    elif options.archive:
        print(f"! Recovering {args.project} (archiving current)...")
    else:
        print(f"Recovering {args.project}...")

    try:
        services.recovery_engine().recover(args.project, options)
    except CodebakError as exc:
        print(f"Recovery failed: {exc}", file=sys.stderr)
        return 1
    print(f"* Successfully recovered {args.project}")
    return 0


def _run_diff(args: argparse.Namespace, services: Services, config_path: Path) -> int:
    engine = services.diff_engine()
    result = engine.compute_diff(args.project, args.version_a, args.version_b)
    if not args.file_path:
        print(reporting.format_diff(result), end="")
        return 0

    statuses = {change.path: change.status for change in result.changes}
    status = statuses.get(args.file_path)
    if status is None:
        print(f"No differences in {args.file_path}")
        return 0
    file_diff = engine.compute_file_diff(
        args.project,
        args.version_a,
        args.version_b,
        args.file_path,
        ChangeStatus(status),
    )
    print(reporting.format_file_diff(file_diff), end="")
    return 1 if file_diff.error else 0


if __name__ == "__main__":
    raise SystemExit(main())
