import hashlib
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from codebak.adapters import InMemoryArchiveCodec, InMemoryFileSystem, StaticVersionControl
from codebak.core import BackupEngine, Manifest, RetentionPolicy
from codebak.utils.errors import BackupIOError, NotFoundError

SOURCE = Path("/code")
BACKUPS = Path("/backups")
START = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
EXCLUDE = ["node_modules", "*.pyc"]


class SteppingClock:
    def __init__(self, start: datetime = START, step: timedelta = timedelta(days=1)) -> None:
        self.current = start - step
        self.step = step

    def __call__(self) -> datetime:
        self.current += self.step
        return self.current


def _setup(revisions=None):
    fs = InMemoryFileSystem(clock=lambda: START.timestamp() - 3600)
    fs.add_file(SOURCE / "proj" / "main.go", "package main")
    fs.add_file(SOURCE / "proj" / "cache.pyc", b"\x00")
    fs.add_file(SOURCE / "proj" / "node_modules" / "dep.js", "x")
    fs.makedirs(BACKUPS)
    vcs = StaticVersionControl(revisions)
    engine = BackupEngine(fs, vcs, InMemoryArchiveCodec(fs), clock=SteppingClock())
    return fs, vcs, engine


def test_first_backup_creates_archive_and_manifest() -> None:
    fs, _, engine = _setup({str(SOURCE / "proj"): "abc1234567890"})

    result = engine.backup_project("proj", SOURCE, BACKUPS, EXCLUDE)

    assert result.succeeded
    assert result.reason == "no previous backup"
    assert result.archive_path == BACKUPS / "proj" / "20240101-120000.zip"
    assert result.file_count == 1
    assert result.git_head == "abc1234567890"

    manifest = Manifest.load(fs, BACKUPS, "proj")
    assert manifest.source == str(SOURCE / "proj")
    entry = manifest.latest_backup()
    assert entry.sha256 == hashlib.sha256(fs.read_bytes(result.archive_path)).hexdigest()
    assert entry.size_bytes == len(fs.read_bytes(result.archive_path))
    assert entry.created_at == START
    assert entry.excluded == EXCLUDE
    assert entry.git_head == "abc1234567890"


def test_unchanged_project_is_skipped() -> None:
    fs, _, engine = _setup()
    engine.backup_project("proj", SOURCE, BACKUPS, EXCLUDE)

    result = engine.backup_project("proj", SOURCE, BACKUPS, EXCLUDE)

    assert result.skipped is True
    assert result.reason == "no changes detected"
    assert result.archive_path is None
    assert len(Manifest.load(fs, BACKUPS, "proj").backups) == 1
    assert [item.name for item in fs.list_dir(BACKUPS / "proj")] == ["20240101-120000.zip", "manifest.json"]


def test_modified_file_triggers_new_backup() -> None:
    fs, _, engine = _setup()
    engine.backup_project("proj", SOURCE, BACKUPS, EXCLUDE)
    fs.set_mtime(SOURCE / "proj" / "main.go", START.timestamp() + 60)

    result = engine.backup_project("proj", SOURCE, BACKUPS, EXCLUDE)

    assert result.succeeded
    assert result.reason == "files modified since last backup"
    assert result.archive_path.name == "20240102-120000.zip"
    assert len(Manifest.load(fs, BACKUPS, "proj").backups) == 2


def test_retention_prunes_oldest_archives() -> None:
    project_path = SOURCE / "proj"
    fs, vcs, engine = _setup({str(project_path): "rev-0"})

    for index in range(4):
        vcs.set_revision(project_path, f"rev-{index}")
        result = engine.backup_project("proj", SOURCE, BACKUPS, EXCLUDE, RetentionPolicy(keep_last=2))
        assert result.succeeded

    manifest = Manifest.load(fs, BACKUPS, "proj")
    assert [entry.file for entry in manifest.backups] == ["20240103-120000.zip", "20240104-120000.zip"]
    assert not fs.exists(BACKUPS / "proj" / "20240101-120000.zip")
    assert not fs.exists(BACKUPS / "proj" / "20240102-120000.zip")
    assert fs.exists(BACKUPS / "proj" / "20240104-120000.zip")


def test_missing_project_reports_not_found() -> None:
    _, _, engine = _setup()

    result = engine.backup_project("ghost", SOURCE, BACKUPS, EXCLUDE)

    assert isinstance(result.error, NotFoundError)
    assert not result.succeeded


def test_run_backup_isolates_failures() -> None:
    fs, _, engine = _setup()
    fs.add_file(SOURCE / "broken" / "file.txt", "data")
    fs.add_file(SOURCE / ".hidden" / "file.txt", "data")
    fs.add_file(SOURCE / "notes.txt", "not a project")
    fs.errors[str(BACKUPS / "broken" / "manifest.json")] = PermissionError("denied")

    results = engine.run_backup(SOURCE, BACKUPS, EXCLUDE, RetentionPolicy(keep_last=30))

    assert [result.project for result in results] == ["broken", "proj"]
    assert isinstance(results[0].error, BackupIOError)
    assert results[1].succeeded


class _ExplodingCodec(InMemoryArchiveCodec):
    def create(self, destination, source_dir, exclude):
        if Path(source_dir).name == "broken":
            raise RuntimeError("codec bug")
        return super().create(destination, source_dir, exclude)


def test_run_backup_isolates_unexpected_exceptions() -> None:
    fs, vcs, _ = _setup()
    fs.add_file(SOURCE / "broken" / "file.txt", "data")
    engine = BackupEngine(fs, vcs, _ExplodingCodec(fs), clock=SteppingClock())

    results = engine.run_backup(SOURCE, BACKUPS, EXCLUDE)

    assert [result.project for result in results] == ["broken", "proj"]
    assert isinstance(results[0].error, BackupIOError)
    assert isinstance(results[0].error.__cause__, RuntimeError)
    assert results[1].succeeded


class _TouchingCodec(InMemoryArchiveCodec):
    """Modifies a source file while the archive is being written."""

    def __init__(self, fs, path: Path, moment: datetime) -> None:
        super().__init__(fs)
        self.path = path
        self.moment = moment

    def create(self, destination, source_dir, exclude):
        result = super().create(destination, source_dir, exclude)
        self.fs.set_mtime(self.path, self.moment.timestamp())
        return result


def test_file_modified_during_archiving_counts_as_change() -> None:
    fs, vcs, _ = _setup()
    main_go = SOURCE / "proj" / "main.go"
    codec = _TouchingCodec(fs, main_go, START + timedelta(seconds=30))
    engine = BackupEngine(fs, vcs, codec, clock=SteppingClock())

    first = engine.backup_project("proj", SOURCE, BACKUPS, EXCLUDE)
    assert Manifest.load(fs, BACKUPS, "proj").latest_backup().created_at == START
    assert first.archive_path.name == "20240101-120000.zip"

    codec.moment = START - timedelta(hours=1)
    second = engine.backup_project("proj", SOURCE, BACKUPS, EXCLUDE)

    assert second.succeeded
    assert second.reason == "files modified since last backup"


def test_list_projects() -> None:
    fs, _, engine = _setup()
    fs.add_file(SOURCE / "alpha" / "a.txt", "a")
    fs.makedirs(SOURCE / ".cache")
    fs.add_file(SOURCE / "README.md", "readme")

    assert engine.list_projects(SOURCE) == ["alpha", "proj"]


def test_list_projects_missing_source() -> None:
    _, _, engine = _setup()

    with pytest.raises(NotFoundError):
        engine.list_projects(Path("/nowhere"))
