"""In-memory adapters for every port, used by the unit tests.

Paths are normalized to POSIX strings so ``Path("/a/b")`` and
``Path("/a/b/")`` address the same node.
"""

from __future__ import annotations

import base64
import hashlib
import io
import json
import time
import zlib
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Callable, Dict, Iterable, Iterator, List, Optional, Sequence

from ..models import ArchiveCreateResult, ArchiveFileInfo, FileStat, Snapshot
from ..ports.snapshot import LATEST_SNAPSHOT
from ..utils import path_utils
from ..utils.errors import BackupIOError, NotFoundError, SecurityError


def _key(path: Path | str) -> str:
    return PurePosixPath(str(path)).as_posix()


def _parents(key: str) -> Iterator[str]:
    parent = PurePosixPath(key).parent
    while str(parent) not in {"", ".", "/"}:
        yield str(parent)
        parent = parent.parent
    if str(parent) == "/":
        yield "/"


def _is_below(key: str, root: str) -> bool:
    if root == "/":
        return key != "/"
    return key.startswith(root + "/")


@dataclass
class _MemoryFile:
    data: bytes
    mtime: float


class InMemoryFileSystem:
    """Dictionary-backed filesystem.

    ``errors`` maps a path to the exception every operation on that path
    raises, for simulating permission problems and broken disks.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self.files: Dict[str, _MemoryFile] = {}
        self.dirs: Dict[str, float] = {"/": clock()}
        self.errors: Dict[str, Exception] = {}
        self._clock = clock

    def add_file(self, path: Path | str, data: bytes | str = b"", mtime: Optional[float] = None) -> Path:
        key = _key(path)
        for parent in _parents(key):
            self.dirs.setdefault(parent, self._clock())
        payload = data.encode("utf-8") if isinstance(data, str) else data
        self.files[key] = _MemoryFile(payload, self._clock() if mtime is None else mtime)
        return Path(key)

    def set_mtime(self, path: Path | str, mtime: float) -> None:
        key = _key(path)
        if key in self.files:
            self.files[key].mtime = mtime
        elif key in self.dirs:
            self.dirs[key] = mtime
        else:
            raise FileNotFoundError(key)

    def _check(self, key: str) -> None:
        if key in self.errors:
            raise self.errors[key]

    def _stat_key(self, key: str) -> FileStat:
        if key in self.files:
            item = self.files[key]
            return FileStat(path=Path(key), size_bytes=len(item.data), mtime=item.mtime)
        if key in self.dirs:
            return FileStat(path=Path(key), size_bytes=0, mtime=self.dirs[key], is_dir=True, mode=0o755)
        raise FileNotFoundError(key)

    def list_dir(self, path: Path) -> List[FileStat]:
        key = _key(path)
        self._check(key)
        if key not in self.dirs:
            raise FileNotFoundError(key)
        children = [
            candidate
            for candidate in list(self.files) + list(self.dirs)
            if candidate != key and str(PurePosixPath(candidate).parent) == key
        ]
        return sorted((self._stat_key(child) for child in children), key=lambda item: item.name)

    def stat(self, path: Path) -> FileStat:
        key = _key(path)
        self._check(key)
        return self._stat_key(key)

    def exists(self, path: Path) -> bool:
        key = _key(path)
        return key in self.files or key in self.dirs

    def is_dir(self, path: Path) -> bool:
        return _key(path) in self.dirs

    def makedirs(self, path: Path) -> None:
        key = _key(path)
        self._check(key)
        if key in self.files:
            raise FileExistsError(key)
        for parent in _parents(key):
            self.dirs.setdefault(parent, self._clock())
        self.dirs.setdefault(key, self._clock())

    def read_bytes(self, path: Path) -> bytes:
        key = _key(path)
        self._check(key)
        if key not in self.files:
            raise FileNotFoundError(key)
        return self.files[key].data

    def write_bytes(self, path: Path, data: bytes) -> None:
        key = _key(path)
        self._check(key)
        parent = str(PurePosixPath(key).parent)
        if parent not in self.dirs:
            raise FileNotFoundError(parent)
        self.files[key] = _MemoryFile(bytes(data), self._clock())

    def open_read(self, path: Path) -> BinaryIO:
        return io.BytesIO(self.read_bytes(path))

    def remove(self, path: Path) -> None:
        key = _key(path)
        self._check(key)
        if key not in self.files:
            raise FileNotFoundError(key)
        del self.files[key]

    def remove_tree(self, path: Path) -> None:
        key = _key(path)
        self._check(key)
        if key not in self.dirs:
            raise FileNotFoundError(key)
        for candidate in [k for k in self.files if _is_below(k, key)]:
            del self.files[candidate]
        for candidate in [k for k in self.dirs if _is_below(k, key) or k == key]:
            del self.dirs[candidate]

    def rename(self, src: Path, dst: Path) -> None:
        src_key, dst_key = _key(src), _key(dst)
        self._check(src_key)
        if src_key in self.files:
            self.files[dst_key] = self.files.pop(src_key)
            return
        if src_key not in self.dirs:
            raise FileNotFoundError(src_key)
        for candidate in [k for k in self.files if _is_below(k, src_key)]:
            self.files[dst_key + candidate[len(src_key):]] = self.files.pop(candidate)
        for candidate in sorted(k for k in self.dirs if _is_below(k, src_key) or k == src_key):
            self.dirs[dst_key + candidate[len(src_key):]] = self.dirs.pop(candidate)

    def walk(self, root: Path) -> Iterator[FileStat]:
        root_key = _key(root)
        entries = sorted(k for k in list(self.dirs) + list(self.files) if _is_below(k, root_key))
        for key in entries:
            if key in self.errors:
                continue
            if key in self.files or key in self.dirs:
                yield self._stat_key(key)


class StaticVersionControl:
    """Revision ids handed out from a dictionary keyed by repository path."""

    def __init__(self, revisions: Optional[Dict[str, str]] = None) -> None:
        self.revisions: Dict[str, str] = {_key(k): v for k, v in (revisions or {}).items()}

    def set_revision(self, path: Path | str, revision: str) -> None:
        self.revisions[_key(path)] = revision

    def current_revision(self, path: Path) -> str:
        return self.revisions.get(_key(path), "")

    def is_repository(self, path: Path) -> bool:
        return _key(path) in self.revisions


class InMemoryArchiveCodec:
    """Archive codec that stores a JSON document on an ``InMemoryFileSystem``.

    The document is deterministic for a given tree, so checksums computed
    over it behave like checksums over real archive bytes.
    """

    def __init__(self, fs: InMemoryFileSystem) -> None:
        self.fs = fs

    def create(self, destination: Path, source_dir: Path, exclude: Iterable[str]) -> ArchiveCreateResult:
        patterns = list(exclude)
        source_key = _key(source_dir)
        base_name = PurePosixPath(source_key).name
        entries: dict[str, str] = {}

        if not path_utils.should_exclude(base_name, patterns):
            for item in self.fs.walk(source_dir):
                relative = PurePosixPath(_key(item.path)).relative_to(source_key)
                if any(path_utils.should_exclude(part, patterns) for part in relative.parts):
                    continue
                if item.is_dir:
                    continue
                data = self.fs.read_bytes(item.path)
                entries[str(PurePosixPath(base_name, relative))] = base64.b64encode(data).decode("ascii")

        document = json.dumps({"entries": entries}, sort_keys=True).encode("utf-8")
        self.fs.write_bytes(destination, document)
        return ArchiveCreateResult(file_count=len(entries))

    def _entries(self, archive_path: Path) -> dict[str, bytes]:
        try:
            document = json.loads(self.fs.read_bytes(archive_path).decode("utf-8"))
        except FileNotFoundError as exc:
            raise NotFoundError(f"archive not found: {archive_path}") from exc
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise BackupIOError(f"opening archive {archive_path}: {exc}") from exc
        return {name: base64.b64decode(data) for name, data in document["entries"].items()}

    def extract(self, archive_path: Path, dest_dir: Path) -> None:
        dest_key = _key(dest_dir)
        planned = []
        for name, data in self._entries(archive_path).items():
            target = PurePosixPath(dest_key, name)
            if ".." in PurePosixPath(name).parts or PurePosixPath(name).is_absolute():
                raise SecurityError(f"invalid file path (path traversal detected): {name}")
            planned.append((target, data))
        for target, data in planned:
            self.fs.add_file(target, data)

    def list(self, archive_path: Path) -> Dict[str, ArchiveFileInfo]:
        return {
            path_utils.strip_project_prefix(name): ArchiveFileInfo(size=len(data), crc32=zlib.crc32(data))
            for name, data in self._entries(archive_path).items()
            if "/" in name
        }

    def read_file(self, archive_path: Path, rel_path: str, project: str) -> bytes:
        entries = self._entries(archive_path)
        name = f"{project}/{rel_path}"
        if name not in entries:
            raise NotFoundError(f"file not found in archive: {rel_path}")
        return entries[name]


@dataclass
class _Repository:
    password: str
    snapshots: List[Snapshot] = field(default_factory=list)
    contents: Dict[str, Dict[str, bytes]] = field(default_factory=dict)


class InMemorySnapshotClient:
    """Snapshot client that keeps repositories in memory.

    When given a filesystem, ``backup`` captures file contents from it and
    ``restore`` writes them back below the target directory.
    """

    def __init__(
        self,
        fs: Optional[InMemoryFileSystem] = None,
        hostname: str = "localhost",
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.fs = fs
        self.hostname = hostname
        self._clock = clock
        self._repos: Dict[str, _Repository] = {}

    def _open(self, repo_path: Path, password: str) -> _Repository:
        repo = self._repos.get(_key(repo_path))
        if repo is None:
            raise NotFoundError(f"repository not initialized at {repo_path}")
        if repo.password != password:
            raise BackupIOError(f"wrong password for repository {repo_path}")
        return repo

    def init(self, repo_path: Path, password: str) -> None:
        key = _key(repo_path)
        if key in self._repos:
            raise BackupIOError(f"repository already initialized at {repo_path}")
        self._repos[key] = _Repository(password=password)

    def backup(
        self,
        repo_path: Path,
        password: str,
        paths: Sequence[Path],
        tags: Sequence[str] = (),
    ) -> str:
        if not paths:
            raise ValueError("no paths specified for backup")
        repo = self._open(repo_path, password)
        moment = self._clock()
        digest = hashlib.sha256(f"{_key(repo_path)}|{len(repo.snapshots)}|{moment.isoformat()}".encode("utf-8"))
        snapshot_id = digest.hexdigest()[:8]

        captured: Dict[str, bytes] = {}
        if self.fs is not None:
            for root in paths:
                if _key(root) in self.fs.files:
                    captured[_key(root)] = self.fs.read_bytes(root)
                    continue
                for item in self.fs.walk(root):
                    if not item.is_dir:
                        captured[_key(item.path)] = self.fs.read_bytes(item.path)

        repo.contents[snapshot_id] = captured
        repo.snapshots.append(
            Snapshot(
                id=snapshot_id,
                time=moment,
                hostname=self.hostname,
                paths=[_key(path) for path in paths],
                tags=list(tags),
            )
        )
        return snapshot_id

    def snapshots(
        self,
        repo_path: Path,
        password: str,
        tags: Optional[Sequence[str]] = None,
    ) -> List[Snapshot]:
        repo = self._open(repo_path, password)
        if not tags:
            return list(repo.snapshots)
        return [snapshot for snapshot in repo.snapshots if snapshot.has_tags(list(tags))]

    def restore(self, repo_path: Path, password: str, snapshot_id: str, target_dir: Path) -> None:
        repo = self._open(repo_path, password)
        if not repo.snapshots:
            raise NotFoundError(f"no snapshots in repository {repo_path}")
        if not snapshot_id or snapshot_id == LATEST_SNAPSHOT:
            snapshot_id = repo.snapshots[-1].id
        if snapshot_id not in {snapshot.id for snapshot in repo.snapshots}:
            raise NotFoundError(f"snapshot not found: {snapshot_id}")
        if self.fs is None:
            return
        for original, data in repo.contents[snapshot_id].items():
            self.fs.add_file(PurePosixPath(_key(target_dir), original.lstrip("/")), data)

    def forget(self, repo_path: Path, password: str, keep_last: int, prune: bool = False) -> None:
        repo = self._open(repo_path, password)
        if keep_last <= 0 or len(repo.snapshots) <= keep_last:
            return
        dropped = repo.snapshots[:-keep_last]
        repo.snapshots = repo.snapshots[-keep_last:]
        if prune:
            for snapshot in dropped:
                repo.contents.pop(snapshot.id, None)

    def is_initialized(self, repo_path: Path) -> bool:
        return _key(repo_path) in self._repos
