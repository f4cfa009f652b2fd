"""Zip archive codec with hardened extraction."""

from __future__ import annotations

import os
import shutil
import stat
import struct
import zipfile
import zlib
from pathlib import Path
from typing import BinaryIO, Dict, Iterable, Iterator

from ..models import ArchiveCreateResult, ArchiveFileInfo
from ..utils import path_utils
from ..utils.error_handler import ErrorHandler
from ..utils.errors import BackupIOError, NotFoundError, SecurityError
from ..utils.logger import get_logger

# Largest uncompressed entry accepted on extraction (10 GiB).
MAX_DECOMPRESS_SIZE = 10 * 1024 * 1024 * 1024

SKIP_CODE = "W-ARCHIVE-SKIP"

_LOCAL_HEADER_SIGNATURE = b"PK\x03\x04"
_LOCAL_HEADER_SIZE = 30
_FLAG_ENCRYPTED = 0x1


def _is_symlink(info: zipfile.ZipInfo) -> bool:
    mode = info.external_attr >> 16
    return stat.S_ISLNK(mode)


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


class ZipArchiveCodec:
    """Creates and reads ``<project>/<relative path>`` rooted zip archives.

    Extraction validates every entry before writing anything: symlink
    entries, entries resolving outside the destination and entries declaring
    more than ``max_entry_size`` bytes all raise ``SecurityError``. Entry data
    is inflated from the raw archive bytes, at most declared size + 1 bytes,
    and its length and CRC-32 are checked against the central directory, so
    forged headers cannot inflate an entry past what it declared.
    """

    def __init__(
        self,
        *,
        max_entry_size: int = MAX_DECOMPRESS_SIZE,
        chunk_size_kb: int = 1024,
        logger=None,
    ) -> None:
        self.max_entry_size = max_entry_size
        self.chunk_size = chunk_size_kb * 1024
        self.logger = logger or get_logger(self.__class__.__name__)

    def create(self, destination: Path, source_dir: Path, exclude: Iterable[str]) -> ArchiveCreateResult:
        patterns = list(exclude)
        errors = ErrorHandler()
        file_count = 0
        base_name = source_dir.name

        try:
            archive = zipfile.ZipFile(
                destination,
                "w",
                compression=zipfile.ZIP_DEFLATED,
                strict_timestamps=False,
            )
        except OSError as exc:
            raise BackupIOError(f"creating archive {destination}: {exc}") from exc

        def on_walk_error(exc: OSError) -> None:
            errors.add_exception(SKIP_CODE, exc, exc.filename)
            self.logger.warning("SKIPPED_UNREADABLE: %s (%s)", exc.filename, exc)

        try:
            with archive:
                if path_utils.should_exclude(base_name, patterns):
                    return ArchiveCreateResult(file_count=0)

                for dirpath, dirnames, filenames in os.walk(source_dir, onerror=on_walk_error):
                    current_dir = Path(dirpath)
                    dirnames[:] = sorted(
                        name for name in dirnames if not path_utils.should_exclude(name, patterns)
                    )

                    for name in sorted(filenames):
                        if path_utils.should_exclude(name, patterns):
                            continue
                        file_path = current_dir / name
                        if file_path.is_symlink():
                            self.logger.info("SKIPPED_SYMLINK: %s", file_path)
                            continue

                        arcname = path_utils.archive_name(base_name, file_path.relative_to(source_dir))
                        # ValueError: the name cannot be stored as UTF-8 in the archive.
                        try:
                            self._write_entry(archive, file_path, arcname)
                        except (OSError, ValueError) as exc:
                            shown = path_utils.display_path(file_path)
                            errors.add_exception(SKIP_CODE, exc, shown)
                            self.logger.warning("SKIPPED_UNREADABLE: %s (%s)", shown, exc)
                            continue
                        file_count += 1
        except OSError as exc:
            raise BackupIOError(f"writing archive {destination}: {exc}") from exc

        return ArchiveCreateResult(file_count=file_count, skipped=list(errors.errors))

    def _write_entry(self, archive: zipfile.ZipFile, file_path: Path, arcname: str) -> None:
        info = zipfile.ZipInfo.from_file(file_path, arcname, strict_timestamps=False)
        info.compress_type = zipfile.ZIP_DEFLATED
        # Open the source first so an unreadable file never leaves a header behind.
        with file_path.open("rb") as source:
            with archive.open(info, "w") as target:
                shutil.copyfileobj(source, target, self.chunk_size)

    def extract(self, archive_path: Path, dest_dir: Path) -> None:
        dest_root = Path(os.path.normpath(os.path.abspath(dest_dir)))
        with self._open(archive_path) as archive, self._open_raw(archive_path) as raw:
            planned = [(info, self._resolve_target(info, dest_root)) for info in archive.infolist()]

            for info, target in planned:
                try:
                    if info.is_dir():
                        target.mkdir(parents=True, exist_ok=True)
                        continue
                    target.parent.mkdir(parents=True, exist_ok=True)
                except OSError as exc:
                    raise BackupIOError(f"creating directory for {info.filename}: {exc}") from exc
                self._extract_entry(raw, info, target)

    def _resolve_target(self, info: zipfile.ZipInfo, dest_root: Path) -> Path:
        if _is_symlink(info):
            raise SecurityError(f"symlinks not supported in backups: {info.filename}")

        target = Path(os.path.join(dest_root, info.filename))
        if not path_utils.is_within_dir(dest_root, target):
            raise SecurityError(f"invalid file path (path traversal detected): {info.filename}")

        if info.file_size > self.max_entry_size:
            raise SecurityError(
                f"file too large: {info.filename} declares {info.file_size} bytes, "
                f"limit is {self.max_entry_size} bytes"
            )
        return Path(os.path.normpath(target))

    def _extract_entry(self, raw: BinaryIO, info: zipfile.ZipInfo, target: Path) -> None:
        try:
            with target.open("wb") as output:
                for chunk in self._entry_chunks(raw, info):
                    output.write(chunk)
        except (SecurityError, BackupIOError):
            _discard(target)
            raise
        except (OSError, zlib.error) as exc:
            _discard(target)
            raise BackupIOError(f"extracting {info.filename}: {exc}") from exc

        mode = stat.S_IMODE(info.external_attr >> 16)
        if mode:
            os.chmod(target, mode)

    def _entry_chunks(self, raw: BinaryIO, info: zipfile.ZipInfo) -> Iterator[bytes]:
        """Yield the entry's content straight from the raw archive bytes.

        At most declared size + 1 bytes are ever inflated. Content whose
        length or CRC-32 differs from the central directory raises
        ``SecurityError``; a chunk past the declared size is never yielded.
        """
        if info.flag_bits & _FLAG_ENCRYPTED:
            raise BackupIOError(f"encrypted entries not supported: {info.filename}")

        raw.seek(info.header_offset)
        header = raw.read(_LOCAL_HEADER_SIZE)
        if len(header) != _LOCAL_HEADER_SIZE or header[:4] != _LOCAL_HEADER_SIGNATURE:
            raise SecurityError(f"{info.filename}: bad local file header")
        name_length, extra_length = struct.unpack("<HH", header[26:30])
        raw.seek(info.header_offset + _LOCAL_HEADER_SIZE + name_length + extra_length)

        declared = info.file_size
        written = 0
        crc = 0
        for chunk in self._inflate(raw, info, declared + 1):
            written += len(chunk)
            if written > declared:
                raise SecurityError(f"{info.filename}: decompressed size exceeds declared size")
            crc = zlib.crc32(chunk, crc)
            yield chunk

        if written != declared or crc != info.CRC:
            raise SecurityError(f"{info.filename}: content does not match its header")

    def _inflate(self, raw: BinaryIO, info: zipfile.ZipInfo, limit: int) -> Iterator[bytes]:
        remaining = info.compress_size
        if info.compress_type == zipfile.ZIP_STORED:
            while remaining > 0 and limit > 0:
                chunk = raw.read(min(self.chunk_size, remaining, limit))
                if not chunk:
                    return
                remaining -= len(chunk)
                limit -= len(chunk)
                yield chunk
            return

        if info.compress_type != zipfile.ZIP_DEFLATED:
            raise BackupIOError(f"unsupported compression method {info.compress_type}: {info.filename}")

        inflater = zlib.decompressobj(-zlib.MAX_WBITS)
        pending = b""
        while limit > 0 and not inflater.eof:
            if not pending:
                if remaining <= 0:
                    break
                pending = raw.read(min(self.chunk_size, remaining))
                if not pending:
                    break
                remaining -= len(pending)
            output = inflater.decompress(pending, min(self.chunk_size, limit))
            pending = inflater.unconsumed_tail
            if output:
                limit -= len(output)
                yield output
        if limit > 0 and not inflater.eof:
            tail = inflater.flush()
            if tail:
                yield tail[:limit]

    def list(self, archive_path: Path) -> Dict[str, ArchiveFileInfo]:
        files: dict[str, ArchiveFileInfo] = {}
        with self._open(archive_path) as archive:
            for info in archive.infolist():
                # Only entries below a project directory are project files.
                if info.is_dir() or "/" not in info.filename:
                    continue
                files[path_utils.strip_project_prefix(info.filename)] = ArchiveFileInfo(
                    size=info.file_size,
                    crc32=info.CRC,
                )
        return files

    def read_file(self, archive_path: Path, rel_path: str, project: str) -> bytes:
        entry_name = f"{project}/{rel_path}"
        with self._open(archive_path) as archive, self._open_raw(archive_path) as raw:
            try:
                info = archive.getinfo(entry_name)
            except KeyError:
                raise NotFoundError(f"file not found in archive: {rel_path}") from None
            if info.file_size > self.max_entry_size:
                raise SecurityError(f"file too large: {entry_name}")
            try:
                return b"".join(self._entry_chunks(raw, info))
            except (OSError, zlib.error) as exc:
                raise BackupIOError(f"reading {entry_name}: {exc}") from exc

    def _open(self, archive_path: Path) -> zipfile.ZipFile:
        try:
            return zipfile.ZipFile(archive_path)
        except FileNotFoundError as exc:
            raise NotFoundError(f"archive not found: {archive_path}") from exc
        except (OSError, zipfile.BadZipFile) as exc:
            raise BackupIOError(f"opening archive {archive_path}: {exc}") from exc

    def _open_raw(self, archive_path: Path) -> BinaryIO:
        try:
            return archive_path.open("rb")
        except FileNotFoundError as exc:
            raise NotFoundError(f"archive not found: {archive_path}") from exc
        except OSError as exc:
            raise BackupIOError(f"opening archive {archive_path}: {exc}") from exc
