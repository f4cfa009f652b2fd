"""Exception types raised by the backup engine."""

from __future__ import annotations


class CodebakError(Exception):
    """Base class for every failure the engine reports to callers."""


class NotFoundError(CodebakError):
    """A project directory, backup version or archive entry does not exist."""


class IntegrityError(CodebakError):
    """An archive on disk no longer matches its recorded checksum."""


class ConflictError(CodebakError):
    """The recovery target exists and no disposition was chosen."""


class SecurityError(CodebakError):
    """An archive entry was rejected during extraction."""


class BackupIOError(CodebakError):
    """Filesystem or archive failure, wrapped with the operation that failed."""


class ManifestFormatError(BackupIOError):
    """A manifest file exists but cannot be parsed."""


class ConfigError(CodebakError):
    """The user config file cannot be read or is not a JSON object."""


def with_context(exc: CodebakError, context: str) -> CodebakError:
    """Same error kind, message prefixed with the operation that failed."""
    return type(exc)(f"{context}: {exc}")
