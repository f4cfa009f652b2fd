"""codebak: versioned, checksum-verified backups of local project directories."""

__version__ = "0.3.0"
