"""Shared exceptions and helpers for the chunking core."""

from __future__ import annotations

import os
from pathlib import Path


class ShardianError(Exception):
    """Base exception for chunking core errors."""


class ConfigError(ShardianError):
    """Raised when configuration is invalid or missing."""


class ChunkIOError(ShardianError):
    """Raised when a file cannot be opened, read, or stat'ed."""


class EncryptionError(ShardianError):
    """Raised when encryption or decryption fails."""


class MissingKeyError(EncryptionError):
    """Raised when a cipher operation is requested without a configured key."""


class AuthenticationError(EncryptionError):
    """Raised when an encrypted chunk fails its integrity check."""


class ManifestError(ShardianError):
    """Raised when a manifest cannot be parsed or validated."""


def atomic_write(path: Path, data: str, mode: str = "w") -> None:
    """
    Write data atomically to a file.

    Args:
        path: Destination path.
        data: Data to write.
        mode: File mode.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_suffix(path.suffix + ".tmp")
    with open(temp_path, mode, encoding="utf-8") as file_handle:
        file_handle.write(data)
        file_handle.flush()
        os.fsync(file_handle.fileno())
    temp_path.replace(path)
