"""Common constants, types and logging shared by the core."""

from .constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_MAX_WORKERS,
    EMPTY_MERKLE_ROOT,
    HASH_SIZE,
    KEY_SIZE,
    NONCE_SIZE,
)
from .logging import setup_logging
from .types import EncryptedChunk, EncryptedOutput, ProcessOutput, RawOutput

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_MAX_WORKERS",
    "EMPTY_MERKLE_ROOT",
    "HASH_SIZE",
    "KEY_SIZE",
    "NONCE_SIZE",
    "setup_logging",
    "EncryptedChunk",
    "EncryptedOutput",
    "ProcessOutput",
    "RawOutput",
]
