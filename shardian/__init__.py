"""Content-addressed file chunking with Merkle roots and per-chunk AES-GCM."""

from .common.constants import EMPTY_MERKLE_ROOT
from .common.types import EncryptedChunk, EncryptedOutput, ProcessOutput, RawOutput
from .core.chunker import Chunker
from .core.crypto import generate_key
from .core.manifest import (
    ChunkMetadata,
    FileManifest,
    manifest_from_encrypted_chunks,
    manifest_from_plain_file,
    parse_manifest,
    save_manifest,
)
from .utils import (
    AuthenticationError,
    ChunkIOError,
    ConfigError,
    EncryptionError,
    ManifestError,
    MissingKeyError,
    ShardianError,
)

__version__ = "0.1.0"

__all__ = [
    "EMPTY_MERKLE_ROOT",
    "EncryptedChunk",
    "EncryptedOutput",
    "ProcessOutput",
    "RawOutput",
    "Chunker",
    "generate_key",
    "ChunkMetadata",
    "FileManifest",
    "manifest_from_encrypted_chunks",
    "manifest_from_plain_file",
    "parse_manifest",
    "save_manifest",
    "AuthenticationError",
    "ChunkIOError",
    "ConfigError",
    "EncryptionError",
    "ManifestError",
    "MissingKeyError",
    "ShardianError",
]
