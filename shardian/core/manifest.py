"""Manifest assembly, JSON serialization and parsing."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..common.constants import (
    HASH_SIZE,
    MANIFEST_ID_PREFIX_LENGTH,
    MANIFEST_SUFFIX,
    NONCE_SIZE,
    TAG_SIZE,
)
from ..common.types import EncryptedChunk, ProcessOutput
from ..utils import ChunkIOError, ManifestError, atomic_write
from .chunking import (
    PathLike,
    chunk_count,
    hash_chunk,
    leaf_hashes,
    merkle_root_from_hashes,
    split_file,
    validate_chunk_size,
)

logger = logging.getLogger(__name__)


def _require_int(data: Dict[str, Any], key: str, where: str) -> int:
    if key not in data:
        raise ManifestError(f"Missing field '{key}' in {where}.")
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ManifestError(f"Field '{key}' in {where} must be an integer.")
    return value


def _require_str(data: Dict[str, Any], key: str, where: str) -> str:
    if key not in data:
        raise ManifestError(f"Missing field '{key}' in {where}.")
    value = data[key]
    if not isinstance(value, str):
        raise ManifestError(f"Field '{key}' in {where} must be a string.")
    return value


def _require_hex(data: Dict[str, Any], key: str, where: str) -> bytes:
    value = _require_str(data, key, where)
    try:
        return bytes.fromhex(value)
    except ValueError as exc:
        raise ManifestError(f"Field '{key}' in {where} is not valid hex.") from exc


def _check_chunk_sizes(chunks: Sequence["ChunkMetadata"], file_size: int, chunk_size: int) -> None:
    # Sizes cover the hashed bytes; encrypted chunks carry a tag on top of the payload.
    payloads = [
        chunk.size - TAG_SIZE if chunk.nonce is not None else chunk.size for chunk in chunks
    ]
    if any(payload <= 0 or payload > chunk_size for payload in payloads):
        raise ManifestError(f"Chunk payloads must be between 1 and {chunk_size} bytes.")
    if any(payload != chunk_size for payload in payloads[:-1]):
        raise ManifestError("Only the last chunk may be shorter than chunk_size.")
    if sum(payloads) != file_size:
        raise ManifestError(f"Chunk sizes sum to {sum(payloads)}, expected {file_size}.")


@dataclass(frozen=True)
class ChunkMetadata:
    """Per-chunk entry of a manifest.

    ``size`` and ``hash`` describe the bytes that were hashed: the plaintext
    chunk in plain manifests, the ciphertext (tag included) in encrypted
    ones. ``nonce`` is set only for encrypted chunks.
    """
    index: int
    hash: bytes
    size: int
    nonce: Optional[bytes] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "index": self.index,
            "hash": self.hash.hex(),
            "size": self.size,
            "nonce": self.nonce.hex() if self.nonce is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChunkMetadata":
        """Create from dictionary."""
        if not isinstance(data, dict):
            raise ManifestError("Chunk entry must be an object.")
        index = _require_int(data, "index", "chunk entry")
        where = f"chunk {index}"
        digest = _require_hex(data, "hash", where)
        size = _require_int(data, "size", where)
        nonce = _require_hex(data, "nonce", where) if data.get("nonce") is not None else None

        if len(digest) != HASH_SIZE:
            raise ManifestError(f"Chunk {index} hash must be {HASH_SIZE} bytes.")
        if nonce is not None and len(nonce) != NONCE_SIZE:
            raise ManifestError(f"Chunk {index} nonce must be {NONCE_SIZE} bytes.")
        if size < 0:
            raise ManifestError(f"Chunk {index} size must be non-negative.")
        return cls(index=index, hash=digest, size=size, nonce=nonce)


@dataclass(frozen=True)
class FileManifest:
    """
    Serializable descriptor of a chunked file.

    ``file_id`` is the lowercase hex of ``merkle_root``: a content address
    over whatever bytes produced the leaves. For encrypted manifests those
    are ciphertexts, so the id changes every time the file is re-encrypted.
    """
    file_id: str
    file_name: str
    file_size: int
    chunk_size: int
    merkle_root: bytes
    chunks: List[ChunkMetadata] = field(default_factory=list)

    @property
    def chunk_count(self) -> int:
        return len(self.chunks)

    @property
    def encrypted(self) -> bool:
        return any(chunk.nonce is not None for chunk in self.chunks)

    def get_chunk(self, index: int) -> Optional[ChunkMetadata]:
        """Get chunk metadata by index."""
        if 0 <= index < len(self.chunks):
            return self.chunks[index]
        return None

    def verify_chunk(self, index: int, data: bytes) -> bool:
        """
        Check stored bytes against the recorded hash.

        For encrypted manifests ``data`` is the ciphertext as stored, not
        the decrypted plaintext.
        """
        chunk = self.get_chunk(index)
        if chunk is None:
            return False
        return len(data) == chunk.size and hash_chunk(data) == chunk.hash

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "file_id": self.file_id,
            "file_name": self.file_name,
            "file_size": self.file_size,
            "chunk_size": self.chunk_size,
            "merkle_root": self.merkle_root.hex(),
            "chunks": [chunk.to_dict() for chunk in self.chunks],
        }

    def to_json(self, indent: Optional[int] = 4) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileManifest":
        """
        Create from dictionary, validating the manifest invariants.

        Raises:
            ManifestError: If a field is missing, mistyped or inconsistent.
        """
        file_id = _require_str(data, "file_id", "manifest")
        file_name = _require_str(data, "file_name", "manifest")
        file_size = _require_int(data, "file_size", "manifest")
        chunk_size = _require_int(data, "chunk_size", "manifest")
        root = _require_hex(data, "merkle_root", "manifest")
        raw_chunks = data.get("chunks")
        if not isinstance(raw_chunks, list):
            raise ManifestError("Manifest field 'chunks' must be a list.")

        if len(root) != HASH_SIZE:
            raise ManifestError(f"Merkle root must be {HASH_SIZE} bytes.")
        if file_id != root.hex():
            raise ManifestError("file_id does not match merkle_root.")
        if file_size < 0 or chunk_size <= 0:
            raise ManifestError("file_size must be >= 0 and chunk_size > 0.")

        chunks = [ChunkMetadata.from_dict(item) for item in raw_chunks]
        expected = chunk_count(file_size, chunk_size)
        if len(chunks) != expected:
            raise ManifestError(
                f"Manifest lists {len(chunks)} chunk(s), expected {expected} "
                f"for {file_size} bytes at chunk size {chunk_size}."
            )
        if [chunk.index for chunk in chunks] != list(range(len(chunks))):
            raise ManifestError("Chunk indices must be contiguous and start at 0.")
        if len({chunk.nonce is None for chunk in chunks}) > 1:
            raise ManifestError("Manifest mixes encrypted and plain chunks.")
        _check_chunk_sizes(chunks, file_size, chunk_size)

        return cls(
            file_id=file_id,
            file_name=file_name,
            file_size=file_size,
            chunk_size=chunk_size,
            merkle_root=root,
            chunks=chunks,
        )

    @classmethod
    def from_json(cls, text: str) -> "FileManifest":
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise ManifestError(f"Manifest is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ManifestError("Manifest JSON must be an object.")
        return cls.from_dict(data)


def create_manifest(
    file_name: str,
    file_size: int,
    chunk_size: int,
    merkle_root: bytes,
    chunks: List[ChunkMetadata],
) -> FileManifest:
    """
    Create a manifest, deriving ``file_id`` from the Merkle root.

    Args:
        file_name: Base name of the source file
        file_size: Size of the source file in bytes
        chunk_size: Chunk size used to split it
        merkle_root: 32-byte root over the chunk leaves
        chunks: Chunk metadata in index order

    Returns:
        FileManifest
    """
    return FileManifest(
        file_id=merkle_root.hex(),
        file_name=file_name,
        file_size=file_size,
        chunk_size=chunk_size,
        merkle_root=merkle_root,
        chunks=chunks,
    )


def _stat_file(path: PathLike) -> Tuple[str, int]:
    file_path = Path(path)
    try:
        size = file_path.stat().st_size
    except OSError as exc:
        raise ChunkIOError(f"Failed to stat {file_path}: {exc}") from exc
    return file_path.name, size


def manifest_from_plain_file(path: PathLike, chunk_size: int) -> FileManifest:
    """
    Build a plain manifest by splitting and hashing ``path``.

    Args:
        path: File to describe
        chunk_size: Size per chunk in bytes

    Returns:
        FileManifest with ``nonce=None`` on every chunk

    Raises:
        ChunkIOError: If the file cannot be stat'ed or read
    """
    validate_chunk_size(chunk_size)
    file_name, file_size = _stat_file(path)
    chunks = split_file(path, chunk_size)
    return _plain_manifest(file_name, file_size, chunk_size, chunks, leaf_hashes(chunks))


def manifest_from_encrypted_chunks(
    path: PathLike, chunk_size: int, encrypted_chunks: Sequence[EncryptedChunk]
) -> FileManifest:
    """
    Build an encrypted manifest from already sealed chunks.

    The Merkle root is computed over the ciphertexts in the order given.
    Chunks are trusted as supplied: the caller must pass the complete set,
    in the order the chunker produced it, for the same file and chunk size.

    Args:
        path: File the chunks were produced from
        chunk_size: Chunk size used to split it
        encrypted_chunks: Sealed chunks in index order

    Returns:
        FileManifest carrying each chunk's nonce

    Raises:
        ChunkIOError: If the file cannot be stat'ed
    """
    validate_chunk_size(chunk_size)
    file_name, file_size = _stat_file(path)
    hashes = [hash_chunk(chunk.ciphertext) for chunk in encrypted_chunks]
    return _encrypted_manifest(file_name, file_size, chunk_size, encrypted_chunks, hashes)


def manifest_from_output(path: PathLike, chunk_size: int, output: ProcessOutput) -> FileManifest:
    """
    Build the manifest matching a ``Chunker.process_file`` result.

    Raw output reuses its digests; encrypted output is handled like
    ``manifest_from_encrypted_chunks``.
    """
    validate_chunk_size(chunk_size)
    if output.kind == "encrypted":
        return manifest_from_encrypted_chunks(path, chunk_size, output.chunks)
    file_name, file_size = _stat_file(path)
    return _plain_manifest(file_name, file_size, chunk_size, output.chunks, output.hashes)


def _plain_manifest(
    file_name: str,
    file_size: int,
    chunk_size: int,
    chunks: Sequence[bytes],
    hashes: Sequence[bytes],
) -> FileManifest:
    metadata = [
        ChunkMetadata(index=index, hash=digest, size=len(chunk))
        for index, (chunk, digest) in enumerate(zip(chunks, hashes))
    ]
    manifest = create_manifest(
        file_name, file_size, chunk_size, merkle_root_from_hashes(hashes), metadata
    )
    logger.debug("Built plain manifest %s for %s", manifest.file_id, file_name)
    return manifest


def _encrypted_manifest(
    file_name: str,
    file_size: int,
    chunk_size: int,
    encrypted_chunks: Sequence[EncryptedChunk],
    hashes: Sequence[bytes],
) -> FileManifest:
    metadata = [
        ChunkMetadata(index=chunk.index, hash=digest, size=chunk.size, nonce=chunk.nonce)
        for chunk, digest in zip(encrypted_chunks, hashes)
    ]
    manifest = create_manifest(
        file_name, file_size, chunk_size, merkle_root_from_hashes(hashes), metadata
    )
    logger.debug("Built encrypted manifest %s for %s", manifest.file_id, file_name)
    return manifest


def build_manifest_name(manifest: FileManifest) -> str:
    """
    Build a manifest file name like 3f2a...e1-manifest.json.

    Args:
        manifest: Manifest to name

    Returns:
        Manifest filename
    """
    return f"{manifest.file_id[:MANIFEST_ID_PREFIX_LENGTH]}{MANIFEST_SUFFIX}"


def save_manifest(manifest: FileManifest, output_dir: Path) -> Path:
    """
    Save a manifest as JSON without overwriting an existing one.

    Args:
        manifest: Manifest to save
        output_dir: Output directory

    Returns:
        Path to saved manifest file
    """
    base_name = build_manifest_name(manifest)
    manifest_path = output_dir / base_name

    counter = 1
    while manifest_path.exists():
        stem = base_name[: -len(".json")]
        manifest_path = output_dir / f"{stem}_{counter}.json"
        counter += 1

    atomic_write(manifest_path, manifest.to_json())
    logger.info("Saved manifest for %s to %s", manifest.file_name, manifest_path)
    return manifest_path


def parse_manifest(manifest_path: Path) -> FileManifest:
    """
    Parse a manifest JSON file.

    Args:
        manifest_path: Path to manifest file

    Returns:
        FileManifest

    Raises:
        ManifestError: If manifest cannot be read or is invalid
    """
    try:
        with open(manifest_path, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as exc:
        raise ManifestError(f"Failed to read manifest {manifest_path.name}: {exc}") from exc
    return FileManifest.from_json(text)
