"""Core chunking, hashing, sealing and manifest logic."""

from .chunker import Chunker
from .chunking import chunk_count, hash_chunk, merkle_root, merkle_root_from_hashes, split_file
from .crypto import NonceSource, generate_key
from .manifest import (
    ChunkMetadata,
    FileManifest,
    build_manifest_name,
    create_manifest,
    manifest_from_encrypted_chunks,
    manifest_from_output,
    manifest_from_plain_file,
    parse_manifest,
    save_manifest,
)

__all__ = [
    "Chunker",
    "chunk_count",
    "hash_chunk",
    "merkle_root",
    "merkle_root_from_hashes",
    "split_file",
    "NonceSource",
    "generate_key",
    "ChunkMetadata",
    "FileManifest",
    "build_manifest_name",
    "create_manifest",
    "manifest_from_encrypted_chunks",
    "manifest_from_output",
    "manifest_from_plain_file",
    "parse_manifest",
    "save_manifest",
]
