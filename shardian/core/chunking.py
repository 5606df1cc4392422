"""Logic for splitting files and building Merkle roots over their chunks."""

import hashlib
import logging
from pathlib import Path
from typing import Iterable, List, Sequence, Union

from ..common.constants import EMPTY_MERKLE_ROOT
from ..utils import ChunkIOError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def validate_chunk_size(chunk_size: int) -> int:
    """Reject chunk sizes that are not positive ints (bool included)."""
    if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size <= 0:
        raise ValueError("Chunk size must be a positive integer.")
    return chunk_size


def chunk_count(file_size: int, chunk_size: int) -> int:
    """
    Number of chunks a file of ``file_size`` bytes splits into.

    Args:
        file_size: File size in bytes.
        chunk_size: Size per chunk in bytes.

    Returns:
        ceil(file_size / chunk_size), or 0 for an empty file.
    """
    validate_chunk_size(chunk_size)
    return (file_size + chunk_size - 1) // chunk_size


def hash_chunk(data: bytes) -> bytes:
    """
    Generate the SHA-256 digest of a chunk.

    Args:
        data: Chunk data

    Returns:
        32-byte digest
    """
    return hashlib.sha256(data).digest()


def split_file(file_path: PathLike, chunk_size: int) -> List[bytes]:
    """
    Read a file sequentially into ``chunk_size`` pieces.

    Args:
        file_path: Path to the file.
        chunk_size: Size per chunk in bytes.

    Returns:
        Ordered list of chunks; only the last one may be shorter.

    Raises:
        ChunkIOError: If the file cannot be opened or read.
    """
    validate_chunk_size(chunk_size)

    chunks: List[bytes] = []
    try:
        with open(file_path, "rb") as infile:
            while True:
                chunk = infile.read(chunk_size)
                if not chunk:
                    break
                chunks.append(chunk)
    except OSError as exc:
        raise ChunkIOError(f"Failed to read {file_path}: {exc}") from exc

    logger.debug("Split %s into %d chunk(s) of up to %d bytes", file_path, len(chunks), chunk_size)
    return chunks


def leaf_hashes(chunks: Iterable[bytes]) -> List[bytes]:
    """Hash every chunk, preserving order."""
    return [hash_chunk(chunk) for chunk in chunks]


def merkle_parent(left: bytes, right: bytes) -> bytes:
    return hash_chunk(left + right)


def merkle_root_from_hashes(hashes: Sequence[bytes]) -> bytes:
    """
    Fold an ordered list of leaf hashes into a Merkle root.

    An odd node at the end of a level is paired with itself rather than
    promoted. No leaves gives ``EMPTY_MERKLE_ROOT`` (32 zero bytes).

    Args:
        hashes: Leaf hashes in chunk order.

    Returns:
        32-byte root.
    """
    level = list(hashes)
    if not level:
        return EMPTY_MERKLE_ROOT

    while len(level) > 1:
        next_level = []
        for i in range(0, len(level), 2):
            left = level[i]
            right = level[i + 1] if i + 1 < len(level) else left
            next_level.append(merkle_parent(left, right))
        level = next_level

    return level[0]


def merkle_root(chunks: Iterable[bytes]) -> bytes:
    """
    Compute the Merkle root over the SHA-256 leaves of ``chunks``.

    Args:
        chunks: Chunk data in order.

    Returns:
        32-byte root.
    """
    return merkle_root_from_hashes(leaf_hashes(chunks))
