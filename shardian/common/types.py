"""Type definitions for chunker output."""

from dataclasses import dataclass, field
from typing import ClassVar, List, Union


@dataclass(frozen=True)
class EncryptedChunk:
    """One AES-256-GCM sealed chunk.

    ``ciphertext`` carries the 16-byte authentication tag at its end, as
    produced by ``AESGCM.encrypt``.
    """
    index: int
    nonce: bytes
    ciphertext: bytes

    @property
    def size(self) -> int:
        return len(self.ciphertext)


@dataclass(frozen=True)
class RawOutput:
    """Plaintext chunks together with their SHA-256 digests."""
    kind: ClassVar[str] = "raw"

    chunks: List[bytes] = field(default_factory=list)
    hashes: List[bytes] = field(default_factory=list)

    @property
    def chunk_count(self) -> int:
        return len(self.chunks)


@dataclass(frozen=True)
class EncryptedOutput:
    """Encrypted chunks in index order."""
    kind: ClassVar[str] = "encrypted"

    chunks: List[EncryptedChunk] = field(default_factory=list)

    @property
    def chunk_count(self) -> int:
        return len(self.chunks)


# Result of Chunker.process_file; branch on ``output.kind``.
ProcessOutput = Union[RawOutput, EncryptedOutput]
