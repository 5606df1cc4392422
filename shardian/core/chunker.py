"""Chunker: split, fingerprint and optionally seal file chunks."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..common.types import EncryptedChunk, EncryptedOutput, ProcessOutput, RawOutput
from ..utils import AuthenticationError, MissingKeyError
from .chunking import PathLike, hash_chunk, leaf_hashes, merkle_root, split_file, validate_chunk_size
from .crypto import NonceSource, create_cipher, decrypt_data, default_nonce_source, encrypt_data

logger = logging.getLogger(__name__)


class Chunker:
    """
    Splits files into fixed-size chunks and fingerprints them.

    Configuration is fixed at construction. When a key is supplied the
    instance can also seal and open chunks with AES-256-GCM; without one,
    cipher operations raise ``MissingKeyError``. Instances hold no other
    state and can be shared between concurrent callers.
    """

    __slots__ = ("_chunk_size", "_cipher", "_nonce_source")

    def __init__(
        self,
        chunk_size: int,
        key: Optional[bytes] = None,
        nonce_source: Optional[NonceSource] = None,
    ):
        self._chunk_size = validate_chunk_size(chunk_size)
        self._cipher: Optional[AESGCM] = create_cipher(key) if key is not None else None
        self._nonce_source = nonce_source or default_nonce_source

    def __repr__(self) -> str:
        return f"Chunker(chunk_size={self._chunk_size}, encrypted={self.encrypted})"

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def encrypted(self) -> bool:
        """True when a key is configured."""
        return self._cipher is not None

    @staticmethod
    def hash(data: bytes) -> bytes:
        """SHA-256 digest used both as fingerprint and as Merkle leaf."""
        return hash_chunk(data)

    def split(self, path: PathLike) -> List[bytes]:
        """
        Read ``path`` into ordered chunks of ``chunk_size`` bytes.

        Raises:
            ChunkIOError: If the file cannot be opened or read.
        """
        return split_file(path, self._chunk_size)

    def merkle_root(self, chunks: Iterable[bytes]) -> bytes:
        """Merkle root over the given chunks, see ``chunking.merkle_root_from_hashes``."""
        return merkle_root(chunks)

    def _require_cipher(self) -> AESGCM:
        if self._cipher is None:
            raise MissingKeyError("No encryption key configured for this chunker.")
        return self._cipher

    def encrypt_chunk(self, index: int, chunk: bytes) -> EncryptedChunk:
        """
        Seal one chunk under a fresh random nonce.

        Args:
            index: Position of the chunk in its file.
            chunk: Plaintext bytes.

        Returns:
            EncryptedChunk carrying index, nonce and ciphertext.

        Raises:
            MissingKeyError: If no key is configured.
        """
        cipher = self._require_cipher()
        nonce, ciphertext = encrypt_data(cipher, chunk, self._nonce_source)
        return EncryptedChunk(index=index, nonce=nonce, ciphertext=ciphertext)

    def decrypt_chunk(self, encrypted: EncryptedChunk) -> bytes:
        """
        Open a sealed chunk, verifying its tag.

        Raises:
            MissingKeyError: If no key is configured.
            AuthenticationError: If the tag does not verify.
        """
        cipher = self._require_cipher()
        try:
            return decrypt_data(cipher, encrypted.nonce, encrypted.ciphertext)
        except AuthenticationError:
            logger.warning("Authentication failed for chunk %d", encrypted.index)
            raise

    def encrypt_chunks(self, chunks: Sequence[bytes]) -> List[EncryptedChunk]:
        return [self.encrypt_chunk(index, chunk) for index, chunk in enumerate(chunks)]

    def process_file(self, path: PathLike) -> ProcessOutput:
        """
        Split ``path`` and either seal or hash every chunk.

        Args:
            path: File to process.

        Returns:
            EncryptedOutput when a key is configured, RawOutput otherwise.
        """
        chunks = self.split(path)
        if self._cipher is not None:
            output: ProcessOutput = EncryptedOutput(chunks=self.encrypt_chunks(chunks))
        else:
            output = RawOutput(chunks=chunks, hashes=leaf_hashes(chunks))
        logger.debug("Processed %s: %d %s chunk(s)", path, output.chunk_count, output.kind)
        return output
