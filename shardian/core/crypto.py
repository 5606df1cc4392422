"""AES-256-GCM sealing of individual chunks."""

import os
from typing import Callable, Tuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..common.constants import KEY_SIZE, NONCE_SIZE
from ..utils import AuthenticationError, EncryptionError

# Returns ``n`` cryptographically secure random bytes.
NonceSource = Callable[[int], bytes]

default_nonce_source: NonceSource = os.urandom


def generate_key() -> bytes:
    """
    Generate a new random 256-bit key.

    Returns:
        32-byte key. It is only returned, never stored.
    """
    return AESGCM.generate_key(bit_length=KEY_SIZE * 8)


def create_cipher(key: bytes) -> AESGCM:
    """
    Build an AES-256-GCM cipher for ``key``.

    Args:
        key: 32-byte symmetric key

    Returns:
        Cipher instance

    Raises:
        ValueError: If the key is not exactly 32 bytes
    """
    if not isinstance(key, (bytes, bytearray)) or len(key) != KEY_SIZE:
        raise ValueError(f"Encryption key must be exactly {KEY_SIZE} bytes.")
    return AESGCM(bytes(key))


def encrypt_data(
    cipher: AESGCM, data: bytes, nonce_source: NonceSource = default_nonce_source
) -> Tuple[bytes, bytes]:
    """
    Encrypt data with a fresh nonce and no associated data.

    Args:
        cipher: AES-256-GCM cipher
        data: Plaintext
        nonce_source: Randomness used for the 12-byte nonce

    Returns:
        (nonce, ciphertext) where ciphertext ends with the 16-byte tag
    """
    nonce = nonce_source(NONCE_SIZE)
    if len(nonce) != NONCE_SIZE:
        raise EncryptionError(f"Nonce source returned {len(nonce)} bytes, expected {NONCE_SIZE}.")
    return nonce, cipher.encrypt(nonce, data, None)


def decrypt_data(cipher: AESGCM, nonce: bytes, ciphertext: bytes) -> bytes:
    """
    Decrypt and authenticate AES-256-GCM data.

    Args:
        cipher: AES-256-GCM cipher
        nonce: 12-byte nonce used at encryption time
        ciphertext: Ciphertext with trailing tag

    Returns:
        Plaintext

    Raises:
        AuthenticationError: If the tag does not verify or the nonce is malformed
    """
    if len(nonce) != NONCE_SIZE:
        raise AuthenticationError(f"Nonce must be {NONCE_SIZE} bytes, got {len(nonce)}.")

    try:
        return cipher.decrypt(nonce, ciphertext, None)
    except InvalidTag as exc:
        raise AuthenticationError(
            "Chunk integrity check failed. Wrong key or corrupted data."
        ) from exc
