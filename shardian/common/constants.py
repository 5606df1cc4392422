"""Constants used throughout the chunking core."""

# Default chunk size for file slicing (256 KiB)
DEFAULT_CHUNK_SIZE = 256 * 1024

# Upper bound accepted from configuration (64 MiB)
MAX_CHUNK_SIZE_CAP = 64 * 1024 * 1024

# Default number of chunks processed concurrently
DEFAULT_MAX_WORKERS = 4

# AES-256-GCM parameters
KEY_SIZE = 32
NONCE_SIZE = 12
TAG_SIZE = 16

# SHA-256 digest length
HASH_SIZE = 32

# Merkle root reported for a file with no chunks
EMPTY_MERKLE_ROOT = bytes(HASH_SIZE)

# Manifest files are named <file_id prefix>-manifest.json
MANIFEST_SUFFIX = "-manifest.json"
MANIFEST_ID_PREFIX_LENGTH = 16
