"""Tests for splitting, hashing and Merkle roots."""

from __future__ import annotations

import hashlib
import tempfile
import unittest
from pathlib import Path

from shardian import EMPTY_MERKLE_ROOT, ChunkIOError, Chunker
from shardian.core.chunking import chunk_count, merkle_root_from_hashes, validate_chunk_size


def _h(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


ALPHABET = b"abcdefghijklmnopqrstuvwxyz"


class TestSplit(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.base = Path(self.temp_dir.name)

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def _write(self, name: str, data: bytes) -> Path:
        path = self.base / name
        path.write_bytes(data)
        return path

    def test_split_alphabet(self) -> None:
        path = self._write("alphabet.bin", ALPHABET)
        chunks = Chunker(10).split(path)
        self.assertEqual(chunks, [ALPHABET[0:10], ALPHABET[10:20], ALPHABET[20:26]])
        self.assertEqual([len(chunk) for chunk in chunks], [10, 10, 6])

    def test_split_sizes(self) -> None:
        for size, chunk_size in [(1, 1), (7, 3), (9, 3), (100, 7), (4096, 1024), (5, 64)]:
            with self.subTest(size=size, chunk_size=chunk_size):
                data = bytes(i % 251 for i in range(size))
                path = self._write(f"data_{size}_{chunk_size}.bin", data)
                chunks = Chunker(chunk_size).split(path)

                self.assertEqual(len(chunks), -(-size // chunk_size))
                self.assertEqual(len(chunks), chunk_count(size, chunk_size))
                for chunk in chunks[:-1]:
                    self.assertEqual(len(chunk), chunk_size)
                expected_last = size % chunk_size or chunk_size
                self.assertEqual(len(chunks[-1]), expected_last)
                self.assertEqual(b"".join(chunks), data)

    def test_split_empty_file(self) -> None:
        path = self._write("empty.bin", b"")
        self.assertEqual(Chunker(10).split(path), [])
        self.assertEqual(chunk_count(0, 10), 0)

    def test_split_missing_file(self) -> None:
        with self.assertRaises(ChunkIOError):
            Chunker(10).split(self.base / "missing.bin")

    def test_split_directory_fails(self) -> None:
        with self.assertRaises(ChunkIOError):
            Chunker(10).split(self.base)

    def test_invalid_chunk_size(self) -> None:
        for bad in (0, -1, 1.5, True):
            with self.subTest(chunk_size=bad):
                with self.assertRaises(ValueError):
                    Chunker(bad)
                with self.assertRaises(ValueError):
                    validate_chunk_size(bad)
                with self.assertRaises(ValueError):
                    chunk_count(10, bad)
        self.assertEqual(validate_chunk_size(1), 1)


class TestHash(unittest.TestCase):
    def test_hash_consistency(self) -> None:
        self.assertEqual(Chunker.hash(b"hello"), Chunker.hash(b"hello"))
        self.assertNotEqual(Chunker.hash(b"hello"), Chunker.hash(b"world"))
        self.assertEqual(len(Chunker.hash(b"")), 32)

    def test_hash_is_sha256(self) -> None:
        self.assertEqual(Chunker.hash(b"abc"), _h(b"abc"))


class TestMerkleRoot(unittest.TestCase):
    def setUp(self) -> None:
        self.chunker = Chunker(1024)

    def test_empty(self) -> None:
        self.assertEqual(self.chunker.merkle_root([]), bytes(32))
        self.assertEqual(self.chunker.merkle_root([]), EMPTY_MERKLE_ROOT)

    def test_empty_sentinel_is_not_a_hash_of_zero_byte(self) -> None:
        self.assertNotEqual(self.chunker.merkle_root([]), self.chunker.merkle_root([b"\x00"]))

    def test_single(self) -> None:
        self.assertEqual(self.chunker.merkle_root([b"test"]), _h(b"test"))

    def test_two(self) -> None:
        expected = _h(_h(b"a") + _h(b"b"))
        self.assertEqual(self.chunker.merkle_root([b"a", b"b"]), expected)

    def test_three_duplicates_last_node(self) -> None:
        a, b, c = b"a", b"b", b"c"
        left = _h(_h(a) + _h(b))
        right = _h(_h(c) + _h(c))
        self.assertEqual(self.chunker.merkle_root([a, b, c]), _h(left + right))

        promoted = _h(left + _h(c))
        self.assertNotEqual(self.chunker.merkle_root([a, b, c]), promoted)

    def test_five_leaves(self) -> None:
        leaves = [_h(bytes([i])) for i in range(5)]
        level1 = [_h(leaves[0] + leaves[1]), _h(leaves[2] + leaves[3]), _h(leaves[4] + leaves[4])]
        level2 = [_h(level1[0] + level1[1]), _h(level1[2] + level1[2])]
        expected = _h(level2[0] + level2[1])
        self.assertEqual(self.chunker.merkle_root([bytes([i]) for i in range(5)]), expected)
        self.assertEqual(merkle_root_from_hashes(leaves), expected)

    def test_order_sensitive(self) -> None:
        self.assertNotEqual(
            self.chunker.merkle_root([b"a", b"b"]),
            self.chunker.merkle_root([b"b", b"a"]),
        )

    def test_alphabet_scenario(self) -> None:
        chunks = [ALPHABET[0:10], ALPHABET[10:20], ALPHABET[20:26]]
        h0, h1, h2 = (_h(chunk) for chunk in chunks)
        expected = _h(_h(h0 + h1) + _h(h2 + h2))
        self.assertEqual(self.chunker.merkle_root(chunks), expected)


if __name__ == "__main__":
    unittest.main()
