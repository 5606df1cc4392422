"""Tests for configuration loading."""

from __future__ import annotations

import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from shardian import ConfigError, generate_key
from shardian.common.constants import DEFAULT_CHUNK_SIZE, DEFAULT_MAX_WORKERS, MAX_CHUNK_SIZE_CAP
from shardian.common.logging import LOGGER_NAME, setup_logging
from shardian.config import Config, load_config


class TestConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            config = load_config()
        self.assertEqual(config.chunk_size, DEFAULT_CHUNK_SIZE)
        self.assertIsNone(config.encryption_key)
        self.assertEqual(config.max_workers, DEFAULT_MAX_WORKERS)
        self.assertEqual(config.log_level, "INFO")
        self.assertFalse(config.create_chunker().encrypted)

    def test_values_from_environment(self) -> None:
        key = generate_key()
        env = {
            "SHARDIAN_CHUNK_SIZE": "1024",
            "SHARDIAN_ENCRYPTION_KEY": key.hex(),
            "SHARDIAN_MAX_WORKERS": "8",
            "SHARDIAN_LOG_LEVEL": "debug",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            config = load_config()
        self.assertEqual(config.chunk_size, 1024)
        self.assertEqual(config.encryption_key, key)
        self.assertEqual(config.max_workers, 8)
        self.assertEqual(config.log_level, "DEBUG")

        chunker = config.create_chunker()
        self.assertTrue(chunker.encrypted)
        self.assertEqual(chunker.chunk_size, 1024)
        self.assertNotIn(key.hex(), repr(config))

    def test_env_file(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            env_file = Path(temp_dir) / ".env"
            env_file.write_text("SHARDIAN_CHUNK_SIZE=4096\nSHARDIAN_MAX_WORKERS=2\n", encoding="utf-8")
            with mock.patch.dict(os.environ, {"SHARDIAN_MAX_WORKERS": "3"}, clear=True):
                config = load_config(env_file)
        self.assertEqual(config.chunk_size, 4096)
        self.assertEqual(config.max_workers, 3)

    def test_chunk_size_is_capped(self) -> None:
        env = {"SHARDIAN_CHUNK_SIZE": str(MAX_CHUNK_SIZE_CAP + 1)}
        with mock.patch.dict(os.environ, env, clear=True):
            with self.assertWarns(RuntimeWarning):
                config = load_config()
        self.assertEqual(config.chunk_size, MAX_CHUNK_SIZE_CAP)

    def test_invalid_values(self) -> None:
        cases = {
            "SHARDIAN_CHUNK_SIZE": ["0", "-5", "abc"],
            "SHARDIAN_MAX_WORKERS": ["0", "many"],
            "SHARDIAN_ENCRYPTION_KEY": ["zz" * 32, "00" * 16],
            "SHARDIAN_LOG_LEVEL": ["LOUD"],
        }
        for name, values in cases.items():
            for value in values:
                with self.subTest(name=name, value=value):
                    with mock.patch.dict(os.environ, {name: value}, clear=True):
                        with self.assertRaises(ConfigError):
                            load_config()

    def test_config_is_frozen(self) -> None:
        config = Config()
        with self.assertRaises(AttributeError):
            config.chunk_size = 1  # type: ignore[misc]


class TestLogging(unittest.TestCase):
    def test_setup_logging(self) -> None:
        logger = setup_logging("DEBUG")
        self.assertEqual(logger.name, LOGGER_NAME)
        self.assertEqual(logger.level, logging.DEBUG)
        handler_count = len(logger.handlers)

        setup_logging(logging.WARNING)
        self.assertEqual(len(logger.handlers), handler_count)
        self.assertEqual(logger.level, logging.WARNING)

    def test_unknown_level(self) -> None:
        with self.assertRaises(ValueError):
            setup_logging("LOUD")

    def test_config_log_level_applies(self) -> None:
        logger = Config(log_level="DEBUG").setup_logging()
        self.assertEqual(logger.name, LOGGER_NAME)
        self.assertEqual(logger.level, logging.DEBUG)

        env = {"SHARDIAN_LOG_LEVEL": "error"}
        with mock.patch.dict(os.environ, env, clear=True):
            logger = load_config().setup_logging()
        self.assertEqual(logger.level, logging.ERROR)
        self.assertTrue(all(handler.level == logging.ERROR for handler in logger.handlers))


if __name__ == "__main__":
    unittest.main()
