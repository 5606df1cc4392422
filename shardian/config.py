"""Configuration management for the chunking core."""

from __future__ import annotations

import logging
import os
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .common.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_MAX_WORKERS,
    KEY_SIZE,
    MAX_CHUNK_SIZE_CAP,
)
from .common.logging import setup_logging
from .core.chunker import Chunker
from .utils import ConfigError

ENV_CHUNK_SIZE = "SHARDIAN_CHUNK_SIZE"
ENV_KEY = "SHARDIAN_ENCRYPTION_KEY"
ENV_WORKERS = "SHARDIAN_MAX_WORKERS"
ENV_LOG_LEVEL = "SHARDIAN_LOG_LEVEL"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Config:
    """Immutable runtime configuration."""

    chunk_size: int = DEFAULT_CHUNK_SIZE
    encryption_key: Optional[bytes] = field(default=None, repr=False)
    max_workers: int = DEFAULT_MAX_WORKERS
    log_level: str = "INFO"

    def setup_logging(self) -> logging.Logger:
        """Configure the package logger at the configured level."""
        return setup_logging(self.log_level)

    def create_chunker(self) -> Chunker:
        """
        Build a chunker from this configuration.

        Returns:
            Chunker with the configured chunk size and optional key.
        """
        return Chunker(self.chunk_size, key=self.encryption_key)


def _parse_int(value: str, name: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ConfigError(f"Invalid integer for {name}.") from exc
    if parsed <= 0:
        raise ConfigError(f"{name} must be greater than 0.")
    return parsed


def _parse_chunk_size(value: str) -> int:
    parsed = _parse_int(value, ENV_CHUNK_SIZE)
    if parsed > MAX_CHUNK_SIZE_CAP:
        warnings.warn(
            f"{ENV_CHUNK_SIZE} capped at {MAX_CHUNK_SIZE_CAP} bytes.",
            RuntimeWarning,
        )
        return MAX_CHUNK_SIZE_CAP
    return parsed


def _parse_key(value: str) -> Optional[bytes]:
    if not value:
        return None
    try:
        key = bytes.fromhex(value)
    except ValueError as exc:
        raise ConfigError(f"{ENV_KEY} must be hex encoded.") from exc
    if len(key) != KEY_SIZE:
        raise ConfigError(
            f"{ENV_KEY} must encode {KEY_SIZE} bytes ({KEY_SIZE * 2} hex characters)."
        )
    return key


def _parse_log_level(value: str) -> str:
    level = value.upper()
    if level not in LOG_LEVELS:
        raise ConfigError(f"{ENV_LOG_LEVEL} must be one of {', '.join(LOG_LEVELS)}.")
    return level


def load_config(env_file: Optional[Path] = None) -> Config:
    """
    Load and validate configuration from the environment.

    Values from ``env_file`` (if it exists) are loaded first without
    overriding variables already set in the process environment.

    Args:
        env_file: Optional .env file path.

    Returns:
        Config instance.

    Raises:
        ConfigError: If a value is malformed.
    """
    if env_file is not None and env_file.exists():
        load_dotenv(env_file)

    chunk_size = os.getenv(ENV_CHUNK_SIZE, str(DEFAULT_CHUNK_SIZE)).strip()
    encryption_key = os.getenv(ENV_KEY, "").strip()
    max_workers = os.getenv(ENV_WORKERS, str(DEFAULT_MAX_WORKERS)).strip()
    log_level = os.getenv(ENV_LOG_LEVEL, "INFO").strip()

    return Config(
        chunk_size=_parse_chunk_size(chunk_size),
        encryption_key=_parse_key(encryption_key),
        max_workers=_parse_int(max_workers, ENV_WORKERS),
        log_level=_parse_log_level(log_level),
    )
