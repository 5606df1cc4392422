"""Concurrent chunk processing: async reads and a bounded worker pool."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

import aiofiles

from .common.constants import DEFAULT_MAX_WORKERS
from .common.types import EncryptedChunk, EncryptedOutput, ProcessOutput, RawOutput
from .config import Config
from .core.chunker import Chunker
from .core.chunking import validate_chunk_size
from .core.manifest import FileManifest, manifest_from_output
from .utils import ChunkIOError


logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, Optional[str]], None]


def _report_progress(
    callback: Optional[ProgressCallback],
    current: int,
    total: int,
    name: Optional[str],
    last_report: float,
) -> float:
    if not callback:
        return last_report
    now = time.monotonic()
    if now - last_report >= 1 or current >= total:
        callback(current, total, name)
        return now
    return last_report


async def split_file_async(
    file_path: Union[str, Path],
    chunk_size: int,
    progress_callback: Optional[ProgressCallback] = None,
) -> List[bytes]:
    """
    Split a file into chunks without blocking the event loop.

    Args:
        file_path: Path to file.
        chunk_size: Size per chunk in bytes.
        progress_callback: Optional progress callback (bytes read, total bytes, path).

    Returns:
        Ordered list of chunks.

    Raises:
        ChunkIOError: If the file cannot be opened or read.
    """
    validate_chunk_size(chunk_size)

    file_path = Path(file_path)
    chunks: List[bytes] = []
    processed = 0
    last_report = 0.0

    try:
        total = file_path.stat().st_size
        async with aiofiles.open(file_path, "rb") as infile:
            while True:
                chunk = await infile.read(chunk_size)
                if not chunk:
                    break
                chunks.append(chunk)
                processed += len(chunk)
                last_report = _report_progress(
                    progress_callback, processed, total, str(file_path), last_report
                )
    except OSError as exc:
        raise ChunkIOError(f"Failed to read {file_path}: {exc}") from exc

    return chunks


async def process_file_concurrent(
    chunker: Chunker,
    file_path: Union[str, Path],
    max_workers: int = DEFAULT_MAX_WORKERS,
    progress_callback: Optional[ProgressCallback] = None,
) -> ProcessOutput:
    """
    Concurrent counterpart of ``Chunker.process_file``.

    Each chunk is hashed (or sealed, when the chunker has a key) in a worker
    thread, with at most ``max_workers`` chunks in flight. Results are put
    back in index order before returning. If the call is cancelled or any
    chunk fails, the remaining work is cancelled and nothing is returned.

    Args:
        chunker: Configured chunker, shared read-only.
        file_path: File to process.
        max_workers: Max chunks processed at once.
        progress_callback: Optional progress callback (chunks done, total, path).

    Returns:
        RawOutput or EncryptedOutput, identical in shape to the sequential call.
    """
    if max_workers <= 0:
        raise ValueError("max_workers must be greater than 0.")

    chunks = await split_file_async(file_path, chunker.chunk_size)
    total = len(chunks)
    semaphore = asyncio.Semaphore(max_workers)
    results: Dict[int, Union[bytes, EncryptedChunk]] = {}
    encrypted = chunker.encrypted

    async def _process(index: int, chunk: bytes) -> None:
        async with semaphore:
            if encrypted:
                result = await asyncio.to_thread(chunker.encrypt_chunk, index, chunk)
            else:
                result = await asyncio.to_thread(chunker.hash, chunk)
            results[index] = result
            if progress_callback:
                progress_callback(len(results), total, str(file_path))

    tasks = [asyncio.create_task(_process(index, chunk)) for index, chunk in enumerate(chunks)]
    try:
        await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.debug("Discarded %d/%d processed chunk(s) of %s", len(results), total, file_path)
        raise

    ordered = [results[index] for index in range(total)]
    if encrypted:
        return EncryptedOutput(chunks=ordered)
    return RawOutput(chunks=chunks, hashes=ordered)


async def build_manifest_concurrent(
    chunker: Chunker,
    file_path: Union[str, Path],
    max_workers: int = DEFAULT_MAX_WORKERS,
    progress_callback: Optional[ProgressCallback] = None,
) -> FileManifest:
    """
    Process a file concurrently and build its manifest.

    Returns:
        Plain manifest without a key, encrypted manifest with one.
    """
    output = await process_file_concurrent(chunker, file_path, max_workers, progress_callback)
    manifest = await asyncio.to_thread(manifest_from_output, file_path, chunker.chunk_size, output)
    logger.info(
        "Chunked %s (%d bytes) into %d %s chunk(s), file_id=%s",
        Path(file_path).name,
        manifest.file_size,
        manifest.chunk_count,
        output.kind,
        manifest.file_id,
    )
    return manifest


async def build_manifest_from_config(
    config: Config,
    file_path: Union[str, Path],
    progress_callback: Optional[ProgressCallback] = None,
) -> FileManifest:
    """
    Build a manifest with the chunk size, key and worker count from ``config``.

    Args:
        config: Loaded configuration.
        file_path: File to process.
        progress_callback: Optional progress callback (chunks done, total, path).

    Returns:
        FileManifest, encrypted when the configuration carries a key.
    """
    return await build_manifest_concurrent(
        config.create_chunker(), file_path, config.max_workers, progress_callback
    )
