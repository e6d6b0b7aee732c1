"""Streaming content digests for stored objects.

Objects are named by a 512-bit digest rendered as lowercase hex. `sha512` is
the default and matches stores written by earlier casd releases; `blake3` is
offered for large files, using its extended output to produce the same width.
"""

from __future__ import annotations

import hashlib
import logging
import os
import stat
from typing import Literal

import anyio
from blake3 import blake3

from ._utils import DEFAULT_CHUNK_SIZE, AsyncFileReader
from .errors import NotAFileError, SourceNotFoundError, StoreIOError

logger = logging.getLogger(__name__)

Algorithm = Literal["sha512", "blake3"]

ALGORITHMS: tuple[Algorithm, ...] = ("sha512", "blake3")
DEFAULT_ALGORITHM: Algorithm = "sha512"

# bytes; 512 bits
DIGEST_SIZE = 64


async def check_source(path: anyio.Path) -> None:
    """Raise unless `path` names an existing regular file.

    Symlinks are followed, so a dangling link is reported as missing. Any
    other failure to stat `path` is a `StoreIOError`.
    """
    try:
        file_stat = await path.stat()
    except (FileNotFoundError, NotADirectoryError) as exc:
        raise SourceNotFoundError(path) from exc
    except OSError as exc:
        raise StoreIOError("stat", path, exc.strerror or str(exc)) from exc

    if not stat.S_ISREG(file_stat.st_mode):
        raise NotAFileError(path)


async def compute_checksum(
    file: AsyncFileReader, algorithm: Algorithm = DEFAULT_ALGORITHM
) -> str:
    """Hash everything `file` yields and return the hex digest.

    Errors raised while reading propagate unchanged; callers attach context.
    """
    if algorithm not in ALGORITHMS:
        raise ValueError(f"Unknown digest algorithm {algorithm!r}")

    blksize = DEFAULT_CHUNK_SIZE
    file_size = None

    try:
        file_stat = await file.source_path.stat()
        blksize = file_stat.st_blksize or DEFAULT_CHUNK_SIZE
        file_size = file_stat.st_size
    except OSError:
        # if stat fails we just try to move on with file access
        # using the default values for block, file size
        logger.debug("stat failed for %s, using default chunk size", file.source_path)

    if algorithm == "sha512":
        sha = hashlib.sha512()
        async for data in file.read(max(blksize, DEFAULT_CHUNK_SIZE)):
            sha.update(data)
        return sha.hexdigest()

    if not file_size or file_size > 1.5 * 1024 * 1024:  # > 1.5 MiB
        # block-aligned size closest to 32MiB, a benchmark sweet-spot
        chunk_size = (32 * 1024 * 1024 // blksize) * blksize
        max_threads = blake3.AUTO
    else:
        chunk_size = blksize
        max_threads = 4

    hasher = blake3(max_threads=max_threads)
    async for data in file.read(chunk_size):
        hasher.update(data)

    return hasher.hexdigest(length=DIGEST_SIZE)


async def digest(
    pathlike: str | os.PathLike[str], algorithm: Algorithm = DEFAULT_ALGORITHM
) -> str:
    """Return the hex digest of the file at `pathlike`.

    Raises:
        SourceNotFoundError: `pathlike` does not exist.
        NotAFileError: `pathlike` is a directory or special file.
        StoreIOError: The file could not be read.
    """
    path = anyio.Path(pathlike)
    await check_source(path)
    try:
        return await compute_checksum(AsyncFileReader(path), algorithm)
    except OSError as exc:
        raise StoreIOError("read", path, exc.strerror or str(exc)) from exc
