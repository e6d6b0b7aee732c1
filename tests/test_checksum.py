from __future__ import annotations

import hashlib
import os

import pytest
from blake3 import blake3

from casd.checksum import digest
from casd.errors import NotAFileError, SourceNotFoundError, StoreIOError

pytestmark = pytest.mark.anyio

EMPTY_SHA512 = (
    "cf83e1357eefb8bdf1542850d66d8007d620e4050b5715dc83f4a921d36ce9ce"
    "47d0d13c5d85f2b0ff8318d2877eec2f63b931bd47417a81a538327af927da3e"
)


async def test_digest_is_lowercase_sha512_hex(write_file):
    path = write_file("hello.txt", b"hello world\n")

    checksum = await digest(path)

    assert checksum == hashlib.sha512(b"hello world\n").hexdigest()
    assert len(checksum) == 128
    assert checksum == checksum.lower()


async def test_digest_of_empty_file(write_file):
    assert await digest(write_file("empty", b"")) == EMPTY_SHA512


async def test_digest_is_deterministic(write_file):
    path = write_file("data.bin", os.urandom(4096))

    assert await digest(path) == await digest(path)


async def test_digest_streams_files_larger_than_one_chunk(write_file):
    content = os.urandom(300 * 1024 + 7)
    path = write_file("big.bin", content)

    assert await digest(path) == hashlib.sha512(content).hexdigest()


async def test_digest_with_blake3_uses_512_bit_output(write_file):
    content = b"blake3 content"
    path = write_file("b3.bin", content)

    checksum = await digest(path, algorithm="blake3")

    assert checksum == blake3(content).hexdigest(length=64)
    assert len(checksum) == 128


async def test_algorithms_disagree(write_file):
    path = write_file("same.bin", b"same")

    assert await digest(path, "sha512") != await digest(path, "blake3")


async def test_unknown_algorithm_is_rejected(write_file):
    path = write_file("x", b"x")

    with pytest.raises(ValueError):
        await digest(path, algorithm="md5")  # type: ignore[arg-type]


async def test_missing_path_raises_not_found(tmp_path):
    with pytest.raises(SourceNotFoundError):
        await digest(tmp_path / "nope")


async def test_directory_raises_not_a_file(tmp_path):
    with pytest.raises(NotAFileError):
        await digest(tmp_path)


async def test_dangling_symlink_raises_not_found(tmp_path):
    link = tmp_path / "dangling"
    link.symlink_to(tmp_path / "missing")

    with pytest.raises(SourceNotFoundError):
        await digest(link)


async def test_symlink_to_file_hashes_target(write_file, tmp_path):
    target = write_file("target", b"pointed at")
    link = tmp_path / "link"
    link.symlink_to(target)

    assert await digest(link) == await digest(target)


async def test_unreadable_path_raises_io_error(tmp_path):
    with pytest.raises(StoreIOError) as excinfo:
        await digest(tmp_path / ("a" * 300))

    assert excinfo.value.operation == "stat"
