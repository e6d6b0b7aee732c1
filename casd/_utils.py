from __future__ import annotations

import tempfile
from typing import AsyncGenerator

import anyio

DEFAULT_CHUNK_SIZE = 64 * 1024


async def find_files(path: anyio.Path) -> AsyncGenerator[anyio.Path, None]:
    """Yield the regular files directly inside `path`, in directory order."""
    async for sub_path in path.iterdir():
        if await sub_path.is_file():
            yield sub_path


class AsyncFileReader:
    """Reads a file, or another reader, as an async stream of chunks."""

    def __init__(self, source: anyio.Path | AsyncFileReader) -> None:
        self._source = source

    @property
    def source_path(self) -> anyio.Path:
        if isinstance(self._source, anyio.Path):
            return self._source
        return self._source.source_path

    async def read(
        self, size: int = DEFAULT_CHUNK_SIZE
    ) -> AsyncGenerator[bytes, None]:
        if isinstance(self._source, anyio.Path):
            async with await self.source_path.open("rb") as file:
                while True:
                    data = await file.read(size)
                    if not data:
                        break
                    yield data
        else:
            async for data in self._source.read(size):
                yield data


class TeeAsyncFileReader(AsyncFileReader):
    """Reader that writes every chunk it yields into a temporary file.

    The temporary file is created inside `scratch_dir` so it can later be
    renamed into place on the same filesystem. Moving or removing it is up to
    the caller; `temp_path` is set as soon as reading starts.
    """

    def __init__(self, source: anyio.Path | AsyncFileReader, scratch_dir: anyio.Path):
        super().__init__(source)
        self._scratch_dir = scratch_dir
        self._temp_path: anyio.Path | None = None

    @property
    def temp_path(self) -> anyio.Path | None:
        return self._temp_path

    async def read(
        self, size: int = DEFAULT_CHUNK_SIZE
    ) -> AsyncGenerator[bytes, None]:
        await self._scratch_dir.mkdir(parents=True, exist_ok=True)
        temp_file = tempfile.NamedTemporaryFile(
            dir=str(self._scratch_dir), prefix=".tmp-", delete=False
        )
        self._temp_path = anyio.Path(temp_file.name)
        with temp_file:
            async_temp_file = anyio.wrap_file(temp_file)
            async for data in super().read(size):
                await async_temp_file.write(data)
                yield data
