from __future__ import annotations

import errno
import logging
import stat
from enum import Enum
from typing import Awaitable, Callable

import anyio

from casd.errors import StoreIOError
from casd.store_entry import StoreEntry
from ._utils import AsyncFileReader, TeeAsyncFileReader

logger = logging.getLogger(__name__)

_NO_HARDLINK_ERRNOS = frozenset(
    {errno.EPERM, errno.ENOTSUP, errno.EOPNOTSUPP, errno.ENOSYS}
)

Checksummer = Callable[[AsyncFileReader], Awaitable[str]]
NameBuilder = Callable[[str, anyio.Path], str]


class PutStrategy(str, Enum):
    """Available PutStrategies used as input for
    [`PutStrategiesRunner`][casd.put_strategies.PutStrategiesRunner]

    This Enum's members' names are equivalent to the put methods in
       [`PutStrategiesRunner`][casd.put_strategies.PutStrategiesRunner]
    """

    HASH_THEN_COPY = "HASH_THEN_COPY"
    TEE_COPY = "TEE_COPY"


class PutStrategiesRunner:
    """A class responsible for defining and running the different available
    `PutStrategies`.

    A put strategy is responsible for getting a source file's bytes into the
    store under the name computed by the using [`Store`][casd.store.Store].
    Both strategies leave the source untouched, stage the copy in a temporary
    file inside the store root and hard-link it into place, so a reader never
    sees a partially written object. An object that is already present, even
    one stored by another process mid-put, is never overwritten.

        Args:
            checksummer: Function that checksums a file
            name_builder: Function that builds the stored file name from the
                checksum and the source path
            store_root: Directory the objects are placed in. Temporary files
                are created here too, so the link stays on one filesystem.
            fmode: Permissions to set on the new file. `None` copies the
                permission bits of the source.
    """

    def __init__(
        self,
        checksummer: Checksummer,
        name_builder: NameBuilder,
        store_root: anyio.Path,
        fmode: int | None = None,
    ) -> None:
        self._checksummer = checksummer
        self._name_builder = name_builder
        self._store_root = store_root
        self._fmode = fmode

    async def run(
        self,
        put_strategy: PutStrategy,
        source_path: anyio.Path,
    ) -> StoreEntry:
        match put_strategy:
            case PutStrategy.HASH_THEN_COPY:
                return await self.hash_then_copy(source_path)
            case PutStrategy.TEE_COPY:
                return await self.tee_copy(source_path)

        raise ValueError(f"Unknown put strategy {put_strategy!r}")

    async def hash_then_copy(self, source_path: anyio.Path) -> StoreEntry:
        """Hash then copy checksums the file in its source location, and only
        copies it when no object with that checksum exists yet.

        Inserting content that is already stored performs no write at all. The
        source is read twice for new content.

        Note that this strategy is prone to a mismatch between name and
        content if `source_path` is written to before the put completes.

        Args:
            source_path: file to store
        """
        try:
            checksum = await self._checksummer(AsyncFileReader(source_path))
        except OSError as exc:
            raise StoreIOError("read", source_path, _reason(exc)) from exc

        name = self._name_builder(checksum, source_path)
        dest_path = self._store_root.joinpath(name)

        if await _is_stored(dest_path):
            logger.info("File %s already exists, skipping", dest_path)
            return self._entry(checksum, name, is_duplicate=True)

        reader = TeeAsyncFileReader(source_path, self._store_root)
        try:
            async for _ in reader.read():
                pass
            placed = await self._place(reader, source_path, dest_path)
        except OSError as exc:
            raise StoreIOError("copy", source_path, _reason(exc)) from exc
        finally:
            await _discard(reader)

        return self._placed_entry(checksum, name, source_path, placed)

    async def tee_copy(self, source_path: anyio.Path) -> StoreEntry:
        """Tee copy checksums the file as it's being copied to a temporary
        location, and then moves the temporary file into place.

        The source is read once. When the object turns out to be present
        already, the temporary copy is discarded and the stored object is left
        untouched.

        Args:
            source_path: file to store
        """
        reader = TeeAsyncFileReader(source_path, self._store_root)
        try:
            checksum = await self._checksummer(reader)
        except OSError as exc:
            await _discard(reader)
            raise StoreIOError("copy", source_path, _reason(exc)) from exc

        name = self._name_builder(checksum, source_path)
        dest_path = self._store_root.joinpath(name)

        try:
            if await _is_stored(dest_path):
                logger.info("File %s already exists, skipping", dest_path)
                return self._entry(checksum, name, is_duplicate=True)

            try:
                placed = await self._place(reader, source_path, dest_path)
            except OSError as exc:
                raise StoreIOError("copy", source_path, _reason(exc)) from exc
        finally:
            await _discard(reader)

        return self._placed_entry(checksum, name, source_path, placed)

    async def _place(
        self,
        reader: TeeAsyncFileReader,
        source_path: anyio.Path,
        dest_path: anyio.Path,
    ) -> bool:
        """Link the finished temporary file in at `dest_path`.

        Returns `False`, leaving `dest_path` untouched, when another writer
        stored the object after it was checked for. Removing the temporary
        file is up to the caller.
        """
        temp_path = reader.temp_path
        if temp_path is None:
            raise RuntimeError("Nothing was read from the source")

        if self._fmode is None:
            mode = stat.S_IMODE((await source_path.stat()).st_mode)
        else:
            mode = self._fmode
        await temp_path.chmod(mode)

        try:
            await dest_path.hardlink_to(temp_path)
        except FileExistsError:
            return False
        except OSError as exc:
            if exc.errno not in _NO_HARDLINK_ERRNOS:
                raise
            # no hard links on this filesystem; rename is still atomic but
            # replaces an object stored in the meantime
            await temp_path.replace(dest_path)

        return True

    def _placed_entry(
        self, checksum: str, name: str, source_path: anyio.Path, placed: bool
    ) -> StoreEntry:
        dest_path = self._store_root.joinpath(name)
        if not placed:
            logger.info("File %s was stored concurrently, skipping", dest_path)
            return self._entry(checksum, name, is_duplicate=True)

        logger.debug("Stored %s as %s", source_path, dest_path)
        return self._entry(checksum, name)

    def _entry(self, checksum: str, name: str, is_duplicate: bool = False) -> StoreEntry:
        return StoreEntry(checksum, name, str(self._store_root), is_duplicate)


async def _is_stored(dest_path: anyio.Path) -> bool:
    try:
        return stat.S_ISREG((await dest_path.stat()).st_mode)
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise StoreIOError("stat", dest_path, _reason(exc)) from exc


async def _discard(reader: TeeAsyncFileReader) -> None:
    if reader.temp_path is not None:
        await reader.temp_path.unlink(missing_ok=True)


def _reason(exc: OSError) -> str:
    return exc.strerror or str(exc)
