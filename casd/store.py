from __future__ import annotations

import logging
import os
import pathlib
import stat

import anyio

from casd._utils import AsyncFileReader
from casd.checksum import DEFAULT_ALGORITHM, Algorithm, check_source, compute_checksum
from casd.errors import StoreIOError
from casd.put_strategies import PutStrategiesRunner, PutStrategy
from casd.store_entry import StoreEntry

logger = logging.getLogger(__name__)

PathLikeArg = str | os.PathLike[str]


class Store:
    """Copies files into `root` under the hash of their content.

    A `Store` holds no state on disk besides the objects themselves: the
    checksum of a file *is* its name, optionally followed by the source's
    extension. Inserting the same content twice yields the same entry and
    writes nothing the second time.

    Unless otherwise indicated, `Store` APIs ***DON'T*** handle exceptions that
    may be raised as part of normal operation; filesystem failures surface as
    [`StoreIOError`][casd.errors.StoreIOError].

    Attributes:
        root: Directory path used as root of storage space
        keep_extension: Whether stored names keep the source's suffix
        algorithm: Digest algorithm used to name objects

    Parameters:
        root: Directory used as root of storage space. Relative paths are
            resolved against the working directory.
        keep_extension: Append the source file's final suffix (e.g. `.png`)
            to the stored name.
        create_root: Create `root`, including parents, on first insert. When
            `False` the root must already exist.
        algorithm: `"sha512"` or `"blake3"`.
        fmode: Mode set on *new* objects. `None` copies the source's mode.
        default_put_strategy: Default
            [`PutStrategy`][casd.put_strategies.PutStrategiesRunner] to use.
    """

    def __init__(
        self,
        root: PathLikeArg,
        keep_extension: bool = False,
        create_root: bool = False,
        algorithm: Algorithm = DEFAULT_ALGORITHM,
        fmode: int | None = None,
        default_put_strategy: PutStrategy = PutStrategy.HASH_THEN_COPY,
    ):
        self._root = anyio.Path(pathlib.Path(root).absolute())
        self._keep_extension = keep_extension
        self._create_root = create_root
        self._algorithm = algorithm
        self._default_put_strategy = default_put_strategy

        self._put_strategy_runner = PutStrategiesRunner(
            self.compute_checksum,
            self._checksum_to_name,
            self._root,
            fmode,
        )

    @property
    def root(self) -> str:
        """The store's root directory path"""
        return str(self._root)

    @property
    def keep_extension(self) -> bool:
        return self._keep_extension

    @property
    def algorithm(self) -> Algorithm:
        return self._algorithm

    async def insert(
        self,
        pathlike: PathLikeArg,
        put_strategy: PutStrategy | None = None,
    ) -> StoreEntry:
        """Store contents of `pathlike` using its content hash for the name.

        Parameters:
            pathlike: Path to a regular file.
            put_strategy: The strategy to use for putting the file into the
                store. If `None`, uses store's default strategy.

        Returns:
            StoreEntry: The stored object, new or pre-existing.

        Raises:
            SourceNotFoundError: `pathlike` does not exist.
            NotAFileError: `pathlike` is not a regular file.
            StoreIOError: The root is missing or the copy failed.
        """
        source_path = anyio.Path(pathlike)
        await check_source(source_path)
        await self._ensure_root()

        return await self._put_strategy_runner.run(
            put_strategy or self._default_put_strategy,
            source_path,
        )

    put = insert

    def get(self, checksum: str, extension: str = "") -> StoreEntry | None:
        """Return the `StoreEntry` for `checksum`, or `None` if no such object
        is stored.

        Parameters:
            checksum: Hexdigest of the content.
            extension: Suffix the object was stored with, including the dot.
        """
        name = checksum + extension
        if pathlib.Path(self._root, name).is_file():
            return StoreEntry(checksum, name, self.root)

        return None

    def exists(self, checksum: str, extension: str = "") -> bool:
        """Check whether a given checksum exists on disk."""
        return self.get(checksum, extension) is not None

    async def compute_checksum(self, file: AsyncFileReader) -> str:
        """Compute checksum of file with the store's algorithm."""
        return await compute_checksum(file, self._algorithm)

    def _checksum_to_name(self, checksum: str, source_path: anyio.Path) -> str:
        if self._keep_extension:
            return checksum + source_path.suffix
        return checksum

    async def _ensure_root(self) -> None:
        try:
            if stat.S_ISDIR((await self._root.stat()).st_mode):
                return
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise StoreIOError(
                "open store", self._root, exc.strerror or str(exc)
            ) from exc

        if not self._create_root:
            raise StoreIOError("open store", self._root, "not a directory")

        try:
            await self._root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreIOError(
                "create store", self._root, exc.strerror or str(exc)
            ) from exc
        logger.info("Created store directory %s", self._root)

    def __contains__(self, checksum: str) -> bool:
        """Return whether an object named exactly `checksum` is stored."""
        return self.exists(checksum)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.root!r}, algorithm={self._algorithm!r})"
