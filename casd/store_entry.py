from __future__ import annotations

import pathlib
from dataclasses import dataclass


@dataclass(frozen=True)
class StoreEntry:
    """A stored object: its content checksum and where it lives on disk.

    Attributes:
        checksum: Hexdigest of file contents.
        path: File path **relative** to `store_root`; the checksum plus any
            preserved extension.
        store_root: **Absolute** path of the store holding this entry.
        is_duplicate: Whether the object was already present, meaning the
            insertion that returned this entry wrote nothing.
    """

    checksum: str
    path: str
    store_root: str
    is_duplicate: bool = False

    def __post_init__(self) -> None:
        if pathlib.Path(self.path).is_absolute():
            raise ValueError("Entry's path must be a relative path")
        if not pathlib.Path(self.store_root).is_absolute():
            raise ValueError("Entry's store_root must be an absolute path")

    @property
    def abspath(self) -> pathlib.Path:
        """Absolute path of the stored object."""
        return pathlib.Path(self.store_root, self.path)
