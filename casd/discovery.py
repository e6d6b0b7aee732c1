"""Finding and creating the `.casd` marker directory.

A casd store is the `.casd` directory of the nearest enclosing directory that
has one, the same way a version-control tool finds its repository. Discovery
and initialization are sync; they run once before any file is touched.
"""

from __future__ import annotations

import logging
import os
import pathlib
import stat
from typing import Iterator

from casd.errors import NotInitializedError, StoreIOError

logger = logging.getLogger(__name__)

MARKER_DIR = ".casd"


def ancestors(start: str | os.PathLike[str]) -> Iterator[pathlib.Path]:
    """Yield `start` and then each of its parents, ending at the filesystem root."""
    path = pathlib.Path(start).absolute()
    yield path
    yield from path.parents


def _is_marker(path: pathlib.Path) -> bool:
    try:
        return stat.S_ISDIR(path.stat().st_mode)
    except (FileNotFoundError, NotADirectoryError):
        return False
    except OSError as exc:
        raise StoreIOError("stat", path, exc.strerror or str(exc)) from exc


def locate(
    start: str | os.PathLike[str], marker: str = MARKER_DIR
) -> pathlib.Path | None:
    """Return the nearest `<ancestor>/<marker>` directory, or `None`.

    Raises:
        StoreIOError: An ancestor could not be inspected, e.g. for lack of
            permission.
    """
    candidates = (directory / marker for directory in ancestors(start))
    return next((c for c in candidates if _is_marker(c)), None)


def locate_store(
    start: str | os.PathLike[str], marker: str = MARKER_DIR
) -> pathlib.Path:
    """Return the store root enclosing `start`.

    Raises:
        NotInitializedError: No ancestor of `start` holds a `marker` directory.
    """
    root = locate(start, marker)
    if root is None:
        raise NotInitializedError(start)

    logger.debug("Using store at %s", root)
    return root


def init_store(cwd: str | os.PathLike[str]) -> pathlib.Path:
    """Create `cwd/.casd` unless it already exists and return its path.

    Raises:
        StoreIOError: The directory could not be created.
    """
    marker = pathlib.Path(cwd).absolute() / MARKER_DIR
    if _is_marker(marker):
        logger.info("Store already initialized at %s", marker)
        return marker

    try:
        marker.mkdir()
    except OSError as exc:
        raise StoreIOError("init", marker, exc.strerror or str(exc)) from exc

    logger.info("Initialized empty store at %s", marker)
    return marker
