"""The `store` clipping flow.

Copies a file, or the newest screenshot, into the clippings directory under
its content hash and puts a path to the copy on the clipboard. Settings come
from a small TOML file:

    clippings = "~/notes/clippings"
    strip_dir = "~/notes"
    screenshot_dir = "~/Pictures/Screenshots"
"""

from __future__ import annotations

import logging
import os
import pathlib
import tomllib
from dataclasses import dataclass
from typing import Any

import anyio

from casd._utils import find_files
from casd.clipboard import Clipboard
from casd.errors import (
    ConfigInvalidError,
    ConfigMissingError,
    SourceNotFoundError,
    StoreIOError,
)
from casd.store import Store
from casd.store_entry import StoreEntry

logger = logging.getLogger(__name__)

CONFIG_KEYS = ("clippings", "strip_dir", "screenshot_dir")
REQUIRED_KEYS = ("clippings", "screenshot_dir")


@dataclass(frozen=True)
class ClippingsConfig:
    """Settings for the clipping flow, with `~` already expanded.

    Attributes:
        clippings: Directory clippings are stored in.
        screenshot_dir: Directory searched by `--last-screenshot`.
        strip_dir: Leading directory removed from the path put on the
            clipboard, if any.
    """

    clippings: pathlib.Path
    screenshot_dir: pathlib.Path
    strip_dir: pathlib.Path | None = None

    @classmethod
    def from_mapping(cls, data: dict[str, Any], source: str = "<config>") -> ClippingsConfig:
        missing = [key for key in REQUIRED_KEYS if key not in data]
        if missing:
            raise ConfigInvalidError(
                f"{source}: missing required key(s): {', '.join(missing)}"
            )

        for key in data:
            if key not in CONFIG_KEYS:
                logger.debug("%s: ignoring unknown key %r", source, key)

        paths: dict[str, pathlib.Path] = {}
        for key in CONFIG_KEYS:
            value = data.get(key)
            if value is None:
                continue
            if not isinstance(value, str) or not value:
                raise ConfigInvalidError(f"{source}: `{key}` must be a non-empty path")
            paths[key] = pathlib.Path(value).expanduser()

        return cls(**paths)


def default_config_path() -> pathlib.Path:
    """`$XDG_CONFIG_HOME/store/config.toml`, defaulting to `~/.config`."""
    config_home = os.environ.get("XDG_CONFIG_HOME") or "~/.config"
    return pathlib.Path(config_home).expanduser() / "store" / "config.toml"


def load_config(path: str | os.PathLike[str] | None = None) -> ClippingsConfig:
    """Read the clipping configuration.

    Parameters:
        path: Config file to read. Defaults to
            [`default_config_path()`][casd.clippings.default_config_path].

    Raises:
        ConfigMissingError: The file does not exist.
        ConfigInvalidError: The file is not valid TOML or lacks a required key.
    """
    config_path = pathlib.Path(path).expanduser() if path else default_config_path()
    try:
        with config_path.open("rb") as fh:
            data = tomllib.load(fh)
    except FileNotFoundError as exc:
        raise ConfigMissingError(f"No config file at {config_path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigInvalidError(f"{config_path}: {exc}") from exc
    except OSError as exc:
        raise ConfigInvalidError(
            f"{config_path}: {exc.strerror or exc}"
        ) from exc

    logger.debug("Loaded config from %s", config_path)
    return ClippingsConfig.from_mapping(data, source=str(config_path))


async def latest_file(directory: str | os.PathLike[str]) -> pathlib.Path:
    """Return the most recently modified regular file directly in `directory`.

    Ties keep whichever file the directory listing produced first.

    Raises:
        SourceNotFoundError: `directory` is missing or holds no files.
        StoreIOError: `directory` could not be listed.
    """
    path = anyio.Path(directory)

    newest: anyio.Path | None = None
    newest_mtime = 0.0
    try:
        async for candidate in find_files(path):
            mtime = (await candidate.stat()).st_mtime
            if newest is None or mtime > newest_mtime:
                newest, newest_mtime = candidate, mtime
    except (FileNotFoundError, NotADirectoryError) as exc:
        raise SourceNotFoundError(directory) from exc
    except OSError as exc:
        raise StoreIOError("list", directory, exc.strerror or str(exc)) from exc

    if newest is None:
        raise SourceNotFoundError(pathlib.Path(directory) / "*")

    return pathlib.Path(newest)


def display_path(
    path: str | os.PathLike[str], strip_dir: str | os.PathLike[str] | None
) -> str:
    """Return `path` relative to `strip_dir` when it lies inside it.

    Comparison is by whole path components, so `/notes-old/x` is not treated
    as being under `/notes`. When the paths do not match as written, both are
    resolved (relative to the working directory, through symlinks) and
    compared again. Paths outside `strip_dir` are returned unchanged.
    """
    if strip_dir is None:
        return str(path)

    target = pathlib.Path(path)
    try:
        return str(target.relative_to(strip_dir))
    except ValueError:
        pass

    try:
        return str(target.resolve().relative_to(pathlib.Path(strip_dir).resolve()))
    except (ValueError, OSError):
        return str(target)


async def clip(
    config: ClippingsConfig,
    source: str | os.PathLike[str],
    clipboard: Clipboard,
) -> StoreEntry:
    """Store `source` in the clippings directory and copy its path.

    Returns:
        StoreEntry: The stored clipping.
    """
    store = Store(config.clippings, keep_extension=True, create_root=True)
    entry = await store.insert(source)

    shown = display_path(entry.abspath, config.strip_dir)
    await clipboard.set(shown)
    logger.info("Copied %s to the clipboard", shown)

    return entry
