"""Command-line entry points.

`casd` manages a store found by walking up from the working directory.
`store` files a clipping into the configured clippings directory and copies
its path to the clipboard. `casd add` prints the stored path and `store` the
path as put on the clipboard. Both exit non-zero with a one-line message on
any failure.
"""

from __future__ import annotations

import argparse
import logging
import os
import pathlib
import sys
from typing import Sequence

import anyio

from casd.__meta__ import __version__
from casd.checksum import ALGORITHMS, DEFAULT_ALGORITHM
from casd.clipboard import DEFAULT_CLIPBOARD_COMMAND, CommandClipboard
from casd.clippings import clip, display_path, latest_file, load_config
from casd.discovery import init_store, locate_store
from casd.errors import CasdError
from casd.put_strategies import PutStrategy
from casd.store import Store

logger = logging.getLogger("casd")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(verbosity: int) -> None:
    """Send casd's logs to stderr: WARNING, INFO with `-v`, DEBUG with `-vv`."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="log progress to stderr; repeat for debug output",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")


def build_casd_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="casd", description="CAS file manager utility")
    _add_common_arguments(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser(
        "init", help="initializes casd in the current working directory"
    )

    add = subparsers.add_parser("add", help="add a new entry to the cas")
    add.add_argument("path", help="file to add")
    add.add_argument(
        "--algorithm",
        choices=ALGORITHMS,
        default=DEFAULT_ALGORITHM,
        help="digest used to name the stored file (default: %(default)s)",
    )
    add.add_argument(
        "--strategy",
        choices=[strategy.value for strategy in PutStrategy],
        default=PutStrategy.HASH_THEN_COPY.value,
        help="how the file is copied into the store (default: %(default)s)",
    )
    return parser


def build_store_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="store",
        description="Copy a file into the clippings directory and its path to the clipboard",
    )
    _add_common_arguments(parser)
    parser.add_argument("path", nargs="?", help="file to store")
    parser.add_argument(
        "--last-screenshot",
        action="store_true",
        help="store the most recently modified file in the screenshot directory",
    )
    parser.add_argument("--config", help="config file to read instead of the default")
    parser.add_argument(
        "--clipboard-command",
        default=os.environ.get("STORE_CLIPBOARD", DEFAULT_CLIPBOARD_COMMAND),
        help="program called with the stored path (default: %(default)s)",
    )
    return parser


async def _run_init() -> int:
    marker = init_store(pathlib.Path.cwd())
    print(marker)
    return 0


async def _run_add(args: argparse.Namespace) -> int:
    root = locate_store(pathlib.Path.cwd())
    store = Store(root, algorithm=args.algorithm)
    entry = await store.insert(args.path, put_strategy=PutStrategy(args.strategy))
    print(entry.abspath)
    return 0


async def _run_store(args: argparse.Namespace) -> int:
    config = load_config(args.config)

    if args.last_screenshot:
        source = await latest_file(config.screenshot_dir)
        logger.info("Latest screenshot is %s", source)
    else:
        source = pathlib.Path(args.path).expanduser()

    entry = await clip(config, source, CommandClipboard(args.clipboard_command))
    print(display_path(entry.abspath, config.strip_dir))
    return 0


def _run(prog: str, func, *args) -> int:
    try:
        return anyio.run(func, *args)
    except CasdError as exc:
        logger.debug("%s failed", prog, exc_info=True)
        print(f"{prog}: error: {exc}", file=sys.stderr)
        return 1


def casd_main(argv: Sequence[str] | None = None) -> int:
    """Run the `casd` command.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_casd_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.command == "init":
        return _run(parser.prog, _run_init)
    if args.command == "add":
        return _run(parser.prog, _run_add, args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def store_main(argv: Sequence[str] | None = None) -> int:
    """Run the `store` command.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_store_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if not args.last_screenshot and not args.path:
        parser.error("a path or --last-screenshot is required")

    return _run(parser.prog, _run_store, args)
