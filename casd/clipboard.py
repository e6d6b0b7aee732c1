from __future__ import annotations

import logging
import subprocess
from typing import Protocol

import anyio

from casd.errors import ClipboardError

logger = logging.getLogger(__name__)

DEFAULT_CLIPBOARD_COMMAND = "wl-copy"


class Clipboard(Protocol):
    """Anything that can place a line of text on the clipboard."""

    async def set(self, text: str) -> None:
        ...


class CommandClipboard:
    """Sets the clipboard by running `program <text>` and waiting for it.

    Parameters:
        program: Executable name or path, e.g. `wl-copy`, `pbcopy`.
    """

    def __init__(self, program: str = DEFAULT_CLIPBOARD_COMMAND) -> None:
        self._program = program

    @property
    def program(self) -> str:
        return self._program

    async def set(self, text: str) -> None:
        command = [self._program, text]
        logger.debug("Running %s", command)
        try:
            # clipboard tools commonly fork a daemon that outlives them; it
            # must not inherit pipes we would wait on
            result = await anyio.run_process(
                command,
                check=False,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as exc:
            raise ClipboardError(
                "run clipboard command", self._program, exc.strerror or str(exc)
            ) from exc

        if result.returncode != 0:
            raise ClipboardError(
                "run clipboard command",
                self._program,
                f"exit status {result.returncode}",
            )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._program!r})"


__all__ = ["Clipboard", "CommandClipboard", "DEFAULT_CLIPBOARD_COMMAND"]
