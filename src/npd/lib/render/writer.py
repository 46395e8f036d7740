"""Single exit point for rendered output."""

from __future__ import annotations

import io
import os
import sys
from contextlib import suppress
from typing import TextIO

from rich.ansi import AnsiDecoder
from rich.console import Console, RenderableType
from rich.theme import Theme

# Wide enough that trees and long lines are never cropped by the capture console.
RENDER_WIDTH = 1024

_THEME = Theme({"json.key": "green", "json.str": "cyan"})
_DECODER = AnsiDecoder()


def strip_color(value: str) -> str:
    """Remove ANSI escape sequences while keeping line endings intact."""

    stripped: list[str] = []
    for line in value.splitlines(keepends=True):
        body = line.rstrip("\r\n")
        stripped.append(_DECODER.decode_line(body).plain + line[len(body) :])
    return "".join(stripped)


def _capture_console() -> Console:
    return Console(
        file=io.StringIO(),
        force_terminal=True,
        force_jupyter=False,
        color_system="standard",
        width=RENDER_WIDTH,
        highlight=False,
        markup=False,
        emoji=False,
        theme=_THEME,
    )


class OutputWriter:
    """Write rendered content to stdout/stderr under one color policy.

    A broken pipe on either stream ends the process with status 0, so output
    can be piped into `head` or a pager without a spurious failure.
    """

    def __init__(
        self,
        *,
        color: bool = True,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ) -> None:
        self._color = color
        self._stdout = stdout
        self._stderr = stderr
        self._console = _capture_console()

    @property
    def color(self) -> bool:
        return self._color

    @property
    def stdout(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    @property
    def stderr(self) -> TextIO:
        return self._stderr if self._stderr is not None else sys.stderr

    def render(self, content: RenderableType) -> str:
        """Render styled content to an ANSI string; plain strings pass through."""

        if isinstance(content, str):
            return content
        with self._console.capture() as capture:
            self._console.print(content, end="", soft_wrap=True)
        return capture.get()

    def write(self, stream: TextIO, content: RenderableType) -> None:
        text = self.render(content)
        if not self._color:
            text = strip_color(text)
        try:
            stream.write(text)
            stream.flush()
        except BrokenPipeError:
            _exit_on_broken_pipe(stream)

    def out(self, content: RenderableType) -> None:
        self.write(self.stdout, content)

    def err(self, content: RenderableType) -> None:
        self.write(self.stderr, content)


def _exit_on_broken_pipe(stream: TextIO) -> None:
    # Point the dead descriptor at devnull so the interpreter's final flush
    # does not raise a second BrokenPipeError on the way out.
    with suppress(AttributeError, OSError, ValueError):
        fd = stream.fileno()
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, fd)
        os.close(devnull)
    raise SystemExit(0)
