"""Cyclopts CLI entry point for npd rendering."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys
from contextvars import ContextVar
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, TextIO

from cyclopts import App, Parameter

from npd import __version__
from npd.cli.output import OutputConfig, normalize_output_format
from npd.cli.output import emit as emit_output
from npd.lib.config import RenderConfig, load_config, resolve_repo_root
from npd.lib.domain import LogEntry
from npd.lib.errors import NpdError
from npd.lib.render import StandardRenderer
from npd.lib.render.events import RenderEvent, decode_event
from npd.lib.types import EventId

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GlobalOptions:
    """Top-level options that apply to all commands."""

    output: OutputConfig


_GLOBAL_OPTIONS: ContextVar[GlobalOptions | None] = ContextVar("_GLOBAL_OPTIONS", default=None)


def get_global_options() -> GlobalOptions:
    """Return parsed global options for current command."""

    default = GlobalOptions(output=OutputConfig(format="text"))
    return _GLOBAL_OPTIONS.get() or default


def emit(payload: object) -> None:
    """Write command output using current output format settings."""

    emit_output(payload, get_global_options().output)


def _extract_global_options(argv: Sequence[str]) -> tuple[list[str], GlobalOptions]:
    json_mode = False
    output_format: str | None = None
    cleaned: list[str] = []

    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "--json":
            json_mode = True
            i += 1
            continue
        if arg == "--format":
            if i + 1 >= len(argv):
                raise SystemExit("--format requires a value")
            output_format = argv[i + 1]
            i += 2
            continue
        if arg.startswith("--format="):
            output_format = arg.partition("=")[2]
            i += 1
            continue
        if arg in {"-v", "-vv"}:
            i += 1
            continue

        cleaned.append(arg)
        i += 1

    resolved = normalize_output_format(requested=output_format, json_mode=json_mode)
    return cleaned, GlobalOptions(output=OutputConfig(format=resolved))


app = App(
    name="npd",
    help="Render npd tool events as console output.",
    version=__version__,
    help_formatter="plain",
)


def resolve_render_config(
    *,
    no_color: bool = False,
    verbose: bool = False,
    directory: str | None = None,
) -> RenderConfig:
    """Load repository config, then apply command-line overrides."""

    config = load_config(resolve_repo_root())
    if no_color:
        config = replace(config, color=False)
    if verbose:
        config = replace(config, verbose=True)
    if directory is not None:
        config = replace(config, dir=Path(directory).expanduser().resolve().as_posix())
    return config


def read_events(handle: TextIO) -> Iterator[RenderEvent]:
    """Decode a JSON-lines event stream, one object per line."""

    for line_number, line in enumerate(handle, start=1):
        stripped = line.strip()
        if not stripped:
            continue
        try:
            payload = json.loads(stripped)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON on line {line_number}: {exc.msg}") from exc
        if not isinstance(payload, dict):
            raise ValueError(f"Invalid event on line {line_number}: expected a JSON object.")
        yield decode_event(payload)


async def replay(renderer: StandardRenderer, events: Iterator[RenderEvent]) -> None:
    """Feed events to the renderer in order; prompt answers are shown as JSON."""

    for event in events:
        answers = await renderer.dispatch(event)
        if answers is not None:
            renderer.log(LogEntry(id=EventId("json"), level="info", data={"json": answers}))


@app.command(name="render")
def render(
    command: Annotated[
        str,
        Parameter(name="--command", help="Command that produced the events (selects layout)."),
    ] = "",
    input_path: Annotated[
        str | None,
        Parameter(name="--input", help="JSON-lines event file. Defaults to stdin."),
    ] = None,
    no_color: Annotated[
        bool,
        Parameter(name="--no-color", help="Strip colors from rendered output."),
    ] = False,
    verbose: Annotated[
        bool,
        Parameter(name="--verbose", help="Print stack traces for every error."),
    ] = False,
    directory: Annotated[
        str | None,
        Parameter(name="--dir", help="Directory install paths are shown relative to."),
    ] = None,
) -> None:
    """Render a JSON-lines stream of log, error, prompt and end events."""

    config = resolve_render_config(no_color=no_color, verbose=verbose, directory=directory)
    renderer = StandardRenderer(command, config)

    if input_path is None:
        events = read_events(sys.stdin)
        _replay_or_exit(renderer, events)
        return

    with Path(input_path).expanduser().open("r", encoding="utf-8") as handle:
        _replay_or_exit(renderer, read_events(handle))


def _replay_or_exit(renderer: StandardRenderer, events: Iterator[RenderEvent]) -> None:
    try:
        asyncio.run(replay(renderer, events))
    except NpdError as exc:
        renderer.error(exc)
        raise SystemExit(1) from None


@app.command(name="config")
def show_config() -> None:
    """Show the resolved render configuration."""

    emit(resolve_render_config())


def _operation_error_message(exc: Exception) -> str:
    if isinstance(exc, KeyError) and exc.args:
        return str(exc.args[0])
    message = str(exc).strip()
    if message:
        return message
    return exc.__class__.__name__


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point used by `npd` and `python -m npd`."""

    from npd.lib.logging import configure_logging

    args = list(sys.argv[1:] if argv is None else argv)

    # Configure logging early so diagnostics go to stderr, never stdout.
    json_mode = "--json" in args or "--format" in args
    verbose_count = args.count("-v") + 2 * args.count("-vv")
    color = "--no-color" not in args and not os.getenv("NO_COLOR")
    configure_logging(json_mode=json_mode, verbosity=verbose_count, color=color)

    cleaned_args, options = _extract_global_options(args)

    token = _GLOBAL_OPTIONS.set(options)
    try:
        try:
            app(cleaned_args)
        except (KeyError, ValueError, OSError) as exc:
            logger.debug("command failed", exc_info=True)
            print(f"error: {_operation_error_message(exc)}", file=sys.stderr)
            raise SystemExit(1) from None
    finally:
        _GLOBAL_OPTIONS.reset(token)
