"""Standard console renderer for npd log, error, prompt and result events."""

from __future__ import annotations

import shutil
from collections.abc import Callable, Mapping, Sequence
from dataclasses import replace
from datetime import datetime
from typing import Any

import structlog
from rich.json import JSON
from rich.pretty import pretty_repr
from rich.text import Text

from npd.lib.config.settings import RenderConfig
from npd.lib.domain import CacheEntry, LinkResult, LogEntry, PackageNode
from npd.lib.render.diagnostics import (
    console_trace,
    error_code,
    error_message,
    needs_diagnostics,
    stack_text,
    system_info,
)
from npd.lib.render.events import (
    EndEvent,
    ErrorEvent,
    LogEvent,
    PromptEvent,
    RenderEvent,
    decode_end_payload,
    normalize_name,
)
from npd.lib.render.layout import LayoutState, build_prefix
from npd.lib.render.origin import guess_origin, with_origin
from npd.lib.render.prompt import PromptAdapter, PromptBackend, PromptDescriptor
from npd.lib.render.tree import flatten, flatten_install_root, to_rich_tree
from npd.lib.render.writer import OutputWriter
from npd.lib.serialization import to_jsonable
from npd.lib.types import EventId

logger = structlog.get_logger(__name__)

WIDE_COMMANDS = frozenset({"install", "update"})
WIDE_MIN_COLUMNS = 120
LINK_ID_WIDTH = 4


def is_compact(command: str, columns: int | None = None) -> bool:
    """Wide layout only for install/update on terminals of 120+ columns."""

    if normalize_name(command) not in WIDE_COMMANDS:
        return True
    width = columns if columns is not None else shutil.get_terminal_size().columns
    return width < WIDE_MIN_COLUMNS


def _timestamp(now: datetime) -> str:
    return now.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]


class StandardRenderer:
    """Turn tool events into aligned, colorized console output.

    One instance per command session: the column layout widens as wider ids and
    labels appear and never shrinks back, so later lines stay aligned with
    earlier ones.
    """

    def __init__(
        self,
        command: str,
        config: RenderConfig,
        *,
        writer: OutputWriter | None = None,
        columns: int | None = None,
        clock: Callable[[], datetime] | None = None,
        prompter: PromptBackend | None = None,
    ) -> None:
        self._command = command
        self._config = config
        self._writer = writer or OutputWriter(color=config.color)
        self._layout = LayoutState()
        self._clock = clock or datetime.now
        self._prompter = PromptAdapter(color=config.color, backend=prompter)
        self._compact = is_compact(command, columns)

    @property
    def compact(self) -> bool:
        return self._compact

    @property
    def layout(self) -> LayoutState:
        return self._layout

    @property
    def writer(self) -> OutputWriter:
        return self._writer

    # Event entry points

    async def dispatch(self, event: RenderEvent) -> dict[str, Any] | None:
        """Route one decoded event; prompt answers are returned, nothing else is."""

        if isinstance(event, LogEvent):
            self.log(event.entry)
        elif isinstance(event, ErrorEvent):
            self.error(event.error)
        elif isinstance(event, EndEvent):
            self.end(event.data, command=event.command)
        elif isinstance(event, PromptEvent):
            return await self.prompt(event.prompts)
        return None

    def log(self, entry: LogEntry) -> None:
        entry = with_origin(entry)
        handler = LOG_HANDLERS.get(normalize_name(entry.id), StandardRenderer.generic_log)
        handler(self, entry)

    def end(self, data: Any, *, command: str | None = None) -> None:
        name = normalize_name(command or self._command)
        handler = COMMAND_HANDLERS.get(name)
        if handler is None:
            logger.debug("No result renderer for command.", command=name)
            return
        handler(self, decode_end_payload(name, data))

    def error(self, err: BaseException) -> None:
        data = getattr(err, "data", None)
        origin = guess_origin(data) if isinstance(data, Mapping) else None
        prefix = build_prefix(
            self._layout,
            event_id=error_code(err) or "error",
            level="error",
            origin=origin,
            compact=self._compact,
        )
        line = Text(f"{self._config.appname} ")
        line.append_text(prefix)
        line.append(f" {error_message(err)}\n")
        self._writer.err(line)

        details = getattr(err, "details", None)
        if details:
            self._writer.err(
                Text.assemble(
                    ("\nAdditional error details:\n", "yellow"),
                    f"{str(details).strip()}\n",
                )
            )

        if not needs_diagnostics(err, verbose=self._config.verbose):
            return

        self._writer.err(
            Text.assemble(
                ("\nStack trace:\n", "yellow"),
                f"{stack_text(err)}\n",
                ("\nConsole trace:\n", "yellow"),
            )
        )
        self._writer.err(console_trace())

        self._writer.err(Text("\nSystem Info:\n", style="yellow"))
        self._writer.err("".join(f"{item}\n" for item in system_info(self._config.appname)))

    async def prompt(
        self, prompts: Sequence[PromptDescriptor | Mapping[str, Any]]
    ) -> dict[str, Any]:
        return await self._prompter.prompt(prompts)

    # Log formatters

    def generic_log(self, entry: LogEntry) -> None:
        stream = self._writer.stderr if entry.level == "warn" else self._writer.stdout
        line = Text("[")
        line.append(_timestamp(self._clock()), style="bright_black")
        line.append(f"] {self._config.appname} ")
        line.append_text(self._prefix(entry))
        line.append(f" {entry.message}\n")
        self._writer.write(stream, line)

    def _checkout_log(self, entry: LogEntry) -> None:
        if self._compact:
            repository = (entry.origin or "").split("#")[0]
            entry = replace(entry, message=f"{repository}#{entry.message}")
        self.generic_log(entry)

    def _progress_log(self, entry: LogEntry) -> None:
        if self._compact:
            message = " ".join(part for part in (entry.origin, entry.message) if part)
            entry = replace(entry, message=message)
        self.generic_log(entry)

    def _cached_entry_log(self, entry: LogEntry) -> None:
        if self._compact:
            entry = replace(entry, message=entry.origin or "")
        self.generic_log(entry)

    def _json_log(self, entry: LogEntry) -> None:
        payload = (entry.data or {}).get("json")
        highlighted = JSON.from_data(to_jsonable(payload), indent=2, default=str).text
        self._writer.out(Text.assemble("\n", highlighted, "\n\n"))

    def _prefix(self, entry: LogEntry) -> Text:
        return build_prefix(
            self._layout,
            event_id=entry.id,
            level=entry.level,
            origin=entry.origin,
            compact=self._compact,
        )

    # Command result formatters

    def _install(self, packages: Mapping[str, PackageNode]) -> None:
        rendered = "".join(
            "\n" + self._writer.render(to_rich_tree(flatten_install_root(node, self._config.dir)))
            for node in packages.values()
        )
        if rendered:
            self._writer.out(rendered)

    def _list(self, tree: Any) -> None:
        if isinstance(tree, PackageNode):
            display = flatten(replace(tree, root=True), self._config.dir)
            self._writer.out(to_rich_tree(display))
            return
        dump = pretty_repr(to_jsonable(tree), indent_size=2)
        self._writer.out(dump.replace("{", "").replace("}", "") + "\n")

    def _link(self, result: LinkResult) -> None:
        self._layout.id_width = LINK_ID_WIDTH
        message = f"{result.dst} > {result.src}"
        self.log(LogEntry(id=EventId("link"), level="info", message=message))
        if result.installed:
            self._install(result.installed)

    def _cache_list(self, entries: Sequence[CacheEntry]) -> None:
        lines = []
        for entry in entries:
            meta = entry.pkg_meta
            version = meta.version or meta.target or ""
            lines.append(f"{meta.name}={meta.source or ''}#{version}\n")
        if lines:
            self._writer.out("".join(lines))


LogHandler = Callable[[StandardRenderer, LogEntry], None]
CommandHandler = Callable[[StandardRenderer, Any], None]

# Keyed by normalize_name(): lower case, letters and digits only.
LOG_HANDLERS: dict[str, LogHandler] = {
    "checkout": StandardRenderer._checkout_log,
    "progress": StandardRenderer._progress_log,
    "extract": StandardRenderer._progress_log,
    "cachedentry": StandardRenderer._cached_entry_log,
    "json": StandardRenderer._json_log,
}

COMMAND_HANDLERS: dict[str, CommandHandler] = {
    "install": StandardRenderer._install,
    "update": StandardRenderer._install,
    "list": StandardRenderer._list,
    "link": StandardRenderer._link,
    "cachelist": StandardRenderer._cache_list,
}
