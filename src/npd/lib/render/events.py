"""Typed renderer events and decoding of JSON event streams."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeAlias, cast

from npd.lib.domain import CacheEntry, LinkResult, LogEntry, PackageNode
from npd.lib.errors import NpdError
from npd.lib.types import CommandName
from npd.lib.render.prompt import PromptDescriptor


@dataclass(frozen=True, slots=True)
class LogEvent:
    entry: LogEntry


@dataclass(frozen=True, slots=True)
class ErrorEvent:
    error: BaseException


@dataclass(frozen=True, slots=True)
class PromptEvent:
    prompts: tuple[PromptDescriptor, ...]


@dataclass(frozen=True, slots=True)
class EndEvent:
    """Terminal result of a command; `data` shape depends on the command."""

    data: Any
    command: CommandName | None = None


RenderEvent: TypeAlias = LogEvent | ErrorEvent | PromptEvent | EndEvent


def _decode_error(payload: Mapping[str, Any]) -> NpdError:
    stack = payload.get("stack")
    if isinstance(stack, list):
        stack = [str(frame) for frame in cast("list[object]", stack)]
    errno = payload.get("errno")
    data = payload.get("data")
    return NpdError(
        str(payload.get("message") or ""),
        cast("str | None", payload.get("code")),
        details=cast("str | None", payload.get("details")),
        data=cast("Mapping[str, Any] | None", data) if isinstance(data, Mapping) else None,
        errno=int(errno) if errno is not None else None,
        stack=cast("str | Sequence[str] | None", stack),
    )


def _package(node: Any) -> PackageNode:
    return node if isinstance(node, PackageNode) else PackageNode.from_dict(node)


def _cache_entry(entry: Any) -> CacheEntry:
    return entry if isinstance(entry, CacheEntry) else CacheEntry.from_dict(entry)


def decode_end_payload(command: str, data: Any) -> Any:
    """Turn raw JSON result payloads into the domain types each command expects.

    Values that are already domain objects pass through unchanged.
    """

    normalized = normalize_name(command)
    if normalized in {"install", "update"} and isinstance(data, Mapping):
        return {
            str(name): _package(node)
            for name, node in cast("Mapping[str, Any]", data).items()
        }
    if normalized == "link" and isinstance(data, Mapping):
        return LinkResult.from_dict(cast("Mapping[str, Any]", data))
    if normalized == "list" and isinstance(data, Mapping) and "pkgMeta" in data:
        return PackageNode.from_dict(cast("Mapping[str, Any]", data))
    if normalized == "cachelist" and isinstance(data, list):
        return [_cache_entry(entry) for entry in cast("list[object]", data)]
    return data


def normalize_name(name: str) -> str:
    """Lower-case a command or log id and drop everything but letters and digits."""

    return "".join(char for char in name.lower() if char.isalnum())


def decode_event(payload: Mapping[str, Any]) -> RenderEvent:
    """Decode one JSON object from an event stream."""

    kind = payload.get("type", "log")
    if kind == "log":
        # Phase records from the logging transport carry command results.
        if payload.get("level") == "phase" and payload.get("id") == "end":
            return EndEvent(data=payload.get("data"))
        return LogEvent(entry=LogEntry.from_dict(payload))
    if kind == "error":
        return ErrorEvent(error=_decode_error(payload))
    if kind == "prompt":
        prompts = payload.get("prompts")
        if not isinstance(prompts, list):
            raise ValueError("Prompt event requires a 'prompts' array.")
        return PromptEvent(
            prompts=tuple(
                PromptDescriptor.from_dict(item)
                for item in cast("list[Mapping[str, Any]]", prompts)
            )
        )
    if kind == "end":
        event_command = payload.get("command")
        return EndEvent(
            data=payload.get("data"),
            command=CommandName(str(event_command)) if event_command else None,
        )
    raise ValueError(f"Unknown event type '{kind}'.")
