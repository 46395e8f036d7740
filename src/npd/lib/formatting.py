"""Shared formatting protocol and helpers for command output.

Lives in the lib layer so both config types (lib/) and CLI code (cli/) can
depend on it without introducing lib -> cli imports.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class FormatContext:
    """Parameters passed to text formatters."""

    verbosity: int = 0  # 0=normal, 1=verbose, -1=quiet
    width: int = 80  # terminal column width hint


@runtime_checkable
class TextFormattable(Protocol):
    """Protocol for output dataclasses that provide a human-readable text format."""

    def format_text(self, ctx: FormatContext | None = None) -> str: ...


def kv_block(pairs: list[tuple[str, str | None]]) -> str:
    """Render key: value pairs, skipping None values.

    >>> kv_block([("color", "true"), ("dir", "/work"), ("appname", None)])
    'color: true\\ndir: /work'
    """
    return "\n".join(f"{k}: {v}" for k, v in pairs if v is not None)
