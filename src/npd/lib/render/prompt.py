"""Interactive prompts forwarded to a terminal input backend."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any, Protocol

from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.text import Text

from npd.lib.errors import InputCancelled, InputFailed
from npd.lib.render.writer import strip_color


@dataclass(frozen=True, slots=True)
class PromptDescriptor:
    """One question to ask; answers are keyed by `name`."""

    name: str
    message: str
    type: str = "input"
    default: Any = None
    choices: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> PromptDescriptor:
        if "name" not in payload:
            raise KeyError("Prompt is missing 'name'")
        return cls(
            name=str(payload["name"]),
            message=str(payload.get("message") or ""),
            type=str(payload.get("type") or "input"),
            default=payload.get("default"),
            choices=tuple(str(choice) for choice in payload.get("choices") or ()),
        )


class PromptBackend(Protocol):
    """Blocking interactive-input subsystem."""

    def ask(self, prompts: Sequence[PromptDescriptor]) -> dict[str, Any]: ...


class RichPromptBackend:
    """Ask questions on the terminal with `rich.prompt`."""

    def __init__(self, *, color: bool = True) -> None:
        self._console = Console(color_system="auto" if color else None)

    def ask(self, prompts: Sequence[PromptDescriptor]) -> dict[str, Any]:
        return {descriptor.name: self._ask_one(descriptor) for descriptor in prompts}

    def _ask_one(self, descriptor: PromptDescriptor) -> Any:
        message = Text.from_ansi(descriptor.message)
        if descriptor.type == "confirm":
            return Confirm.ask(
                message,
                console=self._console,
                default=bool(descriptor.default),
            )

        kwargs: dict[str, Any] = {}
        if descriptor.default is not None:
            kwargs["default"] = str(descriptor.default)
        if descriptor.choices:
            kwargs["choices"] = list(descriptor.choices)
        return Prompt.ask(
            message,
            console=self._console,
            password=descriptor.type == "password",
            **kwargs,
        )


class PromptAdapter:
    """Forward prompt sequences to the input backend without blocking the loop."""

    def __init__(self, *, color: bool = True, backend: PromptBackend | None = None) -> None:
        self._color = color
        self._backend = backend or RichPromptBackend(color=color)

    def prepare(
        self, prompts: Sequence[PromptDescriptor | Mapping[str, Any]]
    ) -> list[PromptDescriptor]:
        descriptors = [
            item if isinstance(item, PromptDescriptor) else PromptDescriptor.from_dict(item)
            for item in prompts
        ]
        if self._color:
            return descriptors
        return [replace(item, message=strip_color(item.message)) for item in descriptors]

    async def prompt(
        self, prompts: Sequence[PromptDescriptor | Mapping[str, Any]]
    ) -> dict[str, Any]:
        descriptors = self.prepare(prompts)
        try:
            return await asyncio.to_thread(self._backend.ask, descriptors)
        except (EOFError, KeyboardInterrupt) as exc:
            raise InputCancelled() from exc
        except (OSError, ValueError) as exc:
            raise InputFailed(str(exc) or "Prompt failed") from exc
