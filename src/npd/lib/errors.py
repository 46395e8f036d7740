"""Error types raised by npd and understood by the renderer."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any


class NpdError(Exception):
    """Expected tool error carrying a stable code.

    Errors with a `code` are rendered tersely; everything else is treated as an
    internal failure and rendered with full diagnostics.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        *,
        details: str | None = None,
        data: Mapping[str, Any] | None = None,
        errno: int | None = None,
        stack: str | Sequence[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details
        self.data = data
        self.errno = errno
        self.stack = stack

    def __str__(self) -> str:
        return self.message


class InputCancelled(NpdError):
    """The user aborted an interactive prompt."""

    def __init__(self, message: str = "Prompt cancelled") -> None:
        super().__init__(message, "EINPUTCANCELLED")


class InputFailed(NpdError):
    """The interactive input backend could not collect answers."""

    def __init__(self, message: str = "Prompt failed") -> None:
        super().__init__(message, "EINPUTFAILED")


def create_error(message: str, code: str | None = None, **props: Any) -> NpdError:
    """Build an `NpdError`, copying any extra props onto it as attributes."""

    error = NpdError(
        message,
        code,
        details=props.pop("details", None),
        data=props.pop("data", None),
        errno=props.pop("errno", None),
        stack=props.pop("stack", None),
    )
    for key, value in props.items():
        setattr(error, key, value)
    return error


def working_error() -> NpdError:
    return create_error("Already working", "EWORKING")


def unimplemented_error() -> NpdError:
    return create_error("Not implemented")
