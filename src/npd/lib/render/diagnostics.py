"""Stack and environment details printed for unexpected errors."""

from __future__ import annotations

import platform
import re
import traceback
from collections.abc import Sequence

from npd import __version__

_NEWLINE_RE = re.compile(r"\r?\n")


def error_code(err: BaseException) -> str | None:
    code = getattr(err, "code", None)
    if code is None or code == "":
        return None
    return str(code)


def needs_diagnostics(err: BaseException, *, verbose: bool) -> bool:
    """Uncoded errors and low-level OS errors always get the full report."""

    return verbose or error_code(err) is None or bool(getattr(err, "errno", None))


def error_message(err: BaseException) -> str:
    message = getattr(err, "message", None)
    if not isinstance(message, str):
        message = str(err)
    return _NEWLINE_RE.sub(" ", message).strip()


def stack_text(err: BaseException) -> str:
    """Prefer an explicit `stack` attribute, then the traceback, else N/A."""

    stack = getattr(err, "stack", None)
    if isinstance(stack, str) and stack:
        return stack
    if isinstance(stack, Sequence) and stack:
        return "\n".join(str(frame) for frame in stack)
    if err.__traceback__ is not None:
        return "".join(traceback.format_exception(err)).rstrip("\n")
    return "N/A"


def console_trace() -> str:
    # Drop this helper's own frame from the trace.
    return "".join(traceback.format_stack()[:-1])


def system_info(appname: str) -> list[str]:
    return [
        f"{appname} version: {__version__}",
        f"python version: {platform.python_version()}",
        f"os: {platform.system()} {platform.release()} {platform.machine()}",
    ]
