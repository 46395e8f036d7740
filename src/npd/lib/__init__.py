"""Core npd library exports."""

from npd.lib.config.settings import RenderConfig
from npd.lib.domain import DisplayNode, LogEntry, PackageNode
from npd.lib.errors import InputCancelled, InputFailed, NpdError

__all__ = [
    "DisplayNode",
    "InputCancelled",
    "InputFailed",
    "LogEntry",
    "NpdError",
    "PackageNode",
    "RenderConfig",
]
