"""Renderer configuration loader."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import cast

from npd.lib.formatting import FormatContext, kv_block

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".npd"
CONFIG_FILE_NAME = "config.toml"


def _cwd() -> str:
    return Path.cwd().as_posix()


@dataclass(frozen=True, slots=True)
class RenderConfig:
    """Presentation settings fixed for one renderer session."""

    color: bool = True
    verbose: bool = False
    dir: str = field(default_factory=_cwd)
    appname: str = "npd"

    def format_text(self, ctx: FormatContext | None = None) -> str:
        _ = ctx
        return kv_block(
            [
                ("color", str(self.color).lower()),
                ("verbose", str(self.verbose).lower()),
                ("dir", self.dir),
                ("appname", self.appname),
            ]
        )


_RENDER_KEY_MAP: dict[str, str] = {
    "color": "color",
    "verbose": "verbose",
    "dir": "dir",
    "directory": "dir",
    "appname": "appname",
}

_ENV_OVERRIDE_MAP: dict[str, str] = {
    "NPD_COLOR": "color",
    "NPD_VERBOSE": "verbose",
    "NPD_DIRECTORY": "dir",
    "NPD_APPNAME": "appname",
}

_BOOL_FIELDS = frozenset({"color", "verbose"})
_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSEY = frozenset({"0", "false", "no", "off"})


def config_path(repo_root: Path) -> Path:
    return repo_root / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def _coerce_file_value(*, field_name: str, raw_value: object, source: str) -> object:
    if field_name in _BOOL_FIELDS:
        if not isinstance(raw_value, bool):
            raise ValueError(
                f"Invalid value for '{source}': expected bool, got "
                f"{type(raw_value).__name__} ({raw_value!r})."
            )
        return raw_value

    if not isinstance(raw_value, str):
        raise ValueError(
            f"Invalid value for '{source}': expected str, got "
            f"{type(raw_value).__name__} ({raw_value!r})."
        )
    normalized = raw_value.strip()
    if not normalized:
        raise ValueError(f"Invalid value for '{source}': expected non-empty string.")
    return normalized


def _coerce_env_value(*, field_name: str, raw_value: str, env_name: str) -> object:
    normalized = raw_value.strip()
    if field_name in _BOOL_FIELDS:
        lowered = normalized.lower()
        if lowered in _TRUTHY:
            return True
        if lowered in _FALSEY:
            return False
        raise ValueError(
            f"Invalid environment override '{env_name}': expected bool, got {raw_value!r}."
        )

    if not normalized:
        raise ValueError(
            f"Invalid environment override '{env_name}': expected non-empty string."
        )
    return normalized


def _default_values() -> dict[str, object]:
    defaults = RenderConfig()
    return {item.name: getattr(defaults, item.name) for item in fields(RenderConfig)}


def _apply_toml_payload(
    *,
    values: dict[str, object],
    payload: dict[str, object],
    path: Path,
) -> None:
    for key, raw_value in payload.items():
        if key != "render":
            logger.warning("Ignoring unknown npd config key '%s'.", key)
            continue
        if not isinstance(raw_value, dict):
            raise ValueError(f"Invalid value for '{key}' in '{path}': expected table.")
        for section_key, section_value in cast("dict[str, object]", raw_value).items():
            field_name = _RENDER_KEY_MAP.get(section_key)
            if field_name is None:
                logger.warning("Ignoring unknown npd config key '%s.%s'.", key, section_key)
                continue
            values[field_name] = _coerce_file_value(
                field_name=field_name,
                raw_value=section_value,
                source=f"{key}.{section_key}",
            )


def _apply_env_overrides(values: dict[str, object]) -> None:
    for env_name, field_name in _ENV_OVERRIDE_MAP.items():
        raw_value = os.getenv(env_name)
        if raw_value is None:
            continue
        values[field_name] = _coerce_env_value(
            field_name=field_name,
            raw_value=raw_value,
            env_name=env_name,
        )
    # https://no-color.org: any non-empty value disables color.
    if os.getenv("NO_COLOR"):
        values["color"] = False


def _build_config(values: dict[str, object], repo_root: Path) -> RenderConfig:
    directory = Path(cast("str", values["dir"])).expanduser()
    if not directory.is_absolute():
        directory = repo_root / directory
    return RenderConfig(
        color=cast("bool", values["color"]),
        verbose=cast("bool", values["verbose"]),
        dir=directory.resolve().as_posix(),
        appname=cast("str", values["appname"]),
    )


def load_config(repo_root: Path) -> RenderConfig:
    """Load `.npd/config.toml` and apply environment overrides."""

    values = _default_values()
    values["dir"] = repo_root.as_posix()
    path = config_path(repo_root)
    if path.is_file():
        payload_obj = tomllib.loads(path.read_text(encoding="utf-8"))
        payload = cast("dict[str, object]", payload_obj)
        _apply_toml_payload(values=values, payload=payload, path=path)

    _apply_env_overrides(values)
    return _build_config(values, repo_root)
