"""Shared pytest fixtures for renderer and CLI checks."""

from __future__ import annotations

import io
import os
import subprocess
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from npd.lib.config.settings import RenderConfig
from npd.lib.render import OutputWriter, StandardRenderer

if TYPE_CHECKING:
    from collections.abc import Callable

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5, 6000)
FIXED_STAMP = "[2024-01-02 03:04:05.006]"

_ENV_OVERRIDES = (
    "NO_COLOR",
    "NPD_COLOR",
    "NPD_VERBOSE",
    "NPD_DIRECTORY",
    "NPD_APPNAME",
    "NPD_REPO_ROOT",
)


@dataclass(frozen=True, slots=True)
class CliResult:
    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str


@dataclass(slots=True)
class Session:
    renderer: StandardRenderer
    stdout: io.StringIO
    stderr: io.StringIO


@pytest.fixture(autouse=True)
def _clean_render_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def package_root() -> Path:
    return PACKAGE_ROOT


@pytest.fixture
def make_session() -> Callable[..., Session]:
    def _make(
        command: str = "list",
        *,
        color: bool = False,
        verbose: bool = False,
        appname: str = "npd",
        directory: str = "/work",
        columns: int = 80,
        prompter: object | None = None,
    ) -> Session:
        stdout = io.StringIO()
        stderr = io.StringIO()
        config = RenderConfig(color=color, verbose=verbose, dir=directory, appname=appname)
        renderer = StandardRenderer(
            command,
            config,
            writer=OutputWriter(color=color, stdout=stdout, stderr=stderr),
            columns=columns,
            clock=lambda: FIXED_NOW,
            prompter=prompter,  # type: ignore[arg-type]
        )
        return Session(renderer=renderer, stdout=stdout, stderr=stderr)

    return _make


@pytest.fixture
def cli_env(package_root: Path, tmp_path: Path) -> dict[str, str]:
    env = os.environ.copy()
    for name in _ENV_OVERRIDES:
        env.pop(name, None)
    existing = env.get("PYTHONPATH", "")
    root = str(package_root / "src")
    env["PYTHONPATH"] = root if not existing else f"{root}:{existing}"
    env["NPD_REPO_ROOT"] = tmp_path.as_posix()
    env["COLUMNS"] = "80"
    return env


@pytest.fixture
def run_npd(package_root: Path, cli_env: dict[str, str]) -> Callable[..., CliResult]:
    def _run(args: list[str], stdin: str | None = None, timeout: float = 15.0) -> CliResult:
        completed = subprocess.run(
            [sys.executable, "-m", "npd", *args],
            cwd=package_root,
            env=cli_env,
            input=stdin,
            capture_output=True,
            text=True,
            check=False,
            timeout=timeout,
        )
        return CliResult(
            args=tuple(args),
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )

    return _run
