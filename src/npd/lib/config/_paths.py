"""Path resolution helpers for repository-scoped config files."""

from __future__ import annotations

import os
from pathlib import Path

from npd.lib.config.settings import CONFIG_DIR_NAME


def resolve_repo_root(explicit: Path | None = None) -> Path:
    """Resolve the project root that owns `.npd/config.toml`.

    Precedence:
    1. Explicit function argument.
    2. `NPD_REPO_ROOT` environment variable.
    3. Current directory / ancestors containing `.npd/` or a `.git` entry.
    4. Current working directory.
    """

    if explicit is not None:
        return explicit.expanduser().resolve()

    env_root = os.getenv("NPD_REPO_ROOT")
    if env_root:
        return Path(env_root).expanduser().resolve()

    cwd = Path.cwd().resolve()
    candidate = cwd
    while True:
        if (candidate / CONFIG_DIR_NAME).is_dir():
            return candidate

        # A .git entry (file for worktree/submodule, directory for standalone
        # repo) marks a repo boundary.
        if (candidate / ".git").exists():
            return candidate

        parent = candidate.parent
        if parent == candidate:
            break
        candidate = parent

    return cwd
