"""Configuration loading for npd rendering."""

from npd.lib.config._paths import resolve_repo_root
from npd.lib.config.settings import RenderConfig, load_config

__all__ = ["RenderConfig", "load_config", "resolve_repo_root"]
