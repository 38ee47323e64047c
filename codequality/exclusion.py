"""Module exclusion policy."""

from __future__ import annotations

from .config import GlobalConfig
from .models import Module


def should_ignore(module: Module, global_config: GlobalConfig) -> bool:
    """Return True when the module is exempt from every analysis tool."""
    return module.name in global_config.ignore_projects


__all__ = ["should_ignore"]
