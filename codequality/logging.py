"""Logging utilities for codequality runs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, MutableMapping

_LOGGER_NAME = "codequality"
_CONSOLE_FORMAT = "[codequality] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ModuleLogAdapter(logging.LoggerAdapter):
    """Prefixes records with the build module (and tool) they concern."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        extra = self.extra or {}
        module = extra.get("module")
        tool = extra.get("tool")
        if module and tool:
            return f"[{module}:{tool}] {msg}", kwargs
        if module:
            return f"[{module}] {msg}", kwargs
        return msg, kwargs


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the codequality hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def module_logger(name: str, module: str, tool: str | None = None) -> ModuleLogAdapter:
    """Return a logger whose messages carry the module/tool they were emitted for."""
    return ModuleLogAdapter(get_logger(name), {"module": module, "tool": tool})


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Install console output (and an optional file sink) on the codequality logger."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when the CLI runs more than once per process.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


__all__ = ["ModuleLogAdapter", "configure_logging", "get_logger", "module_logger"]
