"""Base classes for tool activators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

from ..config import CodeQualityConfig, ConfigurationError, invalid_flags
from ..exclusion import should_ignore
from ..host import CHECK_TASK, BuildHost
from ..logging import module_logger
from ..models import AnalysisTask, Module


@dataclass(frozen=True)
class Activation:
    """Everything one activator wants to change on the host for one module.

    Built without touching the host so that configuration problems surface
    before any module is mutated.
    """

    tool: str
    module: str
    plugin_id: Optional[str] = None
    extensions: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    tasks: Tuple[AnalysisTask, ...] = ()

    @property
    def primary_task(self) -> Optional[AnalysisTask]:
        for task in self.tasks:
            if task.wired:
                return task
        return None


class ToolActivator(ABC):
    """Contract for activators that wire one analysis tool into a module."""

    #: Tool kind, also the key used in log messages and errors.
    name: str = ""
    #: Plugin applied to each activated module, if any.
    plugin_id: Optional[str] = None

    @abstractmethod
    def tool_config(self, config: CodeQualityConfig) -> Any:
        """Return this tool's section of the configuration tree."""

    @abstractmethod
    def plan(self, module: Module, config: CodeQualityConfig) -> Activation:
        """Describe the activation for a module that passed :meth:`supports`."""

    def applicable(self, module: Module) -> bool:
        """Return False when the module lacks a capability the tool needs."""
        return True

    def supports(self, module: Module, config: CodeQualityConfig) -> bool:
        """Return whether the tool runs for ``module``.

        Raises :class:`ConfigurationError` when a boolean option of the tool
        holds anything other than true or false.
        """
        if should_ignore(module, config.global_config):
            return False
        tool_config = self.tool_config(config)
        self.require_flags(tool_config, module=module)
        if not tool_config.enabled:
            return False
        return self.applicable(module)

    def build_classpath(self, config: CodeQualityConfig) -> Optional[str]:
        """Build-wide plugin coordinate to register before any module activation."""
        return None

    def prepare(self, module: Module, config: CodeQualityConfig) -> Optional[Activation]:
        """Return the planned activation, or None when the tool does not run here."""
        if not self.supports(module, config):
            module_logger("tools", module.name, self.name).debug("Skipped")
            return None
        return self.plan(module, config)

    def apply(self, host: BuildHost, activation: Activation) -> Optional[AnalysisTask]:
        """Mutate the host; re-applying the same activation changes nothing."""
        logger = module_logger("tools", activation.module, activation.tool)
        if activation.plugin_id is not None:
            host.apply_plugin(activation.module, activation.plugin_id)
        for extension, settings in activation.extensions.items():
            host.configure(activation.module, extension, settings)

        primary: Optional[AnalysisTask] = None
        for task in activation.tasks:
            registered = host.create_task(task)
            for dependency in registered.depends_on:
                host.depends_on(activation.module, registered.name, dependency)
            if registered.wired:
                host.depends_on(activation.module, CHECK_TASK, registered.name)
                if primary is None:
                    primary = registered
        if primary is not None:
            logger.debug("Wired %s into %s", primary.name, CHECK_TASK)
        else:
            logger.debug("Configured without a verification task")
        return primary

    def activate(
        self, host: BuildHost, module: Module, config: CodeQualityConfig
    ) -> Optional[AnalysisTask]:
        activation = self.prepare(module, config)
        if activation is None:
            return None
        return self.apply(host, activation)

    # ------------------------------------------------------------------
    # Helpers for subclasses

    def report_dir(self, module: Module) -> Path:
        return module.root / "build" / "reports" / self.name

    def require_file(
        self, root: Path, path: Optional[str], *, field_name: str, module: Module
    ) -> Path:
        if not path:
            raise ConfigurationError(
                "a file path is required", tool=self.name, field=field_name, module=module.name
            )
        resolved = BuildHost.resolve_file(root, path)
        if not resolved.is_file():
            raise ConfigurationError(
                f"file '{resolved}' does not exist",
                tool=self.name,
                field=field_name,
                module=module.name,
            )
        return resolved

    def require_choice(
        self, value: str, choices: Tuple[str, ...], *, field_name: str, module: Module
    ) -> str:
        if value not in choices:
            allowed = ", ".join(choices)
            raise ConfigurationError(
                f"'{value}' is not one of: {allowed}",
                tool=self.name,
                field=field_name,
                module=module.name,
            )
        return value

    def require_flags(self, section: Any, *, module: Module) -> None:
        invalid = invalid_flags(section)
        if invalid:
            raise ConfigurationError(
                f"expected true or false, got {getattr(section, invalid[0])!r}",
                tool=self.name,
                field=invalid[0],
                module=module.name,
            )

    def require_text(self, value: Optional[str], *, field_name: str, module: Module) -> str:
        if not value or not str(value).strip():
            raise ConfigurationError(
                "must not be empty", tool=self.name, field=field_name, module=module.name
            )
        return str(value).strip()


__all__ = ["Activation", "ToolActivator"]
