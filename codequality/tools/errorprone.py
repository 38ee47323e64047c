"""Error Prone activator."""

from __future__ import annotations

from typing import Any, Optional

from .base import Activation, ToolActivator
from ..config import CodeQualityConfig
from ..models import Module


class ErrorProneActivator(ToolActivator):
    """Pins the Error Prone compiler; it runs during compilation, not as a check task."""

    name = "errorProne"
    plugin_id = "net.ltgt.errorprone"

    def tool_config(self, config: CodeQualityConfig) -> Any:
        return config.error_prone

    def build_classpath(self, config: CodeQualityConfig) -> Optional[str]:
        version = config.error_prone.gradle_plugin_version
        return f"net.ltgt.gradle:gradle-errorprone-plugin:{version}"

    def plan(self, module: Module, config: CodeQualityConfig) -> Activation:
        tool_version = self.require_text(
            config.error_prone.tool_version, field_name="tool_version", module=module
        )
        return Activation(
            tool=self.name,
            module=module.name,
            plugin_id=self.plugin_id,
            extensions={
                "configurations.errorprone": {
                    "force": (f"com.google.errorprone:error_prone_core:{tool_version}",),
                }
            },
        )


__all__ = ["ErrorProneActivator"]
