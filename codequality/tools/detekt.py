"""detekt activator."""

from __future__ import annotations

from typing import Any, Optional

from .base import Activation, ToolActivator
from ..config import CodeQualityConfig
from ..models import AnalysisTask, Module, SourceSet
from ..resolver import resolve_failure_policy, resolve_report_formats


class DetektActivator(ToolActivator):
    name = "detekt"
    plugin_id = "io.gitlab.arturbosch.detekt"

    def tool_config(self, config: CodeQualityConfig) -> Any:
        return config.detekt

    def build_classpath(self, config: CodeQualityConfig) -> Optional[str]:
        version = config.detekt.gradle_plugin_version
        return f"gradle.plugin.io.gitlab.arturbosch.detekt:detekt-gradle-plugin:{version}"

    def plan(self, module: Module, config: CodeQualityConfig) -> Activation:
        detekt = config.detekt
        global_config = config.global_config
        tool_version = self.require_text(detekt.tool_version, field_name="tool_version", module=module)
        config_file = self.require_file(config.root, detekt.config, field_name="config", module=module)

        task = AnalysisTask(
            tool=self.name,
            module=module.name,
            name="detektCheck",
            inputs=SourceSet(module.root, include=("**/*.kt",), exclude=("build/**",)),
            reports=resolve_report_formats(global_config),
            report_dir=self.report_dir(module),
            failure_policy=resolve_failure_policy(None, global_config),
            settings={
                "version": tool_version,
                "profile": "main",
                "input": str(module.root),
                "config": str(config_file),
            },
        )
        return Activation(
            tool=self.name,
            module=module.name,
            plugin_id=self.plugin_id,
            extensions={
                "detekt": {
                    "version": tool_version,
                    "profiles": {"main": {"input": str(module.root), "config": str(config_file)}},
                }
            },
            tasks=(task,),
        )


__all__ = ["DetektActivator"]
