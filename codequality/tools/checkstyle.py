"""Checkstyle activator."""

from __future__ import annotations

from typing import Any

from .base import Activation, ToolActivator
from ..config import CodeQualityConfig
from ..models import AnalysisTask, Module, SourceSet
from ..resolver import resolve_fail_early, resolve_failure_policy, resolve_report_formats


class CheckstyleActivator(ToolActivator):
    name = "checkstyle"
    plugin_id = "checkstyle"

    def tool_config(self, config: CodeQualityConfig) -> Any:
        return config.checkstyle

    def plan(self, module: Module, config: CodeQualityConfig) -> Activation:
        checkstyle = config.checkstyle
        global_config = config.global_config
        tool_version = self.require_text(
            checkstyle.tool_version, field_name="tool_version", module=module
        )
        config_file = self.require_file(
            config.root, checkstyle.config_file, field_name="config_file", module=module
        )
        policy = resolve_failure_policy(checkstyle.ignore_failures, global_config)
        # Loud by default when failing early, quiet when tolerant.
        show_violations = resolve_fail_early(checkstyle.show_violations, global_config)

        task = AnalysisTask(
            tool=self.name,
            module=module.name,
            name="checkstyle",
            inputs=SourceSet(
                module.root / checkstyle.source,
                include=checkstyle.include,
                exclude=checkstyle.exclude,
            ),
            reports=resolve_report_formats(global_config),
            report_dir=self.report_dir(module),
            failure_policy=policy,
            settings={
                "tool_version": tool_version,
                "config_file": str(config_file),
                "show_violations": show_violations,
                "classpath": (),
            },
        )
        return Activation(
            tool=self.name,
            module=module.name,
            plugin_id=self.plugin_id,
            extensions={
                "checkstyle": {
                    "tool_version": tool_version,
                    "config_file": str(config_file),
                    "ignore_failures": task.ignore_failures,
                    "show_violations": show_violations,
                }
            },
            tasks=(task,),
        )


__all__ = ["CheckstyleActivator"]
