"""PMD activator."""

from __future__ import annotations

from typing import Any

from .base import Activation, ToolActivator
from ..config import CodeQualityConfig
from ..models import AnalysisTask, Module, SourceSet
from ..resolver import resolve_failure_policy, resolve_report_formats


class PmdActivator(ToolActivator):
    """Runs PMD over the module's Java sources with a shared rule set."""

    name = "pmd"
    plugin_id = "pmd"

    def tool_config(self, config: CodeQualityConfig) -> Any:
        return config.pmd

    def plan(self, module: Module, config: CodeQualityConfig) -> Activation:
        pmd = config.pmd
        global_config = config.global_config
        tool_version = self.require_text(pmd.tool_version, field_name="tool_version", module=module)
        rule_set = self.require_file(
            config.root, pmd.rule_set_file, field_name="rule_set_file", module=module
        )
        policy = resolve_failure_policy(pmd.ignore_failures, global_config)

        task = AnalysisTask(
            tool=self.name,
            module=module.name,
            name="pmd",
            inputs=SourceSet(module.root / pmd.source, include=pmd.include, exclude=pmd.exclude),
            reports=resolve_report_formats(global_config),
            report_dir=self.report_dir(module),
            failure_policy=policy,
            settings={
                "tool_version": tool_version,
                "rule_set_files": (str(rule_set),),
                # Built-in rule sets are disabled; only the shared rule set file applies.
                "rule_sets": (),
            },
        )
        return Activation(
            tool=self.name,
            module=module.name,
            plugin_id=self.plugin_id,
            extensions={
                "pmd": {
                    "tool_version": tool_version,
                    "ignore_failures": task.ignore_failures,
                    "rule_set_files": (str(rule_set),),
                }
            },
            tasks=(task,),
        )


__all__ = ["PmdActivator"]
