"""FindBugs activator."""

from __future__ import annotations

from typing import Any

from .base import Activation, ToolActivator
from ..config import CodeQualityConfig
from ..models import AnalysisTask, Module, SourceSet
from ..resolver import resolve_failure_policy, resolve_report_formats

_ANDROID_CLASSES_DIR = "build/intermediates/classes/debug/"
_JAVA_CLASSES_DIR = "build/classes/java/main/"

_EFFORTS = ("min", "default", "max")
_REPORT_LEVELS = ("low", "medium", "high")


class FindbugsActivator(ToolActivator):
    """Analyses compiled classes, so the module must be assembled first."""

    name = "findbugs"
    plugin_id = "findbugs"

    def tool_config(self, config: CodeQualityConfig) -> Any:
        return config.findbugs

    @staticmethod
    def classes_dir(module: Module) -> str:
        return _ANDROID_CLASSES_DIR if module.is_android else _JAVA_CLASSES_DIR

    def plan(self, module: Module, config: CodeQualityConfig) -> Activation:
        findbugs = config.findbugs
        global_config = config.global_config
        tool_version = self.require_text(
            findbugs.tool_version, field_name="tool_version", module=module
        )
        effort = self.require_choice(findbugs.effort, _EFFORTS, field_name="effort", module=module)
        report_level = self.require_choice(
            findbugs.report_level, _REPORT_LEVELS, field_name="report_level", module=module
        )
        exclude_filter = self.require_file(
            config.root, findbugs.exclude_filter, field_name="exclude_filter", module=module
        )
        policy = resolve_failure_policy(findbugs.ignore_failures, global_config)
        classes_dir = module.root / self.classes_dir(module)

        task = AnalysisTask(
            tool=self.name,
            module=module.name,
            name="findbugs",
            inputs=SourceSet(module.root / findbugs.source),
            reports=resolve_report_formats(global_config),
            report_dir=self.report_dir(module),
            failure_policy=policy,
            depends_on=("assemble",),
            settings={
                "tool_version": tool_version,
                "effort": effort,
                "report_level": report_level,
                "exclude_filter": str(exclude_filter),
                "classes": str(classes_dir),
            },
        )
        return Activation(
            tool=self.name,
            module=module.name,
            plugin_id=self.plugin_id,
            extensions={
                "findbugs": {
                    "source_sets": (),
                    "tool_version": tool_version,
                    "ignore_failures": task.ignore_failures,
                    "effort": effort,
                    "report_level": report_level,
                    "exclude_filter": str(exclude_filter),
                }
            },
            tasks=(task,),
        )


__all__ = ["FindbugsActivator"]
