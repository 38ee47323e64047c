"""Android Lint activator."""

from __future__ import annotations

from typing import Any, Dict

from .base import Activation, ToolActivator
from ..config import CodeQualityConfig
from ..models import AnalysisTask, FailurePolicy, Module, SourceSet
from ..resolver import resolve_fail_early, resolve_report_formats


class LintActivator(ToolActivator):
    """Configures the lint options of Android application and library modules.

    Lint itself ships with the Android plugin, so nothing is applied here;
    plain JVM modules are skipped.
    """

    name = "lint"

    def tool_config(self, config: CodeQualityConfig) -> Any:
        return config.lint

    def applicable(self, module: Module) -> bool:
        return module.is_android

    def plan(self, module: Module, config: CodeQualityConfig) -> Activation:
        lint = config.lint
        global_config = config.global_config

        options: Dict[str, Any] = {
            "warnings_as_errors": resolve_fail_early(lint.warnings_as_errors, global_config),
            "abort_on_error": resolve_fail_early(lint.abort_on_error, global_config),
        }
        if lint.check_all_warnings is not None:
            options["check_all_warnings"] = lint.check_all_warnings
        if lint.baseline_file_name is not None:
            baseline = self.require_file(
                module.root, lint.baseline_file_name, field_name="baseline_file_name", module=module
            )
            options["baseline"] = str(baseline)
        if lint.text_report is not None:
            options["text_report"] = lint.text_report
            options["text_output"] = lint.text_output

        policy = FailurePolicy.FAIL if options["abort_on_error"] else FailurePolicy.IGNORE
        task = AnalysisTask(
            tool=self.name,
            module=module.name,
            name="lint",
            inputs=SourceSet(module.root / "src"),
            reports=resolve_report_formats(global_config),
            report_dir=self.report_dir(module),
            failure_policy=policy,
            settings=options,
        )
        return Activation(
            tool=self.name,
            module=module.name,
            extensions={"android.lint_options": options},
            tasks=(task,),
        )


__all__ = ["LintActivator"]
