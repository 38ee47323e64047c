"""CPD (copy/paste detector) activator."""

from __future__ import annotations

from typing import Any, Optional

from .base import Activation, ToolActivator
from ..config import CodeQualityConfig, ConfigurationError
from ..models import AnalysisTask, Module, SourceSet
from ..resolver import resolve_failure_policy, resolve_report_formats


class CpdActivator(ToolActivator):
    """Reports duplicated code in files of the configured language."""

    name = "cpd"
    plugin_id = "cpd"

    def tool_config(self, config: CodeQualityConfig) -> Any:
        return config.cpd

    def build_classpath(self, config: CodeQualityConfig) -> Optional[str]:
        return f"de.aaschmid:gradle-cpd-plugin:{config.cpd.gradle_plugin_version}"

    def plan(self, module: Module, config: CodeQualityConfig) -> Activation:
        cpd = config.cpd
        global_config = config.global_config
        language = self.require_text(cpd.language, field_name="language", module=module)
        if not language.isalnum():
            raise ConfigurationError(
                f"'{language}' is not a file extension", tool=self.name, field="language", module=module.name
            )
        tool_version = self.require_text(cpd.tool_version, field_name="tool_version", module=module)
        minimum = cpd.minimum_token_count
        if isinstance(minimum, bool) or not isinstance(minimum, int) or minimum <= 0:
            raise ConfigurationError(
                f"must be a positive integer, got {minimum!r}",
                tool=self.name,
                field="minimum_token_count",
                module=module.name,
            )
        policy = resolve_failure_policy(cpd.ignore_failures, global_config)

        task = AnalysisTask(
            tool=self.name,
            module=module.name,
            name="cpdCheck",
            inputs=SourceSet(module.root / cpd.source, extension=language),
            reports=resolve_report_formats(global_config, html=False, text=True),
            report_dir=self.report_dir(module),
            failure_policy=policy,
            settings={
                "language": language,
                "tool_version": tool_version,
                "minimum_token_count": minimum,
                "encoding": "UTF-8",
            },
        )
        return Activation(
            tool=self.name,
            module=module.name,
            plugin_id=self.plugin_id,
            extensions={"cpd": {"language": language, "tool_version": tool_version}},
            tasks=(task,),
        )


__all__ = ["CpdActivator"]
