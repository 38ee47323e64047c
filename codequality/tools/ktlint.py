"""ktlint activator and process runner."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Any, List, Optional, Sequence

from .base import Activation, ToolActivator
from ..config import CodeQualityConfig, ConfigurationError
from ..errors import ExternalProcessFailure
from ..logging import module_logger
from ..models import AnalysisTask, FailurePolicy, Module, ReportFormats, SourceSet, ToolOutcome

KTLINT_MAIN_CLASS = "com.github.shyiko.ktlint.Main"
KTLINT_REPORT_NAME = "ktlint-checkstyle-report.xml"
KTLINT_CLASSPATH_ENV = "KTLINT_CLASSPATH"


class KtlintActivator(ToolActivator):
    """Registers ``ktlint`` (wired into check) and ``ktlintFormat`` (never wired)."""

    name = "ktlint"

    def tool_config(self, config: CodeQualityConfig) -> Any:
        return config.ktlint

    def plan(self, module: Module, config: CodeQualityConfig) -> Activation:
        ktlint = config.ktlint
        tool_version = self.require_text(ktlint.tool_version, field_name="tool_version", module=module)
        source_glob = self.require_text(ktlint.source_glob, field_name="source_glob", module=module)
        if ktlint.timeout is not None and ktlint.timeout <= 0:
            raise ConfigurationError(
                "must be a positive number of seconds",
                tool=self.name,
                field="timeout",
                module=module.name,
            )
        dependency = f"com.github.shyiko:ktlint:{tool_version}"
        inputs = SourceSet(module.root, include=(source_glob,))

        check = AnalysisTask(
            tool=self.name,
            module=module.name,
            name="ktlint",
            inputs=inputs,
            reports=ReportFormats(html=False, xml=True, text=False),
            report_dir=self.report_dir(module),
            # Process failures are always surfaced; the ignore policy does not apply.
            failure_policy=FailurePolicy.FAIL,
            settings={
                "dependency": dependency,
                "main_class": KTLINT_MAIN_CLASS,
                "report": str(self.report_dir(module) / KTLINT_REPORT_NAME),
                "timeout": ktlint.timeout,
            },
            command=("--reporter=checkstyle", source_glob),
        )
        fmt = AnalysisTask(
            tool=self.name,
            module=module.name,
            name="ktlintFormat",
            inputs=inputs,
            reports=ReportFormats(html=False, xml=False, text=False),
            settings={
                "dependency": dependency,
                "main_class": KTLINT_MAIN_CLASS,
                "timeout": ktlint.timeout,
            },
            command=("-F", source_glob),
            wired=False,
        )
        return Activation(
            tool=self.name,
            module=module.name,
            extensions={"configurations.ktlint": {"dependencies": (dependency,)}},
            tasks=(check, fmt),
        )


class KtlintRunner:
    """Executes ktlint tasks as external processes.

    With a ``classpath`` ktlint is started through ``java -cp``; otherwise the
    ``executable`` is invoked directly.
    """

    def __init__(
        self,
        *,
        classpath: str | None = None,
        executable: str = "ktlint",
        java: str = "java",
        timeout: Optional[float] = None,
    ) -> None:
        if classpath is None:
            classpath = os.environ.get(KTLINT_CLASSPATH_ENV) or None
        self.classpath = classpath
        self.executable = executable
        self.java = java
        self.timeout = timeout

    def command(self, task: AnalysisTask) -> List[str]:
        if self.classpath:
            main_class = str(task.settings.get("main_class", KTLINT_MAIN_CLASS))
            return [self.java, "-cp", self.classpath, main_class, *task.command]
        return [self.executable, *task.command]

    def check(self, task: AnalysisTask) -> Path:
        """Run the lint task, writing stdout to the report even when ktlint fails."""
        logger = module_logger("ktlint", task.module, task.tool)
        report = Path(str(task.settings["report"]))
        report.parent.mkdir(parents=True, exist_ok=True)
        args = self.command(task)
        timeout = self._timeout(task)
        logger.debug("Running %s", " ".join(args))

        with report.open("wb") as stream:
            completed = self._run(task, args, timeout, stream, report)

        if completed.returncode != 0:
            raise ExternalProcessFailure(
                f"ktlint finished with non-zero exit value {completed.returncode}. "
                f"Generated report at {report}",
                tool=task.tool,
                module=task.module,
                report=report,
                exit_code=completed.returncode,
            )
        logger.info("Report written to %s", report)
        return report

    def __call__(self, task: AnalysisTask) -> ToolOutcome:
        """Executor hook: violations surface as a process failure, never as a count."""
        return ToolOutcome(violations=0, report=self.check(task))

    def format(self, task: AnalysisTask) -> None:
        completed = self._run(task, self.command(task), self._timeout(task), subprocess.PIPE, None)
        if completed.returncode != 0:
            raise ExternalProcessFailure(
                f"ktlint format finished with non-zero exit value {completed.returncode}",
                tool=task.tool,
                module=task.module,
                exit_code=completed.returncode,
            )

    def _timeout(self, task: AnalysisTask) -> Optional[float]:
        if self.timeout is not None:
            return self.timeout
        configured = task.settings.get("timeout")
        return float(configured) if configured is not None else None

    def _run(
        self,
        task: AnalysisTask,
        args: Sequence[str],
        timeout: Optional[float],
        stdout: Any,
        report: Optional[Path],
    ) -> subprocess.CompletedProcess:
        cwd = task.inputs.root if task.inputs is not None else None
        try:
            return subprocess.run(
                list(args),
                cwd=cwd,
                stdout=stdout,
                stderr=subprocess.PIPE,
                timeout=timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise ExternalProcessFailure(
                f"Unable to locate '{args[0]}'. Install ktlint or set {KTLINT_CLASSPATH_ENV}.",
                tool=task.tool,
                module=task.module,
                report=report,
            ) from exc
        except subprocess.TimeoutExpired as exc:
            location = f" Partial report at {report}" if report is not None else ""
            raise ExternalProcessFailure(
                f"ktlint did not finish within {timeout} seconds.{location}",
                tool=task.tool,
                module=task.module,
                report=report,
            ) from exc


__all__ = ["KTLINT_MAIN_CLASS", "KTLINT_REPORT_NAME", "KtlintActivator", "KtlintRunner"]
