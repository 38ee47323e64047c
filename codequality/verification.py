"""Applies failure policies to tool outcomes for a module's ``check`` step."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Mapping

from .errors import ToolExecutionFailure
from .host import BuildHost
from .logging import module_logger
from .models import AnalysisTask, ToolOutcome

Executor = Callable[[AnalysisTask], ToolOutcome]


@dataclass
class VerificationResult:
    """Outcome of running one module's verification aggregate."""

    module: str
    executed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failures: List[ToolExecutionFailure] = field(default_factory=list)
    ignored: List[ToolExecutionFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        if self.failures:
            raise self.failures[0]


class VerificationRunner:
    """Runs the tasks behind a module's ``check`` step in aggregate order.

    ``executors`` map a tool kind to a callable that runs the task and reports
    a violation count. Tools without an executor are skipped. Process-level
    failures raised by an executor propagate untouched.
    """

    def __init__(self, host: BuildHost, executors: Mapping[str, Executor]) -> None:
        self.host = host
        self.executors = dict(executors)

    def verify(self, module: str) -> VerificationResult:
        result = VerificationResult(module=module)
        for task_name in self.host.aggregate(module):
            task = self.host.find_task(module, task_name)
            logger = module_logger("verification", module, task.tool if task else task_name)
            executor = self.executors.get(task.tool) if task is not None else None
            if task is None or executor is None:
                logger.debug("No executor for %s; skipped", task_name)
                result.skipped.append(task_name)
                continue

            outcome = executor(task)
            result.executed.append(task_name)
            if outcome.violations <= 0:
                continue

            failure = ToolExecutionFailure(
                tool=task.tool,
                module=module,
                violations=outcome.violations,
                report=outcome.report,
            )
            if task.ignore_failures:
                logger.warning("%s (ignored)", failure)
                result.ignored.append(failure)
            else:
                logger.error("%s", failure)
                result.failures.append(failure)
        return result


__all__ = ["Executor", "VerificationResult", "VerificationRunner"]
