"""Failures raised while running analysis tools."""

from __future__ import annotations

from pathlib import Path


class ToolFailure(RuntimeError):
    """Base class for failures attributed to one tool on one module."""

    def __init__(self, message: str, *, tool: str, module: str, report: Path | None = None) -> None:
        self.tool = tool
        self.module = module
        self.report = report
        super().__init__(message)


class ToolExecutionFailure(ToolFailure):
    """A tool reported violations while its failure policy is strict."""

    def __init__(self, *, tool: str, module: str, violations: int, report: Path | None = None) -> None:
        self.violations = violations
        location = f" See the report at {report}" if report is not None else ""
        super().__init__(
            f"{tool} found {violations} violation(s) in module '{module}'.{location}",
            tool=tool,
            module=module,
            report=report,
        )


class ExternalProcessFailure(ToolFailure):
    """An external tool process exited non-zero or timed out.

    Always surfaced; the ignore-failures policy does not apply here.
    """

    def __init__(
        self,
        message: str,
        *,
        tool: str,
        module: str,
        report: Path | None = None,
        exit_code: int | None = None,
    ) -> None:
        self.exit_code = exit_code
        super().__init__(message, tool=tool, module=module, report=report)


__all__ = ["ExternalProcessFailure", "ToolExecutionFailure", "ToolFailure"]
