"""Tests for the ktlint process runner."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from codequality.errors import ExternalProcessFailure
from codequality.models import AnalysisTask, FailurePolicy
from codequality.tools import KtlintActivator, KtlintRunner
from codequality.tools import ktlint as ktlint_module
from tests._fixtures.project_builder import ProjectBuilder


@pytest.fixture(autouse=True)
def _no_ktlint_classpath(monkeypatch) -> None:
    monkeypatch.delenv("KTLINT_CLASSPATH", raising=False)


def _ktlint_tasks(project: ProjectBuilder, config_data=None) -> dict[str, AnalysisTask]:
    module = project.module("app", "kotlin")
    activation = KtlintActivator().prepare(module, project.config(config_data))
    return {task.name: task for task in activation.tasks}


def _fake_run(returncode: int, output: bytes, calls: list):
    def _run(args, **kwargs):
        calls.append((args, kwargs))
        stdout = kwargs.get("stdout")
        if hasattr(stdout, "write"):
            stdout.write(output)
        return subprocess.CompletedProcess(args, returncode, stderr=b"")

    return _run


def test_runner_builds_java_command_with_classpath(project: ProjectBuilder) -> None:
    task = _ktlint_tasks(project)["ktlint"]

    runner = KtlintRunner(classpath="/libs/ktlint.jar", executable="unused")

    assert runner.command(task) == [
        "java",
        "-cp",
        "/libs/ktlint.jar",
        "com.github.shyiko.ktlint.Main",
        "--reporter=checkstyle",
        "src/**/*.kt",
    ]


def test_runner_falls_back_to_executable(project: ProjectBuilder) -> None:
    task = _ktlint_tasks(project)["ktlintFormat"]

    assert KtlintRunner().command(task) == ["ktlint", "-F", "src/**/*.kt"]


def test_successful_check_writes_report(project: ProjectBuilder, monkeypatch) -> None:
    calls: list = []
    monkeypatch.setattr(ktlint_module.subprocess, "run", _fake_run(0, b"<checkstyle/>", calls))
    task = _ktlint_tasks(project, {"ktlint": {"timeout": 12}})["ktlint"]

    report = KtlintRunner(executable="ktlint").check(task)

    assert report == Path(task.settings["report"])
    assert report.read_bytes() == b"<checkstyle/>"
    args, kwargs = calls[0]
    assert args == ["ktlint", "--reporter=checkstyle", "src/**/*.kt"]
    assert kwargs["cwd"] == task.inputs.root
    assert kwargs["timeout"] == pytest.approx(12.0)


@pytest.mark.parametrize("ignore_failures", [True, False])
def test_non_zero_exit_fails_regardless_of_fail_early(
    project: ProjectBuilder, monkeypatch, ignore_failures: bool
) -> None:
    calls: list = []
    monkeypatch.setattr(ktlint_module.subprocess, "run", _fake_run(1, b"<error/>", calls))
    task = _ktlint_tasks(project, {"fail_early": not ignore_failures})["ktlint"]

    with pytest.raises(ExternalProcessFailure) as excinfo:
        KtlintRunner(executable="ktlint").check(task)

    report = Path(task.settings["report"])
    assert excinfo.value.exit_code == 1
    assert excinfo.value.report == report
    assert str(report) in str(excinfo.value)
    assert "non-zero exit value 1" in str(excinfo.value)
    # Output is captured even though the process failed.
    assert report.read_bytes() == b"<error/>"
    assert task.failure_policy is FailurePolicy.FAIL


def test_timeout_is_reported_as_process_failure(project: ProjectBuilder, monkeypatch) -> None:
    def _slow(args, **kwargs):
        raise subprocess.TimeoutExpired(args, kwargs["timeout"])

    monkeypatch.setattr(ktlint_module.subprocess, "run", _slow)
    task = _ktlint_tasks(project)["ktlint"]

    with pytest.raises(ExternalProcessFailure, match="did not finish within 5"):
        KtlintRunner(executable="ktlint", timeout=5).check(task)


def test_missing_executable_is_reported(project: ProjectBuilder, monkeypatch) -> None:
    def _missing(args, **kwargs):
        raise FileNotFoundError(args[0])

    monkeypatch.setattr(ktlint_module.subprocess, "run", _missing)
    task = _ktlint_tasks(project)["ktlint"]

    with pytest.raises(ExternalProcessFailure, match="Unable to locate 'ktlint'"):
        KtlintRunner(executable="ktlint").check(task)


def test_runner_as_executor_returns_outcome(project: ProjectBuilder, monkeypatch) -> None:
    monkeypatch.setattr(ktlint_module.subprocess, "run", _fake_run(0, b"", []))
    task = _ktlint_tasks(project)["ktlint"]

    outcome = KtlintRunner(executable="ktlint")(task)

    assert outcome.violations == 0
    assert outcome.report == Path(task.settings["report"])


def test_format_failure(project: ProjectBuilder, monkeypatch) -> None:
    monkeypatch.setattr(ktlint_module.subprocess, "run", _fake_run(2, b"", []))
    task = _ktlint_tasks(project)["ktlintFormat"]

    with pytest.raises(ExternalProcessFailure) as excinfo:
        KtlintRunner(executable="ktlint").format(task)

    assert excinfo.value.exit_code == 2
