"""Core data models shared across codequality components."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterator, List, Mapping, Tuple

ANDROID_APPLICATION = "android-application"
ANDROID_LIBRARY = "android-library"
JAVA = "java"
KOTLIN = "kotlin"

ANDROID_CAPABILITIES = frozenset({ANDROID_APPLICATION, ANDROID_LIBRARY})


@dataclass(frozen=True)
class Module:
    """One buildable unit of a multi-module project."""

    name: str
    root: Path
    capabilities: FrozenSet[str] = frozenset()

    def has_capability(self, capability: str) -> bool:
        return capability in self.capabilities

    @property
    def is_android(self) -> bool:
        """True for modules with platform-specific build variants."""
        return bool(ANDROID_CAPABILITIES & self.capabilities)


class FailurePolicy(str, Enum):
    IGNORE = "ignore"
    FAIL = "fail"

    @classmethod
    def from_ignore_failures(cls, ignore_failures: bool) -> "FailurePolicy":
        return cls.IGNORE if ignore_failures else cls.FAIL


@dataclass(frozen=True)
class ReportFormats:
    html: bool = False
    xml: bool = True
    text: bool = False

    def enabled(self) -> Tuple[str, ...]:
        return tuple(
            name for name, flag in (("html", self.html), ("xml", self.xml), ("text", self.text)) if flag
        )


@dataclass(frozen=True)
class SourceSet:
    """Files under ``root`` selected by include/exclude glob patterns.

    An empty ``include`` selects every file. ``extension`` further restricts the
    selection to file names ending in ``.<extension>``.
    """

    root: Path
    include: Tuple[str, ...] = ()
    exclude: Tuple[str, ...] = ()
    extension: str | None = None

    def matches(self, rel_path: str) -> bool:
        normalized = rel_path.replace("\\", "/")
        if self.extension and not normalized.endswith(f".{self.extension}"):
            return False
        if self.include and not any(_glob_matches(normalized, p) for p in self.include):
            return False
        return not any(_glob_matches(normalized, p) for p in self.exclude)

    def files(self) -> List[Path]:
        if not self.root.is_dir():
            return []
        selected: List[Path] = []
        for path in sorted(self.root.rglob("*")):
            if path.is_file() and self.matches(path.relative_to(self.root).as_posix()):
                selected.append(path)
        return selected


def _glob_matches(path: str, pattern: str) -> bool:
    return _compile_glob(pattern).fullmatch(path) is not None


@lru_cache(maxsize=256)
def _compile_glob(pattern: str) -> re.Pattern[str]:
    """Translate an Ant-style pattern into a regex over ``/``-separated paths.

    ``**`` spans zero or more whole directories; ``*`` and ``?`` stay within
    one path segment. A trailing ``/`` is shorthand for ``/**``.
    """
    pattern = pattern.replace("\\", "/").lstrip("/")
    if pattern.endswith("/"):
        pattern += "**"
    segments: List[str] = []
    for segment in pattern.split("/"):
        if segment == "**" and segments and segments[-1] == "**":
            continue
        segments.append(segment)

    if all(segment == "**" for segment in segments):
        return re.compile(".*")

    regex = ""
    joined = False
    for segment in segments:
        if segment == "**":
            regex += "(?:/[^/]+)*" if joined else "(?:[^/]+/)*"
            continue
        if joined:
            regex += "/"
        regex += _segment_regex(segment)
        joined = True
    return re.compile(regex)


def _segment_regex(segment: str) -> str:
    parts = []
    for char in segment:
        if char == "*":
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        else:
            parts.append(re.escape(char))
    return "".join(parts)


@dataclass(frozen=True)
class AnalysisTask:
    """Described analysis step for one (module, tool) pair.

    ``wired`` tasks become dependencies of the module's ``check`` step; tasks
    such as ``ktlintFormat`` are registered but never block verification.
    """

    tool: str
    module: str
    name: str
    inputs: SourceSet | None = None
    reports: ReportFormats = field(default_factory=ReportFormats)
    report_dir: Path | None = None
    failure_policy: FailurePolicy = FailurePolicy.FAIL
    depends_on: Tuple[str, ...] = ()
    settings: Mapping[str, Any] = field(default_factory=dict)
    command: Tuple[str, ...] = ()
    wired: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "settings", MappingProxyType(dict(self.settings)))

    @property
    def ignore_failures(self) -> bool:
        return self.failure_policy is FailurePolicy.IGNORE


@dataclass(frozen=True)
class ToolOutcome:
    """What a tool run reported for one task."""

    violations: int = 0
    report: Path | None = None


class VerificationAggregate:
    """Ordered, duplicate-free task names a module's ``check`` step depends on."""

    def __init__(self, module: str) -> None:
        self.module = module
        self._tasks: Dict[str, None] = {}

    def add(self, task_name: str) -> bool:
        if task_name in self._tasks:
            return False
        self._tasks[task_name] = None
        return True

    @property
    def tasks(self) -> Tuple[str, ...]:
        return tuple(self._tasks)

    def __contains__(self, task_name: object) -> bool:
        return task_name in self._tasks

    def __iter__(self) -> Iterator[str]:
        return iter(self.tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def __repr__(self) -> str:
        return f"VerificationAggregate(module={self.module!r}, tasks={list(self._tasks)!r})"


__all__ = [
    "ANDROID_APPLICATION",
    "ANDROID_CAPABILITIES",
    "ANDROID_LIBRARY",
    "AnalysisTask",
    "FailurePolicy",
    "JAVA",
    "KOTLIN",
    "Module",
    "ReportFormats",
    "SourceSet",
    "ToolOutcome",
    "VerificationAggregate",
]
