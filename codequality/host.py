"""Host build model: module discovery and an in-memory task graph."""

from __future__ import annotations

import os
import re
import threading
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from .config import ConfigurationError
from .logging import get_logger
from .models import (
    ANDROID_APPLICATION,
    ANDROID_LIBRARY,
    JAVA,
    KOTLIN,
    AnalysisTask,
    Module,
    VerificationAggregate,
)

CHECK_TASK = "check"

_BUILD_FILES = ("build.gradle", "build.gradle.kts")
_SETTINGS_FILES = ("settings.gradle", "settings.gradle.kts")

_EXCLUDED_DIRS = {
    ".git",
    ".gradle",
    ".idea",
    "build",
    "buildSrc",
    "node_modules",
    "src",
}

_PLUGIN_CAPABILITIES: Dict[str, str] = {
    "com.android.application": ANDROID_APPLICATION,
    "com.android.library": ANDROID_LIBRARY,
    "java": JAVA,
    "java-library": JAVA,
    "application": JAVA,
    "kotlin": KOTLIN,
    "kotlin-android": KOTLIN,
    "org.jetbrains.kotlin.jvm": KOTLIN,
    "org.jetbrains.kotlin.android": KOTLIN,
}

_PLUGIN_PATTERNS = (
    re.compile(r"""apply\s*\(?\s*plugin\s*[:=]\s*['"]([\w.\-]+)['"]"""),
    re.compile(r"""\bid\s*\(?\s*['"]([\w.\-]+)['"]"""),
    re.compile(r"""\bkotlin\s*\(\s*['"](jvm|android)['"]\s*\)"""),
)
_INCLUDE_PATTERN = re.compile(r"""['"](:?[\w.\-:]+)['"]""")


class BuildHost:
    """In-memory stand-in for the surrounding build system.

    Records applied plugins, build-wide classpath entries, extension settings,
    registered tasks and the dependency edges between tasks. Edges onto
    ``check`` form the module's verification aggregate.
    Every mutation is idempotent and guarded by a lock so modules may be
    activated from several threads.
    """

    def __init__(self, modules: Iterable[Module] = ()) -> None:
        self._lock = threading.RLock()
        self._modules: Dict[str, Module] = {}
        self._plugins: Dict[str, Set[str]] = {}
        self._extensions: Dict[Tuple[str, str], Dict[str, object]] = {}
        self._tasks: Dict[str, Dict[str, AnalysisTask]] = {}
        self._aggregates: Dict[str, VerificationAggregate] = {}
        self._edges: Dict[Tuple[str, str], Dict[str, None]] = {}
        self._build_classpath: Dict[str, None] = {}
        self.logger = get_logger("host")
        for module in modules:
            self.add_module(module)

    # ------------------------------------------------------------------
    # Modules

    def add_module(self, module: Module) -> None:
        """Register ``module``; a different module under the same name is rejected."""
        with self._lock:
            existing = self._modules.get(module.name)
            if existing is not None and existing.root != module.root:
                raise ValueError(
                    f"Module name '{module.name}' is used by both {existing.root} and {module.root}"
                )
            self._modules[module.name] = module
            self._aggregates.setdefault(module.name, VerificationAggregate(module.name))

    def modules(self) -> List[Module]:
        with self._lock:
            return list(self._modules.values())

    def module(self, name: str) -> Module:
        with self._lock:
            try:
                return self._modules[name]
            except KeyError:
                raise KeyError(f"Unknown module '{name}'") from None

    # ------------------------------------------------------------------
    # Plugins and extensions

    def apply_plugin(self, module: str, plugin_id: str) -> bool:
        """Apply ``plugin_id`` to ``module``; return False when already applied."""
        with self._lock:
            applied = self._plugins.setdefault(module, set())
            if plugin_id in applied:
                return False
            applied.add(plugin_id)
            self.logger.debug("Applied plugin %s to %s", plugin_id, module)
            return True

    def has_plugin(self, module: str, plugin_id: str) -> bool:
        with self._lock:
            return plugin_id in self._plugins.get(module, set())

    def plugins(self, module: str) -> Set[str]:
        with self._lock:
            return set(self._plugins.get(module, set()))

    def add_build_classpath(self, coordinate: str) -> bool:
        """Register a build-wide plugin classpath entry; return False on repeats."""
        with self._lock:
            if coordinate in self._build_classpath:
                return False
            self._build_classpath[coordinate] = None
            self.logger.debug("Added build classpath entry %s", coordinate)
            return True

    @property
    def build_classpath(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(self._build_classpath)

    def configure(self, module: str, extension: str, settings: Mapping[str, object]) -> None:
        with self._lock:
            self._extensions.setdefault((module, extension), {}).update(settings)

    def extension(self, module: str, extension: str) -> Dict[str, object]:
        with self._lock:
            return dict(self._extensions.get((module, extension), {}))

    # ------------------------------------------------------------------
    # Tasks

    def create_task(self, task: AnalysisTask) -> AnalysisTask:
        """Register ``task``; an existing task with the same name wins."""
        with self._lock:
            tasks = self._tasks.setdefault(task.module, {})
            existing = tasks.get(task.name)
            if existing is not None:
                return existing
            tasks[task.name] = task
            return task

    def find_task(self, module: str, name: str) -> Optional[AnalysisTask]:
        with self._lock:
            return self._tasks.get(module, {}).get(name)

    def tasks(self, module: str) -> List[AnalysisTask]:
        with self._lock:
            return list(self._tasks.get(module, {}).values())

    def depends_on(self, module: str, task: str, dependency: str) -> None:
        """Declare that ``task`` of ``module`` depends on ``dependency``."""
        with self._lock:
            if task == CHECK_TASK:
                aggregate = self._aggregates.setdefault(module, VerificationAggregate(module))
                aggregate.add(dependency)
                return
            self._edges.setdefault((module, task), {})[dependency] = None

    def dependencies(self, module: str, task: str) -> Tuple[str, ...]:
        """Return what ``task`` of ``module`` depends on, in declaration order."""
        with self._lock:
            if task == CHECK_TASK:
                return self.aggregate(module).tasks
            return tuple(self._edges.get((module, task), {}))

    def aggregate(self, module: str) -> VerificationAggregate:
        with self._lock:
            return self._aggregates.setdefault(module, VerificationAggregate(module))

    # ------------------------------------------------------------------
    # Files

    @staticmethod
    def resolve_file(root: Path, path: str | os.PathLike[str]) -> Path:
        candidate = Path(path).expanduser()
        if candidate.is_absolute():
            return candidate
        return (root / candidate).resolve()


def discover_modules(root: Path) -> List[Module]:
    """Return the sub-modules of the build rooted at ``root``.

    Modules listed in a settings file are used when present; otherwise every
    directory below ``root`` holding a build script counts as a module. The
    root project itself is never a module.
    """
    root = root.resolve()
    directories = _settings_modules(root)
    if directories is None:
        directories = _scan_module_dirs(root)

    modules: List[Module] = []
    seen: Dict[str, Path] = {}
    for directory in directories:
        build_file = _build_file(directory)
        if build_file is None:
            continue
        if directory.name in seen:
            raise ConfigurationError(
                f"module name '{directory.name}' is shared by {seen[directory.name]} and "
                f"{directory}; module names must be unique"
            )
        seen[directory.name] = directory
        text = build_file.read_text(encoding="utf-8", errors="ignore")
        modules.append(
            Module(
                name=directory.name,
                root=directory,
                capabilities=frozenset(_capabilities(text)),
            )
        )
    return modules


def _settings_modules(root: Path) -> Optional[List[Path]]:
    for name in _SETTINGS_FILES:
        settings = root / name
        if not settings.exists():
            continue
        directories: List[Path] = []
        for line in settings.read_text(encoding="utf-8", errors="ignore").splitlines():
            stripped = line.strip()
            if not stripped.startswith("include") or stripped.startswith("includeBuild"):
                continue
            for match in _INCLUDE_PATTERN.findall(stripped):
                relative = match.strip(":").replace(":", "/")
                if relative:
                    directories.append(root / relative)
        return directories
    return None


def _scan_module_dirs(root: Path) -> List[Path]:
    found: List[Path] = []
    for current, dirnames, _ in os.walk(root):
        dirnames[:] = sorted(
            d for d in dirnames if d not in _EXCLUDED_DIRS and not d.startswith(".")
        )
        current_path = Path(current)
        if current_path != root and _build_file(current_path) is not None:
            found.append(current_path)
    return found


def _build_file(directory: Path) -> Optional[Path]:
    for name in _BUILD_FILES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def _capabilities(build_script: str) -> Sequence[str]:
    capabilities: Set[str] = set()
    for pattern in _PLUGIN_PATTERNS:
        for plugin_id in pattern.findall(build_script):
            if plugin_id in ("jvm", "android"):
                capabilities.add(KOTLIN)
                continue
            capability = _PLUGIN_CAPABILITIES.get(plugin_id)
            if capability is not None:
                capabilities.add(capability)
    return sorted(capabilities)


__all__ = ["BuildHost", "CHECK_TASK", "discover_modules"]
