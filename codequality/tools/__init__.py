"""Tool activators and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Iterable, List, Sequence, Set

from .base import Activation, ToolActivator
from .checkstyle import CheckstyleActivator
from .cpd import CpdActivator
from .detekt import DetektActivator
from .errorprone import ErrorProneActivator
from .findbugs import FindbugsActivator
from .ktlint import KtlintActivator, KtlintRunner
from .lint import LintActivator
from .pmd import PmdActivator

_ENTRY_POINT_GROUP = "codequality.tools"

# Activation order. Lint and FindBugs are the slowest, so they go last and the
# cheap checks fail first.
_BUILTIN_FACTORIES: dict[str, Callable[[], ToolActivator]] = {
    "pmd": PmdActivator,
    "checkstyle": CheckstyleActivator,
    "ktlint": KtlintActivator,
    "cpd": CpdActivator,
    "detekt": DetektActivator,
    "errorprone": ErrorProneActivator,
    "lint": LintActivator,
    "findbugs": FindbugsActivator,
}

ACTIVATION_ORDER = tuple(_BUILTIN_FACTORIES)


def discover_activators(enabled: Sequence[str] | None = None) -> List[ToolActivator]:
    """Return activators in activation order, honoring optional enabled names.

    Third-party activators registered under the ``codequality.tools`` entry
    point group run after the built-in ones.
    """

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    activators: List[ToolActivator] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], ToolActivator]) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, ToolActivator):
            raise TypeError(f"Activator factory for '{name}' did not return a ToolActivator instance")
        activators.append(instance)
        seen.add(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        try:
            loaded = entry.load()
        except Exception as exc:
            raise RuntimeError(f"Failed to load tool entry point '{entry.name}': {exc}") from exc

        def _factory(obj: object = loaded) -> ToolActivator:
            return _coerce_activator(obj)

        _add(entry.name, _factory)

    if enabled_set is not None:
        missing = enabled_set - seen
        if missing:
            raise ValueError(f"Unknown tools requested: {', '.join(sorted(missing))}")

    return activators


def _coerce_activator(obj: object) -> ToolActivator:
    if isinstance(obj, ToolActivator):
        return obj
    if isinstance(obj, type) and issubclass(obj, ToolActivator):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, ToolActivator):
            return instance
    raise TypeError("Tool entry point must be a ToolActivator subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "ACTIVATION_ORDER",
    "Activation",
    "CheckstyleActivator",
    "CpdActivator",
    "DetektActivator",
    "ErrorProneActivator",
    "FindbugsActivator",
    "KtlintActivator",
    "KtlintRunner",
    "LintActivator",
    "PmdActivator",
    "ToolActivator",
    "discover_activators",
]
