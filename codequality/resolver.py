"""Effective-value resolution for optional tool settings.

Tool options left unset inherit from :class:`GlobalConfig`. Two boolean
categories exist and must not be conflated:

* failure tolerance (``ignore_failures``) inherits ``not fail_early``;
* loudness (``show_violations``, ``warnings_as_errors``, ``abort_on_error``)
  inherits ``fail_early`` unchanged.

Report formats come straight from the global flags.
"""

from __future__ import annotations

from typing import Callable, Optional, TypeVar

from .config import GlobalConfig
from .models import FailurePolicy, ReportFormats

T = TypeVar("T")


def resolve(value: Optional[T], fallback: Callable[[], T]) -> T:
    """Return ``value`` when set, otherwise the lazily computed fallback."""
    if value is not None:
        return value
    return fallback()


def resolve_ignore_failures(value: Optional[bool], global_config: GlobalConfig) -> bool:
    return resolve(value, lambda: not global_config.fail_early)


def resolve_fail_early(value: Optional[bool], global_config: GlobalConfig) -> bool:
    return resolve(value, lambda: global_config.fail_early)


def resolve_failure_policy(value: Optional[bool], global_config: GlobalConfig) -> FailurePolicy:
    return FailurePolicy.from_ignore_failures(resolve_ignore_failures(value, global_config))


def resolve_report_formats(global_config: GlobalConfig, *, html: bool = True, text: bool = False) -> ReportFormats:
    """Report formats for a tool; ``html``/``text`` say whether the tool supports them."""
    return ReportFormats(
        html=global_config.html_reports and html,
        xml=global_config.xml_reports,
        text=global_config.text_reports and text,
    )


__all__ = [
    "resolve",
    "resolve_fail_early",
    "resolve_failure_policy",
    "resolve_ignore_failures",
    "resolve_report_formats",
]
