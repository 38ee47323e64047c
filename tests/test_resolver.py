"""Tests for override resolution."""

from __future__ import annotations

import pytest

from codequality.config import GlobalConfig
from codequality.models import FailurePolicy, ReportFormats
from codequality.resolver import (
    resolve,
    resolve_fail_early,
    resolve_failure_policy,
    resolve_ignore_failures,
    resolve_report_formats,
)


def test_resolve_prefers_explicit_value_and_skips_fallback() -> None:
    def _fallback() -> bool:
        raise AssertionError("fallback must not be evaluated")

    assert resolve(False, _fallback) is False
    assert resolve("set", lambda: "fallback") == "set"
    assert resolve(None, lambda: "fallback") == "fallback"


@pytest.mark.parametrize(
    ("fail_early", "override", "expected"),
    [
        (True, None, False),
        (False, None, True),
        (True, True, True),
        (False, True, True),
        (False, False, False),
    ],
)
def test_ignore_failures_inherits_negated_fail_early(fail_early, override, expected) -> None:
    assert resolve_ignore_failures(override, GlobalConfig(fail_early=fail_early)) is expected


def test_loudness_flags_inherit_fail_early_directly() -> None:
    strict = GlobalConfig(fail_early=True)
    lenient = GlobalConfig(fail_early=False)

    assert resolve_fail_early(None, strict) is True
    assert resolve_fail_early(None, lenient) is False
    assert resolve_fail_early(False, strict) is False


def test_same_fail_early_source_resolves_asymmetrically() -> None:
    global_config = GlobalConfig(fail_early=True)

    assert resolve_fail_early(None, global_config) is True
    assert resolve_ignore_failures(None, global_config) is False


def test_failure_policy_follows_ignore_failures() -> None:
    assert resolve_failure_policy(None, GlobalConfig(fail_early=True)) is FailurePolicy.FAIL
    assert resolve_failure_policy(None, GlobalConfig(fail_early=False)) is FailurePolicy.IGNORE


def test_report_formats_come_from_global_flags() -> None:
    global_config = GlobalConfig(html_reports=True, xml_reports=False, text_reports=True)

    assert resolve_report_formats(global_config) == ReportFormats(html=True, xml=False, text=False)
    assert resolve_report_formats(global_config, html=False, text=True) == ReportFormats(
        html=False, xml=False, text=True
    )
    assert resolve_report_formats(GlobalConfig()).enabled() == ("xml",)
