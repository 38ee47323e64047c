"""Tests for codequality.config."""

from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest

from codequality.config import (
    CodeQualityConfig,
    ConfigurationError,
    GlobalConfig,
    LintConfig,
    load_config,
    invalid_flags,
    parse_properties,
)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, CodeQualityConfig)
    assert config.root == tmp_path.resolve()
    assert config.global_config == GlobalConfig()
    assert config.global_config.fail_early is True
    assert config.global_config.xml_reports is True
    assert config.global_config.html_reports is False
    assert config.global_config.ignore_projects == frozenset()
    assert config.pmd.rule_set_file == "code_quality_tools/pmd.xml"
    assert config.checkstyle.include == ("**/*.java",)
    assert config.cpd.minimum_token_count == 50
    assert config.ktlint.timeout == pytest.approx(600.0)
    assert config.lint == LintConfig()


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".codequality.yml"
    config_file.write_text(
        """
fail_early: false
html_reports: true
text_reports: "yes"
ignore_projects: [skip-me, "docs"]
pmd:
  enabled: false
  rule_set_file: rules/pmd.xml
checkstyle:
  ignore_failures: true
  show_violations: false
  include:
    - "**/*.java"
    - "**/*.kt"
  exclude: []
findbugs:
  effort: default
  report_level: medium
lint:
  baseline_file_name: lint-baseline.xml
  text_report: true
  text_output: build/lint.txt
ktlint:
  tool_version: 0.20.0
  timeout: 30
cpd:
  language: kotlin
  minimum_token_count: "120"
error_prone:
  gradle_plugin_version: 0.0.13
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.global_config.fail_early is False
    assert config.global_config.html_reports is True
    assert config.global_config.text_reports is True
    assert config.global_config.ignore_projects == frozenset({"skip-me", "docs"})
    assert config.pmd.enabled is False
    assert config.pmd.rule_set_file == "rules/pmd.xml"
    assert config.checkstyle.ignore_failures is True
    assert config.checkstyle.show_violations is False
    assert config.checkstyle.include == ("**/*.java", "**/*.kt")
    assert config.checkstyle.exclude == ()
    assert config.findbugs.effort == "default"
    assert config.findbugs.report_level == "medium"
    assert config.lint.baseline_file_name == "lint-baseline.xml"
    assert config.lint.text_report is True
    assert config.lint.text_output == "build/lint.txt"
    assert config.lint.abort_on_error is None
    assert config.ktlint.tool_version == "0.20.0"
    assert config.ktlint.timeout == pytest.approx(30.0)
    assert config.cpd.language == "kotlin"
    assert config.cpd.minimum_token_count == 120
    assert config.error_prone.gradle_plugin_version == "0.0.13"


def test_unset_ignore_failures_stays_none(tmp_path: Path) -> None:
    (tmp_path / ".codequality.yml").write_text("checkstyle:\n  enabled: true\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.checkstyle.ignore_failures is None
    assert config.checkstyle.show_violations is None
    assert config.pmd.ignore_failures is None


def test_malformed_flags_are_kept_for_activation_to_reject(tmp_path: Path) -> None:
    (tmp_path / ".codequality.yml").write_text(
        "fail_early: nope\ncheckstyle:\n  ignore_failures: sometimes\n  show_violations: 'no'\n",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.global_config.fail_early == "nope"
    assert config.checkstyle.ignore_failures == "sometimes"
    assert config.checkstyle.show_violations is False
    assert invalid_flags(config.global_config) == ["fail_early"]
    assert invalid_flags(config.checkstyle) == ["ignore_failures"]
    assert invalid_flags(config.pmd) == []


def test_ktlint_timeout_can_be_disabled(tmp_path: Path) -> None:
    (tmp_path / ".codequality.yml").write_text("ktlint:\n  timeout: null\n", encoding="utf-8")

    assert load_config(tmp_path).ktlint.timeout is None


def test_plugin_version_properties_override_file_and_defaults(tmp_path: Path) -> None:
    (tmp_path / ".codequality.yml").write_text(
        "detekt:\n  gradle_plugin_version: 1.0.0.RC1\n", encoding="utf-8"
    )

    config = load_config(
        tmp_path,
        properties={
            "codeQualityTools.cpd.gradlePluginVersion": "1.1",
        },
    )

    assert config.detekt.gradle_plugin_version == "1.0.0.RC1"
    assert config.cpd.gradle_plugin_version == "1.1"
    assert config.error_prone.gradle_plugin_version == "0.0.10"

    overridden = load_config(
        tmp_path,
        properties={"codeQualityTools.detekt.gradlePluginVersion": "1.0.0.RC6-4"},
    )
    assert overridden.detekt.gradle_plugin_version == "1.0.0.RC6-4"


def test_configuration_is_frozen(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    with pytest.raises(dataclasses.FrozenInstanceError):
        config.global_config.fail_early = False  # type: ignore[misc]
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.pmd = config.pmd  # type: ignore[misc]


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".codequality.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_config(tmp_path)


def test_load_config_reports_yaml_errors(tmp_path: Path) -> None:
    (tmp_path / ".codequality.yml").write_text("pmd: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Failed to parse"):
        load_config(tmp_path)


def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / ".codequality.yml").write_text("\n# nothing here\n", encoding="utf-8")

    assert load_config(tmp_path).global_config == GlobalConfig()


def test_parse_properties() -> None:
    assert parse_properties(["a.b=1", " c = two "]) == {"a.b": "1", "c": "two"}
    with pytest.raises(ConfigurationError):
        parse_properties(["missing-separator"])


def test_configuration_error_names_tool_field_and_module() -> None:
    error = ConfigurationError("does not exist", tool="pmd", field="rule_set_file", module="app")

    assert str(error) == "pmd.rule_set_file: does not exist (module 'app')"
    assert error.tool == "pmd"
    assert error.field == "rule_set_file"
    assert error.module == "app"
