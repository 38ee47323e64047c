"""Tests for the host build model."""

from __future__ import annotations

from pathlib import Path

import pytest

from codequality.config import ConfigurationError
from codequality.host import CHECK_TASK, BuildHost, discover_modules
from codequality.models import ANDROID_APPLICATION, ANDROID_LIBRARY, JAVA, KOTLIN, AnalysisTask, Module
from tests._fixtures.project_builder import ProjectBuilder


def test_discover_modules_reads_capabilities_from_build_scripts(tmp_path: Path) -> None:
    builder = ProjectBuilder(tmp_path)
    builder.write(
        {
            "build.gradle": "// root project is not a module\n",
            "app/build.gradle": """
                apply plugin: 'com.android.application'
                apply plugin: 'kotlin-android'
            """,
            "library/build.gradle.kts": """
                plugins {
                    id("com.android.library")
                    kotlin("android")
                }
            """,
            "core/build.gradle": """
                plugins {
                    id 'java-library'
                }
            """,
            "app/src/main/build.gradle": "apply plugin: 'java'\n",
            "docs/README.md": "not a module\n",
        }
    )

    modules = {module.name: module for module in discover_modules(builder.root)}

    assert set(modules) == {"app", "library", "core"}
    assert modules["app"].capabilities == frozenset({ANDROID_APPLICATION, KOTLIN})
    assert modules["library"].capabilities == frozenset({ANDROID_LIBRARY, KOTLIN})
    assert modules["core"].capabilities == frozenset({JAVA})
    assert modules["core"].root == (builder.root / "core").resolve()


def test_discover_modules_prefers_settings_includes(tmp_path: Path) -> None:
    builder = ProjectBuilder(tmp_path)
    builder.write(
        {
            "settings.gradle": "include ':app', ':libs:core'\nincludeBuild 'plugins'\n",
            "app/build.gradle": "apply plugin: 'com.android.application'\n",
            "libs/core/build.gradle": "apply plugin: 'java'\n",
            "unlisted/build.gradle": "apply plugin: 'java'\n",
        }
    )

    names = [module.name for module in discover_modules(builder.root)]

    assert names == ["app", "core"]


def test_host_plugin_and_classpath_registration_is_idempotent(tmp_path: Path) -> None:
    host = BuildHost([Module("app", tmp_path)])

    assert host.apply_plugin("app", "pmd") is True
    assert host.apply_plugin("app", "pmd") is False
    assert host.has_plugin("app", "pmd")
    assert host.add_build_classpath("de.aaschmid:gradle-cpd-plugin:1.0") is True
    assert host.add_build_classpath("de.aaschmid:gradle-cpd-plugin:1.0") is False
    assert host.build_classpath == ("de.aaschmid:gradle-cpd-plugin:1.0",)


def test_host_keeps_first_registered_task(tmp_path: Path) -> None:
    host = BuildHost([Module("app", tmp_path)])
    first = AnalysisTask(tool="pmd", module="app", name="pmd", settings={"v": 1})
    second = AnalysisTask(tool="pmd", module="app", name="pmd", settings={"v": 2})

    assert host.create_task(first) is first
    assert host.create_task(second) is first
    assert host.tasks("app") == [first]


def test_host_check_dependencies(tmp_path: Path) -> None:
    host = BuildHost([Module("app", tmp_path)])

    host.depends_on("app", CHECK_TASK, "pmd")
    host.depends_on("app", CHECK_TASK, "pmd")

    assert host.aggregate("app").tasks == ("pmd",)
    assert host.dependencies("app", CHECK_TASK) == ("pmd",)


def test_host_records_edges_between_other_tasks(tmp_path: Path) -> None:
    host = BuildHost([Module("app", tmp_path)])

    host.depends_on("app", "findbugs", "assemble")
    host.depends_on("app", "findbugs", "assemble")
    host.depends_on("app", "findbugs", "compileJava")

    assert host.dependencies("app", "findbugs") == ("assemble", "compileJava")
    assert host.dependencies("app", "pmd") == ()
    assert host.aggregate("app").tasks == ()


def test_host_rejects_second_module_with_same_name(tmp_path: Path) -> None:
    host = BuildHost([Module("core", tmp_path / "feature" / "core")])
    host.add_module(Module("core", tmp_path / "feature" / "core"))

    with pytest.raises(ValueError, match="core"):
        host.add_module(Module("core", tmp_path / "lib" / "core"))


def test_discover_modules_rejects_duplicate_names(tmp_path: Path) -> None:
    builder = ProjectBuilder(tmp_path)
    builder.write(
        {
            "settings.gradle": "include ':feature:core', ':lib:core'\n",
            "feature/core/build.gradle": "apply plugin: 'java'\n",
            "lib/core/build.gradle": "apply plugin: 'java'\n",
        }
    )

    with pytest.raises(ConfigurationError, match="'core'"):
        discover_modules(builder.root)


def test_resolve_file(tmp_path: Path) -> None:
    assert BuildHost.resolve_file(tmp_path, "rules/pmd.xml") == (tmp_path / "rules" / "pmd.xml").resolve()
    absolute = tmp_path / "abs.xml"
    assert BuildHost.resolve_file(Path("/elsewhere"), absolute) == absolute


def test_unknown_module_lookup_fails(tmp_path: Path) -> None:
    with pytest.raises(KeyError):
        BuildHost().module("missing")
