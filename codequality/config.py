"""Configuration loading for codequality (.codequality.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple

import yaml

CONFIG_FILENAME = ".codequality.yml"

DETEKT_PLUGIN_VERSION_PROPERTY = "codeQualityTools.detekt.gradlePluginVersion"
CPD_PLUGIN_VERSION_PROPERTY = "codeQualityTools.cpd.gradlePluginVersion"
ERROR_PRONE_PLUGIN_VERSION_PROPERTY = "codeQualityTools.errorProne.gradlePluginVersion"


class ConfigurationError(RuntimeError):
    """Raised when configuration is unreadable or references missing files."""

    def __init__(
        self,
        message: str,
        *,
        tool: str | None = None,
        field: str | None = None,
        module: str | None = None,
    ) -> None:
        self.tool = tool
        self.field = field
        self.module = module
        prefix = ""
        if tool:
            prefix = f"{tool}.{field}: " if field else f"{tool}: "
        suffix = f" (module '{module}')" if module else ""
        super().__init__(f"{prefix}{message}{suffix}")


@dataclass(frozen=True)
class GlobalConfig:
    """Defaults shared by every tool."""

    fail_early: bool = True
    html_reports: bool = False
    xml_reports: bool = True
    text_reports: bool = False
    ignore_projects: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class PmdConfig:
    enabled: bool = True
    tool_version: str = "6.0.0"
    ignore_failures: Optional[bool] = None
    rule_set_file: str = "code_quality_tools/pmd.xml"
    source: str = "src"
    include: Tuple[str, ...] = ("**/*.java",)
    exclude: Tuple[str, ...] = ("**/gen/**",)


@dataclass(frozen=True)
class CheckstyleConfig:
    enabled: bool = True
    tool_version: str = "8.6"
    ignore_failures: Optional[bool] = None
    show_violations: Optional[bool] = None
    config_file: str = "code_quality_tools/checkstyle.xml"
    source: str = "src"
    include: Tuple[str, ...] = ("**/*.java",)
    exclude: Tuple[str, ...] = ("**/gen/**",)


@dataclass(frozen=True)
class FindbugsConfig:
    enabled: bool = True
    tool_version: str = "3.0.1"
    ignore_failures: Optional[bool] = None
    exclude_filter: str = "code_quality_tools/findbugs-filter.xml"
    source: str = "src"
    effort: str = "max"
    report_level: str = "low"


@dataclass(frozen=True)
class LintConfig:
    """Android Lint options; unset values fall back to the global fail_early flag."""

    enabled: bool = True
    text_report: Optional[bool] = None
    text_output: str = "stdout"
    abort_on_error: Optional[bool] = None
    warnings_as_errors: Optional[bool] = None
    check_all_warnings: Optional[bool] = None
    baseline_file_name: Optional[str] = None


@dataclass(frozen=True)
class KtlintConfig:
    enabled: bool = True
    tool_version: str = "0.14.0"
    source_glob: str = "src/**/*.kt"
    timeout: Optional[float] = 600.0


@dataclass(frozen=True)
class DetektConfig:
    enabled: bool = True
    tool_version: str = "1.0.0.RC6"
    config: str = "code_quality_tools/detekt.yml"
    gradle_plugin_version: str = "1.0.0.M13.2"


@dataclass(frozen=True)
class CpdConfig:
    enabled: bool = True
    tool_version: str = "6.0.0"
    ignore_failures: Optional[bool] = None
    source: str = "src"
    language: str = "java"
    minimum_token_count: int = 50
    gradle_plugin_version: str = "1.0"


@dataclass(frozen=True)
class ErrorProneConfig:
    enabled: bool = True
    tool_version: str = "2.1.3"
    gradle_plugin_version: str = "0.0.10"


@dataclass(frozen=True)
class CodeQualityConfig:
    """Fully resolved, read-only configuration tree for one build invocation.

    ``root`` is the shared location rule sets and tool configuration files are
    resolved against; it is never a module directory.
    """

    root: Path
    global_config: GlobalConfig = field(default_factory=GlobalConfig)
    findbugs: FindbugsConfig = field(default_factory=FindbugsConfig)
    checkstyle: CheckstyleConfig = field(default_factory=CheckstyleConfig)
    pmd: PmdConfig = field(default_factory=PmdConfig)
    lint: LintConfig = field(default_factory=LintConfig)
    ktlint: KtlintConfig = field(default_factory=KtlintConfig)
    detekt: DetektConfig = field(default_factory=DetektConfig)
    cpd: CpdConfig = field(default_factory=CpdConfig)
    error_prone: ErrorProneConfig = field(default_factory=ErrorProneConfig)

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        *,
        root: Path,
        properties: Mapping[str, str] | None = None,
    ) -> "CodeQualityConfig":
        """Build the configuration tree from a parsed mapping plus build properties."""
        properties = properties or {}

        global_config = GlobalConfig(
            fail_early=_bool_or(data.get("fail_early"), True),
            html_reports=_bool_or(data.get("html_reports"), False),
            xml_reports=_bool_or(data.get("xml_reports"), True),
            text_reports=_bool_or(data.get("text_reports"), False),
            ignore_projects=frozenset(_as_str_list(data.get("ignore_projects"))),
        )

        pmd_data = _as_dict(data.get("pmd"))
        pmd_defaults = PmdConfig()
        pmd = PmdConfig(
            enabled=_bool_or(pmd_data.get("enabled"), pmd_defaults.enabled),
            tool_version=_str_or(pmd_data.get("tool_version"), pmd_defaults.tool_version),
            ignore_failures=_as_bool(pmd_data.get("ignore_failures")),
            rule_set_file=_str_or(pmd_data.get("rule_set_file"), pmd_defaults.rule_set_file),
            source=_str_or(pmd_data.get("source"), pmd_defaults.source),
            include=_patterns_or(pmd_data.get("include"), pmd_defaults.include),
            exclude=_patterns_or(pmd_data.get("exclude"), pmd_defaults.exclude),
        )

        checkstyle_data = _as_dict(data.get("checkstyle"))
        checkstyle_defaults = CheckstyleConfig()
        checkstyle = CheckstyleConfig(
            enabled=_bool_or(checkstyle_data.get("enabled"), checkstyle_defaults.enabled),
            tool_version=_str_or(
                checkstyle_data.get("tool_version"), checkstyle_defaults.tool_version
            ),
            ignore_failures=_as_bool(checkstyle_data.get("ignore_failures")),
            show_violations=_as_bool(checkstyle_data.get("show_violations")),
            config_file=_str_or(checkstyle_data.get("config_file"), checkstyle_defaults.config_file),
            source=_str_or(checkstyle_data.get("source"), checkstyle_defaults.source),
            include=_patterns_or(checkstyle_data.get("include"), checkstyle_defaults.include),
            exclude=_patterns_or(checkstyle_data.get("exclude"), checkstyle_defaults.exclude),
        )

        findbugs_data = _as_dict(data.get("findbugs"))
        findbugs_defaults = FindbugsConfig()
        findbugs = FindbugsConfig(
            enabled=_bool_or(findbugs_data.get("enabled"), findbugs_defaults.enabled),
            tool_version=_str_or(findbugs_data.get("tool_version"), findbugs_defaults.tool_version),
            ignore_failures=_as_bool(findbugs_data.get("ignore_failures")),
            exclude_filter=_str_or(
                findbugs_data.get("exclude_filter"), findbugs_defaults.exclude_filter
            ),
            source=_str_or(findbugs_data.get("source"), findbugs_defaults.source),
            effort=_str_or(findbugs_data.get("effort"), findbugs_defaults.effort),
            report_level=_str_or(findbugs_data.get("report_level"), findbugs_defaults.report_level),
        )

        lint_data = _as_dict(data.get("lint"))
        lint = LintConfig(
            enabled=_bool_or(lint_data.get("enabled"), True),
            text_report=_as_bool(lint_data.get("text_report")),
            text_output=_str_or(lint_data.get("text_output"), LintConfig.text_output),
            abort_on_error=_as_bool(lint_data.get("abort_on_error")),
            warnings_as_errors=_as_bool(lint_data.get("warnings_as_errors")),
            check_all_warnings=_as_bool(lint_data.get("check_all_warnings")),
            baseline_file_name=_as_str(lint_data.get("baseline_file_name")),
        )

        ktlint_data = _as_dict(data.get("ktlint"))
        ktlint_defaults = KtlintConfig()
        timeout = ktlint_defaults.timeout
        if "timeout" in ktlint_data:
            timeout = _as_float(ktlint_data.get("timeout"))
        ktlint = KtlintConfig(
            enabled=_bool_or(ktlint_data.get("enabled"), ktlint_defaults.enabled),
            tool_version=_str_or(ktlint_data.get("tool_version"), ktlint_defaults.tool_version),
            source_glob=_str_or(ktlint_data.get("source_glob"), ktlint_defaults.source_glob),
            timeout=timeout,
        )

        detekt_data = _as_dict(data.get("detekt"))
        detekt_defaults = DetektConfig()
        detekt = DetektConfig(
            enabled=_bool_or(detekt_data.get("enabled"), detekt_defaults.enabled),
            tool_version=_str_or(detekt_data.get("tool_version"), detekt_defaults.tool_version),
            config=_str_or(detekt_data.get("config"), detekt_defaults.config),
            gradle_plugin_version=_plugin_version(
                properties,
                DETEKT_PLUGIN_VERSION_PROPERTY,
                detekt_data.get("gradle_plugin_version"),
                detekt_defaults.gradle_plugin_version,
            ),
        )

        cpd_data = _as_dict(data.get("cpd"))
        cpd_defaults = CpdConfig()
        minimum_token_count = cpd_data.get("minimum_token_count", cpd_defaults.minimum_token_count)
        cpd = CpdConfig(
            enabled=_bool_or(cpd_data.get("enabled"), cpd_defaults.enabled),
            tool_version=_str_or(cpd_data.get("tool_version"), cpd_defaults.tool_version),
            ignore_failures=_as_bool(cpd_data.get("ignore_failures")),
            source=_str_or(cpd_data.get("source"), cpd_defaults.source),
            language=_str_or(cpd_data.get("language"), cpd_defaults.language),
            # Left uncoerced when malformed; the CPD activator rejects it with a descriptive error.
            minimum_token_count=_int_or_raw(minimum_token_count),
            gradle_plugin_version=_plugin_version(
                properties,
                CPD_PLUGIN_VERSION_PROPERTY,
                cpd_data.get("gradle_plugin_version"),
                cpd_defaults.gradle_plugin_version,
            ),
        )

        error_prone_data = _as_dict(data.get("error_prone"))
        error_prone_defaults = ErrorProneConfig()
        error_prone = ErrorProneConfig(
            enabled=_bool_or(error_prone_data.get("enabled"), error_prone_defaults.enabled),
            tool_version=_str_or(
                error_prone_data.get("tool_version"), error_prone_defaults.tool_version
            ),
            gradle_plugin_version=_plugin_version(
                properties,
                ERROR_PRONE_PLUGIN_VERSION_PROPERTY,
                error_prone_data.get("gradle_plugin_version"),
                error_prone_defaults.gradle_plugin_version,
            ),
        )

        return cls(
            root=root,
            global_config=global_config,
            findbugs=findbugs,
            checkstyle=checkstyle,
            pmd=pmd,
            lint=lint,
            ktlint=ktlint,
            detekt=detekt,
            cpd=cpd,
            error_prone=error_prone,
        )


def invalid_flags(section: Any) -> List[str]:
    """Return the names of boolean options in ``section`` set to a non-boolean value."""
    if not is_dataclass(section):
        return []
    invalid: List[str] = []
    for item in fields(section):
        if "bool" not in str(item.type):
            continue
        value = getattr(section, item.name)
        if value is not None and not isinstance(value, bool):
            invalid.append(item.name)
    return invalid


def load_config(
    config_path: Path, *, properties: Mapping[str, str] | None = None
) -> CodeQualityConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return CodeQualityConfig.from_mapping({}, root=root, properties=properties)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigurationError(f"{CONFIG_FILENAME} must contain a mapping at the root")
    return CodeQualityConfig.from_mapping(data, root=root, properties=properties)


def parse_properties(pairs: Sequence[str]) -> Dict[str, str]:
    """Parse ``key=value`` build properties as given on the command line."""
    properties: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ConfigurationError(f"Invalid property '{pair}', expected key=value")
        properties[key.strip()] = value.strip()
    return properties


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _plugin_version(
    properties: Mapping[str, str], key: str, configured: Any, default: str
) -> str:
    override = properties.get(key)
    if override:
        return override
    return _str_or(configured, default)


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _str_or(value: Any, default: str) -> str:
    result = _as_str(value)
    return result if result else default


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _int_or_raw(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return value
    return value


def _as_bool(value: Any) -> Any:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    # Anything else is kept as given and rejected by invalid_flags() at activation.
    return value


def _bool_or(value: Any, default: bool) -> Any:
    return default if value is None else _as_bool(value)


def _as_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


def _patterns_or(value: Any, default: Tuple[str, ...]) -> Tuple[str, ...]:
    if value is None:
        return default
    return tuple(_as_str_list(value))


__all__ = [
    "CONFIG_FILENAME",
    "CheckstyleConfig",
    "CodeQualityConfig",
    "ConfigurationError",
    "CpdConfig",
    "DetektConfig",
    "ErrorProneConfig",
    "FindbugsConfig",
    "GlobalConfig",
    "KtlintConfig",
    "LintConfig",
    "PmdConfig",
    "invalid_flags",
    "load_config",
    "parse_properties",
]
