"""CLI entrypoints for codequality commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Dict

from .config import CodeQualityConfig, ConfigurationError, load_config, parse_properties
from .errors import ExternalProcessFailure
from .exclusion import should_ignore
from .host import BuildHost, discover_modules
from .logging import configure_logging, get_logger
from .models import AnalysisTask, Module
from .pipeline import PipelineAssembler
from .tools import KtlintActivator, KtlintRunner


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    kwargs["default"] = argparse.SUPPRESS if suppress_default else False
    parser.add_argument("-v", "--verbose", **kwargs)


def _add_config_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to .codequality.yml (defaults to the project root).",
    )
    parser.add_argument(
        "-P",
        "--property",
        dest="properties",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Build property, e.g. codeQualityTools.detekt.gradlePluginVersion=1.0.0.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codequality",
        description="Configure static analysis tools across the modules of a multi-module build.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    plan_parser = subparsers.add_parser(
        "plan",
        help="Show the analysis tasks each module's check step depends on.",
    )
    _add_verbose_option(plan_parser, suppress_default=True)
    _add_config_options(plan_parser)
    plan_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    plan_parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=1,
        help="Number of modules to activate in parallel.",
    )

    ktlint_parser = subparsers.add_parser(
        "ktlint",
        help="Run ktlint for a single module.",
    )
    _add_verbose_option(ktlint_parser, suppress_default=True)
    _add_config_options(ktlint_parser)
    ktlint_parser.add_argument(
        "module",
        help="Path to the module directory.",
    )
    ktlint_parser.add_argument(
        "--format",
        action="store_true",
        help="Rewrite sources with ktlint -F instead of checking them.",
    )
    ktlint_parser.add_argument(
        "--classpath",
        default=None,
        help="ktlint classpath; when omitted the ktlint executable on PATH is used.",
    )
    ktlint_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds before the ktlint process counts as failed.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for codequality commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    try:
        if args.command == "plan":
            _run_plan(args)
        elif args.command == "ktlint":
            _run_ktlint(args)
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except ConfigurationError as exc:
        parser.exit(1, f"Configuration error: {exc}\n")
    except ExternalProcessFailure as exc:
        parser.exit(1, f"{exc}\n")


def _load(args: argparse.Namespace, default_root: Path) -> CodeQualityConfig:
    properties = parse_properties(args.properties)
    config_path = Path(args.config) if args.config else default_root
    return load_config(config_path, properties=properties)


def _run_plan(args: argparse.Namespace) -> None:
    root = Path(args.path).expanduser().resolve()
    config = _load(args, root)
    modules = discover_modules(root)
    get_logger("cli").debug("Discovered %d module(s) under %s", len(modules), root)

    host = BuildHost(modules)
    aggregates = PipelineAssembler(config, host).assemble(modules, jobs=max(1, args.jobs))

    if host.build_classpath:
        print("build classpath:")
        for coordinate in host.build_classpath:
            print(f"  {coordinate}")
    for module in modules:
        if should_ignore(module, config.global_config):
            print(f"{module.name}: excluded")
            continue
        tasks = list(aggregates[module.name])
        print(f"{module.name}: check -> {', '.join(tasks) if tasks else '(nothing)'}")
        for task in host.tasks(module.name):
            if not task.wired:
                print(f"  also registered: {task.name}")


def _run_ktlint(args: argparse.Namespace) -> None:
    module_root = Path(args.module).expanduser().resolve()
    config = _load(args, module_root.parent)
    module = Module(name=module_root.name, root=module_root)

    activation = KtlintActivator().prepare(module, config)
    if activation is None:
        print(f"ktlint is not enabled for {module.name}")
        return
    tasks: Dict[str, AnalysisTask] = {task.name: task for task in activation.tasks}
    runner = KtlintRunner(classpath=args.classpath, timeout=args.timeout)
    if args.format:
        runner.format(tasks["ktlintFormat"])
        print(f"Formatted {module.name}")
        return
    report = runner.check(tasks["ktlint"])
    print(f"ktlint report at {_relativize(report)}")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
