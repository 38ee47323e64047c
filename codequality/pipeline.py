"""Assembles per-module verification pipelines from the tool activators."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .config import CodeQualityConfig, ConfigurationError, invalid_flags
from .exclusion import should_ignore
from .host import BuildHost
from .logging import get_logger, module_logger
from .models import Module, VerificationAggregate
from .tools import Activation, ToolActivator, discover_activators

ModulePlan = List[Tuple[ToolActivator, Activation]]


class PipelineAssembler:
    """Wires every enabled tool into each module's ``check`` step.

    Assembly runs in two phases. Planning validates configuration and builds
    activations without touching the host, so a bad rule set path aborts the
    run before any module is modified. Activation then mutates the host,
    module by module, in the fixed tool order.
    """

    def __init__(
        self,
        config: CodeQualityConfig,
        host: BuildHost,
        activators: Optional[Iterable[ToolActivator]] = None,
    ) -> None:
        self.config = config
        self.host = host
        self.activators = list(activators) if activators is not None else discover_activators()
        self.logger = get_logger("pipeline")
        self._build_lock = threading.Lock()
        self._build_registered = False

    def register_build_capabilities(self) -> None:
        """Add build-wide plugin classpath entries once, before any module activation."""
        with self._build_lock:
            if self._build_registered:
                return
            for activator in self.activators:
                if activator.tool_config(self.config).enabled is not True:
                    continue
                coordinate = activator.build_classpath(self.config)
                if coordinate and self.host.add_build_classpath(coordinate):
                    self.logger.debug("Registered %s for %s", coordinate, activator.name)
            self._build_registered = True

    def check_global_options(self) -> None:
        """Reject non-boolean values for the shared flags every tool falls back to."""
        invalid = invalid_flags(self.config.global_config)
        if invalid:
            value = getattr(self.config.global_config, invalid[0])
            raise ConfigurationError(
                f"expected true or false, got {value!r}", tool="global", field=invalid[0]
            )

    def plan_module(self, module: Module) -> ModulePlan:
        self.check_global_options()
        logger = module_logger("pipeline", module.name)
        if should_ignore(module, self.config.global_config):
            logger.info("Excluded from code quality checks")
            return []
        plan: ModulePlan = []
        for activator in self.activators:
            activation = activator.prepare(module, self.config)
            if activation is not None:
                plan.append((activator, activation))
        logger.debug("Planned %s", ", ".join(a.name for a, _ in plan) or "no tools")
        return plan

    def activate_module(self, module: Module, plan: ModulePlan | None = None) -> VerificationAggregate:
        """Activate one module; safe to call again for the same module."""
        self.register_build_capabilities()
        if plan is None:
            plan = self.plan_module(module)
        self.host.add_module(module)
        for activator, activation in plan:
            activator.apply(self.host, activation)
        return self.host.aggregate(module.name)

    def assemble(
        self, modules: Sequence[Module] | None = None, *, jobs: int = 1
    ) -> Dict[str, VerificationAggregate]:
        """Plan every module, then activate them (optionally in parallel)."""
        targets = list(modules) if modules is not None else self.host.modules()
        seen: Dict[str, Module] = {}
        for module in targets:
            other = seen.setdefault(module.name, module)
            if other.root != module.root:
                raise ConfigurationError(
                    f"module name '{module.name}' is shared by {other.root} and {module.root}"
                )
        plans = {module.name: self.plan_module(module) for module in targets}
        self.register_build_capabilities()

        if jobs > 1 and len(targets) > 1:
            with ThreadPoolExecutor(max_workers=jobs, thread_name_prefix="codequality") as pool:
                futures = [
                    pool.submit(self.activate_module, module, plans[module.name])
                    for module in targets
                ]
                for future in futures:
                    future.result()
        else:
            for module in targets:
                self.activate_module(module, plans[module.name])

        aggregates = {module.name: self.host.aggregate(module.name) for module in targets}
        self.logger.info(
            "Wired %d task(s) across %d module(s)",
            sum(len(aggregate) for aggregate in aggregates.values()),
            len(aggregates),
        )
        return aggregates


__all__ = ["ModulePlan", "PipelineAssembler"]
