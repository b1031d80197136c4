"""
Composition resolver.

Expands a target's requested identifiers into a prerequisite-closed,
topologically ordered plan, applies each module exactly once against a
fresh extension store, and finalizes the store into a FinalConfiguration.
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable

from ..core.config import Config, get_config
from ..core.exceptions import (
    BuildLogicError,
    CyclicDependencyError,
    ResolutionError,
    UnknownIdentifierError,
)
from ..core.logging import bind_context, get_logger, unbind_context
from ..core.types import ResolutionState, ServiceResult
from ..models.capabilities import CapabilitySet, Shape
from ..models.final import FinalConfiguration
from ..models.request import ResolutionRequest, TargetModule
from ..versions import VersionTable, load_version_table
from .detector import CapabilityDetector
from .registry import Registry
from .store import ExtensionStore

logger = get_logger(__name__)


class ResolutionRun:
    """Mutable state of resolving one request."""

    def __init__(self, request: ResolutionRequest, target: TargetModule, store: ExtensionStore) -> None:
        self.request = request
        self.target = target
        self.store = store
        self.capabilities = CapabilitySet()
        self.state = ResolutionState.PENDING
        self.order: list[str] = []
        self.declared_shape: Shape | None = None
        self.planned_tags: frozenset[str] = frozenset()
        self.applied: list[str] = []
        self.error: BuildLogicError | None = None
        self.result: FinalConfiguration | None = None

    def __repr__(self) -> str:
        return f"ResolutionRun(target={self.target.path!r}, state={self.state.value}, applied={self.applied})"


class CompositionResolver:
    """Resolves resolution requests against a registry and a version table."""

    def __init__(
        self,
        registry: Registry,
        versions: VersionTable | None = None,
        *,
        config: Config | None = None,
        strict: bool | None = None,
        detector: CapabilityDetector | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            registry: Registry of configuration modules, normally frozen.
            versions: Shared version table. Loaded from the configured path,
                or built from defaults, when not given.
            config: Engine configuration. Defaults to the environment.
            strict: Overrides ``config.engine.strict_overwrites``.
            detector: Capability detector.
        """
        self.config = config or get_config()
        self.registry = registry
        if versions is None:
            path = self.config.engine.version_table_path
            versions = load_version_table(path) if path else VersionTable()
        self.versions = versions
        self.strict = self.config.engine.strict_overwrites if strict is None else strict
        self.detector = detector or CapabilityDetector()

    def plan(self, identifiers: Iterable[str]) -> list[str]:
        """Expand identifiers into their application order.

        Prerequisites come before their dependents. Among unrelated
        identifiers the declared order is kept, and a shared prerequisite is
        placed where it is first encountered. Nothing is applied.

        Args:
            identifiers: Requested identifiers, in declared order.

        Returns:
            Every identifier to apply, each once, in order.

        Raises:
            UnknownIdentifierError: If an identifier is not registered.
            CyclicDependencyError: If prerequisites form a cycle.
        """
        order: list[str] = []
        done: set[str] = set()
        visiting: list[str] = []

        def visit(identifier: str, required_by: str | None) -> None:
            if identifier in done:
                return
            if identifier in visiting:
                cycle = visiting[visiting.index(identifier):] + [identifier]
                raise CyclicDependencyError(
                    message="prerequisites must form a directed acyclic graph",
                    cycle=cycle,
                )
            module = self.registry.get(identifier)
            if module is None:
                raise UnknownIdentifierError(
                    message="no such module in the registry",
                    identifier=identifier,
                    required_by=required_by,
                )
            visiting.append(identifier)
            for prerequisite in module.prerequisites:
                visit(prerequisite, identifier)
            visiting.pop()
            done.add(identifier)
            order.append(identifier)

        for identifier in identifiers:
            visit(identifier, None)
        return order

    def start(self, request: ResolutionRequest) -> ResolutionRun:
        """Prepare a run with its own store and capability set."""
        target = request.target.with_defaults(self.config.project.as_properties())
        store = ExtensionStore(target=target.path, strict=self.strict)
        return ResolutionRun(request, target, store)

    def execute(self, run: ResolutionRun) -> FinalConfiguration:
        """Drive a prepared run to completion.

        Raises:
            BuildLogicError: Any failure; the run is left FAILED and the
                store is not rolled back.
        """
        target = run.target
        bind_context(target=target.path)
        try:
            run.state = ResolutionState.EXPANDING
            run.order = self.plan(run.request.identifiers)
            modules = [self.registry.lookup(identifier) for identifier in run.order]
            run.declared_shape = next((m.shape for m in modules if m.shape is not None), None)
            run.planned_tags = frozenset().union(*(m.provides for m in modules))
            logger.debug(
                "plan_expanded",
                requested=run.request.identifiers,
                order=run.order,
                shape=run.declared_shape.value if run.declared_shape else None,
            )

            run.store.seed(run.request.overrides)
            run.store.begin_resolution()

            run.state = ResolutionState.APPLYING
            for identifier in run.order:
                module = self.registry.lookup(identifier)
                self.detector.require_before_apply(
                    run.capabilities, module, target=target.path, declared_shape=run.declared_shape
                )
                with run.store.active_module(identifier):
                    tags = module.apply(
                        target,
                        run.capabilities,
                        run.store,
                        self.versions,
                        declared_shape=run.declared_shape,
                        planned_tags=run.planned_tags,
                    )
                run.capabilities.update(sorted(tags - run.capabilities.snapshot()), source=identifier)
                run.applied.append(identifier)
                logger.debug("module_applied", identifier=identifier, capabilities=sorted(run.capabilities))

            run.capabilities.freeze()
            run.store.mark_resolved()
            run.result = run.store.snapshot(run.capabilities)
            run.state = ResolutionState.FINALIZED
            logger.info(
                "target_resolved",
                modules=len(run.applied),
                shape=run.result.shape.value if run.result.shape else None,
            )
            return run.result
        except BuildLogicError as e:
            if isinstance(e, ResolutionError) and not e.target:
                e.target = target.path
            run.state = ResolutionState.FAILED
            run.error = e
            logger.error("resolution_failed", error=str(e), applied=run.applied)
            raise
        finally:
            unbind_context("target")

    def resolve(self, request: ResolutionRequest) -> FinalConfiguration:
        """Resolve one request into its final configuration.

        Args:
            request: Target, requested identifiers and overrides.

        Returns:
            The detached final configuration.

        Raises:
            BuildLogicError: If expansion, a check or a module fails.
        """
        return self.execute(self.start(request))

    def _resolve_one(self, request: ResolutionRequest) -> ServiceResult[FinalConfiguration]:
        started = time.perf_counter()
        run = self.start(request)
        try:
            final = self.execute(run)
        except BuildLogicError as e:
            result: ServiceResult[FinalConfiguration] = ServiceResult.fail(
                e, target=run.target.path, applied=list(run.applied), state=run.state.value
            )
        else:
            result = ServiceResult.ok(final, target=run.target.path, applied=list(run.applied))
        result.warnings = [
            f"{o.concern}.{o.field}: '{o.writer}' replaced value set by '{o.previous_writer}'"
            for o in run.store.journal.overwrites
            if not o.last_write_wins
        ]
        result.duration_ms = (time.perf_counter() - started) * 1000
        return result

    def resolve_many(
        self,
        requests: Iterable[ResolutionRequest],
        max_workers: int | None = None,
    ) -> list[ServiceResult[FinalConfiguration]]:
        """Resolve independent targets in parallel.

        Each request gets its own store and capability set; the registry and
        version table are shared read-only. A failing target yields a failed
        result and does not stop the others.

        Args:
            requests: Requests to resolve.
            max_workers: Worker threads; defaults to ``config.engine.max_workers``.

        Returns:
            One result per request, in request order.
        """
        pending = list(requests)
        results: list[ServiceResult[FinalConfiguration] | None] = [None] * len(pending)
        workers = max_workers or self.config.engine.max_workers

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {executor.submit(self._resolve_one, request): i for i, request in enumerate(pending)}
            for future in as_completed(futures):
                results[futures[future]] = future.result()

        failed = sum(1 for r in results if r is not None and not r.success)
        logger.info("targets_resolved", total=len(pending), failed=failed)
        return [r for r in results if r is not None]
