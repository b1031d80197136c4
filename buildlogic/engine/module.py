"""
Configuration module abstraction.

A configuration module is a stateless, named unit of build configuration.
It declares its prerequisites and shape constraints statically, so the
dependency graph can be inspected without running anything, and mutates
the target's build concerns only through the extension store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, ClassVar, Iterable, TypeVar

from ..models.capabilities import CapabilitySet, Shape
from ..models.extensions import DependencyDeclaration, DependencyOptions, Extension, PluginOptions
from ..models.request import TargetModule

if TYPE_CHECKING:
    from ..versions import VersionTable
    from .store import ExtensionStore

E = TypeVar("E", bound=Extension)


@dataclass(frozen=True)
class ModuleContext:
    """Everything a module may read or write while it is applied."""

    identifier: str
    target: TargetModule
    capabilities: CapabilitySet
    store: ExtensionStore
    versions: VersionTable
    declared_shape: Shape | None = None
    planned_tags: frozenset[str] = frozenset()

    @property
    def shape(self) -> Shape | None:
        """Shape of the target, known before its base module is applied."""
        return self.capabilities.shape or self.declared_shape

    def has(self, tag: str) -> bool:
        return tag in self.capabilities

    def expects(self, tag: str) -> bool:
        """Whether a tag is present or will be provided later in this run."""
        return tag in self.capabilities or tag in self.planned_tags

    def extension(self, extension_type: type[E]) -> E:
        """Get-or-create a build concern."""
        return self.store.get_or_create(extension_type)

    def version(self, key: str) -> str:
        return self.versions.require(key, identifier=self.identifier)

    def version_int(self, key: str) -> int:
        return self.versions.require_int(key, identifier=self.identifier)

    def apply_plugins(self, *plugin_ids: str) -> None:
        self.extension(PluginOptions).apply(*plugin_ids)

    def add_dependencies(self, *declarations: DependencyDeclaration) -> None:
        self.extension(DependencyOptions).add(*declarations)


class ConfigurationModule(ABC):
    """Base class for all configuration modules.

    Subclasses set the class-level declarations and implement ``configure``.
    ``apply`` must be idempotent: applying a module twice to the same store
    leaves the same state as applying it once.
    """

    IDENTIFIER: ClassVar[str] = ""
    DESCRIPTION: ClassVar[str] = ""
    PREREQUISITES: ClassVar[tuple[str, ...]] = ()
    # Shape established by a base module
    SHAPE: ClassVar[Shape | None] = None
    # Shapes the module may be attached to; None means any
    ALLOWED_SHAPES: ClassVar[frozenset[Shape] | None] = None
    REQUIRES_SHAPE: ClassVar[bool] = False
    REQUIRED_TAGS: ClassVar[frozenset[str]] = frozenset()
    PROVIDES: ClassVar[tuple[str, ...]] = ()

    def __init__(
        self,
        identifier: str | None = None,
        prerequisites: Iterable[str] | None = None,
        *,
        shape: Shape | None = None,
        allowed_shapes: Iterable[Shape] | None = None,
        requires_shape: bool | None = None,
        required_tags: Iterable[str] | None = None,
        provides: Iterable[str] | None = None,
        description: str | None = None,
    ) -> None:
        self.identifier: str = identifier or self.IDENTIFIER
        if not self.identifier:
            raise ValueError(f"{type(self).__name__} has no identifier")
        self.prerequisites: tuple[str, ...] = tuple(
            self.PREREQUISITES if prerequisites is None else prerequisites
        )
        self.shape: Shape | None = shape or self.SHAPE
        allowed = self.ALLOWED_SHAPES if allowed_shapes is None else allowed_shapes
        self.allowed_shapes: frozenset[Shape] | None = (
            frozenset(allowed) if allowed is not None else None
        )
        self.requires_shape: bool = self.REQUIRES_SHAPE if requires_shape is None else requires_shape
        self.required_tags: frozenset[str] = frozenset(
            self.REQUIRED_TAGS if required_tags is None else required_tags
        )
        self.description: str = description or self.DESCRIPTION or (self.__doc__ or "").strip().split("\n")[0]
        extra = tuple(self.PROVIDES if provides is None else provides)
        tags = [self.identifier, *extra]
        if self.shape is not None:
            tags.append(self.shape.value)
        self._provides: frozenset[str] = frozenset(tags)

    @property
    def provides(self) -> frozenset[str]:
        """Capability tags this module contributes."""
        return self._provides

    @property
    def is_base(self) -> bool:
        """Whether this module establishes the target's shape."""
        return self.shape is not None

    def apply(
        self,
        target: TargetModule,
        capabilities: CapabilitySet,
        store: ExtensionStore,
        versions: VersionTable,
        *,
        declared_shape: Shape | None = None,
        planned_tags: Iterable[str] = (),
    ) -> frozenset[str]:
        """Apply the module and return the resulting capability tags.

        Args:
            target: Module being configured.
            capabilities: Tags accumulated so far; read-only here.
            store: Extension store of this resolution run.
            versions: Shared version table.
            declared_shape: Shape of the first base module in the run's plan.
            planned_tags: Tags every module in the run's plan provides.

        Returns:
            The current tags plus the tags this module provides.
        """
        context = ModuleContext(
            identifier=self.identifier,
            target=target,
            capabilities=capabilities,
            store=store,
            versions=versions,
            declared_shape=declared_shape,
            planned_tags=frozenset(planned_tags),
        )
        self.configure(context)
        return capabilities.snapshot() | self.provides

    @abstractmethod
    def configure(self, context: ModuleContext) -> None:
        """Mutate the build concerns for the target."""
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(identifier={self.identifier!r}, prerequisites={list(self.prerequisites)})"


class ShapeDispatchModule(ConfigurationModule):
    """A module whose behaviour branches on the target's shape.

    Every shape has its own abstract handler, so a subclass that forgets one
    cannot be instantiated. ``on_unshaped`` covers targets without a base
    module; ``configure_common`` runs after the shape handler in every case.
    """

    def configure(self, context: ModuleContext) -> None:
        # Known from the plan even before the base module has run
        shape = context.shape
        if shape is None:
            self.on_unshaped(context)
        else:
            handlers: dict[Shape, Callable[[ModuleContext], None]] = {
                Shape.APPLICATION: self.on_application,
                Shape.LIBRARY: self.on_library,
                Shape.TEST_HARNESS: self.on_test_harness,
                Shape.JVM_ONLY: self.on_jvm_only,
            }
            handlers[shape](context)
        self.configure_common(context)

    @abstractmethod
    def on_application(self, context: ModuleContext) -> None: ...

    @abstractmethod
    def on_library(self, context: ModuleContext) -> None: ...

    @abstractmethod
    def on_test_harness(self, context: ModuleContext) -> None: ...

    @abstractmethod
    def on_jvm_only(self, context: ModuleContext) -> None: ...

    def on_unshaped(self, context: ModuleContext) -> None:
        """Handle a target no base module has shaped yet."""

    def configure_common(self, context: ModuleContext) -> None:
        """Configuration shared by every shape."""


class FunctionModule(ConfigurationModule):
    """A module built from a plain function, for ad-hoc conventions.

    Example:
        FunctionModule("strict-warnings", configure=enable_warnings_as_errors)
    """

    def __init__(
        self,
        identifier: str,
        configure: Callable[[ModuleContext], None] | None = None,
        prerequisites: Iterable[str] = (),
        **declarations: object,
    ) -> None:
        super().__init__(identifier, prerequisites, **declarations)  # type: ignore[arg-type]
        self._configure = configure

    def configure(self, context: ModuleContext) -> None:
        if self._configure is not None:
            self._configure(context)
