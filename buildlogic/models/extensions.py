"""
Build extension models.

Each model is one build concern that configuration modules co-configure
through the extension store. Models know which of their fields are
intentionally last-write-wins and which lists are set-like, so that a
snapshot does not depend on the order of independent modules.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar, Iterable, Literal

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr


class Extension(BaseModel):
    """Base class for a build concern held by the extension store.

    Field assignments are reported to the store's write journal, which
    attributes them to the module being applied, skips fields pinned by
    explicit overrides, and flags two modules disagreeing on a field.
    """

    KEY: ClassVar[str] = ""
    LAST_WRITE_WINS: ClassVar[frozenset[str]] = frozenset()
    SET_FIELDS: ClassVar[frozenset[str]] = frozenset()

    model_config = ConfigDict(extra="forbid")

    _journal: Any = PrivateAttr(default=None)
    _pinned: set[str] = PrivateAttr(default_factory=set)
    _writers: dict[str, str] = PrivateAttr(default_factory=dict)

    def __setattr__(self, name: str, value: Any) -> None:
        if name not in type(self).model_fields or self._journal is None:
            super().__setattr__(name, value)
            return
        if not self._admit(name, getattr(self, name), value):
            return
        super().__setattr__(name, value)

    def _admit(self, name: str, current: Any, value: Any) -> bool:
        journal = self._journal
        if name in self._pinned:
            journal.on_pinned_write(self, name, value)
            return False
        writer = self._writers.get(name)
        if writer is not None and writer != journal.active and current != value:
            journal.on_overwrite(self, name, writer, current, value)
        if journal.active is not None:
            self._writers[name] = journal.active
        return True

    def attach(self, journal: Any) -> None:
        """Report subsequent writes to the given journal."""
        self._journal = journal

    def pin(self, *names: str) -> None:
        """Protect fields from module writes (explicit beats default)."""
        self._pinned.update(names)

    @property
    def pinned(self) -> frozenset[str]:
        return frozenset(self._pinned)

    def extend_unique(self, name: str, values: Iterable[Any]) -> None:
        """Append values to a list field, skipping ones already present."""
        if self._journal is not None and name in self._pinned:
            self._journal.on_pinned_write(self, name, list(values))
            return
        target: list[Any] = getattr(self, name)
        for value in values:
            if value not in target:
                target.append(value)

    def put(self, name: str, key: str, value: Any) -> None:
        """Set one entry of a mapping field."""
        mapping: dict[str, Any] = getattr(self, name)
        slot = f"{name}[{key}]"
        if self._journal is not None:
            if name in self._pinned or slot in self._pinned:
                self._journal.on_pinned_write(self, slot, value)
                return
            if not self._admit(slot, mapping.get(key), value):
                return
        mapping[key] = value

    def normalized(self) -> Extension:
        """Detached copy with set-like lists in a canonical order."""
        copy = type(self).model_validate(self.model_dump())
        for name in self.SET_FIELDS:
            values = getattr(copy, name)
            setattr(copy, name, sorted(values, key=_sort_key))
        return copy


def _sort_key(value: Any) -> str:
    if isinstance(value, BaseModel):
        return value.model_dump_json()
    return str(value)


class CompileOptions(Extension):
    """SDK levels, Java compatibility and Kotlin compiler options."""

    KEY: ClassVar[str] = "compile_options"
    LAST_WRITE_WINS: ClassVar[frozenset[str]] = frozenset(
        {"compile_sdk", "min_sdk", "target_sdk", "jvm_target"}
    )
    SET_FIELDS: ClassVar[frozenset[str]] = frozenset({"free_compiler_args"})

    compile_sdk: int | None = Field(default=None)
    min_sdk: int | None = Field(default=None)
    target_sdk: int | None = Field(default=None)
    source_compatibility: str | None = Field(default=None, description="Java source level")
    target_compatibility: str | None = Field(default=None, description="Java target level")
    jvm_target: str | None = Field(default=None, description="Kotlin JVM target")
    core_library_desugaring: bool = Field(default=False)
    all_warnings_as_errors: bool = Field(default=False)
    free_compiler_args: list[str] = Field(default_factory=list)


class AndroidOptions(Extension):
    """Android extension settings that are not compile or test options."""

    KEY: ClassVar[str] = "android_options"

    resource_prefix: str | None = Field(default=None)
    compose: bool = Field(default=False, description="Compose build feature")
    skip_android_tests_without_sources: bool = Field(default=False)


class TestOptions(Extension):
    """Test framework wiring for unit and instrumented tests."""

    __test__ = False

    KEY: ClassVar[str] = "test_options"
    LAST_WRITE_WINS: ClassVar[frozenset[str]] = frozenset({"framework", "instrumentation_runner"})

    framework: str | None = Field(default=None, description="Unit test engine (e.g., jupiter)")
    use_junit_platform: bool = Field(default=False)
    animations_disabled: bool = Field(default=False)
    include_android_resources: bool = Field(default=False)
    return_default_values: bool = Field(default=False)
    instrumentation_runner: str | None = Field(default=None)
    execution: str | None = Field(default=None, description="Instrumented test execution mode")


class LintOptions(Extension):
    """Android lint settings and the extension that hosts them."""

    KEY: ClassVar[str] = "lint_options"

    host: Literal["application", "library", "standalone"] | None = Field(default=None)
    xml_report: bool = Field(default=False)
    check_dependencies: bool = Field(default=False)


class ProductFlavor(BaseModel):
    """One product flavor in a flavor dimension."""

    name: str
    dimension: str


class FlavorOptions(Extension):
    """Flavor dimensions (in priority order) and product flavors."""

    KEY: ClassVar[str] = "flavor_options"
    SET_FIELDS: ClassVar[frozenset[str]] = frozenset({"product_flavors"})

    dimensions: list[str] = Field(default_factory=list)
    product_flavors: list[ProductFlavor] = Field(default_factory=list)

    def flavor(self, name: str) -> ProductFlavor | None:
        """Get a product flavor by name."""
        for flavor in self.product_flavors:
            if flavor.name == name:
                return flavor
        return None


class ComposeOptions(Extension):
    """Compose compiler settings."""

    KEY: ClassVar[str] = "compose_options"
    SET_FIELDS: ClassVar[frozenset[str]] = frozenset({"stability_configuration_files"})

    metrics_destination: str | None = Field(default=None)
    reports_destination: str | None = Field(default=None)
    stability_configuration_files: list[str] = Field(default_factory=list)


class CoverageOptions(Extension):
    """Coverage instrumentation and report tasks."""

    KEY: ClassVar[str] = "coverage_options"
    SET_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {"instrumented_build_types", "report_variants", "report_tasks", "report_formats", "exclusions"}
    )

    tool: Literal["kover", "jacoco"] | None = Field(default=None)
    tool_version: str | None = Field(default=None)
    instrumented_build_types: list[str] = Field(default_factory=list)
    report_variants: list[str] = Field(default_factory=list)
    report_tasks: list[str] = Field(default_factory=list)
    report_formats: list[str] = Field(default_factory=list)
    exclusions: list[str] = Field(default_factory=list)


class StaticAnalysisOptions(Extension):
    """Static analysis (detekt) settings."""

    KEY: ClassVar[str] = "static_analysis_options"
    SET_FIELDS: ClassVar[frozenset[str]] = frozenset({"report_formats"})

    tool: str | None = Field(default=None)
    build_upon_default_config: bool = Field(default=False)
    parallel: bool = Field(default=False)
    config_file: str | None = Field(default=None)
    jvm_target: str | None = Field(default=None)
    report_formats: list[str] = Field(default_factory=list)


class KspOptions(Extension):
    """Arguments passed to KSP annotation processors."""

    KEY: ClassVar[str] = "ksp_options"

    arguments: dict[str, str] = Field(default_factory=dict)


class RoomOptions(Extension):
    """Room database settings."""

    KEY: ClassVar[str] = "room_options"

    schema_directory: str | None = Field(default=None)


class PluginOptions(Extension):
    """Build plugins applied to the target."""

    KEY: ClassVar[str] = "plugins"
    SET_FIELDS: ClassVar[frozenset[str]] = frozenset({"ids"})

    ids: list[str] = Field(default_factory=list)

    def apply(self, *plugin_ids: str) -> None:
        self.extend_unique("ids", plugin_ids)


class DependencyScope(str, Enum):
    """Gradle dependency configurations."""

    IMPLEMENTATION = "implementation"
    API = "api"
    COMPILE_ONLY = "compileOnly"
    DEBUG_IMPLEMENTATION = "debugImplementation"
    TEST_IMPLEMENTATION = "testImplementation"
    TEST_RUNTIME_ONLY = "testRuntimeOnly"
    ANDROID_TEST_IMPLEMENTATION = "androidTestImplementation"
    KSP = "ksp"
    CORE_LIBRARY_DESUGARING = "coreLibraryDesugaring"
    DETEKT_PLUGINS = "detektPlugins"


class DependencyKind(str, Enum):
    """What a dependency declaration points at."""

    LIBRARY = "library"
    PROJECT = "project"
    KOTLIN = "kotlin"


class DependencyDeclaration(BaseModel):
    """A dependency on a catalog library, a project module or a Kotlin module.

    Library declarations reference catalog aliases; the external build
    executor resolves them to coordinates.
    """

    reference: str = Field(description="Catalog alias, project path or Kotlin module")
    kind: DependencyKind = Field(default=DependencyKind.LIBRARY)
    configuration: DependencyScope = Field(default=DependencyScope.IMPLEMENTATION)
    is_platform: bool = Field(default=False, description="Whether this is a platform/BOM dependency")

    @classmethod
    def library(
        cls,
        alias: str,
        configuration: DependencyScope = DependencyScope.IMPLEMENTATION,
        platform: bool = False,
    ) -> DependencyDeclaration:
        return cls(reference=alias, configuration=configuration, is_platform=platform)

    @classmethod
    def project(
        cls, path: str, configuration: DependencyScope = DependencyScope.IMPLEMENTATION
    ) -> DependencyDeclaration:
        return cls(reference=path, kind=DependencyKind.PROJECT, configuration=configuration)

    @classmethod
    def kotlin(
        cls, module: str, configuration: DependencyScope = DependencyScope.IMPLEMENTATION
    ) -> DependencyDeclaration:
        return cls(reference=module, kind=DependencyKind.KOTLIN, configuration=configuration)

    @property
    def notation(self) -> str:
        """Get Gradle dependency notation.

        Returns:
            str: Type-safe accessor for catalog libraries (libs.room.ktx),
                project("...") for modules, kotlin("...") for Kotlin modules.
        """
        if self.kind is DependencyKind.PROJECT:
            return f'project("{self.reference}")'
        if self.kind is DependencyKind.KOTLIN:
            return f'kotlin("{self.reference}")'
        return "libs." + self.reference.replace("-", ".").replace("_", ".")

    @property
    def declaration(self) -> str:
        """Get full Gradle declaration.

        Returns:
            str: Complete dependency declaration including configuration,
                wrapped with platform() for BOM dependencies.
        """
        if self.is_platform:
            return f"{self.configuration.value}(platform({self.notation}))"
        return f"{self.configuration.value}({self.notation})"


class DependencyOptions(Extension):
    """Dependency declarations contributed by conventions."""

    KEY: ClassVar[str] = "dependencies"
    SET_FIELDS: ClassVar[frozenset[str]] = frozenset({"declarations"})

    declarations: list[DependencyDeclaration] = Field(default_factory=list)

    def add(self, *declarations: DependencyDeclaration) -> None:
        self.extend_unique("declarations", declarations)

    def by_configuration(self, configuration: DependencyScope) -> list[DependencyDeclaration]:
        """Declarations added to one configuration."""
        return [d for d in self.declarations if d.configuration is configuration]

    def references(self, configuration: DependencyScope | None = None) -> list[str]:
        """References of all declarations, optionally for one configuration."""
        return [
            d.reference
            for d in self.declarations
            if configuration is None or d.configuration is configuration
        ]


EXTENSION_TYPES: dict[str, type[Extension]] = {
    cls.KEY: cls
    for cls in (
        CompileOptions,
        AndroidOptions,
        TestOptions,
        LintOptions,
        FlavorOptions,
        ComposeOptions,
        CoverageOptions,
        StaticAnalysisOptions,
        KspOptions,
        RoomOptions,
        PluginOptions,
        DependencyOptions,
    )
}
