"""
Final configuration handed to the external build executor.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from .capabilities import Shape
from .extensions import (
    AndroidOptions,
    CompileOptions,
    ComposeOptions,
    CoverageOptions,
    DependencyOptions,
    Extension,
    FlavorOptions,
    KspOptions,
    LintOptions,
    PluginOptions,
    RoomOptions,
    StaticAnalysisOptions,
    TestOptions,
)


class FinalConfiguration(BaseModel):
    """Aggregate of every build concern configured for one target.

    Concerns no module touched are None. The snapshot carries no timestamps
    or ordering metadata, so resolving the same request twice yields
    identical JSON.
    """

    target: str = Field(description="Project path of the target")
    shape: Shape | None = Field(default=None)
    capabilities: list[str] = Field(default_factory=list, description="Sorted capability tags")

    compile_options: CompileOptions | None = None
    android_options: AndroidOptions | None = None
    test_options: TestOptions | None = None
    lint_options: LintOptions | None = None
    flavor_options: FlavorOptions | None = None
    compose_options: ComposeOptions | None = None
    coverage_options: CoverageOptions | None = None
    static_analysis_options: StaticAnalysisOptions | None = None
    ksp_options: KspOptions | None = None
    room_options: RoomOptions | None = None
    plugins: PluginOptions | None = None
    dependencies: DependencyOptions | None = None

    def concern(self, key: str) -> Extension | None:
        """Get a concern by its store key."""
        value = getattr(self, key, None)
        return value if isinstance(value, Extension) else None

    def concerns(self) -> dict[str, Extension]:
        """All configured concerns, keyed by store key."""
        found: dict[str, Extension] = {}
        for name in type(self).model_fields:
            value = getattr(self, name)
            if isinstance(value, Extension):
                found[name] = value
        return found

    def has_capability(self, tag: str) -> bool:
        return tag in self.capabilities
