"""
Coverage conventions: Kover and JaCoCo.

Both write ``coverage_options.tool``, so a target uses one or the other; in
strict mode requesting both is a conflict.
"""

from __future__ import annotations

from ..engine.module import ConfigurationModule, ModuleContext, ShapeDispatchModule
from ..models.extensions import CoverageOptions

# Generated code excluded from JaCoCo reports
JACOCO_EXCLUSIONS = (
    # Android
    "**/R.class",
    "**/R$*.class",
    "**/BuildConfig.*",
    "**/Manifest*.*",
    "**/*Test*.*",
    "android/**/*.*",
    # Dagger/Hilt
    "**/*_Factory.*",
    "**/*_MembersInjector.*",
    "**/*_HiltModules*.*",
    "**/Hilt_*.*",
    "**/*_Impl.*",
    "**/*_Provide*Factory.*",
    "**/di/**",
    "dagger/hilt/internal/aggregatedroot/codegen/**",
    "hilt_aggregated_deps/**",
    # Compose
    "**/*ComposableSingletons*.*",
    "**/*$Result.*",
    "**/*$Companion.*",
)
JACOCO_REPORT_FORMATS = ("html", "xml")
UNIFIED_REPORT_TASK = "jacocoTestReport"


def report_task(variant: str) -> str:
    """JaCoCo report task for a build variant (debug -> jacocoDebugReport)."""
    return f"jacoco{variant[:1].upper()}{variant[1:]}Report"


class KoverConvention(ConfigurationModule):
    """Kover coverage with the plugin's defaults."""

    IDENTIFIER = "coverage"

    def configure(self, context: ModuleContext) -> None:
        context.apply_plugins("org.jetbrains.kotlinx.kover")
        context.extension(CoverageOptions).tool = "kover"


class JacocoConvention(ShapeDispatchModule):
    """JaCoCo coverage for Android targets.

    Applications report on debug; libraries on debug and release. A unified
    ``jacocoTestReport`` task depends on the per-variant reports.
    """

    IDENTIFIER = "jacoco"

    def _configure_tool(self, context: ModuleContext) -> CoverageOptions:
        context.apply_plugins("jacoco")
        coverage = context.extension(CoverageOptions)
        coverage.tool = "jacoco"
        coverage.tool_version = context.version("jacoco")
        return coverage

    def _configure_reports(self, context: ModuleContext, variants: list[str]) -> None:
        coverage = self._configure_tool(context)
        coverage.extend_unique("instrumented_build_types", ["debug"])
        coverage.extend_unique("report_variants", variants)
        coverage.extend_unique("report_tasks", [report_task(v) for v in variants] + [UNIFIED_REPORT_TASK])
        coverage.extend_unique("report_formats", JACOCO_REPORT_FORMATS)
        coverage.extend_unique("exclusions", JACOCO_EXCLUSIONS)

    def on_application(self, context: ModuleContext) -> None:
        self._configure_reports(context, ["debug"])

    def on_library(self, context: ModuleContext) -> None:
        self._configure_reports(context, ["debug", "release"])

    def on_test_harness(self, context: ModuleContext) -> None:
        self._configure_tool(context)

    def on_jvm_only(self, context: ModuleContext) -> None:
        self._configure_tool(context)

    def on_unshaped(self, context: ModuleContext) -> None:
        self._configure_tool(context)
