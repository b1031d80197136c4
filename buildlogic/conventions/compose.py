"""
Jetpack Compose convention.
"""

from __future__ import annotations

from ..engine.module import ConfigurationModule, ModuleContext
from ..models.capabilities import Shape
from ..models.extensions import (
    AndroidOptions,
    ComposeOptions,
    DependencyDeclaration,
    DependencyScope,
    TestOptions,
)

STABILITY_CONFIG_FILE = "compose_compiler_config.conf"


def _build_dir(context: ModuleContext, name: str) -> str:
    """Directory under the root project's build dir, mirrored per target."""
    return f"build/{context.target.directory}/{name}"


class ComposeConvention(ConfigurationModule):
    """Compose compiler, build feature and dependencies.

    Compiler metrics and reports are written only when the target sets
    ``enableComposeCompilerMetrics`` / ``enableComposeCompilerReports``.
    """

    IDENTIFIER = "compose"
    ALLOWED_SHAPES = frozenset({Shape.APPLICATION, Shape.LIBRARY})
    REQUIRES_SHAPE = True

    def configure(self, context: ModuleContext) -> None:
        context.apply_plugins("org.jetbrains.kotlin.plugin.compose")
        context.extension(AndroidOptions).compose = True
        # For Robolectric
        context.extension(TestOptions).include_android_resources = True

        bom = "androidx-compose-bom"
        context.add_dependencies(
            DependencyDeclaration.library(bom, platform=True),
            DependencyDeclaration.library(bom, DependencyScope.ANDROID_TEST_IMPLEMENTATION, platform=True),
            DependencyDeclaration.library("androidx-compose-ui-tooling-preview"),
            DependencyDeclaration.library("androidx-compose-ui-tooling", DependencyScope.DEBUG_IMPLEMENTATION),
        )

        compiler = context.extension(ComposeOptions)
        if context.target.flag("enableComposeCompilerMetrics"):
            compiler.metrics_destination = _build_dir(context, "compose-metrics")
        if context.target.flag("enableComposeCompilerReports"):
            compiler.reports_destination = _build_dir(context, "compose-reports")
        compiler.extend_unique("stability_configuration_files", [STABILITY_CONFIG_FILE])
