"""
Code quality conventions: Android lint and detekt.
"""

from __future__ import annotations

from ..engine.module import ConfigurationModule, ModuleContext, ShapeDispatchModule
from ..models.extensions import DependencyDeclaration, DependencyScope, LintOptions, StaticAnalysisOptions

DETEKT_CONFIG_FILE = "config/detekt/detekt.yml"
DETEKT_REPORT_FORMATS = ("html", "xml", "txt", "sarif")


class LintConvention(ShapeDispatchModule):
    """Consistent lint configuration.

    Application and library targets configure lint on their own Android
    extension; every other target gets the standalone lint plugin.
    """

    IDENTIFIER = "lint"

    def _configure(self, context: ModuleContext, host: str) -> None:
        lint = context.extension(LintOptions)
        lint.host = host  # type: ignore[assignment]
        lint.xml_report = True
        lint.check_dependencies = True

    def _standalone(self, context: ModuleContext) -> None:
        context.apply_plugins("com.android.lint")
        self._configure(context, "standalone")

    def on_application(self, context: ModuleContext) -> None:
        self._configure(context, "application")

    def on_library(self, context: ModuleContext) -> None:
        self._configure(context, "library")

    def on_test_harness(self, context: ModuleContext) -> None:
        self._standalone(context)

    def on_jvm_only(self, context: ModuleContext) -> None:
        self._standalone(context)

    def on_unshaped(self, context: ModuleContext) -> None:
        self._standalone(context)


class DetektConvention(ConfigurationModule):
    """Detekt static analysis with the formatting rule set."""

    IDENTIFIER = "detekt"

    def configure(self, context: ModuleContext) -> None:
        context.apply_plugins("io.gitlab.arturbosch.detekt")
        context.add_dependencies(
            DependencyDeclaration.library("detekt-formatting", DependencyScope.DETEKT_PLUGINS)
        )

        detekt = context.extension(StaticAnalysisOptions)
        detekt.tool = "detekt"
        detekt.build_upon_default_config = True
        detekt.parallel = True
        detekt.config_file = DETEKT_CONFIG_FILE
        detekt.jvm_target = context.version("jvm-target")
        detekt.extend_unique("report_formats", DETEKT_REPORT_FORMATS)
