"""
Testing conventions: unit tests, instrumented tests and Compose UI tests.
"""

from __future__ import annotations

from ..engine.module import ModuleContext, ShapeDispatchModule
from ..models.capabilities import Shape
from ..models.extensions import AndroidOptions, DependencyDeclaration, DependencyScope, TestOptions
from .android import TEST_INSTRUMENTATION_RUNNER

UNIT_TEST_FRAMEWORK = "jupiter"
ORCHESTRATOR_EXECUTION = "ANDROIDX_TEST_ORCHESTRATOR"

_ANDROID_SHAPES = frozenset({Shape.APPLICATION, Shape.LIBRARY})


class UnitTestConvention(ShapeDispatchModule):
    """JUnit platform unit tests.

    Android targets also run against Android resources with default return
    values and Robolectric. Test-harness targets have no unit tests.
    """

    IDENTIFIER = "unit-test"
    ALLOWED_SHAPES = frozenset({Shape.APPLICATION, Shape.LIBRARY, Shape.JVM_ONLY})

    def _configure_android(self, context: ModuleContext) -> None:
        tests = context.extension(TestOptions)
        tests.use_junit_platform = True
        tests.include_android_resources = True
        tests.return_default_values = True
        context.add_dependencies(
            DependencyDeclaration.library("robolectric", DependencyScope.TEST_IMPLEMENTATION)
        )

    def on_application(self, context: ModuleContext) -> None:
        self._configure_android(context)

    def on_library(self, context: ModuleContext) -> None:
        self._configure_android(context)

    def on_test_harness(self, context: ModuleContext) -> None:
        pass

    def on_jvm_only(self, context: ModuleContext) -> None:
        context.extension(TestOptions).use_junit_platform = True

    def configure_common(self, context: ModuleContext) -> None:
        context.extension(TestOptions).framework = UNIT_TEST_FRAMEWORK
        test = DependencyScope.TEST_IMPLEMENTATION
        context.add_dependencies(
            DependencyDeclaration.library("junit6", test),
            DependencyDeclaration.library("junit-platform-launcher", DependencyScope.TEST_RUNTIME_ONLY),
            DependencyDeclaration.kotlin("test", test),
            DependencyDeclaration.library("kotlinx-coroutines-test", test),
            DependencyDeclaration.library("truth", test),
            DependencyDeclaration.library("turbine", test),
        )


class InstrumentedTestConvention(ShapeDispatchModule):
    """On-device tests run through the AndroidX test orchestrator.

    Hilt testing support is added when dependency injection is part of the
    same resolution, wherever it is declared.
    """

    IDENTIFIER = "instrumented-test"
    ALLOWED_SHAPES = _ANDROID_SHAPES
    REQUIRES_SHAPE = True

    def _configure_runner(self, context: ModuleContext) -> None:
        tests = context.extension(TestOptions)
        tests.instrumentation_runner = TEST_INSTRUMENTATION_RUNNER
        tests.animations_disabled = True
        tests.execution = ORCHESTRATOR_EXECUTION

    def on_application(self, context: ModuleContext) -> None:
        self._configure_runner(context)

    def on_library(self, context: ModuleContext) -> None:
        self._configure_runner(context)

    def on_test_harness(self, context: ModuleContext) -> None:
        pass

    def on_jvm_only(self, context: ModuleContext) -> None:
        pass

    def configure_common(self, context: ModuleContext) -> None:
        android_test = DependencyScope.ANDROID_TEST_IMPLEMENTATION
        context.add_dependencies(
            *(
                DependencyDeclaration.library(alias, android_test)
                for alias in (
                    "androidx-test-core",
                    "androidx-test-runner",
                    "androidx-test-rules",
                    "androidx-test-ext",
                    "androidx-junit",
                    "androidx-test-espresso-core",
                    "kotlinx-coroutines-test",
                    "truth",
                    "androidx-test-uiautomator",
                )
            ),
            DependencyDeclaration.kotlin("test", android_test),
        )
        if context.expects("dependency-injection"):
            context.add_dependencies(DependencyDeclaration.library("hilt-android-testing", android_test))


class ComposeTestConvention(ShapeDispatchModule):
    """Compose UI tests."""

    IDENTIFIER = "compose-test"
    ALLOWED_SHAPES = _ANDROID_SHAPES
    REQUIRES_SHAPE = True

    def _enable_compose(self, context: ModuleContext) -> None:
        context.extension(AndroidOptions).compose = True
        context.extension(TestOptions).animations_disabled = True

    def on_application(self, context: ModuleContext) -> None:
        self._enable_compose(context)

    def on_library(self, context: ModuleContext) -> None:
        self._enable_compose(context)

    def on_test_harness(self, context: ModuleContext) -> None:
        pass

    def on_jvm_only(self, context: ModuleContext) -> None:
        pass

    def configure_common(self, context: ModuleContext) -> None:
        context.add_dependencies(
            DependencyDeclaration.library("androidx-compose-ui-test", DependencyScope.ANDROID_TEST_IMPLEMENTATION),
            DependencyDeclaration.library("androidx-compose-ui-testManifest", DependencyScope.DEBUG_IMPLEMENTATION),
            DependencyDeclaration.library("androidx-compose-ui-tooling", DependencyScope.DEBUG_IMPLEMENTATION),
            DependencyDeclaration.library("androidx-navigation-testing", DependencyScope.ANDROID_TEST_IMPLEMENTATION),
        )
