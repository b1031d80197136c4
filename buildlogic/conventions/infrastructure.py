"""
Infrastructure conventions: dependency injection, Room, product flavors and
feature modules.
"""

from __future__ import annotations

from ..engine.module import ConfigurationModule, ModuleContext, ShapeDispatchModule
from ..models.capabilities import Shape
from ..models.extensions import (
    DependencyDeclaration,
    DependencyScope,
    FlavorOptions,
    KspOptions,
    ProductFlavor,
    RoomOptions,
    TestOptions,
)

DIMENSION_ENVIRONMENT = "environment"
DIMENSION_VERSION = "version"

PRODUCT_FLAVORS = (
    ProductFlavor(name="dev", dimension=DIMENSION_ENVIRONMENT),
    ProductFlavor(name="staging", dimension=DIMENSION_ENVIRONMENT),
    ProductFlavor(name="production", dimension=DIMENSION_ENVIRONMENT),
    ProductFlavor(name="free", dimension=DIMENSION_VERSION),
    ProductFlavor(name="paid", dimension=DIMENSION_VERSION),
)


class DependencyInjectionConvention(ConfigurationModule):
    """Hilt through KSP.

    Any target gets the compiler and hilt-core; Android targets additionally
    get the Hilt Android plugin and runtime.
    """

    IDENTIFIER = "dependency-injection"

    def configure(self, context: ModuleContext) -> None:
        context.apply_plugins("com.google.devtools.ksp")
        context.add_dependencies(
            DependencyDeclaration.library("hilt-compiler", DependencyScope.KSP),
            DependencyDeclaration.library("hilt-core"),
        )
        if context.shape is not None and context.shape.is_android:
            context.apply_plugins("dagger.hilt.android.plugin")
            context.add_dependencies(DependencyDeclaration.library("hilt-android"))


class RoomConvention(ConfigurationModule):
    """Room database with generated Kotlin and exported schemas."""

    IDENTIFIER = "room"
    ALLOWED_SHAPES = frozenset({Shape.APPLICATION, Shape.LIBRARY, Shape.TEST_HARNESS})
    REQUIRES_SHAPE = True

    def configure(self, context: ModuleContext) -> None:
        context.apply_plugins("androidx.room", "com.google.devtools.ksp")
        context.extension(KspOptions).put("arguments", "room.generateKotlin", "true")
        # One schema file per database version; required for auto migrations
        context.extension(RoomOptions).schema_directory = f"{context.target.directory}/schemas"
        context.add_dependencies(
            DependencyDeclaration.library("room-runtime"),
            DependencyDeclaration.library("room-ktx"),
            DependencyDeclaration.library("room-compiler", DependencyScope.KSP),
        )


class FlavorsConvention(ShapeDispatchModule):
    """Flavor dimensions environment and version, with their product flavors."""

    IDENTIFIER = "flavors"
    ALLOWED_SHAPES = frozenset({Shape.APPLICATION, Shape.LIBRARY})
    REQUIRES_SHAPE = True

    def _configure_flavors(self, context: ModuleContext) -> None:
        flavors = context.extension(FlavorOptions)
        flavors.extend_unique("dimensions", [DIMENSION_ENVIRONMENT, DIMENSION_VERSION])
        flavors.extend_unique("product_flavors", [f.model_copy() for f in PRODUCT_FLAVORS])

    def on_application(self, context: ModuleContext) -> None:
        self._configure_flavors(context)

    def on_library(self, context: ModuleContext) -> None:
        self._configure_flavors(context)

    # Rejected by the detector before dispatch
    def on_test_harness(self, context: ModuleContext) -> None:
        pass

    def on_jvm_only(self, context: ModuleContext) -> None:
        pass


class FeatureConvention(ConfigurationModule):
    """Feature modules: an Android library with dependency injection.

    Project dependencies come from the ``featureProjectDependencies``
    property (comma separated project paths).
    """

    IDENTIFIER = "feature"
    PREREQUISITES = ("library", "dependency-injection")

    def configure(self, context: ModuleContext) -> None:
        context.extension(TestOptions).animations_disabled = True

        projects = context.target.get_property("featureProjectDependencies") or ""
        context.add_dependencies(
            *(
                DependencyDeclaration.project(path.strip())
                for path in projects.split(",")
                if path.strip() and path.strip() != context.target.path
            )
        )
        context.add_dependencies(
            DependencyDeclaration.library("androidx-hilt-navigation-compose"),
            DependencyDeclaration.library("androidx-lifecycle-runtimeCompose"),
            DependencyDeclaration.library("androidx-lifecycle-viewModelCompose"),
            DependencyDeclaration.library("androidx-tracing-ktx"),
            DependencyDeclaration.library(
                "androidx-lifecycle-runtimeTesting", DependencyScope.ANDROID_TEST_IMPLEMENTATION
            ),
        )
