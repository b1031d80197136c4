"""
Base conventions.

Each base module establishes the target's shape and the Kotlin toolchain
settings shared by every target of that shape. SDK levels and Java/JVM
targets come from the version table, never from literals here.
"""

from __future__ import annotations

from typing import ClassVar

from ..engine.module import ConfigurationModule, ModuleContext
from ..models.capabilities import Shape
from ..models.extensions import (
    AndroidOptions,
    CompileOptions,
    DependencyDeclaration,
    DependencyScope,
    TestOptions,
)

TEST_INSTRUMENTATION_RUNNER = "androidx.test.runner.AndroidJUnitRunner"
COROUTINES_OPT_IN = "-opt-in=kotlinx.coroutines.ExperimentalCoroutinesApi"


def _configure_kotlin(context: ModuleContext, compile_options: CompileOptions) -> None:
    compile_options.jvm_target = context.version("jvm-target")
    compile_options.all_warnings_as_errors = context.target.flag("warningsAsErrors")
    compile_options.extend_unique("free_compiler_args", [COROUTINES_OPT_IN])


def configure_kotlin_android(context: ModuleContext) -> CompileOptions:
    """Configure Kotlin with Android options.

    Sets the compile and minimum SDK, Java compatibility with core library
    desugaring, and the Kotlin compiler options, then adds the desugaring
    library and core-ktx.

    Returns:
        CompileOptions: The target's compile options.
    """
    compile_options = context.extension(CompileOptions)
    java_version = context.version("java-version")
    compile_options.compile_sdk = context.version_int("compile-sdk")
    compile_options.min_sdk = context.version_int("min-sdk")
    compile_options.source_compatibility = java_version
    compile_options.target_compatibility = java_version
    compile_options.core_library_desugaring = True
    _configure_kotlin(context, compile_options)

    context.add_dependencies(
        DependencyDeclaration.library("android-desugarJdkLibs", DependencyScope.CORE_LIBRARY_DESUGARING),
        DependencyDeclaration.library("androidx-core-ktx"),
    )
    return compile_options


def configure_kotlin_jvm(context: ModuleContext) -> CompileOptions:
    """Configure Kotlin for JVM (non-Android) targets."""
    compile_options = context.extension(CompileOptions)
    java_version = context.version("java-version")
    compile_options.source_compatibility = java_version
    compile_options.target_compatibility = java_version
    _configure_kotlin(context, compile_options)
    return compile_options


class ApplicationConvention(ConfigurationModule):
    """Android application targets.

    Example request:
        ResolutionRequest(target=TargetModule(path=":app"), identifiers=["application"])
    """

    IDENTIFIER: ClassVar[str] = "application"
    SHAPE = Shape.APPLICATION

    def configure(self, context: ModuleContext) -> None:
        context.apply_plugins("com.android.application", "com.dropbox.dependency-guard")
        compile_options = configure_kotlin_android(context)
        compile_options.target_sdk = context.version_int("target-sdk")
        compile_options.min_sdk = context.version_int("min-sdk")

        tests = context.extension(TestOptions)
        tests.animations_disabled = True
        tests.use_junit_platform = True


class LibraryConvention(ConfigurationModule):
    """Android library targets."""

    IDENTIFIER: ClassVar[str] = "library"
    SHAPE = Shape.LIBRARY

    def configure(self, context: ModuleContext) -> None:
        context.apply_plugins("com.android.library", "org.jetbrains.kotlin.android")
        compile_options = configure_kotlin_android(context)
        compile_options.target_sdk = context.version_int("target-sdk")

        tests = context.extension(TestOptions)
        tests.instrumentation_runner = TEST_INSTRUMENTATION_RUNNER
        tests.animations_disabled = True
        tests.use_junit_platform = True

        android = context.extension(AndroidOptions)
        # Resources inside ":core:module1" must be prefixed with "core_module1_"
        android.resource_prefix = context.target.resource_prefix
        android.skip_android_tests_without_sources = True

        context.add_dependencies(
            DependencyDeclaration.kotlin("test", DependencyScope.ANDROID_TEST_IMPLEMENTATION),
            DependencyDeclaration.kotlin("test", DependencyScope.TEST_IMPLEMENTATION),
            DependencyDeclaration.library("androidx-tracing-ktx"),
        )


class TestHarnessConvention(ConfigurationModule):
    """Android test-only targets (com.android.test)."""

    IDENTIFIER: ClassVar[str] = "test-harness"
    SHAPE = Shape.TEST_HARNESS

    def configure(self, context: ModuleContext) -> None:
        context.apply_plugins("com.android.test", "org.jetbrains.kotlin.android")
        compile_options = configure_kotlin_android(context)
        compile_options.target_sdk = context.version_int("target-sdk")


class JvmLibraryConvention(ConfigurationModule):
    """Pure Kotlin/JVM library targets."""

    IDENTIFIER: ClassVar[str] = "jvm-library"
    SHAPE = Shape.JVM_ONLY

    def configure(self, context: ModuleContext) -> None:
        context.apply_plugins("org.jetbrains.kotlin.jvm")
        configure_kotlin_jvm(context)
