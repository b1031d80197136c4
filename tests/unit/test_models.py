"""Unit tests for request, extension and output models."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from buildlogic.core.config import Config, ProjectDefaults
from buildlogic.core.exceptions import ConflictError, CyclicDependencyError, MissingPrerequisiteError
from buildlogic.core.types import ServiceResult
from buildlogic.models import (
    CompileOptions,
    DependencyDeclaration,
    DependencyScope,
    FinalConfiguration,
    PluginOptions,
    ResolutionRequest,
    TargetModule,
    TestOptions,
)


class TestTargetModule:
    """Tests for TargetModule."""

    def test_path_must_be_absolute(self):
        """Test that project paths start with a colon."""
        with pytest.raises(PydanticValidationError):
            TargetModule(path="core:ui")

    def test_derived_names(self):
        """Test name, directory and resource prefix derivation."""
        target = TargetModule(path=":core:designsystem")

        assert target.name == "designsystem"
        assert target.directory == "core/designsystem"
        assert target.resource_prefix == "core_designsystem_"

    def test_resource_prefix_skips_repeated_segments(self):
        """Test that repeated path segments appear once in the prefix."""
        assert TargetModule(path=":feature:feature").resource_prefix == "feature_"

    def test_explicit_project_dir(self):
        """Test that an explicit project directory wins over the path."""
        assert TargetModule(path=":app", project_dir="apps/main").directory == "apps/main"

    def test_flag(self):
        """Test boolean project properties."""
        target = TargetModule(path=":app", properties={"warningsAsErrors": "True", "other": "yes"})

        assert target.flag("warningsAsErrors")
        assert not target.flag("other")
        assert not target.flag("missing")

    def test_with_defaults(self):
        """Test that target properties win over defaults."""
        target = TargetModule(path=":app", properties={"warningsAsErrors": "true"})
        merged = target.with_defaults({"warningsAsErrors": "false", "enableComposeCompilerReports": "true"})

        assert merged.properties == {"warningsAsErrors": "true", "enableComposeCompilerReports": "true"}
        assert target.properties == {"warningsAsErrors": "true"}


class TestResolutionRequest:
    """Tests for ResolutionRequest."""

    def test_blank_identifier(self):
        """Test that blank identifiers are rejected."""
        with pytest.raises(PydanticValidationError):
            ResolutionRequest(target=TargetModule(path=":app"), identifiers=["application", " "])

    def test_from_json(self):
        """Test building a request from JSON, as the batch command does."""
        request = ResolutionRequest.model_validate_json(
            '{"target": {"path": ":app"}, "identifiers": ["application"],'
            ' "overrides": {"compile_options": {"target_sdk": 34}}}'
        )
        assert request.identifiers == ["application"]
        assert request.overrides["compile_options"]["target_sdk"] == 34


class TestDependencyDeclaration:
    """Tests for dependency declarations."""

    def test_library_notation(self):
        """Test catalog aliases rendered as type-safe accessors."""
        dep = DependencyDeclaration.library("androidx-lifecycle-runtimeCompose")
        assert dep.declaration == "implementation(libs.androidx.lifecycle.runtimeCompose)"

    def test_platform(self):
        """Test BOM declarations."""
        dep = DependencyDeclaration.library("androidx-compose-bom", platform=True)
        assert dep.declaration == "implementation(platform(libs.androidx.compose.bom))"

    def test_project_and_kotlin(self):
        """Test project and Kotlin module notation."""
        assert DependencyDeclaration.project(":core:ui").declaration == 'implementation(project(":core:ui"))'
        assert (
            DependencyDeclaration.kotlin("test", DependencyScope.TEST_IMPLEMENTATION).declaration
            == 'testImplementation(kotlin("test"))'
        )


class TestExtensions:
    """Tests for extension model behaviour outside a store."""

    def test_extend_unique(self):
        """Test that list extension skips values already present."""
        plugins = PluginOptions()
        plugins.apply("com.android.library", "jacoco")
        plugins.apply("jacoco")
        assert plugins.ids == ["com.android.library", "jacoco"]

    def test_unknown_field_rejected(self):
        """Test that concerns forbid unknown fields."""
        with pytest.raises(PydanticValidationError):
            CompileOptions(compileSdk=36)
        with pytest.raises(PydanticValidationError):
            TestOptions(instrumented_framework="junit4")

    def test_normalized_sorts_set_fields(self):
        """Test the canonical order of set-like lists."""
        options = CompileOptions(free_compiler_args=["-Xb", "-Xa"])
        assert options.normalized().free_compiler_args == ["-Xa", "-Xb"]
        assert options.free_compiler_args == ["-Xb", "-Xa"]


class TestFinalConfiguration:
    """Tests for FinalConfiguration."""

    def test_concerns(self):
        """Test enumerating configured concerns."""
        final = FinalConfiguration(target=":app", compile_options=CompileOptions(compile_sdk=36))

        assert list(final.concerns()) == ["compile_options"]
        assert final.concern("compile_options").compile_sdk == 36
        assert final.concern("test_options") is None
        assert final.concern("target") is None

    def test_json_round_trip(self):
        """Test that the output can be read back by the build executor."""
        final = FinalConfiguration(target=":app", capabilities=["application"], plugins=PluginOptions(ids=["jacoco"]))
        restored = FinalConfiguration.model_validate_json(final.model_dump_json())
        assert restored.plugins.ids == ["jacoco"]


class TestSupportTypes:
    """Tests for errors, results and configuration."""

    def test_error_messages_carry_details(self):
        """Test that errors render the failing identifier, tag and cycle."""
        missing = MissingPrerequisiteError(
            message="prerequisite has not been applied",
            identifier="feature",
            target=":feature:home",
            missing_tag="library",
        )
        conflict = ConflictError(message="shape", identifier="library", target=":app", conflicting_with="application")
        cycle = CyclicDependencyError(message="cycle", cycle=["a", "b", "a"])

        assert "'feature' requires 'library'" in str(missing)
        assert "conflicts with 'application'" in str(conflict)
        assert "a -> b -> a" in str(cycle)

    def test_service_result(self):
        """Test result wrappers."""
        ok = ServiceResult.ok("done", target=":app")
        failed = ServiceResult.fail(ConflictError(message="x", identifier="library"), target=":app")

        assert ok.success and ok.metadata == {"target": ":app"}
        assert not failed.success
        assert isinstance(failed.exception, ConflictError)
        assert ServiceResult.fail("plain").exception is None

    def test_project_defaults_as_properties(self):
        """Test the Gradle property names of project defaults."""
        properties = ProjectDefaults(compose_compiler_reports=True).as_properties()

        assert properties["enableComposeCompilerReports"] == "true"
        assert properties["warningsAsErrors"] == "false"
        assert properties["featureProjectDependencies"] == ":core:ui"

    def test_config_from_env(self, monkeypatch):
        """Test reading configuration from environment variables."""
        monkeypatch.setenv("BUILDLOGIC_LOG_LEVEL", "debug")
        monkeypatch.setenv("BUILDLOGIC_STRICT_OVERWRITES", "false")
        monkeypatch.setenv("BUILDLOGIC_MAX_WORKERS", "8")
        monkeypatch.setenv("BUILDLOGIC_COMPOSE_METRICS", "1")
        monkeypatch.delenv("BUILDLOGIC_VERSION_TABLE", raising=False)

        config = Config.from_env()
        assert config.log_level == "DEBUG"
        assert not config.engine.strict_overwrites
        assert config.engine.max_workers == 8
        assert config.engine.version_table_path is None
        assert config.project.compose_compiler_metrics
