"""
Configuration management for buildlogic.

Provides centralized, type-safe configuration with environment variable overrides
and sensible defaults for the composition engine and its CLI.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load .env file if it exists (looks in cwd and parent directories)
load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


class EngineConfig(BaseModel):
    """Composition engine configuration."""

    version_table_path: Path | None = Field(
        default=None,
        description="Version table file (.properties, .env or libs.versions.toml)",
    )
    strict_overwrites: bool = Field(
        default=True,
        description="Fail when two modules write different values to a non last-write-wins field",
    )
    max_workers: int = Field(default=4, ge=1, description="Parallel target resolutions")


class ProjectDefaults(BaseModel):
    """Project properties handed to every target unless the target sets them."""

    warnings_as_errors: bool = Field(default=False, description="Treat Kotlin warnings as errors")
    compose_compiler_metrics: bool = Field(default=False, description="Emit compose compiler metrics")
    compose_compiler_reports: bool = Field(default=False, description="Emit compose compiler reports")
    feature_project_dependencies: list[str] = Field(
        default_factory=lambda: [":core:ui"],
        description="Project modules every feature module depends on",
    )

    def as_properties(self) -> dict[str, str]:
        """Render the defaults as Gradle-style project properties.

        Returns:
            Mapping of property name to its string value.
        """
        return {
            "warningsAsErrors": str(self.warnings_as_errors).lower(),
            "enableComposeCompilerMetrics": str(self.compose_compiler_metrics).lower(),
            "enableComposeCompilerReports": str(self.compose_compiler_reports).lower(),
            "featureProjectDependencies": ",".join(self.feature_project_dependencies),
        }


class Config(BaseModel):
    """Root configuration for buildlogic."""

    project_name: str = Field(default="buildlogic", description="Project identifier")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    engine: EngineConfig = Field(default_factory=EngineConfig)
    project: ProjectDefaults = Field(default_factory=ProjectDefaults)

    model_config = {"extra": "ignore"}

    @classmethod
    def from_env(cls) -> Config:
        """Create configuration from environment variables."""
        table = os.environ.get("BUILDLOGIC_VERSION_TABLE")
        return cls(
            log_level=os.environ.get("BUILDLOGIC_LOG_LEVEL", "INFO").upper(),  # type: ignore
            engine=EngineConfig(
                version_table_path=Path(table) if table else None,
                strict_overwrites=_env_flag("BUILDLOGIC_STRICT_OVERWRITES", "true"),
                max_workers=int(os.environ.get("BUILDLOGIC_MAX_WORKERS", "4")),
            ),
            project=ProjectDefaults(
                warnings_as_errors=_env_flag("BUILDLOGIC_WARNINGS_AS_ERRORS"),
                compose_compiler_metrics=_env_flag("BUILDLOGIC_COMPOSE_METRICS"),
                compose_compiler_reports=_env_flag("BUILDLOGIC_COMPOSE_REPORTS"),
            ),
        )


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Get cached configuration instance."""
    return Config.from_env()
