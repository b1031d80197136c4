"""
Target and request models.

A resolution request names the target project module, the ordered list of
convention identifiers it wants applied, and any explicit override fields.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, Field, field_validator


class TargetModule(BaseModel):
    """A project module that conventions are attached to."""

    path: str = Field(description="Gradle project path (e.g., :core:ui)")
    project_dir: str | None = Field(
        default=None, description="Directory relative to the root project"
    )
    properties: dict[str, str] = Field(
        default_factory=dict, description="Project properties (e.g., warningsAsErrors)"
    )

    @field_validator("path")
    @classmethod
    def _check_path(cls, value: str) -> str:
        if not value.startswith(":"):
            raise ValueError(f"project path must start with ':' (got '{value}')")
        return value

    @property
    def name(self) -> str:
        """Last segment of the project path."""
        return self.path.rsplit(":", 1)[-1] or "root"

    @property
    def directory(self) -> str:
        """Project directory, derived from the path when not given."""
        if self.project_dir:
            return self.project_dir
        return self.path.strip(":").replace(":", "/") or "."

    @property
    def resource_prefix(self) -> str:
        """Android resource prefix derived from the module path.

        Resources inside ":core:module1" must be prefixed with "core_module1_".
        """
        parts: list[str] = []
        for part in re.split(r"\W", self.path)[1:]:
            if part not in parts:
                parts.append(part)
        return "_".join(parts).lower() + "_"

    def get_property(self, name: str, default: str | None = None) -> str | None:
        """Get a project property by name."""
        return self.properties.get(name, default)

    def flag(self, name: str) -> bool:
        """Read a boolean project property; anything but 'true' is false."""
        return (self.properties.get(name) or "").strip().lower() == "true"

    def with_defaults(self, defaults: dict[str, str]) -> TargetModule:
        """Return a copy whose properties fall back to the given defaults."""
        merged = {**defaults, **self.properties}
        return self.model_copy(update={"properties": merged})


class ResolutionRequest(BaseModel):
    """Identifiers a target declares, plus pre-seeded overrides."""

    target: TargetModule
    identifiers: list[str] = Field(default_factory=list, description="Requested module ids, in order")
    overrides: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Concern key -> field values applied before any module runs",
    )

    @field_validator("identifiers")
    @classmethod
    def _check_identifiers(cls, value: list[str]) -> list[str]:
        for identifier in value:
            if not identifier or identifier.strip() != identifier:
                raise ValueError(f"invalid module identifier '{identifier}'")
        return value
