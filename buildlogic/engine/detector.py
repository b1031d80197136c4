"""
Capability detection.

Pure checks over a capability set snapshot: which tags are present, which
shape the target has, and whether a module may be applied next.
"""

from __future__ import annotations

from ..core.exceptions import ConflictError, MissingPrerequisiteError
from ..models.capabilities import CapabilitySet, Shape
from .module import ConfigurationModule


class CapabilityDetector:
    """Stateless capability checks used by the resolver."""

    @staticmethod
    def has(capabilities: CapabilitySet, tag: str) -> bool:
        """Check whether a tag is present."""
        return tag in capabilities

    @staticmethod
    def shape_of(capabilities: CapabilitySet, declared: Shape | None = None) -> Shape | None:
        """The active shape, or the declared one when no base module ran yet."""
        return capabilities.shape or declared

    def require_before_apply(
        self,
        capabilities: CapabilitySet,
        module: ConfigurationModule,
        target: str = "",
        declared_shape: Shape | None = None,
    ) -> bool:
        """Check that a module may be applied to the current capability set.

        Args:
            capabilities: Tags accumulated so far.
            module: Module about to be applied.
            target: Project path, reported on failure.
            declared_shape: Shape of the first base module in the plan.

        Returns:
            True when the module may be applied.

        Raises:
            ConflictError: If the module contradicts the shape already present.
            MissingPrerequisiteError: If a required tag or shape is absent.
        """
        current = self.shape_of(capabilities, declared_shape)

        if module.shape is not None and current is not None and module.shape is not current:
            raise ConflictError(
                message=f"'{module.identifier}' shapes the target as '{module.shape.value}'",
                identifier=module.identifier,
                target=target,
                conflicting_with=current.value,
            )

        for prerequisite in module.prerequisites:
            required_shape = Shape.from_tag(prerequisite)
            if required_shape is not None and current is not None and required_shape is not current:
                raise ConflictError(
                    message=f"'{module.identifier}' is only valid for '{required_shape.value}' targets",
                    identifier=module.identifier,
                    target=target,
                    conflicting_with=current.value,
                )
            if not self.has(capabilities, prerequisite):
                raise MissingPrerequisiteError(
                    message="prerequisite has not been applied",
                    identifier=module.identifier,
                    target=target,
                    missing_tag=prerequisite,
                )

        allowed = module.allowed_shapes
        if allowed is not None and current is not None and current not in allowed:
            supported = ", ".join(sorted(shape.value for shape in allowed))
            raise ConflictError(
                message=f"'{module.identifier}' supports {supported} targets only",
                identifier=module.identifier,
                target=target,
                conflicting_with=current.value,
            )

        if module.requires_shape and current is None:
            wanted = "|".join(sorted(shape.value for shape in allowed)) if allowed else "shape"
            raise MissingPrerequisiteError(
                message="apply a base module (application, library, ...) first",
                identifier=module.identifier,
                target=target,
                missing_tag=wanted,
            )

        for tag in sorted(module.required_tags):
            if not self.has(capabilities, tag):
                raise MissingPrerequisiteError(
                    message="required capability is absent",
                    identifier=module.identifier,
                    target=target,
                    missing_tag=tag,
                )

        return True
