"""
Custom exception hierarchy for buildlogic.

All exceptions inherit from BuildLogicError to enable consistent error handling
across registry bootstrap and resolution. Each exception type carries the failing
identifier, tag, key or field so callers can fix their declarations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class BuildLogicError(Exception):
    """Base exception for all buildlogic errors."""

    message: str
    context: dict[str, Any] = field(default_factory=dict)
    cause: Exception | None = None

    def __str__(self) -> str:
        ctx = f" | context: {self.context}" if self.context else ""
        cause = f" | caused by: {self.cause}" if self.cause else ""
        return f"{self.message}{ctx}{cause}"


@dataclass
class ValidationError(BuildLogicError):
    """Raised when a request or an override fails validation."""

    field_name: str | None = None
    expected_type: str | None = None
    actual_value: Any = None

    def __str__(self) -> str:
        base = super().__str__()
        if self.field_name:
            return f"Validation failed for '{self.field_name}': {base}"
        return f"Validation failed: {base}"


@dataclass
class UnknownIdentifierError(BuildLogicError):
    """Raised when a requested or prerequisite identifier is not registered."""

    identifier: str = ""
    required_by: str | None = None

    def __str__(self) -> str:
        via = f" (prerequisite of '{self.required_by}')" if self.required_by else ""
        return f"Unknown module '{self.identifier}'{via}: {super().__str__()}"


@dataclass
class DuplicateIdentifierError(BuildLogicError):
    """Raised when an identifier is registered twice."""

    identifier: str = ""

    def __str__(self) -> str:
        return f"Module '{self.identifier}' is already registered: {super().__str__()}"


@dataclass
class RegistryFrozenError(BuildLogicError):
    """Raised when registering into a registry that finished bootstrapping."""

    identifier: str = ""


@dataclass
class CyclicDependencyError(BuildLogicError):
    """Raised when prerequisite expansion revisits an identifier in progress."""

    cycle: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        path = " -> ".join(self.cycle)
        return f"Prerequisite cycle [{path}]: {super().__str__()}"


@dataclass
class ResolutionError(BuildLogicError):
    """Raised when a module cannot be applied to the current target."""

    identifier: str = ""
    target: str = ""


@dataclass
class ConflictError(ResolutionError):
    """Raised when a module contradicts what is already applied.

    Covers a second shape tag, a module attached to a shape it does not
    support, and two modules writing different values to the same field.
    """

    conflicting_with: str = ""

    def __str__(self) -> str:
        return (
            f"Conflict applying '{self.identifier}' to '{self.target}' "
            f"(conflicts with '{self.conflicting_with}'): {super().__str__()}"
        )


@dataclass
class MissingPrerequisiteError(ResolutionError):
    """Raised when a module's required capability is absent."""

    missing_tag: str = ""

    def __str__(self) -> str:
        return (
            f"Module '{self.identifier}' requires '{self.missing_tag}' "
            f"on '{self.target}': {super().__str__()}"
        )


@dataclass
class MissingVersionKeyError(BuildLogicError):
    """Raised when a module reads a key absent from the version table."""

    key: str = ""
    identifier: str | None = None

    def __str__(self) -> str:
        who = f" (read by '{self.identifier}')" if self.identifier else ""
        return f"Version key '{self.key}' not found{who}: {super().__str__()}"


@dataclass
class VersionTableError(BuildLogicError):
    """Raised when a version table source cannot be loaded."""

    path: str = ""


@dataclass
class StoreLifecycleError(BuildLogicError):
    """Raised when the extension store is used out of order.

    This always indicates a bug in a configuration module or in the resolver,
    never a problem with the user's request.
    """

    state: str = ""


@dataclass
class StoreAlreadyFinalizedError(StoreLifecycleError):
    """Raised when the store is accessed after its snapshot was taken."""


@dataclass
class StoreNotYetResolvedError(StoreLifecycleError):
    """Raised when a snapshot is requested before resolution completed."""
