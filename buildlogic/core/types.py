"""
Core type definitions for buildlogic.

Provides the resolution state machine and the result wrapper used when many
targets are resolved together.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar


class ResolutionState(str, Enum):
    """State of a single resolution run."""

    PENDING = "pending"
    EXPANDING = "expanding"
    APPLYING = "applying"
    FINALIZED = "finalized"
    FAILED = "failed"


class StoreState(str, Enum):
    """Lifecycle of an extension store."""

    OPEN = "open"
    RESOLVING = "resolving"
    RESOLVED = "resolved"
    FINALIZED = "finalized"


T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """Result wrapper for batch operations.

    Provides a consistent return type that includes success/failure status,
    the result data, and the error that stopped it.
    """

    success: bool
    data: T | None = None
    error: str | None = None
    exception: Exception | None = None
    warnings: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    duration_ms: float = 0.0

    @classmethod
    def ok(cls, data: T, **metadata: Any) -> ServiceResult[T]:
        """Create a successful result."""
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(cls, error: Exception | str, **metadata: Any) -> ServiceResult[T]:
        """Create a failed result."""
        exc = error if isinstance(error, Exception) else None
        return cls(success=False, error=str(error), exception=exc, metadata=metadata)
