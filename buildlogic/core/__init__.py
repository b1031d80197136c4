"""Core infrastructure components for buildlogic."""

from .config import Config, EngineConfig, ProjectDefaults, get_config
from .exceptions import (
    BuildLogicError,
    ConflictError,
    CyclicDependencyError,
    DuplicateIdentifierError,
    MissingPrerequisiteError,
    MissingVersionKeyError,
    RegistryFrozenError,
    ResolutionError,
    StoreAlreadyFinalizedError,
    StoreLifecycleError,
    StoreNotYetResolvedError,
    UnknownIdentifierError,
    ValidationError,
    VersionTableError,
)
from .logging import bind_context, get_logger, setup_logging, unbind_context
from .types import ResolutionState, ServiceResult, StoreState

__all__ = [
    "Config",
    "EngineConfig",
    "ProjectDefaults",
    "get_config",
    "BuildLogicError",
    "ConflictError",
    "CyclicDependencyError",
    "DuplicateIdentifierError",
    "MissingPrerequisiteError",
    "MissingVersionKeyError",
    "RegistryFrozenError",
    "ResolutionError",
    "StoreAlreadyFinalizedError",
    "StoreLifecycleError",
    "StoreNotYetResolvedError",
    "UnknownIdentifierError",
    "ValidationError",
    "VersionTableError",
    "bind_context",
    "get_logger",
    "setup_logging",
    "unbind_context",
    "ResolutionState",
    "ServiceResult",
    "StoreState",
]
