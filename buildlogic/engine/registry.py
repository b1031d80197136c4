"""
Registry of configuration modules.

The registry is an explicit value built once at process entry and passed to
the resolver. After bootstrapping it is frozen and shared read-only.
"""

from __future__ import annotations

from typing import Iterator

from ..core.exceptions import DuplicateIdentifierError, RegistryFrozenError, UnknownIdentifierError
from ..core.logging import get_logger
from .module import ConfigurationModule

logger = get_logger(__name__)


class Registry:
    """Identifier to configuration module lookup."""

    def __init__(self) -> None:
        self._modules: dict[str, ConfigurationModule] = {}
        self._frozen = False

    def register(self, identifier: str, module: ConfigurationModule) -> ConfigurationModule:
        """Register a module under an identifier.

        Args:
            identifier: Unique, case-sensitive module identifier.
            module: The module to register.

        Returns:
            The registered module.

        Raises:
            DuplicateIdentifierError: If the identifier is already taken.
            RegistryFrozenError: If the registry has been frozen.
        """
        if self._frozen:
            raise RegistryFrozenError(
                message="registry is frozen; register modules during bootstrap",
                identifier=identifier,
            )
        if identifier in self._modules:
            raise DuplicateIdentifierError(
                message=f"already bound to {type(self._modules[identifier]).__name__}",
                identifier=identifier,
            )
        self._modules[identifier] = module
        logger.debug("module_registered", identifier=identifier, prerequisites=list(module.prerequisites))
        return module

    def add(self, module: ConfigurationModule) -> ConfigurationModule:
        """Register a module under its own identifier."""
        return self.register(module.identifier, module)

    def lookup(self, identifier: str) -> ConfigurationModule:
        """Get a module by identifier.

        Raises:
            UnknownIdentifierError: If nothing is registered under the identifier.
        """
        try:
            return self._modules[identifier]
        except KeyError:
            raise UnknownIdentifierError(
                message="no such module in the registry",
                identifier=identifier,
            ) from None

    def get(self, identifier: str) -> ConfigurationModule | None:
        """Get a module by identifier, or None when absent."""
        return self._modules.get(identifier)

    def freeze(self) -> None:
        """Make the registry read-only."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def identifiers(self) -> list[str]:
        """All registered identifiers in registration order."""
        return list(self._modules)

    def prerequisites_of(self, identifier: str) -> tuple[str, ...]:
        return self.lookup(identifier).prerequisites

    def graph(self) -> dict[str, list[str]]:
        """The prerequisite graph, without executing any module."""
        return {identifier: list(module.prerequisites) for identifier, module in self._modules.items()}

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._modules

    def __len__(self) -> int:
        return len(self._modules)

    def __iter__(self) -> Iterator[ConfigurationModule]:
        return iter(self._modules.values())

    def __repr__(self) -> str:
        return f"Registry(modules={self.identifiers()}, frozen={self._frozen})"
