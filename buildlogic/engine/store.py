"""
Extension store.

A per-run arena of build concerns. Configuration modules get-or-create the
concern they need and mutate the same instance; the resolver finalizes the
store exactly once into a detached FinalConfiguration.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Mapping, TypeVar

from pydantic import ValidationError as PydanticValidationError

from ..core.exceptions import (
    ConflictError,
    StoreAlreadyFinalizedError,
    StoreLifecycleError,
    StoreNotYetResolvedError,
    ValidationError,
)
from ..core.logging import get_logger
from ..core.types import StoreState
from ..models.capabilities import CapabilitySet
from ..models.extensions import EXTENSION_TYPES, Extension
from ..models.final import FinalConfiguration

logger = get_logger(__name__)

E = TypeVar("E", bound=Extension)


@dataclass(frozen=True)
class Overwrite:
    """A module replacing a value another module wrote."""

    concern: str
    field: str
    previous_writer: str
    writer: str | None
    old: Any
    new: Any
    last_write_wins: bool


class WriteJournal:
    """Attributes extension writes to the module being applied."""

    def __init__(self, target: str = "", strict: bool = True) -> None:
        self.target = target
        self.strict = strict
        self.active: str | None = None
        self.overwrites: list[Overwrite] = []
        self.kept_overrides: list[tuple[str, str, str | None]] = []

    def on_pinned_write(self, extension: Extension, field: str, value: Any) -> None:
        self.kept_overrides.append((extension.KEY, field, self.active))
        logger.debug(
            "override_kept",
            concern=extension.KEY,
            field=field,
            module=self.active,
            ignored_value=value,
        )

    def on_overwrite(
        self,
        extension: Extension,
        field: str,
        previous_writer: str,
        old: Any,
        new: Any,
    ) -> None:
        """Record a write that changes another module's value.

        Raises:
            ConflictError: In strict mode, when the field is not declared
                last-write-wins by its concern.
        """
        intentional = field.split("[", 1)[0] in type(extension).LAST_WRITE_WINS
        self.overwrites.append(
            Overwrite(
                concern=extension.KEY,
                field=field,
                previous_writer=previous_writer,
                writer=self.active,
                old=old,
                new=new,
                last_write_wins=intentional,
            )
        )
        if intentional:
            logger.debug(
                "last_write_wins",
                concern=extension.KEY,
                field=field,
                previous_writer=previous_writer,
                writer=self.active,
                old=old,
                new=new,
            )
            return
        if self.strict:
            raise ConflictError(
                message=f"{extension.KEY}.{field} already set to {old!r}, refusing {new!r}",
                identifier=self.active or "",
                target=self.target,
                conflicting_with=previous_writer,
            )
        logger.warning(
            "conflicting_write",
            concern=extension.KEY,
            field=field,
            previous_writer=previous_writer,
            writer=self.active,
            old=old,
            new=new,
        )


class ExtensionStore:
    """Get-or-create access to the build concerns of one resolution run."""

    def __init__(self, target: str = "", strict: bool = True) -> None:
        """Initialize an empty store.

        Args:
            target: Project path of the target, used in diagnostics.
            strict: Whether conflicting writes to non last-write-wins fields fail.
        """
        self.target = target
        self.journal = WriteJournal(target=target, strict=strict)
        self._extensions: dict[str, Extension] = {}
        self._state = StoreState.OPEN

    @property
    def state(self) -> StoreState:
        return self._state

    def _extension_type(self, key: type[E] | str) -> type[E]:
        if isinstance(key, str):
            extension_type = EXTENSION_TYPES.get(key)
            if extension_type is None:
                raise ValidationError(
                    message=f"unknown build concern '{key}'",
                    field_name=key,
                    expected_type=", ".join(sorted(EXTENSION_TYPES)),
                )
            return extension_type  # type: ignore[return-value]
        return key

    def get_or_create(self, key: type[E] | str) -> E:
        """Get the concern for a key, creating it with defaults on first use.

        The same key always returns the same instance within one run, so a
        module sees every earlier module's mutations.

        Raises:
            StoreAlreadyFinalizedError: If the store has been snapshotted.
        """
        if self._state is StoreState.FINALIZED:
            raise StoreAlreadyFinalizedError(
                message="extension store was already finalized",
                context={"target": self.target},
                state=self._state.value,
            )
        extension_type = self._extension_type(key)
        existing = self._extensions.get(extension_type.KEY)
        if existing is None:
            existing = extension_type()
            existing.attach(self.journal)
            self._extensions[extension_type.KEY] = existing
            logger.debug("extension_created", concern=extension_type.KEY, module=self.journal.active)
        return existing  # type: ignore[return-value]

    def get(self, key: type[E] | str) -> E | None:
        """Get a concern without creating it."""
        return self._extensions.get(self._extension_type(key).KEY)  # type: ignore[return-value]

    def keys(self) -> list[str]:
        return list(self._extensions)

    def __contains__(self, key: object) -> bool:
        if isinstance(key, type) and issubclass(key, Extension):
            key = key.KEY
        return key in self._extensions

    def seed(self, overrides: Mapping[str, Mapping[str, Any]]) -> None:
        """Pre-apply explicit override fields and pin them.

        Args:
            overrides: Concern key -> field values, e.g.
                ``{"compile_options": {"target_sdk": 34}}``.

        Raises:
            StoreLifecycleError: If resolution already began.
            ValidationError: If a concern or field is unknown or a value is invalid.
        """
        if self._state is not StoreState.OPEN:
            raise StoreLifecycleError(
                message="overrides must be seeded before resolution begins",
                state=self._state.value,
            )
        for key, fields in overrides.items():
            extension_type = self._extension_type(key)
            current = self._extensions.get(key)
            values = {**(current.model_dump() if current else {}), **fields}
            try:
                seeded = extension_type.model_validate(values)
            except PydanticValidationError as e:
                raise ValidationError(
                    message=f"invalid override for '{key}'",
                    field_name=key,
                    actual_value=dict(fields),
                    cause=e,
                ) from e
            seeded.pin(*(current.pinned if current else ()), *fields)
            seeded.attach(self.journal)
            self._extensions[key] = seeded
            logger.debug("override_seeded", concern=key, fields=sorted(fields))

    @contextmanager
    def active_module(self, identifier: str) -> Iterator[None]:
        """Attribute writes made inside the block to a module."""
        previous = self.journal.active
        self.journal.active = identifier
        try:
            yield
        finally:
            self.journal.active = previous

    def begin_resolution(self) -> None:
        if self._state is StoreState.FINALIZED:
            raise StoreAlreadyFinalizedError(
                message="a finalized store cannot be resolved again",
                state=self._state.value,
            )
        if self._state is not StoreState.OPEN:
            raise StoreLifecycleError(
                message="resolution already began on this store",
                state=self._state.value,
            )
        self._state = StoreState.RESOLVING

    def mark_resolved(self) -> None:
        if self._state is not StoreState.RESOLVING:
            raise StoreLifecycleError(
                message="store is not being resolved",
                state=self._state.value,
            )
        self._state = StoreState.RESOLVED

    def snapshot(self, capabilities: CapabilitySet | None = None) -> FinalConfiguration:
        """Finalize the store into a detached FinalConfiguration.

        Args:
            capabilities: Final capability set of the run.

        Raises:
            StoreAlreadyFinalizedError: If called a second time.
            StoreNotYetResolvedError: If resolution has not completed.
        """
        if self._state is StoreState.FINALIZED:
            raise StoreAlreadyFinalizedError(
                message="snapshot was already taken",
                context={"target": self.target},
                state=self._state.value,
            )
        if self._state is not StoreState.RESOLVED:
            raise StoreNotYetResolvedError(
                message="snapshot requested before resolution completed",
                context={"target": self.target},
                state=self._state.value,
            )

        concerns = {key: extension.normalized() for key, extension in self._extensions.items()}
        caps = capabilities if capabilities is not None else CapabilitySet()
        final = FinalConfiguration(
            target=self.target,
            shape=caps.shape,
            capabilities=sorted(caps),
            **concerns,
        )
        self._state = StoreState.FINALIZED
        return final
