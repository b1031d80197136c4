"""
Capability tags and target shapes.

A target accumulates capability tags as configuration modules are applied.
Exactly one of the tags may describe the target's shape, the mutually
exclusive kind of artifact it produces.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Iterator

from ..core.exceptions import ConflictError


class Shape(str, Enum):
    """Mutually exclusive kind of artifact a target produces."""

    APPLICATION = "application"
    LIBRARY = "library"
    TEST_HARNESS = "test-harness"
    JVM_ONLY = "jvm-only"

    @classmethod
    def from_tag(cls, tag: str) -> Shape | None:
        """Return the shape a tag names, or None for non-shape tags."""
        try:
            return cls(tag)
        except ValueError:
            return None

    @property
    def is_android(self) -> bool:
        """Whether the shape is built by the Android Gradle plugin."""
        return self is not Shape.JVM_ONLY


SHAPE_TAGS: frozenset[str] = frozenset(shape.value for shape in Shape)


class CapabilitySet:
    """Monotonic set of capability tags for one target.

    Tags are only ever added. Adding a second, different shape tag raises
    ConflictError, as does adding anything once the set has been frozen.
    """

    def __init__(self, tags: Iterable[str] = ()) -> None:
        self._tags: set[str] = set()
        self._shape: Shape | None = None
        self._frozen = False
        self.update(tags)

    @property
    def shape(self) -> Shape | None:
        """The active shape, if a base module has been applied."""
        return self._shape

    @property
    def frozen(self) -> bool:
        return self._frozen

    def add(self, tag: str, source: str | None = None) -> None:
        """Add a tag.

        Args:
            tag: Capability tag to add.
            source: Identifier of the module contributing the tag.

        Raises:
            ConflictError: If the set is frozen, or the tag is a shape that
                contradicts the shape already present.
        """
        if self._frozen:
            if tag in self._tags:
                return
            raise ConflictError(
                message="capability set is frozen after resolution",
                identifier=source or tag,
                conflicting_with="frozen",
            )
        shape = Shape.from_tag(tag)
        if shape is not None and self._shape is not None and shape is not self._shape:
            raise ConflictError(
                message=f"target is already shaped '{self._shape.value}', cannot become '{shape.value}'",
                identifier=source or tag,
                conflicting_with=self._shape.value,
            )
        if shape is not None:
            self._shape = shape
        self._tags.add(tag)

    def update(self, tags: Iterable[str], source: str | None = None) -> None:
        """Add several tags, in order."""
        for tag in tags:
            self.add(tag, source=source)

    def freeze(self) -> None:
        self._frozen = True

    def snapshot(self) -> frozenset[str]:
        """Immutable view of the current tags."""
        return frozenset(self._tags)

    def __contains__(self, tag: object) -> bool:
        return tag in self._tags

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._tags))

    def __len__(self) -> int:
        return len(self._tags)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CapabilitySet):
            return self._tags == other._tags
        if isinstance(other, (set, frozenset)):
            return self._tags == other
        return NotImplemented

    def __repr__(self) -> str:
        shape = self._shape.value if self._shape else None
        return f"CapabilitySet(tags={sorted(self._tags)}, shape={shape}, frozen={self._frozen})"
