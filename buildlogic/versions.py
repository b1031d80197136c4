"""
Version table.

An immutable mapping from semantic names (compile-sdk, jvm-target, jacoco, ...)
to literal version values. External values are layered over the built-in
defaults, loaded once at process start and shared read-only by every
resolution run.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterator, Mapping

from dotenv import dotenv_values

from .core.exceptions import MissingVersionKeyError, VersionTableError
from .core.logging import get_logger

logger = get_logger(__name__)

# SDK levels and toolchain targets shared by every module.
# Update these here rather than in individual conventions.
DEFAULT_VERSIONS: Mapping[str, str] = MappingProxyType(
    {
        "compile-sdk": "36",
        "target-sdk": "36",
        "min-sdk": "28",
        "build-tools": "36.0.0",
        "java-version": "21",
        "jvm-target": "21",
    }
)

PROPERTIES_SUFFIXES = {".properties", ".env", ".txt", ""}


class VersionTable:
    """Read-only version lookup shared across resolution runs."""

    def __init__(
        self,
        values: Mapping[str, Any] | None = None,
        *,
        defaults: Mapping[str, str] | None = DEFAULT_VERSIONS,
        source: str | None = None,
    ) -> None:
        """Initialize the table.

        Args:
            values: External values; they take precedence over defaults.
            defaults: Built-in values to layer under ``values``. Pass None
                for a table that holds only ``values``.
            source: Where the values came from, for diagnostics.
        """
        merged: dict[str, str] = dict(defaults or {})
        for key, value in (values or {}).items():
            merged[str(key)] = str(value)
        self._values: Mapping[str, str] = MappingProxyType(merged)
        self.source = source

    def require(self, key: str, identifier: str | None = None) -> str:
        """Get a version value.

        Args:
            key: Semantic version name.
            identifier: Module reading the key, reported on failure.

        Raises:
            MissingVersionKeyError: If the key is not in the table.
        """
        try:
            return self._values[key]
        except KeyError:
            raise MissingVersionKeyError(
                message="add it to the version table",
                context={"source": self.source} if self.source else {},
                key=key,
                identifier=identifier,
            ) from None

    def require_int(self, key: str, identifier: str | None = None) -> int:
        """Get a version value that must be an integer (e.g., an SDK level)."""
        value = self.require(key, identifier)
        try:
            return int(value)
        except ValueError as e:
            raise VersionTableError(
                message=f"version '{key}' must be an integer, got '{value}'",
                path=self.source or "",
                cause=e,
            ) from e

    def find(self, key: str) -> str | None:
        """Get a version value, or None when absent."""
        return self._values.get(key)

    def as_dict(self) -> dict[str, str]:
        return dict(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"VersionTable(keys={sorted(self._values)}, source={self.source!r})"


def _catalog_version(key: str, value: Any, path: Path) -> str:
    """Flatten a catalog version entry (plain or rich declaration)."""
    if isinstance(value, (str, int, float)):
        return str(value)
    if isinstance(value, dict):
        for field in ("strictly", "require", "prefer"):
            if field in value:
                return str(value[field])
    raise VersionTableError(
        message=f"unsupported version declaration for '{key}'",
        path=str(path),
    )


def _load_catalog(path: Path) -> dict[str, str]:
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise VersionTableError(message="invalid TOML version catalog", path=str(path), cause=e) from e

    section = data.get("versions")
    if section is None:
        # Flat TOML: top-level scalars are the versions
        section = {k: v for k, v in data.items() if not isinstance(v, (dict, list))}
    return {key: _catalog_version(key, value, path) for key, value in section.items()}


def _load_properties(path: Path) -> dict[str, str]:
    raw = dotenv_values(path, interpolate=False)
    values: dict[str, str] = {}
    for key, value in raw.items():
        if value is None:
            raise VersionTableError(message=f"key '{key}' has no value", path=str(path))
        values[key] = value
    return values


def load_version_table(
    path: Path | str,
    defaults: Mapping[str, str] | None = DEFAULT_VERSIONS,
) -> VersionTable:
    """Load a version table from a properties file or a TOML catalog.

    Args:
        path: ``key=value`` properties/.env file, or a ``libs.versions.toml``
            style catalog whose ``[versions]`` table is read.
        defaults: Built-in values layered under the file's values.

    Returns:
        The loaded, read-only version table.

    Raises:
        VersionTableError: If the file is missing, unreadable or malformed.
    """
    path = Path(path)
    if not path.is_file():
        raise VersionTableError(message=f"version table not found: {path}", path=str(path))

    suffix = path.suffix.lower()
    if suffix == ".toml":
        values = _load_catalog(path)
    elif suffix in PROPERTIES_SUFFIXES:
        values = _load_properties(path)
    else:
        raise VersionTableError(
            message=f"unsupported version table format '{suffix}'",
            path=str(path),
        )

    logger.debug("version_table_loaded", path=str(path), keys=len(values))
    return VersionTable(values, defaults=defaults, source=str(path))
