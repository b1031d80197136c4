"""
Built-in conventions.

``build_default_registry`` is the bootstrap entry point: it registers every
built-in convention and freezes the registry.
"""

from __future__ import annotations

from ..core.logging import get_logger
from ..engine.module import ConfigurationModule
from ..engine.registry import Registry
from .android import (
    ApplicationConvention,
    JvmLibraryConvention,
    LibraryConvention,
    TestHarnessConvention,
    configure_kotlin_android,
    configure_kotlin_jvm,
)
from .compose import ComposeConvention
from .coverage import JacocoConvention, KoverConvention
from .infrastructure import (
    DependencyInjectionConvention,
    FeatureConvention,
    FlavorsConvention,
    RoomConvention,
)
from .quality import DetektConvention, LintConvention
from .testing import ComposeTestConvention, InstrumentedTestConvention, UnitTestConvention

logger = get_logger(__name__)

BUILTIN_CONVENTIONS: tuple[type[ConfigurationModule], ...] = (
    ApplicationConvention,
    LibraryConvention,
    TestHarnessConvention,
    JvmLibraryConvention,
    LintConvention,
    ComposeConvention,
    DependencyInjectionConvention,
    RoomConvention,
    FeatureConvention,
    UnitTestConvention,
    InstrumentedTestConvention,
    ComposeTestConvention,
    KoverConvention,
    JacocoConvention,
    DetektConvention,
    FlavorsConvention,
)


def build_default_registry(*extra: ConfigurationModule, freeze: bool = True) -> Registry:
    """Create a registry holding every built-in convention.

    Args:
        *extra: Additional modules to register after the built-ins.
        freeze: Whether to freeze the registry once populated.

    Returns:
        The populated registry.
    """
    registry = Registry()
    for convention in BUILTIN_CONVENTIONS:
        registry.add(convention())
    for module in extra:
        registry.add(module)
    if freeze:
        registry.freeze()
    logger.debug("registry_built", modules=len(registry), frozen=registry.frozen)
    return registry


__all__ = [
    "BUILTIN_CONVENTIONS",
    "ApplicationConvention",
    "ComposeConvention",
    "ComposeTestConvention",
    "DependencyInjectionConvention",
    "DetektConvention",
    "FeatureConvention",
    "FlavorsConvention",
    "InstrumentedTestConvention",
    "JacocoConvention",
    "JvmLibraryConvention",
    "KoverConvention",
    "LibraryConvention",
    "LintConvention",
    "RoomConvention",
    "TestHarnessConvention",
    "UnitTestConvention",
    "build_default_registry",
    "configure_kotlin_android",
    "configure_kotlin_jvm",
]
