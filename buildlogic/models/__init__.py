"""
buildlogic data models.

Capability tags and shapes, target and request models, the build extension
concerns configuration modules mutate, and the final configuration handed to
the external build executor.
"""

from .capabilities import SHAPE_TAGS, CapabilitySet, Shape
from .extensions import (
    EXTENSION_TYPES,
    AndroidOptions,
    CompileOptions,
    ComposeOptions,
    CoverageOptions,
    DependencyDeclaration,
    DependencyKind,
    DependencyOptions,
    DependencyScope,
    Extension,
    FlavorOptions,
    KspOptions,
    LintOptions,
    PluginOptions,
    ProductFlavor,
    RoomOptions,
    StaticAnalysisOptions,
    TestOptions,
)
from .final import FinalConfiguration
from .request import ResolutionRequest, TargetModule

__all__ = [
    # Capabilities
    "SHAPE_TAGS",
    "CapabilitySet",
    "Shape",
    # Extensions
    "EXTENSION_TYPES",
    "AndroidOptions",
    "CompileOptions",
    "ComposeOptions",
    "CoverageOptions",
    "DependencyDeclaration",
    "DependencyKind",
    "DependencyOptions",
    "DependencyScope",
    "Extension",
    "FlavorOptions",
    "KspOptions",
    "LintOptions",
    "PluginOptions",
    "ProductFlavor",
    "RoomOptions",
    "StaticAnalysisOptions",
    "TestOptions",
    # Output
    "FinalConfiguration",
    # Requests
    "ResolutionRequest",
    "TargetModule",
]
