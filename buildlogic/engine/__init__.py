"""
Composition engine.

Registry, capability detector, extension store, configuration module base
classes and the resolver that ties them together.
"""

from .detector import CapabilityDetector
from .module import ConfigurationModule, FunctionModule, ModuleContext, ShapeDispatchModule
from .registry import Registry
from .resolver import CompositionResolver, ResolutionRun
from .store import ExtensionStore, Overwrite, WriteJournal

__all__ = [
    "CapabilityDetector",
    "CompositionResolver",
    "ConfigurationModule",
    "ExtensionStore",
    "FunctionModule",
    "ModuleContext",
    "Overwrite",
    "Registry",
    "ResolutionRun",
    "ShapeDispatchModule",
    "WriteJournal",
]
