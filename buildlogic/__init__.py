"""
buildlogic: composable build-configuration conventions.

A registry of reusable configuration modules that converge a project module
onto a shared set of build settings (toolchain versions, compiler flags,
test wiring, coverage and static analysis) and hand the result to an
external build executor.
"""

__version__ = "1.0.0"
__author__ = "buildlogic maintainers"
