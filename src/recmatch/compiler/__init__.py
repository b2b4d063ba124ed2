"""
Compiler driver and compilation result.
"""

from .driver import CompilerDriver, CompilationResult
