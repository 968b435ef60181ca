"""Intent compilation and capability pruning."""

from compiler.compiler import Compiler, profile_name, resource_name, source_hash
from compiler.intent import CompileInput
from compiler.pruner import prune

__all__ = [
    "CompileInput",
    "Compiler",
    "profile_name",
    "prune",
    "resource_name",
    "source_hash",
]
