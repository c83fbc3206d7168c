"""Debug instrumentation: an annotated expression tree with per-node match counts."""

from .formatter import format_value, render_debug, render_stats, render_tree
from .tree import DebugCompiler, DebugNode, DebugResult, DebugStats, run_debug

__all__ = [
    "DebugCompiler",
    "DebugNode",
    "DebugResult",
    "DebugStats",
    "format_value",
    "render_debug",
    "render_stats",
    "render_tree",
    "run_debug",
]
