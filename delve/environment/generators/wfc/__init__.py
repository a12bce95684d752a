"""Chunk-based Wave Function Collapse post-processing."""

from .builder import WaveFunctionCollapseBuilder
from .patterns import MapChunk, build_patterns, patterns_to_constraints
from .solver import ChunkSolver, WFCContradiction

__all__ = [
    "ChunkSolver",
    "MapChunk",
    "WFCContradiction",
    "WaveFunctionCollapseBuilder",
    "build_patterns",
    "patterns_to_constraints",
]
