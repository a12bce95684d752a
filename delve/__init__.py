"""Procedural dungeon level generation for a turn-based roguelike."""

from delve.environment.generators import generate

__all__ = ["generate"]
