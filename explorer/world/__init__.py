"""
World module - tiles, grids and levels.

The GridWorldExplorer orchestrator lives in explorer.world.explorer and
is imported from there.
"""

from explorer.world.grid import Direction, Grid, GridPosition, PixelPosition
from explorer.world.tiles import TileCatalog, TileDefinition, TransitionSpec, FALLBACK_TILE_TYPES
from explorer.world.level import Level, LevelLoader, InteractiveObject, LEVEL_SCHEMA

__all__ = [
    "Direction",
    "Grid",
    "GridPosition",
    "PixelPosition",
    "TileCatalog",
    "TileDefinition",
    "TransitionSpec",
    "FALLBACK_TILE_TYPES",
    "Level",
    "LevelLoader",
    "InteractiveObject",
    "LEVEL_SCHEMA",
]
