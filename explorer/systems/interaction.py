"""
Interaction system - resolves what the player is interacting with.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from explorer.world.grid import Direction, Grid, GridPosition
from explorer.world.tiles import TileCatalog, TileDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InteractionTarget:
    """
    A tile the player can act on.

    Attributes:
        tag: Tile tag at the position
        definition: Resolved tile definition
        position: Cell of the tile
        direction: Neighbour direction, None for the player's own cell
    """
    tag: str
    definition: TileDefinition
    position: GridPosition
    direction: Optional[Direction] = None

    @property
    def actions(self) -> tuple[str, ...]:
        return self.definition.special_actions


class InteractionResolver:
    """
    Finds interactive and auto-trigger tiles around the player.

    The player's own cell wins; after that neighbours are probed in
    the fixed order up, down, left, right and the first interactive
    one is returned.
    """

    def __init__(self, catalog: TileCatalog):
        self.catalog = catalog

    def _target(
        self,
        grid: Grid,
        pos: GridPosition,
        direction: Optional[Direction] = None,
    ) -> Optional[InteractionTarget]:
        tag = grid.get_tile(pos)
        definition = self.catalog.lookup(tag)
        if definition is None:
            return None
        return InteractionTarget(tag, definition, pos, direction)

    def resolve(self, current_cell: GridPosition, grid: Grid) -> Optional[InteractionTarget]:
        """Interactive tile for an explicit interact intent, if any."""
        target = self._target(grid, current_cell)
        if target and target.definition.interactive:
            return target

        for direction, pos in grid.neighbors(current_cell):
            target = self._target(grid, pos, direction)
            if target and target.definition.interactive:
                return target

        return None

    def resolve_auto_trigger(
        self,
        current_cell: GridPosition,
        grid: Grid,
    ) -> Optional[InteractionTarget]:
        """The current tile, if it fires on being stepped on."""
        target = self._target(grid, current_cell)
        if target and target.definition.auto_trigger:
            logger.debug(f"Tile event triggered: '{target.tag}' at {current_cell}")
            return target
        return None
