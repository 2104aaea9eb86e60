"""
Level loading - grid layouts, sparse tile maps and fallback levels.

Level documents come in two shapes:

    {"grid_layout": [["grass", "tree", ...], ...], "player_start": {"x": 3, "y": 4}}
    {"tile_map": {"5,5": "tree", "6,5": "bush"}}

Anything missing or malformed degrades to a generated default level
(grass, scattered trees and bushes, one horizontal path) so there is
always somewhere to walk.
"""

from __future__ import annotations

import json
import logging
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import jsonschema

from explorer.config import ExplorerConfig
from explorer.world.grid import Grid, GridPosition

logger = logging.getLogger(__name__)


_POSITION_SCHEMA = {
    "type": "object",
    "required": ["x", "y"],
    "properties": {
        "x": {"type": "integer"},
        "y": {"type": "integer"},
    },
}

LEVEL_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "id": {"type": "string"},
        "name": {"type": "string"},
        "description": {"type": "string"},
        "width": {"type": "integer", "minimum": 1},
        "height": {"type": "integer", "minimum": 1},
        "grid_layout": {
            "type": "array",
            "items": {
                "type": "array",
                "items": {"type": ["string", "null"]},
            },
        },
        "tile_map": {
            "type": "object",
            "propertyNames": {"pattern": r"^-?\d+,-?\d+$"},
            "additionalProperties": {"type": ["string", "null"]},
        },
        "player_start": _POSITION_SCHEMA,
        "interactive_objects": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["position"],
                "properties": {"position": _POSITION_SCHEMA},
            },
        },
    },
}

def _cell(position: dict[str, Any]) -> GridPosition:
    return GridPosition(int(position['x']), int(position['y']))


# Default level generation
DEFAULT_TREE_COUNT = 20
DEFAULT_BUSH_COUNT = 15


@dataclass
class InteractiveObject:
    """A level-authored object sitting on a cell (signs, NPC notes...)."""
    position: GridPosition
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def text(self) -> Optional[str]:
        return self.payload.get('text')


@dataclass
class Level:
    """A loaded level: grid, start cell and authored objects."""
    grid: Grid
    player_start: GridPosition
    interactive_objects: list[InteractiveObject] = field(default_factory=list)
    id: str = ""
    name: str = ""
    description: str = ""
    world_id: str = ""
    is_fallback: bool = False

    def object_at(self, pos: tuple[int, int]) -> Optional[InteractiveObject]:
        """First interactive object on a cell."""
        for obj in self.interactive_objects:
            if obj.position == pos:
                return obj
        return None


class LevelLoader:
    """
    Builds Level objects from documents or files.

    Usage:
        loader = LevelLoader(config)
        level = loader.load("garden", "vegetable_patch_grid")
    """

    def __init__(self, config: ExplorerConfig, rng: Optional[random.Random] = None):
        self.config = config
        self.rng = rng or random.Random(config.seed)

    def _new_grid(self, document: Optional[dict[str, Any]] = None) -> Grid:
        document = document or {}
        return Grid(
            # json.load yields integral floats (10.0) that the schema accepts
            int(document.get('width', self.config.grid_width)),
            int(document.get('height', self.config.grid_height)),
            self.config.tile_size,
        )

    def load(self, world_id: str, level_id: str) -> Level:
        """
        Load a level file. Never raises.

        Missing, unreadable or invalid files produce the fallback level.
        """
        path = self.config.level_path(world_id, level_id)
        logger.info(f"Attempting to load grid level from: {path}")
        try:
            with open(path, 'r', encoding='utf-8') as f:
                document = json.load(f)
            level = self.from_document(document)
        except (OSError, ValueError) as e:
            # ValueError covers malformed JSON and non-UTF-8 bytes
            logger.error(f"Failed to load grid level {path}: {e}")
            level = self.fallback_level()
        except jsonschema.ValidationError as e:
            logger.error(f"Validation error in {path}: {e.message}")
            level = self.fallback_level()

        level.world_id = world_id
        if not level.id:
            level.id = level_id
        return level

    def from_document(self, document: Any) -> Level:
        """
        Build a level from a parsed document.

        A document with neither grid_layout nor tile_map gets a
        generated layout but keeps its own metadata and start cell.

        Raises:
            jsonschema.ValidationError: If the document is malformed
        """
        jsonschema.validate(instance=document, schema=LEVEL_SCHEMA)

        grid = self._new_grid(document)
        if 'grid_layout' in document:
            logger.debug("Loading from grid_layout")
            self._apply_grid_layout(grid, document['grid_layout'])
        elif 'tile_map' in document:
            logger.debug("Loading from tile_map")
            self._apply_tile_map(grid, document['tile_map'])
        else:
            logger.info("No grid data found, generating default level")
            self.generate_default_layout(grid)

        level = Level(
            grid=grid,
            player_start=self._resolve_start(grid, document.get('player_start')),
            interactive_objects=[
                InteractiveObject(
                    position=_cell(obj['position']),
                    payload={k: v for k, v in obj.items() if k != 'position'},
                )
                for obj in document.get('interactive_objects', [])
            ],
            id=document.get('id', ""),
            name=document.get('name', ""),
            description=document.get('description', ""),
        )
        logger.info(f"Grid level loaded: {level.id or 'unknown'} ({grid.width}x{grid.height})")
        return level

    def fallback_level(self) -> Level:
        """Generated level used when nothing could be loaded."""
        grid = self._new_grid()
        self.generate_default_layout(grid)
        logger.warning("Fallback level created")
        return Level(
            grid=grid,
            player_start=grid.center_cell,
            id="fallback_level",
            name="Fallback Garden",
            is_fallback=True,
        )

    def generate_default_layout(self, grid: Grid) -> None:
        """Grass everywhere, random trees and bushes, a path across the middle."""
        grid.fill('grass')

        for _ in range(DEFAULT_TREE_COUNT):
            grid.set_tile(self._random_cell(grid), 'tree')

        for _ in range(DEFAULT_BUSH_COUNT):
            grid.set_tile(self._random_cell(grid), 'bush')

        path_row = grid.height // 2
        for col in range(grid.width):
            grid.set_tile((col, path_row), 'path')

    def _random_cell(self, grid: Grid) -> GridPosition:
        return GridPosition(
            self.rng.randrange(grid.width),
            self.rng.randrange(grid.height),
        )

    def _apply_grid_layout(self, grid: Grid, layout: list[list[Optional[str]]]) -> None:
        # Rows and columns beyond the grid are clipped
        for row, tags in enumerate(layout[:grid.height]):
            for col, tag in enumerate(tags[:grid.width]):
                grid.set_tile((col, row), tag)

    def _apply_tile_map(self, grid: Grid, tile_map: dict[str, Optional[str]]) -> None:
        grid.fill('grass')
        for key, tag in tile_map.items():
            col, row = (int(part) for part in key.split(','))
            grid.set_tile((col, row), tag)

    def _resolve_start(self, grid: Grid, start: Optional[dict[str, int]]) -> GridPosition:
        if start is None:
            logger.debug(f"No start position defined, using center {grid.center_cell}")
            return grid.center_cell

        pos = _cell(start)
        if not grid.is_valid(pos):
            logger.warning(f"Player start {pos} is outside the grid, using center")
            return grid.center_cell
        return pos
