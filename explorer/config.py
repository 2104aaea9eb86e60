"""
Explorer configuration.

All tunable constants for grid exploration live here so levels,
tests and the demo can override them in one place.
"""

from __future__ import annotations

import inspect
import json
import logging
from pathlib import Path
from typing import Any, Optional

from engine.graphics.camera import CameraMode

logger = logging.getLogger(__name__)


class ExplorerConfig:
    """Configuration for a GridWorldExplorer."""

    def __init__(
        self,
        tile_size: int = 32,
        screen_width: int = 1200,
        screen_height: int = 800,
        grid_width: Optional[int] = None,
        grid_height: Optional[int] = None,
        movement_speed: float = 150.0,
        camera_mode: CameraMode | str = CameraMode.INSTANT,
        camera_smoothing: float = 0.1,
        encounter_min_spacing: int = 3,
        battle_delay: float = 2000.0,
        encounter_popup_timeout: float = 10000.0,
        level_info_duration: float = 3000.0,
        data_path: str | Path = "data",
        default_world: str = "garden",
        default_level: str = "vegetable_patch_grid",
        seed: Optional[int] = None,
    ):
        self.tile_size = tile_size
        self.screen_width = screen_width
        self.screen_height = screen_height
        # Default grid covers the screen (37x25 at 1200x800 / 32px)
        self.grid_width = grid_width or screen_width // tile_size
        self.grid_height = grid_height or screen_height // tile_size
        self.movement_speed = movement_speed  # ms per tile
        self.camera_mode = CameraMode(camera_mode)
        self.camera_smoothing = camera_smoothing
        self.encounter_min_spacing = encounter_min_spacing
        self.battle_delay = battle_delay
        self.encounter_popup_timeout = encounter_popup_timeout
        self.level_info_duration = level_info_duration
        self.data_path = Path(data_path)
        self.default_world = default_world
        self.default_level = default_level
        self.seed = seed

    @property
    def catalog_path(self) -> Path:
        """Location of the tile catalog document."""
        return self.data_path / "objects" / "tiles.json"

    def level_path(self, world_id: str, level_id: str) -> Path:
        """Location of a level document."""
        return self.data_path / "worlds" / world_id / "levels" / f"{level_id}.json"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExplorerConfig:
        """Build a config from a mapping, ignoring unknown keys."""
        known = set(inspect.signature(cls.__init__).parameters) - {"self"}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {sorted(unknown)}")
        return cls(**{key: value for key, value in data.items() if key in known})

    @classmethod
    def load(cls, path: str | Path) -> ExplorerConfig:
        """Load a config from a JSON file."""
        with open(path, 'r', encoding='utf-8') as f:
            return cls.from_dict(json.load(f))
