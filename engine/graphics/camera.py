"""
Snap camera for tile-based worlds.

Keeps the focal point (usually the player) centered on screen while
never showing anything outside the world rectangle. Movement is
instant by default, Pokemon style; a smoothing mode is available.

Handles converting between world and screen coordinates.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class GridBounds(Protocol):
    """Anything with tile dimensions."""
    width: int
    height: int


class CameraMode(Enum):
    """How the camera reaches its target offset."""
    INSTANT = "instant"
    SMOOTH = "smooth"


def _clamp_axis(target: float, world_size: float, screen_size: float) -> float:
    # A world smaller than the screen collapses the range to 0
    return max(0.0, min(target, world_size - screen_size))


def compute_offset(
    focal_pixel: tuple[float, float],
    grid: GridBounds,
    tile_size: int,
    screen_width: float,
    screen_height: float,
) -> tuple[float, float]:
    """
    Compute the clamped top-left camera offset for a focal point.

    Args:
        focal_pixel: World pixel position to center on
        grid: Grid whose width/height (in tiles) bound the world
        tile_size: Tile size in pixels
        screen_width, screen_height: Viewport size in pixels

    Returns:
        (x, y) offset, each axis in [0, world - screen], or 0 when the
        world is smaller than the screen on that axis
    """
    target_x = focal_pixel[0] - screen_width / 2
    target_y = focal_pixel[1] - screen_height / 2
    return (
        _clamp_axis(target_x, grid.width * tile_size, screen_width),
        _clamp_axis(target_y, grid.height * tile_size, screen_height),
    )


class Camera:
    """
    2D camera that follows a focal point over a tile grid.

    Usage:
        camera = Camera(1200, 800)
        camera.follow(player_pixel, grid, tile_size)
        screen_x, screen_y = camera.world_to_screen(x, y)
    """

    def __init__(
        self,
        view_width: float,
        view_height: float,
        mode: CameraMode = CameraMode.INSTANT,
        smoothing: float = 0.1,
    ):
        self.view_width = view_width
        self.view_height = view_height
        self.mode = mode
        self.smoothing = smoothing

        # Position (top-left of view in world coordinates)
        self._x = 0.0
        self._y = 0.0

        # Target for smooth follow
        self._target_x = 0.0
        self._target_y = 0.0

    @property
    def x(self) -> float:
        return self._x

    @property
    def y(self) -> float:
        return self._y

    @property
    def offset(self) -> tuple[float, float]:
        """Current top-left offset."""
        return (self._x, self._y)

    @property
    def target(self) -> tuple[float, float]:
        """Offset the camera is heading towards."""
        return (self._target_x, self._target_y)

    def follow(
        self,
        focal_pixel: tuple[float, float],
        grid: GridBounds,
        tile_size: int,
    ) -> tuple[float, float]:
        """
        Retarget on a focal point and move towards it.

        Instant mode lands on the target immediately; smooth mode covers
        a `smoothing` fraction of the remaining distance per call.

        Returns:
            The new offset
        """
        self._target_x, self._target_y = compute_offset(
            focal_pixel, grid, tile_size, self.view_width, self.view_height,
        )

        old = (self._x, self._y)
        if self.mode is CameraMode.INSTANT:
            self._x = self._target_x
            self._y = self._target_y
        else:
            self._x += (self._target_x - self._x) * self.smoothing
            self._y += (self._target_y - self._y) * self.smoothing

        if old != (self._x, self._y):
            logger.debug(f"Camera moved from {old} to ({self._x}, {self._y})")
        return self.offset

    def snap(self) -> None:
        """Jump straight to the current target."""
        self._x = self._target_x
        self._y = self._target_y

    def resize(self, view_width: float, view_height: float) -> None:
        """Change the viewport size. Takes effect on the next follow()."""
        self.view_width = view_width
        self.view_height = view_height

    # Coordinate conversion

    def world_to_screen(self, world_x: float, world_y: float) -> tuple[float, float]:
        """Convert world coordinates to screen coordinates."""
        return (world_x - self._x, world_y - self._y)

    def screen_to_world(self, screen_x: float, screen_y: float) -> tuple[float, float]:
        """Convert screen coordinates to world coordinates."""
        return (screen_x + self._x, screen_y + self._y)

    def visible_tile_range(
        self,
        grid: GridBounds,
        tile_size: int,
    ) -> tuple[int, int, int, int]:
        """
        Tiles worth drawing for the current view.

        Returns:
            (start_col, start_row, end_col, end_row), end exclusive,
            padded by one tile and clipped to the grid
        """
        start_col = max(0, int(self._x // tile_size))
        start_row = max(0, int(self._y // tile_size))
        cols = -(-int(self.view_width) // tile_size) + 1
        rows = -(-int(self.view_height) // tile_size) + 1
        return (
            start_col,
            start_row,
            min(start_col + cols, grid.width),
            min(start_row + rows, grid.height),
        )
