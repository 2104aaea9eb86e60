"""
Tile grid - cell storage, bounds checks and coordinate conversion.

Cells are addressed by GridPosition (col, row). World pixels are
continuous; a resting actor sits at the center of its cell.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterator, NamedTuple, Optional


class GridPosition(NamedTuple):
    """Integer cell coordinate."""
    col: int
    row: int

    def offset(self, direction: Direction) -> GridPosition:
        """The neighbouring cell in a direction."""
        dx, dy = direction.delta
        return GridPosition(self.col + dx, self.row + dy)


class PixelPosition(NamedTuple):
    """Continuous world pixel coordinate."""
    x: float
    y: float

    def lerp(self, other: PixelPosition, t: float) -> PixelPosition:
        """Linear interpolation towards other (t in [0, 1])."""
        return PixelPosition(
            self.x + (other.x - self.x) * t,
            self.y + (other.y - self.y) * t,
        )


class Direction(Enum):
    """The four grid directions, in neighbour probe order."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def delta(self) -> tuple[int, int]:
        """(dx, dy) step for this direction. Rows grow downwards."""
        return _DELTAS[self]

    @property
    def opposite(self) -> Direction:
        return _OPPOSITES[self]


_DELTAS = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}

_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}


class Grid:
    """
    Dense row-major grid of tile tags.

    Every in-bounds cell holds a tag or None (empty). Reads outside the
    grid return None and writes outside it are ignored, so callers never
    need to bounds-check first.
    """

    def __init__(self, width: int, height: int, tile_size: int = 32):
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        if tile_size <= 0:
            raise ValueError(f"Tile size must be positive, got {tile_size}")

        self.width = width
        self.height = height
        self.tile_size = tile_size
        self._tiles: list[Optional[str]] = [None] * (width * height)

    def __repr__(self) -> str:
        return f"Grid({self.width}x{self.height}, tile_size={self.tile_size})"

    def __iter__(self) -> Iterator[tuple[GridPosition, Optional[str]]]:
        """Iterate (position, tag) in row-major order."""
        for index, tag in enumerate(self._tiles):
            yield GridPosition(index % self.width, index // self.width), tag

    @property
    def pixel_width(self) -> int:
        """Grid width in pixels."""
        return self.width * self.tile_size

    @property
    def pixel_height(self) -> int:
        """Grid height in pixels."""
        return self.height * self.tile_size

    @property
    def center_cell(self) -> GridPosition:
        return GridPosition(self.width // 2, self.height // 2)

    def is_valid(self, pos: tuple[int, int]) -> bool:
        """Check if a cell lies inside the grid."""
        col, row = pos
        return 0 <= col < self.width and 0 <= row < self.height

    def _index(self, pos: tuple[int, int]) -> int:
        return pos[1] * self.width + pos[0]

    def get_tile(self, pos: tuple[int, int]) -> Optional[str]:
        """Tag at a cell, or None if empty or out of bounds."""
        if not self.is_valid(pos):
            return None
        return self._tiles[self._index(pos)]

    def set_tile(self, pos: tuple[int, int], tag: Optional[str]) -> None:
        """Set the tag at a cell. Out-of-bounds writes are ignored."""
        if self.is_valid(pos):
            self._tiles[self._index(pos)] = tag

    def fill(self, tag: Optional[str]) -> None:
        """Set every cell to tag."""
        self._tiles = [tag] * (self.width * self.height)

    def clear(self) -> None:
        """Empty every cell."""
        self.fill(None)

    def count(self, tag: Optional[str]) -> int:
        """Number of cells holding tag."""
        return self._tiles.count(tag)

    def neighbors(self, pos: GridPosition) -> list[tuple[Direction, GridPosition]]:
        """
        Orthogonal neighbours in probe order: up, down, left, right.

        Out-of-bounds neighbours are included; get_tile() returns None
        for them.
        """
        return [(direction, pos.offset(direction)) for direction in Direction]

    # Coordinate conversion

    def center_pixel(self, pos: tuple[int, int]) -> PixelPosition:
        """World pixel at the center of a cell."""
        half = self.tile_size / 2
        return PixelPosition(
            pos[0] * self.tile_size + half,
            pos[1] * self.tile_size + half,
        )

    def cell_at_pixel(self, pixel: tuple[float, float]) -> GridPosition:
        """Cell containing a world pixel (may be out of bounds)."""
        return GridPosition(
            int(pixel[0] // self.tile_size),
            int(pixel[1] // self.tile_size),
        )
