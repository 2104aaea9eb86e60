"""
Tile catalog - tag to behaviour lookup.

Tile documents group tags by category:

    {"tile_types": {"terrain": {"grass": {"walkable": true, ...}}}}

The catalog flattens them once into a single tag -> TileDefinition
map. When the document is missing or unreadable a small hard-coded
catalog takes over so a level can always be played.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from explorer.world.grid import GridPosition

logger = logging.getLogger(__name__)


class TransitionSpec(BaseModel):
    """Where a transition tile leads."""

    model_config = ConfigDict(frozen=True, extra='ignore')

    target_level: Optional[str] = None
    target_world: Optional[str] = None
    target_position: Optional[GridPosition] = None

    @field_validator('target_position', mode='before')
    @classmethod
    def _parse_position(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return (value.get('x'), value.get('y'))
        return value


class TileDefinition(BaseModel):
    """
    Behaviour record shared by every cell with the same tag.

    Attributes:
        walkable: Whether the player may step onto the tile
            (defaults to the inverse of blocks_movement)
        encounter_rate: Chance in [0, 1] of a wild encounter per step,
            None for tiles without encounters
        interactive: Responds to the interact intent
        auto_trigger: Fires its effect when stepped on
        healing: Heals the party when triggered
        transition: Destination for level transitions
    """

    model_config = ConfigDict(frozen=True, extra='ignore')

    tag: str = ""
    category: str = ""
    name: str = ""
    emoji: str = ""
    color: Optional[str] = None

    walkable: bool = True
    blocks_movement: bool = False
    encounter_rate: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    encounter_types: tuple[str, ...] = ()

    interactive: bool = False
    auto_trigger: bool = False
    healing: bool = False
    has_text: bool = False
    harvestable: bool = False
    special_actions: tuple[str, ...] = ()
    transition: Optional[TransitionSpec] = None

    @model_validator(mode='before')
    @classmethod
    def _default_walkable(cls, data: Any) -> Any:
        if isinstance(data, dict) and 'walkable' not in data:
            data = {**data, 'walkable': not data.get('blocks_movement', False)}
        return data

    @field_validator('transition', mode='before')
    @classmethod
    def _parse_transition(cls, value: Any) -> Any:
        if value is None or value is False:
            return None
        if value is True:
            return {}
        if isinstance(value, str):
            return {'target_level': value}
        return value

    @property
    def display_name(self) -> str:
        """Human readable name, falling back to the tag."""
        return self.name or self.tag or "object"

    @property
    def has_encounters(self) -> bool:
        return bool(self.encounter_rate)


FALLBACK_TILE_TYPES: dict[str, dict[str, dict[str, Any]]] = {
    'terrain': {
        'grass': {'emoji': '🌱', 'walkable': True, 'encounter_rate': 0.1},
        'path': {'emoji': '⬜', 'walkable': True, 'encounter_rate': 0.02},
    },
    'obstacles': {
        'tree': {'emoji': '🌳', 'walkable': False, 'blocks_movement': True},
        'bush': {'emoji': '🫐', 'walkable': False, 'interactive': True},
    },
}


class TileCatalog:
    """
    Read-only tag -> TileDefinition lookup.

    Usage:
        catalog = TileCatalog.load("data/objects/tiles.json")
        grass = catalog.lookup("grass")
        if catalog.is_walkable(grid.get_tile(pos)):
            ...
    """

    def __init__(
        self,
        definitions: Optional[dict[str, TileDefinition]] = None,
        source: str = "",
    ):
        self._definitions: dict[str, TileDefinition] = dict(definitions or {})
        self.source = source

    def __repr__(self) -> str:
        return f"TileCatalog({len(self)} tiles, source={self.source!r})"

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, tag: object) -> bool:
        return tag in self._definitions

    def __iter__(self) -> Iterator[str]:
        return iter(self._definitions)

    @property
    def is_fallback(self) -> bool:
        return self.source == "fallback"

    def lookup(self, tag: Optional[str]) -> Optional[TileDefinition]:
        """Definition for a tag, or None for empty/unknown tags."""
        if not tag:
            return None
        return self._definitions.get(tag)

    def is_walkable(self, tag: Optional[str]) -> bool:
        """Unknown and empty tiles are passable."""
        definition = self.lookup(tag)
        return definition is None or definition.walkable

    @classmethod
    def from_document(cls, document: Any, source: str = "") -> TileCatalog:
        """
        Build a catalog from a parsed tile document.

        Malformed tile entries are skipped and logged.

        Raises:
            ValueError: If the document has no tile_types mapping
        """
        if not isinstance(document, dict) or not isinstance(document.get('tile_types'), dict):
            raise ValueError("Tile document must contain a 'tile_types' object")

        definitions: dict[str, TileDefinition] = {}
        for category, tiles in document['tile_types'].items():
            if not isinstance(tiles, dict):
                logger.warning(f"Skipping tile category '{category}': not an object")
                continue

            for tag, raw in tiles.items():
                if not isinstance(raw, dict):
                    logger.error(f"Invalid tile '{tag}' in '{category}': not an object")
                    continue
                try:
                    definition = TileDefinition.model_validate(
                        {**raw, 'tag': tag, 'category': category}
                    )
                except ValidationError as e:
                    logger.error(f"Invalid tile '{tag}' in '{category}': {e}")
                    continue

                # First category wins for duplicate tags
                definitions.setdefault(tag, definition)

        return cls(definitions, source=source)

    @classmethod
    def fallback(cls) -> TileCatalog:
        """The hard-coded grass/path/tree/bush catalog."""
        catalog = cls.from_document({'tile_types': FALLBACK_TILE_TYPES})
        catalog.source = "fallback"
        return catalog

    @classmethod
    def load(cls, path: str | Path) -> TileCatalog:
        """
        Load a catalog from a JSON file.

        Never raises: any failure returns the fallback catalog.
        """
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                document = json.load(f)
            catalog = cls.from_document(document, source=str(path))
        except (OSError, json.JSONDecodeError, ValueError) as e:
            logger.error(f"Failed to load tile definitions from {path}: {e}")
            logger.warning("Using fallback tile definitions")
            return cls.fallback()

        logger.info(f"Loaded {len(catalog)} tile definitions from {path}")
        return catalog
