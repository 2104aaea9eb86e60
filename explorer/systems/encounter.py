"""
Encounter system - step-counted random encounters.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Optional

from explorer.world.grid import GridPosition
from explorer.world.tiles import TileDefinition

logger = logging.getLogger(__name__)

DEFAULT_ENCOUNTER_TYPE = "wild_fruit"


@dataclass(frozen=True)
class Encounter:
    """A fired encounter. What appears is decided by the encounter table."""
    definition: TileDefinition
    cell: GridPosition
    step: int
    encounter_type: str = DEFAULT_ENCOUNTER_TYPE


class EncounterTrigger:
    """
    Decides whether a completed step starts an encounter.

    A tile without an encounter rate never fires. Otherwise encounters
    are spaced at least `min_spacing` steps apart, and past that each
    step fires with probability equal to the tile's rate.
    """

    def __init__(self, rng: Optional[random.Random] = None, min_spacing: int = 3):
        self.rng = rng or random.Random()
        self.min_spacing = min_spacing

    def maybe_fire(
        self,
        cell: GridPosition,
        definition: Optional[TileDefinition],
        step_count: int,
        last_encounter_step: int,
    ) -> Optional[Encounter]:
        """
        Roll for an encounter on the landed tile.

        The caller records step_count as the last encounter step when
        an Encounter is returned.
        """
        if definition is None or not definition.encounter_rate:
            return None

        if step_count - last_encounter_step < self.min_spacing:
            return None

        if self.rng.random() >= definition.encounter_rate:
            return None

        encounter_type = (
            definition.encounter_types[0]
            if definition.encounter_types
            else DEFAULT_ENCOUNTER_TYPE
        )
        logger.info(f"Encounter triggered on '{definition.tag}' at {cell} (step {step_count})")
        return Encounter(
            definition=definition,
            cell=cell,
            step=step_count,
            encounter_type=encounter_type,
        )
