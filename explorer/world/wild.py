"""
Wild encounter table - what shows up when an encounter fires.

The encounter trigger only decides *that* something appears; this
table decides *what*. Swap it out to change a level's creatures.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Optional

from explorer.systems.encounter import Encounter


@dataclass(frozen=True)
class Species:
    """Base values for a creature species."""
    name: str
    base_hp: int
    attack: int
    defense: int
    speed: int
    moves: tuple[str, ...]
    element: str = "normal"


@dataclass
class Creature:
    """A concrete creature instance handed to the battle launcher."""
    name: str
    species: str
    level: int
    hp: int
    max_hp: int
    stats: dict[str, int] = field(default_factory=dict)
    moves: list[str] = field(default_factory=list)
    element: str = "normal"


WILD_SPECIES: dict[str, Species] = {
    "apple": Species("Apple", 45, 15, 18, 12, ("Apple Toss", "Sweet Scent"), "grass"),
    "orange": Species("Orange", 40, 18, 12, 15, ("Citrus Blast", "Vitamin Boost"), "fire"),
    "banana": Species("Banana", 35, 12, 15, 20, ("Slip Trap", "Potassium Power"), "electric"),
    "berry": Species("Berry", 50, 20, 20, 8, ("Berry Burst", "Heal Pulse"), "normal"),
}

TRAINER_SPECIES = Species("Cucumber", 50, 16, 14, 12, ("Vine Whip", "Tackle"), "grass")

HARVEST_FRUITS: tuple[str, ...] = ("Berry", "Super Berry", "Rare Fruit")


def create_creature(species: Species, level: int) -> Creature:
    """Scale a species to a level."""
    hp = species.base_hp + level * 3
    return Creature(
        name=species.name,
        species=species.name.lower(),
        level=level,
        hp=hp,
        max_hp=hp,
        stats={
            "attack": species.attack + int(level * 2),
            "defense": species.defense + int(level * 1.5),
            "speed": species.speed + level,
        },
        moves=list(species.moves) or ["Tackle"],
        element=species.element,
    )


def default_partner() -> Creature:
    """The player's starting cucumber."""
    return Creature(
        name="Cucumber",
        species="cucumber",
        level=2,
        hp=50,
        max_hp=50,
        stats={"attack": 16, "defense": 14, "speed": 12},
        moves=["Vine Whip", "Tackle"],
        element="grass",
    )


class WildEncounterTable:
    """
    Picks a random species at a random level for each encounter.

    Args:
        species: Pool to draw from (defaults to WILD_SPECIES)
        trainer: What a trainer sends out (defaults to TRAINER_SPECIES)
        min_level, max_level: Inclusive level range
        rng: Random source
    """

    def __init__(
        self,
        species: Optional[dict[str, Species]] = None,
        trainer: Species = TRAINER_SPECIES,
        min_level: int = 1,
        max_level: int = 3,
        rng: Optional[random.Random] = None,
    ):
        self.species = dict(species or WILD_SPECIES)
        self.trainer = trainer
        self.min_level = min_level
        self.max_level = max_level
        self.rng = rng or random.Random()

    def generate(self, encounter: Encounter) -> Creature:
        """
        Roll a creature for a fired encounter.

        Trainer encounters always field the trainer species; anything
        else draws from the wild pool.
        """
        level = self.rng.randint(self.min_level, self.max_level)
        if encounter.encounter_type == "trainer":
            return create_creature(self.trainer, level)

        key = self.rng.choice(sorted(self.species))
        return create_creature(self.species[key], level)

    def harvest(self) -> str:
        """Roll the fruit a harvestable tile yields."""
        return self.rng.choice(HARVEST_FRUITS)
