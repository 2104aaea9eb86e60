import random
import pytest
from explorer.systems.encounter import Encounter
from explorer.world.grid import GridPosition
from explorer.world.tiles import TileDefinition
from explorer.world.wild import (
    HARVEST_FRUITS, TRAINER_SPECIES, WILD_SPECIES, Species, WildEncounterTable, create_creature, default_partner,
)

@pytest.fixture
def encounter():
    return Encounter(TileDefinition(tag="grass", encounter_rate=0.1), GridPosition(1, 1), step=3)

def test_create_creature_scales_with_level():
    apple = WILD_SPECIES["apple"]
    creature = create_creature(apple, 3)

    assert creature.name == "Apple"
    assert creature.species == "apple"
    assert creature.level == 3
    assert creature.hp == creature.max_hp == 45 + 9
    assert creature.stats == {"attack": 21, "defense": 22, "speed": 15}
    assert creature.moves == ["Apple Toss", "Sweet Scent"]
    assert creature.element == "grass"

def test_species_without_moves_gets_tackle():
    creature = create_creature(Species("Pebble", 10, 1, 1, 1, ()), 1)
    assert creature.moves == ["Tackle"]

def test_generate_within_level_range(encounter):
    table = WildEncounterTable(min_level=2, max_level=4, rng=random.Random(5))

    for _ in range(50):
        creature = table.generate(encounter)
        assert 2 <= creature.level <= 4
        assert creature.species in WILD_SPECIES

def test_generate_is_seeded(encounter):
    first = WildEncounterTable(rng=random.Random(11)).generate(encounter)
    second = WildEncounterTable(rng=random.Random(11)).generate(encounter)
    assert first == second

def test_custom_species_pool(encounter):
    pool = {"melon": Species("Melon", 60, 10, 30, 5, ("Rind Guard",))}
    table = WildEncounterTable(species=pool, rng=random.Random(0))
    assert table.generate(encounter).name == "Melon"

def test_trainer_encounter_fields_trainer_species():
    trainer = Encounter(
        TileDefinition(tag="arena", encounter_rate=1.0, encounter_types=("trainer",)),
        GridPosition(0, 0),
        step=3,
        encounter_type="trainer",
    )
    table = WildEncounterTable(min_level=2, max_level=2, rng=random.Random(9))

    creature = table.generate(trainer)
    assert creature.name == TRAINER_SPECIES.name
    assert creature.species == "cucumber"
    assert creature.level == 2

def test_custom_trainer_species(encounter):
    rival = Species("Pumpkin", 70, 20, 20, 4, ("Gourd Slam",))
    table = WildEncounterTable(trainer=rival, rng=random.Random(0))

    trainer = Encounter(encounter.definition, encounter.cell, step=3, encounter_type="trainer")
    assert table.generate(trainer).name == "Pumpkin"
    assert table.generate(encounter).species in WILD_SPECIES

def test_harvest():
    table = WildEncounterTable(rng=random.Random(2))
    assert table.harvest() in HARVEST_FRUITS

def test_default_partner():
    partner = default_partner()
    assert partner.name == "Cucumber"
    assert partner.level == 2
    assert partner.hp == partner.max_hp == 50
