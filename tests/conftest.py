import os
import random
import sys
import pytest
from unittest.mock import MagicMock, patch

# Ensure engine modules can be imported
sys.path.append(os.getcwd())

@pytest.fixture(autouse=True)
def mock_pygame():
    """
    Global mock for pygame to allow headless testing.
    Autoused for all tests to prevent accidental window creation.
    """
    with patch('pygame.init'), \
         patch('pygame.display'), \
         patch('pygame.event'), \
         patch('pygame.time'), \
         patch('pygame.key'), \
         patch('pygame.mouse'), \
         patch('pygame.Surface'):

        import pygame
        pygame.time.get_ticks = MagicMock(return_value=0)

        yield

@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from engine.core.events import EventBus
    return EventBus()

@pytest.fixture
def manual_clock():
    """Clock that only moves when a test advances it."""
    from engine.core.clock import ManualClock
    return ManualClock()

@pytest.fixture
def rng():
    """Seeded random source so rolls are repeatable."""
    return random.Random(1234)

@pytest.fixture
def catalog():
    """
    Small catalog covering every tile behaviour.

    grass has no encounters so movement tests stay deterministic.
    """
    from explorer.world.tiles import TileCatalog
    return TileCatalog.from_document({
        'tile_types': {
            'terrain': {
                'grass': {'walkable': True, 'encounter_rate': 0.0},
                'tall_grass': {'walkable': True, 'encounter_rate': 1.0},
                'path': {'walkable': True},
            },
            'obstacles': {
                'tree': {'walkable': False, 'blocks_movement': True},
                'bush': {'walkable': False, 'interactive': True, 'harvestable': True},
            },
            'special': {
                'sign': {'name': 'Sign', 'walkable': False, 'interactive': True, 'has_text': True},
                'statue': {'name': 'Statue', 'walkable': False, 'interactive': True},
                'spring': {'auto_trigger': True, 'healing': True},
                'door': {'auto_trigger': True, 'transition': {'target_level': 'house', 'target_position': {'x': 1, 'y': 1}}},
            },
        }
    }, source="test")

@pytest.fixture
def scenario_grid():
    """10x10 grass grid with a tree at (5, 5)."""
    from explorer.world.grid import Grid
    grid = Grid(10, 10, tile_size=32)
    grid.fill('grass')
    grid.set_tile((5, 5), 'tree')
    return grid
