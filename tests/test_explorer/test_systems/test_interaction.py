import pytest
from explorer.systems.interaction import InteractionResolver
from explorer.world.grid import Direction, Grid, GridPosition

@pytest.fixture
def resolver(catalog):
    return InteractionResolver(catalog)

@pytest.fixture
def grid():
    grid = Grid(5, 5)
    grid.fill('grass')
    return grid

CENTER = GridPosition(2, 2)

def test_nothing_interactive(resolver, grid):
    assert resolver.resolve(CENTER, grid) is None

def test_up_beats_right(resolver, grid):
    grid.set_tile((2, 1), 'sign')
    grid.set_tile((3, 2), 'bush')

    target = resolver.resolve(CENTER, grid)

    assert target.tag == 'sign'
    assert target.position == (2, 1)
    assert target.direction is Direction.UP

@pytest.mark.parametrize("placed,expected", [
    ({(2, 3): 'bush', (1, 2): 'sign', (3, 2): 'statue'}, Direction.DOWN),
    ({(1, 2): 'sign', (3, 2): 'statue'}, Direction.LEFT),
    ({(3, 2): 'statue'}, Direction.RIGHT),
])
def test_probe_order(resolver, grid, placed, expected):
    for pos, tag in placed.items():
        grid.set_tile(pos, tag)
    assert resolver.resolve(CENTER, grid).direction is expected

def test_own_cell_wins(resolver, grid):
    grid.set_tile(CENTER, 'statue')
    grid.set_tile((2, 1), 'sign')

    target = resolver.resolve(CENTER, grid)

    assert target.tag == 'statue'
    assert target.direction is None

def test_edge_of_grid(resolver, grid):
    grid.set_tile((1, 0), 'bush')
    target = resolver.resolve(GridPosition(0, 0), grid)
    assert target.direction is Direction.RIGHT

def test_non_interactive_and_unknown_neighbours_ignored(resolver, grid):
    grid.set_tile((2, 1), 'tree')
    grid.set_tile((2, 3), 'mystery')
    assert resolver.resolve(CENTER, grid) is None

def test_target_actions(grid):
    from explorer.world.tiles import TileCatalog
    catalog = TileCatalog.from_document({
        'tile_types': {'special': {'well': {'interactive': True, 'special_actions': ['drink', 'look']}}}
    })
    grid.set_tile((2, 1), 'well')
    target = InteractionResolver(catalog).resolve(CENTER, grid)
    assert target.actions == ('drink', 'look')

def test_auto_trigger_only_checks_current_cell(resolver, grid):
    grid.set_tile((2, 1), 'spring')
    assert resolver.resolve_auto_trigger(CENTER, grid) is None

    grid.set_tile(CENTER, 'spring')
    target = resolver.resolve_auto_trigger(CENTER, grid)
    assert target.definition.healing

def test_auto_trigger_ignores_interactive_tiles(resolver, grid):
    grid.set_tile(CENTER, 'sign')
    assert resolver.resolve_auto_trigger(CENTER, grid) is None
