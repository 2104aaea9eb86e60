import json
from pathlib import Path
import pytest
from engine.core.actions import Action
from engine.core.events import WorldEvent
from engine.input.handler import InputState, EMPTY_INPUT
from explorer.config import ExplorerConfig
from explorer.systems.movement import MoveResult
from explorer.world.explorer import (
    BattleRequest, BattleResult, ExplorerState, GridWorldExplorer, DEFAULT_OBJECT_TEXT,
)
from explorer.world.grid import Direction
from explorer.world.tiles import TileCatalog
from explorer.world.wild import HARVEST_FRUITS

DATA_PATH = Path(__file__).resolve().parents[3] / "data"
SPEED = 150

def scenario_document(**overrides):
    """10x10 grass with a tree at (5, 5), player at (5, 4)."""
    layout = [['grass'] * 10 for _ in range(10)]
    layout[5][5] = 'tree'
    document = {
        "id": "scenario",
        "name": "Scenario",
        "width": 10,
        "height": 10,
        "grid_layout": layout,
        "player_start": {"x": 5, "y": 4},
    }
    document.update(overrides)
    return document

def place(document, pos, tag):
    col, row = pos
    document['grid_layout'][row][col] = tag
    return document

def write_level(data_path, world, level, document):
    path = Path(data_path) / "worlds" / world / "levels" / f"{level}.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(document, f)

def step(explorer, clock, action):
    """Start a step with a fresh key press and let it land."""
    explorer.update(InputState.holding(action))
    clock.advance(SPEED)
    return explorer.update()

@pytest.fixture
def battles():
    return []

@pytest.fixture
def config(tmp_path):
    return ExplorerConfig(data_path=tmp_path)

@pytest.fixture
def explorer(config, manual_clock, rng, catalog, battles):
    return GridWorldExplorer(
        config,
        clock=manual_clock,
        catalog=catalog,
        battle_launcher=battles.append,
        rng=rng,
    )

@pytest.fixture
def recorded(explorer):
    """Every WorldEvent the explorer publishes, in order."""
    events = []
    for event_type in WorldEvent:
        explorer.events.subscribe(event_type, events.append, weak=False)
    return events

def types(events):
    return [event.type for event in events]

# Movement

def test_scenario_down_rejected_right_accepted(explorer, manual_clock):
    explorer.load_level_document(scenario_document())

    assert explorer.move(Direction.DOWN) is MoveResult.REJECTED
    assert explorer.player.current_cell == (5, 4)
    assert not explorer.player.is_moving

    outcome = step(explorer, manual_clock, Action.MOVE_RIGHT)

    assert outcome.cell == (6, 4)
    assert explorer.player.current_cell == (6, 4)
    assert explorer.player.step_count == 1

def test_update_before_load_is_safe(explorer):
    assert explorer.update(InputState.holding(Action.MOVE_UP, Action.INTERACT)) is None
    assert explorer.move(Direction.UP) is MoveResult.REJECTED
    assert explorer.interact() is None
    with pytest.raises(RuntimeError):
        explorer.player

def test_direction_priority(explorer):
    explorer.load_level_document(scenario_document())

    explorer.update(InputState.holding(Action.MOVE_RIGHT, Action.MOVE_LEFT, Action.MOVE_UP))

    assert explorer.player.movement.direction is Direction.UP

def test_held_direction_walks_one_tile_per_step(explorer, manual_clock):
    explorer.load_level_document(scenario_document(player_start={"x": 0, "y": 0}))
    held = InputState.holding(Action.MOVE_RIGHT, fresh=False)

    for _ in range(10):
        explorer.update(held)
        manual_clock.advance(50)

    assert explorer.player.step_count == 3
    assert explorer.player.current_cell == (3, 0)

def test_step_completed_event(explorer, manual_clock, recorded):
    explorer.load_level_document(scenario_document())
    step(explorer, manual_clock, Action.MOVE_UP)

    completed = [e for e in recorded if e.type is WorldEvent.STEP_COMPLETED]
    assert len(completed) == 1
    assert completed[0]["cell"] == (5, 3)
    assert completed[0]["step"] == 1

# Camera

def test_camera_centers_on_player(explorer):
    explorer.load_level_document({"width": 100, "height": 100, "tile_map": {}, "player_start": {"x": 50, "y": 50}})
    assert explorer.camera.offset == (1016, 1216)

def test_camera_tracks_mid_step(explorer, manual_clock):
    explorer.load_level_document({"width": 100, "height": 100, "tile_map": {}, "player_start": {"x": 50, "y": 50}})

    explorer.update(InputState.holding(Action.MOVE_RIGHT))
    manual_clock.advance(SPEED / 2)
    explorer.update()

    assert explorer.camera.x == pytest.approx(1032)

def test_camera_small_world_stays_at_origin(explorer):
    explorer.load_level_document(scenario_document())
    assert explorer.camera.offset == (0, 0)

# Level lifecycle

def test_level_loaded_event_and_banner(explorer, manual_clock, recorded):
    level = explorer.load_level_document(scenario_document(), world_id="garden")

    assert types(recorded) == [WorldEvent.LEVEL_LOADED]
    assert recorded[0]["level"] is level
    assert explorer.current_world == "garden"
    assert explorer.current_level == "scenario"
    assert explorer.show_level_info

    manual_clock.advance(2999)
    explorer.update()
    assert explorer.show_level_info

    manual_clock.advance(1)
    explorer.update()
    assert not explorer.show_level_info

def test_invalid_document_falls_back(explorer):
    level = explorer.load_level_document({"tile_map": "nope"})

    assert level.is_fallback
    assert explorer.player.current_cell == level.grid.center_cell

def test_init_without_data_falls_back(manual_clock, tmp_path):
    explorer = GridWorldExplorer(ExplorerConfig(data_path=tmp_path), clock=manual_clock)
    level = explorer.init()

    assert explorer.catalog.is_fallback
    assert level.is_fallback
    assert explorer.current_world == "garden"
    assert explorer.current_level == "vegetable_patch_grid"
    assert explorer.player.current_cell == (18, 12)
    assert not explorer.catalog.is_walkable("tree")

def test_init_with_bundled_data(manual_clock):
    explorer = GridWorldExplorer(ExplorerConfig(data_path=DATA_PATH), clock=manual_clock)
    level = explorer.init()

    assert not explorer.catalog.is_fallback
    assert not level.is_fallback
    assert explorer.player.current_cell == (4, 6)

# Encounters

def encounter_level(explorer):
    document = scenario_document()
    for col in (6, 7, 8):
        place(document, (col, 4), 'tall_grass')
    explorer.load_level_document(document)

def test_encounter_popup_then_battle(explorer, manual_clock, recorded, battles):
    encounter_level(explorer)

    step(explorer, manual_clock, Action.MOVE_RIGHT)
    step(explorer, manual_clock, Action.MOVE_RIGHT)
    assert explorer.encounter_popup is None

    outcome = step(explorer, manual_clock, Action.MOVE_RIGHT)

    assert outcome.encounter is not None
    encounters = [e for e in recorded if e.type is WorldEvent.ENCOUNTER]
    assert len(encounters) == 1
    assert encounters[0]["cell"] == (8, 4)
    assert encounters[0]["definition"].tag == 'tall_grass'

    popup = explorer.encounter_popup
    assert popup.kind == "fruit"
    assert popup.message.startswith("A wild ")
    assert battles == []

    manual_clock.advance(1999)
    explorer.update()
    assert battles == []

    manual_clock.advance(1)
    explorer.update()

    assert len(battles) == 1
    request = battles[0]
    assert isinstance(request, BattleRequest)
    assert request.battle_type == "fruit"
    assert request.player.name == "Cucumber"
    assert request.enemy is popup.data['creature']
    assert explorer.encounter_popup is None
    assert WorldEvent.BATTLE_REQUESTED in types(recorded)

def test_click_dismisses_popup_but_battle_still_starts(explorer, manual_clock, battles):
    encounter_level(explorer)
    for _ in range(3):
        step(explorer, manual_clock, Action.MOVE_RIGHT)
    assert explorer.encounter_popup is not None

    explorer.update(InputState(clicked=True))
    assert explorer.encounter_popup is None

    manual_clock.advance(2000)
    explorer.update()
    assert len(battles) == 1

def test_popup_closes_itself(manual_clock, rng, catalog, tmp_path):
    explorer = GridWorldExplorer(
        ExplorerConfig(data_path=tmp_path, battle_delay=20000),
        clock=manual_clock,
        catalog=catalog,
        rng=rng,
    )
    encounter_level(explorer)
    for _ in range(3):
        step(explorer, manual_clock, Action.MOVE_RIGHT)
    assert explorer.encounter_popup is not None

    manual_clock.advance(10000)
    explorer.update()
    assert explorer.encounter_popup is None

def test_held_keys_dropped_on_encounter(explorer, manual_clock):
    encounter_level(explorer)
    step(explorer, manual_clock, Action.MOVE_RIGHT)
    step(explorer, manual_clock, Action.MOVE_RIGHT)

    held = InputState.holding(Action.MOVE_RIGHT, fresh=False)
    explorer.update(InputState.holding(Action.MOVE_RIGHT))
    manual_clock.advance(SPEED)
    explorer.update(held)

    assert explorer.encounter_popup is not None
    assert not explorer.player.is_moving

    explorer.update(held)
    assert not explorer.player.is_moving

    explorer.update(InputState.holding(Action.MOVE_RIGHT))
    assert explorer.player.is_moving

def test_trainer_encounter(manual_clock, rng, battles, tmp_path):
    catalog = TileCatalog.from_document({
        'tile_types': {'terrain': {
            'grass': {},
            'arena': {'encounter_rate': 1.0, 'encounter_types': ['trainer']},
        }}
    })
    explorer = GridWorldExplorer(
        ExplorerConfig(data_path=tmp_path),
        clock=manual_clock,
        catalog=catalog,
        battle_launcher=battles.append,
        rng=rng,
    )
    document = scenario_document()
    for col in (6, 7, 8):
        place(document, (col, 4), 'arena')
    explorer.load_level_document(document)

    for _ in range(3):
        step(explorer, manual_clock, Action.MOVE_RIGHT)

    assert explorer.encounter_popup.message == "A cucumber trainer wants to battle!"
    manual_clock.advance(2000)
    explorer.update()
    assert battles[0].battle_type == "trainer"
    assert battles[0].enemy.species == "cucumber"

def test_battle_end_messages(explorer, recorded):
    explorer.handle_battle_end(BattleResult(victory=True, exp_gained=30, level_up=True, new_level=3))

    shown = [e["text"] for e in recorded if e.type is WorldEvent.MESSAGE_SHOWN]
    assert shown == ["Cucumber gained 30 EXP!", "Cucumber grew to level 3!"]
    assert explorer.message.message == "Cucumber grew to level 3!"

    explorer.handle_battle_end(BattleResult(victory=False))
    assert explorer.message.message == "Cucumber fainted!"

# Interaction

def test_interact_with_sign_text(explorer, manual_clock, recorded):
    document = place(scenario_document(), (5, 3), 'sign')
    document["interactive_objects"] = [{"position": {"x": 5, "y": 3}, "text": "Hello garden"}]
    explorer.load_level_document(document)

    explorer.update(InputState.holding(Action.INTERACT))

    interactions = [e for e in recorded if e.type is WorldEvent.INTERACTION]
    assert len(interactions) == 1
    assert interactions[0]["cell"] == (5, 3)
    assert explorer.message.message == "Hello garden"
    assert explorer.message.kind == "text"

    # Holding the key does not interact again
    explorer.update(InputState.holding(Action.INTERACT, fresh=False))
    assert len([e for e in recorded if e.type is WorldEvent.INTERACTION]) == 1

    manual_clock.advance(5000)
    explorer.update()
    assert explorer.message is None

def test_sign_without_text_uses_default(explorer):
    explorer.load_level_document(place(scenario_document(), (5, 3), 'sign'))
    explorer.interact()
    assert explorer.message.message == DEFAULT_OBJECT_TEXT

def test_harvest(explorer):
    explorer.load_level_document(place(scenario_document(), (6, 4), 'bush'))
    target = explorer.interact()

    assert target.direction is Direction.RIGHT
    assert explorer.message.kind == "harvest"
    fruit = explorer.message.message[len("You harvested a "):-1]
    assert fruit in HARVEST_FRUITS

def test_examine(explorer, manual_clock):
    explorer.load_level_document(place(scenario_document(), (4, 4), 'statue'))
    explorer.interact()

    assert explorer.message.message == "You examined the Statue."
    manual_clock.advance(2000)
    explorer.update()
    assert explorer.message is None

def test_nothing_to_interact_with(explorer, recorded):
    explorer.load_level_document(scenario_document())
    assert explorer.interact() is None
    assert WorldEvent.INTERACTION not in types(recorded)

def test_interaction_handler_can_override_default(explorer):
    explorer.load_level_document(place(scenario_document(), (5, 3), 'sign'))
    seen = []

    def custom(event):
        seen.append(event["target"].tag)
        event.consume()

    explorer.events.subscribe(WorldEvent.INTERACTION, custom, priority=10)
    explorer.interact()

    assert seen == ['sign']
    assert explorer.message is None

# Auto triggers

def test_healing_tile(explorer, manual_clock, recorded):
    explorer.load_level_document(place(scenario_document(), (6, 4), 'spring'))
    explorer.partner.hp = 1

    step(explorer, manual_clock, Action.MOVE_RIGHT)

    assert WorldEvent.HEALING in types(recorded)
    assert explorer.partner.hp == explorer.partner.max_hp
    assert explorer.message.message == "Your fruits have been healed!"

def test_transition_loads_target_level(explorer, config, manual_clock, recorded):
    write_level(config.data_path, "garden", "house", {"id": "house", "name": "House", "width": 5, "height": 5, "tile_map": {}})
    explorer.load_level_document(place(scenario_document(), (6, 4), 'door'), world_id="garden")

    step(explorer, manual_clock, Action.MOVE_RIGHT)

    assert WorldEvent.TRANSITION in types(recorded)
    assert explorer.current_world == "garden"
    assert explorer.current_level == "house"
    assert explorer.level.name == "House"
    assert explorer.player.current_cell == (1, 1)
    assert explorer.player.step_count == 0
    assert types(recorded).count(WorldEvent.LEVEL_LOADED) == 2

def test_transition_to_missing_level_falls_back(explorer, manual_clock):
    explorer.load_level_document(place(scenario_document(), (6, 4), 'door'), world_id="garden")

    step(explorer, manual_clock, Action.MOVE_RIGHT)

    assert explorer.level.is_fallback
    assert explorer.current_level == "house"

# Messages

def test_new_message_replaces_old(explorer, manual_clock):
    explorer.show_message("first", 3000)
    manual_clock.advance(1000)
    explorer.show_message("second", 3000)

    manual_clock.advance(2000)
    explorer.update()
    assert explorer.message.message == "second"

    manual_clock.advance(1000)
    explorer.update()
    assert explorer.message is None

def test_dismiss(explorer):
    assert not explorer.dismiss()
    explorer.show_message("hello")
    assert explorer.dismiss()
    assert explorer.message is None

def test_confirm_dismisses_message(explorer):
    explorer.load_level_document(scenario_document())
    explorer.show_message("hello")
    explorer.update(InputState.holding(Action.CONFIRM))
    assert explorer.message is None

def test_cancel_dismisses_message(explorer):
    explorer.load_level_document(scenario_document())
    explorer.show_message("hello")
    explorer.update(InputState.holding(Action.CANCEL))
    assert explorer.message is None

def test_debug_toggle(explorer):
    explorer.load_level_document(scenario_document())
    explorer.update(InputState.holding(Action.DEBUG_TOGGLE))
    assert explorer.debug
    explorer.update(InputState.holding(Action.DEBUG_TOGGLE, fresh=False))
    assert explorer.debug
    explorer.update(InputState.holding(Action.DEBUG_TOGGLE))
    assert not explorer.debug

# State

def test_state_round_trip(explorer, config, manual_clock, rng, catalog):
    write_level(config.data_path, "garden", "scenario", scenario_document())
    explorer.load_level("garden", "scenario")
    step(explorer, manual_clock, Action.MOVE_RIGHT)

    state = explorer.get_state()
    assert state == ExplorerState(
        current_world="garden",
        current_level="scenario",
        player_col=6,
        player_row=4,
        step_count=1,
    )

    restored = GridWorldExplorer(config, clock=manual_clock, catalog=catalog, rng=rng)
    restored.load_state(state)

    assert restored.current_level == "scenario"
    assert restored.player.current_cell == (6, 4)
    assert restored.player.step_count == 1
