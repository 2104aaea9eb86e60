"""
Grid world explorer - wires a level's grid, camera and systems together.

Each frame the explorer:
1. fires due timers (popup expiry, delayed battle start)
2. advances the movement state machine and re-centers the camera
3. publishes the consequences of a landed step on the event bus
4. turns the frame's InputState into movement/interact intents

Default handlers for every WorldEvent are subscribed on the explorer's
own bus at priority 0. Collaborators can subscribe at a higher priority
and consume() an event to replace the default behaviour.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from pydantic import BaseModel
import jsonschema

from engine.core.actions import Action
from engine.core.clock import Clock, SystemClock
from engine.core.events import Event, EventBus, WorldEvent
from engine.core.timers import ScheduledEvent, TimerQueue
from engine.graphics.camera import Camera
from engine.input.handler import EMPTY_INPUT, InputState
from explorer.config import ExplorerConfig
from explorer.systems.encounter import Encounter, EncounterTrigger
from explorer.systems.interaction import InteractionResolver, InteractionTarget
from explorer.systems.movement import MovementController, MoveResult, PlayerGridState, StepOutcome
from explorer.world.grid import Direction, Grid, GridPosition
from explorer.world.level import Level, LevelLoader
from explorer.world.tiles import TileCatalog, TransitionSpec
from explorer.world.wild import Creature, WildEncounterTable, default_partner

logger = logging.getLogger(__name__)


# Checked in this order; the first held direction wins the frame
DIRECTION_ACTIONS: tuple[tuple[Action, Direction], ...] = (
    (Action.MOVE_UP, Direction.UP),
    (Action.MOVE_DOWN, Direction.DOWN),
    (Action.MOVE_LEFT, Direction.LEFT),
    (Action.MOVE_RIGHT, Direction.RIGHT),
)

DEFAULT_OBJECT_TEXT = "This is an interactive object."

# Message durations (ms)
TEXT_DURATION = 5000.0
MESSAGE_DURATION = 3000.0
GENERIC_DURATION = 2000.0


@dataclass
class Popup:
    """On-screen message with an optional expiry timer."""
    kind: str
    message: str
    created_at: float
    data: dict[str, Any] = field(default_factory=dict)
    timer: Optional[ScheduledEvent] = None


@dataclass(frozen=True)
class BattleRequest:
    """Everything the battle launcher needs to start a fight."""
    enemy: Creature
    player: Creature
    battle_type: str
    background: str = "garden"


@dataclass(frozen=True)
class BattleResult:
    """Reported back by the battle launcher when a fight ends."""
    victory: bool
    exp_gained: int = 0
    level_up: bool = False
    new_level: Optional[int] = None


class ExplorerState(BaseModel):
    """Serializable explorer snapshot."""
    current_world: str = ""
    current_level: str = ""
    player_col: int = 0
    player_row: int = 0
    step_count: int = 0


BattleLauncher = Callable[[BattleRequest], None]


class GridWorldExplorer:
    """
    Pokemon-style grid exploration for one level at a time.

    Usage:
        explorer = GridWorldExplorer(config, battle_launcher=start_battle)
        explorer.init("garden", "vegetable_patch_grid")

        # Each frame
        explorer.update(input_handler.update())
    """

    def __init__(
        self,
        config: Optional[ExplorerConfig] = None,
        clock: Optional[Clock] = None,
        event_bus: Optional[EventBus] = None,
        catalog: Optional[TileCatalog] = None,
        battle_launcher: Optional[BattleLauncher] = None,
        encounter_table: Optional[WildEncounterTable] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or ExplorerConfig()
        self.clock = clock or SystemClock()
        self.events = event_bus or EventBus()
        self.timers = TimerQueue(self.clock)
        self.rng = rng or random.Random(self.config.seed)

        self.catalog = catalog
        self.loader = LevelLoader(self.config, self.rng)
        self.encounter_table = encounter_table or WildEncounterTable(rng=self.rng)
        self.battle_launcher = battle_launcher
        self.partner = default_partner()

        self.camera = Camera(
            self.config.screen_width,
            self.config.screen_height,
            mode=self.config.camera_mode,
            smoothing=self.config.camera_smoothing,
        )

        # Per-level state
        self.level: Optional[Level] = None
        self.controller: Optional[MovementController] = None
        self.encounters: Optional[EncounterTrigger] = None
        self.interactions: Optional[InteractionResolver] = None
        self.current_world: str = ""
        self.current_level: str = ""

        # UI state
        self.encounter_popup: Optional[Popup] = None
        self.message: Optional[Popup] = None
        self.show_level_info = False
        self.debug = False
        self._battle_timer: Optional[ScheduledEvent] = None
        self._level_info_timer: Optional[ScheduledEvent] = None
        self._held_dropped = False

        self._setup_event_handlers()

    def _setup_event_handlers(self) -> None:
        self.events.subscribe(WorldEvent.ENCOUNTER, self._on_encounter)
        self.events.subscribe(WorldEvent.INTERACTION, self._on_interaction)
        self.events.subscribe(WorldEvent.HEALING, self._on_healing)
        self.events.subscribe(WorldEvent.TRANSITION, self._on_transition)

    # Properties

    @property
    def grid(self) -> Optional[Grid]:
        return self.level.grid if self.level else None

    @property
    def player(self) -> PlayerGridState:
        """Player movement state for the loaded level."""
        if self.controller is None:
            raise RuntimeError("No level loaded")
        return self.controller.state

    @property
    def is_ready(self) -> bool:
        return self.controller is not None

    # Level lifecycle

    def init(self, world_id: Optional[str] = None, level_id: Optional[str] = None) -> Level:
        """Load the tile catalog (if not injected) and the first level."""
        if self.catalog is None:
            self.catalog = TileCatalog.load(self.config.catalog_path)
        level = self.load_level(
            world_id or self.config.default_world,
            level_id or self.config.default_level,
        )
        logger.info("Grid world explorer initialized")
        return level

    def load_level(self, world_id: str, level_id: str) -> Level:
        """Load a level file, falling back to a generated level."""
        logger.info(f"Loading grid world: {world_id}, level: {level_id}")
        level = self.loader.load(world_id, level_id)
        self._install_level(level, world_id, level_id)
        return level

    def load_level_document(self, document: Any, world_id: str = "") -> Level:
        """Load an already-parsed level document, falling back on errors."""
        try:
            level = self.loader.from_document(document)
        except jsonschema.ValidationError as e:
            logger.error(f"Invalid level document: {e.message}")
            level = self.loader.fallback_level()
        level.world_id = world_id
        self._install_level(level, world_id, level.id)
        return level

    def _install_level(self, level: Level, world_id: str, level_id: str) -> None:
        """Replace every per-level object wholesale."""
        if self.catalog is None:
            self.catalog = TileCatalog.fallback()

        self.level = level
        self.current_world = world_id
        self.current_level = level_id

        self.encounters = EncounterTrigger(self.rng, self.config.encounter_min_spacing)
        self.interactions = InteractionResolver(self.catalog)
        self.controller = MovementController(
            level.grid,
            self.catalog,
            self.clock,
            self.encounters,
            self.interactions,
            movement_speed=self.config.movement_speed,
            start=level.player_start,
        )
        self._follow_player()
        self.camera.snap()

        self.timers.cancel(self._level_info_timer)
        self.show_level_info = True
        self._level_info_timer = self.timers.schedule(
            self.config.level_info_duration, self._hide_level_info, name="level_info",
        )

        self.events.publish(WorldEvent.LEVEL_LOADED, level=level)

    def _hide_level_info(self) -> None:
        self.show_level_info = False

    def _follow_player(self) -> None:
        self.camera.follow(self.player.current_pixel, self.level.grid, self.level.grid.tile_size)

    # Frame update

    def update(self, input_state: InputState = EMPTY_INPUT) -> Optional[StepOutcome]:
        """
        Run one frame.

        Returns:
            The StepOutcome if a step landed this frame
        """
        self.timers.update()
        if self.controller is None:
            return None

        outcome = self.controller.tick()
        self._follow_player()
        if outcome is not None:
            self._publish_outcome(outcome)

        self.handle_input(input_state)
        return outcome

    def _publish_outcome(self, outcome: StepOutcome) -> None:
        self.events.publish(WorldEvent.STEP_COMPLETED, cell=outcome.cell, step=outcome.step)

        if outcome.encounter is not None:
            self.events.publish(
                WorldEvent.ENCOUNTER,
                definition=outcome.encounter.definition,
                cell=outcome.encounter.cell,
                encounter=outcome.encounter,
            )

        trigger = outcome.auto_trigger
        if trigger is not None:
            if trigger.definition.healing:
                self.events.publish(WorldEvent.HEALING, cell=trigger.position)
            if trigger.definition.transition is not None:
                self.events.publish(
                    WorldEvent.TRANSITION,
                    transition=trigger.definition.transition,
                    cell=trigger.position,
                )

    def handle_input(self, input_state: InputState) -> None:
        """Translate one frame of input into intents."""
        if input_state.is_just_pressed(Action.DEBUG_TOGGLE):
            self.toggle_debug()

        if (
            input_state.clicked
            or input_state.is_just_pressed(Action.CONFIRM)
            or input_state.is_just_pressed(Action.CANCEL)
        ):
            self.dismiss()

        held = [(a, d) for a, d in DIRECTION_ACTIONS if input_state.is_pressed(a)]
        if self._held_dropped:
            # Keys held through an encounter count once released or re-pressed
            if not held or any(input_state.is_just_pressed(a) for a, _ in held):
                self._held_dropped = False
            else:
                held = []

        if held:
            self.move(held[0][1])

        if input_state.is_just_pressed(Action.INTERACT):
            self.interact()

    # Intents

    def move(self, direction: Direction) -> MoveResult:
        """Issue a movement intent."""
        if self.controller is None:
            return MoveResult.REJECTED
        return self.controller.request_move(direction)

    def interact(self) -> Optional[InteractionTarget]:
        """Interact with the current or an adjacent tile."""
        if self.controller is None:
            return None

        target = self.interactions.resolve(self.player.current_cell, self.level.grid)
        if target is None:
            return None

        logger.info(f"Interaction triggered: '{target.tag}' at {target.position}")
        self.events.publish(
            WorldEvent.INTERACTION,
            definition=target.definition,
            cell=target.position,
            target=target,
        )
        return target

    def set_player_position(self, pos: tuple[int, int]) -> bool:
        """Teleport the player and re-center the camera."""
        if self.controller is None or not self.controller.set_position(pos):
            return False
        self._follow_player()
        self.camera.snap()
        return True

    def toggle_debug(self) -> None:
        self.debug = not self.debug
        logger.info(f"Debug mode: {'ON' if self.debug else 'OFF'}")

    # Popups and messages

    def show_message(
        self,
        text: str,
        duration: float = MESSAGE_DURATION,
        kind: str = "message",
    ) -> Popup:
        """Show a message that closes itself after duration ms."""
        if self.message is not None:
            self.timers.cancel(self.message.timer)

        popup = Popup(kind=kind, message=text, created_at=self.clock.now())
        popup.timer = self.timers.schedule(
            duration, lambda: self._expire_message(popup), name=f"message:{kind}",
        )
        self.message = popup
        self.events.publish(WorldEvent.MESSAGE_SHOWN, text=text, kind=kind)
        return popup

    def _expire_message(self, popup: Popup) -> None:
        if self.message is popup:
            self.message = None

    def _expire_encounter_popup(self, popup: Popup) -> None:
        if self.encounter_popup is popup:
            self.encounter_popup = None

    def dismiss(self) -> bool:
        """
        Close the encounter popup, or failing that the message.

        Returns:
            True if something was closed
        """
        if self.encounter_popup is not None:
            self.timers.cancel(self.encounter_popup.timer)
            self.encounter_popup = None
            return True
        if self.message is not None:
            self.timers.cancel(self.message.timer)
            self.message = None
            return True
        return False

    # Default collaborators

    def _on_encounter(self, event: Event) -> None:
        encounter: Encounter = event['encounter']

        # Stop walking into the encounter
        if self.controller is not None:
            self.controller.clear_pending()
        self._held_dropped = True

        creature = self.encounter_table.generate(encounter)
        if encounter.encounter_type == "trainer":
            battle_type = "trainer"
            message = "A cucumber trainer wants to battle!"
        else:
            battle_type = "fruit"
            message = f"A wild {creature.name} appeared!"

        popup = Popup(
            kind=battle_type,
            message=message,
            created_at=self.clock.now(),
            data={'encounter': encounter, 'creature': creature},
        )
        popup.timer = self.timers.schedule(
            self.config.encounter_popup_timeout,
            lambda: self._expire_encounter_popup(popup),
            name="encounter_popup",
        )
        self.encounter_popup = popup

        self.timers.cancel(self._battle_timer)
        self._battle_timer = self.timers.schedule(
            self.config.battle_delay,
            lambda: self.start_battle(creature, battle_type),
            name="battle",
        )

    def start_battle(self, enemy: Creature, battle_type: str) -> BattleRequest:
        """Hand a battle request to the launcher."""
        logger.info(f"Starting battle with: {enemy.name} (level {enemy.level})")
        request = BattleRequest(
            enemy=enemy,
            player=self.partner,
            battle_type=battle_type,
            background=self.current_world or "garden",
        )

        self._battle_timer = None
        if self.encounter_popup is not None:
            self.timers.cancel(self.encounter_popup.timer)
            self.encounter_popup = None

        self.events.publish(WorldEvent.BATTLE_REQUESTED, request=request)
        if self.battle_launcher is not None:
            self.battle_launcher(request)
        return request

    def handle_battle_end(self, result: BattleResult) -> None:
        """Report the outcome of a battle started by start_battle()."""
        logger.info(f"Battle ended: {'victory' if result.victory else 'defeat'}")
        name = self.partner.name
        if not result.victory:
            self.show_message(f"{name} fainted!")
            return

        self.show_message(f"{name} gained {result.exp_gained} EXP!")
        if result.level_up:
            self.show_message(f"{name} grew to level {result.new_level}!")

    def _on_interaction(self, event: Event) -> None:
        target: InteractionTarget = event['target']
        definition = target.definition

        if definition.has_text:
            obj = self.level.object_at(target.position) if self.level else None
            text = (obj.text if obj else None) or DEFAULT_OBJECT_TEXT
            self.show_message(text, TEXT_DURATION, kind="text")
        elif definition.harvestable:
            fruit = self.encounter_table.harvest()
            self.show_message(f"You harvested a {fruit}!", MESSAGE_DURATION, kind="harvest")
        elif definition.healing:
            self._heal()
        else:
            self.show_message(
                f"You examined the {definition.display_name}.",
                GENERIC_DURATION,
                kind="generic",
            )

    def _on_healing(self, event: Event) -> None:
        self._heal()

    def _heal(self) -> None:
        self.partner.hp = self.partner.max_hp
        self.show_message("Your fruits have been healed!", MESSAGE_DURATION, kind="healing")

    def _on_transition(self, event: Event) -> None:
        transition: TransitionSpec = event['transition']
        logger.info(f"Transition triggered: {transition}")
        if not transition.target_level:
            return

        self.load_level(transition.target_world or self.current_world, transition.target_level)
        if transition.target_position is not None:
            self.set_player_position(transition.target_position)

    # Persistence

    def get_state(self) -> ExplorerState:
        """Snapshot for saving."""
        player = self.player
        return ExplorerState(
            current_world=self.current_world,
            current_level=self.current_level,
            player_col=player.current_cell.col,
            player_row=player.current_cell.row,
            step_count=player.step_count,
        )

    def load_state(self, state: ExplorerState) -> None:
        """Restore a snapshot, loading its level if another one is active."""
        if (
            self.controller is None
            or state.current_world != self.current_world
            or state.current_level != self.current_level
        ):
            self.load_level(state.current_world, state.current_level)

        self.set_player_position(GridPosition(state.player_col, state.player_row))
        self.player.step_count = state.step_count
        self.player.last_encounter_step = state.step_count
