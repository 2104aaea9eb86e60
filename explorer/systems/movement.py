"""
Movement system - tile-stepping with timed interpolation.

The player is always either Idle on a cell or InFlight between two
cells. A step takes `movement_speed` milliseconds; during that time the
pixel position is interpolated and at most one further direction can
be queued (the newest wins). Queued directions are re-issued the moment
a step lands, which gives continuous walking while a key is held.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from engine.core.clock import Clock
from explorer.systems.encounter import Encounter, EncounterTrigger
from explorer.systems.interaction import InteractionResolver, InteractionTarget
from explorer.world.grid import Direction, Grid, GridPosition, PixelPosition
from explorer.world.tiles import TileCatalog

logger = logging.getLogger(__name__)


class MoveResult(Enum):
    """Outcome of a movement intent."""
    STARTED = auto()
    QUEUED = auto()
    REJECTED = auto()


@dataclass(frozen=True)
class InFlight:
    """An in-progress step between two cells."""
    origin: PixelPosition
    destination: PixelPosition
    target_cell: GridPosition
    direction: Direction
    start_time: float
    duration: float

    def progress(self, now: float) -> float:
        """Fraction of the step completed, clamped to [0, 1]."""
        if self.duration <= 0:
            return 1.0
        return max(0.0, min((now - self.start_time) / self.duration, 1.0))


@dataclass
class PlayerGridState:
    """
    Player position and movement bookkeeping.

    Attributes:
        current_cell: Cell the player occupies (the origin while InFlight)
        current_pixel: World pixel position, interpolated while InFlight
        movement: The in-progress step, None when Idle
        pending_direction: At most one direction queued during a step
        step_count: Completed steps since the level loaded
        last_encounter_step: step_count when the last encounter fired
        facing: Direction of the last step started
    """
    current_cell: GridPosition
    current_pixel: PixelPosition
    movement: Optional[InFlight] = None
    pending_direction: Optional[Direction] = None
    step_count: int = 0
    last_encounter_step: int = 0
    facing: Direction = Direction.DOWN

    @property
    def is_moving(self) -> bool:
        return self.movement is not None


@dataclass(frozen=True)
class StepOutcome:
    """Consequences of a step that just landed, in the order they ran."""
    cell: GridPosition
    step: int
    encounter: Optional[Encounter] = None
    auto_trigger: Optional[InteractionTarget] = None
    next_move: Optional[MoveResult] = None


class MovementController:
    """
    Drives the player's grid movement state machine.

    Usage:
        controller = MovementController(grid, catalog, clock, encounters, interactions)
        controller.request_move(Direction.RIGHT)

        # Each frame
        outcome = controller.tick()
        if outcome and outcome.encounter:
            ...
    """

    def __init__(
        self,
        grid: Grid,
        catalog: TileCatalog,
        clock: Clock,
        encounters: EncounterTrigger,
        interactions: InteractionResolver,
        movement_speed: float = 150.0,
        start: Optional[GridPosition] = None,
    ):
        self.grid = grid
        self.catalog = catalog
        self.clock = clock
        self.encounters = encounters
        self.interactions = interactions
        self.movement_speed = movement_speed

        cell = start if start is not None and grid.is_valid(start) else grid.center_cell
        self.state = PlayerGridState(
            current_cell=GridPosition(*cell),
            current_pixel=grid.center_pixel(cell),
        )

    @property
    def is_moving(self) -> bool:
        return self.state.is_moving

    def can_move_to(self, pos: GridPosition) -> bool:
        """In bounds and walkable (empty or unknown tiles are walkable)."""
        if not self.grid.is_valid(pos):
            return False
        return self.catalog.is_walkable(self.grid.get_tile(pos))

    def request_move(self, direction: Direction) -> MoveResult:
        """
        Handle a directional intent.

        Idle: start a step if the target cell can be entered.
        InFlight: replace the queued direction.
        """
        state = self.state
        if state.movement is not None:
            state.pending_direction = direction
            return MoveResult.QUEUED

        target = state.current_cell.offset(direction)
        if not self.can_move_to(target):
            return MoveResult.REJECTED

        state.facing = direction
        state.movement = InFlight(
            origin=state.current_pixel,
            destination=self.grid.center_pixel(target),
            target_cell=target,
            direction=direction,
            start_time=self.clock.now(),
            duration=self.movement_speed,
        )
        return MoveResult.STARTED

    def clear_pending(self) -> None:
        """Drop the queued direction, if any."""
        self.state.pending_direction = None

    def set_position(self, pos: tuple[int, int]) -> bool:
        """
        Teleport to a cell, cancelling any step in progress.

        Returns:
            False (and no change) if the cell is outside the grid
        """
        if not self.grid.is_valid(pos):
            return False

        cell = GridPosition(*pos)
        self.state.current_cell = cell
        self.state.current_pixel = self.grid.center_pixel(cell)
        self.state.movement = None
        self.state.pending_direction = None
        logger.debug(f"Player positioned at grid {cell}, pixel {self.state.current_pixel}")
        return True

    def tick(self) -> Optional[StepOutcome]:
        """
        Advance the in-flight step.

        Returns:
            StepOutcome when a step landed this tick, else None
        """
        movement = self.state.movement
        if movement is None:
            return None

        progress = movement.progress(self.clock.now())
        self.state.current_pixel = movement.origin.lerp(movement.destination, progress)

        if progress < 1.0:
            return None
        return self._complete(movement)

    def _complete(self, movement: InFlight) -> StepOutcome:
        state = self.state
        state.current_cell = movement.target_cell
        state.current_pixel = movement.destination
        state.movement = None
        state.step_count += 1
        logger.debug(f"Step {state.step_count} landed on {state.current_cell}")

        # (a) random encounter
        definition = self.catalog.lookup(self.grid.get_tile(state.current_cell))
        encounter = self.encounters.maybe_fire(
            state.current_cell,
            definition,
            state.step_count,
            state.last_encounter_step,
        )
        if encounter is not None:
            state.last_encounter_step = state.step_count

        # (b) tiles that fire when stepped on
        auto_trigger = self.interactions.resolve_auto_trigger(state.current_cell, self.grid)

        # (c) queued direction
        next_move = None
        if state.pending_direction is not None:
            direction = state.pending_direction
            state.pending_direction = None
            next_move = self.request_move(direction)

        return StepOutcome(
            cell=state.current_cell,
            step=state.step_count,
            encounter=encounter,
            auto_trigger=auto_trigger,
            next_move=next_move,
        )
