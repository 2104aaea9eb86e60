"""
Explorer Systems - per-step game logic.

Movement drives the player between cells; encounters and interactions
are consulted when a step lands or the player asks to interact.
"""

from explorer.systems.encounter import Encounter, EncounterTrigger
from explorer.systems.interaction import InteractionResolver, InteractionTarget
from explorer.systems.movement import (
    MovementController,
    MoveResult,
    PlayerGridState,
    InFlight,
    StepOutcome,
)

__all__ = [
    "Encounter",
    "EncounterTrigger",
    "InteractionResolver",
    "InteractionTarget",
    "MovementController",
    "MoveResult",
    "PlayerGridState",
    "InFlight",
    "StepOutcome",
]
