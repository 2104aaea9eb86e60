"""
Input action definitions.

Actions abstract raw keys into semantic intents. Exploration code
checks Actions, never key codes, so bindings can change without
touching game logic.

Usage:
    if input_state.is_pressed(Action.MOVE_RIGHT):
        ...

    if input_state.is_just_pressed(Action.INTERACT):
        ...
"""

from enum import Enum, auto

import pygame


class Action(Enum):
    """Semantic input actions understood by the explorer."""

    # Movement
    MOVE_UP = auto()
    MOVE_DOWN = auto()
    MOVE_LEFT = auto()
    MOVE_RIGHT = auto()

    # Actions
    INTERACT = auto()
    CONFIRM = auto()
    CANCEL = auto()

    # Debug
    DEBUG_TOGGLE = auto()


DEFAULT_KEY_BINDINGS: dict[Action, list[int]] = {
    # Movement (WASD + arrows)
    Action.MOVE_UP: [pygame.K_UP, pygame.K_w],
    Action.MOVE_DOWN: [pygame.K_DOWN, pygame.K_s],
    Action.MOVE_LEFT: [pygame.K_LEFT, pygame.K_a],
    Action.MOVE_RIGHT: [pygame.K_RIGHT, pygame.K_d],

    # Actions
    Action.INTERACT: [pygame.K_SPACE],
    Action.CONFIRM: [pygame.K_RETURN],
    Action.CANCEL: [pygame.K_ESCAPE],

    # Debug
    Action.DEBUG_TOGGLE: [pygame.K_F3],
}
