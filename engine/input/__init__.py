"""Input handling module."""

from engine.input.handler import InputHandler, InputState, EMPTY_INPUT

__all__ = [
    "InputHandler",
    "InputState",
    "EMPTY_INPUT",
]
