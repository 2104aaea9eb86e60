"""
Grid Explorer engine layer.

Game-agnostic building blocks the explorer is wired from: injected
clocks, timed events, the typed event bus, input actions and the
snap camera.

Quick Start:
    from engine.core import EventBus, ManualClock, WorldEvent
    from engine.input import InputHandler

    bus = EventBus()
    bus.subscribe(WorldEvent.ENCOUNTER, on_encounter)
"""

__version__ = "0.1.0"

from engine.core import (
    Clock,
    SystemClock,
    ManualClock,
    TimerQueue,
    EventBus,
    Event,
    WorldEvent,
    Action,
)
from engine.graphics import Camera, CameraMode, compute_offset
from engine.input import InputHandler, InputState

__all__ = [
    # Time
    "Clock",
    "SystemClock",
    "ManualClock",
    "TimerQueue",
    # Events
    "EventBus",
    "Event",
    "WorldEvent",
    # Input
    "InputHandler",
    "InputState",
    "Action",
    # Graphics
    "Camera",
    "CameraMode",
    "compute_offset",
]
