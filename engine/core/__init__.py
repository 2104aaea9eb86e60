"""
Core engine module.

Exports:
- Clock, SystemClock, ManualClock: Injected time sources
- TimerQueue, ScheduledEvent: Clock-driven delayed callbacks
- EventBus, Event, WorldEvent: Event system
- Action: Input actions
"""

from engine.core.clock import Clock, SystemClock, ManualClock
from engine.core.timers import TimerQueue, ScheduledEvent
from engine.core.events import EventBus, Event, EventHandler, WorldEvent
from engine.core.actions import Action, DEFAULT_KEY_BINDINGS

__all__ = [
    # Time
    "Clock",
    "SystemClock",
    "ManualClock",
    "TimerQueue",
    "ScheduledEvent",
    # Events
    "EventBus",
    "Event",
    "EventHandler",
    "WorldEvent",
    # Input
    "Action",
    "DEFAULT_KEY_BINDINGS",
]
