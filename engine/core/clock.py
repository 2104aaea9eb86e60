"""
Clock abstraction for frame-driven logic.

Game logic never reads wall-clock time directly. It asks an injected
clock for the current time in milliseconds, which keeps movement,
popups and delayed events testable without real delays.

Usage:
    clock = SystemClock()
    start = clock.now()

    # In tests
    clock = ManualClock()
    clock.advance(150)
"""

from __future__ import annotations

from typing import Protocol

import pygame


class Clock(Protocol):
    """Anything that reports the current time in milliseconds."""

    def now(self) -> float:
        ...


class SystemClock:
    """Clock backed by pygame's millisecond tick counter."""

    def now(self) -> float:
        return float(pygame.time.get_ticks())


class ManualClock:
    """
    Clock that only moves when told to.

    Used by tests and by headless tools that step the simulation
    at a fixed rate.
    """

    def __init__(self, start: float = 0.0):
        self._now = float(start)

    def now(self) -> float:
        return self._now

    def advance(self, ms: float) -> float:
        """Move time forward by ms milliseconds and return the new time."""
        if ms < 0:
            raise ValueError(f"Cannot move clock backwards ({ms} ms)")
        self._now += ms
        return self._now

    def set(self, ms: float) -> None:
        """Jump to an absolute time."""
        self._now = float(ms)
