"""
Input handler with action-based abstraction.

Translates raw pygame keyboard and mouse events into semantic Actions,
then hands game logic an explicit per-frame InputState snapshot
instead of a shared mutable key table.

Usage:
    handler = InputHandler()

    for event in pygame.event.get():
        handler.process_event(event)

    state = handler.update()
    explorer.update(state)
"""

from __future__ import annotations

from dataclasses import dataclass, field

import pygame

from engine.core.actions import Action, DEFAULT_KEY_BINDINGS


@dataclass(frozen=True)
class InputState:
    """
    Input snapshot for a single frame.

    Sets make repeated firing within one frame idempotent: holding
    two keys bound to the same action still counts once.
    """
    pressed: frozenset[Action] = field(default_factory=frozenset)
    just_pressed: frozenset[Action] = field(default_factory=frozenset)
    just_released: frozenset[Action] = field(default_factory=frozenset)
    clicked: bool = False

    def is_pressed(self, action: Action) -> bool:
        """Check if an action is currently held down."""
        return action in self.pressed

    def is_just_pressed(self, action: Action) -> bool:
        """Check if an action was first pressed this frame."""
        return action in self.just_pressed

    @classmethod
    def holding(cls, *actions: Action, fresh: bool = True) -> InputState:
        """
        Build a state with the given actions held.

        Args:
            actions: Actions to mark as held
            fresh: Also mark them as just pressed
        """
        held = frozenset(actions)
        return cls(pressed=held, just_pressed=held if fresh else frozenset())


EMPTY_INPUT = InputState()


class InputHandler:
    """
    Accumulates pygame events and produces InputState snapshots.

    Call process_event() for every event, then update() once per frame.
    """

    def __init__(self, key_bindings: dict[Action, list[int]] | None = None):
        self._key_bindings: dict[Action, list[int]] = {
            action: list(keys)
            for action, keys in (key_bindings or DEFAULT_KEY_BINDINGS).items()
        }
        self._reverse_key_bindings: dict[int, list[Action]] = {}
        self._rebuild_reverse_bindings()

        self._keys_pressed: set[int] = set()
        self._actions_pressed: set[Action] = set()
        self._prev_actions: frozenset[Action] = frozenset()
        self._clicked = False
        self._state = EMPTY_INPUT

    def _rebuild_reverse_bindings(self) -> None:
        """Build reverse lookup: key -> actions."""
        self._reverse_key_bindings.clear()
        for action, keys in self._key_bindings.items():
            for key in keys:
                self._reverse_key_bindings.setdefault(key, []).append(action)

    @property
    def state(self) -> InputState:
        """The snapshot produced by the last update()."""
        return self._state

    # Key binding management

    def bind_key(self, action: Action, key: int) -> None:
        """Add a key binding for an action."""
        keys = self._key_bindings.setdefault(action, [])
        if key not in keys:
            keys.append(key)
        self._rebuild_reverse_bindings()

    def unbind_key(self, action: Action, key: int) -> None:
        """Remove a key binding for an action."""
        if key in self._key_bindings.get(action, []):
            self._key_bindings[action].remove(key)
        self._rebuild_reverse_bindings()

    def get_bindings(self, action: Action) -> list[int]:
        """Get all key bindings for an action."""
        return self._key_bindings.get(action, []).copy()

    # Frame update

    def process_event(self, event: pygame.event.Event) -> None:
        """Process a pygame event."""
        if event.type == pygame.KEYDOWN:
            self._on_key_down(event.key)
        elif event.type == pygame.KEYUP:
            self._on_key_up(event.key)
        elif event.type == pygame.MOUSEBUTTONDOWN:
            self._clicked = True

    def update(self) -> InputState:
        """
        Close the current frame and return its snapshot.
        """
        pressed = frozenset(self._actions_pressed)
        self._state = InputState(
            pressed=pressed,
            just_pressed=pressed - self._prev_actions,
            just_released=self._prev_actions - pressed,
            clicked=self._clicked,
        )
        self._prev_actions = pressed
        self._clicked = False
        return self._state

    def reset(self) -> None:
        """Forget every held key (e.g. when the window loses focus)."""
        self._keys_pressed.clear()
        self._actions_pressed.clear()
        self._clicked = False

    def _on_key_down(self, key: int) -> None:
        self._keys_pressed.add(key)
        for action in self._reverse_key_bindings.get(key, []):
            self._actions_pressed.add(action)

    def _on_key_up(self, key: int) -> None:
        self._keys_pressed.discard(key)

        # Keep the action held if another of its keys is still down
        for action in self._reverse_key_bindings.get(key, []):
            still_pressed = any(
                other in self._keys_pressed
                for other in self._key_bindings.get(action, [])
            )
            if not still_pressed:
                self._actions_pressed.discard(action)
