import pytest
from types import SimpleNamespace
from engine.input.handler import InputHandler, InputState, EMPTY_INPUT
from engine.core.actions import Action
import pygame

def key_down(key):
    return SimpleNamespace(type=pygame.KEYDOWN, key=key)

def key_up(key):
    return SimpleNamespace(type=pygame.KEYUP, key=key)

def test_default_bindings():
    handler = InputHandler()
    assert pygame.K_w in handler.get_bindings(Action.MOVE_UP)
    assert pygame.K_UP in handler.get_bindings(Action.MOVE_UP)
    assert pygame.K_SPACE in handler.get_bindings(Action.INTERACT)

def test_action_state():
    handler = InputHandler()
    handler.process_event(key_down(pygame.K_w))
    state = handler.update()

    assert state.is_pressed(Action.MOVE_UP)
    assert state.is_just_pressed(Action.MOVE_UP)
    assert not state.is_pressed(Action.MOVE_DOWN)

def test_just_pressed_only_first_frame():
    handler = InputHandler()
    handler.process_event(key_down(pygame.K_RIGHT))
    handler.update()
    state = handler.update()

    assert state.is_pressed(Action.MOVE_RIGHT)
    assert not state.is_just_pressed(Action.MOVE_RIGHT)

def test_release():
    handler = InputHandler()
    handler.process_event(key_down(pygame.K_SPACE))
    handler.update()
    handler.process_event(key_up(pygame.K_SPACE))
    state = handler.update()

    assert not state.is_pressed(Action.INTERACT)
    assert Action.INTERACT in state.just_released

def test_two_keys_for_one_action_count_once():
    handler = InputHandler()
    handler.process_event(key_down(pygame.K_w))
    handler.process_event(key_down(pygame.K_UP))
    handler.process_event(key_down(pygame.K_w))
    state = handler.update()
    assert state.pressed == frozenset({Action.MOVE_UP})

    # Releasing one key keeps the action held
    handler.process_event(key_up(pygame.K_w))
    assert handler.update().is_pressed(Action.MOVE_UP)

    handler.process_event(key_up(pygame.K_UP))
    assert not handler.update().is_pressed(Action.MOVE_UP)

def test_click_lasts_one_frame():
    handler = InputHandler()
    handler.process_event(SimpleNamespace(type=pygame.MOUSEBUTTONDOWN, button=1))

    assert handler.update().clicked
    assert not handler.update().clicked

def test_bind_and_unbind_key():
    handler = InputHandler()
    handler.bind_key(Action.CONFIRM, pygame.K_e)
    handler.process_event(key_down(pygame.K_e))
    assert handler.update().is_pressed(Action.CONFIRM)

    handler.process_event(key_up(pygame.K_e))
    handler.update()
    handler.unbind_key(Action.CONFIRM, pygame.K_e)
    handler.process_event(key_down(pygame.K_e))
    assert not handler.update().is_pressed(Action.CONFIRM)

def test_reset_releases_everything():
    handler = InputHandler()
    handler.process_event(key_down(pygame.K_a))
    handler.update()
    handler.reset()

    state = handler.update()
    assert not state.is_pressed(Action.MOVE_LEFT)
    assert Action.MOVE_LEFT in state.just_released

def test_state_property_matches_last_update():
    handler = InputHandler()
    assert handler.state is EMPTY_INPUT
    state = handler.update()
    assert handler.state is state

def test_input_state_holding():
    state = InputState.holding(Action.MOVE_UP, Action.INTERACT)
    assert state.is_pressed(Action.MOVE_UP)
    assert state.is_just_pressed(Action.INTERACT)

    held = InputState.holding(Action.MOVE_UP, fresh=False)
    assert held.is_pressed(Action.MOVE_UP)
    assert not held.is_just_pressed(Action.MOVE_UP)
