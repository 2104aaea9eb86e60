"""
Grid Explorer Demo

Demonstrates:
- Tile-by-tile movement with a queued next step
- Snap camera clamped to the level edges
- Random encounters in grass, delayed battle hand-off
- Interacting with signs and bushes (Space)
- Healing spring and greenhouse door auto-triggers
- Save/Load (F5/F9)

Run: python -m demos.grid_explorer_demo
"""

import logging

import pygame

from engine.core import Action, WorldEvent
from engine.input import InputHandler
from explorer.config import ExplorerConfig
from explorer.save import SaveManager
from explorer.world.explorer import BattleRequest, BattleResult, GridWorldExplorer


BACKGROUND = (20, 30, 20)
PLAYER_COLOR = (60, 200, 80)
DEFAULT_TILE_COLOR = (90, 90, 90)
PANEL_COLOR = (0, 0, 0, 180)
TEXT_COLOR = (255, 255, 255)


def hex_to_rgb(value, default=DEFAULT_TILE_COLOR):
    if not value or not value.startswith('#') or len(value) != 7:
        return default
    return tuple(int(value[i:i + 2], 16) for i in (1, 3, 5))


class DemoRenderer:
    """Draws the explorer with plain colored rectangles."""

    def __init__(self, screen: pygame.Surface, explorer: GridWorldExplorer):
        self.screen = screen
        self.explorer = explorer
        self.font = pygame.font.Font(None, 24)

    def draw(self) -> None:
        explorer = self.explorer
        grid = explorer.grid
        camera = explorer.camera
        tile = grid.tile_size

        self.screen.fill(BACKGROUND)

        start_col, start_row, end_col, end_row = camera.visible_tile_range(grid, tile)
        for row in range(start_row, end_row):
            for col in range(start_col, end_col):
                definition = explorer.catalog.lookup(grid.get_tile((col, row)))
                color = hex_to_rgb(definition.color) if definition else BACKGROUND
                x, y = camera.world_to_screen(col * tile, row * tile)
                pygame.draw.rect(self.screen, color, (x, y, tile, tile))
                if explorer.debug:
                    pygame.draw.rect(self.screen, (0, 0, 0), (x, y, tile, tile), 1)

        px, py = camera.world_to_screen(*explorer.player.current_pixel)
        pygame.draw.circle(self.screen, PLAYER_COLOR, (int(px), int(py)), tile // 2 - 4)

        if explorer.show_level_info and explorer.level:
            self._panel(explorer.level.name or explorer.current_level, 20)
        if explorer.encounter_popup:
            self._panel(explorer.encounter_popup.message, self.screen.get_height() // 2)
        if explorer.message:
            self._panel(explorer.message.message, self.screen.get_height() - 60)
        if explorer.debug:
            state = explorer.player
            self._text(f"cell {tuple(state.current_cell)}  steps {state.step_count}", 10, 10)

    def _panel(self, text: str, y: int) -> None:
        surface = self.font.render(text, True, TEXT_COLOR)
        rect = surface.get_rect(centerx=self.screen.get_width() // 2, y=y)
        panel = pygame.Surface((rect.width + 20, rect.height + 12), pygame.SRCALPHA)
        panel.fill(PANEL_COLOR)
        self.screen.blit(panel, (rect.x - 10, rect.y - 6))
        self.screen.blit(surface, rect)

    def _text(self, text: str, x: int, y: int) -> None:
        self.screen.blit(self.font.render(text, True, TEXT_COLOR), (x, y))


def main():
    """Run the grid explorer demo."""
    logging.basicConfig(level=logging.INFO)

    pygame.init()
    config = ExplorerConfig(screen_width=800, screen_height=600)
    screen = pygame.display.set_mode(
        (config.screen_width, config.screen_height), pygame.RESIZABLE
    )
    pygame.display.set_caption("Grid Explorer Demo")

    def launch_battle(request: BattleRequest) -> None:
        # No battle scene here; every fight is won instantly
        print(f"Battle: {request.player.name} vs {request.enemy.name} (level {request.enemy.level})")
        explorer.handle_battle_end(BattleResult(victory=True, exp_gained=request.enemy.level * 10))

    explorer = GridWorldExplorer(config, battle_launcher=launch_battle)
    explorer.init()
    explorer.events.subscribe(
        WorldEvent.LEVEL_LOADED,
        lambda event: print(f"Entered {event['level'].name}"),
        weak=False,
    )

    saves = SaveManager(explorer, save_path="saves")
    input_handler = InputHandler()
    input_handler.bind_key(Action.CONFIRM, pygame.K_e)
    renderer = DemoRenderer(screen, explorer)
    clock = pygame.time.Clock()

    print("Grid Explorer Demo Started")
    print("  - Move: Arrow keys / WASD")
    print("  - Interact: Space")
    print("  - Close message: Enter / E / Escape / click")
    print("  - Save/Load: F5/F9")
    print("  - Debug overlay: F3")

    running = True
    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.VIDEORESIZE:
                explorer.camera.resize(event.w, event.h)
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_F5:
                saves.save_game(1)
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_F9:
                saves.load_game(1)
            input_handler.process_event(event)

        explorer.update(input_handler.update())
        renderer.draw()
        pygame.display.flip()
        clock.tick(60)

    pygame.quit()


if __name__ == "__main__":
    main()
