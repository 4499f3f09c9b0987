"""The animated main menu scene and the program entry point."""

from __future__ import annotations

import argparse
import enum
import math
import random
from dataclasses import dataclass
from pathlib import Path

import pygame

from .button import Button, _draw_box

WIDTH = 1280
HEIGHT = 720
TITLE = "OPMON Red"
FONT_DIR = Path("assets") / "fonts"
MAIN_FONT = "arial.ttf"
SUBTITLE_FONT = "Mplus1-Regular.ttf"

BACKGROUND_COLOR = (15, 25, 45)
PARTICLE_COLOR = (100, 150, 200)
PARTICLE_COUNT = 50
TITLE_Y = 140

BUTTON_WIDTH = 250
BUTTON_HEIGHT = 60
BUTTON_START_Y = 320
BUTTON_SPACING = 80
BUTTON_DELTA = 1.0 / 60.0


class MenuAction(enum.Enum):
    """A choice made from the main menu, with the message it announces."""

    NEW_GAME = "New Game clicked! Setting sail for the Grand Line..."
    LOAD_GAME = "Load Game clicked! Loading your pirate adventure..."
    SETTINGS = "Settings clicked! Adjusting ship settings..."
    QUIT = "Quit clicked! Thanks for sailing with the Straw Hats!"


@dataclass
class Particle:
    """A drifting background dot; ``x`` and ``y`` are its bounding box's top-left corner."""

    x: float
    y: float
    radius: float
    alpha: int = 50


def _load_font(name: str, size: int) -> tuple[pygame.font.Font, bool]:
    try:
        return pygame.font.Font(str(FONT_DIR / name), size), True
    except OSError:
        return pygame.font.Font(None, size), False


def _outlined_text(font, text: str, color, outline, thickness: int) -> pygame.Surface:
    core = font.render(text, True, color)
    edge = font.render(text, True, outline)
    width, height = core.get_size()
    out = pygame.Surface((width + 2 * thickness, height + 2 * thickness), pygame.SRCALPHA)
    for dx in range(-thickness, thickness + 1):
        for dy in range(-thickness, thickness + 1):
            if dx * dx + dy * dy <= thickness * thickness:
                out.blit(edge, (thickness + dx, thickness + dy))
    out.blit(core, (thickness, thickness))
    return out


class MainMenuScene:
    """Title screen with a pulsing title, drifting particles and four buttons."""

    def __init__(self, screen, rng: random.Random | None = None) -> None:
        pygame.font.init()
        self.screen = screen
        self.rng = rng if rng is not None else random.Random()
        self.running = True
        self.animation_time = 0.0
        self.title_pulse = 0.0
        self.last_action: MenuAction | None = None
        self._setup_text()
        self._create_particles()
        self._setup_buttons()

    def _setup_text(self) -> None:
        title_font, title_ok = _load_font(MAIN_FONT, 64)
        subtitle_font, subtitle_ok = _load_font(SUBTITLE_FONT, 24)
        version_font, _ = _load_font(MAIN_FONT, 18)
        self.button_font, _ = _load_font(MAIN_FONT, 28)
        if not (title_ok and subtitle_ok):
            print("Warning: Could not load font. Using default font.")
        title_font.set_bold(True)
        self.button_font.set_bold(True)
        subtitle_font.set_italic(True)

        self.title_surface = _outlined_text(title_font, "OPMON RED", (255, 215, 0), (139, 69, 19), 3)
        self.title_scale = 1.0
        self.title_position = ((WIDTH - self.title_surface.get_width()) / 2, float(TITLE_Y))

        self.subtitle_surface = subtitle_font.render("海賊王に俺はなる！", True, (200, 200, 255))
        self.subtitle_position = ((WIDTH - self.subtitle_surface.get_width()) / 2, 200.0)

        self.version_surface = version_font.render("v0.1.0 - Development Build", True, (150, 150, 150))
        self.version_surface.set_alpha(200)
        self.version_position = (20, 680)

    def _create_particles(self) -> None:
        self.particles = [
            Particle(
                radius=self.rng.uniform(1, 4),
                x=self.rng.uniform(0, WIDTH),
                y=self.rng.uniform(0, HEIGHT),
            )
            for _ in range(PARTICLE_COUNT)
        ]

    def _setup_buttons(self) -> None:
        button_x = (WIDTH - BUTTON_WIDTH) / 2
        specs = (
            ("New Game", ((60, 120, 180, 220), (80, 140, 200, 240), (40, 100, 160, 255)), self._on_new_game),
            ("Load Game", ((80, 120, 80, 220), (100, 140, 100, 240), (60, 100, 60, 255)), self._on_load_game),
            ("Settings", ((120, 80, 120, 220), (140, 100, 140, 240), (100, 60, 100, 255)), self._on_settings),
            ("Quit", ((180, 60, 60, 220), (200, 80, 80, 240), (160, 40, 40, 255)), self._on_quit),
        )
        self.buttons = []
        for index, (label, colors, callback) in enumerate(specs):
            button = Button(
                label, self.button_font, button_x, BUTTON_START_Y + BUTTON_SPACING * index,
                BUTTON_WIDTH, BUTTON_HEIGHT,
            )
            button.set_colors(*colors)
            button.on_click = callback
            self.buttons.append(button)

    def run(self) -> None:
        """Run the frame loop until the scene is closed."""
        clock = pygame.time.Clock()
        while self.running:
            delta_time = clock.tick(60) / 1000.0
            self.animation_time += delta_time
            for event in pygame.event.get():
                self.handle_event(event)
            self.update(pygame.mouse.get_pos())
            self.update_animations(delta_time)
            self.render()
            pygame.display.flip()

    def handle_event(self, event) -> None:
        """React to window close, left clicks and the Escape key."""
        if event.type == pygame.QUIT:
            self.running = False
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            for button in self.buttons:
                button.handle_click(event.pos)
        elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
            self.running = False

    def update(self, mouse_pos) -> None:
        """Update every button for the current mouse position."""
        for button in self.buttons:
            button.update(mouse_pos, BUTTON_DELTA)

    def update_animations(self, delta_time: float) -> None:
        """Pulse the title and move the background particles."""
        self.title_pulse += delta_time * 2.0
        self.title_scale = 1.0 + 0.05 * math.sin(self.title_pulse)
        width, height = self.title_surface.get_size()
        self.title_position = (
            (WIDTH - width * self.title_scale) / 2,
            TITLE_Y - (height * (self.title_scale - 1.0)) / 2,
        )
        self._update_particles(delta_time)

    def _update_particles(self, delta_time: float) -> None:
        for particle in self.particles:
            particle.y -= 20 * delta_time
            if particle.y < -10:
                particle.y = 730.0
                particle.x = float(self.rng.randrange(WIDTH))
            wave = math.sin(self.animation_time * 2 + particle.x * 0.01)
            particle.alpha = int(30 + 20 * wave) & 0xFF

    def render(self) -> None:
        """Draw the whole scene onto the screen surface."""
        self.screen.fill(BACKGROUND_COLOR)
        for particle in self.particles:
            radius = particle.radius
            side = math.ceil(2 * radius)
            layer = pygame.Surface((side, side), pygame.SRCALPHA)
            pygame.draw.circle(layer, (*PARTICLE_COLOR, particle.alpha), (radius, radius), radius)
            self.screen.blit(layer, (round(particle.x), round(particle.y)))

        _draw_box(self.screen, (240, 120), (800, 120), (20, 30, 50, 180), (100, 150, 200, 100), 3)

        width, height = self.title_surface.get_size()
        scaled = pygame.transform.smoothscale(
            self.title_surface,
            (max(1, round(width * self.title_scale)), max(1, round(height * self.title_scale))),
        )
        self.screen.blit(scaled, (round(self.title_position[0]), round(self.title_position[1])))
        self.screen.blit(self.subtitle_surface, self.subtitle_position)

        for button in self.buttons:
            button.draw(self.screen)

        self.screen.blit(self.version_surface, self.version_position)

    def _choose(self, action: MenuAction) -> None:
        self.last_action = action
        print(action.value)

    def _on_new_game(self) -> None:
        self._choose(MenuAction.NEW_GAME)

    def _on_load_game(self) -> None:
        self._choose(MenuAction.LOAD_GAME)

    def _on_settings(self) -> None:
        self._choose(MenuAction.SETTINGS)

    def _on_quit(self) -> None:
        self._choose(MenuAction.QUIT)
        self.running = False


def main(argv=None) -> int:
    """Open the game window and show the main menu."""
    argparse.ArgumentParser(prog="opmonred", description="Show the main menu.").parse_args(argv)
    pygame.init()
    try:
        screen = pygame.display.set_mode((WIDTH, HEIGHT))
        pygame.display.set_caption(TITLE)
        MainMenuScene(screen).run()
    except Exception as exc:
        print(f"Error: {exc}")
        return -1
    finally:
        pygame.quit()
    return 0