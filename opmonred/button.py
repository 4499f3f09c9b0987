"""An animated, clickable menu button drawn with pygame."""

from __future__ import annotations

from collections.abc import Callable

import pygame

Color = tuple[int, int, int, int]

OUTLINE_THICKNESS = 3
SHADOW_OFFSET = 5
HOVER_SCALE = 1.05
TEXT_COLOR: Color = (255, 255, 255, 255)

_OUTLINE_NORMAL: Color = (100, 150, 200, 180)
_OUTLINE_HOVER: Color = (120, 170, 220, 220)
_OUTLINE_PRESS: Color = (150, 200, 255, 255)


def _draw_box(surface, position, size, fill: Color, outline: Color, thickness: int) -> None:
    """Blend a filled rectangle with an outer outline onto ``surface``."""
    left, top = position
    width, height = (max(0, round(v)) for v in size)
    layer = pygame.Surface((width + 2 * thickness, height + 2 * thickness), pygame.SRCALPHA)
    if thickness:
        layer.fill(outline)
    layer.fill(fill, pygame.Rect(thickness, thickness, width, height))
    surface.blit(layer, (round(left) - thickness, round(top) - thickness))


class Button:
    """A rectangular button that grows while hovered and calls ``on_click`` when clicked."""

    def __init__(self, text: str, font, x: float, y: float, width: float, height: float) -> None:
        self.text = text
        self.font = font
        self.label = font.render(text, True, TEXT_COLOR)
        self.origin = (float(x), float(y))
        self.base_size = (float(width), float(height))
        self.position = self.origin
        self.size = self.base_size
        self.hovered = False
        self.pressed = False
        self.on_click: Callable[[], None] | None = None
        self.hover_scale = 1.0
        self.target_scale = 1.0
        self.animation_speed = 8.0
        self.normal_color: Color = (60, 90, 140, 220)
        self.hover_color: Color = (80, 110, 160, 240)
        self.press_color: Color = (40, 70, 120, 255)
        self.shadow_color: Color = (0, 0, 0, 80)
        self.fill_color = self.normal_color
        self.outline_color = _OUTLINE_NORMAL

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """Left, top, width and height of the button including its outline."""
        left, top = self.position
        width, height = self.size
        t = OUTLINE_THICKNESS
        return (left - t, top - t, width + 2 * t, height + 2 * t)

    def set_colors(self, normal: Color, hover: Color, press: Color) -> None:
        """Replace the fill colours for the normal, hovered and pressed states."""
        self.normal_color = tuple(normal)
        self.hover_color = tuple(hover)
        self.press_color = tuple(press)
        self.fill_color = self.normal_color

    def update(self, mouse_pos, delta_time: float) -> None:
        """Advance the hover animation and refresh the colours for the mouse position."""
        self.hovered = self.contains(mouse_pos)
        self.target_scale = HOVER_SCALE if self.hovered else 1.0
        self.hover_scale += (self.target_scale - self.hover_scale) * self.animation_speed * delta_time

        base_w, base_h = self.base_size
        width, height = base_w * self.hover_scale, base_h * self.hover_scale
        x, y = self.origin
        self.size = (width, height)
        self.position = (x - (width - base_w) / 2, y - (height - base_h) / 2)

        if self.pressed:
            self.fill_color, self.outline_color = self.press_color, _OUTLINE_PRESS
        elif self.hovered:
            self.fill_color, self.outline_color = self.hover_color, _OUTLINE_HOVER
        else:
            self.fill_color, self.outline_color = self.normal_color, _OUTLINE_NORMAL

    def handle_click(self, mouse_pos) -> None:
        """Mark the button pressed and run its callback if the click lands on it."""
        if self.contains(mouse_pos):
            self.pressed = True
            if self.on_click is not None:
                self.on_click()

    def draw(self, surface) -> None:
        """Draw the shadow, the button body and its centred label."""
        left, top = self.position
        width, height = self.size
        _draw_box(
            surface, (left + SHADOW_OFFSET, top + SHADOW_OFFSET), self.size,
            self.shadow_color, self.shadow_color, 0,
        )
        _draw_box(surface, self.position, self.size, self.fill_color, self.outline_color, OUTLINE_THICKNESS)
        label_rect = self.label.get_rect(center=(round(left + width / 2), round(top + height / 2)))
        surface.blit(self.label, label_rect)

    def contains(self, point) -> bool:
        """Whether ``point`` lies within the button, outline included."""
        px, py = point
        left, top, width, height = self.bounds
        return left <= px < left + width and top <= py < top + height