import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import pygame
import pytest

from opmonred.button import Button


class _Font:
    def render(self, text, antialias, color):
        return pygame.Surface((len(text) * 8, 16), pygame.SRCALPHA)


NORMAL = (10, 20, 30, 255)
HOVER = (40, 50, 60, 255)
PRESS = (70, 80, 90, 255)


@pytest.fixture
def button():
    b = Button("Play", _Font(), 100, 100, 200, 50)
    b.set_colors(NORMAL, HOVER, PRESS)
    return b


def _center(b):
    x, y = b.position
    w, h = b.size
    return (x + w / 2, y + h / 2)


def test_contains_inside_and_outline(button):
    assert button.contains((150, 120))
    assert button.contains((97, 97))


def test_contains_outside(button):
    assert not button.contains((96, 120))
    assert not button.contains((150, 10))
    assert not button.contains((500, 500))


def test_starts_with_normal_color(button):
    assert button.fill_color == NORMAL
    assert button.hover_scale == 1.0


def test_hover_grows_and_keeps_center(button):
    before = _center(button)
    button.update((150, 120), 0.05)
    assert button.hovered
    assert 1.0 < button.hover_scale < 1.05
    assert button.fill_color == HOVER
    after = _center(button)
    assert after[0] == pytest.approx(before[0])
    assert after[1] == pytest.approx(before[1])
    assert button.size[0] > 200


def test_hover_converges_to_target(button):
    for _ in range(200):
        button.update((150, 120), 1 / 60)
    assert button.hover_scale == pytest.approx(1.05, abs=1e-4)


def test_leaving_shrinks_back(button):
    for _ in range(50):
        button.update((150, 120), 1 / 60)
    grown = button.hover_scale
    button.update((5, 5), 1 / 60)
    assert not button.hovered
    assert button.hover_scale < grown
    assert button.fill_color == NORMAL


def test_click_inside_calls_callback(button):
    calls = []
    button.on_click = lambda: calls.append(1)
    button.handle_click((150, 120))
    assert calls == [1]
    assert button.pressed
    button.update((5, 5), 1 / 60)
    assert button.fill_color == PRESS


def test_click_outside_does_nothing(button):
    calls = []
    button.on_click = lambda: calls.append(1)
    button.handle_click((5, 5))
    assert calls == []
    assert not button.pressed


def test_click_without_callback_marks_pressed(button):
    button.handle_click((150, 120))
    assert button.pressed


def test_set_colors_updates_fill(button):
    button.set_colors(HOVER, PRESS, NORMAL)
    assert button.fill_color == HOVER
    assert button.normal_color == HOVER


def test_draw_paints_fill_and_shadow(button):
    surface = pygame.Surface((400, 300))
    surface.fill((255, 255, 255))
    button.draw(surface)
    assert tuple(surface.get_at((110, 110))) == NORMAL
    shadow = surface.get_at((304, 154))
    assert shadow.r < 255
    assert tuple(surface.get_at((390, 290))) == (255, 255, 255, 255)