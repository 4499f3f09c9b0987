import math
import os
import random

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pygame
import pytest

from opmonred.menu import MainMenuScene, Particle


@pytest.fixture
def scene():
    return MainMenuScene(pygame.Surface((1280, 720)), random.Random(7))


def _center(button):
    x, y = button.position
    w, h = button.size
    return (int(x + w / 2), int(y + h / 2))


def test_buttons_in_order(scene):
    assert [b.text for b in scene.buttons] == ["New Game", "Load Game", "Settings", "Quit"]


def test_buttons_are_stacked(scene):
    ys = [b.position[1] for b in scene.buttons]
    assert ys[0] == 320
    assert all(later - earlier == 80 for earlier, later in zip(ys, ys[1:]))
    xs = {b.position[0] for b in scene.buttons}
    assert len(xs) == 1
    assert all(b.size == (250.0, 60.0) for b in scene.buttons)


def test_particles_created_within_screen(scene):
    assert len(scene.particles) == 50
    for p in scene.particles:
        assert 0 <= p.x <= 1280
        assert 0 <= p.y <= 720
        assert 1 <= p.radius <= 4


def test_quit_event_stops(scene):
    scene.handle_event(pygame.event.Event(pygame.QUIT))
    assert scene.running is False


def test_escape_stops(scene):
    scene.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_ESCAPE))
    assert scene.running is False


def test_other_key_keeps_running(scene):
    scene.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_a))
    assert scene.running is True


def test_quit_button_click(scene, capsys):
    pos = _center(scene.buttons[3])
    scene.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=pos))
    assert scene.running is False
    assert "Quit clicked!" in capsys.readouterr().out


def test_new_game_click_keeps_running(scene, capsys):
    pos = _center(scene.buttons[0])
    scene.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=pos))
    assert scene.running is True
    assert "New Game clicked!" in capsys.readouterr().out
    assert scene.buttons[0].pressed


def test_right_click_ignored(scene):
    pos = _center(scene.buttons[3])
    scene.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=3, pos=pos))
    assert scene.running is True


def test_update_hovers_button(scene):
    scene.update(_center(scene.buttons[1]))
    assert scene.buttons[1].hovered
    assert not scene.buttons[0].hovered
    assert scene.buttons[1].fill_color == (100, 140, 100, 240)


def test_title_pulse_peak(scene):
    scene.update_animations(math.pi / 4)
    assert scene.title_scale == pytest.approx(1.05)
    width = scene.title_surface.get_width()
    assert scene.title_position[0] == pytest.approx((1280 - width * 1.05) / 2)


def test_title_unscaled_at_start(scene):
    scene.update_animations(0.0)
    assert scene.title_scale == pytest.approx(1.0)
    assert scene.title_position[1] == pytest.approx(140)


def test_particle_drifts_up(scene):
    scene.particles = [Particle(x=100.0, y=300.0, radius=2.0)]
    scene.update_animations(0.5)
    assert scene.particles[0].y == pytest.approx(290.0)
    assert scene.particles[0].x == 100.0
    assert 10 <= scene.particles[0].alpha <= 50


def test_particle_wraps_to_bottom(scene):
    scene.particles = [Particle(x=5.0, y=-9.5, radius=2.0)]
    scene.update_animations(0.1)
    assert scene.particles[0].y == 730.0
    assert 0 <= scene.particles[0].x < 1280


def test_render_paints_background(scene):
    scene.particles = []
    scene.render()
    assert tuple(scene.screen.get_at((5, 5))) == (15, 25, 45, 255)


def test_run_stops_on_quit_event():
    pygame.display.init()
    try:
        screen = pygame.display.set_mode((1280, 720))
        scene = MainMenuScene(screen, random.Random(3))
        pygame.event.post(pygame.event.Event(pygame.QUIT))
        scene.run()
        assert scene.running is False
        assert scene.animation_time >= 0.0
    finally:
        pygame.display.quit()