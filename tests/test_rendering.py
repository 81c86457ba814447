"""Tests for rendering utilities."""

import jax
import jax.numpy as jnp
import numpy as np
import pytest
from chip8x import display_grid, chip8_display_to_rgb, create_color_scheme, batch_render, create_state, cycle
from conftest import load_words


def test_display_grid_layout(fresh_state):
    display = fresh_state.display.at[1 * 64 + 3].set(1)
    grid = display_grid(display)
    assert grid.shape == (32, 64)
    assert grid[1, 3] == 1
    assert grid.sum() == 1


def test_display_grid_rejects_wrong_size():
    with pytest.raises(ValueError):
        display_grid(jnp.zeros(100, dtype=jnp.uint8))


def test_display_to_rgb(fresh_state):
    display = fresh_state.display.at[1 * 64 + 3].set(1)
    rgb = chip8_display_to_rgb(display, scale=2, on_color=(255, 255, 255))

    assert rgb.shape == (64, 128, 3)
    assert rgb.dtype == np.uint8
    assert tuple(rgb[2, 6]) == (255, 255, 255)
    assert tuple(rgb[3, 7]) == (255, 255, 255)
    assert tuple(rgb[0, 0]) == (0, 0, 0)


def test_color_scheme():
    assert create_color_scheme("amber") == ((255, 176, 0), (0, 0, 0))
    with pytest.raises(ValueError):
        create_color_scheme("nope")


def test_batch_render_vmapped_machines():
    """Clear-screen then draw glyph 0 in the top left corner of each machine."""
    machines = [load_words(create_state(), [0x00E0, 0xD005]) for _ in range(3)]
    batch = jax.tree.map(lambda *xs: jnp.stack(xs), *machines)
    batch, _ = jax.vmap(cycle)(batch)
    batch, _ = jax.vmap(cycle)(batch)

    image = batch_render(batch, scale=1, color_scheme="white")

    # 2x2 grid with 5 pixel padding
    assert image.shape == (32 * 2 + 5, 64 * 2 + 5, 4)
    assert tuple(image[0, 0]) == (255, 255, 255, 255)  # top row of glyph 0 is 0xF0
    assert tuple(image[0, 64 + 5]) == (255, 255, 255, 255)
    assert tuple(image[0, 4]) == (0, 0, 0, 255)
    assert image[-1, -1, 3] == 0  # empty slot is transparent
    assert image[0, 64, 3] == 0  # padding is transparent


def test_batch_render_rejects_single_state(fresh_state):
    with pytest.raises(ValueError):
        batch_render(fresh_state)
