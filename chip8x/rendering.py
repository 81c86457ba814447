"""CHIP-8 rendering utilities for visualization."""

import jax.numpy as jnp
import numpy as np
from typing import Tuple

from chip8x.constants import SCREEN_WIDTH, SCREEN_HEIGHT
from chip8x.state import EmulatorState


def display_grid(display: jnp.ndarray) -> np.ndarray:
    """Reshape the flat display buffer into a (32, 64) array of 0/1 rows."""
    pixels = np.asarray(display, dtype=np.uint8)
    if pixels.size != SCREEN_WIDTH * SCREEN_HEIGHT:
        raise ValueError(f"Expected {SCREEN_WIDTH * SCREEN_HEIGHT} pixels, got {pixels.size}")
    return pixels.reshape(SCREEN_HEIGHT, SCREEN_WIDTH)


def chip8_display_to_rgb(
    display: jnp.ndarray,
    scale: int = 8,
    on_color: Tuple[int, int, int] = (0, 255, 0),
    off_color: Tuple[int, int, int] = (0, 0, 0),
) -> np.ndarray:
    """Convert CHIP-8 display buffer to RGB array with optional upscaling.

    Args:
        display: Display buffer of 2048 pixels (flat or shaped (32, 64))
        scale: Upscaling factor for better visibility (default: 8x)
        on_color: RGB color for "on" pixels (default: green)
        off_color: RGB color for "off" pixels (default: black)

    Returns:
        RGB array of shape (32*scale, 64*scale, 3) with uint8 values
    """
    pixels = display_grid(display).astype(np.bool_)
    height, width = pixels.shape

    rgb_frame = np.zeros((height, width, 3), dtype=np.uint8)

    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    # Apply upscaling using nearest neighbor interpolation
    if scale > 1:
        rgb_frame = np.repeat(np.repeat(rgb_frame, scale, axis=0), scale, axis=1)

    return rgb_frame


COLOR_SCHEMES = {
    "classic": ((0, 255, 0), (0, 0, 0)),
    "amber": ((255, 176, 0), (0, 0, 0)),
    "white": ((255, 255, 255), (0, 0, 0)),
    "blue": ((0, 255, 255), (0, 0, 64)),
    "retro": ((255, 255, 0), (64, 0, 64)),
}


def create_color_scheme(scheme: str = "classic") -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
    """Return the ``(on_color, off_color)`` pair registered as ``scheme``."""
    if scheme not in COLOR_SCHEMES:
        raise ValueError(f"Unknown color scheme '{scheme}'. Available: {sorted(COLOR_SCHEMES)}")
    return COLOR_SCHEMES[scheme]


def batch_render(
    states: EmulatorState,
    scale: int = 4,
    color_scheme: str = "classic",
    padding: int = 5,
) -> np.ndarray:
    """Tile the screens of a batch of machines into one RGBA image.

    Args:
        states: Batched state, e.g. the output of ``jax.vmap(cycle)``. Its
            display has shape (batch_size, 2048).
        scale: Upscaling factor per screen
        color_scheme: Name passed to ``create_color_scheme``
        padding: Transparent gap between screens in pixels

    Returns:
        RGBA array with the screens laid out row by row on a near-square grid.
        Unused grid slots stay fully transparent.
    """
    displays = np.asarray(states.display)
    if displays.ndim != 2:
        raise ValueError(f"Expected a batched state, got display of shape {displays.shape}")
    on_color, off_color = create_color_scheme(color_scheme)

    batch_size = displays.shape[0]
    cols = int(np.ceil(np.sqrt(batch_size)))
    rows = int(np.ceil(batch_size / cols))
    tile_height = SCREEN_HEIGHT * scale
    tile_width = SCREEN_WIDTH * scale

    image = np.zeros(
        (rows * tile_height + (rows - 1) * padding, cols * tile_width + (cols - 1) * padding, 4),
        dtype=np.uint8,
    )
    for i, display in enumerate(displays):
        row, col = divmod(i, cols)
        top = row * (tile_height + padding)
        left = col * (tile_width + padding)
        tile = image[top:top + tile_height, left:left + tile_width]
        tile[..., :3] = chip8_display_to_rgb(display, scale, on_color, off_color)
        tile[..., 3] = 255

    return image
