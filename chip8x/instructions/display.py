"""CHIP-8 display operations."""

import jax.numpy as jnp
from chip8x.state import EmulatorState, record_fault
from chip8x.decode import DecodedInstruction
from chip8x.constants import SCREEN_WIDTH, SCREEN_HEIGHT, MAX_ADDRESS, FLAG_REGISTER
from chip8x.errors import FaultCode

# Pre-computed coordinates of every pixel, in display buffer order (y * 64 + x)
yy, xx = jnp.meshgrid(jnp.arange(SCREEN_HEIGHT), jnp.arange(SCREEN_WIDTH), indexing='ij')
yy = yy.reshape(-1)
xx = xx.reshape(-1)


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N.

    Sprite rows and columns wrap around the screen edges. VF is set when any
    pixel turned off, and cleared otherwise.
    """
    height = jnp.astype(instruction.n, jnp.int32)
    last_row = jnp.astype(state.I, jnp.int32) + height - 1
    state = record_fault(state, (height > 0) & (last_row > MAX_ADDRESS), FaultCode.MEMORY, last_row)

    sprite_x = jnp.astype(state.V[instruction.x], jnp.int32) % SCREEN_WIDTH
    sprite_y = jnp.astype(state.V[instruction.y], jnp.int32) % SCREEN_HEIGHT

    col_offset = (xx - sprite_x) % SCREEN_WIDTH
    row_offset = (yy - sprite_y) % SCREEN_HEIGHT
    in_sprite = (col_offset < 8) & (row_offset < height)

    sprite_bytes = state.memory.at[jnp.astype(state.I, jnp.int32) + row_offset].get(mode='clip')
    sprite = jnp.astype((sprite_bytes >> (7 - col_offset)) & 1, jnp.uint8)
    sprite = jnp.where(in_sprite, sprite, jnp.zeros_like(sprite))

    collision = jnp.any((state.display & sprite) == 1)
    return state.replace(
        display=state.display ^ sprite,
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8))
    )
