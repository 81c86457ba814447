"""Tests for display operations (DXYN)."""

import jax.numpy as jnp
from chip8x import execute, FaultCode, display_grid
from conftest import setup_sprite_in_memory, set_registers


def pixel(state, x, y):
    return int(state.display[y * 64 + x])


class TestBasicSprites:
    """Test basic sprite drawing."""

    def test_basic_sprite_draw(self, fresh_state):
        """Test basic sprite drawing without collision."""
        # Simple 2x2 box sprite
        sprite = [0xC0, 0xC0]  # 11000000, 11000000
        state = setup_sprite_in_memory(fresh_state, 0x300, sprite)

        state = execute(state, 0x600A)  # V0 = 10
        state = execute(state, 0x6105)  # V1 = 5
        state = execute(state, 0xA300)  # I = 0x300

        # Draw sprite: D012 (draw at V0,V1 with height 2)
        state = execute(state, 0xD012)

        assert pixel(state, 10, 5) == 1  # Top-left
        assert pixel(state, 11, 5) == 1  # Top-right
        assert pixel(state, 10, 6) == 1  # Bottom-left
        assert pixel(state, 11, 6) == 1  # Bottom-right
        assert pixel(state, 12, 5) == 0  # Outside sprite
        assert jnp.sum(state.display) == 4

        # No collision should occur
        assert state.V[15] == 0

    def test_collision_detection(self, fresh_state):
        """Test collision flag when sprite overlaps existing pixels."""
        sprite = [0x80]  # 10000000
        state = setup_sprite_in_memory(fresh_state, 0x400, sprite)

        state = execute(state, 0x6014)  # V0 = 20
        state = execute(state, 0x610A)  # V1 = 10
        state = execute(state, 0xA400)  # I = 0x400

        # Draw first time - no collision
        state = execute(state, 0xD011)
        assert pixel(state, 20, 10) == 1
        assert state.V[15] == 0

        # Draw again at same location - collision
        state = execute(state, 0xD011)
        assert pixel(state, 20, 10) == 0  # Pixel erased by XOR
        assert state.V[15] == 1

    def test_double_draw_clears_everything(self, fresh_state):
        """Drawing the same sprite twice restores a blank screen."""
        sprite = [0xF0, 0x90, 0xF0, 0x81]
        state = setup_sprite_in_memory(fresh_state, 0x500, sprite)
        state = set_registers(state, V0=8, V1=15)
        state = execute(state, 0xA500)

        state = execute(state, 0xD014)
        assert jnp.sum(state.display) == 4 + 2 + 4 + 2
        state = execute(state, 0xD014)

        assert jnp.sum(state.display) == 0
        assert state.V[15] == 1

    def test_collision_flag_is_not_cumulative(self, fresh_state):
        """VF is reset at the start of every draw."""
        state = setup_sprite_in_memory(fresh_state, 0x300, [0x80])
        state = execute(state, 0xA300)
        state = set_registers(state, V0=0, V1=0, V2=40)

        state = execute(state, 0xD011)
        state = execute(state, 0xD011)
        assert state.V[15] == 1

        state = execute(state, 0xD211)  # different spot, no overlap
        assert state.V[15] == 0

    def test_zero_height_draws_nothing(self, fresh_state):
        state = set_registers(fresh_state, VF=1)
        state = execute(state, 0xD000)
        assert jnp.sum(state.display) == 0
        assert state.V[15] == 0


class TestWrapping:
    """Sprites wrap around the screen edges."""

    def test_horizontal_wrap(self, fresh_state):
        state = setup_sprite_in_memory(fresh_state, 0x300, [0xFF])
        state = set_registers(state, V0=60, V1=0)
        state = execute(state, 0xA300)

        state = execute(state, 0xD011)

        row = display_grid(state.display)[0]
        assert list(row[60:64]) == [1, 1, 1, 1]
        assert list(row[0:4]) == [1, 1, 1, 1]
        assert row.sum() == 8

    def test_vertical_wrap(self, fresh_state):
        state = setup_sprite_in_memory(fresh_state, 0x300, [0x80, 0x80, 0x80])
        state = set_registers(state, V0=0, V1=31)
        state = execute(state, 0xA300)

        state = execute(state, 0xD013)

        assert pixel(state, 0, 31) == 1
        assert pixel(state, 0, 0) == 1
        assert pixel(state, 0, 1) == 1
        assert jnp.sum(state.display) == 3

    def test_start_coordinates_wrap(self, fresh_state):
        """VX = 70 starts drawing at column 6."""
        state = setup_sprite_in_memory(fresh_state, 0x300, [0x80])
        state = set_registers(state, V0=70, V1=33)
        state = execute(state, 0xA300)

        state = execute(state, 0xD011)

        assert pixel(state, 6, 1) == 1


class TestFontSprites:
    """Draw built-in glyphs."""

    def test_draw_digit_zero(self, fresh_state):
        state = execute(fresh_state, 0x6000)  # V0 = 0
        state = execute(state, 0xF029)  # I = glyph 0
        state = execute(state, 0xD005)

        grid = display_grid(state.display)
        assert list(grid[0, :4]) == [1, 1, 1, 1]
        assert list(grid[1, :4]) == [1, 0, 0, 1]
        assert list(grid[4, :4]) == [1, 1, 1, 1]


class TestBounds:
    """Sprite reads past the end of memory."""

    def test_sprite_past_end_of_memory(self, fresh_state):
        state = execute(fresh_state, 0xAFFE)
        state = execute(state, 0xD015)
        assert state.fault.code == FaultCode.MEMORY
        assert state.fault.address == 0x1002

    def test_sprite_ending_at_last_byte(self, fresh_state):
        state = execute(fresh_state, 0xAFFE)
        state = execute(state, 0xD012)
        assert state.fault.code == FaultCode.NONE
