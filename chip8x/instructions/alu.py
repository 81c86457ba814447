"""CHIP-8 ALU operations (8xxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8x.constants import FLAG_REGISTER
from chip8x.state import EmulatorState
from chip8x.decode import DecodedInstruction

_NO_FLAG = jnp.zeros((), dtype=jnp.uint8)


def alu_set(vx, vy):
    """8XY0 - Set: VX = VY."""
    return vy, _NO_FLAG


def alu_or(vx, vy):
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, _NO_FLAG


def alu_and(vx, vy):
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, _NO_FLAG


def alu_xor(vx, vy):
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, _NO_FLAG


def alu_add(vx, vy):
    """8XY4 - Add: VX += VY, VF = carry."""
    result = jnp.astype(vx, jnp.uint16) + vy
    carry = jnp.astype(result > 255, jnp.uint8)
    return jnp.astype(result & 0xFF, jnp.uint8), carry


def alu_sub_xy(vx, vy):
    """8XY5 - Subtract: VX -= VY, VF = 1 when there is no borrow."""
    borrow_flag = jnp.astype(vx >= vy, jnp.uint8)
    return vx - vy, borrow_flag


def alu_shift_right(vx, vy):
    """8XY6 - Shift right: VX >>= 1, VF = old bit 0."""
    return vx >> 1, vx & 1


def alu_sub_yx(vx, vy):
    """8XY7 - Subtract: VX = VY - VX, VF = 1 when there is no borrow."""
    borrow_flag = jnp.astype(vy >= vx, jnp.uint8)
    return vy - vx, borrow_flag


def alu_shift_left(vx, vy):
    """8XYE - Shift left: VX <<= 1, VF = old bit 7."""
    return vx << 1, (vx & 0x80) >> 7


# Sub-operation N -> handler slot; 8..D and F never reach here (decoded as UNKNOWN).
_OP_SLOTS = jnp.array([0, 1, 2, 3, 4, 5, 6, 7, 0, 0, 0, 0, 0, 0, 8, 0], dtype=jnp.int32)
_WRITES_FLAG = jnp.array([0, 0, 0, 0, 1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 1, 0], dtype=bool)


def execute_alu_operation(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XYN - ALU operations dispatcher.

    The flag is written before VX, so with X = F the register ends up holding
    the result.
    """
    vx = state.V[instruction.x]
    vy = state.V[instruction.y]

    result, vf = jax.lax.switch(
        _OP_SLOTS[instruction.n],
        [alu_set, alu_or, alu_and, alu_xor, alu_add,
         alu_sub_xy, alu_shift_right, alu_sub_yx, alu_shift_left],
        vx, vy
    )

    new_V = jnp.where(_WRITES_FLAG[instruction.n], state.V.at[FLAG_REGISTER].set(vf), state.V)
    new_V = new_V.at[instruction.x].set(result)
    return state.replace(V=new_V)
