"""CHIP-8 emulator state structures."""

from typing import Optional

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chip8x.constants import (
    MEMORY_SIZE, PROGRAM_START, FONT_START, FONT_DATA, DISPLAY_SIZE, STACK_SIZE, NUM_KEYS, NUM_REGISTERS
)
from chip8x.errors import FaultCode


@dataclass(frozen=True)
class StackState:
    """Stack state for subroutine calls."""
    data: jnp.ndarray
    pointer: jnp.ndarray  # next free slot, 0..STACK_SIZE


@dataclass(frozen=True)
class FaultState:
    """First fatal error raised by an instruction, code 0 when healthy."""
    code: jnp.ndarray
    pc: jnp.ndarray       # address of the faulting instruction
    opcode: jnp.ndarray
    address: jnp.ndarray  # offending memory address for MEMORY faults


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state.

    ``V[15]`` is both a general register and the carry/borrow/collision flag.
    The display holds one byte per pixel, pixel (x, y) at ``y * 64 + x``.
    """
    rng: jax.Array
    memory: jnp.ndarray
    pc: jnp.ndarray
    display: jnp.ndarray
    stack: StackState
    delay_timer: jnp.ndarray
    sound_timer: jnp.ndarray
    keypad: jnp.ndarray
    V: jnp.ndarray
    I: jnp.ndarray
    fault: FaultState
    strict: bool = field(pytree_node=False, default=True)

    @property
    def halted(self) -> jnp.ndarray:
        return self.fault.code != FaultCode.NONE


def create_stack() -> StackState:
    return StackState(
        data=jnp.zeros(STACK_SIZE, dtype=jnp.uint16),
        pointer=jnp.zeros((), dtype=jnp.uint8),
    )


def create_fault() -> FaultState:
    return FaultState(
        code=jnp.zeros((), dtype=jnp.uint8),
        pc=jnp.zeros((), dtype=jnp.uint16),
        opcode=jnp.zeros((), dtype=jnp.uint16),
        address=jnp.zeros((), dtype=jnp.int32),
    )


def create_state(rng: Optional[jax.Array] = None, strict: bool = True) -> EmulatorState:
    """Create initial emulator state with font data loaded.

    Args:
        rng: PRNG key consumed by CXNN. Defaults to ``PRNGKey(0)`` so runs are
            reproducible.
        strict: Treat unknown instructions as a fatal decode error. When
            False they execute as no-ops.
    """
    if rng is None:
        rng = jax.random.PRNGKey(0)
    memory = jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8)
    memory = memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA)
    return EmulatorState(
        rng=rng,
        memory=memory,
        pc=jnp.asarray(PROGRAM_START, dtype=jnp.uint16),
        display=jnp.zeros(DISPLAY_SIZE, dtype=jnp.uint8),
        stack=create_stack(),
        delay_timer=jnp.zeros((), dtype=jnp.uint8),
        sound_timer=jnp.zeros((), dtype=jnp.uint8),
        keypad=jnp.zeros(NUM_KEYS, dtype=jnp.bool_),
        V=jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8),
        I=jnp.zeros((), dtype=jnp.uint16),
        fault=create_fault(),
        strict=strict,
    )


def record_fault(state: EmulatorState, condition, code: FaultCode, address=0) -> EmulatorState:
    """Record ``code`` when ``condition`` holds and no fault is recorded yet.

    The fault's pc and opcode are filled in by the step that observes it.
    """
    fault = state.fault
    fresh = jnp.logical_and(condition, fault.code == FaultCode.NONE)
    return state.replace(fault=fault.replace(
        code=jnp.where(fresh, jnp.uint8(code), fault.code),
        address=jnp.where(fresh, jnp.asarray(address, dtype=jnp.int32), fault.address),
    ))
