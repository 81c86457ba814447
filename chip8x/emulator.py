"""Main CHIP-8 emulator execution engine."""

import os
from typing import Union

import jax
import jax.lax
import jax.numpy as jnp
from flax.struct import dataclass

from chip8x.state import EmulatorState, record_fault
from chip8x.decode import Family, decode
from chip8x.constants import PROGRAM_START, MAX_ROM_SIZE, MAX_ADDRESS
from chip8x.errors import FaultCode, LoadError, raise_for_fault
from chip8x.logging import get_logger, scan_with_progress
from chip8x.instructions.system import execute_unknown, execute_clear_screen, execute_return
from chip8x.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key_pressed, execute_skip_if_key_released
)
from chip8x.instructions.alu import execute_alu_operation
from chip8x.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8x.instructions.display import execute_display
from chip8x.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers
)

logger = get_logger()

HANDLERS = {
    Family.UNKNOWN: execute_unknown,
    Family.CLEAR_SCREEN: execute_clear_screen,
    Family.RETURN: execute_return,
    Family.JUMP: execute_jump,
    Family.CALL: execute_call,
    Family.SKIP_EQ_IMM: execute_skip_if_equal_immediate,
    Family.SKIP_NE_IMM: execute_skip_if_not_equal_immediate,
    Family.SKIP_EQ_REG: execute_skip_if_equal_register,
    Family.SKIP_NE_REG: execute_skip_if_not_equal_register,
    Family.LOAD_IMM: execute_set,
    Family.ADD_IMM: execute_add,
    Family.ALU: execute_alu_operation,
    Family.LOAD_INDEX: execute_set_index,
    Family.JUMP_OFFSET: execute_jump_with_offset,
    Family.RANDOM: execute_random,
    Family.DRAW: execute_display,
    Family.SKIP_KEY_PRESSED: execute_skip_if_key_pressed,
    Family.SKIP_KEY_RELEASED: execute_skip_if_key_released,
    Family.LOAD_DELAY: execute_get_delay_timer,
    Family.WAIT_KEY: execute_wait_for_key,
    Family.SET_DELAY: execute_set_delay_timer,
    Family.SET_SOUND: execute_set_sound_timer,
    Family.ADD_INDEX: execute_add_to_index,
    Family.FONT_CHARACTER: execute_font_character,
    Family.BCD: execute_bcd_conversion,
    Family.STORE_REGISTERS: execute_store_registers,
    Family.LOAD_REGISTERS: execute_load_registers,
}

_BRANCHES = [HANDLERS[family] for family in sorted(Family)]


@dataclass(frozen=True)
class StepEvents:
    """Observable side effects of one step."""
    sound_stopped: jnp.ndarray  # sound timer went from 1 to 0
    awaiting_key: jnp.ndarray   # FX0A is stalled waiting for a key


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction."""
    decoded_instruction = decode(instruction)
    return jax.lax.switch(decoded_instruction.family, _BRANCHES, state, decoded_instruction)


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory and advance the pc."""
    pc = jnp.astype(state.pc, jnp.int32)
    first_invalid = jnp.where(pc > MAX_ADDRESS, pc, pc + 1)
    state = record_fault(state, pc + 1 > MAX_ADDRESS, FaultCode.MEMORY, first_invalid)
    high = state.memory.at[pc].get(mode='clip')
    low = state.memory.at[pc + 1].get(mode='clip')
    return state.replace(pc=state.pc + 2), _pack_u16(high, low)


def tick_timers(state: EmulatorState) -> tuple[EmulatorState, jnp.ndarray]:
    """Count both timers down by one, stopping at zero.

    Returns the new state and whether the sound timer just expired.
    """
    sound_stopped = state.sound_timer == 1
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
    ), sound_stopped


def _no_events() -> StepEvents:
    return StepEvents(sound_stopped=jnp.zeros((), dtype=jnp.bool_), awaiting_key=jnp.zeros((), dtype=jnp.bool_))


def _advance(state: EmulatorState) -> tuple[EmulatorState, StepEvents]:
    start_pc = state.pc
    new_state, instruction = fetch(state)
    new_state = execute(new_state, instruction)
    awaiting_key = (decode(instruction).family == Family.WAIT_KEY) & (new_state.pc == start_pc)
    new_state, sound_stopped = tick_timers(new_state)

    faulted = new_state.fault.code != FaultCode.NONE
    fault = new_state.fault.replace(
        pc=jnp.where(faulted, start_pc, new_state.fault.pc),
        opcode=jnp.where(faulted, instruction, new_state.fault.opcode),
    )
    # A faulting step leaves the machine as it was before the fetch.
    new_state = jax.tree.map(lambda old, new: jnp.where(faulted, old, new), state, new_state)
    events = StepEvents(sound_stopped=sound_stopped & ~faulted, awaiting_key=awaiting_key & ~faulted)
    return new_state.replace(fault=fault), events


def cycle(state: EmulatorState) -> tuple[EmulatorState, StepEvents]:
    """Run one fetch-decode-execute cycle and one timer tick.

    Pure and traceable, so it can be jitted, vmapped over a batch of machines
    or scanned. A state that already holds a fault is returned unchanged.
    """
    return jax.lax.cond(
        state.halted,
        lambda s: (s, _no_events()),
        _advance,
        state
    )


_jit_cycle = jax.jit(cycle)


def step(state: EmulatorState) -> tuple[EmulatorState, StepEvents]:
    """Run one cycle and raise the matching exception if it faulted."""
    raise_for_fault(state)
    state, events = _jit_cycle(state)
    raise_for_fault(state)
    if bool(events.sound_stopped):
        logger.debug("Sound timer expired")
    return state, events


def run(state: EmulatorState, num_steps: int, progress: bool = False) -> tuple[EmulatorState, StepEvents]:
    """Run ``num_steps`` cycles with ``jax.lax.scan``.

    The keypad stays as it is for the whole run. Events are stacked along the
    first axis. Execution stops at the first fault, which is raised afterwards.
    """
    def body(carry, _):
        return cycle(carry)

    if progress:
        body = scan_with_progress(num_steps)(body)

    @jax.jit
    def _run(state):
        return jax.lax.scan(body, state, jnp.arange(num_steps))

    state, events = _run(state)
    raise_for_fault(state)
    return state, events


def load_program(state: EmulatorState, data: bytes) -> EmulatorState:
    """Copy program bytes into memory starting at 0x200."""
    if len(data) > MAX_ROM_SIZE:
        raise LoadError(f"ROM too large: {len(data)} bytes (maximum {MAX_ROM_SIZE})")
    rom_array = jnp.array(list(data), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(data)].set(rom_array)
    logger.info(f"Loaded ROM: {len(data)} bytes")
    return state.replace(memory=new_memory)


def load_rom(state: EmulatorState, filename: Union[str, os.PathLike]) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    try:
        with open(filename, 'rb') as f:
            rom_data = f.read()
    except OSError as e:
        raise LoadError(f"Could not open ROM {filename}: {e}") from e
    return load_program(state, rom_data)
