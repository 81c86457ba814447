"""CHIP-8 system instructions (0x0xxx) and unknown words."""

import jax.numpy as jnp
from chip8x.state import EmulatorState, record_fault
from chip8x.decode import DecodedInstruction
from chip8x.errors import FaultCode
from chip8x.stack import pop, is_empty


def execute_unknown(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Unknown word: decode fault in strict mode, no-op otherwise."""
    if not state.strict:
        return state
    return record_fault(state, True, FaultCode.DECODE)


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    state = record_fault(state, is_empty(state.stack), FaultCode.STACK_UNDERFLOW)
    stack, address = pop(state.stack)
    return state.replace(stack=stack, pc=address)
