"""CHIP-8 stack operations.

Bounds are checked by the CALL/RETURN handlers; these helpers only keep the
pointer inside the backing array so a rejected push or pop stays harmless.
"""

import jax.numpy as jnp
from chip8x.constants import STACK_SIZE
from chip8x.state import StackState


def is_full(stack: StackState) -> jnp.ndarray:
    return stack.pointer >= STACK_SIZE


def is_empty(stack: StackState) -> jnp.ndarray:
    return stack.pointer == 0


def push(stack: StackState, address: jnp.ndarray) -> StackState:
    """Push address onto stack."""
    slot = jnp.minimum(stack.pointer, STACK_SIZE - 1)
    new_data = stack.data.at[slot].set(jnp.astype(address, jnp.uint16))
    new_pointer = jnp.where(is_full(stack), stack.pointer, stack.pointer + 1)
    return stack.replace(data=new_data, pointer=jnp.astype(new_pointer, jnp.uint8))


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray]:
    """Pop address from stack."""
    new_pointer = jnp.where(is_empty(stack), stack.pointer, stack.pointer - 1)
    new_pointer = jnp.astype(new_pointer, jnp.uint8)
    popped_address = stack.data[new_pointer]
    new_data = stack.data.at[new_pointer].set(0)
    return stack.replace(data=new_data, pointer=new_pointer), popped_address
