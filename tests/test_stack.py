"""Tests for the call stack helpers."""

import jax.numpy as jnp
from chip8x.state import create_stack
from chip8x.stack import push, pop, is_full, is_empty


def test_push_pop_lifo():
    stack = create_stack()
    stack = push(stack, jnp.uint16(0x202))
    stack = push(stack, jnp.uint16(0x404))

    stack, address = pop(stack)
    assert address == 0x404
    stack, address = pop(stack)
    assert address == 0x202
    assert is_empty(stack)


def test_full_stack():
    stack = create_stack()
    for i in range(16):
        stack = push(stack, jnp.uint16(0x200 + 2 * i))
    assert is_full(stack)
    assert stack.pointer == 16

    # A rejected push leaves the pointer in range
    stack = push(stack, jnp.uint16(0xABC))
    assert stack.pointer == 16


def test_pop_empty_keeps_pointer():
    stack, _ = pop(create_stack())
    assert stack.pointer == 0
