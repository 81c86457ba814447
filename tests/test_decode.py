"""Tests for instruction decoding."""

import pytest
from chip8x import decode, Family


@pytest.mark.parametrize("instruction, family", [
    (0x00E0, Family.CLEAR_SCREEN),
    (0x00EE, Family.RETURN),
    (0x1ABC, Family.JUMP),
    (0x2ABC, Family.CALL),
    (0x3A12, Family.SKIP_EQ_IMM),
    (0x4A12, Family.SKIP_NE_IMM),
    (0x5AB0, Family.SKIP_EQ_REG),
    (0x6A12, Family.LOAD_IMM),
    (0x7A12, Family.ADD_IMM),
    (0x8AB0, Family.ALU),
    (0x8AB7, Family.ALU),
    (0x8ABE, Family.ALU),
    (0x9AB0, Family.SKIP_NE_REG),
    (0xAABC, Family.LOAD_INDEX),
    (0xBABC, Family.JUMP_OFFSET),
    (0xCA12, Family.RANDOM),
    (0xDAB5, Family.DRAW),
    (0xEA9E, Family.SKIP_KEY_PRESSED),
    (0xEAA1, Family.SKIP_KEY_RELEASED),
    (0xFA07, Family.LOAD_DELAY),
    (0xFA0A, Family.WAIT_KEY),
    (0xFA15, Family.SET_DELAY),
    (0xFA18, Family.SET_SOUND),
    (0xFA1E, Family.ADD_INDEX),
    (0xFA29, Family.FONT_CHARACTER),
    (0xFA33, Family.BCD),
    (0xFA55, Family.STORE_REGISTERS),
    (0xFA65, Family.LOAD_REGISTERS),
])
def test_decode_family(instruction, family):
    assert decode(instruction).family == family


@pytest.mark.parametrize("instruction", [
    0x0000, 0x0123, 0x00E1, 0x00FF,  # SYS calls are not supported
    0x5AB1, 0x9AB3,                  # register skips need a zero low nibble
    0x8AB8, 0x8ABD, 0x8ABF,          # undefined ALU sub-operations
    0xE000, 0xEA9F,
    0xF000, 0xFA99, 0xFAFF,
])
def test_decode_unknown(instruction):
    assert decode(instruction).family == Family.UNKNOWN


def test_decode_fields():
    decoded = decode(0xD12F)
    assert decoded.raw == 0xD12F
    assert decoded.opcode == 0xD
    assert decoded.x == 0x1
    assert decoded.y == 0x2
    assert decoded.n == 0xF
    assert decoded.nn == 0x2F
    assert decoded.nnn == 0x12F


def test_exact_patterns_take_priority():
    """00E0 and 00EE are recognized before anything else in the 0 group."""
    assert decode(0x00E0).family != decode(0x00EE).family
