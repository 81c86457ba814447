"""CHIP-8 instruction decoding."""

from enum import IntEnum

import jax.numpy as jnp
from chex import dataclass


class Family(IntEnum):
    """Instruction family, used as the dispatch index of ``execute``."""
    UNKNOWN = 0
    CLEAR_SCREEN = 1
    RETURN = 2
    JUMP = 3
    CALL = 4
    SKIP_EQ_IMM = 5
    SKIP_NE_IMM = 6
    SKIP_EQ_REG = 7
    SKIP_NE_REG = 8
    LOAD_IMM = 9
    ADD_IMM = 10
    ALU = 11
    LOAD_INDEX = 12
    JUMP_OFFSET = 13
    RANDOM = 14
    DRAW = 15
    SKIP_KEY_PRESSED = 16
    SKIP_KEY_RELEASED = 17
    LOAD_DELAY = 18
    WAIT_KEY = 19
    SET_DELAY = 20
    SET_SOUND = 21
    ADD_INDEX = 22
    FONT_CHARACTER = 23
    BCD = 24
    STORE_REGISTERS = 25
    LOAD_REGISTERS = 26


# (mask, pattern, family), first match wins.
DECODE_TABLE = (
    (0xFFFF, 0x00E0, Family.CLEAR_SCREEN),
    (0xFFFF, 0x00EE, Family.RETURN),
    (0xF000, 0x1000, Family.JUMP),
    (0xF000, 0x2000, Family.CALL),
    (0xF000, 0x3000, Family.SKIP_EQ_IMM),
    (0xF000, 0x4000, Family.SKIP_NE_IMM),
    (0xF00F, 0x5000, Family.SKIP_EQ_REG),
    (0xF000, 0x6000, Family.LOAD_IMM),
    (0xF000, 0x7000, Family.ADD_IMM),
    (0xF00F, 0x8000, Family.ALU),
    (0xF00F, 0x8001, Family.ALU),
    (0xF00F, 0x8002, Family.ALU),
    (0xF00F, 0x8003, Family.ALU),
    (0xF00F, 0x8004, Family.ALU),
    (0xF00F, 0x8005, Family.ALU),
    (0xF00F, 0x8006, Family.ALU),
    (0xF00F, 0x8007, Family.ALU),
    (0xF00F, 0x800E, Family.ALU),
    (0xF00F, 0x9000, Family.SKIP_NE_REG),
    (0xF000, 0xA000, Family.LOAD_INDEX),
    (0xF000, 0xB000, Family.JUMP_OFFSET),
    (0xF000, 0xC000, Family.RANDOM),
    (0xF000, 0xD000, Family.DRAW),
    (0xF0FF, 0xE09E, Family.SKIP_KEY_PRESSED),
    (0xF0FF, 0xE0A1, Family.SKIP_KEY_RELEASED),
    (0xF0FF, 0xF007, Family.LOAD_DELAY),
    (0xF0FF, 0xF00A, Family.WAIT_KEY),
    (0xF0FF, 0xF015, Family.SET_DELAY),
    (0xF0FF, 0xF018, Family.SET_SOUND),
    (0xF0FF, 0xF01E, Family.ADD_INDEX),
    (0xF0FF, 0xF029, Family.FONT_CHARACTER),
    (0xF0FF, 0xF033, Family.BCD),
    (0xF0FF, 0xF055, Family.STORE_REGISTERS),
    (0xF0FF, 0xF065, Family.LOAD_REGISTERS),
)

_MASKS = jnp.array([mask for mask, _, _ in DECODE_TABLE], dtype=jnp.uint16)
_PATTERNS = jnp.array([pattern for _, pattern, _ in DECODE_TABLE], dtype=jnp.uint16)
_FAMILIES = jnp.array([family for _, _, family in DECODE_TABLE], dtype=jnp.int32)


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    family: int  # Family tag
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


def classify(instruction) -> jnp.ndarray:
    """Return the ``Family`` of a 16-bit instruction word."""
    instruction = jnp.asarray(instruction, dtype=jnp.uint16)
    matches = (instruction & _MASKS) == _PATTERNS
    return jnp.where(jnp.any(matches), _FAMILIES[jnp.argmax(matches)], jnp.int32(Family.UNKNOWN))


def decode(instruction) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    instruction = jnp.asarray(instruction, dtype=jnp.uint16)
    return DecodedInstruction(
        raw=instruction,
        family=classify(instruction),
        opcode=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )
