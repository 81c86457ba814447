"""CHIP-8 emulator package."""

from chip8x.state import EmulatorState, create_state
from chip8x.emulator import StepEvents, execute, fetch, tick_timers, cycle, step, run, load_program, load_rom
from chip8x.decode import DecodedInstruction, Family, decode
from chip8x.errors import (
    Chip8Error, LoadError, ExecutionError, DecodeError, StackOverflowError,
    StackUnderflowError, MemoryAccessError, FaultCode
)
from chip8x.constants import *
from chip8x.rendering import display_grid, chip8_display_to_rgb, create_color_scheme, batch_render

__all__ = [
    "EmulatorState",
    "create_state",
    "StepEvents",
    "fetch",
    "execute",
    "tick_timers",
    "cycle",
    "step",
    "run",
    "load_program",
    "load_rom",
    "DecodedInstruction",
    "Family",
    "decode",
    "Chip8Error",
    "LoadError",
    "ExecutionError",
    "DecodeError",
    "StackOverflowError",
    "StackUnderflowError",
    "MemoryAccessError",
    "FaultCode",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "display_grid",
    "chip8_display_to_rgb",
    "create_color_scheme",
    "batch_render",
]
