"""CHIP-8 fault codes and exceptions.

Traced code cannot raise, so execution errors are first recorded in
``EmulatorState.fault`` and converted into exceptions on the host by
:func:`raise_for_fault`.
"""

from enum import IntEnum

from chip8x.logging import get_logger


class FaultCode(IntEnum):
    """Fatal error recorded in the emulator state."""
    NONE = 0
    DECODE = 1
    STACK_OVERFLOW = 2
    STACK_UNDERFLOW = 3
    MEMORY = 4


class Chip8Error(Exception):
    """Base class for all emulator errors."""


class LoadError(Chip8Error):
    """ROM could not be loaded into memory."""


class ExecutionError(Chip8Error):
    """Fatal error raised while executing an instruction."""

    def __init__(self, message: str, pc: int, opcode: int):
        super().__init__(f"{message} (opcode 0x{opcode:04X} at 0x{pc:03X})")
        self.pc = pc
        self.opcode = opcode


class DecodeError(ExecutionError):
    """Fetched word matches no known instruction."""

    def __init__(self, pc: int, opcode: int):
        super().__init__("Unknown instruction", pc, opcode)


class StackOverflowError(ExecutionError):
    """Subroutine call with a full stack."""

    def __init__(self, pc: int, opcode: int):
        super().__init__("Stack overflow", pc, opcode)


class StackUnderflowError(ExecutionError):
    """Return with an empty stack."""

    def __init__(self, pc: int, opcode: int):
        super().__init__("Stack underflow", pc, opcode)


class MemoryAccessError(ExecutionError):
    """Memory access outside 0x000-0xFFF."""

    def __init__(self, pc: int, opcode: int, address: int):
        super().__init__(f"Memory access out of bounds at 0x{address:04X}", pc, opcode)
        self.address = address


def fault_to_exception(code: int, pc: int, opcode: int, address: int) -> ExecutionError:
    """Build the exception matching a recorded fault."""
    code = FaultCode(code)
    if code == FaultCode.DECODE:
        return DecodeError(pc, opcode)
    if code == FaultCode.STACK_OVERFLOW:
        return StackOverflowError(pc, opcode)
    if code == FaultCode.STACK_UNDERFLOW:
        return StackUnderflowError(pc, opcode)
    if code == FaultCode.MEMORY:
        return MemoryAccessError(pc, opcode, address)
    raise ValueError(f"No exception for fault code {code!r}")


def raise_for_fault(state) -> None:
    """Raise the exception recorded in ``state.fault``, if any."""
    fault = state.fault
    code = int(fault.code)
    if code == FaultCode.NONE:
        return
    error = fault_to_exception(code, int(fault.pc), int(fault.opcode), int(fault.address))
    get_logger().error(str(error))
    raise error
