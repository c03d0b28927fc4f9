"""Exception hierarchy for the CHIP-8 interpreter.

Every error carries the step, address and instruction word where it
happened so the runner can report it without extra bookkeeping.
"""

from dataclasses import asdict, dataclass
from typing import Optional


@dataclass
class ErrorInfo:
    """Serializable error report."""
    type: str
    message: str
    step: int
    addr: int
    word: Optional[int] = None

    def to_dict(self) -> dict:
        return asdict(self)


class Chip8Error(Exception):
    """Root of all interpreter errors."""

    def __init__(self, message: str, *, step: int = 0, addr: int = 0,
                 word: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.step = step
        self.addr = addr
        self.word = word

    def to_error_info(self) -> ErrorInfo:
        return ErrorInfo(type(self).__name__, self.message, self.step, self.addr, self.word)


class LoadError(Chip8Error):
    """Program could not be installed into memory."""


class ProgramTooLarge(LoadError):
    """Program does not fit between the load address and end of memory."""


class InvalidProgram(LoadError):
    """Program data is not a byte sequence."""


class InvalidKey(Chip8Error):
    """Key index outside 0-15."""


class Chip8RuntimeError(Chip8Error):
    """Error during program execution."""


class UnknownOpcode(Chip8RuntimeError):
    """Instruction word matches no opcode."""


class StackOverflow(Chip8RuntimeError):
    """CALL with all 16 stack slots in use."""


class StackUnderflow(Chip8RuntimeError):
    """RET with an empty stack."""


class MemoryAccessError(Chip8RuntimeError):
    """Memory address out of bounds."""


class ProtectedMemoryWrite(MemoryAccessError):
    """Program tried to write into the interpreter area below 0x200."""
