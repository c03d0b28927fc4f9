"""CHIP-8 Interpreter Core Package."""

from .machine import Machine, MachineConfig
from .runner import run_program, parse_hex_program, RunOptions, RunResult, KeyEvent
from .errors import (
    Chip8Error,
    Chip8RuntimeError,
    LoadError,
    ProgramTooLarge,
    InvalidProgram,
    InvalidKey,
    UnknownOpcode,
    StackOverflow,
    StackUnderflow,
    MemoryAccessError,
    ProtectedMemoryWrite,
)

__all__ = [
    "Machine",
    "MachineConfig",
    "run_program",
    "parse_hex_program",
    "RunOptions",
    "RunResult",
    "KeyEvent",
    "Chip8Error",
    "Chip8RuntimeError",
    "LoadError",
    "ProgramTooLarge",
    "InvalidProgram",
    "InvalidKey",
    "UnknownOpcode",
    "StackOverflow",
    "StackUnderflow",
    "MemoryAccessError",
    "ProtectedMemoryWrite",
]
