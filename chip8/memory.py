"""Memory model for the CHIP-8 interpreter."""

import logging
from typing import Iterable

from .errors import InvalidProgram, MemoryAccessError, ProtectedMemoryWrite, ProgramTooLarge

logger = logging.getLogger("Chip8.Memory")

MEMORY_SIZE = 4096
PROGRAM_START = 0x200
GLYPH_BYTES = 5

# Built-in hexadecimal font, one 5-row glyph per digit 0-F
GLYPHS = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])

MAX_PROGRAM_SIZE = MEMORY_SIZE - PROGRAM_START


class Memory:
    """4 KiB byte-addressed memory with the glyph table preloaded at 0x000."""

    def __init__(self, size: int = MEMORY_SIZE):
        self.size = size
        self._data = bytearray(size)
        self._data[:len(GLYPHS)] = GLYPHS

    def reset(self) -> None:
        """Zero all memory and reinstall the glyph table."""
        self._data = bytearray(self.size)
        self._data[:len(GLYPHS)] = GLYPHS

    def _check_bounds(self, addr: int) -> None:
        """Check if address is within valid range."""
        if addr < 0 or addr >= self.size:
            raise MemoryAccessError(f"Memory address out of range: {addr:#05x}")

    def read(self, addr: int) -> int:
        """Read byte from memory address."""
        self._check_bounds(addr)
        return self._data[addr]

    def read_word(self, addr: int) -> int:
        """Read a big-endian 16-bit word from addr and addr + 1."""
        return (self.read(addr) << 8) | self.read(addr + 1)

    def _check_writable(self, addr: int) -> None:
        self._check_bounds(addr)
        if addr < PROGRAM_START:
            raise ProtectedMemoryWrite(
                f"Write to interpreter memory at {addr:#05x}", addr=addr
            )

    def write(self, addr: int, value: int) -> None:
        """Write a byte on behalf of the running program.

        Addresses below PROGRAM_START belong to the interpreter and are
        never writable by program execution.
        """
        self._check_writable(addr)
        self._data[addr] = value & 0xFF

    def write_block(self, addr: int, values: Iterable[int]) -> None:
        """Write consecutive bytes starting at addr, all or nothing.

        The first and last address are checked before any byte changes.
        """
        block = bytes(value & 0xFF for value in values)
        if not block:
            return
        self._check_writable(addr)
        self._check_writable(addr + len(block) - 1)
        self._data[addr:addr + len(block)] = block

    def load(self, data: Iterable[int], start: int = PROGRAM_START) -> int:
        """Copy a program into memory starting at start.

        Nothing is written unless the whole program fits.

        Returns:
            Number of bytes loaded
        """
        if isinstance(data, int):
            raise InvalidProgram(f"Program is not a byte sequence: {data!r}")
        program = bytes(data)
        available = self.size - start
        if len(program) > available:
            raise ProgramTooLarge(
                f"Program is {len(program)} bytes, only {available} available",
                addr=start,
            )
        self._data[start:start + len(program)] = program
        logger.debug("Loaded %d bytes at %#05x", len(program), start)
        return len(program)

    def glyph_address(self, digit: int) -> int:
        """Address of the built-in glyph for a hexadecimal digit."""
        return digit * GLYPH_BYTES

    def read_block(self, start: int, length: int) -> list[int]:
        """Read length consecutive bytes, checking the whole range first."""
        if length <= 0:
            return []
        self._check_bounds(start)
        self._check_bounds(start + length - 1)
        return list(self._data[start:start + length])

    def snapshot(self) -> bytes:
        """Return a copy of the entire memory."""
        return bytes(self._data)
