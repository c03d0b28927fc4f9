"""Instruction decoding for the CHIP-8 interpreter."""

from dataclasses import dataclass
from typing import Optional

from .errors import UnknownOpcode


# Valid mnemonics
VALID_OPCODES = {
    "NOP",
    "CLS",
    "RET",
    "JP",
    "CALL",
    "SE_IMM",
    "SNE_IMM",
    "SE_REG",
    "LD_IMM",
    "ADD_IMM",
    "LD_REG",
    "OR",
    "AND",
    "XOR",
    "ADD_REG",
    "SUB",
    "SHR",
    "SUBN",
    "SHL",
    "SNE_REG",
    "LD_I",
    "JP_V0",
    "RND",
    "DRW",
    "SKP",
    "SKNP",
    "LD_DT",
    "LD_KEY",
    "SET_DT",
    "SET_ST",
    "ADD_I",
    "LD_F",
    "BCD",
    "STORE",
    "LOAD",
}

# Categories whose meaning depends only on the top nibble
_CATEGORY_OPCODES = {
    0x1: "JP",
    0x2: "CALL",
    0x3: "SE_IMM",
    0x4: "SNE_IMM",
    0x6: "LD_IMM",
    0x7: "ADD_IMM",
    0xA: "LD_I",
    0xB: "JP_V0",
    0xC: "RND",
    0xD: "DRW",
}

# 0x0nnn, selected by the whole word
_SYSTEM_OPCODES = {
    0x0000: "NOP",
    0x00E0: "CLS",
    0x00EE: "RET",
}

# 0x8xyN, selected by N
_ALU_OPCODES = {
    0x0: "LD_REG",
    0x1: "OR",
    0x2: "AND",
    0x3: "XOR",
    0x4: "ADD_REG",
    0x5: "SUB",
    0x6: "SHR",
    0x7: "SUBN",
    0xE: "SHL",
}

# 0x5xy0 and 0x9xy0, n must be zero
_REGISTER_COMPARE_OPCODES = {
    0x5: "SE_REG",
    0x9: "SNE_REG",
}

# 0xExnn, selected by nn
_KEY_OPCODES = {
    0x9E: "SKP",
    0xA1: "SKNP",
}

# 0xFxnn, selected by nn
_MISC_OPCODES = {
    0x07: "LD_DT",
    0x0A: "LD_KEY",
    0x15: "SET_DT",
    0x18: "SET_ST",
    0x1E: "ADD_I",
    0x29: "LD_F",
    0x33: "BCD",
    0x55: "STORE",
    0x65: "LOAD",
}


@dataclass(frozen=True)
class Instruction:
    """Decoded instruction word with its fields."""
    addr: int
    word: int
    opcode: str
    category: int
    x: int
    y: int
    n: int
    nn: int
    nnn: int

    @property
    def text(self) -> str:
        """Assembly-style rendering, e.g. 'ADD_REG V1, V2'."""
        return format_instruction(self)


def lookup_opcode(word: int) -> Optional[str]:
    """Map a 16-bit word to its mnemonic, or None if it is not an opcode."""
    category = (word >> 12) & 0xF
    n = word & 0xF
    nn = word & 0xFF

    if category == 0x0:
        return _SYSTEM_OPCODES.get(word)
    if category in _CATEGORY_OPCODES:
        return _CATEGORY_OPCODES[category]
    if category in _REGISTER_COMPARE_OPCODES:
        return _REGISTER_COMPARE_OPCODES[category] if n == 0 else None
    if category == 0x8:
        return _ALU_OPCODES.get(n)
    if category == 0xE:
        return _KEY_OPCODES.get(nn)
    return _MISC_OPCODES.get(nn)


def decode(word: int, addr: int = 0) -> Instruction:
    """Split an instruction word into nibbles and resolve its mnemonic.

    Args:
        word: 16-bit instruction word
        addr: Address the word was fetched from, for error reports

    Raises:
        UnknownOpcode: if the word matches no instruction
    """
    word &= 0xFFFF
    opcode = lookup_opcode(word)
    if opcode is None:
        raise UnknownOpcode(
            f"Unknown instruction {word:#06x} at {addr:#05x}",
            addr=addr,
            word=word,
        )
    return Instruction(
        addr=addr,
        word=word,
        opcode=opcode,
        category=(word >> 12) & 0xF,
        x=(word >> 8) & 0xF,
        y=(word >> 4) & 0xF,
        n=word & 0xF,
        nn=word & 0xFF,
        nnn=word & 0xFFF,
    )


def format_instruction(instr: Instruction) -> str:
    """Render a decoded instruction as text for traces."""
    op = instr.opcode
    vx = f"V{instr.x:X}"
    vy = f"V{instr.y:X}"
    if op in ("NOP", "CLS", "RET"):
        return op
    if op in ("JP", "CALL", "LD_I", "JP_V0"):
        return f"{op} {instr.nnn:#05x}"
    if op in ("SE_IMM", "SNE_IMM", "LD_IMM", "ADD_IMM", "RND"):
        return f"{op} {vx}, {instr.nn:#04x}"
    if op == "DRW":
        return f"{op} {vx}, {vy}, {instr.n}"
    if instr.category in (0x5, 0x8, 0x9):
        return f"{op} {vx}, {vy}"
    return f"{op} {vx}"
