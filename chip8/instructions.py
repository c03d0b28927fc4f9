"""Instruction execution for the CHIP-8 interpreter.

Every executor receives the decoded instruction after the program counter
has already moved past it. An executor returns the new program counter for
jumps, skips and the key wait, or None to continue with the next word.
"""

import random
from typing import Callable, Optional

from .cpu import CPU
from .decoder import Instruction
from .display import Framebuffer
from .keypad import Keypad
from .memory import Memory


class IOBus:
    """Devices an instruction can reach besides CPU and memory."""

    def __init__(
        self,
        display: Framebuffer,
        keypad: Keypad,
        rng: Optional[random.Random] = None,
    ):
        self.display = display
        self.keypad = keypad
        self.rng = rng if rng is not None else random.Random()

    def random_byte(self) -> int:
        return self.rng.randrange(256)


# Instruction executor type
InstructionExecutor = Callable[[Instruction, CPU, Memory, IOBus], Optional[int]]


def _skip(cpu: CPU, condition: bool) -> Optional[int]:
    """New PC skipping the next instruction when condition holds."""
    if condition:
        return cpu.pc + 2
    return None


def execute_nop(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """0000: no operation"""
    return None


def execute_cls(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """00E0: clear the screen"""
    io.display.clear()
    return None


def execute_ret(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """00EE: PC := pop()"""
    return cpu.pop()


def execute_jp(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """1nnn: PC := nnn"""
    return instr.nnn


def execute_call(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """2nnn: push(PC); PC := nnn"""
    cpu.push(cpu.pc)
    return instr.nnn


def execute_se_imm(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """3xnn: skip if Vx == nn"""
    return _skip(cpu, cpu.v[instr.x] == instr.nn)


def execute_sne_imm(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """4xnn: skip if Vx != nn"""
    return _skip(cpu, cpu.v[instr.x] != instr.nn)


def execute_se_reg(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """5xy0: skip if Vx == Vy"""
    return _skip(cpu, cpu.v[instr.x] == cpu.v[instr.y])


def execute_ld_imm(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """6xnn: Vx := nn"""
    cpu.set_v(instr.x, instr.nn)
    return None


def execute_add_imm(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """7xnn: Vx := Vx + nn, no carry flag"""
    cpu.set_v(instr.x, cpu.v[instr.x] + instr.nn)
    return None


def execute_ld_reg(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """8xy0: Vx := Vy"""
    cpu.set_v(instr.x, cpu.v[instr.y])
    return None


def execute_or(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """8xy1: Vx := Vx OR Vy"""
    cpu.set_v(instr.x, cpu.v[instr.x] | cpu.v[instr.y])
    return None


def execute_and(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """8xy2: Vx := Vx AND Vy"""
    cpu.set_v(instr.x, cpu.v[instr.x] & cpu.v[instr.y])
    return None


def execute_xor(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """8xy3: Vx := Vx XOR Vy"""
    cpu.set_v(instr.x, cpu.v[instr.x] ^ cpu.v[instr.y])
    return None


# Flag-setting ALU ops write Vx first and VF last, so VF holds the flag
# when x is 0xF.

def execute_add_reg(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """8xy4: Vx := Vx + Vy, VF := carry"""
    total = cpu.v[instr.x] + cpu.v[instr.y]
    cpu.set_v(instr.x, total)
    cpu.set_flag(1 if total > 0xFF else 0)
    return None


def execute_sub(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """8xy5: Vx := Vx - Vy, VF := NOT borrow"""
    vx, vy = cpu.v[instr.x], cpu.v[instr.y]
    cpu.set_v(instr.x, vx - vy)
    cpu.set_flag(0 if vx < vy else 1)
    return None


def execute_shr(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """8xy6: VF := Vx bit 0, Vx := Vx >> 1"""
    vx = cpu.v[instr.x]
    cpu.set_v(instr.x, vx >> 1)
    cpu.set_flag(vx & 0x01)
    return None


def execute_subn(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """8xy7: Vx := Vy - Vx, VF := NOT borrow"""
    vx, vy = cpu.v[instr.x], cpu.v[instr.y]
    cpu.set_v(instr.x, vy - vx)
    cpu.set_flag(0 if vy < vx else 1)
    return None


def execute_shl(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """8xyE: VF := Vx bit 7, Vx := Vx << 1"""
    vx = cpu.v[instr.x]
    cpu.set_v(instr.x, vx << 1)
    cpu.set_flag((vx >> 7) & 0x01)
    return None


def execute_sne_reg(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """9xy0: skip if Vx != Vy"""
    return _skip(cpu, cpu.v[instr.x] != cpu.v[instr.y])


def execute_ld_i(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Annn: I := nnn"""
    cpu.set_i(instr.nnn)
    return None


def execute_jp_v0(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Bnnn: PC := V0 + nnn"""
    return cpu.v[0] + instr.nnn


def execute_rnd(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Cxnn: Vx := random byte AND nn"""
    cpu.set_v(instr.x, io.random_byte() & instr.nn)
    return None


def execute_drw(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Dxyn: XOR n sprite rows from MEM[I] at (Vx, Vy), VF := collision"""
    rows = bytes(mem.read_block(cpu.i, instr.n))
    collision = io.display.draw_sprite(cpu.v[instr.x], cpu.v[instr.y], rows)
    cpu.set_flag(1 if collision else 0)
    return None


def execute_skp(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Ex9E: skip if key Vx is pressed"""
    return _skip(cpu, io.keypad.is_pressed(cpu.v[instr.x]))


def execute_sknp(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """ExA1: skip if key Vx is not pressed"""
    return _skip(cpu, not io.keypad.is_pressed(cpu.v[instr.x]))


def execute_ld_dt(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Fx07: Vx := delay timer"""
    cpu.set_v(instr.x, cpu.delay_timer)
    return None


def execute_ld_key(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Fx0A: Vx := lowest pressed key, else re-execute this instruction"""
    key = io.keypad.first_pressed()
    if key is None:
        return cpu.pc - 2
    cpu.set_v(instr.x, key)
    return None


def execute_set_dt(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Fx15: delay timer := Vx"""
    cpu.delay_timer = cpu.v[instr.x]
    return None


def execute_set_st(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Fx18: sound timer := Vx"""
    cpu.sound_timer = cpu.v[instr.x]
    return None


def execute_add_i(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Fx1E: I := I + Vx, wrapping at 16 bits"""
    cpu.set_i(cpu.i + cpu.v[instr.x])
    return None


def execute_ld_f(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Fx29: I := address of glyph for digit Vx"""
    cpu.set_i(mem.glyph_address(cpu.v[instr.x]))
    return None


def execute_bcd(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Fx33: MEM[I..I+2] := hundreds, tens, ones of Vx"""
    vx = cpu.v[instr.x]
    mem.write_block(cpu.i, (vx // 100, (vx // 10) % 10, vx % 10))
    return None


def execute_store(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Fx55: MEM[I..I+x] := V0..Vx"""
    mem.write_block(cpu.i, cpu.v[:instr.x + 1])
    return None


def execute_load(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Fx65: V0..Vx := MEM[I..I+x]"""
    values = mem.read_block(cpu.i, instr.x + 1)
    for idx, value in enumerate(values):
        cpu.set_v(idx, value)
    return None


# Instruction dispatch table
INSTRUCTION_EXECUTORS: dict[str, InstructionExecutor] = {
    "NOP": execute_nop,
    "CLS": execute_cls,
    "RET": execute_ret,
    "JP": execute_jp,
    "CALL": execute_call,
    "SE_IMM": execute_se_imm,
    "SNE_IMM": execute_sne_imm,
    "SE_REG": execute_se_reg,
    "LD_IMM": execute_ld_imm,
    "ADD_IMM": execute_add_imm,
    "LD_REG": execute_ld_reg,
    "OR": execute_or,
    "AND": execute_and,
    "XOR": execute_xor,
    "ADD_REG": execute_add_reg,
    "SUB": execute_sub,
    "SHR": execute_shr,
    "SUBN": execute_subn,
    "SHL": execute_shl,
    "SNE_REG": execute_sne_reg,
    "LD_I": execute_ld_i,
    "JP_V0": execute_jp_v0,
    "RND": execute_rnd,
    "DRW": execute_drw,
    "SKP": execute_skp,
    "SKNP": execute_sknp,
    "LD_DT": execute_ld_dt,
    "LD_KEY": execute_ld_key,
    "SET_DT": execute_set_dt,
    "SET_ST": execute_set_st,
    "ADD_I": execute_add_i,
    "LD_F": execute_ld_f,
    "BCD": execute_bcd,
    "STORE": execute_store,
    "LOAD": execute_load,
}


def execute_instruction(
    instr: Instruction,
    cpu: CPU,
    mem: Memory,
    io: IOBus,
) -> Optional[int]:
    """Execute a single decoded instruction.

    Returns:
        New PC value if the instruction transfers control, None otherwise
    """
    executor = INSTRUCTION_EXECUTORS.get(instr.opcode)
    if executor is None:
        raise ValueError(f"No executor for opcode: {instr.opcode}")
    return executor(instr, cpu, mem, io)
