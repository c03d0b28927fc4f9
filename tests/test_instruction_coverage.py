"""Ensure every opcode has a dedicated behavioral test."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import pytest

from chip8 import Machine, MachineConfig
from chip8.decoder import VALID_OPCODES


def words(*values: int) -> bytes:
    return b"".join(v.to_bytes(2, "big") for v in values)


def expect_v(index: int, value: int) -> Callable:
    def _check(machine):
        assert machine.cpu.v[index] == value

    return _check


def expect_pc(value: int) -> Callable:
    def _check(machine):
        assert machine.cpu.pc == value

    return _check


def expect_i(value: int) -> Callable:
    def _check(machine):
        assert machine.cpu.i == value

    return _check


def expect_mem(addr: int, values: list[int]) -> Callable:
    def _check(machine):
        assert machine.memory.read_block(addr, len(values)) == values

    return _check


def expect_stack(values: list[int]) -> Callable:
    def _check(machine):
        assert machine.cpu.get_state()["stack"] == values

    return _check


def expect_timers(delay: int, sound: int) -> Callable:
    def _check(machine):
        assert (machine.cpu.delay_timer, machine.cpu.sound_timer) == (delay, sound)

    return _check


def expect_screen_row(y: int, text: str) -> Callable:
    def _check(machine):
        assert machine.display.to_rows()[y][:len(text)] == text

    return _check


def expect_all(*checks: Callable) -> Callable:
    def _check(machine):
        for check in checks:
            check(machine)

    return _check


@dataclass
class InstructionCase:
    opcode: str
    program: bytes
    steps: int
    checker: Callable
    keys: list[int] = field(default_factory=list)
    setup: Callable | None = None


def _set_delay(machine):
    machine.cpu.delay_timer = 0x2A


def _dirty_screen(machine):
    machine.display.xor_pixel(4, 4)


INSTRUCTION_CASES = [
    InstructionCase("NOP", words(0x0000), 1, expect_pc(0x202)),
    InstructionCase(
        "CLS", words(0x00E0), 1,
        expect_screen_row(4, "." * 64),
        setup=_dirty_screen,
    ),
    InstructionCase("RET", words(0x2204, 0x0000, 0x00EE), 2, expect_pc(0x202)),
    InstructionCase("JP", words(0x1208), 1, expect_pc(0x208)),
    InstructionCase(
        "CALL", words(0x2300), 1,
        expect_all(expect_pc(0x300), expect_stack([0x202])),
    ),
    InstructionCase("SE_IMM", words(0x6107, 0x3107), 2, expect_pc(0x206)),
    InstructionCase("SNE_IMM", words(0x6107, 0x4108), 2, expect_pc(0x206)),
    InstructionCase("SE_REG", words(0x6103, 0x6203, 0x5120), 3, expect_pc(0x208)),
    InstructionCase("LD_IMM", words(0x6A2B), 1, expect_v(0xA, 0x2B)),
    InstructionCase("ADD_IMM", words(0x61FF, 0x7102), 2, expect_v(1, 0x01)),
    InstructionCase("LD_REG", words(0x6209, 0x8120), 2, expect_v(1, 9)),
    InstructionCase("OR", words(0x610C, 0x6203, 0x8121), 3, expect_v(1, 0x0F)),
    InstructionCase("AND", words(0x610C, 0x6206, 0x8122), 3, expect_v(1, 0x04)),
    InstructionCase("XOR", words(0x610C, 0x6206, 0x8123), 3, expect_v(1, 0x0A)),
    InstructionCase(
        "ADD_REG", words(0x61F0, 0x6220, 0x8124), 3,
        expect_all(expect_v(1, 0x10), expect_v(0xF, 1)),
    ),
    InstructionCase(
        "SUB", words(0x6105, 0x6207, 0x8125), 3,
        expect_all(expect_v(1, 0xFE), expect_v(0xF, 0)),
    ),
    InstructionCase(
        "SHR", words(0x6105, 0x8106), 2,
        expect_all(expect_v(1, 0x02), expect_v(0xF, 1)),
    ),
    InstructionCase(
        "SUBN", words(0x6105, 0x6207, 0x8127), 3,
        expect_all(expect_v(1, 0x02), expect_v(0xF, 1)),
    ),
    InstructionCase(
        "SHL", words(0x6181, 0x810E), 2,
        expect_all(expect_v(1, 0x02), expect_v(0xF, 1)),
    ),
    InstructionCase("SNE_REG", words(0x6103, 0x6204, 0x9120), 3, expect_pc(0x208)),
    InstructionCase("LD_I", words(0xA123), 1, expect_i(0x123)),
    InstructionCase("JP_V0", words(0x6004, 0xB300), 2, expect_pc(0x304)),
    InstructionCase("RND", words(0xC100), 1, expect_v(1, 0)),
    InstructionCase(
        "DRW", words(0xD005), 1,
        expect_screen_row(0, "####...."),
    ),
    InstructionCase("SKP", words(0x6105, 0xE19E), 2, expect_pc(0x206), keys=[5]),
    InstructionCase("SKNP", words(0x6105, 0xE1A1), 2, expect_pc(0x206)),
    InstructionCase("LD_DT", words(0xF307), 1, expect_v(3, 0x2A), setup=_set_delay),
    InstructionCase("LD_KEY", words(0xF40A), 1, expect_all(expect_v(4, 7), expect_pc(0x202)), keys=[7]),
    InstructionCase(
        "SET_DT", words(0x6109, 0xF115), 2,
        expect_timers(9, 0),
    ),
    InstructionCase(
        "SET_ST", words(0x6109, 0xF118), 2,
        expect_timers(0, 9),
    ),
    InstructionCase("ADD_I", words(0xA300, 0x6110, 0xF11E), 3, expect_i(0x310)),
    InstructionCase("LD_F", words(0x610A, 0xF129), 2, expect_i(50)),
    InstructionCase("BCD", words(0xA300, 0x61FE, 0xF133), 3, expect_mem(0x300, [2, 5, 4])),
    InstructionCase(
        "STORE", words(0xA300, 0x6001, 0x6102, 0x6203, 0xF255), 5,
        expect_mem(0x300, [1, 2, 3, 0]),
    ),
    InstructionCase(
        "LOAD", words(0xA000, 0xF165), 2,
        expect_all(expect_v(0, 0xF0), expect_v(1, 0x90), expect_v(2, 0)),
    ),
]


@pytest.mark.parametrize("case", INSTRUCTION_CASES, ids=lambda case: case.opcode)
def test_all_instructions_have_behavioral_tests(case: InstructionCase):
    machine = Machine(MachineConfig(seed=1))
    machine.load_program(case.program)
    for key in case.keys:
        machine.set_key(key, True)
    if case.setup:
        case.setup(machine)
    for _ in range(case.steps):
        machine.step()
    case.checker(machine)


def test_instruction_case_coverage_matches_valid_opcodes():
    covered = {case.opcode for case in INSTRUCTION_CASES}
    assert covered == VALID_OPCODES
