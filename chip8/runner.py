"""Headless program runner with tracing for the CHIP-8 interpreter."""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional, Union

from .decoder import Instruction
from .errors import Chip8Error, ErrorInfo, InvalidProgram
from .machine import Machine, MachineConfig

logger = logging.getLogger("Chip8.Runner")

_HEX_PREFIX_RE = re.compile(r"0[xX]")
_SEPARATOR_RE = re.compile(r"[\s,_]+")


@dataclass
class KeyEvent:
    """Key press or release applied just before the given step runs."""
    step: int
    key: int
    pressed: bool = True


@dataclass
class RunOptions:
    """Options for program execution."""
    max_steps: int = 1000
    steps_per_tick: int = 10  # 0 disables timer ticks
    seed: Optional[int] = None
    strict: bool = True
    trace: bool = True
    trace_include_registers: bool = False
    trace_include_i: bool = False
    key_events: list[KeyEvent] = field(default_factory=list)
    stop_on_self_jump: bool = True


@dataclass
class TraceRow:
    """Single row of execution trace."""
    step: int
    addr: int
    word: Optional[int]
    pc: int
    instr_text: str = ""
    v: Optional[list[int]] = None
    i: Optional[int] = None

    def to_dict(self, include_registers: bool, include_i: bool) -> dict:
        result = {
            "step": self.step,
            "addr": self.addr,
            "word": self.word,
            "pc": self.pc,
            "instr_text": self.instr_text,
        }
        if include_registers:
            result["v"] = self.v
        if include_i:
            result["i"] = self.i
        return result


@dataclass
class RunResult:
    """Result of program execution."""
    status: str  # "ok" | "error"
    steps_executed: int
    halted: bool
    final_state: dict
    framebuffer: list[str]
    lit_pixels: int
    trace: list[dict]
    error: Optional[ErrorInfo] = None

    def to_dict(self) -> dict:
        result = {
            "status": self.status,
            "steps_executed": self.steps_executed,
            "halted": self.halted,
            "final_state": self.final_state,
            "framebuffer": self.framebuffer,
            "lit_pixels": self.lit_pixels,
            "trace": self.trace,
        }
        if self.error:
            result["error"] = self.error.to_dict()
        return result


def parse_hex_program(text: str) -> bytes:
    """Parse hex text such as '6005 A22A' or '0x6005, 0xA22A' into bytes.

    Raises:
        InvalidProgram: if the text is not an even number of hex digits
    """
    digits = _SEPARATOR_RE.sub("", _HEX_PREFIX_RE.sub("", text))
    try:
        return bytes.fromhex(digits)
    except ValueError as e:
        raise InvalidProgram(f"Invalid hex program: {e}") from e


def _is_self_jump(instr: Optional[Instruction]) -> bool:
    return instr is not None and instr.opcode == "JP" and instr.nnn == instr.addr


def run_program(
    program: Union[bytes, bytearray, str],
    options: Optional[RunOptions] = None,
) -> RunResult:
    """Run a CHIP-8 program headlessly.

    Args:
        program: Raw program bytes, or hex text
        options: Execution options

    Returns:
        RunResult with execution status, final state, screen and trace
    """
    if options is None:
        options = RunOptions()

    trace_rows: list[dict] = []
    error_info: Optional[ErrorInfo] = None
    steps_executed = 0
    halted = False

    machine = Machine(MachineConfig(strict=options.strict, seed=options.seed))

    # Load program
    try:
        data = parse_hex_program(program) if isinstance(program, str) else program
        machine.load_program(data)
    except Chip8Error as e:
        return RunResult(
            status="error",
            steps_executed=0,
            halted=False,
            final_state=machine.get_state(),
            framebuffer=machine.display.to_rows(),
            lit_pixels=machine.display.lit_count(),
            trace=[],
            error=e.to_error_info(),
        )

    pending_keys = sorted(options.key_events, key=lambda event: event.step)
    next_key = 0

    try:
        while steps_executed < options.max_steps:
            step_no = steps_executed + 1

            # Apply key events due before this step
            while next_key < len(pending_keys) and pending_keys[next_key].step <= step_no:
                event = pending_keys[next_key]
                machine.set_key(event.key, event.pressed)
                next_key += 1

            instr_addr = machine.cpu.pc
            instr = machine.step()
            steps_executed = step_no

            if options.steps_per_tick and steps_executed % options.steps_per_tick == 0:
                machine.tick_timers()

            # Record trace
            if options.trace:
                row = TraceRow(
                    step=steps_executed,
                    addr=instr_addr,
                    word=instr.word if instr else None,
                    pc=machine.cpu.pc,
                    instr_text=instr.text if instr else "",
                    v=list(machine.cpu.v) if options.trace_include_registers else None,
                    i=machine.cpu.i if options.trace_include_i else None,
                )
                trace_rows.append(row.to_dict(
                    include_registers=options.trace_include_registers,
                    include_i=options.trace_include_i,
                ))

            if options.stop_on_self_jump and _is_self_jump(instr):
                halted = True
                break

    except Chip8Error as e:
        # Attach context to error
        e.step = steps_executed + 1
        error_info = e.to_error_info()
        logger.info("Run failed at step %d: %s", e.step, e.message)

    logger.info("Run finished after %d steps (halted=%s)", steps_executed, halted)

    return RunResult(
        status="ok" if error_info is None else "error",
        steps_executed=steps_executed,
        halted=halted,
        final_state=machine.get_state(),
        framebuffer=machine.display.to_rows(),
        lit_pixels=machine.display.lit_count(),
        trace=trace_rows,
        error=error_info,
    )
