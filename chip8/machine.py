"""The CHIP-8 machine: owns all architectural state and runs instructions."""

import logging
import random
from dataclasses import dataclass
from typing import Iterable, Optional

from .cpu import CPU
from .decoder import Instruction, decode
from .display import Framebuffer
from .errors import Chip8RuntimeError, InvalidProgram, UnknownOpcode
from .instructions import IOBus, execute_instruction
from .keypad import Keypad
from .memory import Memory, PROGRAM_START

logger = logging.getLogger("Chip8.Machine")


@dataclass
class MachineConfig:
    """Options for a single machine instance."""
    strict: bool = True  # unknown words raise instead of being skipped
    seed: Optional[int] = None  # seed for the RND instruction


class Machine:
    """
    Single CHIP-8 machine.

    The host drives it: step() executes one instruction, tick_timers() is
    called at a fixed external rate (conventionally 60 Hz), set_key() feeds
    input and get_framebuffer() exposes the screen for rendering.
    """

    def __init__(self, config: Optional[MachineConfig] = None):
        self.config = config or MachineConfig()
        self.cpu = CPU()
        self.memory = Memory()
        self.display = Framebuffer()
        self.keypad = Keypad()
        self.io = IOBus(self.display, self.keypad, random.Random(self.config.seed))
        self.steps = 0
        logger.info("Machine initialized (strict=%s)", self.config.strict)

    def reset(self) -> None:
        """Return to the post-construction state, discarding the program."""
        self.cpu.reset()
        self.memory.reset()
        self.display.clear()
        self.keypad.reset()
        self.io.rng.seed(self.config.seed)
        self.steps = 0
        logger.info("Machine reset")

    def load_program(self, data: Iterable[int]) -> int:
        """Copy program bytes into memory at 0x200.

        Returns:
            Number of bytes loaded

        Raises:
            ProgramTooLarge: if the program does not fit; memory is untouched
            InvalidProgram: if data is not a sequence of byte values
        """
        if isinstance(data, int):
            raise InvalidProgram(f"Program is not a byte sequence: {data!r}")
        try:
            program = bytes(data)
        except (TypeError, ValueError) as e:
            raise InvalidProgram(f"Program is not a byte sequence: {e}") from e
        loaded = self.memory.load(program, PROGRAM_START)
        logger.info("Loaded %d-byte program at %#05x", loaded, PROGRAM_START)
        return loaded

    def set_key(self, index: int, pressed: bool) -> None:
        """Set or clear one key; a pending key wait sees it on the next step."""
        self.keypad.set_key(index, pressed)

    def tick_timers(self) -> bool:
        """Decrement the delay and sound timers once.

        Returns:
            True on the tick where the sound timer reaches zero, the point
            at which a host should stop its tone
        """
        sound_stopped = self.cpu.tick_timers()
        if sound_stopped:
            logger.debug("Sound timer expired")
        return sound_stopped

    def get_framebuffer(self) -> tuple[bool, ...]:
        """Read-only row-major pixel grid of display.width * display.height."""
        return self.display.view()

    def fetch(self) -> int:
        """Read the instruction word at PC and advance PC past it."""
        word = self.memory.read_word(self.cpu.pc)
        self.cpu.set_pc(self.cpu.pc + 2)
        return word

    def step(self) -> Optional[Instruction]:
        """Fetch, decode and execute exactly one instruction.

        Returns:
            The executed instruction, or None when permissive mode skipped
            an unknown word

        Raises:
            Chip8RuntimeError: on an unknown word (strict mode), stack
                overflow/underflow or an invalid memory access. PC is left
                at the address of the faulting instruction.
        """
        addr = self.cpu.pc
        word: Optional[int] = None
        try:
            word = self.fetch()
            try:
                instr = decode(word, addr)
            except UnknownOpcode:
                if self.config.strict:
                    raise
                logger.warning("Skipping unknown instruction %#06x at %#05x", word, addr)
                self.steps += 1
                return None

            new_pc = execute_instruction(instr, self.cpu, self.memory, self.io)
            if new_pc is not None:
                self.cpu.set_pc(new_pc)
        except Chip8RuntimeError as e:
            self.cpu.pc = addr
            e.addr = addr
            if e.word is None:
                e.word = word
            raise

        self.steps += 1
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%#05x  %04X  %s", addr, word, instr.text)
        return instr

    def get_state(self) -> dict:
        """Snapshot of CPU registers and key state."""
        state = self.cpu.get_state()
        state["keys"] = list(self.keypad.snapshot())
        return state
