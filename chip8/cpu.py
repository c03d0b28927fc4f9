"""CPU state model for the CHIP-8 interpreter."""

from .errors import StackOverflow, StackUnderflow
from .memory import PROGRAM_START

NUM_REGISTERS = 16
STACK_SIZE = 16
FLAG = 0xF


class CPU:
    """CPU state: V registers, I, program counter, call stack and timers."""

    def __init__(self, start_address: int = PROGRAM_START):
        self.v = bytearray(NUM_REGISTERS)
        self.i: int = 0
        self.pc: int = start_address
        self.sp: int = 0
        self.stack: list[int] = [0] * STACK_SIZE
        self.delay_timer: int = 0
        self.sound_timer: int = 0

    def set_v(self, index: int, value: int) -> None:
        """Set Vx, wrapping to 8 bits."""
        self.v[index] = value & 0xFF

    def set_flag(self, value: int) -> None:
        """Set VF."""
        self.v[FLAG] = value & 0xFF

    def set_i(self, value: int) -> None:
        """Set I, wrapping to 16 bits."""
        self.i = value & 0xFFFF

    def set_pc(self, value: int) -> None:
        """Set program counter, wrapping to 16 bits."""
        self.pc = value & 0xFFFF

    def push(self, value: int) -> None:
        """Push a return address; the stack is unchanged on overflow."""
        if self.sp >= STACK_SIZE:
            raise StackOverflow(f"Call stack overflow at depth {STACK_SIZE}")
        self.stack[self.sp] = value & 0xFFFF
        self.sp += 1

    def pop(self) -> int:
        """Pop a return address; the stack is unchanged on underflow."""
        if self.sp == 0:
            raise StackUnderflow("Return with empty call stack")
        self.sp -= 1
        return self.stack[self.sp]

    def tick_timers(self) -> bool:
        """Decrement both timers if nonzero.

        Returns:
            True when the sound timer reached zero on this tick
        """
        if self.delay_timer > 0:
            self.delay_timer -= 1
        sound_stopped = False
        if self.sound_timer > 0:
            sound_stopped = self.sound_timer == 1
            self.sound_timer -= 1
        return sound_stopped

    def get_state(self) -> dict:
        """Get current register state as dictionary."""
        return {
            "pc": self.pc,
            "i": self.i,
            "sp": self.sp,
            "v": list(self.v),
            "stack": self.stack[:self.sp],
            "delay_timer": self.delay_timer,
            "sound_timer": self.sound_timer,
        }

    def reset(self, start_address: int = PROGRAM_START) -> None:
        """Reset CPU to initial state."""
        self.v = bytearray(NUM_REGISTERS)
        self.i = 0
        self.pc = start_address
        self.sp = 0
        self.stack = [0] * STACK_SIZE
        self.delay_timer = 0
        self.sound_timer = 0
