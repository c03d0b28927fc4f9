"""Hexadecimal keypad state."""

from typing import Optional

from .errors import InvalidKey

NUM_KEYS = 16


class Keypad:
    """Pressed/released state of the 16 keys 0-F, set by the host."""

    def __init__(self):
        self._keys = [False] * NUM_KEYS

    def set_key(self, index: int, pressed: bool) -> None:
        if not 0 <= index < NUM_KEYS:
            raise InvalidKey(f"Key index out of range: {index}")
        self._keys[index] = bool(pressed)

    def is_pressed(self, index: int) -> bool:
        return self._keys[index & 0xF]

    def first_pressed(self) -> Optional[int]:
        """Lowest-indexed pressed key, or None if no key is down."""
        for index, pressed in enumerate(self._keys):
            if pressed:
                return index
        return None

    def snapshot(self) -> tuple[bool, ...]:
        return tuple(self._keys)

    def reset(self) -> None:
        self._keys = [False] * NUM_KEYS
