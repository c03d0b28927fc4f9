"""Tests for the framebuffer and keypad."""

import pytest
from chip8.display import Framebuffer, SCREEN_WIDTH, SCREEN_HEIGHT
from chip8.keypad import Keypad
from chip8.errors import InvalidKey


class TestFramebuffer:
    """Framebuffer tests."""

    def test_default_initialization(self):
        """Screen starts blank at 64x32."""
        fb = Framebuffer()
        assert (fb.width, fb.height) == (SCREEN_WIDTH, SCREEN_HEIGHT)
        assert fb.view() == (False,) * (64 * 32)

    def test_xor_pixel(self):
        """XOR toggles and reports collisions."""
        fb = Framebuffer()
        assert fb.xor_pixel(3, 4) is False
        assert fb.view()[3 + 64 * 4] is True
        assert fb.xor_pixel(3, 4) is True
        assert fb.view()[3 + 64 * 4] is False

    def test_row_major_layout(self):
        """Pixel (x, y) lives at index x + 64 * y."""
        fb = Framebuffer()
        fb.xor_pixel(5, 2)
        assert fb.view()[5 + 64 * 2] is True

    def test_draw_sprite_msb_first(self):
        """The most significant bit is the leftmost pixel."""
        fb = Framebuffer()
        fb.draw_sprite(0, 0, bytes([0b10000001]))
        assert fb.to_rows()[0][:8] == "#......#"

    def test_draw_sprite_wraps(self):
        """Pixels past the right/bottom edge wrap to column 0 / row 0."""
        fb = Framebuffer()
        fb.draw_sprite(63, 31, bytes([0xC0, 0xC0]))
        assert fb.view()[63 + 64 * 31]
        assert fb.view()[0 + 64 * 31]
        assert fb.view()[63 + 64 * 0]
        assert fb.view()[0 + 64 * 0]
        assert fb.lit_count() == 4

    def test_clear(self):
        """Clear turns every pixel off."""
        fb = Framebuffer()
        fb.draw_sprite(10, 10, bytes([0xFF] * 4))
        fb.clear()
        assert fb.lit_count() == 0

    def test_view_is_a_copy(self):
        """The view does not follow later draws."""
        fb = Framebuffer()
        view = fb.view()
        fb.xor_pixel(0, 0)
        assert view[0] is False

    def test_to_rows(self):
        """Rows render as # and . strings."""
        fb = Framebuffer()
        fb.xor_pixel(1, 0)
        rows = fb.to_rows()
        assert len(rows) == 32
        assert rows[0] == "." + "#" + "." * 62


class TestKeypad:
    """Keypad tests."""

    def test_default_initialization(self):
        """All keys start released."""
        keys = Keypad()
        assert keys.snapshot() == (False,) * 16
        assert keys.first_pressed() is None

    def test_set_key(self):
        """Keys can be pressed and released."""
        keys = Keypad()
        keys.set_key(0xA, True)
        assert keys.is_pressed(0xA)
        keys.set_key(0xA, False)
        assert not keys.is_pressed(0xA)

    def test_first_pressed_is_lowest(self):
        """Lowest-indexed pressed key wins."""
        keys = Keypad()
        keys.set_key(9, True)
        keys.set_key(4, True)
        assert keys.first_pressed() == 4

    @pytest.mark.parametrize("index", [-1, 16, 255])
    def test_invalid_key(self, index):
        """Indices outside 0-15 are rejected."""
        with pytest.raises(InvalidKey):
            Keypad().set_key(index, True)

    def test_reset(self):
        """Reset releases every key."""
        keys = Keypad()
        keys.set_key(1, True)
        keys.reset()
        assert keys.first_pressed() is None
