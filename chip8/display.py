"""Monochrome framebuffer for the CHIP-8 interpreter."""

SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32

PIXEL_ON = "#"
PIXEL_OFF = "."


class Framebuffer:
    """Flat row-major grid of booleans, index = x + width * y."""

    def __init__(self, width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT):
        self.width = width
        self.height = height
        self._pixels = [False] * (width * height)

    def clear(self) -> None:
        self._pixels = [False] * (self.width * self.height)

    def xor_pixel(self, x: int, y: int) -> bool:
        """Toggle the pixel at (x, y), wrapping at the screen edges.

        Returns:
            True if the pixel was set before the toggle (collision)
        """
        idx = (x % self.width) + self.width * (y % self.height)
        was_set = self._pixels[idx]
        self._pixels[idx] = not was_set
        return was_set

    def draw_sprite(self, x: int, y: int, rows: bytes) -> bool:
        """XOR an 8-pixel-wide sprite onto the screen at (x, y).

        Each byte of rows is one sprite row, most significant bit leftmost.
        Coordinates wrap around the screen edges rather than clipping.

        Returns:
            True if any set pixel was turned off
        """
        collision = False
        for row, bits in enumerate(rows):
            for col in range(8):
                if bits & (0x80 >> col):
                    collision |= self.xor_pixel(x + col, y + row)
        return collision

    def view(self) -> tuple[bool, ...]:
        """Read-only copy of the pixel grid."""
        return tuple(self._pixels)

    def to_rows(self) -> list[str]:
        """Render each screen row as a string of PIXEL_ON / PIXEL_OFF."""
        rows = []
        for y in range(self.height):
            start = y * self.width
            line = self._pixels[start:start + self.width]
            rows.append("".join(PIXEL_ON if p else PIXEL_OFF for p in line))
        return rows

    def lit_count(self) -> int:
        return sum(self._pixels)
