"""An in-memory VGA text-mode screen with character and colour cells."""

from __future__ import annotations


class TextScreen:
    """A text screen of ``width`` x ``height`` cells, each a char and a colour.

    ``x`` and ``y`` hold the write position; ``cursor`` holds the linear
    offset last given to the hardware cursor by :meth:`set_cursor`.
    """

    def __init__(self, width: int = 80, height: int = 25, default_color: int = 0x07) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("screen dimensions must be positive")
        self.width = width
        self.height = height
        self.default_color = default_color & 0xFF
        self._buffer = bytearray(2 * width * height)
        self.x = 0
        self.y = 0
        self.cursor = 0
        self.clear()

    def _offset(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"cell ({x}, {y}) is outside the screen")
        return 2 * (y * self.width + x)

    def put_char(self, x: int, y: int, c: str) -> None:
        """Store character ``c`` at cell (x, y)."""
        self._buffer[self._offset(x, y)] = ord(c) & 0xFF

    def put_color(self, x: int, y: int, color: int) -> None:
        """Store colour attribute ``color`` at cell (x, y)."""
        self._buffer[self._offset(x, y) + 1] = color & 0xFF

    def char_at(self, x: int, y: int) -> str:
        return chr(self._buffer[self._offset(x, y)])

    def color_at(self, x: int, y: int) -> int:
        return self._buffer[self._offset(x, y) + 1]

    def set_cursor(self, x: int, y: int) -> None:
        """Move the hardware cursor to (x, y)."""
        self.cursor = (y * self.width + x) & 0xFFFF

    def clear(self) -> None:
        """Blank every cell with the default colour and home the cursor."""
        for y in range(self.height):
            for x in range(self.width):
                self.put_char(x, y, "\0")
                self.put_color(x, y, self.default_color)
        self.x = 0
        self.y = 0
        self.set_cursor(self.x, self.y)

    def scroll_back(self, lines: int) -> None:
        """Move the content up by ``lines`` rows, blanking the rows freed."""
        for y in range(lines, self.height):
            for x in range(self.width):
                self.put_char(x, y - lines, self.char_at(x, y))
                self.put_color(x, y - lines, self.color_at(x, y))
        for y in range(max(self.height - lines, 0), self.height):
            for x in range(self.width):
                self.put_char(x, y, "\0")
                self.put_color(x, y, self.default_color)
        self.y -= lines

    def putc(self, c: str) -> None:
        """Write one character, handling newline, tab and carriage return."""
        if c == "\n":
            self.x = 0
            self.y += 1
        elif c == "\t":
            # The bound is re-evaluated each pass as the column moves.
            count = 0
            while count < 4 - (self.x % 4):
                self.putc(" ")
                count += 1
        elif c == "\r":
            self.x = 0
        else:
            self.put_char(self.x, self.y, c)
            self.x += 1

        if self.x >= self.width:
            self.y += 1
            self.x = 0
        if self.y >= self.height:
            self.scroll_back(1)

        self.set_cursor(self.x, self.y)

    def write(self, text: str) -> None:
        """Write every character of ``text`` up to the first NUL."""
        for c in text.split("\0", 1)[0]:
            self.putc(c)

    def lines(self) -> list[str]:
        """Return each row as text, blank cells as spaces, right-stripped."""
        return [
            "".join(self.char_at(x, y) for x in range(self.width)).replace("\0", " ").rstrip()
            for y in range(self.height)
        ]