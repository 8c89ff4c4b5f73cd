from __future__ import annotations

import bisect
from typing import Iterator
from typing import NamedTuple

from tabula.layout import Dim
from tabula.line_index import Line
from tabula.line_index import rebuild
from tabula.render import expand_tabs
from tabula.render import line_x
from tabula.render import scrolled_line


def _is_continuation(b: int) -> bool:
    return b & 0xc0 == 0x80


class Cursor(NamedTuple):
    line: int
    column: int


class Buf:
    """utf-8 text plus the line index, cursor and scroll position over it

    `x` is a byte offset into line `y`.  every mutation rebuilds the line
    index from scratch and then re-validates the cursor against it.
    """

    def __init__(self, text: bytes = b'', tab_size: int = 4) -> None:
        self._text = bytearray(text)
        self.tab_size = tab_size
        self.lines = rebuild(self._text)
        self.file_y = self.y = self.x = 0
        self.version = 0

    # read only interface

    def __repr__(self) -> str:
        return (
            f'{type(self).__name__}('
            f'{bytes(self._text)!r}, x={self.x}, y={self.y}, '
            f'file_y={self.file_y}'
            f')'
        )

    def __getitem__(self, idx: int) -> str:
        line = self.lines[idx]
        return self._text[line.start:line.end].decode()

    def __iter__(self) -> Iterator[str]:
        for idx in range(len(self.lines)):
            yield self[idx]

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def text(self) -> bytes:
        return bytes(self._text)

    @property
    def size(self) -> int:
        return len(self._text)

    def substring(self, start: int, end: int) -> str:
        return self._text[start:end].decode()

    def is_char_boundary(self, pos: int) -> bool:
        assert 0 <= pos <= len(self._text), pos
        return pos == len(self._text) or not _is_continuation(self._text[pos])

    # position properties

    @property
    def line(self) -> Line:
        return self.lines[self.y]

    @property
    def cursor(self) -> Cursor:
        return Cursor(line=self.y, column=self.x)

    @property
    def pos(self) -> int:
        return self.line.start + self.x

    def next_pos(self) -> int:
        pos = self.pos + 1
        while not self.is_char_boundary(pos):
            pos += 1
        return pos

    def prev_pos(self) -> int:
        pos = self.pos - 1
        while not self.is_char_boundary(pos):
            pos -= 1
        return pos

    def _ensure_char_boundary(self) -> None:
        while not self.is_char_boundary(self.pos):
            self.x -= 1

    def column_at(self, idx: int, x: int) -> int:
        line = self.lines[idx]
        s = self._text[line.start:line.start + x].decode()
        return len(s) + s.count('\t') * (self.tab_size - 1)

    def physical_column(self) -> int:
        return self.column_at(self.y, self.x)

    def line_x(self, dim: Dim) -> int:
        return line_x(self.physical_column(), dim.width)

    def cursor_position(self, dim: Dim) -> tuple[int, int]:
        y = self.y - self.file_y + dim.y
        x = self.physical_column() - self.line_x(dim)
        return y, x

    @property
    def displayable_count(self) -> int:
        return len(self.lines) - self.file_y

    # mutators

    def _rebuild(self) -> None:
        self.lines = rebuild(self._text)
        self.y = min(self.y, len(self.lines) - 1)
        self.x = min(self.x, self.line.size)
        self._ensure_char_boundary()

    def insert(self, pos: int, s: bytes) -> None:
        assert self.is_char_boundary(pos), pos
        if s:
            self.version += 1
        self._text[pos:pos] = s
        self._rebuild()

    def remove(self, start: int, end: int) -> bytes:
        assert 0 <= start <= end <= len(self._text), (start, end)
        victim = bytes(self._text[start:end])
        if victim:
            self.version += 1
        del self._text[start:end]
        self._rebuild()
        return victim

    # rendered lines

    def rendered_line(self, idx: int, dim: Dim) -> str:
        x = self.physical_column() if idx == self.y else 0
        expanded = expand_tabs(self[idx], self.tab_size)
        return scrolled_line(expanded, x, dim.width)

    # movement

    def scroll_to_cursor(self, dim: Dim) -> None:
        height = max(dim.height, 1)
        self.file_y = min(max(self.file_y, self.y - (height - 1)), self.y)

    def _character_column(self) -> int:
        return len(self._text[self.line.start:self.pos].decode())

    def _set_x_from_character_column(self, n: int) -> None:
        # the column is kept in characters, not in rendered cells, so tabs
        # on the destination line can shift the cursor visually
        self.x = len(self[self.y][:n].encode())
        self._ensure_char_boundary()

    def up(self, dim: Dim, n: int = 1) -> None:
        chars = self._character_column()
        self.y = max(self.y - n, 0)
        self._set_x_from_character_column(chars)
        self.scroll_to_cursor(dim)

    def down(self, dim: Dim, n: int = 1) -> None:
        chars = self._character_column()
        self.y = min(self.y + n, len(self.lines) - 1)
        self._set_x_from_character_column(chars)
        self.scroll_to_cursor(dim)

    def right(self, dim: Dim) -> None:
        if self.x < self.line.size:
            self.x = self.next_pos() - self.line.start
        elif self.y < len(self.lines) - 1:
            self.y += 1
            self.x = 0
        self.scroll_to_cursor(dim)

    def left(self, dim: Dim) -> None:
        if self.x > 0:
            self.x = self.prev_pos() - self.line.start
        elif self.y > 0:
            self.y -= 1
            self.x = self.line.size
        self.scroll_to_cursor(dim)

    def home(self, dim: Dim) -> None:
        self.x = 0
        self.scroll_to_cursor(dim)

    def end(self, dim: Dim) -> None:
        self.x = self.line.size
        self._ensure_char_boundary()
        self.scroll_to_cursor(dim)

    def move_to_byte(self, pos: int, dim: Dim) -> None:
        assert 0 <= pos <= len(self._text), pos
        # a line's end is included so the cursor can sit before its newline
        starts = [line.start for line in self.lines]
        self.y = bisect.bisect_right(starts, pos) - 1
        self.x = pos - self.line.start
        self.scroll_to_cursor(dim)
