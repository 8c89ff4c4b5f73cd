from __future__ import annotations

from typing import NamedTuple


class Line(NamedTuple):
    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start


def rebuild(text: bytes | bytearray) -> tuple[Line, ...]:
    """split `text` at each newline byte.

    the newline itself belongs to no line, so consecutive lines are separated
    by exactly one byte.  there is always a final line, even for empty text
    or text ending in a newline.
    """
    ret = []
    start = 0
    nl = text.find(b'\n')
    while nl != -1:
        ret.append(Line(start, nl))
        start = nl + 1
        nl = text.find(b'\n', start)
    ret.append(Line(start, len(text)))
    return tuple(ret)
