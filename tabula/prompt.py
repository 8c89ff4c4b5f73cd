from __future__ import annotations

import curses
import enum
from typing import TYPE_CHECKING

from tabula.render import line_x
from tabula.render import scrolled_line

if TYPE_CHECKING:
    from tabula.screen import Screen  # XXX: circular

PromptResult = enum.Enum('PromptResult', 'CANCELLED')


class Prompt:
    """a single line of input on the status row"""

    def __init__(self, screen: Screen, prompt: str) -> None:
        self._screen = screen
        self._prompt = prompt
        self._s = ''
        self._x = 0

    def _render_prompt(self) -> None:
        width = self._screen.layout.status.width
        if not self._prompt or width < 7:
            prompt_s = ''
        elif len(self._prompt) > width - 6:
            prompt_s = f'{self._prompt[:width - 7]}…: '
        else:
            prompt_s = f'{self._prompt}: '
        width -= len(prompt_s)
        line = scrolled_line(self._s, self._x, width)
        prompt_line = self._screen.layout.status.y
        self._screen.stdscr.insstr(
            prompt_line, 0, f'{prompt_s}{line}', curses.A_REVERSE,
        )
        x = len(prompt_s) + self._x - line_x(self._x, width)
        self._screen.stdscr.move(prompt_line, x)

    def _right(self) -> None:
        self._x = min(len(self._s), self._x + 1)

    def _left(self) -> None:
        self._x = max(0, self._x - 1)

    def _home(self) -> None:
        self._x = 0

    def _end(self) -> None:
        self._x = len(self._s)

    def _backspace(self) -> None:
        if self._x > 0:
            self._s = self._s[:self._x - 1] + self._s[self._x:]
            self._x -= 1

    def _delete(self) -> None:
        if self._x < len(self._s):
            self._s = self._s[:self._x] + self._s[self._x + 1:]

    def _resize(self) -> None:
        self._screen.resize()

    def _cancel(self) -> PromptResult:
        return self._screen.status.cancelled()

    def _submit(self) -> str:
        return self._s

    DISPATCH = {
        # movement
        b'KEY_RIGHT': _right,
        b'KEY_LEFT': _left,
        b'KEY_HOME': _home,
        b'KEY_END': _end,
        # editing
        b'KEY_BACKSPACE': _backspace,
        b'KEY_DC': _delete,
        # misc
        b'KEY_RESIZE': _resize,
        b'^M': _submit,
        b'^C': _cancel,
        b'^[': _cancel,
    }

    def _c(self, c: str) -> None:
        self._s = self._s[:self._x] + c + self._s[self._x:]
        self._x += len(c)

    def run(self) -> PromptResult | str:
        while True:
            self._render_prompt()

            key = self._screen.get_char()
            if key.keyname in Prompt.DISPATCH:
                ret = Prompt.DISPATCH[key.keyname](self)
                if ret is not None:
                    return ret
            elif key.keyname == b'STRING':
                assert isinstance(key.wch, str), key.wch
                self._c(key.wch)
