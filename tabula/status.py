from __future__ import annotations

import curses

from tabula.layout import Dim
from tabula.prompt import PromptResult


class Status:
    """one message slot, shown for a number of keystrokes

    when there is no message the row shows the cursor position instead.
    """

    def __init__(self) -> None:
        self._status = ''
        self._action_counter = -1

    @property
    def message(self) -> str:
        return self._status

    def update(self, status: str) -> None:
        self._status = status
        self._action_counter = 25

    def clear(self) -> None:
        self._status = ''

    def draw(
            self,
            stdscr: curses._CursesWindow,
            dim: Dim,
            position: str,
    ) -> None:
        if self._status:
            stdscr.insstr(dim.y, 0, ' ' * dim.width)
            status = f' {self._status} '
            x = (dim.width - len(status)) // 2
            if x < 0:
                x = 0
                status = status.strip()
            stdscr.insstr(dim.y, x, status, curses.A_REVERSE)
        elif dim.y > 0:
            stdscr.insstr(dim.y, 0, f'{position} '.rjust(dim.width))

    def tick(self, dim: Dim) -> None:
        # a 1-row window shares the status row with the file, clear quickly
        if dim.y > 0:
            self._action_counter -= 1
        else:
            self._action_counter -= 24
        if self._action_counter < 0:
            self.clear()

    def cancelled(self) -> PromptResult:
        self.update('cancelled')
        return PromptResult.CANCELLED
