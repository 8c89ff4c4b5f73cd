from __future__ import annotations

import contextlib
import curses
import functools
import os.path
from typing import Any
from typing import Callable
from typing import cast
from typing import Generator
from typing import TypeVar

from tabula._types import PathPrompt
from tabula.buf import Buf
from tabula.clipboard import Clipboard
from tabula.layout import Dim
from tabula.prompt import PromptResult
from tabula.render import visible_span
from tabula.selection import Selection
from tabula.status import Status

TCallable = TypeVar('TCallable', bound=Callable[..., Any])


class OpenError(RuntimeError):
    pass


def load(filename: str) -> bytes:
    try:
        with open(filename, 'rb') as f:
            contents = f.read()
    except OSError as e:
        raise OpenError(f'error! cannot open {filename!r}: {e.strerror}')

    try:
        contents.decode()
    except UnicodeDecodeError:
        raise OpenError(f'error! not utf-8: {filename!r}')
    else:
        return contents


def action(func: TCallable) -> TCallable:
    @functools.wraps(func)
    def action_inner(self: File, *args: Any, **kwargs: Any) -> Any:
        self.selection.clear()
        return func(self, *args, **kwargs)
    return cast(TCallable, action_inner)


def edit_action(func: TCallable) -> TCallable:
    @functools.wraps(func)
    def edit_action_inner(self: File, *args: Any, **kwargs: Any) -> Any:
        with self.edit_action_context():
            return func(self, *args, **kwargs)
    return cast(TCallable, edit_action_inner)


def keep_selection(func: TCallable) -> TCallable:
    @functools.wraps(func)
    def keep_selection_inner(self: File, *args: Any, **kwargs: Any) -> Any:
        with self.select():
            return func(self, *args, **kwargs)
    return cast(TCallable, keep_selection_inner)


def clear_selection(func: TCallable) -> TCallable:
    @functools.wraps(func)
    def clear_selection_inner(self: File, *args: Any, **kwargs: Any) -> Any:
        ret = func(self, *args, **kwargs)
        self.selection.clear()
        return ret
    return cast(TCallable, clear_selection_inner)


class File:
    def __init__(
            self,
            filename: str | None,
            clipboard: Clipboard,
            *,
            text: bytes = b'',
            tab_size: int = 4,
            modified: bool = True,
    ) -> None:
        self.filename = filename
        self.clipboard = clipboard
        self.modified = modified
        self.buf = Buf(text, tab_size)
        self.selection = Selection()

    @classmethod
    def open(
            cls,
            filename: str,
            clipboard: Clipboard,
            status: Status,
            *,
            tab_size: int = 4,
    ) -> File:
        if os.path.lexists(filename):
            return cls(
                filename,
                clipboard,
                text=load(filename),
                tab_size=tab_size,
                modified=False,
            )
        else:
            status.update('(new file)')
            return cls(filename, clipboard, tab_size=tab_size)

    def __repr__(self) -> str:
        return f'<{type(self).__name__} {self.filename!r}>'

    @property
    def name(self) -> str:
        if self.filename is None:
            return '<<new file>>'
        else:
            return os.path.basename(self.filename) or self.filename

    @property
    def position(self) -> str:
        return f'line {self.buf.y + 1}, col {self.buf.physical_column() + 1}'

    # selection

    def selected_range(self) -> tuple[int, int] | None:
        return self.selection.get(self.buf.pos)

    def selection_or_current_line(self) -> tuple[int, int]:
        selected = self.selected_range()
        if selected is None:
            return self.buf.line.start, self.buf.line.end
        else:
            return selected

    @contextlib.contextmanager
    def select(self) -> Generator[None, None, None]:
        # the marker is the position *before* the first shifted movement
        self.selection.set_marker_if_absent(self.buf.pos)
        marker = self.selection.marker
        try:
            yield
        finally:
            self.selection.marker = marker

    @contextlib.contextmanager
    def edit_action_context(self) -> Generator[None, None, None]:
        version = self.buf.version
        try:
            yield
        finally:
            if self.buf.version != version:
                self.modified = True

    # movement

    @action
    def up(self, dim: Dim) -> None:
        self.buf.up(dim)

    @action
    def down(self, dim: Dim) -> None:
        self.buf.down(dim)

    @action
    def right(self, dim: Dim) -> None:
        self.buf.right(dim)

    @action
    def left(self, dim: Dim) -> None:
        self.buf.left(dim)

    @action
    def home(self, dim: Dim) -> None:
        self.buf.home(dim)

    @action
    def end(self, dim: Dim) -> None:
        self.buf.end(dim)

    @action
    def page_up(self, dim: Dim) -> None:
        self.buf.up(dim, dim.height)

    @action
    def page_down(self, dim: Dim) -> None:
        self.buf.down(dim, dim.height)

    # editing

    @edit_action
    @clear_selection
    def c(self, wch: str, dim: Dim) -> None:
        self.buf.insert(self.buf.pos, wch.encode())
        for _ in wch:
            self.buf.right(dim)

    def enter(self, dim: Dim) -> None:
        self.c('\n', dim)

    def tab(self, dim: Dim) -> None:
        self.c('\t', dim)

    @edit_action
    @clear_selection
    def backspace(self, dim: Dim) -> None:
        # backspace at the beginning of the file does nothing
        if self.buf.pos > 0:
            self.buf.left(dim)
            self.buf.remove(self.buf.pos, self.buf.next_pos())

    @edit_action
    @clear_selection
    def delete(self, dim: Dim) -> None:
        # delete at the end of the file does nothing
        if self.buf.pos < self.buf.size:
            self.buf.remove(self.buf.pos, self.buf.next_pos())

    def copy(self, dim: Dim) -> None:
        start, end = self.selection_or_current_line()
        text = self.buf.substring(start, end)
        # copying a whole line always produces a full line
        if self.selection.marker is None:
            text += '\n'
        self.clipboard.set(text)

    @edit_action
    @clear_selection
    def cut(self, dim: Dim) -> None:
        start, end = self.selection_or_current_line()
        text = self.buf.substring(start, end)
        if self.selection.marker is None:
            text += '\n'
            end = min(end + 1, self.buf.size)
        self.clipboard.set(text)
        self.buf.remove(start, end)
        self.buf.move_to_byte(start, dim)

    @edit_action
    @clear_selection
    def paste(self, dim: Dim) -> None:
        s = self.clipboard.get().encode()
        pos = self.buf.pos
        self.buf.insert(pos, s)
        self.buf.move_to_byte(pos + len(s), dim)
        # a paste counts as a change even when the clipboard is empty
        self.modified = True

    DISPATCH = {
        # movement
        b'KEY_UP': up,
        b'KEY_DOWN': down,
        b'KEY_RIGHT': right,
        b'KEY_LEFT': left,
        b'KEY_HOME': home,
        b'KEY_END': end,
        b'KEY_PPAGE': page_up,
        b'KEY_NPAGE': page_down,
        # editing
        b'KEY_BACKSPACE': backspace,
        b'KEY_DC': delete,
        b'^M': enter,
        b'^I': tab,
        b'^C': copy,
        b'^X': cut,
        b'^V': paste,
        # selection (shift + movement)
        b'KEY_SR': keep_selection(up),
        b'KEY_SF': keep_selection(down),
        b'KEY_SLEFT': keep_selection(left),
        b'KEY_SRIGHT': keep_selection(right),
        b'KEY_SHOME': keep_selection(home),
        b'KEY_SEND': keep_selection(end),
        b'KEY_SPREVIOUS': keep_selection(page_up),
        b'KEY_SNEXT': keep_selection(page_down),
    }

    # saving

    def save(self, prompt: PathPrompt, status: Status) -> PromptResult | None:
        chosen = False
        if self.filename is None:
            filename = prompt.read_line('enter filename')
            if filename is None:
                return status.cancelled()
            else:
                self.filename = filename
                chosen = True

        try:
            with open(self.filename, 'wb') as f:
                f.write(self.buf.text)
        except OSError as e:
            status.update(f'cannot save file: {e}')
            # only forget a name which was picked for this save
            if chosen:
                self.filename = None
            return PromptResult.CANCELLED

        self.modified = False
        size = self.buf.size
        size_word = 'byte' if size == 1 else 'bytes'
        status.update(f'saved! ({size} {size_word} written)')
        return None

    # positioning

    def move_cursor(
            self,
            stdscr: curses._CursesWindow,
            dim: Dim,
    ) -> None:
        stdscr.move(*self.buf.cursor_position(dim))

    def _draw_selection(
            self,
            stdscr: curses._CursesWindow,
            dim: Dim,
            draw_y: int,
            l_y: int,
            selected: tuple[int, int],
    ) -> None:
        s, e = selected
        line = self.buf.lines[l_y]
        if s == e or e < line.start or s > line.end:
            return

        r_x = self.buf.column_at(l_y, max(s, line.start) - line.start)
        r_end = self.buf.column_at(l_y, min(e, line.end) - line.start)
        # the newline is drawn as one cell when the selection continues
        if e > line.end:
            r_end += 1

        l_x = self.buf.line_x(dim) if l_y == self.buf.y else 0
        span = visible_span(r_x, r_end, l_x, dim.width)
        if span is not None:
            h_s_x, h_e_x = span
            stdscr.chgat(draw_y, h_s_x, h_e_x - h_s_x, curses.A_REVERSE)

    def draw(self, stdscr: curses._CursesWindow, dim: Dim) -> None:
        to_display = min(self.buf.displayable_count, dim.height)
        selected = self.selected_range()

        for i in range(to_display):
            draw_y = i + dim.y
            l_y = self.buf.file_y + i
            stdscr.insstr(draw_y, 0, self.buf.rendered_line(l_y, dim))
            if selected is not None:
                self._draw_selection(stdscr, dim, draw_y, l_y, selected)

        for i in range(to_display, dim.height):
            stdscr.move(i + dim.y, 0)
            stdscr.clrtoeol()
