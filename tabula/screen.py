from __future__ import annotations

import contextlib
import curses
import enum
import importlib.metadata
from typing import Generator
from typing import NamedTuple

from tabula.clipboard import Clipboard
from tabula.file import File
from tabula.file import OpenError
from tabula.layout import Dim
from tabula.layout import Layout
from tabula.layout import make_layout
from tabula.perf import Perf
from tabula.prompt import Prompt
from tabula.prompt import PromptResult
from tabula.status import Status

VERSION_STR = f'tabula v{importlib.metadata.version("tabula")}'

# escape sequences for the bound keys which curses does not translate itself
ESCAPE_SEQUENCES = {
    '\x1bOH': b'KEY_HOME',
    '\x1b[1~': b'KEY_HOME',
    '\x1bOF': b'KEY_END',
    '\x1b[4~': b'KEY_END',
    '\x1b[1;2A': b'KEY_SR',
    '\x1b[1;2B': b'KEY_SF',
    '\x1b[1;2C': b'KEY_SRIGHT',
    '\x1b[1;2D': b'KEY_SLEFT',
    '\x1b[1;2H': b'KEY_SHOME',
    '\x1b[1;2F': b'KEY_SEND',
    '\x1b[5;2~': b'KEY_SPREVIOUS',
    '\x1b[6;2~': b'KEY_SNEXT',
    '\x1b[1;3C': b'kRIT3',
    '\x1b[1;3D': b'kLFT3',
}
ESCAPE_SEQUENCE_MAX = max(len(k) for k in ESCAPE_SEQUENCES)
KEYNAME_ALIASES = {
    b'^?': b'KEY_BACKSPACE',
    b'^H': b'KEY_BACKSPACE',
    b'PADENTER': b'^M',
    # windows-curses
    b'ALT_LEFT': b'kLFT3',
    b'ALT_RIGHT': b'kRIT3',
    b'KEY_SUP': b'KEY_SR',
    b'KEY_SDOWN': b'KEY_SF',
}


class EditResult(enum.Enum):
    EXIT = enum.auto()
    NEXT = enum.auto()
    PREV = enum.auto()
    OPEN = enum.auto()


class Key(NamedTuple):
    wch: int | str
    keyname: bytes


class Screen:
    def __init__(
            self,
            stdscr: curses._CursesWindow,
            filenames: list[str],
            perf: Perf,
            *,
            tab_size: int = 4,
    ) -> None:
        self.stdscr = stdscr
        self.perf = perf
        self.tab_size = tab_size
        self.clipboard = Clipboard()
        self.status = Status()
        self.layout = self._layout_from_current_screen()
        self.files: list[File] = []
        for filename in filenames:
            self._open(filename)
        if not self.files:
            self.files.append(self._new_file())
        self.i = 0
        self._pending: int | str | None = None

    @property
    def file(self) -> File:
        return self.files[self.i]

    def _new_file(self) -> File:
        return File(None, self.clipboard, tab_size=self.tab_size)

    def _open(self, filename: str) -> bool:
        try:
            opened = File.open(
                filename, self.clipboard, self.status, tab_size=self.tab_size,
            )
        except OpenError as e:
            self.status.update(str(e))
            return False
        else:
            self.files.append(opened)
            return True

    def _draw_header(self, dim: Dim) -> None:
        filename = self.file.name
        if self.file.modified:
            filename += ' *'
        if len(self.files) > 1:
            files = f'[{self.i + 1}/{len(self.files)}] '
            version_width = len(VERSION_STR) + 2 + len(files)
        else:
            files = ''
            version_width = len(VERSION_STR) + 2
        centered = filename.center(dim.width)[version_width:]
        s = f' {VERSION_STR} {files}{centered}'
        self.stdscr.insstr(0, 0, s, curses.A_REVERSE)

    def _read_more(self) -> str | int | None:
        try:
            return self.stdscr.get_wch()
        except curses.error:
            return None

    def _read_escape(self) -> str:
        seq = '\x1b'
        while len(seq) < ESCAPE_SEQUENCE_MAX:
            c = self._read_more()
            if c is None:
                break
            elif isinstance(c, int):
                self._pending = c
                break
            seq += c
            if len(seq) == 2 and c not in '[O':
                break
            elif len(seq) > 2 and (c.isalpha() or c == '~'):
                break
        return seq

    def _read_printable(self, s: str) -> str:
        while True:
            c = self._read_more()
            if c is None:
                return s
            elif isinstance(c, str) and c.isprintable():
                s += c
            else:
                self._pending = c
                return s

    def _get_char(self) -> Key:
        if self._pending is not None:
            wch, self._pending = self._pending, None
        else:
            wch = self._wait_for_key()

        # anything following the first character is read without blocking
        self.stdscr.nodelay(True)
        try:
            if wch == '\x1b':
                seq = self._read_escape()
                if seq == '\x1b':
                    return Key(seq, b'^[')
                else:
                    return Key(seq, ESCAPE_SEQUENCES.get(seq, b'unknown'))
            elif isinstance(wch, str) and wch.isprintable():
                return Key(self._read_printable(wch), b'STRING')
        finally:
            self.stdscr.nodelay(False)

        keyname = curses.keyname(wch if isinstance(wch, int) else ord(wch))
        return Key(wch, KEYNAME_ALIASES.get(keyname, keyname))

    def _wait_for_key(self) -> str | int:
        while True:
            try:
                return self.stdscr.get_wch()
            except curses.error:  # pragma: no cover (interrupted by a signal)
                pass

    def get_char(self) -> Key:
        self.perf.end()
        ret = self._get_char()
        self.perf.start(ret.keyname.decode(), self.file.buf.size)
        return ret

    def draw(self) -> None:
        self._draw_header(self.layout.header)
        self.file.draw(self.stdscr, self.layout.file)
        self.status.draw(self.stdscr, self.layout.status, self.file.position)

    def _layout_from_current_screen(self) -> Layout:
        return make_layout(curses.LINES, curses.COLS)

    def resize(self) -> None:
        curses.update_lines_cols()
        self.layout = self._layout_from_current_screen()
        self.file.buf.scroll_to_cursor(self.layout.file)
        self.draw()

    def quick_prompt(
            self,
            prompt: str,
            opt_strs: tuple[str, ...],
    ) -> str | PromptResult:
        opts = {opt[0] for opt in opt_strs}
        text = f'{prompt} [{", ".join(opt_strs)}]?'
        while True:
            y, width = self.layout.status.y, self.layout.status.width
            if len(text) < width - 1:
                self.stdscr.insstr(y, 0, text.ljust(width), curses.A_REVERSE)
                self.stdscr.move(y, len(text) + 1)
            else:
                shown = f'{text[:width - 1]}…'
                self.stdscr.insstr(y, 0, shown, curses.A_REVERSE)
                self.stdscr.move(y, width - 1)

            key = self.get_char()
            if key.keyname == b'KEY_RESIZE':
                self.resize()
            elif key.keyname in {b'^C', b'^['}:
                return self.status.cancelled()
            elif isinstance(key.wch, str) and key.wch.lower() in opts:
                return key.wch.lower()

    def prompt(self, prompt: str) -> str | PromptResult:
        self.status.clear()
        return Prompt(self, prompt).run()

    def read_line(self, prompt: str) -> str | None:
        response = self.prompt(prompt)
        if response is PromptResult.CANCELLED:
            return None
        else:
            return response.strip()

    def save(self) -> PromptResult | None:
        return self.file.save(self, self.status)

    def open_file(self) -> EditResult | None:
        filename = self.read_line('enter filename')
        if not filename:
            self.status.cancelled()
            return None
        elif self._open(filename):
            return EditResult.OPEN
        else:
            return None

    def new_file(self) -> EditResult:
        self.files.append(self._new_file())
        return EditResult.OPEN

    def quit_save_modified(self) -> EditResult | None:
        if self.file.modified:
            response = self.quick_prompt(
                'file is modified - save', ('yes', 'no'),
            )
            if response == 'y':
                if self.save() is not PromptResult.CANCELLED:
                    return EditResult.EXIT
                else:
                    return None
            elif response == 'n':
                return EditResult.EXIT
            else:
                assert response is PromptResult.CANCELLED
                return None
        return EditResult.EXIT

    DISPATCH = {
        b'KEY_RESIZE': resize,
        b'^S': save,
        b'^P': open_file,
        b'^N': new_file,
        b'^Q': quit_save_modified,
        b'kLFT3': lambda screen: EditResult.PREV,
        b'kRIT3': lambda screen: EditResult.NEXT,
    }


def _init_screen() -> curses._CursesWindow:
    # set the escape delay so curses does not pause waiting for sequences
    curses.set_escdelay(25)

    stdscr = curses.initscr()
    curses.noecho()
    curses.cbreak()
    # <enter> is not transformed into '\n' so it can be differentiated from ^J
    curses.nonl()
    # ^S / ^Q / ^C / ^V are passed through
    curses.raw()
    stdscr.keypad(True)

    with contextlib.suppress(curses.error):
        curses.start_color()
        curses.use_default_colors()
    return stdscr


@contextlib.contextmanager
def make_stdscr() -> Generator[curses._CursesWindow, None, None]:
    """essentially `curses.wrapper` without colors"""
    try:
        yield _init_screen()
    finally:
        curses.endwin()
