from __future__ import annotations

import contextlib
import curses
import functools
import shutil
import sys
from typing import Callable
from typing import NamedTuple
from unittest import mock

import pytest

from tabula.main import main
from tabula.screen import VERSION_STR
from testing.runner import TmuxRunner


@pytest.fixture
def ten_lines(tmpdir):
    f = tmpdir.join('f')
    f.write('\n'.join(f'line_{i}' for i in range(10)))
    return f


class Terminal:
    """the cells an in-process run has drawn"""

    def __init__(self, width, height):
        self.width = width
        self.height = height
        self.lines = [' ' * width for _ in range(height)]
        self.attrs = [[0] * width for _ in range(height)]
        self.x = self.y = 0
        self.nodelay = False
        self._shown = None

    def screenshot(self):
        ret = ''.join(f'{line.rstrip()}\n' for line in self.lines)
        if ret != self._shown:
            print(f'{"=" * 79}\n{ret}{"=" * 79}')
            self._shown = ret
        return ret

    def insstr(self, y, x, s, attr=0):
        line, row = self.lines[y], self.attrs[y]
        self.lines[y] = (line[:x] + s + line[x:])[:self.width]
        self.attrs[y] = (row[:x] + [attr] * len(s) + row[x:])[:self.width]

    def chgat(self, y, x, n, attr):
        assert n > 0
        self.attrs[y][x:x + n] = [attr] * n

    def move(self, y, x):
        assert 0 <= y < self.height and 0 <= x < self.width, (y, x)
        self.y, self.x = y, x

    def resize(self, *, width, height):
        self.lines = [
            line.ljust(width)[:width]
            for line in (self.lines + [''] * height)[:height]
        ]
        self.attrs = [
            (row + [0] * width)[:width]
            for row in (self.attrs + [[]] * height)[:height]
        ]
        self.width, self.height = width, height


class Window:
    """what `curses.initscr()` hands to the editor"""

    def __init__(self, runner):
        self._runner = runner
        self._term = runner.term

    def keypad(self, val):
        pass

    def nodelay(self, val):
        self._term.nodelay = val

    def insstr(self, y, x, s, attr=0):
        self._term.insstr(y, x, s, attr)

    def clrtoeol(self):
        self._term.insstr(self._term.y, self._term.x, ' ' * self._term.width)

    def chgat(self, y, x, n, attr):
        self._term.chgat(y, x, n, attr)

    def move(self, y, x):
        self._term.move(y, x)

    def get_wch(self):
        return self._runner.next_key()


class Check(NamedTuple):
    what: str
    ok: Callable[[Terminal], bool]

    def __call__(self, term: Terminal) -> None:
        if not self.ok(term):
            raise AssertionError(f'expected {self.what}')


class KeyPress(NamedTuple):
    wch: int | str


class NoInput(NamedTuple):
    """ends a burst of input: a non-blocking read fails here"""

    def __call__(self, term: Terminal) -> None:
        if term.nodelay:
            raise curses.error()


class Discard(NamedTuple):
    """answers `n` only if the editor is still asking"""


# tmux key name: (value of `get_wch()`, value of `curses.keyname()`)
KEYS = {
    'Enter': ('\r', b'^M'),
    'Tab': ('\t', b'^I'),
    'Escape': ('\x1b', b'^['),
    'DC': (curses.KEY_DC, b'KEY_DC'),
    'BSpace': (curses.KEY_BACKSPACE, b'KEY_BACKSPACE'),
    'Up': (curses.KEY_UP, b'KEY_UP'),
    'Down': (curses.KEY_DOWN, b'KEY_DOWN'),
    'Right': (curses.KEY_RIGHT, b'KEY_RIGHT'),
    'Left': (curses.KEY_LEFT, b'KEY_LEFT'),
    'Home': (curses.KEY_HOME, b'KEY_HOME'),
    'End': (curses.KEY_END, b'KEY_END'),
    'PageUp': (curses.KEY_PPAGE, b'KEY_PPAGE'),
    'PageDown': (curses.KEY_NPAGE, b'KEY_NPAGE'),
    'M-Right': (558, b'kRIT3'),
    'M-Left': (543, b'kLFT3'),
    'S-Down': (curses.KEY_SF, b'KEY_SF'),
    'S-Right': (curses.KEY_SRIGHT, b'KEY_SRIGHT'),
    'S-Left': (curses.KEY_SLEFT, b'KEY_SLEFT'),
    'S-Home': (curses.KEY_SHOME, b'KEY_SHOME'),
    'S-End': (curses.KEY_SEND, b'KEY_SEND'),
    '^C': ('\x03', b'^C'),
    '^J': ('\n', b'^J'),
    '^N': ('\x0e', b'^N'),
    '^P': ('\x10', b'^P'),
    '^Q': ('\x11', b'^Q'),
    '^S': ('\x13', b'^S'),
    '^V': ('\x16', b'^V'),
    '^X': ('\x18', b'^X'),
}
KEYNAMES = {
    wch if isinstance(wch, int) else ord(wch): keyname
    for wch, keyname in KEYS.values()
}
KEYNAMES[curses.KEY_RESIZE] = b'KEY_RESIZE'


class DeferredRunner:
    """records keys and checks, then replays them against an in-process run

    each check runs the next time the editor waits for a key.
    """

    def __init__(self, command, width=80, height=24):
        self.command = command
        self.term = Terminal(width, height)
        self._ops: list = []
        self._i = 0

    def next_key(self):
        while True:
            op = self._ops[self._i]
            self._i += 1
            if isinstance(op, KeyPress):
                print(f'KEY: {op.wch!r}')
                return op.wch
            elif isinstance(op, Discard):
                return 'n'
            try:
                op(self.term)
            except AssertionError:  # pragma: no cover (only on failure)
                self.term.screenshot()
                raise

    def _check(self, what, ok):
        self._ops.append(Check(what, ok))

    def await_text(self, text, timeout=None):
        self._check(f'{text!r} on screen', lambda t: text in t.screenshot())

    def await_text_missing(self, text):
        self._check(
            f'{text!r} not on screen', lambda t: text not in t.screenshot(),
        )

    def await_cursor_position(self, *, x, y):
        self._check(f'cursor at {(x, y)}', lambda t: (t.x, t.y) == (x, y))

    def assert_cursor_line_equals(self, line):
        self._check(
            f'cursor line {line!r}',
            lambda t: t.lines[t.y].rstrip() == line,
        )

    def assert_screen_line_equals(self, n, line):
        self._check(
            f'line {n} {line!r}', lambda t: t.lines[n].rstrip() == line,
        )

    def assert_screen_attr_equals(self, n, attr):
        self._check(f'line {n} attrs {attr}', lambda t: t.attrs[n] == attr)

    def assert_full_contents(self, contents):
        self._check(
            f'screen {contents!r}', lambda t: t.screenshot() == contents,
        )

    def press(self, s):
        if s in KEYS:
            wchs = [KEYS[s][0]]
        elif s.startswith('^') and len(s) > 1:
            raise AssertionError(f'unknown key {s}')
        else:
            wchs = list(s)
        self._ops.extend(KeyPress(wch) for wch in wchs)
        self._ops.append(NoInput())

    def press_and_enter(self, s):
        self.press(s)
        self.press('Enter')

    @contextlib.contextmanager
    def resize(self, *, width, height):
        orig = {'width': self.term.width, 'height': self.term.height}
        self._ops.append(
            functools.partial(Terminal.resize, width=width, height=height),
        )
        self._ops.append(KeyPress(curses.KEY_RESIZE))
        try:
            yield
        finally:
            self._ops.append(functools.partial(Terminal.resize, **orig))
            self._ops.append(KeyPress(curses.KEY_RESIZE))

    def quit_discarding_changes(self):
        self.press('^Q')
        self._ops.extend((Discard(), NoInput()))
        self.await_exit()

    def _fake_curses(self):
        def unsupported(name):
            def unsupported_inner(*args, **kwargs):
                raise NotImplementedError(name)
            return unsupported_inner

        def update_lines_cols():
            curses.LINES = self.term.height
            curses.COLS = self.term.width

        def initscr():
            update_lines_cols()
            return Window(self)

        def noop(*args, **kwargs):
            pass

        fakes = {
            'initscr': initscr,
            'update_lines_cols': update_lines_cols,
            'keyname': lambda k: KEYNAMES.get(k, b''),
            'error': curses.error,
        }
        for name in (
                'cbreak', 'endwin', 'noecho', 'nonl', 'raw',
                'set_escdelay', 'start_color', 'use_default_colors',
        ):
            fakes[name] = noop
        return mock.patch.multiple(
            curses,
            **{
                name: fakes.get(name) or unsupported(name)
                for name in dir(curses)
                if not name.startswith('_') and callable(getattr(curses, name))
            },
        )

    def await_exit(self):
        with self._fake_curses():
            main(self.command)
        leftover = self._ops[self._i:]
        assert all(isinstance(op, (NoInput, Discard)) for op in leftover), (
            leftover
        )


@contextlib.contextmanager
def run_fake(*cmd, **kwargs):
    h = DeferredRunner(cmd, **kwargs)
    h.await_text(VERSION_STR)
    yield h


@contextlib.contextmanager
def run_tmux(*args, **kwargs):
    if shutil.which('tmux') is None:
        pytest.skip('tmux is not installed')
    cmd = (
        'env', 'TERM=screen',
        sys.executable, '-mcoverage', 'run', '-m', 'tabula', *args,
    )
    with TmuxRunner(*cmd, **kwargs) as h, h.on_error():
        # startup under coverage can be slow
        h.await_text(VERSION_STR, timeout=2)
        yield h


@pytest.fixture(
    scope='session',
    params=[run_fake, run_tmux],
    ids=['fake', 'tmux'],
)
def run(request):
    return request.param
