from __future__ import annotations

import argparse
import curses
from typing import Sequence

from tabula.file import File
from tabula.perf import Perf
from tabula.perf import perf_log
from tabula.screen import EditResult
from tabula.screen import make_stdscr
from tabula.screen import Screen


def _edit(screen: Screen) -> EditResult:
    while True:
        screen.status.tick(screen.layout.file)
        screen.draw()
        screen.file.move_cursor(screen.stdscr, screen.layout.file)

        key = screen.get_char()
        if key.keyname in File.DISPATCH:
            File.DISPATCH[key.keyname](screen.file, screen.layout.file)
        elif key.keyname in Screen.DISPATCH:
            ret = Screen.DISPATCH[key.keyname](screen)
            if isinstance(ret, EditResult):
                return ret
        elif key.keyname == b'STRING':
            assert isinstance(key.wch, str), key.wch
            screen.file.c(key.wch, screen.layout.file)
        else:
            screen.status.update(f'unknown key: {key}')


def c_main(
        stdscr: curses._CursesWindow,
        filenames: list[str],
        perf: Perf,
        *,
        tab_size: int,
) -> int:
    screen = Screen(stdscr, filenames, perf, tab_size=tab_size)

    while screen.files:
        screen.i = screen.i % len(screen.files)
        res = _edit(screen)
        if res == EditResult.EXIT:
            del screen.files[screen.i]
            # always go to the next file except at the end
            screen.i = min(screen.i, len(screen.files) - 1)
            screen.status.clear()
        elif res == EditResult.NEXT:
            screen.i += 1
            screen.status.clear()
        elif res == EditResult.PREV:
            screen.i -= 1
            screen.status.clear()
        elif res == EditResult.OPEN:
            screen.i = len(screen.files) - 1
        else:
            raise AssertionError(f'unreachable {res}')
    return 0


def _tab_size(s: str) -> int:
    try:
        tab_size = int(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f'invalid size: {s}')
    if tab_size <= 0:
        raise argparse.ArgumentTypeError(f'invalid size: {tab_size}')
    return tab_size


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument('filenames', metavar='filename', nargs='*')
    parser.add_argument(
        '--tab-size', type=_tab_size, default=4,
        help='number of columns a tab is drawn with (default: %(default)s)',
    )
    parser.add_argument('--perf-log')
    args = parser.parse_args(argv)

    with perf_log(args.perf_log) as perf, make_stdscr() as stdscr:
        return c_main(stdscr, args.filenames, perf, tab_size=args.tab_size)


if __name__ == '__main__':
    raise SystemExit(main())
