from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True, scope='session')
def _clear_terminal_size():
    # curses prefers these over the real size of the terminal
    os.environ.pop('COLUMNS', None)
    os.environ.pop('LINES', None)
