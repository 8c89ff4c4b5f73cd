from __future__ import annotations


class Clipboard:
    """a single slot shared by every open file, last writer wins"""

    def __init__(self, text: str = '') -> None:
        self._text = text

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self._text!r})'

    def get(self) -> str:
        return self._text

    def set(self, text: str) -> None:
        self._text = text
