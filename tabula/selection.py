from __future__ import annotations


class Selection:
    """the anchor of an in-progress selection

    only the marker is stored, the selected range is always derived from the
    marker and the current cursor offset.
    """

    def __init__(self) -> None:
        self.marker: int | None = None

    def __repr__(self) -> str:
        return f'{type(self).__name__}(marker={self.marker!r})'

    def set_marker_if_absent(self, pos: int) -> None:
        if self.marker is None:
            self.marker = pos

    def clear(self) -> None:
        self.marker = None

    def get(self, pos: int) -> tuple[int, int] | None:
        if self.marker is None:
            return None
        else:
            return min(self.marker, pos), max(self.marker, pos)
