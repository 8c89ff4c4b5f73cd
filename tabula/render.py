from __future__ import annotations


def expand_tabs(s: str, tab_size: int) -> str:
    # every tab is drawn as `tab_size` cells, there are no tab stops
    return s.replace('\t', ' ' * tab_size)


def line_x(x: int, width: int) -> int:
    """the first rendered column shown when the cursor is at column `x`"""
    if x + 1 < width:
        return 0
    elif width == 1:
        return x
    else:
        margin = min(width - 3, 6)
        return (
            width - margin - 2 +
            (x + 1 - width) //
            (width - margin - 2) *
            (width - margin - 2)
        )


def scrolled_line(s: str, x: int, width: int) -> str:
    l_x = line_x(x, width)
    if l_x:
        s = f'«{s[l_x + 1:]}'
        if len(s) > width:
            return f'{s[:width - 1]}»'
        else:
            return s.ljust(width)
    elif len(s) > width:
        return f'{s[:width - 1]}»'
    else:
        return s.ljust(width)


def visible_span(
        start: int,
        end: int,
        l_x: int,
        width: int,
) -> tuple[int, int] | None:
    """clip the rendered columns `[start, end)` to a scrolled row"""
    start, end = max(start - l_x, 0), min(end - l_x, width)
    if end <= start:
        return None
    else:
        return start, end
