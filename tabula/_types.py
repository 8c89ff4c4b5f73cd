from __future__ import annotations

from typing import Protocol


class PathPrompt(Protocol):
    def read_line(self, prompt: str) -> str | None: ...
