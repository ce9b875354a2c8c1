"""Text measurement for the layout engine."""

from __future__ import annotations

from typing import Callable

from rich.cells import cell_len

MeasureText = Callable[[str], float]

DEFAULT_CHAR_WIDTH = 8.0  # pixels per terminal cell


class CellMetrics:
    """Measure text as terminal cells times a fixed cell width.

    Wide (East Asian) characters count as two cells. Results are memoized
    per string; ``calls`` counts uncached measurements.
    """

    def __init__(self, char_width: float = DEFAULT_CHAR_WIDTH) -> None:
        self.char_width = char_width
        self.calls = 0
        self._cache: dict[str, float] = {}

    def __call__(self, text: str) -> float:
        width = self._cache.get(text)
        if width is None:
            self.calls += 1
            width = cell_len(text) * self.char_width
            self._cache[text] = width
        return width

    def to_cells(self, pixels: float) -> int:
        """Convert a pixel coordinate back to a cell column."""
        return int(round(pixels / self.char_width))
