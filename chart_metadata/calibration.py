from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .data_model import Line


@dataclass(frozen=True)
class ChartCalibration:
    """
    Relates data units on the two axes to what the viewer sees.

    Adjacent records are one x unit apart; `y_scale` converts a data-y
    difference into the same screen units as that one x step, so slopes and
    angles match the rendered chart rather than raw data ratios.
    """
    n_records: int
    y_min: float
    y_max: float
    # Only the width/height ratio matters.
    screen_size: Tuple[float, float] = (1.0, 1.0)

    def is_valid(self) -> bool:
        return self.y_max != self.y_min

    @property
    def screen_scale(self) -> float:
        w, h = self.screen_size
        if h == 0:
            raise ValueError("Screen height must be non-zero.")
        return float(w) / float(h)

    @property
    def y_span(self) -> float:
        # Flat charts fall back to a unit span. All-negative data with the
        # default y_min of 0 gives y_max < y_min; the magnitude keeps slopes
        # pointing the way they are drawn.
        if not self.is_valid():
            return 1.0
        return abs(self.y_max - self.y_min)

    @property
    def y_scale(self) -> float:
        n_label = max(self.n_records - 1, 0)
        return (n_label / self.y_span) * self.screen_scale

    @classmethod
    def from_lines(
        cls,
        lines: Sequence[Line],
        screen_size: Tuple[float, float] = (1.0, 1.0),
        y_min: Optional[float] = None,
        y_max: Optional[float] = None,
    ) -> "ChartCalibration":
        if not lines:
            raise ValueError("At least one series is required.")
        if y_min is None:
            y_min = 0.0
        if y_max is None:
            y_max = max(ln.y_bounds()[1] for ln in lines)
        return cls(len(lines[0]), float(y_min), float(y_max), screen_size)
