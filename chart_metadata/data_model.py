from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import numpy as np


def format_label(x: float) -> str:
    # Record labels: integral x renders without a fractional part (1.0 -> "1").
    xf = float(x)
    if xf.is_integer():
        return str(int(xf))
    return repr(xf)


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Segment:
    """Two adjacent points of a line, identified by the index of its start point."""
    i: int
    start: Point
    end: Point

    def y_min(self) -> float:
        return min(self.start.y, self.end.y)

    def y_max(self) -> float:
        return max(self.start.y, self.end.y)


@dataclass(frozen=True)
class Line:
    points: Tuple[Point, ...]
    # Stable series identifier; every line compared by the pair engine needs one.
    key: Optional[str] = None

    @classmethod
    def from_values(cls, values: Iterable[float], key: Optional[str] = None) -> "Line":
        """Line whose x-values are the record indices 0..n-1."""
        return cls(tuple(Point(float(i), float(v)) for i, v in enumerate(values)), key)

    def __len__(self) -> int:
        return len(self.points)

    @property
    def xs(self) -> List[float]:
        return [p.x for p in self.points]

    @property
    def ys(self) -> List[float]:
        return [p.y for p in self.points]

    def y_bounds(self) -> Tuple[float, float]:
        ys = self.ys
        return min(ys), max(ys)

    def x_range(self) -> float:
        return self.points[-1].x - self.points[0].x

    def mean_y(self) -> float:
        return float(np.mean(self.ys))

    def segment(self, i: int) -> Segment:
        return Segment(i, self.points[i], self.points[i + 1])

    def segments(self) -> List[Segment]:
        return [self.segment(i) for i in range(len(self.points) - 1)]

    def value_at(self, x: float) -> float:
        """Linearly interpolated y at x (clamped to the end values outside the domain)."""
        return float(np.interp(x, self.xs, self.ys))

    def section(self, start: float, end: float) -> List[Point]:
        """
        Points covering [start, end]: every record inside the interval, plus
        interpolated points at interval ends that fall between records.
        """
        pts: List[Point] = []
        if not any(p.x == start for p in self.points):
            pts.append(Point(start, self.value_at(start)))
        pts.extend(p for p in self.points if start <= p.x <= end)
        if end != start and not any(p.x == end for p in self.points):
            pts.append(Point(end, self.value_at(end)))
        return pts
