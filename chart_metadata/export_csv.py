from __future__ import annotations

import csv
import io
from typing import List, Optional, Sequence

from .data_model import Line, Point, format_label
from .model import Pair


def _parse_x(cell: str, row_index: int) -> float:
    # Categorical x columns fall back to the record index.
    try:
        return float(cell)
    except ValueError:
        return float(row_index)


def _read_wide_rows(rows: List[List[str]]) -> List[Line]:
    if not rows:
        return []
    header = rows[0]
    keys = [h.strip() for h in header[1:]]
    data = [r for r in rows[1:] if r and any(c.strip() for c in r)]
    xs = [_parse_x(r[0].strip(), i) for i, r in enumerate(data)]
    lines: List[Line] = []
    for col, key in enumerate(keys, start=1):
        pts: List[Point] = []
        for x, r in zip(xs, data):
            cell = r[col].strip() if col < len(r) else ""
            if not cell:
                raise ValueError(f"Missing value for series {key!r} at x={format_label(x)}.")
            pts.append(Point(x, float(cell)))
        lines.append(Line(tuple(pts), key))
    return lines


def lines_from_wide_csv_string(text: str, delimiter: str = ",") -> List[Line]:
    """Parse `x,<key>,<key>...` rows into one Line per series column."""
    return _read_wide_rows(list(csv.reader(io.StringIO(text), delimiter=delimiter)))


def read_wide_csv(path: str, delimiter: str = ",") -> List[Line]:
    with open(path, "r", newline="", encoding="utf-8") as f:
        return _read_wide_rows(list(csv.reader(f, delimiter=delimiter)))


def wide_csv_string(lines: Sequence[Line], delimiter: str = ",") -> str:
    buf = io.StringIO()
    w = csv.writer(buf, delimiter=delimiter, lineterminator="\n")
    w.writerow(["x"] + [ln.key for ln in lines])
    if lines:
        for i, p in enumerate(lines[0].points):
            w.writerow([format_label(p.x)] + [ln.points[i].y for ln in lines])
    return buf.getvalue().rstrip()


def _pair_row(p: Pair) -> List[object]:
    dominant: Optional[str] = p.dominant
    return [p.series[0], p.series[1], dominant or "", round(p.dominant_percent, 3),
            round(p.parallel_percent, 3), round(p.average_gap, 6)]


PAIR_HEADER = ["series_a", "series_b", "dominant", "dominant_percent", "parallel_percent", "average_gap"]


def pairs_csv_string(pairs: Sequence[Pair], delimiter: str = ",") -> str:
    buf = io.StringIO()
    w = csv.writer(buf, delimiter=delimiter, lineterminator="\n")
    w.writerow(PAIR_HEADER)
    for p in pairs:
        w.writerow(_pair_row(p))
    return buf.getvalue().rstrip()


def write_pairs_csv(path: str, pairs: Sequence[Pair], delimiter: str = ",") -> None:
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.writer(f, delimiter=delimiter)
        w.writerow(PAIR_HEADER)
        for p in pairs:
            w.writerow(_pair_row(p))
