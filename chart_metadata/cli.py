from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .analyzer import analyze_lines
from .config import AnalysisConfig, AnalysisMode
from .errors import PairAnalysisError
from .export_csv import pairs_csv_string, read_wide_csv
from .export_json import result_to_json

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="chart-metadata",
        description="Describe how the series of a line chart relate to each other.",
    )
    ap.add_argument("csv", help="Wide CSV: first column x, one column per series")
    ap.add_argument("--delimiter", default=",")
    ap.add_argument("--screen", type=float, nargs=2, metavar=("W", "H"), default=(1.0, 1.0),
                    help="Plot area size; only the aspect ratio is used")
    ap.add_argument("--y-min", type=float, default=None)
    ap.add_argument("--y-max", type=float, default=None)
    ap.add_argument("--mode", choices=[m.value for m in AnalysisMode], default=AnalysisMode.ENHANCED.value)
    ap.add_argument("--closeness", type=float, default=0.90, help="Minimum tracking closeness (0..1)")
    ap.add_argument("--min-tracking-size", type=float, default=0.25,
                    help="Minimum tracking interval as a fraction of chart width")
    ap.add_argument("--strict-alignment", action="store_true",
                    help="Fail when series disagree on x at the same index")
    ap.add_argument("--pairs-csv", action="store_true", help="Print the pair summary table as CSV instead of JSON")
    ap.add_argument("-o", "--output", default=None, help="Write to this file instead of stdout")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = AnalysisConfig(
        mode=AnalysisMode(args.mode),
        closeness=args.closeness,
        min_tracking_size=args.min_tracking_size,
        strict_alignment=args.strict_alignment,
    )
    try:
        lines = read_wide_csv(args.csv, delimiter=args.delimiter)
        result = analyze_lines(lines, tuple(args.screen), args.y_min, args.y_max, config)
    except PairAnalysisError as e:
        logger.error("%s: %s", e.code.value, e)
        return 2
    except (OSError, ValueError) as e:
        logger.error("%s", e)
        return 1

    text = pairs_csv_string(result.pairs) if args.pairs_csv else result_to_json(result)
    if args.output:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
    else:
        sys.stdout.write(text + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
