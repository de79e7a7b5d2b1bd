from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    NUM_POINTS_NOT_EQUAL = "num_points_not_equal"
    SEGMENT_ORDER = "segment_order"
    SERIES_WITHOUT_KEY = "series_without_key"
    DUPLICATE_KEY = "duplicate_key"
    EMPTY_SERIES = "empty_series"
    X_NOT_ALIGNED = "x_not_aligned"


_MESSAGES = {
    ErrorCode.NUM_POINTS_NOT_EQUAL: "Number of points in each series must be equal.",
    ErrorCode.SEGMENT_ORDER: "The end x value of a segment must be greater than its start x value.",
    ErrorCode.SERIES_WITHOUT_KEY: "Every series must have a key.",
    ErrorCode.DUPLICATE_KEY: "Series keys must be unique.",
    ErrorCode.EMPTY_SERIES: "Every series must contain at least one point.",
    ErrorCode.X_NOT_ALIGNED: "Points at the same index must share the same x value.",
}


class PairAnalysisError(ValueError):
    """
    Fatal precondition violation in the pair analysis engine.

    The message is fixed per code; `detail` (when given) names the offending
    series or segment.
    """

    def __init__(self, code: ErrorCode, detail: Optional[str] = None):
        self.code = code
        self.detail = detail
        msg = _MESSAGES[code]
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)
