"""
pandas helpers shared by the analytics components.
"""

from __future__ import annotations
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence

import numpy as np
import pandas as pd


def timestamp_frame(records: Sequence, idx_col: str = "idx") -> pd.DataFrame:
    """One row per record: its timestamp as `ts` and its position as `idx_col`."""
    return pd.DataFrame({
        "ts": pd.to_datetime([r.timestamp for r in records]),
        idx_col: np.arange(len(records), dtype="int64"),
    })


def tally(values: Iterable[Enum], enum_cls: type[Enum]) -> Mapping:
    """Count enum values, keyed in declaration order, zero counts omitted.

    The result is a read-only view.
    """
    counts = pd.Series(list(values), dtype=object).value_counts()
    return MappingProxyType({m: int(counts[m]) for m in enum_cls if m in counts.index})
