# report.py
"""Tabular views of bucket lists for inspection and debugging."""

import numpy as np
import pandas as pd

from .errors import UnsupportedDomainError

COLUMNS = ["lower", "upper", "lower_closed", "upper_closed", "frequency", "distinct", "width"]


def _width_or_nan(bucket):
    try:
        return bucket.width()
    except UnsupportedDomainError:
        return np.nan


def buckets_to_frame(buckets, total_rows=None):
    """One row per bucket; adds an estimated `rows` column when total_rows is given."""
    records = []
    for b in buckets:
        record = b.to_dict()
        record["width"] = _width_or_nan(b)
        records.append(record)

    df = pd.DataFrame.from_records(records, columns=COLUMNS)
    if total_rows is not None:
        df["rows"] = df["frequency"] * total_rows
    return df


def summarize(buckets):
    """Aggregate figures for a bucket list.

    `is_ordered` is True when each bucket lies strictly before the next one.
    """
    df = buckets_to_frame(buckets)
    ordered = all(buckets[i].is_before(buckets[i + 1]) for i in range(len(buckets) - 1))
    return {
        "num_buckets": len(df),
        "num_singletons": int(sum(1 for b in buckets if b.is_singleton())),
        "total_frequency": float(df["frequency"].sum()),
        "total_distinct": float(df["distinct"].sum()),
        "is_ordered": ordered,
    }
