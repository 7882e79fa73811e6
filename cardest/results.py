# results.py
"""Tagged results returned by the bucket combinators."""

import enum
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple


class Side(enum.Enum):
    """Which input of a binary bucket operation a piece was carved from."""

    SELF = "self"
    OTHER = "other"


@dataclass(frozen=True)
class IntersectResult:
    """Bucket on the join diagonal plus the mass each side contributed to it."""

    bucket: "Bucket"
    share_self: float
    share_other: float

    def __iter__(self):
        return iter((self.bucket, self.share_self, self.share_other))


@dataclass(frozen=True)
class DifferenceResult:
    """What is left of a bucket after removing another bucket's range."""

    lower: Optional["Bucket"] = None
    upper: Optional["Bucket"] = None

    @property
    def is_empty(self) -> bool:
        return self.lower is None and self.upper is None

    def buckets(self) -> List["Bucket"]:
        return [b for b in (self.lower, self.upper) if b is not None]

    def __iter__(self):
        return iter((self.lower, self.upper))


@dataclass(frozen=True)
class MergeResult:
    """Outcome of merging two intersecting buckets.

    `merged` covers the zone both inputs span and its frequency is relative to
    `rows`. `lower` and `upper` are the zones only one input spans; their
    frequencies stay relative to the row count of the side named by
    `lower_side` / `upper_side`, so the caller can re-merge them against that
    side's next bucket.
    """

    merged: "Bucket"
    rows: float
    lower: Optional["Bucket"] = None
    upper: Optional["Bucket"] = None
    lower_side: Optional[Side] = None
    upper_side: Optional[Side] = None

    def residuals(self) -> Iterator[Tuple[Side, "Bucket"]]:
        if self.lower is not None:
            yield self.lower_side, self.lower
        if self.upper is not None:
            yield self.upper_side, self.upper

    def __iter__(self):
        return iter((self.merged, self.lower, self.upper, self.rows))
