# structures.py
"""Histogram bucket and the bucket-to-bucket algebra.

A bucket covers a contiguous value range [lower, upper] (either end may be
open) and carries an estimated frequency (fraction of rows) and NDV. Every
operation returns new buckets; bounds are shared Points, never copied.

All frequency/NDV apportioning assumes values are spread uniformly inside a
bucket: narrowing a bucket to a fraction of its width keeps that fraction of
its frequency and NDV.
"""

import math

import numpy as np

from . import config
from .domains import DEFAULT_ACCESSOR
from .errors import InvalidBucketError, UnsupportedDomainError
from .log import get_logger
from .point import Point, max_point, min_point
from .results import DifferenceResult, IntersectResult, MergeResult, Side

logger = get_logger(__name__)

_SAMPLE_RNG = np.random.default_rng(config.DEFAULT_SAMPLE_SEED)


def _check_fraction(name, value, upper=None):
    value = float(value)
    if math.isnan(value):
        raise InvalidBucketError(f"Bucket {name} cannot be NaN")
    if value < -config.FREQUENCY_EPSILON:
        raise InvalidBucketError(f"Bucket {name} must be non-negative, got {value}")
    if upper is not None and value > upper + config.FREQUENCY_EPSILON:
        raise InvalidBucketError(f"Bucket {name} must be at most {upper}, got {value}")
    value = max(0.0, value)
    return min(upper, value) if upper is not None else value


def _ratio(part, whole):
    if whole <= 0.0:
        return 0.0
    return min(1.0, max(0.0, part / whole))


class Bucket:
    """Represents a single immutable bucket of a column histogram."""

    __slots__ = ("_lower", "_upper", "_lower_closed", "_upper_closed", "_frequency", "_distinct")

    def __init__(self, lower, upper, lower_closed=True, upper_closed=True,
                 frequency=0.0, distinct=0.0, domain=None):
        if lower is None or upper is None:
            raise InvalidBucketError("Bucket bounds cannot be null; nulls belong in the null fraction")
        if domain is None:
            if isinstance(lower, Point):
                domain = lower.domain
            elif isinstance(upper, Point):
                domain = upper.domain
        lower = lower if isinstance(lower, Point) else Point(lower, domain)
        upper = upper if isinstance(upper, Point) else Point(upper, domain or lower.domain)
        if lower > upper:
            raise InvalidBucketError(f"Bucket lower bound {lower} is greater than upper bound {upper}")
        lower_closed = bool(lower_closed)
        upper_closed = bool(upper_closed)
        if lower == upper and not (lower_closed and upper_closed):
            raise InvalidBucketError(f"Singleton bucket on {lower} must be closed on both ends")

        object.__setattr__(self, "_lower", lower)
        object.__setattr__(self, "_upper", upper)
        object.__setattr__(self, "_lower_closed", lower_closed)
        object.__setattr__(self, "_upper_closed", upper_closed)
        object.__setattr__(self, "_frequency", _check_fraction("frequency", frequency, 1.0))
        object.__setattr__(self, "_distinct", _check_fraction("distinct", distinct))

    def __setattr__(self, name, value):
        raise AttributeError("Bucket is immutable")

    def __reduce__(self):
        return (Bucket, (self._lower, self._upper, self._lower_closed, self._upper_closed,
                         self._frequency, self._distinct))

    @classmethod
    def singleton_from_value(cls, value, domain=None):
        """Fresh one-value bucket with frequency and NDV of 1.0."""
        point = value if isinstance(value, Point) else Point(value, domain)
        return cls(point, point, True, True, 1.0, 1.0)

    # -- accessors ---------------------------------------------------------

    @property
    def lower(self):
        return self._lower

    @property
    def upper(self):
        return self._upper

    @property
    def lower_closed(self):
        return self._lower_closed

    @property
    def upper_closed(self):
        return self._upper_closed

    @property
    def frequency(self):
        return self._frequency

    @property
    def distinct(self):
        return self._distinct

    @property
    def domain(self):
        return self._lower.domain

    def is_singleton(self):
        return self._lower == self._upper

    def can_sample(self):
        return self._lower.is_sampling_mappable()

    def width(self):
        """Width of the bucket range; 1.0 for singletons."""
        if self.is_singleton():
            return 1.0
        return self._upper.width(self._lower, self._lower_closed, self._upper_closed)

    def _as_point(self, value):
        if value is None:
            raise InvalidBucketError("Cannot position a null value inside a bucket")
        return value if isinstance(value, Point) else Point(value, self.domain)

    # -- positional predicates ---------------------------------------------

    def contains(self, point):
        """Does the bucket contain the point, respecting boundary openness?"""
        point = self._as_point(point)
        if self.is_singleton():
            return self._lower == point
        if self._lower_closed and self._lower == point:
            return True
        if self._upper_closed and self._upper == point:
            return True
        return self._lower < point < self._upper

    def is_before(self, other):
        """For a point: is it below the bucket's lower bound?

        For a bucket: does this bucket end at or before the other begins,
        without intersecting it? E.g. [1,2) is before [2,4).
        """
        if isinstance(other, Bucket):
            if self.intersects(other):
                return False
            return self._upper <= other.lower
        point = self._as_point(other)
        if self._lower_closed:
            return self._lower > point
        return self._lower >= point

    def is_after(self, other):
        """For a point: is it above the bucket's upper bound?

        For a bucket: does this bucket start at or after the other ends,
        without intersecting it? E.g. [2,4) is after [1,2).
        """
        if isinstance(other, Bucket):
            if self.intersects(other):
                return False
            return self._lower >= other.upper
        point = self._as_point(other)
        if self._upper_closed:
            return self._upper < point
        return self._upper <= point

    def overlap_percentage(self, point, include_point=True):
        """What fraction of the bucket lies at or below the point.

        Inside the range the ratio is the width of [lower, point) over the
        bucket width, so [1,10) gives 4/9 at 5 for floats and integers
        alike. `include_point` only settles a point equal to a closed upper
        bound: included it covers the whole bucket, excluded it leaves out
        the upper value (a zero-width sliver for continuous domains).
        """
        point = self._as_point(point)
        if self._upper < point:
            return 1.0
        if self._upper == point and (include_point or not self._upper_closed):
            return 1.0
        if not self.contains(point):
            return 0.0
        if self.is_singleton():
            return 1.0

        covered = point.width(self._lower, self._lower_closed, False)
        return _ratio(covered, self.width())

    # -- range-narrowing constructors --------------------------------------

    def _check_narrowing_point(self, point, bound):
        if not (self.contains(point) or point == bound):
            raise InvalidBucketError(f"Point {point} is outside bucket {self!r}")

    def scale_upper(self, new_upper, include_upper=True):
        """Bucket [lower, new_upper] scaled down to the retained fraction.

        Returns None when the result would be empty, e.g. narrowing [5,10)
        to an open bound at 5.
        """
        point = self._as_point(new_upper)
        self._check_narrowing_point(point, self._upper)

        if self._lower == point:
            if not include_upper:
                return None
            return self.singleton(point)

        if self._upper == point:
            if include_upper == self._upper_closed:
                return self.copy()
            if include_upper:
                raise InvalidBucketError(f"Cannot close the open upper bound of {self!r}")

        overlap = self.overlap_percentage(point, include_upper)
        return Bucket(self._lower, point, self._lower_closed, include_upper,
                      self._frequency * overlap, self._distinct * overlap)

    def scale_lower(self, new_lower, include_lower=True):
        """Bucket [new_lower, upper] scaled down to the retained fraction."""
        point = self._as_point(new_lower)
        self._check_narrowing_point(point, self._lower)

        if self._upper == point:
            if not include_lower:
                return None
            return self.singleton(point)

        if self._lower == point:
            if include_lower == self._lower_closed:
                return self.copy()
            if include_lower:
                raise InvalidBucketError(f"Cannot close the open lower bound of {self!r}")

        overlap = 1.0 - self.overlap_percentage(point, not include_lower)
        return Bucket(point, self._upper, include_lower, self._upper_closed,
                      self._frequency * overlap, self._distinct * overlap)

    def greater_than(self, point, accessor=None):
        """Sub-bucket of values strictly greater than the point, or None.

        Discrete domains step to the successor value and keep it inclusive;
        other domains cut at the point with an open lower bound.
        """
        accessor = accessor or DEFAULT_ACCESSOR
        point = self._as_point(point)
        if not self.contains(point):
            raise InvalidBucketError(f"Point {point} is outside bucket {self!r}")

        if self.is_singleton() or self._upper == point:
            return None

        next_point = accessor.next_point(point)
        if next_point is not None:
            if self.contains(next_point):
                return self.scale_lower(next_point, True)
            return None

        return self.scale_lower(point, False)

    def singleton(self, point):
        """One-value bucket carved out of this one.

        Assumes the point is one of the bucket's distinct values, so it gets
        frequency / NDV of the rows.
        """
        point = self._as_point(point)
        if not self.contains(point):
            raise InvalidBucketError(f"Point {point} is outside bucket {self!r}")

        if self._distinct > 0.0:
            frequency = min(1.0, self._frequency / self._distinct)
        else:
            frequency = min(1.0, self._frequency)
        return Bucket(point, point, True, True, frequency, 1.0)

    def copy(self):
        """Copy of the bucket. Points are shared."""
        return Bucket(self._lower, self._upper, self._lower_closed, self._upper_closed,
                      self._frequency, self._distinct)

    def rescale_frequency(self, rows_old, rows_new):
        """Same bucket with frequency re-based from rows_old to rows_new rows."""
        if rows_new <= 0:
            raise InvalidBucketError(f"New row count must be positive, got {rows_new}")
        if rows_old < 0:
            raise InvalidBucketError(f"Old row count must be non-negative, got {rows_old}")
        frequency = min(1.0, self._frequency * rows_old / rows_new)
        return Bucket(self._lower, self._upper, self._lower_closed, self._upper_closed,
                      frequency, self._distinct)

    # -- set relations -----------------------------------------------------

    def subsumes(self, other):
        """Is the other bucket's range fully inside this one?"""
        if self.is_singleton() and other.is_singleton():
            return self._lower == other.lower
        if other.is_singleton():
            return self.contains(other.lower)
        return compare_lower_bounds(self, other) <= 0 and compare_upper_bounds(self, other) >= 0

    def intersects(self, other):
        """Do the two bucket ranges share at least one value?"""
        if self.is_singleton() and other.is_singleton():
            return self._lower == other.lower
        if self.is_singleton():
            return other.contains(self._lower)
        if other.is_singleton():
            return self.contains(other.lower)
        if self.subsumes(other) or other.subsumes(self):
            return True

        if compare_lower_bounds(self, other) <= 0:
            # this bucket starts first; the other must start before this ends
            return compare_lower_to_upper(other, self) <= 0
        return compare_lower_to_upper(self, other) <= 0

    # -- combinators -------------------------------------------------------

    def intersect(self, other):
        """Bucket on the equi-join diagonal of two intersecting buckets.

        The result spans the overlap of both ranges. Each side contributes
        the fraction of its width that lies in the overlap; the NDV is the
        smaller side's share and the frequency follows
        |R join S| = |R| * |S| / max(NDV(R), NDV(S)), expressed as a fraction
        of the cartesian product.

        Returns an IntersectResult carrying the per-side frequency shares so
        callers can track how much of each bucket has been consumed.
        """
        if not self.intersects(other):
            raise InvalidBucketError(f"Cannot intersect non-intersecting buckets {self!r} and {other!r}")

        lower_new = max_point(self._lower, other.lower)
        upper_new = min_point(self._upper, other.upper)
        lower_new_closed = True
        upper_new_closed = True

        if self.is_singleton() and other.is_singleton():
            ratio_self = 1.0
            ratio_other = 1.0
        else:
            width_new = 1.0
            if lower_new != upper_new:
                lower_new_closed = self._lower_closed
                upper_new_closed = self._upper_closed

                if lower_new == other.lower:
                    lower_new_closed = other.lower_closed
                    if lower_new == self._lower:
                        lower_new_closed = self._lower_closed and other.lower_closed

                if upper_new == other.upper:
                    upper_new_closed = other.upper_closed
                    if upper_new == self._upper:
                        upper_new_closed = self._upper_closed and other.upper_closed

                width_new = upper_new.width(lower_new, lower_new_closed, upper_new_closed)

            ratio_self = _ratio(width_new, self.width())
            ratio_other = _ratio(width_new, other.width())

        ndv_self = ratio_self * self._distinct
        ndv_other = ratio_other * other.distinct
        share_self = ratio_self * self._frequency
        share_other = ratio_other * other.frequency

        max_ndv = max(ndv_self, ndv_other)
        frequency_new = min(1.0, share_self * share_other / max_ndv) if max_ndv > 0.0 else 0.0

        result = Bucket(lower_new, upper_new, lower_new_closed, upper_new_closed,
                        frequency_new, min(ndv_self, ndv_other))
        logger.debug("intersect %r with %r -> %r", self, other, result)
        return IntersectResult(result, share_self, share_other)

    def difference(self, other):
        """Remove the other bucket's range from this one.

        Produces a lower and an upper remainder, either of which may be None.
        """
        if other.subsumes(self):
            return DifferenceResult()
        if self.is_before(other):
            return DifferenceResult(lower=self.copy())
        if other.is_before(self):
            return DifferenceResult(upper=self.copy())

        lower = None
        upper = None
        if compare_lower_bounds(self, other) < 0:
            lower = self.scale_upper(other.lower, not other.lower_closed)
        if compare_upper_bounds(self, other) > 0:
            upper = self.scale_lower(other.upper, not other.upper_closed)

        logger.debug("difference %r minus %r -> %r, %r", self, other, lower, upper)
        return DifferenceResult(lower, upper)

    def merge(self, other, rows_self, rows_other, is_union_all=False):
        """Merge with an intersecting bucket from another histogram.

        The union of both ranges is split into a zone only one side covers
        below the overlap, the overlap itself, and a zone only one side
        covers above it. E.g. merging [1,100) with [50,150) gives [1,50)
        from this bucket, a merged [50,100), and [100,150) from the other.

        Args:
            other: bucket to merge with, must intersect this one.
            rows_self: total rows of this bucket's histogram.
            rows_other: total rows of the other bucket's histogram.
            is_union_all: add row contributions instead of taking the larger.

        Returns:
            MergeResult whose merged bucket frequency is relative to
            max(rows_self, rows_other), or their sum for union all. Leftover
            zones keep frequencies relative to their own side's rows.
        """
        if rows_self < 0 or rows_other < 0:
            raise InvalidBucketError(f"Row counts must be non-negative, got {rows_self} and {rows_other}")
        total_rows = rows_self + rows_other if is_union_all else max(rows_self, rows_other)
        if total_rows <= 0:
            raise InvalidBucketError("Cannot merge buckets of histograms with no rows")
        if not self.intersects(other):
            raise InvalidBucketError(f"Cannot merge non-intersecting buckets {self!r} and {other!r}")

        def contribution(bucket, rows, ratio):
            return bucket.frequency * rows * ratio / total_rows

        def combine(freq_self, freq_other):
            if is_union_all:
                return min(1.0, freq_self + freq_other)
            return min(1.0, max(freq_self, freq_other))

        if self.is_singleton() and other.is_singleton():
            frequency = combine(contribution(self, rows_self, 1.0), contribution(other, rows_other, 1.0))
            merged = Bucket(self._lower, self._upper, True, True, frequency, 1.0)
            return MergeResult(merged, total_rows)

        if self.is_singleton() or other.is_singleton():
            range_bucket = self if other.is_singleton() else other
            frequency = combine(contribution(self, rows_self, 1.0), contribution(other, rows_other, 1.0))
            if is_union_all:
                distinct = max(range_bucket.distinct, min(range_bucket.width(), range_bucket.distinct + 1.0))
            else:
                distinct = max(range_bucket.distinct, 1.0)
            merged = Bucket(range_bucket.lower, range_bucket.upper,
                            range_bucket.lower_closed, range_bucket.upper_closed, frequency, distinct)
            return MergeResult(merged, total_rows)

        def side_of(bucket):
            return Side.SELF if bucket is self else Side.OTHER

        lower = upper = None
        lower_side = upper_side = None

        # lower edge of the overlap
        if self._lower == other.lower:
            mid_lower = self._lower
            mid_lower_closed = self._lower_closed or other.lower_closed
        else:
            first, second = (self, other) if self._lower < other.lower else (other, self)
            mid_lower = second.lower
            mid_lower_closed = second.lower_closed
            lower = first.scale_upper(mid_lower, not mid_lower_closed)
            lower_side = side_of(first)

        # upper edge of the overlap
        if self._upper == other.upper:
            mid_upper = self._upper
            mid_upper_closed = self._upper_closed or other.upper_closed
        else:
            shorter, longer = (self, other) if self._upper < other.upper else (other, self)
            mid_upper = shorter.upper
            mid_upper_closed = shorter.upper_closed
            upper = longer.scale_lower(mid_upper, not mid_upper_closed)
            upper_side = side_of(longer)

        if mid_lower == mid_upper:
            if not (mid_lower_closed and mid_upper_closed):
                raise InvalidBucketError(f"Buckets {self!r} and {other!r} only touch at an open bound")
            # each side contributes one of its distinct values
            freq_self = self.singleton(mid_lower).frequency * rows_self / total_rows
            freq_other = other.singleton(mid_lower).frequency * rows_other / total_rows
            merged = Bucket(mid_lower, mid_upper, True, True, combine(freq_self, freq_other), 1.0)
        else:
            ratio_self = self._zone_ratio(mid_lower, mid_lower_closed, mid_upper, mid_upper_closed)
            ratio_other = other._zone_ratio(mid_lower, mid_lower_closed, mid_upper, mid_upper_closed)
            frequency = combine(contribution(self, rows_self, ratio_self),
                                contribution(other, rows_other, ratio_other))
            max_ndv = mid_upper.width(mid_lower, mid_lower_closed, mid_upper_closed)
            distinct = min(max_ndv, self._distinct * ratio_self + other.distinct * ratio_other)
            merged = Bucket(mid_lower, mid_upper, mid_lower_closed, mid_upper_closed, frequency, distinct)

        logger.debug("merge %r with %r -> %r (lower=%r, upper=%r)", self, other, merged, lower, upper)
        return MergeResult(merged, total_rows, lower, upper, lower_side, upper_side)

    def _zone_ratio(self, zone_lower, zone_lower_closed, zone_upper, zone_upper_closed):
        """Fraction of this bucket lying inside the given zone."""
        below_upper = self.overlap_percentage(zone_upper, zone_upper_closed)
        below_lower = self.overlap_percentage(zone_lower, not zone_lower_closed)
        return min(1.0, max(0.0, below_upper - below_lower))

    # -- sampling ----------------------------------------------------------

    def sample(self, rng=None):
        """Draw a uniformly random value (as a double) inside the bucket.

        Args:
            rng: numpy Generator to draw from; its state advances with every
                draw. None uses a package-wide generator seeded with
                config.DEFAULT_SAMPLE_SEED.
        """
        if not self.can_sample():
            raise UnsupportedDomainError(f"Cannot sample from {self.domain.name} bucket {self!r}")
        if rng is None:
            rng = _SAMPLE_RNG
        elif not isinstance(rng, np.random.Generator):
            raise TypeError(f"Expected a numpy Generator, got {type(rng).__name__}")

        lower_val = self._lower.to_double()
        if self.is_singleton():
            return lower_val

        upper_val = self._upper.to_double()
        return float(lower_val + rng.random() * (upper_val - lower_val))

    # -- value semantics ---------------------------------------------------

    def __eq__(self, other):
        if not isinstance(other, Bucket):
            return NotImplemented
        return (self._lower == other.lower and self._lower_closed == other.lower_closed
                and self._upper == other.upper and self._upper_closed == other.upper_closed
                and self._frequency == other.frequency and self._distinct == other.distinct)

    def __hash__(self):
        return hash((self._lower, self._upper, self._lower_closed, self._upper_closed,
                     self._frequency, self._distinct))

    def to_dict(self):
        return {
            "lower": self._lower.value,
            "upper": self._upper.value,
            "lower_closed": self._lower_closed,
            "upper_closed": self._upper_closed,
            "frequency": self._frequency,
            "distinct": self._distinct,
        }

    def __repr__(self):
        """Provides a string representation of the bucket."""
        left = "[" if self._lower_closed else "("
        right = "]" if self._upper_closed else ")"
        return (f"Bucket{left}{self._lower}, {self._upper}{right}, "
                f"Freq:{self._frequency:.4f}, NDV:{self._distinct:.2f}")


def compare_lower_bounds(bucket1, bucket2):
    """Order the lower bounds of two buckets: -1, 0 or 1.

    At equal points a closed lower bound sorts first, since it claims the
    boundary value while an open one starts just after it.
    """
    point1, point2 = bucket1.lower, bucket2.lower
    if point1 == point2:
        if bucket1.lower_closed == bucket2.lower_closed:
            return 0
        return -1 if bucket1.lower_closed else 1
    return -1 if point1 < point2 else 1


def compare_upper_bounds(bucket1, bucket2):
    """Order the upper bounds of two buckets: -1, 0 or 1.

    At equal points a closed upper bound sorts last.
    """
    point1, point2 = bucket1.upper, bucket2.upper
    if point1 == point2:
        if bucket1.upper_closed == bucket2.upper_closed:
            return 0
        return 1 if bucket1.upper_closed else -1
    return -1 if point1 < point2 else 1


def compare_lower_to_upper(bucket1, bucket2):
    """Compare bucket1's lower bound with bucket2's upper bound: -1, 0 or 1.

    Equal points only match (0) when both bounds are closed; otherwise the
    lower bound lies past the upper one.
    """
    lower, upper = bucket1.lower, bucket2.upper
    if lower > upper:
        return 1
    if lower < upper:
        return -1
    if bucket1.lower_closed and bucket2.upper_closed:
        return 0
    return 1
