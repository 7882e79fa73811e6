# selectivity.py
"""Predicate and equi-join selectivity over ordered bucket lists.

Bucket frequencies are fractions of a table's rows, so every estimate here is
a fraction as well; multiply by row counts for cardinalities.
"""

from . import config
from .domains import DEFAULT_ACCESSOR
from .errors import UnsupportedDomainError
from .log import get_logger
from .point import Point
from .structures import compare_upper_bounds

logger = get_logger(__name__)

OPERATORS = ("=", "!=", "<", "<=", ">", ">=")


def _equal_frequency(buckets, point):
    return sum(b.singleton(point).frequency for b in buckets if b.contains(point))


def _less_frequency(buckets, point):
    match = 0.0
    for b in buckets:
        if b.is_after(point):
            match += b.frequency
        elif b.contains(point):
            below = b.scale_upper(point, include_upper=False)
            if below is not None:
                match += below.frequency
    return match


def _greater_frequency(buckets, point, accessor):
    match = 0.0
    for b in buckets:
        if b.is_before(point):
            match += b.frequency
        elif b.contains(point):
            above = b.greater_than(point, accessor)
            if above is not None:
                match += above.frequency
    return match


def estimate_selectivity(buckets, op, value, accessor=None):
    """Estimate the selectivity of `column <op> value` from a column's buckets.

    Args:
        buckets: ordered, non-overlapping buckets of the column histogram.
        op: one of '=', '!=', '<', '<=', '>', '>='.
        value: raw value or Point to compare against.
        accessor: DomainAccessor used to step discrete values for '>'.

    Returns:
        Selectivity in [0, 1]. Falls back to the configured defaults when the
        column domain has no distance metric.
    """
    if op not in OPERATORS:
        raise ValueError(f"Unsupported predicate operator: {op}")
    if not buckets:
        logger.debug("No buckets available, selectivity defaults to 1.0")
        return 1.0

    accessor = accessor or DEFAULT_ACCESSOR
    point = value if isinstance(value, Point) else Point(value, buckets[0].domain)

    try:
        if op == "=":
            match = _equal_frequency(buckets, point)
        elif op == "!=":
            match = sum(b.frequency for b in buckets) - _equal_frequency(buckets, point)
        elif op == "<":
            match = _less_frequency(buckets, point)
        elif op == "<=":
            match = _less_frequency(buckets, point) + _equal_frequency(buckets, point)
        elif op == ">":
            match = _greater_frequency(buckets, point, accessor)
        else:
            match = _greater_frequency(buckets, point, accessor) + _equal_frequency(buckets, point)
    except UnsupportedDomainError as e:
        fallback = config.DEFAULT_EQUALITY_SELECTIVITY if op == "=" else config.DEFAULT_RANGE_SELECTIVITY
        logger.warning("Falling back to selectivity %s for %s %s: %s", fallback, op, point, e)
        return fallback

    return min(1.0, max(0.0, match))


def estimate_join(buckets1, buckets2):
    """Estimate equi-join selectivity of two columns from their buckets.

    Walks both ordered bucket lists like a merge join and sums the frequency
    of every intersected bucket pair. The result is the fraction of the
    cartesian product that survives the join.
    """
    if not buckets1 or not buckets2:
        return config.DEFAULT_JOIN_SELECTIVITY

    match = 0.0
    i = j = 0
    try:
        while i < len(buckets1) and j < len(buckets2):
            b1, b2 = buckets1[i], buckets2[j]
            if b1.intersects(b2):
                match += b1.intersect(b2).bucket.frequency
                if compare_upper_bounds(b1, b2) <= 0:
                    i += 1
                else:
                    j += 1
            elif b1.is_before(b2):
                i += 1
            else:
                j += 1
    except UnsupportedDomainError as e:
        logger.warning("Falling back to join selectivity %s: %s", config.DEFAULT_JOIN_SELECTIVITY, e)
        return config.DEFAULT_JOIN_SELECTIVITY

    return min(1.0, match)


def estimate_join_cardinality(buckets1, rows1, buckets2, rows2):
    """Estimated row count of an equi-join between two columns."""
    return estimate_join(buckets1, buckets2) * rows1 * rows2
