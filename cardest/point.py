# point.py
"""Ordered, non-null bucket bound values."""

import functools

from .domains import infer_domain
from .errors import InvalidBucketError


@functools.total_ordering
class Point:
    """An immutable column value with a total order and domain metric.

    Points are shared between buckets freely; nothing ever mutates one.
    """

    __slots__ = ("_value", "_domain")

    def __init__(self, value, domain=None):
        if value is None:
            raise InvalidBucketError("Bucket bounds cannot be null; nulls belong in the null fraction")
        if isinstance(value, Point):
            value = value.value
        domain = domain or infer_domain(value)
        object.__setattr__(self, "_domain", domain)
        object.__setattr__(self, "_value", domain.coerce(value))

    def __setattr__(self, name, value):
        raise AttributeError("Point is immutable")

    def __reduce__(self):
        return (Point, (self._value, self._domain))

    @property
    def value(self):
        return self._value

    @property
    def domain(self):
        return self._domain

    def _check_domain(self, other):
        if not isinstance(other, Point):
            other = Point(other, self._domain)
        if other.domain != self._domain:
            raise InvalidBucketError(
                f"Cannot compare {self._domain.name} point with {other.domain.name} point")
        return other

    def __eq__(self, other):
        if not isinstance(other, Point):
            try:
                other = Point(other, self._domain)
            except InvalidBucketError:
                return NotImplemented
        if other.domain != self._domain:
            return NotImplemented
        return self._value == other.value

    def __lt__(self, other):
        other = self._check_domain(other)
        return self._value < other.value

    def __hash__(self):
        return hash((self._domain.name, self._value))

    def distance(self, other):
        """Signed distance self - other. Raises UnsupportedDomainError if undefined."""
        other = self._check_domain(other)
        return self._domain.distance(self._value, other.value)

    def width(self, lower, lower_closed, upper_closed):
        """Width of the range [lower, self] under the given openness."""
        lower = self._check_domain(lower)
        return self._domain.width(lower.value, self._value, lower_closed, upper_closed)

    def to_double(self):
        return self._domain.to_double(self._value)

    def is_distance_computable(self):
        return self._domain.is_distance_computable

    def is_sampling_mappable(self):
        return self._domain.is_sampling_mappable

    def __repr__(self):
        return f"Point({self._value!r})"

    def __str__(self):
        return str(self._value)


def min_point(a, b):
    return a if a <= b else b


def max_point(a, b):
    return a if a >= b else b
