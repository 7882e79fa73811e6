# domains.py
"""Value domains backing histogram bucket bounds.

A domain knows how to validate a raw column value, how far apart two values
are, how many representable values a range spans, and (for discrete types)
which value comes next. Buckets never look at raw values directly; every
comparison and distance goes through a Point, which goes through its domain.
"""

import datetime
import math
import numbers

from .errors import InvalidBucketError, UnsupportedDomainError


class Domain:
    """Base domain: totally ordered values with no metric."""

    name = "abstract"
    is_distance_computable = False
    is_sampling_mappable = False
    is_discrete = False

    def coerce(self, value):
        return value

    def distance(self, a, b):
        """Signed distance a - b in the domain's numeric mapping."""
        raise UnsupportedDomainError(f"Distance is not defined for domain '{self.name}'")

    def width(self, lower, upper, lower_closed, upper_closed):
        """Size of the range between two values given boundary openness.

        Continuous domains return the plain distance. Discrete domains count
        the representable values inside the range, so [1, 10) spans 9 values
        and [1, 10] spans 10.
        """
        span = self.distance(upper, lower)
        if not self.is_discrete:
            return span
        if lower_closed and upper_closed:
            return span + 1.0
        if not lower_closed and not upper_closed:
            return max(0.0, span - 1.0)
        return span

    def to_double(self, value):
        raise UnsupportedDomainError(f"Domain '{self.name}' cannot be mapped to doubles for sampling")

    def next_value(self, value):
        """Successor of value, or None if the domain has no such concept."""
        return None

    def __eq__(self, other):
        return isinstance(other, Domain) and self.name == other.name

    def __hash__(self):
        return hash(self.name)

    def __repr__(self):
        return f"{self.__class__.__name__}()"


class ContinuousDomain(Domain):
    """Real-valued columns (float, double, numeric)."""

    name = "float"
    is_distance_computable = True
    is_sampling_mappable = True

    def coerce(self, value):
        if isinstance(value, bool):
            raise InvalidBucketError(f"Boolean {value!r} is not a valid {self.name} value")
        try:
            value = float(value)
        except (TypeError, ValueError):
            raise InvalidBucketError(f"Cannot use {value!r} as a {self.name} value")
        if math.isnan(value):
            raise InvalidBucketError("NaN cannot be a bucket bound")
        return value

    def distance(self, a, b):
        return float(a - b)

    def to_double(self, value):
        return float(value)


class IntegerDomain(Domain):
    """Integer columns. Discrete: widths count values, successors exist."""

    name = "int"
    is_distance_computable = True
    is_sampling_mappable = True
    is_discrete = True

    def coerce(self, value):
        if isinstance(value, bool):
            raise InvalidBucketError(f"Boolean {value!r} is not a valid {self.name} value")
        if isinstance(value, numbers.Integral):
            return int(value)
        if isinstance(value, numbers.Real) and float(value).is_integer():
            return int(value)
        raise InvalidBucketError(f"Cannot use {value!r} as an {self.name} value")

    def distance(self, a, b):
        return float(a - b)

    def to_double(self, value):
        return float(value)

    def next_value(self, value):
        return value + 1


class DateDomain(Domain):
    """Calendar dates, measured in days."""

    name = "date"
    is_distance_computable = True
    is_sampling_mappable = True
    is_discrete = True

    def coerce(self, value):
        if isinstance(value, datetime.datetime):
            return value.date()
        if isinstance(value, datetime.date):
            return value
        if isinstance(value, str):
            try:
                return datetime.date.fromisoformat(value)
            except ValueError:
                pass
        raise InvalidBucketError(f"Cannot use {value!r} as a {self.name} value")

    def distance(self, a, b):
        return float((a - b).days)

    def to_double(self, value):
        return float(value.toordinal())

    def next_value(self, value):
        return value + datetime.timedelta(days=1)


class TextDomain(Domain):
    """Strings: ordered, but with no distance metric."""

    name = "text"

    def coerce(self, value):
        if not isinstance(value, str):
            raise InvalidBucketError(f"Cannot use {value!r} as a {self.name} value")
        return value


CONTINUOUS = ContinuousDomain()
INTEGER = IntegerDomain()
DATE = DateDomain()
TEXT = TextDomain()

_DOMAINS = {
    "float": CONTINUOUS,
    "double": CONTINUOUS,
    "real": CONTINUOUS,
    "numeric": CONTINUOUS,
    "decimal": CONTINUOUS,
    "int": INTEGER,
    "integer": INTEGER,
    "bigint": INTEGER,
    "smallint": INTEGER,
    "date": DATE,
    "text": TEXT,
    "varchar": TEXT,
    "char": TEXT,
    "string": TEXT,
}


def get_domain(name):
    """Look up a domain by (case-insensitive) column type name."""
    try:
        return _DOMAINS[name.lower()]
    except KeyError:
        raise ValueError(f"Not support data type: {name}")


def infer_domain(value):
    """Pick a domain from the Python type of a raw value."""
    if isinstance(value, bool):
        raise InvalidBucketError(f"Cannot infer a domain for {value!r}")
    if isinstance(value, numbers.Integral):
        return INTEGER
    if isinstance(value, numbers.Real):
        return CONTINUOUS
    if isinstance(value, datetime.date):
        return DATE
    if isinstance(value, str):
        return TEXT
    raise InvalidBucketError(f"Cannot infer a domain for {value!r}")


class DomainAccessor:
    """Domain metadata passed explicitly into greater-than narrowing.

    `continuous` lists domain names that should be treated as having no
    successor even when the domain itself is discrete, e.g. to mimic a
    planner that does not step integer bounds.
    """

    def __init__(self, continuous=None):
        self.continuous = frozenset(continuous or ())

    def is_discrete(self, domain):
        return domain.is_discrete and domain.name not in self.continuous

    def next_point(self, point):
        """Successor Point of point, or None for non-discrete domains."""
        from .point import Point

        if not self.is_discrete(point.domain):
            return None
        next_val = point.domain.next_value(point.value)
        if next_val is None:
            return None
        return Point(next_val, point.domain)


DEFAULT_ACCESSOR = DomainAccessor()
