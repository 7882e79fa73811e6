"""Histogram bucket algebra for cost-based cardinality estimation."""

from .domains import (CONTINUOUS, DATE, DEFAULT_ACCESSOR, INTEGER, TEXT, ContinuousDomain, DateDomain,
                      Domain, DomainAccessor, IntegerDomain, TextDomain, get_domain, infer_domain)
from .errors import BucketError, InvalidBucketError, UnsupportedDomainError
from .point import Point, max_point, min_point
from .results import DifferenceResult, IntersectResult, MergeResult, Side
from .structures import Bucket, compare_lower_bounds, compare_lower_to_upper, compare_upper_bounds

__version__ = "0.1.0"
