"""Exceptions raised by the bucket algebra."""


class BucketError(Exception):
    """Base exception for bucket algebra errors."""


class InvalidBucketError(BucketError, ValueError):
    """Raised when an operation is called in violation of its contract.

    Null bounds, frequencies outside [0, 1], negative NDV, open singletons
    and narrowing with a point outside the bucket all land here.
    """


class UnsupportedDomainError(BucketError, TypeError):
    """Raised when a domain lacks a capability (distance, sampling)."""
