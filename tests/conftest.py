import pytest

from cardest import CONTINUOUS, Bucket


@pytest.fixture
def make_bucket():
    """Factory for continuous-domain buckets; pass domain= for others."""

    def _make(lower, upper, lower_closed=True, upper_closed=True, frequency=0.5, distinct=1.0,
              domain=CONTINUOUS):
        return Bucket(lower, upper, lower_closed, upper_closed, frequency, distinct, domain=domain)

    return _make


@pytest.fixture
def bucket_a(make_bucket):
    """[1, 10) with frequency 0.5 and 9 distinct values."""
    return make_bucket(1, 10, True, False, 0.5, 9)
