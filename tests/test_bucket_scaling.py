"""Tests for the range-narrowing constructors."""

import pytest

from cardest import INTEGER, Bucket, DomainAccessor, InvalidBucketError, Point


def test_scale_upper_middle(bucket_a):
    b = bucket_a.scale_upper(5, include_upper=False)
    assert b.lower == Point(1.0)
    assert b.upper == Point(5.0)
    assert b.lower_closed and not b.upper_closed
    assert b.frequency == pytest.approx(0.5 * 4 / 9)
    assert b.distinct == pytest.approx(4.0)


def test_scale_upper_to_lower_bound(bucket_a):
    assert bucket_a.scale_upper(1, include_upper=False) is None
    single = bucket_a.scale_upper(1, include_upper=True)
    assert single.is_singleton()
    assert single.frequency == pytest.approx(0.5 / 9)
    assert single.distinct == 1.0


def test_scale_upper_to_same_bound_is_unchanged(bucket_a):
    assert bucket_a.scale_upper(10, include_upper=False) == bucket_a


def test_scale_upper_cannot_widen(bucket_a):
    with pytest.raises(InvalidBucketError):
        bucket_a.scale_upper(10, include_upper=True)


def test_scale_upper_outside_bucket(bucket_a):
    with pytest.raises(InvalidBucketError):
        bucket_a.scale_upper(12)


def test_scale_lower_middle(bucket_a):
    b = bucket_a.scale_lower(5, include_lower=True)
    assert (b.lower, b.upper) == (Point(5.0), Point(10.0))
    assert b.lower_closed and not b.upper_closed
    assert b.frequency == pytest.approx(0.5 * 5 / 9)
    assert b.distinct == pytest.approx(5.0)


def test_scale_lower_discrete(make_bucket):
    b = make_bucket(1, 10, True, False, 0.5, 9, domain=INTEGER)
    above = b.scale_lower(5, include_lower=False)
    assert not above.lower_closed
    assert above.distinct == pytest.approx(5.0)
    assert above.frequency == pytest.approx(0.5 * 5 / 9)


@pytest.mark.parametrize("value", [2, 5, 9])
@pytest.mark.parametrize("include", [True, False])
def test_discrete_narrowing_splits_full_mass(make_bucket, value, include):
    b = make_bucket(1, 10, True, False, 0.5, 9, domain=INTEGER)
    below = b.scale_upper(value, include)
    above = b.scale_lower(value, not include)
    assert below.frequency + above.frequency == pytest.approx(b.frequency)
    assert below.distinct + above.distinct == pytest.approx(b.distinct)


def test_scale_lower_to_closed_upper_is_singleton(make_bucket):
    b = make_bucket(1, 10, True, True, 0.5, 10)
    single = b.scale_lower(10, include_lower=True)
    assert single.is_singleton()
    assert single.frequency == pytest.approx(0.05)
    assert b.scale_lower(10, include_lower=False) is None


@pytest.mark.parametrize("value", [1, 2.5, 5, 7.25, 9.5])
@pytest.mark.parametrize("include", [True, False])
def test_narrowing_shrinks_mass(bucket_a, value, include):
    for narrowed in (bucket_a.scale_upper(value, include), bucket_a.scale_lower(value, include)):
        if narrowed is None:
            continue
        assert narrowed.frequency <= bucket_a.frequency
        assert narrowed.distinct <= bucket_a.distinct
        assert bucket_a.subsumes(narrowed)


def test_greater_than_continuous(bucket_a):
    b = bucket_a.greater_than(5)
    assert b.lower == Point(5.0)
    assert not b.lower_closed
    assert b.frequency == pytest.approx(0.5 * 5 / 9)


def test_greater_than_discrete_steps_to_successor(make_bucket):
    b = make_bucket(1, 10, True, True, 0.5, 10, domain=INTEGER)
    above = b.greater_than(5)
    assert above.lower == Point(6)
    assert above.lower_closed
    assert above.frequency == pytest.approx(0.25)
    assert above.distinct == pytest.approx(5.0)


def test_greater_than_successor_outside_bucket(make_bucket):
    b = make_bucket(1, 5, True, False, 0.5, 4, domain=INTEGER)
    assert b.greater_than(4) is None


def test_greater_than_with_explicit_accessor(make_bucket):
    b = make_bucket(1, 10, True, True, 0.5, 10, domain=INTEGER)
    above = b.greater_than(5, accessor=DomainAccessor(continuous={"int"}))
    assert above.lower == Point(5)
    assert not above.lower_closed
    assert above.frequency == pytest.approx(0.5 * 6 / 10)


def test_greater_than_nothing_left(make_bucket):
    assert make_bucket(1, 10).greater_than(10) is None
    assert make_bucket(4, 4).greater_than(4) is None
    with pytest.raises(InvalidBucketError):
        make_bucket(1, 10).greater_than(11)


def test_singleton_from_parent(bucket_a):
    single = bucket_a.singleton(5)
    assert single.is_singleton()
    assert single.lower_closed and single.upper_closed
    assert single.frequency == pytest.approx(0.5 / 9)
    assert single.distinct == 1.0
    with pytest.raises(InvalidBucketError):
        bucket_a.singleton(10)


def test_singleton_frequency_is_capped(make_bucket):
    assert make_bucket(1, 10, frequency=0.8, distinct=0.5).singleton(3).frequency == 1.0


def test_singleton_from_value():
    b = Bucket.singleton_from_value(7)
    assert b.is_singleton()
    assert b.domain is INTEGER
    assert (b.frequency, b.distinct) == (1.0, 1.0)


def test_copy_shares_points(bucket_a):
    clone = bucket_a.copy()
    assert clone == bucket_a
    assert clone is not bucket_a
    assert clone.lower is bucket_a.lower
    assert clone.upper is bucket_a.upper


def test_rescale_frequency(bucket_a):
    rescaled = bucket_a.rescale_frequency(100, 200)
    assert rescaled.frequency == pytest.approx(0.25)
    assert rescaled.distinct == bucket_a.distinct
    assert bucket_a.rescale_frequency(1000, 100).frequency == 1.0
    with pytest.raises(InvalidBucketError):
        bucket_a.rescale_frequency(100, 0)
