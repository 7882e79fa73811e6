"""Tests for merging buckets from two histograms (union / union all)."""

import pytest

from cardest import InvalidBucketError, Point, Side


@pytest.fixture
def overlapping(make_bucket):
    first = make_bucket(1, 100, True, False, 0.1, 50)
    second = make_bucket(50, 150, True, False, 0.2, 80)
    return first, second


def test_partial_overlap_union(overlapping):
    first, second = overlapping
    result = first.merge(second, 1000, 500)
    assert result.rows == 1000

    lower = result.lower
    assert result.lower_side is Side.SELF
    assert (lower.lower, lower.upper) == (Point(1.0), Point(50.0))
    assert lower.lower_closed and not lower.upper_closed
    assert lower.frequency == pytest.approx(0.1 * 49 / 99)
    assert lower.distinct == pytest.approx(50 * 49 / 99)

    merged = result.merged
    assert (merged.lower, merged.upper) == (Point(50.0), Point(100.0))
    assert merged.lower_closed and not merged.upper_closed
    # max(0.1 * 1000 * 50/99, 0.2 * 500 * 0.5) / 1000
    assert merged.frequency == pytest.approx(0.1 * 50 / 99)
    assert merged.distinct == pytest.approx(50.0)

    upper = result.upper
    assert result.upper_side is Side.OTHER
    assert (upper.lower, upper.upper) == (Point(100.0), Point(150.0))
    assert upper.lower_closed and not upper.upper_closed
    assert upper.frequency == pytest.approx(0.1)
    assert upper.distinct == pytest.approx(40.0)


def test_partial_overlap_union_all(overlapping):
    first, second = overlapping
    merged, lower, upper, rows = first.merge(second, 1000, 500, is_union_all=True)
    assert rows == 1500
    expected = (0.1 * 1000 * 50 / 99 + 0.2 * 500 * 0.5) / 1500
    assert merged.frequency == pytest.approx(expected)
    assert lower is not None and upper is not None


def test_merge_is_mirrored_when_sides_swap(overlapping):
    first, second = overlapping
    result = second.merge(first, 500, 1000)
    assert result.lower_side is Side.OTHER
    assert result.upper_side is Side.SELF
    assert result.merged.frequency == pytest.approx(first.merge(second, 1000, 500).merged.frequency)


def test_subsumed_bucket_leaves_both_residuals_on_one_side(make_bucket):
    outer = make_bucket(1, 100, True, False, 0.2, 99)
    inner = make_bucket(25, 50, True, False, 0.5, 25)
    result = outer.merge(inner, 100, 100)

    assert result.lower_side is Side.SELF
    assert result.upper_side is Side.SELF
    assert result.lower.upper == Point(25.0)
    assert result.lower.frequency == pytest.approx(0.2 * 24 / 99)
    assert result.upper.lower == Point(50.0)
    assert result.upper.lower_closed
    assert result.upper.frequency == pytest.approx(0.2 * 50 / 99)

    assert (result.merged.lower, result.merged.upper) == (Point(25.0), Point(50.0))
    assert result.merged.frequency == pytest.approx(0.5)
    assert result.merged.distinct == pytest.approx(25.0)
    assert [side for side, _ in result.residuals()] == [Side.SELF, Side.SELF]


def test_identical_bounds(make_bucket):
    a = make_bucket(0, 10, True, False, 0.3, 6)
    b = make_bucket(0, 10, True, False, 0.6, 7)
    result = a.merge(b, 100, 50)
    assert result.lower is None and result.upper is None
    assert list(result.residuals()) == []
    assert result.merged.frequency == pytest.approx(0.3)
    assert result.merged.distinct == pytest.approx(10.0)

    union_all = a.merge(b, 100, 50, is_union_all=True)
    assert union_all.merged.frequency == pytest.approx((30 + 30) / 150)


def test_shared_edge_closedness_is_or(make_bucket):
    a = make_bucket(0, 10, True, False, 0.4, 10)
    b = make_bucket(0, 5, False, False, 0.4, 5)
    result = a.merge(b, 100, 100)
    assert result.lower is None
    assert result.merged.lower_closed
    assert result.merged.upper == Point(5.0)
    assert not result.merged.upper_closed
    assert result.upper_side is Side.SELF
    assert result.upper.lower == Point(5.0)
    assert result.upper.lower_closed


def test_two_singletons(make_bucket):
    a = make_bucket(5, 5, frequency=0.2, distinct=1)
    b = make_bucket(5, 5, frequency=0.4, distinct=1)
    assert a.merge(b, 100, 100).merged.frequency == pytest.approx(0.4)
    union_all = a.merge(b, 100, 100, is_union_all=True)
    assert union_all.merged.frequency == pytest.approx(0.3)
    assert union_all.merged.distinct == 1.0
    assert union_all.merged.is_singleton()


def test_singleton_absorbed_into_range(make_bucket):
    single = make_bucket(5, 5, frequency=1.0, distinct=1)
    ranged = make_bucket(0, 10, True, False, 0.5, 8)

    result = single.merge(ranged, 10, 100)
    assert result.lower is None and result.upper is None
    assert (result.merged.lower, result.merged.upper) == (ranged.lower, ranged.upper)
    assert not result.merged.upper_closed
    assert result.merged.frequency == pytest.approx(0.5)
    assert result.merged.distinct == pytest.approx(8.0)

    union_all = single.merge(ranged, 10, 100, is_union_all=True)
    assert union_all.merged.frequency == pytest.approx(60 / 110)
    assert union_all.merged.distinct == pytest.approx(9.0)


def test_buckets_touching_at_a_closed_point(make_bucket):
    a = make_bucket(1, 5, True, True, 0.4, 4)
    b = make_bucket(5, 10, True, True, 0.5, 5)
    result = a.merge(b, 100, 100)

    assert result.merged.is_singleton()
    assert result.merged.lower == Point(5.0)
    assert result.merged.frequency == pytest.approx(0.1)
    assert not result.lower.upper_closed
    assert result.lower_side is Side.SELF
    assert not result.upper.lower_closed
    assert result.upper_side is Side.OTHER


def test_merge_preconditions(make_bucket):
    a = make_bucket(1, 5, True, False)
    with pytest.raises(InvalidBucketError):
        a.merge(make_bucket(5, 10), 100, 100)
    with pytest.raises(InvalidBucketError):
        a.merge(make_bucket(2, 3), 0, 0)
