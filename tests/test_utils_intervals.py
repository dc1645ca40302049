"""Tests for the interval set utilities."""

import pytest

from receptorscan.utils.intervals import (
    Interval,
    IntervalSet,
    InvalidRangeError,
)


# =============================================================================
# Test Interval
# =============================================================================


class TestInterval:
    """Tests for the Interval NamedTuple."""

    def test_contains(self):
        """Contains is inclusive at both ends."""
        interval = Interval(3, 7)
        assert interval.contains(3)
        assert interval.contains(7)
        assert not interval.contains(8)


# =============================================================================
# Test IntervalSet
# =============================================================================


class TestIntervalSetAddRange:
    """Tests for IntervalSet.add_range."""

    def test_adjacent_ranges_coalesce(self):
        """Adjacent ranges merge, disjoint ones stay apart."""
        spans = IntervalSet()
        spans.add_range(1, 3)
        spans.add_range(4, 6)
        spans.add_range(10, 12)
        assert spans.runlist() == [(1, 6), (10, 12)]

    def test_overlapping_ranges_coalesce(self):
        """Overlapping ranges become one run."""
        spans = IntervalSet([(5, 10), (8, 15)])
        assert spans.runlist() == [(5, 15)]

    def test_range_bridging_runs(self):
        """A range touching two runs joins them."""
        spans = IntervalSet([(1, 3), (10, 12)])
        spans.add_range(4, 9)
        assert spans.runlist() == [(1, 12)]

    def test_out_of_order_insertion(self):
        """Runs are kept sorted regardless of insertion order."""
        spans = IntervalSet([(20, 25), (1, 2), (10, 12)])
        assert spans.runlist() == [(1, 2), (10, 12), (20, 25)]

    def test_contained_range(self):
        """A range inside an existing run changes nothing."""
        spans = IntervalSet.from_range(1, 100)
        spans.add_range(20, 30)
        assert spans.runlist() == [(1, 100)]

    def test_single_position(self):
        """add() inserts a one-residue range."""
        spans = IntervalSet()
        spans.add(7)
        spans.add(8)
        assert spans.runlist() == [(7, 8)]

    def test_invalid_range(self):
        """lo > hi raises InvalidRangeError."""
        spans = IntervalSet()
        with pytest.raises(InvalidRangeError) as exc_info:
            spans.add_range(10, 5)
        assert exc_info.value.lo == 10
        assert exc_info.value.hi == 5
        assert spans.is_empty()

    def test_invalid_range_is_value_error(self):
        """InvalidRangeError can be caught as ValueError."""
        with pytest.raises(ValueError):
            IntervalSet.from_range(3, 2)


class TestIntervalSetQueries:
    """Tests for intersection and other queries."""

    def test_empty(self):
        """A new set is empty and falsy."""
        spans = IntervalSet()
        assert spans.is_empty()
        assert not spans
        assert spans.runlist() == []

    def test_intersect_disjoint(self):
        """Sets without a common position intersect to an empty set."""
        a = IntervalSet([(1, 10)])
        b = IntervalSet([(11, 20)])
        assert a.intersect(b).is_empty()

    def test_intersect_partial(self):
        """Intersection keeps only shared positions."""
        a = IntervalSet([(1, 10), (20, 30)])
        b = IntervalSet([(5, 25)])
        assert a.intersect(b).runlist() == [(5, 10), (20, 25)]

    def test_intersect_result_is_coalesced(self):
        """Touching pieces of an intersection form one run."""
        a = IntervalSet([(1, 20)])
        b = IntervalSet()
        b._runs = [Interval(1, 3), Interval(4, 6)]
        assert a.intersect(b).runlist() == [(1, 6)]

    def test_intersect_does_not_modify(self):
        """Intersection leaves both operands untouched."""
        a = IntervalSet([(1, 10)])
        b = IntervalSet([(5, 15)])
        a.intersect(b)
        assert a.runlist() == [(1, 10)]
        assert b.runlist() == [(5, 15)]

    def test_union(self):
        """Union merges both sets."""
        a = IntervalSet([(1, 3)])
        b = IntervalSet([(4, 8), (20, 22)])
        assert a.union(b).runlist() == [(1, 8), (20, 22)]

    def test_union_leaves_operands_unchanged(self):
        """Union returns a new set."""
        a = IntervalSet([(1, 3)])
        a.union(IntervalSet([(5, 6)]))
        assert a.runlist() == [(1, 3)]

    def test_membership(self):
        """Membership is per position; len counts runs."""
        spans = IntervalSet([(1, 3), (10, 12)])
        assert 11 in spans
        assert 5 not in spans
        assert len(spans) == 2

    def test_copy_is_independent(self):
        """Copies do not share state."""
        spans = IntervalSet([(1, 3)])
        duplicate = spans.copy()
        duplicate.add_range(10, 12)
        assert spans.runlist() == [(1, 3)]
        assert duplicate != spans

    def test_to_string(self):
        """Run lists format as comma-separated ranges."""
        spans = IntervalSet([(1, 6), (9, 9), (10, 12)])
        assert spans.to_string() == "1-6,9-12"
        assert IntervalSet([(4, 4)]).to_string() == "4"

