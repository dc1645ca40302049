"""Integer interval sets for residue positions.

This module provides a coalescing set of closed integer ranges, used to
turn per-residue topology labels into contiguous segments and to detect
positional conflicts between domain hits.

- Closed ranges: ``(lo, hi)`` includes both ends
- Adjacent and overlapping ranges coalesce on insertion
- Set intersection and run-list extraction

Example:
    >>> from receptorscan.utils.intervals import IntervalSet
    >>> claimed = IntervalSet()
    >>> claimed.add_range(1, 3)
    >>> claimed.add_range(4, 6)
    >>> claimed.add_range(10, 12)
    >>> claimed.runlist()
    [Interval(lo=1, hi=6), Interval(lo=10, hi=12)]
"""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Iterable, Iterator
from typing import NamedTuple

# =============================================================================
# Exceptions
# =============================================================================


class InvalidRangeError(ValueError):
    """Raised when a range has its lower bound above its upper bound."""

    def __init__(self, lo: int, hi: int) -> None:
        super().__init__(f"Invalid range: lower bound {lo} > upper bound {hi}")
        self.lo = lo
        self.hi = hi


# =============================================================================
# Data Structures
# =============================================================================


class Interval(NamedTuple):
    """A closed integer interval.

    Attributes:
        lo: First position (inclusive).
        hi: Last position (inclusive).
    """

    lo: int
    hi: int

    def contains(self, position: int) -> bool:
        """Check if this interval contains a position."""
        return self.lo <= position <= self.hi


class IntervalSet:
    """A set of integer positions stored as disjoint, maximal closed runs.

    Runs are kept sorted by ``lo`` and never touch each other: inserting
    ``[4, 6]`` into a set holding ``[1, 3]`` yields the single run
    ``[1, 6]``.

    Example:
        >>> spans = IntervalSet.from_range(20, 40)
        >>> spans.intersect(IntervalSet.from_range(35, 50)).runlist()
        [Interval(lo=35, hi=40)]
    """

    __slots__ = ("_runs",)

    def __init__(self, ranges: Iterable[tuple[int, int]] | None = None) -> None:
        self._runs: list[Interval] = []
        if ranges is not None:
            for lo, hi in ranges:
                self.add_range(lo, hi)

    @classmethod
    def from_range(cls, lo: int, hi: int) -> IntervalSet:
        """Create a set holding the single range ``[lo, hi]``."""
        interval_set = cls()
        interval_set.add_range(lo, hi)
        return interval_set

    def add(self, position: int) -> None:
        """Add a single position."""
        self.add_range(position, position)

    def add_range(self, lo: int, hi: int) -> None:
        """Merge ``[lo, hi]`` into the set.

        Args:
            lo: First position of the range.
            hi: Last position of the range.

        Raises:
            InvalidRangeError: If ``lo > hi``.
        """
        if lo > hi:
            raise InvalidRangeError(lo, hi)

        # First run that could touch the new range (its hi >= lo - 1)
        index = bisect_left([run.hi for run in self._runs], lo - 1)
        new_lo, new_hi = lo, hi
        end = index
        while end < len(self._runs) and self._runs[end].lo <= hi + 1:
            new_lo = min(new_lo, self._runs[end].lo)
            new_hi = max(new_hi, self._runs[end].hi)
            end += 1

        self._runs[index:end] = [Interval(new_lo, new_hi)]

    def is_empty(self) -> bool:
        """Return True if the set holds no positions."""
        return not self._runs

    def intersect(self, other: IntervalSet) -> IntervalSet:
        """Return the positions present in both sets.

        Args:
            other: Set to intersect with.

        Returns:
            New IntervalSet; empty when the sets share no position.
        """
        result = IntervalSet()
        mine = self._runs
        theirs = other._runs
        i = j = 0
        while i < len(mine) and j < len(theirs):
            lo = max(mine[i].lo, theirs[j].lo)
            hi = min(mine[i].hi, theirs[j].hi)
            if lo <= hi:
                if result._runs and result._runs[-1].hi + 1 >= lo:
                    result._runs[-1] = Interval(result._runs[-1].lo, hi)
                else:
                    result._runs.append(Interval(lo, hi))
            if mine[i].hi < theirs[j].hi:
                i += 1
            else:
                j += 1
        return result

    def union(self, other: IntervalSet) -> IntervalSet:
        """Return the positions present in either set."""
        result = self.copy()
        for run in other._runs:
            result.add_range(run.lo, run.hi)
        return result

    def runlist(self) -> list[Interval]:
        """Return the maximal contiguous runs, ascending by ``lo``."""
        return list(self._runs)

    def copy(self) -> IntervalSet:
        """Return an independent copy of this set."""
        duplicate = IntervalSet()
        duplicate._runs = list(self._runs)
        return duplicate

    def __contains__(self, position: object) -> bool:
        if not isinstance(position, int):
            return False
        return any(run.contains(position) for run in self._runs)

    def __iter__(self) -> Iterator[Interval]:
        return iter(self._runs)

    def __len__(self) -> int:
        return len(self._runs)

    def __bool__(self) -> bool:
        return not self.is_empty()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IntervalSet):
            return NotImplemented
        return self._runs == other._runs

    def __repr__(self) -> str:
        return f"IntervalSet({self.to_string()!r})"

    def to_string(self) -> str:
        """Format as a comma-separated run list, e.g. ``"1-6,10-12"``."""
        return ",".join(
            str(run.lo) if run.lo == run.hi else f"{run.lo}-{run.hi}"
            for run in self._runs
        )
