"""Tests for domain filtering and ordering."""

import logging

from receptorscan.core.filter import (
    filter_overlaps,
    resolve_domains,
    select_non_overlapping,
    sort_by_evalue,
    sort_by_position,
)
from receptorscan.core.models import DomainHit


def _spans(hits):
    return [(hit.label, hit.start, hit.end) for hit in hits]


# =============================================================================
# Test Sorting
# =============================================================================


class TestSorting:
    """Tests for the e-value and position sorts."""

    def test_sort_by_evalue_decimal_order(self):
        """E-values order numerically, including extreme exponents."""
        domains = {
            "P1": [
                DomainHit("A", "1e-3", 1, 10),
                DomainHit("B", "1e-300", 20, 30),
                DomainHit("C", "0", 40, 50),
                DomainHit("D", "2.5e-10", 60, 70),
            ]
        }
        sort_by_evalue(domains)
        assert [hit.label for hit in domains["P1"]] == ["C", "B", "D", "A"]

    def test_sort_by_evalue_is_stable(self):
        """Hits with equal e-values keep their relative order."""
        domains = {
            "P1": [
                DomainHit("first", "1e-5", 50, 60),
                DomainHit("second", "1e-5", 1, 10),
            ]
        }
        sort_by_evalue(domains)
        assert [hit.label for hit in domains["P1"]] == ["first", "second"]

    def test_sort_by_position_is_stable(self):
        """Hits with equal starts keep their relative order."""
        domains = {
            "P1": [
                DomainHit("late", "0", 30, 40),
                DomainHit("x", "0", 5, 8),
                DomainHit("y", "0", 5, 6),
            ]
        }
        sort_by_position(domains)
        assert [hit.label for hit in domains["P1"]] == ["x", "y", "late"]


# =============================================================================
# Test Overlap Filter
# =============================================================================


class TestSelectNonOverlapping:
    """Tests for the greedy overlap filter."""

    def test_overlapping_hit_is_dropped(self):
        """A later hit overlapping a kept one is discarded."""
        hits = [
            DomainHit("LRR_8", "1e-20", 10, 25),
            DomainHit("LRR_1", "0.5", 12, 20),
        ]
        assert _spans(select_non_overlapping(hits)) == [("LRR_8", 10, 25)]

    def test_touching_hits_are_kept(self):
        """Hits sharing no residue both survive."""
        hits = [
            DomainHit("A", "1e-5", 1, 10),
            DomainHit("B", "1e-4", 11, 20),
        ]
        assert len(select_non_overlapping(hits)) == 2

    def test_single_shared_residue_is_overlap(self):
        """Sharing one residue is enough to be dropped."""
        hits = [
            DomainHit("A", "1e-5", 1, 10),
            DomainHit("B", "1e-4", 10, 20),
        ]
        assert _spans(select_non_overlapping(hits)) == [("A", 1, 10)]

    def test_tie_first_come_wins(self):
        """With equal e-values the first hit claims the territory."""
        hits = [
            DomainHit("first", "1e-8", 5, 30),
            DomainHit("second", "1e-8", 10, 40),
        ]
        assert _spans(select_non_overlapping(hits)) == [("first", 5, 30)]

    def test_dropped_hit_does_not_claim(self):
        """Only kept hits claim positions."""
        hits = [
            DomainHit("A", "1e-9", 20, 30),
            DomainHit("B", "1e-8", 10, 25),  # dropped
            DomainHit("C", "1e-7", 10, 19),  # free once B is dropped
        ]
        assert [hit.label for hit in select_non_overlapping(hits)] == ["A", "C"]

    def test_invalid_range_is_skipped(self, caplog):
        """Hits with start > end are skipped with a warning."""
        hits = [
            DomainHit("bad", "1e-20", 30, 10),
            DomainHit("good", "1e-5", 12, 20),
        ]
        with caplog.at_level(logging.WARNING):
            kept = select_non_overlapping(hits, "P1")
        assert [hit.label for hit in kept] == ["good"]
        assert "P1: skipping bad hit" in caplog.text

    def test_non_overlap_invariant(self):
        """No two surviving hits share a residue."""
        hits = [
            DomainHit(f"D{i}", f"1e-{i}", (i * 7) % 50 + 1, (i * 7) % 50 + 15)
            for i in range(1, 20)
        ]
        kept = select_non_overlapping(hits)
        for i, a in enumerate(kept):
            for b in kept[i + 1 :]:
                assert a.end < b.start or b.end < a.start


class TestFilterOverlaps:
    """Tests for the per-protein filter."""

    def test_replaces_lists_in_place(self):
        """Every protein's list is replaced by its surviving hits."""
        hits = [DomainHit("A", "1e-5", 1, 10), DomainHit("B", "1e-4", 5, 15)]
        domains = {"P1": hits, "P2": [DomainHit("C", "1", 1, 5)]}
        filter_overlaps(domains)
        assert domains["P1"] is hits
        assert [hit.label for hit in hits] == ["A"]
        assert [hit.label for hit in domains["P2"]] == ["C"]

    def test_idempotent(self):
        """Filtering its own output drops nothing further."""
        domains = {
            "P1": [
                DomainHit("Sig_Pep", "0", 1, 5),
                DomainHit("Pkinase", "1e-50", 40, 58),
                DomainHit("LRR_8", "2e-20", 10, 25),
                DomainHit("LRR_1", "0.5", 12, 20),
                DomainHit("Pkinase_C", "1e-3", 50, 70),
            ]
        }
        sort_by_evalue(domains)
        filter_overlaps(domains)
        first = list(domains["P1"])
        filter_overlaps(domains)
        assert domains["P1"] == first


class TestResolveDomains:
    """Tests for the full ranking, filtering and ordering."""

    def test_survivors_in_position_order(self):
        """Resolved hits are non-overlapping and ordered by start."""
        domains = {
            "P1": [
                DomainHit("Pkinase", "1.5e-50", 40, 58),
                DomainHit("LRR_8", "2e-20", 10, 25),
                DomainHit("LRR_1", "0.5", 12, 20),
                DomainHit("Sig_Pep", "0", 1, 5),
                DomainHit("TMD_o2i", "0", 30, 35),
            ]
        }
        resolve_domains(domains)
        assert [hit.label for hit in domains["P1"]] == ["Sig_Pep", "LRR_8", "TMD_o2i", "Pkinase"]
        starts = [hit.start for hit in domains["P1"]]
        assert starts == sorted(starts)

    def test_topology_beats_domain_overlap(self):
        """Topology hits (e-value 0) win over overlapping domain hits."""
        domains = {
            "P1": [
                DomainHit("LRR_8", "1e-100", 20, 40),
                DomainHit("TMD_o2i", "0", 35, 55),
            ]
        }
        resolve_domains(domains)
        assert [hit.label for hit in domains["P1"]] == ["TMD_o2i"]
