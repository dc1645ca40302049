"""Positional conflict resolution for per-protein domain hits.

Hits are ranked by e-value and claimed greedily: each hit is kept only
if none of its residues is already covered by a kept hit. The survivors
are then re-sorted by start position so that label order follows the
protein from N- to C-terminus.

All sorts are stable, so hits with equal keys keep their previous
relative order. Among equally significant overlapping hits, the one
seen first wins.

Example:
    >>> from receptorscan.core.filter import resolve_domains
    >>> domains = {"P1": [DomainHit("LRR_8", "1e-5", 40, 90),
    ...                   DomainHit("LRR_1", "1e-3", 60, 80)]}
    >>> [hit.label for hit in resolve_domains(domains)["P1"]]
    ['LRR_8']
"""

from __future__ import annotations

import logging

from receptorscan.core.models import DomainHit, ProteinDomains
from receptorscan.utils.intervals import IntervalSet, InvalidRangeError

logger = logging.getLogger(__name__)


# =============================================================================
# Sorting
# =============================================================================


def sort_by_evalue(domains: ProteinDomains) -> ProteinDomains:
    """Stable-sort every protein's hits ascending by e-value, in place."""
    for hits in domains.values():
        hits.sort(key=lambda hit: hit.evalue)
    return domains


def sort_by_position(domains: ProteinDomains) -> ProteinDomains:
    """Stable-sort every protein's hits ascending by start, in place."""
    for hits in domains.values():
        hits.sort(key=lambda hit: hit.start)
    return domains


# =============================================================================
# Overlap Filtering
# =============================================================================


def select_non_overlapping(hits: list[DomainHit], protein_id: str = "") -> list[DomainHit]:
    """Greedily keep hits that do not overlap an already kept hit.

    Hits are visited in the given order, which should be ascending
    e-value. A hit with an invalid range is logged and skipped.

    Args:
        hits: Hits of one protein, most significant first.
        protein_id: Protein identifier (for log messages).

    Returns:
        Kept hits, in visiting order.
    """
    claimed = IntervalSet()
    kept = []

    for hit in hits:
        try:
            span = IntervalSet.from_range(hit.start, hit.end)
        except InvalidRangeError as e:
            logger.warning(f"{protein_id}: skipping {hit.label} hit ({e})")
            continue

        if claimed.intersect(span).is_empty():
            kept.append(hit)
            claimed = claimed.union(span)

    return kept


def filter_overlaps(domains: ProteinDomains) -> ProteinDomains:
    """Replace every protein's hits with its non-overlapping subset.

    Each protein's list must already be sorted ascending by e-value.

    Args:
        domains: ``{protein_id: [DomainHit, ...]}``, mutated in place.

    Returns:
        The same ``domains`` mapping.
    """
    n_before = 0
    n_after = 0

    for protein_id, hits in domains.items():
        n_before += len(hits)
        hits[:] = select_non_overlapping(hits, protein_id)
        n_after += len(hits)

    logger.debug(f"Overlap filter kept {n_after} of {n_before} hits")
    return domains


def resolve_domains(domains: ProteinDomains) -> ProteinDomains:
    """Rank, filter and order every protein's hits.

    Runs the e-value sort, the overlap filter, a second e-value sort and
    finally the position sort.

    Args:
        domains: ``{protein_id: [DomainHit, ...]}``, mutated in place.

    Returns:
        The same ``domains`` mapping, each list in N-to-C order.
    """
    sort_by_evalue(domains)
    filter_overlaps(domains)
    sort_by_evalue(domains)
    return sort_by_position(domains)
