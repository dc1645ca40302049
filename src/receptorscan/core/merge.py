"""Merge domain-scan hits with topology-derived segments.

Topology predictions carry one class code per residue. Residues are
collected into interval sets per topology label and every maximal run
becomes a :class:`DomainHit` with e-value 0:

- ``S``: signal peptide residue -> ``Sig_Pep``
- ``h`` / ``b``: helix / strand crossing outside-to-inside -> ``TMD_o2i``
- ``H`` / ``B``: helix / strand crossing inside-to-outside -> ``TMD_i2o``
- anything else: not a membrane feature

Example:
    >>> from receptorscan.core.merge import topology_to_hits
    >>> [hit.label for hit in topology_to_hits("SSSSoooohhhhhiii")]
    ['Sig_Pep', 'TMD_o2i']
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from receptorscan.core.models import (
    SIG_PEP,
    TMD_I2O,
    TMD_O2I,
    TOPOLOGY_EVALUE,
    DomainHit,
    ProteinDomains,
)
from receptorscan.io.tmbed import LengthMismatchError, check_topology_length
from receptorscan.utils.intervals import IntervalSet

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

# Per-residue topology codes mapped to the label they contribute to
TOPOLOGY_CODES = {
    "S": SIG_PEP,
    "h": TMD_O2I,
    "b": TMD_O2I,
    "H": TMD_I2O,
    "B": TMD_I2O,
}

# Emission order of topology hits
TOPOLOGY_ORDER = (SIG_PEP, TMD_O2I, TMD_I2O)


# =============================================================================
# Topology Conversion
# =============================================================================


def topology_segments(topology: str) -> dict[str, IntervalSet]:
    """Collect residue positions per topology label.

    Args:
        topology: One class code per residue.

    Returns:
        ``{label: IntervalSet}`` for every topology label (sets may be empty).
    """
    segments = {label: IntervalSet() for label in TOPOLOGY_ORDER}

    for offset, code in enumerate(topology):
        label = TOPOLOGY_CODES.get(code)
        if label is not None:
            segments[label].add(offset + 1)

    return segments


def topology_to_hits(topology: str) -> list[DomainHit]:
    """Convert a topology string to topology hits.

    Hits are emitted as all Sig_Pep runs, then TMD_o2i runs, then
    TMD_i2o runs, each group ascending by start.

    Args:
        topology: One class code per residue.

    Returns:
        List of DomainHit with e-value 0.
    """
    segments = topology_segments(topology)
    hits = []
    for label in TOPOLOGY_ORDER:
        for run in segments[label].runlist():
            hits.append(DomainHit(label, TOPOLOGY_EVALUE, run.lo, run.hi))
    return hits


# =============================================================================
# Merging
# =============================================================================


def merge_annotations(
    domains: ProteinDomains,
    topologies: Mapping[str, str],
    sequence_lengths: Mapping[str, int] | None = None,
) -> ProteinDomains:
    """Append topology hits to each protein's domain hits.

    Every protein present in either source ends up in ``domains``. A
    topology string whose length differs from the protein's sequence
    length is dropped with a warning; the protein keeps its domain hits.
    No e-value filtering happens here.

    Args:
        domains: ``{protein_id: [DomainHit, ...]}``, mutated in place.
        topologies: ``{protein_id: topology_string}``.
        sequence_lengths: Optional ``{protein_id: length}`` used to
            validate topology strings. Proteins without a known length
            are not checked.

    Returns:
        The same ``domains`` mapping.
    """
    n_merged = 0
    n_dropped = 0

    for protein_id, topology in topologies.items():
        if sequence_lengths is not None and protein_id in sequence_lengths:
            try:
                check_topology_length(protein_id, topology, sequence_lengths[protein_id])
            except LengthMismatchError as e:
                logger.warning(f"Dropping topology: {e}")
                n_dropped += 1
                domains.setdefault(protein_id, [])
                continue

        domains.setdefault(protein_id, []).extend(topology_to_hits(topology))
        n_merged += 1

    logger.debug(
        f"Merged topology for {n_merged} proteins "
        f"({n_dropped} dropped for length mismatch)"
    )
    return domains
