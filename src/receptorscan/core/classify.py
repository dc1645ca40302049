"""Receptor architecture classification.

Classification walks each protein's ordered label sequence (N- to
C-terminus) and looks for a transmembrane crossing in the right place:

RLK workflow (kinase-family proteins only):
    - no transmembrane label                          -> Others
    - [prefix] TMD_o2i ... Kinase ...  (prefix >= 1)  -> RLK, or RLK_WE
      when the prefix holds no extracellular domain
    - any TMD_i2o otherwise                           -> RLK_RvrTMD
    - TMD_o2i ... Kinase ...  (nothing before it)     -> RLK_WE
    - anything else                                   -> Others

RLP workflow:
    - no transmembrane label                          -> excluded
    - [prefix] TMD_o2i|TMD_i2o  (last label)          -> RLP, or RLPUN
      when the prefix holds no extracellular domain
    - anything else                                   -> excluded

The extracellular domain (ECD) is the prefix with one leading Sig_Pep
and every transmembrane label removed, joined by ``#``.

Labels are compared by :class:`LabelKind`, so only the exact label
``Kinase`` counts as a kinase. A label that merely contains the word
(``Kinase-like``, ``Fake_kinase``) is an ordinary domain: it is not
counted and does not complete the RLK pattern.

Before RLK classification, kinase-family hits are relabelled ``Kinase``
(e-value at or below the kinase threshold) or ``Fake_kinase``.

Example:
    >>> from receptorscan.core.classify import classify_rlk
    >>> classify_rlk("P1", ["Sig_Pep", "LRR_8", "TMD_o2i", "Kinase"]).to_row()
    ['P1', 'RLK', 'LRR_8', '1']
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Mapping, Sequence
from decimal import Decimal

from receptorscan.core.models import (
    ECD_SEPARATOR,
    FAKE_KINASE,
    KINASE,
    ArchitectureClass,
    Classification,
    LabelKind,
    ProteinDomains,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Hit Selection and Relabelling
# =============================================================================


def kinase_proteins(
    domains: ProteinDomains,
    families: Collection[str],
    max_evalue: Decimal,
) -> list[str]:
    """Find proteins with at least one significant kinase-family hit.

    Args:
        domains: ``{protein_id: [DomainHit, ...]}``.
        families: Kinase-family labels (e.g. ``Pkinase``).
        max_evalue: Inclusive e-value threshold.

    Returns:
        Protein IDs in order of first appearance, without duplicates.
    """
    return [
        protein_id
        for protein_id, hits in domains.items()
        if any(hit.label in families and hit.evalue <= max_evalue for hit in hits)
    ]


def relabel_kinases(
    domains: ProteinDomains,
    protein_ids: Sequence[str],
    families: Collection[str],
    kinase_evalue: Decimal,
    domain_evalue: Decimal,
) -> ProteinDomains:
    """Build the RLK final domain set.

    For each selected protein, kinase-family hits become ``Kinase`` when
    their e-value is at or below ``kinase_evalue`` and ``Fake_kinase``
    otherwise; both are kept. Other hits are kept only at or below
    ``domain_evalue``. Topology hits carry e-value 0 and always pass.

    Args:
        domains: Filtered, position-sorted hits.
        protein_ids: Proteins to include, in output order.
        families: Kinase-family labels.
        kinase_evalue: Inclusive threshold for a true kinase domain.
        domain_evalue: Inclusive threshold for any other hit.

    Returns:
        New ``{protein_id: [DomainHit, ...]}`` restricted to ``protein_ids``.
    """
    final: ProteinDomains = {}
    for protein_id in protein_ids:
        kept = []
        for hit in domains.get(protein_id, []):
            if hit.label in families:
                kept.append(hit.relabel(KINASE if hit.evalue <= kinase_evalue else FAKE_KINASE))
            elif hit.evalue <= domain_evalue:
                kept.append(hit)
        final[protein_id] = kept
    return final


def significant_hits(
    domains: ProteinDomains,
    protein_ids: Sequence[str],
    max_evalue: Decimal,
) -> ProteinDomains:
    """Keep hits at or below ``max_evalue`` for the given proteins."""
    return {
        protein_id: [hit for hit in domains.get(protein_id, []) if hit.evalue <= max_evalue]
        for protein_id in protein_ids
    }


def proteins_with_transmembrane(domains: ProteinDomains) -> list[str]:
    """Return proteins holding at least one transmembrane hit, in order."""
    return [
        protein_id
        for protein_id, hits in domains.items()
        if any(hit.kind.is_transmembrane for hit in hits)
    ]


# =============================================================================
# Label Sequence Helpers
# =============================================================================


def _kinds(labels: Sequence[str]) -> list[LabelKind]:
    return [LabelKind.of(label) for label in labels]


def count_kinases(labels: Sequence[str]) -> int:
    """Count ``Kinase`` labels in an architecture."""
    return _kinds(labels).count(LabelKind.KINASE)


def extracellular_domains(prefix: Sequence[str]) -> str | None:
    """Derive the ECD string from the labels before a crossing.

    One leading ``Sig_Pep`` is dropped, then every transmembrane label.

    Returns:
        Remaining labels joined by ``#``, or None if nothing remains.
    """
    labels = list(prefix)
    if labels and LabelKind.of(labels[0]) is LabelKind.SIGNAL_PEPTIDE:
        labels = labels[1:]
    labels = [label for label in labels if not LabelKind.of(label).is_transmembrane]
    return ECD_SEPARATOR.join(labels) or None


def _receptor_crossing(kinds: Sequence[LabelKind]) -> int | None:
    """Index of the first TMD_o2i with a prefix and a Kinase after it."""
    for index in range(1, len(kinds)):
        if kinds[index] is LabelKind.TMD_O2I and LabelKind.KINASE in kinds[index + 1 :]:
            return index
    return None


# =============================================================================
# Classifiers
# =============================================================================


def classify_rlk(protein_id: str, labels: Sequence[str]) -> Classification:
    """Classify a kinase-family protein.

    Args:
        protein_id: Protein identifier.
        labels: Ordered label sequence, kinase hits already relabelled.

    Returns:
        Classification with the kinase count filled in.
    """
    kinds = _kinds(labels)
    kinase_count = count_kinases(labels)

    def result(architecture: ArchitectureClass, ecd: str | None = None) -> Classification:
        return Classification(protein_id, architecture, ecd, kinase_count)

    if not any(kind.is_transmembrane for kind in kinds):
        return result(ArchitectureClass.OTHERS)

    crossing = _receptor_crossing(kinds)
    if crossing is not None:
        ecd = extracellular_domains(labels[:crossing])
        if ecd is None:
            return result(ArchitectureClass.RLK_WE)
        return result(ArchitectureClass.RLK, ecd)

    if LabelKind.TMD_I2O in kinds:
        return result(ArchitectureClass.RLK_RVR_TMD)

    if kinds[0] is LabelKind.TMD_O2I and LabelKind.KINASE in kinds[1:]:
        return result(ArchitectureClass.RLK_WE)

    return result(ArchitectureClass.OTHERS)


def classify_rlp(protein_id: str, labels: Sequence[str]) -> Classification | None:
    """Classify a protein in the RLP workflow.

    Args:
        protein_id: Protein identifier.
        labels: Ordered label sequence.

    Returns:
        Classification, or None when the protein is excluded.
    """
    if not labels or not LabelKind.of(labels[-1]).is_transmembrane:
        return None

    ecd = extracellular_domains(labels[:-1])
    if ecd is None:
        return Classification(protein_id, ArchitectureClass.RLPUN)
    return Classification(protein_id, ArchitectureClass.RLP, ecd)


def classify_rlk_labels(architectures: Mapping[str, Sequence[str]]) -> list[Classification]:
    """Classify every protein of an RLK run, in input order."""
    results = [classify_rlk(protein_id, labels) for protein_id, labels in architectures.items()]
    n_primary = sum(1 for record in results if record.architecture.is_primary)
    logger.info(f"{n_primary} RLKs scanned ({len(results) - n_primary} other candidates)")
    return results


def classify_rlp_labels(architectures: Mapping[str, Sequence[str]]) -> list[Classification]:
    """Classify every protein of an RLP run, dropping excluded proteins."""
    results = []
    for protein_id, labels in architectures.items():
        record = classify_rlp(protein_id, labels)
        if record is not None:
            results.append(record)
    logger.info(f"{len(results)} RLPs scanned from {len(architectures)} candidates")
    return results
