"""Data structures shared by the reconciliation pipeline.

A protein's annotation is a list of :class:`DomainHit` objects, each a
labelled residue range with an e-value. Hits come from two sources:

- Domain-scan reports (label = Pfam family name, e-value as reported)
- Topology predictions (label = Sig_Pep, TMD_o2i or TMD_i2o, e-value 0)

The per-protein mapping ``{protein_id: [DomainHit, ...]}`` is owned by
whichever pipeline stage currently runs; each stage reorders or replaces
the lists in place.

Example:
    >>> from receptorscan.core.models import DomainHit, LabelKind
    >>> hit = DomainHit("LRR_8", "1.2e-15", 30, 88)
    >>> hit.kind
    <LabelKind.DOMAIN: 'domain'>
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

import attrs

# =============================================================================
# Constants
# =============================================================================

SIG_PEP = "Sig_Pep"
TMD_O2I = "TMD_o2i"
TMD_I2O = "TMD_i2o"
KINASE = "Kinase"
FAKE_KINASE = "Fake_kinase"

TOPOLOGY_LABELS = frozenset({SIG_PEP, TMD_O2I, TMD_I2O})

# Topology-derived hits are always significant
TOPOLOGY_EVALUE = Decimal(0)

# Joins ECD labels in output tables
ECD_SEPARATOR = "#"

# Printed in the ECD column when a protein has no extracellular domain
NO_ECD = "None"

# Per-protein interval lists, keyed by protein ID
ProteinDomains = dict[str, list["DomainHit"]]


# =============================================================================
# Enums
# =============================================================================


class LabelKind(Enum):
    """What a label in the ordered architecture stands for."""

    SIGNAL_PEPTIDE = "signal_peptide"
    TMD_O2I = "tmd_o2i"  # Outside-to-inside transmembrane crossing
    TMD_I2O = "tmd_i2o"  # Inside-to-outside transmembrane crossing
    KINASE = "kinase"  # Significant kinase-family hit
    FAKE_KINASE = "fake_kinase"  # Kinase-family hit above the kinase threshold
    DOMAIN = "domain"  # Any other domain-scan label

    @classmethod
    def of(cls, label: str) -> LabelKind:
        """Classify a label string."""
        return _LABEL_KINDS.get(label, cls.DOMAIN)

    @property
    def is_transmembrane(self) -> bool:
        """Whether this kind is a transmembrane crossing."""
        return self in (LabelKind.TMD_O2I, LabelKind.TMD_I2O)


_LABEL_KINDS = {
    SIG_PEP: LabelKind.SIGNAL_PEPTIDE,
    TMD_O2I: LabelKind.TMD_O2I,
    TMD_I2O: LabelKind.TMD_I2O,
    KINASE: LabelKind.KINASE,
    FAKE_KINASE: LabelKind.FAKE_KINASE,
}


class ArchitectureClass(Enum):
    """Receptor architecture assigned to a protein.

    RLK workflow classes:
    - RLK: extracellular domain(s), TMD_o2i, then a kinase domain
    - RLK_WE: RLK layout without an extracellular domain
    - RLK_RvrTMD: kinase protein with a reverse (inside-to-outside) crossing
    - Others: kinase protein with no receptor layout

    RLP workflow classes:
    - RLP: extracellular domain(s) followed by a terminal crossing
    - RLPUN: terminal crossing with no recognisable extracellular domain
    """

    RLK = "RLK"
    RLK_WE = "RLK_WE"
    RLK_RVR_TMD = "RLK_RvrTMD"
    OTHERS = "Others"
    RLP = "RLP"
    RLPUN = "RLPUN"

    @property
    def is_primary(self) -> bool:
        """Whether proteins of this class go to the primary RLK/RLP table."""
        return self in (
            ArchitectureClass.RLK,
            ArchitectureClass.RLK_WE,
            ArchitectureClass.RLP,
            ArchitectureClass.RLPUN,
        )


# =============================================================================
# Converters
# =============================================================================


def to_decimal(value: Any) -> Decimal:
    """Convert an e-value to Decimal without passing through binary floats.

    Floats are converted through their shortest repr so that ``1e-10``
    stays exactly ``1E-10``.

    Raises:
        ValueError: If the value is not a finite number.
    """
    if isinstance(value, Decimal):
        result = value
    else:
        text = repr(value) if isinstance(value, float) else str(value).strip()
        try:
            result = Decimal(text)
        except InvalidOperation as e:
            raise ValueError(f"Invalid e-value: {value!r}") from e

    if not result.is_finite():
        raise ValueError(f"Invalid e-value: {value!r}")
    return result


# =============================================================================
# Data Classes
# =============================================================================


@attrs.define(frozen=True, slots=True)
class DomainHit:
    """A labelled residue range on one protein.

    Attributes:
        label: Domain family name or topology label.
        evalue: Significance of the hit (0 for topology labels).
        start: First residue (1-based, inclusive).
        end: Last residue (1-based, inclusive).

    Positions below 1 raise ValueError. ``start > end`` is accepted here
    and rejected by the overlap filter, which skips such hits.
    """

    label: str
    evalue: Decimal = attrs.field(converter=to_decimal)
    start: int = attrs.field(converter=int, validator=attrs.validators.ge(1))
    end: int = attrs.field(converter=int, validator=attrs.validators.ge(1))

    @property
    def kind(self) -> LabelKind:
        """Kind of this hit's label."""
        return LabelKind.of(self.label)

    @property
    def is_topology(self) -> bool:
        """Whether this hit was synthesized from a topology prediction."""
        return self.label in TOPOLOGY_LABELS

    def relabel(self, label: str) -> DomainHit:
        """Return a copy of this hit with a different label."""
        return attrs.evolve(self, label=label)


@attrs.define(frozen=True, slots=True)
class DomainRecord:
    """One row of a domain-scan report.

    Attributes:
        protein_id: Query protein identifier.
        hit: The domain hit.
    """

    protein_id: str
    hit: DomainHit


@attrs.define(frozen=True, slots=True)
class Classification:
    """Architecture call for one protein.

    Attributes:
        protein_id: Protein identifier.
        architecture: Assigned class.
        ecd: Extracellular domain labels joined by ``#``, or None.
        kinase_count: Number of ``Kinase`` labels (None in the RLP workflow).
    """

    protein_id: str
    architecture: ArchitectureClass
    ecd: str | None = None
    kinase_count: int | None = None

    def to_row(self) -> list[str]:
        """Format as an output table row."""
        row = [
            self.protein_id,
            self.architecture.value,
            self.ecd if self.ecd is not None else NO_ECD,
        ]
        if self.kinase_count is not None:
            row.append(str(self.kinase_count))
        return row


# =============================================================================
# Helper Functions
# =============================================================================


def group_records(records: list[DomainRecord]) -> ProteinDomains:
    """Group report rows into per-protein hit lists.

    Protein order follows first appearance; hit order within a protein
    follows report order.

    Args:
        records: Domain-scan report rows.

    Returns:
        ``{protein_id: [DomainHit, ...]}``
    """
    domains: ProteinDomains = {}
    for record in records:
        domains.setdefault(record.protein_id, []).append(record.hit)
    return domains


def architecture_labels(domains: ProteinDomains) -> dict[str, list[str]]:
    """Flatten per-protein hit lists into ordered label sequences."""
    return {protein_id: [hit.label for hit in hits] for protein_id, hits in domains.items()}
