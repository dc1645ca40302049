"""TMbed topology prediction files.

TMbed writes one record per protein: a ``>id`` header, the sequence,
and a per-residue prediction string of the same length. Long records
may be wrapped; the wrapped sequence lines come first, followed by the
same number of prediction lines.

Prediction codes used downstream:
    S       signal peptide
    H / B   alpha helix / beta strand, inside-to-outside
    h / b   alpha helix / beta strand, outside-to-inside
    i / o   inside / outside, non-membrane

Example:
    >>> from receptorscan.io.tmbed import read_tmbed_predictions
    >>> records = read_tmbed_predictions("Pro.KD.pred")
    >>> records["AT1G01010"].topology[:10]
    'SSSSSSSSoo'
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import attrs

logger = logging.getLogger(__name__)


# =============================================================================
# Exceptions
# =============================================================================


class LengthMismatchError(ValueError):
    """Raised when a topology string and its sequence differ in length."""

    def __init__(self, protein_id: str, topology_length: int, sequence_length: int) -> None:
        super().__init__(
            f"{protein_id}: topology length {topology_length} "
            f"!= sequence length {sequence_length}"
        )
        self.protein_id = protein_id
        self.topology_length = topology_length
        self.sequence_length = sequence_length


# =============================================================================
# Data Structures
# =============================================================================


@attrs.define(frozen=True, slots=True)
class TopologyRecord:
    """A single TMbed prediction.

    Attributes:
        protein_id: Protein identifier (first word of the header).
        sequence: Amino-acid sequence as written in the prediction file.
        topology: Per-residue prediction codes.
    """

    protein_id: str
    sequence: str
    topology: str

    def validate(self) -> None:
        """Check that topology and sequence lengths agree.

        Raises:
            LengthMismatchError: If the lengths differ.
        """
        check_topology_length(self.protein_id, self.topology, len(self.sequence))


# =============================================================================
# Validation
# =============================================================================


def check_topology_length(protein_id: str, topology: str, sequence_length: int) -> None:
    """Ensure a topology string covers exactly one code per residue.

    Args:
        protein_id: Protein identifier (for the error message).
        topology: Per-residue prediction codes.
        sequence_length: Length of the protein sequence.

    Raises:
        LengthMismatchError: If the lengths differ.
    """
    if len(topology) != sequence_length:
        raise LengthMismatchError(protein_id, len(topology), sequence_length)


# =============================================================================
# Reading
# =============================================================================


def iter_tmbed_records(path: Path | str) -> Iterator[TopologyRecord]:
    """Iterate over raw records of a TMbed prediction file.

    Records are yielded without length validation.

    Args:
        path: Path to the ``.pred`` file.

    Yields:
        TopologyRecord objects in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"TMbed prediction file not found: {path}")

    with open(path) as f:
        current_id: str | None = None
        lines: list[str] = []

        for line in f:
            line = line.strip()
            if not line:
                continue
            if line.startswith(">"):
                if current_id is not None:
                    yield _build_record(current_id, lines)
                header = line[1:].split()
                current_id = header[0] if header else ""
                lines = []
            else:
                lines.append(line)

        if current_id is not None:
            yield _build_record(current_id, lines)


def _build_record(protein_id: str, lines: list[str]) -> TopologyRecord:
    """Split a record body into its sequence and prediction halves."""
    n_sequence = len(lines) // 2
    return TopologyRecord(
        protein_id=protein_id,
        sequence="".join(lines[:n_sequence]),
        topology="".join(lines[n_sequence:]),
    )


def read_tmbed_predictions(path: Path | str) -> dict[str, TopologyRecord]:
    """Read a TMbed prediction file, dropping inconsistent records.

    Records whose prediction length differs from their sequence length
    are logged and left out; they never stop the rest of the file from
    being read.

    Args:
        path: Path to the ``.pred`` file.

    Returns:
        ``{protein_id: TopologyRecord}`` in file order.
    """
    records: dict[str, TopologyRecord] = {}
    n_dropped = 0

    for record in iter_tmbed_records(path):
        try:
            record.validate()
        except LengthMismatchError as e:
            logger.warning(f"Skipping TMbed record: {e}")
            n_dropped += 1
            continue
        if record.protein_id in records:
            logger.warning(f"Duplicate TMbed record for {record.protein_id}, keeping the last")
        records[record.protein_id] = record

    logger.info(f"Read {len(records)} TMbed predictions ({n_dropped} skipped)")
    return records
