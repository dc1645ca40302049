"""Protein FASTA handling.

Indexed access to protein sequences using pyfaidx. Used to learn
sequence lengths for topology validation and to write the subset of
kinase-family proteins that is sent to topology prediction.

Example:
    >>> from receptorscan.io.fasta import ProteinAccessor
    >>> with ProteinAccessor("proteins.fa") as proteins:
    ...     proteins.write_subset(["AT1G01010", "AT1G01020"], "Pro.KD.fa")
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import pyfaidx

logger = logging.getLogger(__name__)

# Residues per line in written FASTA files
LINE_WIDTH = 60


class ProteinAccessor:
    """Indexed protein FASTA access using pyfaidx.

    Sequence identifiers are the first whitespace-delimited word of each
    header, which is also how hmmscan and TMbed name their queries.

    Attributes:
        path: Path to the FASTA file.
    """

    def __init__(self, fasta_path: Path | str) -> None:
        """Open the FASTA file.

        Args:
            fasta_path: Path to FASTA file. A .fai index is created if needed.

        Raises:
            FileNotFoundError: If the FASTA file doesn't exist.
        """
        self.path = Path(fasta_path)
        if not self.path.exists():
            raise FileNotFoundError(f"FASTA file not found: {self.path}")

        self._fasta: pyfaidx.Fasta | None = pyfaidx.Fasta(str(self.path), rebuild=False)
        self._ids = list(self._fasta.keys())
        self._lengths = {seqid: len(self._fasta[seqid]) for seqid in self._ids}

        logger.info(f"Opened FASTA: {self.path.name}, {len(self._ids)} proteins")

    @property
    def lengths(self) -> dict[str, int]:
        """Return {protein_id: length} mapping."""
        return self._lengths.copy()

    def __contains__(self, protein_id: object) -> bool:
        return protein_id in self._lengths

    def __len__(self) -> int:
        return len(self._ids)

    def __enter__(self) -> ProteinAccessor:
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()

    def close(self) -> None:
        """Close the FASTA file."""
        if self._fasta is not None:
            self._fasta.close()
            self._fasta = None

    def get_sequence(self, protein_id: str) -> str:
        """Get the full sequence of a protein.

        Raises:
            KeyError: If the protein is not in the file.
            RuntimeError: If the file has been closed.
        """
        if self._fasta is None:
            raise RuntimeError("FASTA file not opened")
        if protein_id not in self._lengths:
            raise KeyError(f"Protein not found: {protein_id}")
        return str(self._fasta[protein_id][:])

    def write_subset(self, protein_ids: Iterable[str], path: Path | str) -> int:
        """Write the given proteins to a new FASTA file.

        IDs not present in the file are logged and skipped.

        Args:
            protein_ids: Proteins to write, in output order.
            path: Output FASTA path.

        Returns:
            Number of sequences written.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        n_written = 0
        with open(path, "w") as f:
            for protein_id in protein_ids:
                if protein_id not in self._lengths:
                    logger.warning(f"{protein_id} not found in {self.path.name}")
                    continue
                sequence = self.get_sequence(protein_id)
                f.write(f">{protein_id}\n")
                for i in range(0, len(sequence), LINE_WIDTH):
                    f.write(sequence[i : i + LINE_WIDTH] + "\n")
                n_written += 1

        logger.info(f"Wrote {n_written} sequences to {path}")
        return n_written
