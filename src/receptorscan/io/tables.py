"""Tab-separated output tables and pipeline checkpoints.

Tables written here:

- Final domain table: ``Name, Label, Start, End`` (one row per surviving hit)
- RLK tables: ``Name, Type, ECD, KD_count``
- RLP table: ``Name, Type, ECD``
- Topology segments: ``Name, Start, End, Label``
- Plain ID lists (one identifier per line, no header)

Every table is written to a temporary file beside its destination and
renamed into place once complete, so an interrupted run never leaves a
half-written table behind.

Example:
    >>> from receptorscan.io.tables import write_final_domains, read_final_domains
    >>> write_final_domains(domains, "result/Pro.final.domain.tsv")
    >>> labels = read_final_domains("result/Pro.final.domain.tsv")
"""

from __future__ import annotations

import csv
import logging
import os
import tempfile
from collections.abc import Iterable, Sequence
from pathlib import Path

from receptorscan.core.models import Classification, ProteinDomains

logger = logging.getLogger(__name__)

# =============================================================================
# Table Schemas
# =============================================================================

FINAL_DOMAIN_COLUMNS = ["Name", "Label", "Start", "End"]
RLK_COLUMNS = ["Name", "Type", "ECD", "KD_count"]
RLP_COLUMNS = ["Name", "Type", "ECD"]
TOPOLOGY_COLUMNS = ["Name", "Start", "End", "Label"]


# =============================================================================
# Generic Writers
# =============================================================================


def write_tsv(
    path: Path | str,
    rows: Iterable[Sequence[object]],
    header: Sequence[str] | None = None,
) -> Path:
    """Write rows to a TSV file atomically.

    Args:
        path: Destination file.
        rows: Row sequences; values are converted with ``str``.
        header: Optional header row.

    Returns:
        Path of the written file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", newline="") as f:
            writer = csv.writer(f, delimiter="\t", lineterminator="\n")
            if header is not None:
                writer.writerow(header)
            for row in rows:
                writer.writerow([str(value) for value in row])
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    return path


def write_id_list(ids: Iterable[str], path: Path | str) -> Path:
    """Write one identifier per line."""
    return write_tsv(path, ([protein_id] for protein_id in ids))


def _read_rows(path: Path | str, columns: Sequence[str]) -> Iterable[list[str]]:
    """Yield data rows of a TSV file, skipping a header matching ``columns``."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Table not found: {path}")

    with open(path, newline="") as f:
        reader = csv.reader(f, delimiter="\t")
        for line_num, row in enumerate(reader, start=1):
            if not row or not any(field.strip() for field in row):
                continue
            if line_num == 1 and [field.strip() for field in row[: len(columns)]] == list(columns):
                continue
            if len(row) < len(columns):
                logger.warning(
                    f"{path.name}:{line_num}: expected {len(columns)} columns, "
                    f"got {len(row)}; skipped"
                )
                continue
            yield row


# =============================================================================
# Final Domain Table
# =============================================================================


def final_domain_rows(domains: ProteinDomains) -> list[list[object]]:
    """Flatten per-protein hits into final domain table rows."""
    return [
        [protein_id, hit.label, hit.start, hit.end]
        for protein_id, hits in domains.items()
        for hit in hits
    ]


def write_final_domains(domains: ProteinDomains, path: Path | str) -> Path:
    """Write the final domain table.

    Args:
        domains: Filtered, position-sorted ``{protein_id: [DomainHit, ...]}``.
        path: Output TSV path.

    Returns:
        Path of the written file.
    """
    rows = final_domain_rows(domains)
    write_tsv(path, rows, header=FINAL_DOMAIN_COLUMNS)
    logger.info(f"Wrote {len(rows)} domains for {len(domains)} proteins to {path}")
    return Path(path)


def read_final_domains(path: Path | str) -> dict[str, list[str]]:
    """Read a final domain table back into ordered label sequences.

    Rows are taken in file order, which is the N-to-C order the table
    was written in.

    Args:
        path: Final domain TSV.

    Returns:
        ``{protein_id: [label, ...]}`` in order of first appearance.
    """
    labels: dict[str, list[str]] = {}
    for row in _read_rows(path, FINAL_DOMAIN_COLUMNS):
        labels.setdefault(row[0], []).append(row[1])
    return labels


# =============================================================================
# Classification Tables
# =============================================================================


def write_classifications(
    classifications: Iterable[Classification],
    path: Path | str,
    kinase_counts: bool = True,
) -> Path:
    """Write an RLK or RLP classification table.

    Args:
        classifications: Records to write, in output order.
        path: Output TSV path.
        kinase_counts: Include the ``KD_count`` column (RLK tables).

    Returns:
        Path of the written file.
    """
    header = RLK_COLUMNS if kinase_counts else RLP_COLUMNS
    rows = [record.to_row()[: len(header)] for record in classifications]
    write_tsv(path, rows, header=header)
    logger.info(f"Wrote {len(rows)} proteins to {path}")
    return Path(path)


# =============================================================================
# Topology Segments
# =============================================================================


def write_topology_segments(domains: ProteinDomains, path: Path | str) -> Path:
    """Write topology hits as ``Name, Start, End, Label`` rows."""
    rows = [
        [protein_id, hit.start, hit.end, hit.label]
        for protein_id, hits in domains.items()
        for hit in hits
        if hit.is_topology
    ]
    write_tsv(path, rows, header=TOPOLOGY_COLUMNS)
    logger.info(f"Wrote {len(rows)} topology segments to {path}")
    return Path(path)
