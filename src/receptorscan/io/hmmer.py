"""Domain-scan reports from HMMER.

Reads hmmscan output into :class:`DomainRecord` rows. Three report
flavours are understood:

- ``hmmer3-text``: plain hmmscan output (``-o pfam.txt``)
- ``hmmscan3-domtab``: per-domain tables (``--domtblout``)
- ``tsv``: the canonical ``Name, Label, Evalue, Start, End`` table

The first two are parsed with Biopython's ``Bio.SearchIO``. Each HSP
contributes the query (protein) ID, the hit (profile) name, the
independent e-value and the 1-based alignment coordinates on the query.

Also reads profile metadata (``NAME``, ``ACC``, ``DESC``, ``LENG``) from
HMM database files.

Example:
    >>> from receptorscan.io.hmmer import read_domain_report
    >>> records = read_domain_report("result/pfam.txt")
    >>> records[0].hit.label
    'Pkinase'
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from pathlib import Path

import attrs
from Bio import SearchIO

from receptorscan.core.models import DomainHit, DomainRecord, ProteinDomains
from receptorscan.io.tables import write_tsv

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

HMMER_TEXT = "hmmer3-text"
HMMSCAN_DOMTAB = "hmmscan3-domtab"
DOMAIN_TSV = "tsv"

REPORT_FORMATS = (HMMER_TEXT, HMMSCAN_DOMTAB, DOMAIN_TSV)

DOMAIN_TSV_COLUMNS = ["Name", "Label", "Evalue", "Start", "End"]

HMM_INFO_COLUMNS = ["NAME", "ACC", "DESC", "LENG"]

# Suffixes mapped to report formats for auto-detection
_SUFFIX_FORMATS = {
    ".tsv": DOMAIN_TSV,
    ".domtblout": HMMSCAN_DOMTAB,
    ".domtab": HMMSCAN_DOMTAB,
    ".domtbl": HMMSCAN_DOMTAB,
}


# =============================================================================
# Data Structures
# =============================================================================


@attrs.define(frozen=True, slots=True)
class HmmProfile:
    """Metadata of one profile in an HMM database.

    Attributes:
        name: Profile name (e.g. ``Pkinase``).
        accession: Profile accession (e.g. ``PF00069.30``).
        description: One-line description, whitespace replaced by ``_``.
        length: Model length in match states.
    """

    name: str
    accession: str
    description: str
    length: int

    def to_row(self) -> list[object]:
        """Format as an output table row."""
        return [self.name, self.accession, self.description, self.length]


# =============================================================================
# Report Reading
# =============================================================================


def detect_report_format(path: Path | str) -> str:
    """Guess the report format from the file suffix.

    Args:
        path: Report path.

    Returns:
        One of REPORT_FORMATS; plain hmmscan text when unsure.
    """
    return _SUFFIX_FORMATS.get(Path(path).suffix.lower(), HMMER_TEXT)


def iter_searchio_records(path: Path | str, fmt: str = HMMER_TEXT) -> Iterator[DomainRecord]:
    """Iterate over domain hits of an hmmscan report via Bio.SearchIO.

    Args:
        path: Report file.
        fmt: ``hmmer3-text`` or ``hmmscan3-domtab``.

    Yields:
        One DomainRecord per HSP, in report order.
    """
    for qresult in SearchIO.parse(str(path), fmt):
        for hit in qresult:
            for hsp in hit:
                yield DomainRecord(
                    protein_id=qresult.id,
                    hit=DomainHit(
                        label=hit.id,
                        evalue=hsp.evalue,
                        start=hsp.query_start + 1,
                        end=hsp.query_end,
                    ),
                )


def iter_domain_tsv(path: Path | str) -> Iterator[DomainRecord]:
    """Iterate over rows of a canonical domain TSV.

    A header row is optional. Rows that cannot be parsed are logged and
    skipped.

    Args:
        path: TSV file with ``Name, Label, Evalue, Start, End`` columns.

    Yields:
        DomainRecord objects in file order.
    """
    with open(path) as f:
        for line_num, line in enumerate(f, start=1):
            line = line.rstrip("\n")
            if not line.strip() or line.startswith("#"):
                continue

            fields = line.split("\t")
            if line_num == 1 and fields[: len(DOMAIN_TSV_COLUMNS)] == DOMAIN_TSV_COLUMNS:
                continue

            try:
                if len(fields) < 5:
                    raise ValueError(f"expected 5 fields, got {len(fields)}")
                yield DomainRecord(
                    protein_id=fields[0],
                    hit=DomainHit(fields[1], fields[2], fields[3], fields[4]),
                )
            except ValueError as e:
                logger.warning(f"{Path(path).name}:{line_num}: unparsable domain row ({e})")


def read_domain_report(path: Path | str, fmt: str | None = None) -> list[DomainRecord]:
    """Read a domain-scan report.

    Args:
        path: Report file.
        fmt: One of REPORT_FORMATS, or None to detect from the suffix.

    Returns:
        List of DomainRecord in report order.

    Raises:
        FileNotFoundError: If the report does not exist.
        ValueError: If the format is not supported.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Domain report not found: {path}")

    fmt = fmt or detect_report_format(path)
    if fmt not in REPORT_FORMATS:
        raise ValueError(f"Unsupported report format: {fmt}. Supported: {', '.join(REPORT_FORMATS)}")

    if fmt == DOMAIN_TSV:
        records = list(iter_domain_tsv(path))
    else:
        records = list(iter_searchio_records(path, fmt))

    n_proteins = len({record.protein_id for record in records})
    logger.info(f"Read {len(records)} domain hits for {n_proteins} proteins from {path.name}")
    return records


# =============================================================================
# Report Writing
# =============================================================================


def domain_tsv_rows(domains: ProteinDomains) -> list[list[object]]:
    """Flatten per-protein hits into canonical domain TSV rows."""
    return [
        [protein_id, hit.label, hit.evalue, hit.start, hit.end]
        for protein_id, hits in domains.items()
        for hit in hits
    ]


def write_domain_tsv(domains: ProteinDomains, path: Path | str) -> Path:
    """Write per-protein hits as a canonical domain TSV.

    Args:
        domains: ``{protein_id: [DomainHit, ...]}``.
        path: Output path.

    Returns:
        Path of the written file.
    """
    return write_tsv(path, domain_tsv_rows(domains), header=DOMAIN_TSV_COLUMNS)


def write_domain_records(records: Iterable[DomainRecord], path: Path | str) -> Path:
    """Write report rows as a canonical domain TSV, in the given order."""
    rows = (
        [record.protein_id, record.hit.label, record.hit.evalue, record.hit.start, record.hit.end]
        for record in records
    )
    return write_tsv(path, rows, header=DOMAIN_TSV_COLUMNS)


# =============================================================================
# HMM Database Metadata
# =============================================================================

_TAG_PATTERN = re.compile(r"^(NAME|ACC|DESC|LENG)\s+(.*?)\s*$")


def iter_hmm_profiles(path: Path | str) -> Iterator[HmmProfile]:
    """Iterate over profile metadata in an HMM database file.

    Profiles end with a ``//`` line. A profile missing any of NAME, ACC,
    DESC or LENG is logged and skipped.

    Args:
        path: HMM database (e.g. ``Pfam-A.hmm``).

    Yields:
        HmmProfile objects in file order.
    """
    tags: dict[str, str] = {}

    with open(path) as f:
        for line_num, line in enumerate(f, start=1):
            if line.startswith("//"):
                if all(tag in tags for tag in HMM_INFO_COLUMNS) and tags["LENG"].isdigit():
                    yield HmmProfile(
                        name=tags["NAME"],
                        accession=tags["ACC"],
                        description=re.sub(r"\s", "_", tags["DESC"]).lstrip("_"),
                        length=int(tags["LENG"]),
                    )
                else:
                    logger.warning(f"HMM info extraction failed at line {line_num}")
                tags = {}
                continue

            match = _TAG_PATTERN.match(line)
            if match and match.group(1) not in tags:
                tags[match.group(1)] = match.group(2)


def write_hmm_info(profiles: Iterable[HmmProfile], path: Path | str) -> Path:
    """Write profile metadata as a ``NAME, ACC, DESC, LENG`` table."""
    return write_tsv(path, (profile.to_row() for profile in profiles), header=HMM_INFO_COLUMNS)
