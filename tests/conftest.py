"""Pytest configuration and shared fixtures for receptorscan tests.

Fixtures are organized by category:

- Builders: helpers that generate sequences and topology strings
- FASTA fixtures: small protein FASTA files
- Report fixtures: domain TSVs, TMbed predictions, HMM databases
"""

from pathlib import Path

import pytest

# =============================================================================
# Builders
# =============================================================================


def make_sequence(length: int) -> str:
    """Build a reproducible protein sequence of the given length."""
    residues = "ACDEFGHIKLMNPQRSTVWY"
    return "".join(residues[(i * 7) % len(residues)] for i in range(length))


def make_topology(length: int, segments: dict[str, list[tuple[int, int]]] | None = None) -> str:
    """Build a topology string of ``length`` codes.

    Args:
        length: Number of residues.
        segments: ``{code: [(start, end), ...]}`` with 1-based inclusive
            ranges; every other residue is ``o``.
    """
    codes = ["o"] * length
    for code, ranges in (segments or {}).items():
        for start, end in ranges:
            for position in range(start, end + 1):
                codes[position - 1] = code
    return "".join(codes)


def write_fasta(path: Path, sequences: dict[str, str]) -> Path:
    """Write single-line FASTA records."""
    with open(path, "w") as f:
        for seqid, seq in sequences.items():
            f.write(f">{seqid} test protein\n{seq}\n")
    return path


def write_pred(path: Path, records: dict[str, tuple[str, str]]) -> Path:
    """Write a TMbed prediction file from ``{id: (sequence, topology)}``."""
    with open(path, "w") as f:
        for seqid, (seq, topology) in records.items():
            f.write(f">{seqid}\n{seq}\n{topology}\n")
    return path


def write_domain_rows(path: Path, rows: list[tuple], header: bool = True) -> Path:
    """Write a canonical domain TSV."""
    with open(path, "w") as f:
        if header:
            f.write("Name\tLabel\tEvalue\tStart\tEnd\n")
        for row in rows:
            f.write("\t".join(str(value) for value in row) + "\n")
    return path


# =============================================================================
# RLK Data
# =============================================================================

RLK_LENGTHS = {
    "RLK1": 60,  # Sig_Pep, LRR_8, TMD_o2i, Kinase -> RLK
    "RLK2": 50,  # Sig_Pep, TMD_o2i, Kinase -> RLK_WE
    "RVR1": 50,  # TMD_i2o, Kinase -> RLK_RvrTMD
    "SOL1": 50,  # Kinase only -> Others
    "WEAK1": 50,  # kinase-family hit above threshold -> not selected
}

RLK_DOMAIN_ROWS = [
    ("RLK1", "Pkinase", "1.5e-50", 40, 58),
    ("RLK1", "LRR_8", "2e-20", 10, 25),
    ("RLK1", "LRR_1", "0.5", 12, 20),
    ("RLK2", "PK_Tyr_Ser-Thr", "3e-30", 30, 48),
    ("RVR1", "Pkinase", "1e-30", 30, 48),
    ("SOL1", "Pkinase", "1e-12", 10, 40),
    ("WEAK1", "Pkinase", "1e-5", 10, 40),
]

RLK_TOPOLOGY = {
    "RLK1": {"S": [(1, 5)], "h": [(30, 35)]},
    "RLK2": {"S": [(1, 5)], "h": [(10, 20)]},
    "RVR1": {"H": [(10, 20)]},
    "SOL1": {},
}


@pytest.fixture
def rlk_fasta(tmp_path: Path) -> Path:
    """Protein FASTA for the RLK workflow."""
    sequences = {seqid: make_sequence(length) for seqid, length in RLK_LENGTHS.items()}
    return write_fasta(tmp_path / "proteins.fa", sequences)


@pytest.fixture
def rlk_domains(tmp_path: Path) -> Path:
    """Domain TSV for the RLK workflow."""
    return write_domain_rows(tmp_path / "rlk_domains.tsv", RLK_DOMAIN_ROWS)


@pytest.fixture
def rlk_pred(tmp_path: Path) -> Path:
    """TMbed predictions for the RLK kinase proteins."""
    records = {
        seqid: (make_sequence(RLK_LENGTHS[seqid]), make_topology(RLK_LENGTHS[seqid], segments))
        for seqid, segments in RLK_TOPOLOGY.items()
    }
    return write_pred(tmp_path / "rlk.pred", records)


# =============================================================================
# RLP Data
# =============================================================================

RLP_LENGTHS = {
    "RLP1": 60,  # Sig_Pep, LRR_8, TMD_o2i -> RLP
    "RLP2": 40,  # TMD_o2i only -> RLPUN
    "RLP3": 60,  # TMD then a domain -> excluded
    "RLP4": 60,  # weak domain dropped, TMD_o2i -> RLPUN
    "SHORT1": 50,  # topology one residue short -> excluded
}

RLP_DOMAIN_ROWS = [
    ("RLP1", "LRR_8", "2e-20", 10, 25),
    ("RLP3", "LRR_8", "1e-10", 30, 50),
    ("RLP4", "LRR_1", "0.01", 10, 25),
    ("SHORT1", "LRR_8", "1e-15", 5, 20),
]

RLP_TOPOLOGY = {
    "RLP1": {"S": [(1, 5)], "h": [(50, 58)]},
    "RLP2": {"h": [(20, 35)]},
    "RLP3": {"h": [(5, 15)]},
    "RLP4": {"h": [(40, 50)]},
}


@pytest.fixture
def rlp_fasta(tmp_path: Path) -> Path:
    """Protein FASTA for the RLP workflow."""
    sequences = {seqid: make_sequence(length) for seqid, length in RLP_LENGTHS.items()}
    return write_fasta(tmp_path / "rlp_proteins.fa", sequences)


@pytest.fixture
def rlp_domains(tmp_path: Path) -> Path:
    """Domain TSV for the RLP workflow."""
    return write_domain_rows(tmp_path / "rlp_domains.tsv", RLP_DOMAIN_ROWS)


@pytest.fixture
def rlp_pred(tmp_path: Path) -> Path:
    """TMbed predictions for the RLP workflow.

    SHORT1 has a topology string one residue shorter than its sequence
    in the FASTA file, but consistent with the sequence in the .pred file.
    """
    records = {
        seqid: (make_sequence(RLP_LENGTHS[seqid]), make_topology(RLP_LENGTHS[seqid], segments))
        for seqid, segments in RLP_TOPOLOGY.items()
    }
    records["SHORT1"] = (make_sequence(49), make_topology(49, {"h": [(30, 45)]}))
    return write_pred(tmp_path / "rlp.pred", records)


# =============================================================================
# HMM Database
# =============================================================================


@pytest.fixture
def hmm_database(tmp_path: Path) -> Path:
    """HMM database text with two complete profiles and one without ACC."""
    path = tmp_path / "mini.hmm"
    path.write_text(
        "HMMER3/f [3.3 | Nov 2019]\n"
        "NAME  Pkinase\n"
        "ACC   PF00069.28\n"
        "DESC  Protein kinase domain\n"
        "LENG  264\n"
        "ALPH  amino\n"
        "HMM          A        C\n"
        "//\n"
        "HMMER3/f [3.3 | Nov 2019]\n"
        "NAME  LRR_8\n"
        "ACC   PF13855.9\n"
        "DESC  Leucine rich repeat\n"
        "LENG  61\n"
        "//\n"
        "HMMER3/f [3.3 | Nov 2019]\n"
        "NAME  Broken\n"
        "DESC  No accession here\n"
        "LENG  10\n"
        "//\n"
    )
    return path
