"""Input/output handlers for receptorscan.

Readers and writers for the file formats used by the workflows:

- hmmscan reports and HMM databases (hmmer)
- TMbed topology predictions (tmbed)
- Protein FASTA files (fasta)
- Tab-separated result tables (tables)

Example:
    >>> from receptorscan.io import read_domain_report, read_tmbed_predictions
    >>> records = read_domain_report("pfam.txt")
    >>> predictions = read_tmbed_predictions("Pro.KD.pred")
"""

from receptorscan.io.tables import read_final_domains, write_final_domains, write_tsv
from receptorscan.io.hmmer import read_domain_report, write_domain_tsv
from receptorscan.io.tmbed import LengthMismatchError, read_tmbed_predictions
from receptorscan.io.fasta import ProteinAccessor

__all__: list[str] = [
    "LengthMismatchError",
    "ProteinAccessor",
    "read_domain_report",
    "read_final_domains",
    "read_tmbed_predictions",
    "write_domain_tsv",
    "write_final_domains",
    "write_tsv",
]
