"""receptorscan: Identify receptor-like kinases and receptor-like proteins.

receptorscan combines conserved-domain hits (hmmscan against Pfam) with
per-residue membrane topology predictions (TMbed) and classifies each
protein into a receptor architecture from the N-to-C order of its
domains, signal peptide and transmembrane segments.

Example:
    >>> import receptorscan
    >>> receptorscan.__version__
    '0.3.0'

Modules:
    core: Annotation merging, domain filtering and architecture classification
    io: Readers and writers for hmmscan, TMbed, FASTA and TSV tables
    annotate: Wrappers for the hmmscan and tmbed executables
    utils: Interval sets and logging
"""

__version__ = "0.3.0"

from receptorscan.core.models import ArchitectureClass, Classification, DomainHit
from receptorscan.core.pipeline import RLKPipeline, RLPPipeline
from receptorscan.utils.intervals import IntervalSet

__all__ = [
    "__version__",
    "ArchitectureClass",
    "Classification",
    "DomainHit",
    "IntervalSet",
    "RLKPipeline",
    "RLPPipeline",
]
