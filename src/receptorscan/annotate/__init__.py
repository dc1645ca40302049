"""External annotation tools.

- hmmscan: conserved-domain scan against Pfam
- tmbed: signal peptide and transmembrane topology prediction
"""

from receptorscan.annotate.runners import HmmscanRunner, TMbedRunner, check_executable

__all__ = [
    "HmmscanRunner",
    "TMbedRunner",
    "check_executable",
]
