"""Core reconciliation logic for receptorscan.

This module contains the data structures and algorithms that turn
domain-scan hits and topology predictions into receptor architectures:

- Data model (domain hits, labels, architecture classes)
- Annotation merging (topology strings to hits)
- Domain filtering and ordering
- Architecture classification (RLK and RLP rules)

The end-to-end workflows live in :mod:`receptorscan.core.pipeline`.

Example:
    >>> from receptorscan.core.classify import classify_rlk
    >>> from receptorscan.core.filter import resolve_domains
"""

from receptorscan.core.models import (
    ArchitectureClass,
    Classification,
    DomainHit,
    DomainRecord,
    LabelKind,
    ProteinDomains,
    architecture_labels,
    group_records,
)
from receptorscan.core.merge import merge_annotations, topology_to_hits
from receptorscan.core.filter import (
    filter_overlaps,
    resolve_domains,
    sort_by_evalue,
    sort_by_position,
)
from receptorscan.core.classify import classify_rlk, classify_rlp, relabel_kinases

__all__: list[str] = [
    # Data model
    "ArchitectureClass",
    "Classification",
    "DomainHit",
    "DomainRecord",
    "LabelKind",
    "ProteinDomains",
    "architecture_labels",
    "group_records",
    # Merging
    "merge_annotations",
    "topology_to_hits",
    # Filtering
    "filter_overlaps",
    "resolve_domains",
    "sort_by_evalue",
    "sort_by_position",
    # Classification
    "classify_rlk",
    "classify_rlp",
    "relabel_kinases",
]
