"""Per-scan ranking and target-decoy FDR estimation."""

from .ranking import (
    better_first_order,
    dense_ranks,
    assign_ranks,
    assign_ranks_per_scan,
    scan_groups,
)

from .fdr import (
    DecoyMatcher,
    DuplicateKey,
    compute_fdr_and_qvalues,
    duplicate_groups,
    fdr_statistics,
)

__all__ = [
    # Ranking
    'better_first_order',
    'dense_ranks',
    'assign_ranks',
    'assign_ranks_per_scan',
    'scan_groups',

    # FDR
    'DecoyMatcher',
    'DuplicateKey',
    'compute_fdr_and_qvalues',
    'duplicate_groups',
    'fdr_statistics',
]
