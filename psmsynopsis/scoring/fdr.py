"""FDR and Q-value estimation by target-decoy counting.

Matches are walked best-first in contiguous duplicate groups. A group is a
run of rows sharing scan, charge and peptide (one row per protein the
peptide maps to). Each group counts once, as decoy only when every one of
its proteins is a decoy entry.

Key Features
------------
- Running FDR = reverse / forward (1 while no forward group was seen)
- Q-value = minimum FDR from this row to the worst row (monotonic)
- Configurable decoy naming (prefixes and suffixes, case-insensitive)
- Numba-accelerated reverse pass

Examples
--------
>>> from psmsynopsis.scoring import DecoyMatcher, compute_fdr_and_qvalues
>>> matcher = DecoyMatcher()
>>> matcher.is_decoy("REV_sp|P12345|ALBU_HUMAN")
True
>>> # matches must already be sorted best-first
>>> compute_fdr_and_qvalues(matches, matcher)  # doctest: +SKIP
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, Iterator, List, Sequence, Tuple

import numpy as np
from numba import njit

from ..constants import DECOY_PROTEIN_PREFIXES, DECOY_PROTEIN_SUFFIXES
from ..records import NormalizedMatch
from ..utils import split_protein_position

logger = logging.getLogger(__name__)


class DuplicateKey(Enum):
    """Which peptide form identifies rows of the same duplicate group."""

    ANNOTATED = "annotated"   # Sequence as reported, mods included
    CLEAN = "clean"           # Residue letters only

    @classmethod
    def parse(cls, value) -> "DuplicateKey":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(member.value for member in cls)
            raise ValueError(f"Unknown duplicate key '{value}'. Valid options: {valid}")


class DecoyMatcher:
    """Classify protein names as decoy (reversed/scrambled) entries.

    Parameters
    ----------
    prefixes : iterable of str
        Name prefixes marking decoys, compared case-insensitively
    suffixes : iterable of str
        Name suffixes marking decoys, compared case-insensitively
    """

    def __init__(
        self,
        prefixes: Iterable[str] = DECOY_PROTEIN_PREFIXES,
        suffixes: Iterable[str] = DECOY_PROTEIN_SUFFIXES,
    ):
        self.prefixes = tuple(p.lower() for p in prefixes if p)
        self.suffixes = tuple(s.lower() for s in suffixes if s)

    def is_decoy(self, protein: str) -> bool:
        """Return True if ``protein`` (optionally ``Name[Position]``) is a decoy."""
        name, _ = split_protein_position(protein)
        name = name.lower()
        if not name:
            return False
        return name.startswith(self.prefixes) or name.endswith(self.suffixes)

    def all_decoys(self, proteins: Sequence[str]) -> bool:
        """True only when there is at least one protein and all are decoys."""
        if len(proteins) == 0:
            return False
        return all(self.is_decoy(protein) for protein in proteins)

    def __repr__(self) -> str:
        return f"DecoyMatcher(prefixes={self.prefixes}, suffixes={self.suffixes})"


def _group_key(match: NormalizedMatch, duplicate_key: DuplicateKey) -> Tuple[int, int, str]:
    if duplicate_key is DuplicateKey.CLEAN:
        return match.scan, match.charge, match.clean_sequence
    return match.scan, match.charge, match.peptide


def duplicate_groups(
    matches: Sequence[NormalizedMatch],
    duplicate_key: DuplicateKey = DuplicateKey.ANNOTATED,
) -> Iterator[Tuple[int, int]]:
    """Yield ``(start, end)`` index ranges of contiguous duplicate groups."""
    start = 0
    n = len(matches)
    while start < n:
        key = _group_key(matches[start], duplicate_key)
        end = start + 1
        while end < n and _group_key(matches[end], duplicate_key) == key:
            end += 1
        yield start, end
        start = end


@njit(cache=True)
def _qvalues_from_fdr(fdr: np.ndarray) -> np.ndarray:
    """Running minimum of FDR from the worst row to the best.

    The starting value is the worst row's FDR, clamped to at most 1.
    """
    n = len(fdr)
    qvalues = np.ones(n, dtype=np.float64)
    if n == 0:
        return qvalues

    current = min(fdr[n - 1], 1.0)
    for i in range(n - 1, -1, -1):
        if fdr[i] < current:
            current = fdr[i]
        qvalues[i] = current

    return qvalues


def compute_fdr_and_qvalues(
    matches: Sequence[NormalizedMatch],
    decoy_matcher: DecoyMatcher | None = None,
    duplicate_key: DuplicateKey = DuplicateKey.ANNOTATED,
) -> Tuple[np.ndarray, np.ndarray]:
    """Assign ``fdr`` and ``qvalue`` to every match in place.

    Parameters
    ----------
    matches : sequence of NormalizedMatch
        Matches sorted best-first (score, then scan, charge, peptide, protein)
    decoy_matcher : DecoyMatcher, optional
        Decoy naming convention (default: standard prefixes and suffixes)
    duplicate_key : DuplicateKey
        Peptide form used to group rows (default: annotated sequence)

    Returns
    -------
    fdr : np.ndarray
        Per-row FDR, in input order
    qvalue : np.ndarray
        Per-row Q-values, in input order

    Notes
    -----
    Rows of one group always receive the same FDR and Q-value. Groups
    with no protein at all count as forward.
    """
    if decoy_matcher is None:
        decoy_matcher = DecoyMatcher()

    n = len(matches)
    fdr = np.ones(n, dtype=np.float64)
    if n == 0:
        return fdr, np.ones(0, dtype=np.float64)

    forward = 0
    reverse = 0

    for start, end in duplicate_groups(matches, duplicate_key):
        proteins: List[str] = []
        for i in range(start, end):
            proteins.extend(matches[i].proteins)

        if decoy_matcher.all_decoys(proteins):
            reverse += 1
        else:
            forward += 1

        group_fdr = reverse / forward if forward > 0 else 1.0
        fdr[start:end] = group_fdr

    qvalues = _qvalues_from_fdr(fdr)

    for i, match in enumerate(matches):
        match.fdr = float(fdr[i])
        match.qvalue = float(qvalues[i])

    logger.debug(f"FDR groups: {forward} forward, {reverse} reverse")

    return fdr, qvalues


def fdr_statistics(
    matches: Sequence[NormalizedMatch],
    decoy_matcher: DecoyMatcher | None = None,
) -> dict[str, int | float]:
    """Global target/decoy counts and targets passing common Q-value cutoffs.

    Returns
    -------
    dict[str, int | float]
        - n_targets: Target rows
        - n_decoys: Decoy rows
        - decoy_fraction: Fraction of decoy rows
        - n_targets_fdr01 / fdr05 / fdr10: Targets with Q-value at or below 1%/5%/10%
    """
    if decoy_matcher is None:
        decoy_matcher = DecoyMatcher()

    is_decoy = np.array(
        [decoy_matcher.all_decoys(match.proteins) for match in matches], dtype=np.bool_
    )
    qvalue = np.array([match.qvalue for match in matches], dtype=np.float64)

    stats: dict[str, int | float] = {}
    n_decoys = int(np.sum(is_decoy))
    stats["n_targets"] = int(len(matches) - n_decoys)
    stats["n_decoys"] = n_decoys
    stats["decoy_fraction"] = float(n_decoys / len(matches)) if len(matches) > 0 else 0.0

    for fdr_threshold in [0.01, 0.05, 0.10]:
        passing_mask = (~is_decoy) & (qvalue <= fdr_threshold)
        key = f"n_targets_fdr{int(round(fdr_threshold * 100)):02d}"
        stats[key] = int(np.sum(passing_mask))

    return stats
