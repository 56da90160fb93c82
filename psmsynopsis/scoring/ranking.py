"""Tie-aware dense ranking of PSMs within a spectrum.

Ranks are assigned per scan across all charge states. The best score gets
rank 1; a score tied with the previous distinct score (within machine
epsilon) shares its rank; otherwise the rank increases by one.
"""

from collections import OrderedDict
from typing import Dict, List, Sequence

import numpy as np

from ..records import NormalizedMatch
from ..utils import scores_tied


def better_first_order(scores: np.ndarray, higher_is_better: bool) -> np.ndarray:
    """Stable argsort putting the best score first.

    Parameters
    ----------
    scores : np.ndarray
        Scores to order
    higher_is_better : bool
        True for similarity/probability scores, False for E-value style scores
    """
    scores = np.asarray(scores, dtype=np.float64)
    keys = -scores if higher_is_better else scores
    return np.argsort(keys, kind="stable")


def dense_ranks(sorted_scores: Sequence[float]) -> List[int]:
    """Dense ranks for scores already ordered best-first.

    Examples
    --------
    >>> dense_ranks([50.0, 50.0, 40.0, 30.0, 30.0])
    [1, 1, 2, 3, 3]
    """
    ranks = []
    last_distinct = None
    current_rank = 0

    for score in sorted_scores:
        if last_distinct is None or not scores_tied(score, last_distinct):
            last_distinct = score
            current_rank += 1
        ranks.append(current_rank)

    return ranks


def assign_ranks(
    matches: Sequence[NormalizedMatch],
    indices: Sequence[int],
    higher_is_better: bool = True,
) -> None:
    """Rank one scan group in place.

    Parameters
    ----------
    matches : sequence of NormalizedMatch
        All buffered matches (owned records, mutated in place)
    indices : sequence of int
        Positions in ``matches`` that form one scan group
    higher_is_better : bool
        Score direction of the tool
    """
    if len(indices) == 0:
        return

    if len(indices) == 1:
        matches[indices[0]].rank = 1
        return

    scores = np.array([matches[i].score for i in indices], dtype=np.float64)
    order = better_first_order(scores, higher_is_better)
    ranks = dense_ranks(scores[order])

    for position, rank in zip(order, ranks):
        matches[indices[position]].rank = rank


def scan_groups(matches: Sequence[NormalizedMatch]) -> Dict[int, List[int]]:
    """Indices of ``matches`` grouped by scan number, in first-seen order."""
    groups: Dict[int, List[int]] = OrderedDict()
    for index, match in enumerate(matches):
        groups.setdefault(match.scan, []).append(index)
    return groups


def assign_ranks_per_scan(
    matches: Sequence[NormalizedMatch],
    higher_is_better: bool = True,
) -> int:
    """Rank every scan group in place.

    Returns
    -------
    int
        Number of scan groups ranked
    """
    groups = scan_groups(matches)
    for indices in groups.values():
        assign_ranks(matches, indices, higher_is_better)
    return len(groups)
