"""Reconcile recomputed and tool-reported theoretical peptide masses.

A mismatch between the mass computed here and the mass reported by the
search engine usually means the modification catalog does not describe the
search correctly. Mismatches never change the output; they only produce a
rate-limited warning.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from ..constants import DEFAULT_MASS_TOLERANCE_DA, MASS_EPSILON
from ..errors import PeriodicWarning
from ..modifications.resolver import ModificationEntry, total_modification_mass
from .calculator import compute_sequence_mass, convolute_mass

logger = logging.getLogger(__name__)


@dataclass
class MassReconciliation:
    """Result of comparing recomputed and reported masses."""

    theoretical_mass: float  # Recomputed from sequence and modifications
    reported_mass: float     # As reported by the tool (or theoretical if missing)
    mh: float                # (M+H)+ of theoretical_mass
    tolerance: float
    mismatch: bool

    @property
    def difference(self) -> float:
        return self.theoretical_mass - self.reported_mass


def mass_tolerance_for(reported_mass: float, minimum: float = DEFAULT_MASS_TOLERANCE_DA) -> float:
    """Allowed difference (Da): ``minimum``, widened slightly above 5000 Da."""
    return max(minimum, reported_mass / 5000 / 10)


def reconcile_mass(
    clean_sequence: str,
    modifications: Iterable[ModificationEntry],
    reported_mass: Optional[float] = None,
    tool_name: str = "the search tool",
    warner: Optional[PeriodicWarning] = None,
    tolerance_da: float = DEFAULT_MASS_TOLERANCE_DA,
    peptide: Optional[str] = None,
) -> MassReconciliation:
    """Compute the theoretical mass and cross-check the tool-reported mass.

    Parameters
    ----------
    clean_sequence : str
        Unmodified peptide sequence
    modifications : iterable of ModificationEntry
        Every applied modification (static and dynamic)
    reported_mass : float, optional
        Theoretical mass reported by the tool; None or ~0 means missing
    tool_name : str
        Used in the warning text
    warner : PeriodicWarning, optional
        Rate limiter shared across one file
    tolerance_da : float
        Minimum allowed difference (default: 0.1 Da)
    peptide : str, optional
        Annotated peptide used in the warning text

    Returns
    -------
    MassReconciliation
    """
    theoretical_mass = compute_sequence_mass(
        clean_sequence, [entry.mass for entry in modifications]
    )

    if reported_mass is None or abs(reported_mass) < MASS_EPSILON:
        reported_mass = theoretical_mass

    tolerance = mass_tolerance_for(reported_mass, tolerance_da)
    mismatch = abs(theoretical_mass - reported_mass) > tolerance

    if mismatch:
        label = peptide or clean_sequence
        if len(label) >= 27:
            label = label[:27] + "..."

        message = (
            f"The monoisotopic mass computed here is more than {tolerance:.2f} Da away "
            f"from the mass computed by {tool_name}: {theoretical_mass:.4f} vs. "
            f"{reported_mass:.4f}; peptide {label}"
        )
        if warner is not None:
            warner.warn(message)
        else:
            logger.warning(message)

    return MassReconciliation(
        theoretical_mass=theoretical_mass,
        reported_mass=reported_mass,
        mh=convolute_mass(theoretical_mass, 0, 1),
        tolerance=tolerance,
        mismatch=mismatch,
    )


def modification_mass_matches(
    modifications: Iterable[ModificationEntry],
    expected_total: float,
    tolerance: float = 1e-4,
) -> bool:
    """True if the entries' masses sum to ``expected_total`` within ``tolerance``."""
    return abs(total_modification_mass(modifications) - expected_total) <= tolerance
