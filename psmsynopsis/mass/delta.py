"""Isotope-corrected precursor mass error.

The instrument may select the M+1 or M+2 isotope peak (or, less often, the
M-1 peak) as the precursor. The corrector removes the integer number of C13
spacings that brings the delta mass closest to zero before converting it to
ppm, so that a correctly identified peptide measured on an adjacent isotope
still reports a small ppm error.

Examples
--------
>>> result = correct_delta_mass(1001.0134, 1000.0)
>>> result.isotope_offset
1
>>> round(result.corrected_del_m, 4)
0.01
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..constants import C13_MASS_DIFFERENCE, DEFAULT_MAX_DELTA_MASS_DA
from ..errors import PeriodicWarning
from .calculator import mass_to_ppm

logger = logging.getLogger(__name__)


@dataclass
class DeltaMassResult:
    """Observed minus theoretical precursor mass, raw and isotope-corrected."""

    del_m: float            # Raw observed - theoretical (Da)
    del_m_ppm_raw: float    # Raw ppm error
    corrected_del_m: float  # del_m minus isotope_offset C13 spacings (Da)
    del_m_ppm: float        # Corrected ppm (raw ppm if correction was skipped)
    isotope_offset: int
    corrected: bool         # False when |del_m| exceeded the plausible bound


def nearest_isotope_offset(del_m: float, spacing: float = C13_MASS_DIFFERENCE) -> int:
    """Integer ``n`` minimizing ``|del_m - n * spacing|``."""
    return int(round(del_m / spacing))


def correct_delta_mass(
    observed_mass: float,
    theoretical_mass: float,
    warner: Optional[PeriodicWarning] = None,
    max_delta_mass: float = DEFAULT_MAX_DELTA_MASS_DA,
    spacing: float = C13_MASS_DIFFERENCE,
    peptide: str = "",
    scan: Optional[int] = None,
) -> DeltaMassResult:
    """Compute the isotope-corrected mass error of a precursor.

    Parameters
    ----------
    observed_mass : float
        Neutral precursor mass derived from the observed m/z
    theoretical_mass : float
        Neutral theoretical peptide mass
    warner : PeriodicWarning, optional
        Rate limiter for implausible delta masses
    max_delta_mass : float
        Delta masses beyond this (Da) are not corrected (default: 15)
    spacing : float
        Isotope spacing (default: C13 - C12)
    peptide : str
        Used in the warning text
    scan : int, optional
        Used in the warning text

    Returns
    -------
    DeltaMassResult
    """
    del_m = observed_mass - theoretical_mass
    raw_ppm = mass_to_ppm(del_m, theoretical_mass) if theoretical_mass else 0.0

    if abs(del_m) > max_delta_mass:
        message = (
            f"Peptide mass differs from the precursor mass by more than "
            f"{max_delta_mass:.0f} Da, indicating an error adding static and/or "
            f"dynamic mods: {del_m:.2f} Da for {peptide}, Scan {scan}"
        )
        if warner is not None:
            warner.warn(message)
        else:
            logger.warning(message)

        return DeltaMassResult(
            del_m=del_m,
            del_m_ppm_raw=raw_ppm,
            corrected_del_m=del_m,
            del_m_ppm=raw_ppm,
            isotope_offset=0,
            corrected=False,
        )

    offset = nearest_isotope_offset(del_m, spacing)
    corrected_del_m = del_m - offset * spacing
    corrected_ppm = mass_to_ppm(corrected_del_m, theoretical_mass) if theoretical_mass else 0.0

    return DeltaMassResult(
        del_m=del_m,
        del_m_ppm_raw=raw_ppm,
        corrected_del_m=corrected_del_m,
        del_m_ppm=corrected_ppm,
        isotope_offset=offset,
        corrected=True,
    )
